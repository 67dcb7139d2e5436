"""
Customer Insights Statistics Service
"""
