"""
Engine Errors
"""


class StatisticsError(Exception):
    """
    A report could not be computed.

    Raised at the engine boundary for any store or reduction fault. The
    original exception is chained for the logs; callers only ever get the
    generic message.
    """

    message = "Internal server error"

    def __init__(self, report: str):
        super().__init__(f"{report}: {self.message}")
        self.report = report
