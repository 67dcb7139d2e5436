#!/usr/bin/env python
"""
Server Entry Point

Starts the Customer Insights API.
Usage:
    Development:  python run_server.py --dev
    Production:   python run_server.py

    Or with Gunicorn:
    gunicorn src.main:app -c gunicorn.conf.py
"""

import argparse
import os
import subprocess
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

import uvicorn


def run_dev_server(port: int) -> None:
    """Run development server with auto-reload."""
    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=port,
        reload=True,
        reload_dirs=["src"],
        log_level="debug",
    )


def run_prod_server(port: int) -> None:
    """Run production server with Uvicorn directly."""
    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=port,
        workers=int(os.getenv("WORKERS", 4)),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
        proxy_headers=True,
        forwarded_allow_ips="*",
        server_header=False,
    )


def run_gunicorn() -> None:
    """Run with Gunicorn and Uvicorn workers."""
    subprocess.run(["gunicorn", "src.main:app", "-c", "gunicorn.conf.py"], check=True)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Customer Insights API Server")
    parser.add_argument("--dev", action="store_true", help="Run in development mode with auto-reload")
    parser.add_argument("--gunicorn", action="store_true", help="Run with Gunicorn (production)")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", 3000)),
        help="Port to run on (default: $PORT or 3000)",
    )
    args = parser.parse_args()
    os.environ["PORT"] = str(args.port)

    if args.dev:
        run_dev_server(args.port)
    elif args.gunicorn:
        os.environ.setdefault("BIND", f"0.0.0.0:{args.port}")
        run_gunicorn()
    else:
        run_prod_server(args.port)
