#!/usr/bin/env python3
"""
Vibesbook -- photo + audio album backend.

Usage:
  python main.py
  python main.py --port 8080
  python main.py --host 0.0.0.0 --reload

Environment variables (or .env):
  SECRET_KEY     Required. At least 32 characters. Signs session tokens.
  DATABASE_URL   SQLAlchemy URL. Defaults to a SQLite file next to this script.
  PORT           Listen port when --port is not given. Defaults to 3000.
  MEDIA_ROOT     Directory for uploaded files.

See core/config.py for the full list.
"""

import argparse
import sys

import uvicorn
from pydantic import ValidationError

from core.config import get_settings


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="vibesbook",
        description="Run the Vibesbook API server.",
    )
    parser.add_argument("--host", help="Bind address (default: HOST setting).")
    parser.add_argument("--port", type=int, help="Listen port (default: PORT setting).")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only).")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug"],
        help="uvicorn log level.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    # Load settings before uvicorn so a bad configuration fails here with a
    # readable message instead of inside the worker import.
    try:
        settings = get_settings()
    except ValidationError as e:
        print("  [!] Invalid configuration:", file=sys.stderr)
        for err in e.errors():
            print(f"      {err['msg']}", file=sys.stderr)
        return 2

    uvicorn.run(
        "api.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
        log_level=args.log_level,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
