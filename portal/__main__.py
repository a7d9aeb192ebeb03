"""Movie Portal entrypoint.

Run with:
  python -m portal [--host HOST] [--port PORT] [--session-ttl SECONDS]

Command-line flags override the matching environment settings, so several
instances (different ports, different cookie lifetimes) can run from the same
code.
"""

from __future__ import annotations

import argparse

import uvicorn

from . import create_app
from .core.config import get_settings
from .core.logging import configure_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="portal", description="Run the Movie Portal web server.")
    p.add_argument("--host", help="bind address (default: HOST setting)")
    p.add_argument("--port", type=int, help="listen port (default: PORT setting)")
    p.add_argument("--session-ttl", type=int, dest="session_ttl", help="idle session lifetime in seconds")
    p.add_argument("--log-level", dest="log_level", help="logging level, e.g. DEBUG")
    args = p.parse_args(argv)
    if args.session_ttl is not None and args.session_ttl <= 0:
        p.error("--session-ttl must be a positive number of seconds")
    return args


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    overrides = {
        "HOST": args.host,
        "PORT": args.port,
        "SESSION_MAX_AGE": args.session_ttl,
        "LOG_LEVEL": args.log_level,
    }
    settings = get_settings().model_copy(update={k: v for k, v in overrides.items() if v is not None})
    configure_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
