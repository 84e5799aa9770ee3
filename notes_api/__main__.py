"""
Notes API - Entry Point
=========================

Usage:
    python -m notes_api --host 127.0.0.1 --port 3000 --cache ./cache
    notes-api --host 127.0.0.1 --port 3000 --cache ./cache

Startup sequence:
    1. Load settings (flags, then NOTES_* environment variables)
    2. Configure logging at the requested level
    3. Create the app, which creates the cache directory if needed
    4. Serve with uvicorn

Any failure in steps 1 or 3 is logged and the process exits with status 1.
"""

import logging
import sys
from typing import Optional, Sequence

import uvicorn

from notes_api.config import load_settings
from notes_api.exceptions import InvalidConfigError, StorageFailureError
from notes_api.main import create_app, setup_logging

logger = logging.getLogger("notes_api")


def main(argv: Optional[Sequence[str]] = None) -> int:
    setup_logging()

    try:
        settings = load_settings(argv)
    except InvalidConfigError as e:
        logger.error("%s", e.message)
        return 1

    setup_logging(settings.log_level)

    try:
        app = create_app(settings)
    except StorageFailureError as e:
        logger.error("%s", e.message)
        return 1

    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
