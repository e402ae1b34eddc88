"""Run the Vibe Check server with ``python -m vibe_check``."""

from __future__ import annotations

import logging
import sys

import uvicorn

from .app import create_app
from .config import get_settings
from .errors import ConfigurationError

logger = logging.getLogger("vibe_check")


def main() -> int:
    try:
        settings = get_settings()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        app = create_app(settings)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 1

    logger.info("Vibe Check is live on http://localhost:%s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
