from __future__ import annotations

import logging

from .config import settings


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the API process."""
    resolved = (level or settings.LOG_LEVEL or "INFO").upper()
    if not logging.getLogger().handlers:
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
    else:
        logging.getLogger().setLevel(resolved)
    logging.getLogger("spendtrack").setLevel(resolved)
