from __future__ import annotations

import logging

from app.core.config import settings


_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    resolved = str(level or settings.log_level or "INFO").strip().upper()
    logging.basicConfig(level=resolved, format=_LOG_FORMAT)
    logging.getLogger("app").setLevel(resolved)
    # botocore is chatty at INFO when it resolves credentials and endpoints.
    logging.getLogger("botocore").setLevel(logging.WARNING)
