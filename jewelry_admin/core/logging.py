from __future__ import annotations

import logging

from jewelry_admin.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    resolved = (level or get_settings().log_level).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger("jewelry_admin").setLevel(resolved)
    # SQL echo is controlled by the engine, not the log level.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
