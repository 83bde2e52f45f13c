# catalog/core/logging.py
from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"

# logger-e care urmează LOG_LEVEL-ul aplicației
_FOLLOWERS = ("catalog-api", "uvicorn", "uvicorn.error", "uvicorn.access")


def setup_logging(level: str = "INFO", *, sql_echo: bool = False) -> None:
    """
    Handler unic pe stdout pentru root; apeluri repetate (ex. câte o aplicație
    per test) doar ajustează nivelurile, fără handler-e duplicate.
    """
    root = logging.getLogger()
    root.setLevel(level)
    if not any(getattr(h, "_catalog_handler", False) for h in root.handlers):
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
        h._catalog_handler = True  # type: ignore[attr-defined]
        root.addHandler(h)

    for name in _FOLLOWERS:
        logging.getLogger(name).setLevel(level)
    # SQL-ul emis de SQLAlchemy doar la cerere (DB_ECHO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if sql_echo else logging.WARNING)


__all__ = ["setup_logging", "LOG_FORMAT", "LOG_DATEFMT"]
