# catalog/__main__.py
"""Pornește serviciul: `python -m catalog` (oprire cu SIGINT/SIGTERM)."""
from __future__ import annotations

import uvicorn

from catalog.core.settings import Settings
from catalog.main import create_app


def main() -> None:
    settings = Settings()
    host, port = settings.service_host_port()
    # uvicorn tratează SIGINT: nu mai acceptă conexiuni noi, apoi rulează shutdown-ul din lifespan
    uvicorn.run(
        create_app(settings),
        host=host,
        port=port,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
