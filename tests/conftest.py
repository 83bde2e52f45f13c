# tests/conftest.py
from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from catalog.core.settings import Settings
from catalog.main import create_app
from catalog.repositories.stores import CatalogStores


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    d = tmp_path / "data"
    d.mkdir()
    return d


@pytest.fixture()
def stores(data_dir: Path) -> Iterator[CatalogStores]:
    """Colecții proaspete pe disc, per test."""
    s = CatalogStores.open(data_dir / "products.db", data_dir / "skus.db")
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def settings(data_dir: Path) -> Settings:
    return Settings(
        PRODUCT_DB_PATH=str(data_dir / "products.db"),
        SKU_DB_PATH=str(data_dir / "skus.db"),
        LOG_LEVEL="INFO",
    )


@pytest.fixture()
def client(settings: Settings) -> Iterator[TestClient]:
    """Client HTTP in-process; `with` rulează lifespan-ul (încărcarea colecțiilor)."""
    with TestClient(create_app(settings)) as c:
        yield c
