# catalog/repositories/stores.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from fastapi import Request

from catalog.models.product import Product
from catalog.models.sku import Sku
from catalog.repositories.record_store import RecordStore

logger = logging.getLogger("catalog-api.store")


@dataclass
class CatalogStores:
    """
    Cele două colecții ale procesului, deținute explicit și pasate fiecărui apel crud.

    Ordinea lock-urilor (aceeași peste tot):
      sync_lock -> products (eliberat) -> skus (eliberat) -> products ...
    `sync_lock` serializează operațiile care copiază date din Product în Sku
    (update produs + cascadă, creare SKU); lock-urile colecțiilor nu se imbrică.
    """
    products: RecordStore[Product]
    skus: RecordStore[Sku]
    sync_lock: threading.Lock = field(default_factory=threading.Lock)

    @classmethod
    def open(
        cls,
        product_path: Union[str, Path],
        sku_path: Union[str, Path],
        *,
        echo: Optional[bool] = None,
    ) -> "CatalogStores":
        products = RecordStore.load_or_init(product_path, Product, name="products", echo=echo)
        try:
            skus = RecordStore.load_or_init(sku_path, Sku, name="skus", echo=echo)
        except Exception:
            products.close()
            raise
        return cls(products=products, skus=skus)

    def close(self) -> None:
        self.products.close()
        self.skus.close()


def get_stores(request: Request) -> CatalogStores:
    """FastAPI dependency: colecțiile încărcate în lifespan."""
    return request.app.state.stores


__all__ = ["CatalogStores", "get_stores"]
