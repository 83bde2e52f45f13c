# catalog/crud/product.py
from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional

from catalog.crud import sku as sku_crud
from catalog.models.product import Product
from catalog.repositories.stores import CatalogStores
from catalog.services.quantity import parse_unit

logger = logging.getLogger("catalog-api.crud")


# -------------------------- Reads --------------------------

def get(stores: CatalogStores, product_id: int) -> Product:
    """Returnează produsul după ID; NotFoundError dacă lipsește."""
    return stores.products.find(product_id)


def get_all_ids(stores: CatalogStores) -> List[int]:
    return stores.products.ids()


def get_bulk(stores: CatalogStores, product_ids: Iterable[int]) -> List[Product]:
    """Produsele cerute, în ordinea colecției; ID-urile necunoscute sunt omise."""
    wanted = set(product_ids)
    return [p for p in stores.products.iterate() if p.id in wanted]


def find(stores: CatalogStores, query: str) -> List[int]:
    """ID-urile produselor al căror nume conține `query` (case-insensitive)."""
    needle = (query or "").lower()
    return [p.id for p in stores.products.iterate() if needle in p.name.lower()]


# -------------------------- Mutations --------------------------

def create(
    stores: CatalogStores,
    *,
    name: str,
    description: str,
    unit: str,
    created_by: int,
) -> Product:
    parsed = parse_unit(unit)
    obj = stores.products.insert_new(
        lambda new_id: Product.new(new_id, name, description, parsed, created_by)
    )
    logger.info("Created product id=%s name=%r", obj.id, obj.name)
    return obj


def update(
    stores: CatalogStores,
    product_id: int,
    *,
    name: str,
    description: str,
    unit: str,
) -> Product:
    """Actualizează produsul și propagă modificările în SKU-urile lui."""
    def _mutate(p: Product) -> None:
        p.update(name, description, parse_unit(unit))

    return _apply_and_cascade(stores, product_id, _mutate)


def update_flags(
    stores: CatalogStores,
    product_id: int,
    *,
    discontinued: Optional[bool] = None,
    perishable: Optional[bool] = None,
) -> Product:
    """Actualizează doar câmpurile **furnizate**; `perishable` se propagă în SKU-uri."""
    def _mutate(p: Product) -> None:
        if discontinued is not None:
            p.discontinued = discontinued
        if perishable is not None:
            p.perishable = perishable

    return _apply_and_cascade(stores, product_id, _mutate)


def _apply_and_cascade(
    stores: CatalogStores,
    product_id: int,
    mutate: Callable[[Product], None],
) -> Product:
    """
    1) lock products: mutație + commit, apoi eliberare
    2) lock skus: cascada într-o singură tranzacție
    Dacă pasul 2 eșuează, produsul revine la starea anterioară și eroarea se propagă.
    """
    with stores.sync_lock:
        with stores.products.find_mut(product_id) as draft:
            previous = draft.model_copy(deep=True)
            mutate(draft)

        try:
            synced = sku_crud.sync_parent(stores, draft)
        except Exception:
            logger.exception("Cascade failed for product id=%s; restoring previous state", product_id)
            stores.products.replace(previous)
            raise

    logger.info("Updated product id=%s; %d sku(s) synced", product_id, len(synced))
    return draft
