# catalog/crud/sku.py
from __future__ import annotations

import logging
from typing import Iterable, List

from catalog.errors import BadRequestError, NotFoundError
from catalog.models.product import Product
from catalog.models.sku import Sku
from catalog.repositories.stores import CatalogStores
from catalog.services.quantity import parse_quantity

logger = logging.getLogger("catalog-api.crud")


# -------------------------- Reads --------------------------

def get(stores: CatalogStores, sku_id: int) -> Sku:
    """Returnează SKU-ul după ID; NotFoundError dacă lipsește."""
    return stores.skus.find(sku_id)


def get_all_ids(stores: CatalogStores) -> List[int]:
    return stores.skus.ids()


def get_bulk(stores: CatalogStores, sku_ids: Iterable[int]) -> List[Sku]:
    """SKU-urile cerute, în ordinea colecției; ID-urile necunoscute sunt omise."""
    wanted = set(sku_ids)
    return [s for s in stores.skus.iterate() if s.id in wanted]


def find(stores: CatalogStores, query: str) -> List[int]:
    """ID-urile SKU-urilor al căror display_name conține `query` (case-insensitive)."""
    needle = (query or "").lower()
    return [s.id for s in stores.skus.iterate() if needle in s.display_name.lower()]


# -------------------------- Mutations --------------------------

def create(
    stores: CatalogStores,
    *,
    product_id: int,
    sub_name: str,
    quantity: str,
    created_by: int,
) -> Sku:
    """
    Creează SKU sub un produs existent:
      1) rezolvă părintele (BadRequestError dacă nu există)
      2) alocă ID + inserează atomic în colecția skus
      3) înregistrează ID-ul în lista `skus` a produsului; dacă pasul eșuează,
         SKU-ul inserat la 2) este retras și eroarea se propagă
    """
    with stores.sync_lock:
        try:
            parent = stores.products.find(product_id)
        except NotFoundError:
            raise BadRequestError(
                f"Cannot create SKU: product {product_id} does not exist"
            ) from None
        parsed = parse_quantity(quantity)

        sku = stores.skus.insert_new(
            lambda new_id: Sku.new(new_id, parent, sub_name, parsed, created_by)
        )
        try:
            with stores.products.find_mut(product_id) as draft:
                draft.add_sku(sku.id)
        except Exception:
            # SKU-ul nu ajunge în lista produsului: îl retragem din colecție
            logger.exception("Registering sku id=%s into product id=%s failed; discarding it", sku.id, product_id)
            stores.skus.discard(sku.id)
            raise

    logger.info("Created sku id=%s for product id=%s (%s)", sku.id, product_id, sku.display_name)
    return sku


def update(stores: CatalogStores, sku_id: int, *, sub_name: str, quantity: str) -> Sku:
    with stores.skus.find_mut(sku_id) as draft:
        draft.update(sub_name, parse_quantity(quantity))
    return draft


def update_divisibility(stores: CatalogStores, sku_id: int, can_divide: bool) -> Sku:
    """Divizibil doar cu cantitate simplă; dezactivarea reușește mereu."""
    with stores.skus.find_mut(sku_id) as draft:
        draft.set_divide(can_divide)
    return draft


def update_flags(stores: CatalogStores, sku_id: int, *, discontinued: bool) -> Sku:
    with stores.skus.find_mut(sku_id) as draft:
        draft.discontinued = discontinued
    return draft


def sync_parent(stores: CatalogStores, parent: Product) -> List[Sku]:
    """
    Cascada Product -> Sku: copiază numele/unitatea/perishable și recalculează
    câmpurile derivate pentru toate SKU-urile produsului, într-o singură tranzacție.
    """
    return stores.skus.update_where(
        lambda s: s.product_id == parent.id,
        lambda s: s.update_parent(parent),
    )
