# catalog/routers/product.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import StreamingResponse

from catalog.crud import product as crud
from catalog.repositories.stores import CatalogStores, get_stores
from catalog.routers.streaming import NDJSON_MEDIA_TYPE, ndjson_response
from catalog.schemas.product import (
    ProductBulkRequest,
    ProductCreate,
    ProductFlagsUpdate,
    ProductIds,
    ProductRead,
    ProductUpdate,
)

router = APIRouter(prefix="/products", tags=["products"])

# Erorile de domeniu (NotFound/BadRequest/...) sunt mapate pe status în catalog.main


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
def create_product(payload: ProductCreate, stores: CatalogStores = Depends(get_stores)):
    obj = crud.create(
        stores,
        name=payload.name,
        description=payload.description,
        unit=payload.unit,
        created_by=payload.created_by,
    )
    return ProductRead.from_record(obj)


@router.get(
    "/ids",
    response_model=ProductIds,
    summary="All product ids (insertion order)",
)
def get_all_product_ids(stores: CatalogStores = Depends(get_stores)):
    return ProductIds(product_ids=crud.get_all_ids(stores))


@router.get(
    "/find",
    response_model=ProductIds,
    summary="Find products by name substring (case-insensitive)",
)
def find_products(
    query: str = Query(default="", description="Substring căutat în name"),
    stores: CatalogStores = Depends(get_stores),
):
    return ProductIds(product_ids=crud.find(stores, query))


@router.post(
    "/bulk",
    summary="Stream the requested products as NDJSON (unknown ids are omitted)",
    response_class=StreamingResponse,
    responses={200: {"content": {NDJSON_MEDIA_TYPE: {}}}},
)
def get_products_bulk(payload: ProductBulkRequest, stores: CatalogStores = Depends(get_stores)):
    items = [ProductRead.from_record(p) for p in crud.get_bulk(stores, payload.product_ids)]
    return ndjson_response(items)


@router.get(
    "/{product_id}",
    response_model=ProductRead,
    summary="Get a product by id",
)
def get_product(product_id: int = Path(ge=0), stores: CatalogStores = Depends(get_stores)):
    return ProductRead.from_record(crud.get(stores, product_id))


@router.put(
    "/{product_id}",
    response_model=ProductRead,
    summary="Update a product (cascades to its SKUs)",
)
def update_product(
    payload: ProductUpdate,
    product_id: int = Path(ge=0),
    stores: CatalogStores = Depends(get_stores),
):
    obj = crud.update(
        stores,
        product_id,
        name=payload.name,
        description=payload.description,
        unit=payload.unit,
    )
    return ProductRead.from_record(obj)


@router.put(
    "/{product_id}/flags",
    response_model=ProductRead,
    summary="Update discontinued/perishable flags",
)
def update_product_flags(
    payload: ProductFlagsUpdate,
    product_id: int = Path(ge=0),
    stores: CatalogStores = Depends(get_stores),
):
    obj = crud.update_flags(
        stores,
        product_id,
        discontinued=payload.discontinued,
        perishable=payload.perishable,
    )
    return ProductRead.from_record(obj)
