# catalog/routers/sku.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import StreamingResponse

from catalog.crud import sku as crud
from catalog.repositories.stores import CatalogStores, get_stores
from catalog.routers.streaming import NDJSON_MEDIA_TYPE, ndjson_response
from catalog.schemas.sku import (
    SkuBulkRequest,
    SkuCreate,
    SkuDivideUpdate,
    SkuFlagsUpdate,
    SkuIds,
    SkuRead,
    SkuUpdate,
)

router = APIRouter(prefix="/skus", tags=["skus"])


@router.post(
    "",
    response_model=SkuRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a SKU under an existing product",
    description="400 dacă product_id nu există sau quantity nu are formatul N / MxN.",
)
def create_sku(payload: SkuCreate, stores: CatalogStores = Depends(get_stores)):
    obj = crud.create(
        stores,
        product_id=payload.product_id,
        sub_name=payload.sub_name,
        quantity=payload.quantity,
        created_by=payload.created_by,
    )
    return SkuRead.from_record(obj)


@router.get("/ids", response_model=SkuIds, summary="All SKU ids (insertion order)")
def get_all_sku_ids(stores: CatalogStores = Depends(get_stores)):
    return SkuIds(sku_ids=crud.get_all_ids(stores))


@router.get(
    "/find",
    response_model=SkuIds,
    summary="Find SKUs by display name substring (case-insensitive)",
)
def find_skus(
    query: str = Query(default="", description="Substring căutat în display_name"),
    stores: CatalogStores = Depends(get_stores),
):
    return SkuIds(sku_ids=crud.find(stores, query))


@router.post(
    "/bulk",
    summary="Stream the requested SKUs as NDJSON (unknown ids are omitted)",
    response_class=StreamingResponse,
    responses={200: {"content": {NDJSON_MEDIA_TYPE: {}}}},
)
def get_skus_bulk(payload: SkuBulkRequest, stores: CatalogStores = Depends(get_stores)):
    items = [SkuRead.from_record(s) for s in crud.get_bulk(stores, payload.sku_ids)]
    return ndjson_response(items)


@router.get("/{sku_id}", response_model=SkuRead, summary="Get a SKU by id")
def get_sku(sku_id: int = Path(ge=0), stores: CatalogStores = Depends(get_stores)):
    return SkuRead.from_record(crud.get(stores, sku_id))


@router.put("/{sku_id}", response_model=SkuRead, summary="Update sub-name and quantity")
def update_sku(
    payload: SkuUpdate,
    sku_id: int = Path(ge=0),
    stores: CatalogStores = Depends(get_stores),
):
    obj = crud.update(stores, sku_id, sub_name=payload.sub_name, quantity=payload.quantity)
    return SkuRead.from_record(obj)


@router.put(
    "/{sku_id}/divide",
    response_model=SkuRead,
    summary="Enable/disable divisibility",
    description="400 la activare pe un SKU cu cantitate complexă (MxN).",
)
def update_sku_divisibility(
    payload: SkuDivideUpdate,
    sku_id: int = Path(ge=0),
    stores: CatalogStores = Depends(get_stores),
):
    return SkuRead.from_record(crud.update_divisibility(stores, sku_id, payload.can_divide))


@router.put("/{sku_id}/flags", response_model=SkuRead, summary="Update the discontinued flag")
def update_sku_flags(
    payload: SkuFlagsUpdate,
    sku_id: int = Path(ge=0),
    stores: CatalogStores = Depends(get_stores),
):
    return SkuRead.from_record(crud.update_flags(stores, sku_id, discontinued=payload.discontinued))
