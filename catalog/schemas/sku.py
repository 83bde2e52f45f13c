# catalog/schemas/sku.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalog.models.sku import Sku
from catalog.services.quantity import format_quantity


def _strip_nonempty(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("sub_name must not be empty")
    return v


class SkuCreate(BaseModel):
    """Payload pentru CreateSku. `quantity` ca text: "5" sau "3x5"."""
    product_id: int = Field(..., ge=0)
    sub_name: str = Field(..., min_length=1, max_length=255)
    quantity: str
    created_by: int = Field(..., ge=0)

    @field_validator("sub_name")
    @classmethod
    def _sub_name(cls, v: str) -> str:
        return _strip_nonempty(v)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"product_id": 1, "sub_name": "5kg bag", "quantity": "5000", "created_by": 7}
            ]
        }
    )


class SkuUpdate(BaseModel):
    sub_name: str = Field(..., min_length=1, max_length=255)
    quantity: str

    @field_validator("sub_name")
    @classmethod
    def _sub_name(cls, v: str) -> str:
        return _strip_nonempty(v)


class SkuDivideUpdate(BaseModel):
    can_divide: bool


class SkuFlagsUpdate(BaseModel):
    discontinued: bool


class SkuBulkRequest(BaseModel):
    sku_ids: List[int] = Field(default_factory=list)


class SkuRead(BaseModel):
    """Răspuns pentru SKU; `quantity` în forma text canonică, `unit` cod scurt."""
    id: int
    product_id: int
    sub_name: str
    display_name: str
    display_packaging: str
    quantity: str
    unit: str
    can_divide: bool
    divisible_amount: Optional[int] = None
    discontinued: bool
    perishable: bool
    created_by: int
    created_at: datetime

    @classmethod
    def from_record(cls, s: Sku) -> "SkuRead":
        return cls(
            id=s.id,
            product_id=s.product_id,
            sub_name=s.sub_name,
            display_name=s.display_name,
            display_packaging=s.display_packaging,
            quantity=format_quantity(s.quantity),
            unit=s.unit.code,
            can_divide=s.can_divide,
            divisible_amount=s.divisible_amount(),
            discontinued=s.discontinued,
            perishable=s.perishable,
            created_by=s.created_by,
            created_at=s.created_at,
        )


class SkuIds(BaseModel):
    sku_ids: List[int]
