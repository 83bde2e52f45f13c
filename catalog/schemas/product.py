# catalog/schemas/product.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalog.models.product import Product


class ProductCreate(BaseModel):
    """Payload pentru CreateProduct. `unit` se validează în crud (400 la alias necunoscut)."""
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    unit: str = Field(..., description="piece|db|mm|millimeter|g|gr|gram|ml|milliliter")
    created_by: int = Field(..., ge=0)

    @field_validator("name")
    @classmethod
    def _name_strip_nonempty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "name": "Soil",
                    "description": "Potting soil",
                    "unit": "g",
                    "created_by": 7,
                }
            ]
        }
    )


class ProductUpdate(BaseModel):
    """Payload pentru UpdateProduct; câmpurile sunt înlocuite integral."""
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    unit: str

    @field_validator("name")
    @classmethod
    def _name_strip_nonempty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v


class ProductFlagsUpdate(BaseModel):
    """Toate câmpurile sunt opționale; doar cele trimise se modifică."""
    discontinued: Optional[bool] = None
    perishable: Optional[bool] = None


class ProductBulkRequest(BaseModel):
    product_ids: List[int] = Field(default_factory=list)


class ProductRead(BaseModel):
    """Răspuns pentru produs; `unit` este codul scurt canonic."""
    id: int
    name: str
    description: str
    unit: str
    skus: List[int]
    discontinued: bool
    perishable: bool
    created_by: int
    created_at: datetime

    @classmethod
    def from_record(cls, p: Product) -> "ProductRead":
        return cls(
            id=p.id,
            name=p.name,
            description=p.description,
            unit=p.unit.code,
            skus=list(p.skus),
            discontinued=p.discontinued,
            perishable=p.perishable,
            created_by=p.created_by,
            created_at=p.created_at,
        )


class ProductIds(BaseModel):
    product_ids: List[int]
