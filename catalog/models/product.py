# catalog/models/product.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from catalog.services.quantity import Unit


class Product(BaseModel):
    """
    Înregistrare Product (colecția `products`).

    Note:
    - `skus` ține ID-urile SKU-urilor proprii, în ordinea creării; fiecare SKU
      listat are `product_id == id`.
    - `created_at` nu se mai schimbă după creare.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: int = Field(ge=0)
    name: str
    description: str = ""
    unit: Unit
    skus: List[int] = Field(default_factory=list)
    discontinued: bool = False
    perishable: bool = False
    created_by: int = Field(ge=0)
    created_at: datetime

    @classmethod
    def new(cls, id: int, name: str, description: str, unit: Unit, created_by: int) -> "Product":
        return cls(
            id=id,
            name=name,
            description=description,
            unit=unit,
            created_by=created_by,
            created_at=datetime.now(timezone.utc),
        )

    def update(self, name: str, description: str, unit: Unit) -> "Product":
        self.name = name
        self.description = description
        self.unit = unit
        return self

    def add_sku(self, sku_id: int) -> "Product":
        if sku_id not in self.skus:
            self.skus.append(sku_id)
        return self

    def __repr__(self) -> str:
        # scurtează numele în repr pentru loguri mai curate
        name_preview = (self.name[:32] + "…") if self.name and len(self.name) > 33 else self.name
        return f"<Product id={self.id!r} name={name_preview!r} unit={self.unit.code!r}>"
