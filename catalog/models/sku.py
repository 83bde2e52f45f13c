# catalog/models/sku.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from catalog.errors import BadRequestError
from catalog.models.product import Product
from catalog.services.quantity import Quantity, SimpleQuantity, Unit, format_packaging, is_simple


def display_name_for(parent_name: str, sub_name: str, display_packaging: str) -> str:
    return f"{parent_name}, {sub_name}, {display_packaging}"


class Sku(BaseModel):
    """
    Înregistrare Sku (colecția `skus`).

    - `product_id` este doar o valoare de identitate; părintele se rezolvă prin
      lookup în colecția de produse.
    - `parent_name`, `unit`, `perishable` sunt copiate din Product la creare și la
      fiecare sincronizare.
    - `display_name` / `display_packaging` sunt derivate din
      (parent_name, sub_name, quantity, unit) și se recalculează doar prin
      `refresh_display()`, apelat din fiecare metodă care modifică una din intrări.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: int = Field(ge=0)
    product_id: int = Field(ge=0)
    parent_name: str
    sub_name: str
    display_name: str = ""
    display_packaging: str = ""
    quantity: Annotated[Quantity, Field(discriminator="kind")]
    unit: Unit
    can_divide: bool = False
    discontinued: bool = False
    perishable: bool = False
    created_by: int = Field(ge=0)
    created_at: datetime

    @model_validator(mode="after")
    def _divide_only_simple(self) -> "Sku":
        if self.can_divide and not is_simple(self.quantity):
            raise ValueError("can_divide requires a simple quantity")
        return self

    @classmethod
    def new(
        cls,
        id: int,
        parent: Product,
        sub_name: str,
        quantity: Quantity,
        created_by: int,
    ) -> "Sku":
        sku = cls(
            id=id,
            product_id=parent.id,
            parent_name=parent.name,
            sub_name=sub_name,
            quantity=quantity,
            unit=parent.unit,
            perishable=parent.perishable,
            created_by=created_by,
            created_at=datetime.now(timezone.utc),
        )
        return sku.refresh_display()

    def refresh_display(self) -> "Sku":
        packaging = format_packaging(self.quantity, self.unit)
        self.display_packaging = packaging
        self.display_name = display_name_for(self.parent_name, self.sub_name, packaging)
        return self

    def update(self, sub_name: str, quantity: Quantity) -> "Sku":
        if not is_simple(quantity):
            # divizibil doar cu cantitate simplă
            self.can_divide = False
        self.sub_name = sub_name
        self.quantity = quantity
        return self.refresh_display()

    def update_parent(self, parent: Product) -> "Sku":
        self.parent_name = parent.name
        self.unit = parent.unit
        self.perishable = parent.perishable
        return self.refresh_display()

    def set_divide(self, can_divide: bool) -> "Sku":
        if can_divide and not is_simple(self.quantity):
            raise BadRequestError(
                f"Sku {self.id} has a complex quantity ({self.quantity}); only simple quantities can be divided"
            )
        self.can_divide = can_divide
        return self

    def divisible_amount(self) -> Optional[int]:
        """Cantitatea care poate fi vândută fracționat; None dacă SKU-ul nu e divizibil."""
        if self.can_divide and isinstance(self.quantity, SimpleQuantity):
            return self.quantity.count
        return None

    def __repr__(self) -> str:
        return f"<Sku id={self.id!r} product_id={self.product_id!r} display_name={self.display_name!r}>"
