# catalog/services/quantity.py
"""
Parsere pure pentru unități și cantități (text <-> valoare).

- Unit: set închis {Piece, Millimeter, Gram, Milliliter}, cod scurt canonic.
- Quantity: "N" -> Simple(N), "MxN" -> Complex(M, N).

Nu au efecte secundare; orice formă invalidă ridică BadRequestError.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from catalog.errors import BadRequestError

U32_MAX = 2**32 - 1

_DIGITS_RE = re.compile(r"[0-9]+")


class Unit(str, Enum):
    """Valoarea enum-ului este codul scurt canonic (persistat ca atare)."""
    PIECE = "db"
    MILLIMETER = "mm"
    GRAM = "g"
    MILLILITER = "ml"

    @property
    def code(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


UNIT_ALIASES: Dict[str, Unit] = {
    "piece": Unit.PIECE,
    "db": Unit.PIECE,
    "millimeter": Unit.MILLIMETER,
    "mm": Unit.MILLIMETER,
    "gram": Unit.GRAM,
    "gr": Unit.GRAM,
    "g": Unit.GRAM,
    "milliliter": Unit.MILLILITER,
    "ml": Unit.MILLILITER,
}


class SimpleQuantity(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["simple"] = "simple"
    count: int = Field(ge=0, le=U32_MAX)

    def __str__(self) -> str:
        return str(self.count)


class ComplexQuantity(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["complex"] = "complex"
    multiplier: int = Field(ge=0, le=U32_MAX)
    count: int = Field(ge=0, le=U32_MAX)

    def __str__(self) -> str:
        return f"{self.multiplier}x{self.count}"


# Tagged union; `kind` decide varianta la deserializare
Quantity = Union[SimpleQuantity, ComplexQuantity]


def parse_unit(text: str) -> Unit:
    raw = (text or "").strip()
    try:
        return UNIT_ALIASES[raw]
    except KeyError:
        raise BadRequestError(f"Wrong unit format: {raw!r}") from None


def _parse_u32(part: str) -> int:
    if not _DIGITS_RE.fullmatch(part):
        raise BadRequestError(
            f"Quantity must consist of non-negative whole numbers only, got {part!r}"
        )
    value = int(part)
    if value > U32_MAX:
        raise BadRequestError(f"Quantity value out of range: {part}")
    return value


def parse_quantity(text: str) -> Quantity:
    raw = (text or "").strip()
    if "x" not in raw:
        return SimpleQuantity(count=_parse_u32(raw))
    parts = raw.split("x")
    if len(parts) != 2:
        raise BadRequestError("A complex quantity must have exactly 2 parts, e.g. 3x5")
    multiplier, count = parts
    return ComplexQuantity(multiplier=_parse_u32(multiplier), count=_parse_u32(count))


def format_quantity(quantity: Quantity) -> str:
    return str(quantity)


def format_packaging(quantity: Quantity, unit: Unit) -> str:
    """Ex.: Simple(5000) + g -> "5000g"; Complex(3, 5) + ml -> "3x5ml"."""
    return f"{format_quantity(quantity)}{unit.code}"


def is_simple(quantity: Quantity) -> bool:
    return isinstance(quantity, SimpleQuantity)


__all__ = [
    "Unit",
    "UNIT_ALIASES",
    "Quantity",
    "SimpleQuantity",
    "ComplexQuantity",
    "parse_unit",
    "parse_quantity",
    "format_quantity",
    "format_packaging",
    "is_simple",
]
