"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

import re
from dataclasses import dataclass
from enum import Enum

from shoestore.domain.base import ValueObject


# ============================================================================
# Variant Natural Key
# ============================================================================


@dataclass(frozen=True)
class VariantKey(ValueObject):
    """Natural key of a variant: one active variant per (product, color, size)."""

    product_id: int
    color_id: int
    size_id: int

    def __str__(self) -> str:
        return f"{self.product_id}/{self.color_id}/{self.size_id}"


# ============================================================================
# Sizes
# ============================================================================


class SizeSystem(str, Enum):
    """Sizing systems a size value can be expressed in."""

    US = "US"
    EU = "EU"
    UK = "UK"
    CM = "CM"


# Apparel letter sizes in wearing order
_ALPHA_SIZES = ["XXS", "XS", "S", "M", "L", "XL", "XXL", "XXXL"]
_ALPHA_RANK = {value: rank for rank, value in enumerate(_ALPHA_SIZES)}

_NUMERIC_SIZE = re.compile(r"^\d+(?:[.,]\d+)?$")


def size_sort_key(value: str) -> tuple[int, float, str]:
    """Natural ordering key for a size value.

    Numeric sizes sort by number ("9" < "9.5" < "10"), then letter sizes in
    wearing order ("S" < "M" < "XL"), then anything else alphabetically.

    Args:
        value: Raw size value.

    Returns:
        Sortable tuple.
    """
    token = value.strip().upper()
    if _NUMERIC_SIZE.match(token):
        return (0, float(token.replace(",", ".")), token)
    if token in _ALPHA_RANK:
        return (1, float(_ALPHA_RANK[token]), token)
    return (2, 0.0, token)
