"""
Credit calculation and the entry checks shared by the API and the
submission flow.

Credits are earned per kg for weighable categories only:

    credits = quantity * price_per_kg

Invalid quantities for a weighable category raise InvalidQuantity rather
than being treated as zero.
"""

import math
from typing import Any, NamedTuple, Optional

from errors import InvalidQuantity, ValidationError
from schemas import EntryCreate
from waste_types import WasteCategory, get_category


def parse_quantity(quantity: Any) -> float:
    if quantity is None or isinstance(quantity, bool):
        raise InvalidQuantity("Quantity is required for this waste type")
    if isinstance(quantity, str):
        quantity = quantity.strip()
        if not quantity:
            raise InvalidQuantity("Quantity is required for this waste type")
    try:
        value = float(quantity)
    except (TypeError, ValueError):
        raise InvalidQuantity(f"Invalid quantity: {quantity!r}")
    if not math.isfinite(value) or value <= 0:
        raise InvalidQuantity("Quantity must be a number greater than 0")
    return value


def validate_quantity(category: WasteCategory, quantity: Any) -> Optional[float]:
    """
    Return the quantity to store for an entry of this category.

    Weighable categories need a finite quantity > 0 (numeric strings are
    accepted). Other categories never carry a quantity, so whatever was
    supplied is dropped and None is returned.
    """
    if not category.weighable:
        return None
    return parse_quantity(quantity)


def compute_credits(category: WasteCategory, quantity: Any = None) -> float:
    if not category.weighable:
        return 0.0
    return parse_quantity(quantity) * category.price_per_kg


def format_credits(credits: float) -> str:
    return f"{credits:.2f}"


class ValidatedEntry(NamedTuple):
    category: WasteCategory
    quantity: Optional[float]
    waste_name: str
    place: str


def validate_submission(payload: EntryCreate) -> ValidatedEntry:
    waste_name = (payload.waste_name or "").strip()
    if not waste_name:
        raise ValidationError("Waste name is required")

    place = (payload.place or "").strip()
    if not place:
        raise ValidationError("Place is required")

    category = get_category(payload.waste_type)
    quantity = validate_quantity(category, payload.quantity)
    return ValidatedEntry(category=category, quantity=quantity, waste_name=waste_name, place=place)
