"""
Waste categories and collection places shared by the classifier mapping,
the credit calculator and the entry form.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from errors import ValidationError


class WasteCategory(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    value: str = Field(..., description="Category key used in requests (e.g. 'e-waste')")
    label: str = Field(..., description="Display label")
    has_quantity: bool = Field(..., description="Whether credits are earned per kg")
    price_per_kg: float = Field(0, ge=0, description="Credits per kg; zero when not weighable")

    @property
    def weighable(self) -> bool:
        return self.has_quantity


WASTE_TYPES: Tuple[WasteCategory, ...] = (
    WasteCategory(value="paper", label="Paper", has_quantity=True, price_per_kg=0.1),
    WasteCategory(value="plastic", label="Plastic", has_quantity=True, price_per_kg=0.15),
    WasteCategory(value="metal", label="Metal", has_quantity=True, price_per_kg=0.2),
    WasteCategory(value="glass", label="Glass", has_quantity=False, price_per_kg=0),
    WasteCategory(value="organic", label="Organic", has_quantity=False, price_per_kg=0),
    WasteCategory(value="e-waste", label="E-Waste", has_quantity=False, price_per_kg=0),
    WasteCategory(value="textile", label="Textile", has_quantity=False, price_per_kg=0),
    WasteCategory(value="hazardous", label="Hazardous", has_quantity=False, price_per_kg=0),
)

_BY_VALUE = {category.value: category for category in WASTE_TYPES}

COLLECTION_PLACES: Tuple[str, ...] = (
    "Home",
    "Office",
    "School",
    "Park",
    "Shopping Mall",
    "Restaurant",
    "Factory",
    "Hospital",
    "Other",
)


def find_category(value: Optional[str]) -> Optional[WasteCategory]:
    if not value:
        return None
    return _BY_VALUE.get(value.strip().lower())


def get_category(value: Optional[str]) -> WasteCategory:
    """Look up a category by its value, raising ValidationError when unknown."""
    category = find_category(value)
    if category is None:
        if not value:
            raise ValidationError("Waste type is required")
        raise ValidationError(f"Invalid waste type: {value}")
    return category


def category_values() -> List[str]:
    return [category.value for category in WASTE_TYPES]
