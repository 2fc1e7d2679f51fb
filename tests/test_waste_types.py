import pytest
from pydantic import ValidationError as PydanticValidationError

from errors import ValidationError
from waste_types import COLLECTION_PLACES, WASTE_TYPES, category_values, find_category, get_category


def test_category_table():
    assert category_values() == [
        "paper", "plastic", "metal", "glass", "organic", "e-waste", "textile", "hazardous",
    ]
    assert {c.value for c in WASTE_TYPES if c.weighable} == {"paper", "plastic", "metal"}


@pytest.mark.parametrize("category", WASTE_TYPES, ids=lambda c: c.value)
def test_weighable_iff_priced(category):
    assert category.weighable == (category.price_per_kg > 0)
    assert category.price_per_kg >= 0


def test_prices():
    assert get_category("paper").price_per_kg == 0.1
    assert get_category("plastic").price_per_kg == 0.15
    assert get_category("metal").price_per_kg == 0.2


def test_categories_are_immutable():
    with pytest.raises(PydanticValidationError):
        get_category("glass").price_per_kg = 5


def test_wire_format_uses_camel_case():
    assert get_category("e-waste").model_dump(by_alias=True) == {
        "value": "e-waste",
        "label": "E-Waste",
        "hasQuantity": False,
        "pricePerKg": 0,
    }


def test_lookup():
    assert find_category(" Plastic ").value == "plastic"
    assert find_category("") is None
    with pytest.raises(ValidationError):
        get_category("wood")


def test_collection_places():
    assert COLLECTION_PLACES[0] == "Home"
    assert COLLECTION_PLACES[-1] == "Other"
    assert len(COLLECTION_PLACES) == 9
