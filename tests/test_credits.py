import math

import pytest

from credit_calculator import (
    compute_credits,
    format_credits,
    validate_quantity,
    validate_submission,
)
from errors import InvalidQuantity, ValidationError
from schemas import EntryCreate
from waste_types import WASTE_TYPES, get_category

WEIGHABLE = [c for c in WASTE_TYPES if c.weighable]
NOT_WEIGHABLE = [c for c in WASTE_TYPES if not c.weighable]


def test_plastic_two_kg():
    assert compute_credits(get_category("plastic"), 2) == pytest.approx(0.30)
    assert compute_credits(get_category("plastic"), "2") == pytest.approx(0.30)


@pytest.mark.parametrize("category", WEIGHABLE, ids=lambda c: c.value)
@pytest.mark.parametrize("quantity", [0.25, 1, 3.5, 1000])
def test_credits_are_linear_in_quantity(category, quantity):
    single = compute_credits(category, quantity)
    assert single == pytest.approx(quantity * category.price_per_kg)
    assert compute_credits(category, 2 * quantity) == pytest.approx(2 * single)


@pytest.mark.parametrize("category", NOT_WEIGHABLE, ids=lambda c: c.value)
@pytest.mark.parametrize("quantity", [None, 0, -1, 5, "abc", float("nan")])
def test_non_weighable_categories_earn_nothing(category, quantity):
    assert compute_credits(category, quantity) == 0


@pytest.mark.parametrize("quantity", [None, "", "  ", "abc", 0, "0", -2, float("inf"), float("nan"), True])
def test_invalid_quantity_for_weighable_category_is_rejected(quantity):
    with pytest.raises(InvalidQuantity):
        compute_credits(get_category("metal"), quantity)


def test_invalid_quantity_is_a_validation_error():
    assert issubclass(InvalidQuantity, ValidationError)
    assert InvalidQuantity.status_code == 400


def test_validate_quantity_drops_quantity_for_non_weighable():
    assert validate_quantity(get_category("glass"), "3") is None
    assert validate_quantity(get_category("paper"), " 1.5 ") == 1.5


def test_format_credits_two_decimals():
    assert format_credits(0.1 + 0.2) == "0.30"
    assert format_credits(0) == "0.00"
    assert format_credits(1250.305) in ("1250.30", "1250.31")


def test_full_precision_is_kept():
    credits = compute_credits(get_category("plastic"), 1.333)
    assert credits == pytest.approx(0.19995)
    assert not math.isclose(credits, round(credits, 2))


def entry(**fields):
    base = {"waste_name": "Bottles", "waste_type": "plastic", "quantity": 1, "place": "Home"}
    base.update(fields)
    return EntryCreate(**base)


def test_validate_submission_accepts_complete_entry():
    checked = validate_submission(entry(waste_name="  Bottles  "))
    assert checked.category.value == "plastic"
    assert checked.quantity == 1.0
    assert checked.waste_name == "Bottles"


@pytest.mark.parametrize("fields, message", [
    ({"waste_name": ""}, "Waste name"),
    ({"waste_name": None}, "Waste name"),
    ({"place": "   "}, "Place"),
    ({"waste_type": None}, "Waste type"),
    ({"waste_type": "styrofoam"}, "Invalid waste type"),
    ({"quantity": None}, "Quantity"),
])
def test_validate_submission_gates(fields, message):
    with pytest.raises(ValidationError) as excinfo:
        validate_submission(entry(**fields))
    assert message in excinfo.value.message


def test_validate_submission_glass_without_quantity():
    checked = validate_submission(entry(waste_type="glass", quantity=None))
    assert checked.quantity is None
