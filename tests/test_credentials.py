import pytest
from sqlmodel import select

from clearstock.auth.credentials import PinDirectory, PinLookupStatus, normalize_pin
from clearstock.model.restaurant import Restaurant


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1111", "001111"),
        (" 1234 ", "001234"),
        ("123456", "123456"),
        ("12345", None),
        ("1234567", None),
        ("12a4", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_pin(raw, expected):
    assert normalize_pin(raw) == expected


def test_unknown_pin_is_not_found(session):
    directory = PinDirectory(session, {"1111": "A"})
    result = directory.lookup("9999")
    assert result.status == PinLookupStatus.NOT_FOUND
    assert result.restaurant is None
    assert session.exec(select(Restaurant)).all() == []


def test_seed_pin_is_provisioned_lazily_and_needs_onboarding(session):
    directory = PinDirectory(session, {"2222": "B"})

    result = directory.lookup("2222")

    assert result.status == PinLookupStatus.NEEDS_ONBOARDING
    assert result.restaurant.pin == "002222"
    assert result.restaurant.label == "B"
    assert result.found


def test_named_restaurant_is_found(session, restaurant):
    directory = PinDirectory(session, {})
    result = directory.lookup("001111")
    assert result.status == PinLookupStatus.FOUND
    assert result.restaurant.id == restaurant.id


def test_four_and_six_digit_forms_resolve_to_same_restaurant(session, restaurant):
    directory = PinDirectory(session, {})
    assert directory.lookup("1111").restaurant.id == directory.lookup("001111").restaurant.id


def test_resolve_label(session, restaurant):
    directory = PinDirectory(session, {"2222": "B"})
    assert directory.resolve_label("A").id == restaurant.id
    assert directory.resolve_label("B").pin == "002222"
    assert directory.resolve_label("Z") is None


def test_invalid_seed_pin_is_ignored(session):
    directory = PinDirectory(session, {"12": "X", "3333": "C"})
    assert directory.seed_pins == {"003333": "C"}
