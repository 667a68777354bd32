from datetime import date, datetime, timezone

import pytest

from clearstock.model.category import Category
from clearstock.model.restaurant import Restaurant
from clearstock.services.expiry import (
    ExpiryStatus,
    classify_expiry,
    days_to_expiry,
    expiry_label,
    resolve_thresholds,
    restaurant_today,
)


@pytest.mark.parametrize(
    "days, expected",
    [
        (-1, ExpiryStatus.EXPIRED),
        (0, ExpiryStatus.URGENT),
        (2, ExpiryStatus.URGENT),
        (3, ExpiryStatus.WARNING),
        (5, ExpiryStatus.WARNING),
        (6, ExpiryStatus.OK),
    ],
)
def test_classification_priority(days, expected):
    assert classify_expiry(days, urgent_days=2, warning_days=5) == expected


def test_days_to_expiry_counts_calendar_days():
    assert days_to_expiry(date(2026, 3, 15), date(2026, 3, 13)) == 2
    assert days_to_expiry(date(2026, 3, 12), date(2026, 3, 13)) == -1


def test_thresholds_fall_back_to_restaurant_then_urgent():
    restaurant = Restaurant(pin="000001", alert_days_before_expiry=3, warning_days_before_expiry=None)
    assert resolve_thresholds(restaurant, None) == (3, 3)

    restaurant.warning_days_before_expiry = 7
    assert resolve_thresholds(restaurant, None) == (3, 7)

    category = Category(restaurant_id=1, name="Frescos", alert_days_before_expiry=1)
    assert resolve_thresholds(restaurant, category) == (1, 7)

    category.warning_days_before_expiry = 4
    assert resolve_thresholds(restaurant, category) == (1, 4)


def test_restaurant_today_uses_restaurant_timezone():
    restaurant = Restaurant(pin="000001", timezone="Pacific/Auckland")
    now = datetime(2026, 3, 1, 20, 0, tzinfo=timezone.utc)
    assert restaurant_today(restaurant, now) == date(2026, 3, 2)

    restaurant.timezone = "Europe/Lisbon"
    assert restaurant_today(restaurant, now) == date(2026, 3, 1)


def test_labels():
    assert expiry_label(ExpiryStatus.EXPIRED, -2) == "Expirado"
    assert expiry_label(ExpiryStatus.URGENT, 1) == "Urgente usar (1 dias)"
    assert expiry_label(ExpiryStatus.WARNING, 4) == "A expirar em breve (4 dias)"
    assert expiry_label(ExpiryStatus.OK, 10) == "OK"
