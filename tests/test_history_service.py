from datetime import datetime, timezone

import pytest

from clearstock.model.stock_event import StockEvent, StockEventType
from clearstock.services import history_service


def _event(session, restaurant_id, name, when, event_type=StockEventType.ENTRY):
    event = StockEvent(
        restaurant_id=restaurant_id,
        type=event_type,
        product_name=name,
        quantity=1,
        unit="un",
        created_at=when,
        updated_at=when,
    )
    session.add(event)
    session.commit()
    return event


def test_month_range_uses_restaurant_timezone(restaurant):
    restaurant.timezone = "Europe/Lisbon"
    start, end = history_service.month_range(restaurant, 2026, 7)

    # Lisboa está em UTC+1 no verão
    assert start == datetime(2026, 6, 30, 23, 0, tzinfo=timezone.utc)
    assert end < datetime(2026, 7, 31, 23, 0, tzinfo=timezone.utc)
    assert end > datetime(2026, 7, 31, 22, 59, tzinfo=timezone.utc)


def test_month_range_december(restaurant):
    restaurant.timezone = "UTC"
    start, end = history_service.month_range(restaurant, 2026, 12)
    assert start == datetime(2026, 12, 1, tzinfo=timezone.utc)
    assert end.year == 2026 and end.month == 12 and end.day == 31


def test_month_range_last_supported_month(restaurant):
    restaurant.timezone = "UTC"
    start, end = history_service.month_range(restaurant, 9999, 12)
    assert start == datetime(9999, 12, 1, tzinfo=timezone.utc)
    assert (end.year, end.month, end.day) == (9999, 12, 31)

    restaurant.timezone = "America/Sao_Paulo"
    with pytest.raises(history_service.InvalidRange):
        history_service.month_range(restaurant, 9999, 12)
    with pytest.raises(history_service.InvalidRange):
        history_service.parse_range_bound("9999-12-31", restaurant, end=True)


@pytest.mark.parametrize("value", [None, "", "ontem", "2026-13-01"])
def test_invalid_bounds(restaurant, value):
    with pytest.raises(history_service.InvalidRange):
        history_service.parse_range_bound(value, restaurant)


def test_date_only_bounds_cover_whole_day(restaurant):
    restaurant.timezone = "UTC"
    start = history_service.parse_range_bound("2026-03-01", restaurant)
    end = history_service.parse_range_bound("2026-03-01", restaurant, end=True)
    assert start == datetime(2026, 3, 1, tzinfo=timezone.utc)
    assert end.date() == start.date() and end.hour == 23


def test_list_events_in_range_ordered_and_scoped(session, restaurant):
    _event(session, restaurant.id, "B", datetime(2026, 3, 5, 12, tzinfo=timezone.utc))
    _event(session, restaurant.id, "A", datetime(2026, 3, 2, 9, tzinfo=timezone.utc), StockEventType.WASTE)
    _event(session, restaurant.id, "Fora", datetime(2026, 4, 1, 9, tzinfo=timezone.utc))

    start = datetime(2026, 3, 1, tzinfo=timezone.utc)
    end = datetime(2026, 3, 31, 23, 59, tzinfo=timezone.utc)
    events = history_service.list_events(session, restaurant.id, start, end)

    assert [e.product_name for e in events] == ["A", "B"]
    assert history_service.list_events(session, restaurant.id + 1, start, end) == []

    summary = history_service.summarize(events)
    assert (summary.entries, summary.waste) == (1, 1)


def test_inverted_range_is_invalid(session, restaurant):
    start = datetime(2026, 3, 2, tzinfo=timezone.utc)
    end = datetime(2026, 3, 1, tzinfo=timezone.utc)
    with pytest.raises(history_service.InvalidRange):
        history_service.list_events(session, restaurant.id, start, end)
