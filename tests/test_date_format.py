from datetime import date

import pytest

from clearstock.lib.date_format import format_date_for_input, format_date_for_restaurant

DAY = date(2026, 3, 5)


@pytest.mark.parametrize(
    "locale, expected",
    [
        ("pt-PT", "05/03/2026"),
        ("PT-br", "05/03/2026"),
        ("en-US", "03/05/2026"),
        ("en-GB", "05/03/2026"),
        ("de-AT", "05.03.2026"),
        ("ja-JP", "2026-03-05"),
        ("", "2026-03-05"),
        (None, "2026-03-05"),
    ],
)
def test_restaurant_format(locale, expected):
    assert format_date_for_restaurant(DAY, locale) == expected


def test_input_format_is_iso():
    assert format_date_for_input(DAY) == "2026-03-05"
