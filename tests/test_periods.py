from datetime import date, datetime

import pytest

from error_handler import ValidationError
from services.periods import academic_year_for, period_bounds, period_range, resolve_period


@pytest.mark.parametrize('period, expected', [
    ('quarter1', (date(2024, 9, 1), date(2024, 10, 31))),
    ('quarter2', (date(2024, 11, 1), date(2024, 12, 31))),
    ('quarter3', (date(2025, 1, 1), date(2025, 3, 31))),
    ('quarter4', (date(2025, 4, 1), date(2025, 6, 30))),
    ('semester1', (date(2024, 9, 1), date(2024, 12, 31))),
    ('semester2', (date(2025, 1, 1), date(2025, 6, 30))),
    ('year', (date(2024, 9, 1), date(2025, 6, 30))),
])
def test_period_range_for_2024(period, expected):
    assert period_range(period, 2024) == expected


def test_unknown_period_is_rejected():
    with pytest.raises(ValidationError):
        period_range('quarter5', 2024)


def test_academic_year_starts_in_september():
    assert academic_year_for(date(2024, 9, 1)) == 2024
    assert academic_year_for(date(2024, 8, 31)) == 2023
    assert academic_year_for(date(2025, 3, 15)) == 2024


def test_period_bounds_cover_the_whole_last_day():
    start, end = period_bounds(date(2024, 9, 1), date(2024, 10, 31))
    assert start == datetime(2024, 9, 1, 0, 0)
    assert datetime(2024, 10, 31, 23, 59, 59) <= end < datetime(2024, 11, 1)


def test_resolve_period_prefers_custom_range():
    assert resolve_period('quarter1', 2024, date(2024, 9, 10), date(2024, 9, 20)) == \
        (date(2024, 9, 10), date(2024, 9, 20))


def test_resolve_period_requires_both_custom_bounds():
    with pytest.raises(ValidationError):
        resolve_period(from_date=date(2024, 9, 10))


def test_resolve_period_derives_anchor_from_today():
    assert resolve_period('quarter3', today=date(2025, 2, 1)) == (date(2025, 1, 1), date(2025, 3, 31))
