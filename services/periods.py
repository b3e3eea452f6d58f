"""
Reporting periods of the academic year.

The academic year starts on September 1. A period is always resolved
against an explicit anchor year (the calendar year in which its September
falls), so nothing here reads the clock.
"""

from datetime import date, datetime, time

from error_handler import ValidationError

# name -> ((start month, start day, year offset), (end month, end day, year offset))
PERIODS = {
    'quarter1': ((9, 1, 0), (10, 31, 0)),
    'quarter2': ((11, 1, 0), (12, 31, 0)),
    'quarter3': ((1, 1, 1), (3, 31, 1)),
    'quarter4': ((4, 1, 1), (6, 30, 1)),
    'semester1': ((9, 1, 0), (12, 31, 0)),
    'semester2': ((1, 1, 1), (6, 30, 1)),
    'year': ((9, 1, 0), (6, 30, 1)),
}


def academic_year_for(reference_date):
    """Anchor year of the academic year containing reference_date."""
    return reference_date.year if reference_date.month >= 9 else reference_date.year - 1


def period_range(period, academic_year):
    """
    Resolve a named period to its inclusive date range.

    Args:
        period: one of PERIODS
        academic_year: year in which the academic year's September falls

    Returns:
        tuple: (start_date, end_date)
    """
    if period not in PERIODS:
        raise ValidationError(f"Unknown period '{period}'.", allowed=sorted(PERIODS))
    (sm, sd, so), (em, ed, eo) = PERIODS[period]
    return date(academic_year + so, sm, sd), date(academic_year + eo, em, ed)


def period_bounds(start_date, end_date):
    """Datetime bounds covering both dates entirely."""
    if start_date > end_date:
        raise ValidationError('Period start must not be after its end.')
    return datetime.combine(start_date, time.min), datetime.combine(end_date, time.max)


def resolve_period(period=None, academic_year=None, from_date=None, to_date=None, today=None):
    """
    Turn request-level period arguments into a concrete (start, end) pair.

    A custom from/to range takes precedence over a named period. Without an
    explicit academic_year the anchor is derived from today.
    """
    if from_date or to_date:
        if not (from_date and to_date):
            raise ValidationError('fromDate and toDate must be given together.')
        if from_date > to_date:
            raise ValidationError('fromDate must not be after toDate.')
        return from_date, to_date
    if academic_year is None:
        academic_year = academic_year_for(today or date.today())
    return period_range(period or 'year', academic_year)
