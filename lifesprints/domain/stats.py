from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

TWO_PLACES = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Coerce a stored NUMERIC (int/float/str/None) to Decimal; None is 0."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_hours(value) -> Decimal:
    """Round an hours value to 2 decimal places."""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def completion_percentage(completed: int, total: int) -> Decimal:
    """completed / total * 100, rounded to 2 places; 0 when there is nothing to complete."""
    if total <= 0:
        return Decimal("0.00")
    pct = Decimal(completed) * 100 / Decimal(total)
    return pct.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def year_stats(year: int, total: int, completed: int, estimated, actual) -> dict:
    return {
        "year": year,
        "total_stories": int(total or 0),
        "completed_stories": int(completed or 0),
        "completion_percentage": completion_percentage(int(completed or 0), int(total or 0)),
        "total_estimated_hours": round_hours(estimated),
        "total_actual_hours": round_hours(actual),
    }
