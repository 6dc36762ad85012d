from __future__ import annotations

from calendar import monthrange
from datetime import date


def month_bounds(anchor: date) -> tuple[str, date, date]:
    last_day = monthrange(anchor.year, anchor.month)[1]
    start = date(anchor.year, anchor.month, 1)
    end = date(anchor.year, anchor.month, last_day)
    return f"{anchor.year}-{anchor.month:02d}", start, end


def in_month(value: date | None, anchor: date) -> bool:
    if value is None:
        return False
    _, start, end = month_bounds(anchor)
    return start <= value <= end


__all__ = ["month_bounds", "in_month"]
