"""Date manipulation utilities"""

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Tuple, TypeVar

T = TypeVar("T")


def month_key(day: date) -> str:
    """Calendar month bucket, e.g. 2024-03"""
    return f"{day.year:04d}-{day.month:02d}"


def group_by_month(items: Iterable[T], key=lambda item: item.date) -> Dict[str, List[T]]:
    """Group dated items into calendar-month buckets, keys sorted chronologically"""
    groups: Dict[str, List[T]] = defaultdict(list)
    for item in items:
        groups[month_key(key(item))].append(item)
    return dict(sorted(groups.items()))


def period_bounds(days: Iterable[date]) -> Tuple[str, str]:
    """ISO dates of the earliest and latest day, or empty strings when there are none"""
    days = list(days)
    if not days:
        return "", ""
    return min(days).isoformat(), max(days).isoformat()
