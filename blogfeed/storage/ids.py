"""Identifiers, slugs and calendar keys used to partition the store."""

import re
import unicodedata
from datetime import datetime
from typing import List

from dateutil.relativedelta import relativedelta

from ..models.base import ensure_utc

MONTH_KEY_FORMAT = "%Y-%m"
MONTH_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def record_id(link: str) -> str:
    """Derive a short stable id from an article link.

    32-bit rolling hash (``h * 31 + c``) rendered in base 36. Collisions are
    possible and tolerated.
    """
    h = 0
    for char in link:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return f"art_{_base36(abs(h))}"


def _base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def slugify(category: str) -> str:
    """Turn a category name into a URL-safe token ("IA & Data" -> "ia-data")."""
    text = unicodedata.normalize("NFD", category.lower())
    text = "".join(c for c in text if not unicodedata.combining(c))
    return _NON_ALNUM.sub("-", text).strip("-")


def month_key(value: datetime) -> str:
    """Month key (YYYY-MM) of a timestamp, in UTC."""
    return ensure_utc(value).strftime("%Y-%m")


def is_month_key(value: str) -> bool:
    return bool(MONTH_KEY_PATTERN.match(value))


def previous_month_key(now: datetime) -> str:
    start = ensure_utc(now).replace(day=1)
    return (start - relativedelta(months=1)).strftime(MONTH_KEY_FORMAT)


def week_of_month(value: datetime) -> int:
    """1-based week of the month, weeks starting on Monday."""
    value = ensure_utc(value)
    offset = value.replace(day=1).weekday()
    return (value.day + offset - 1) // 7 + 1


def week_file_name(week: int) -> str:
    return f"week-{week:02d}.json"


def months_between(start: str, end: str) -> List[str]:
    """Inclusive list of month keys from ``start`` to ``end``."""
    cursor = datetime.strptime(start, MONTH_KEY_FORMAT)
    stop = datetime.strptime(end, MONTH_KEY_FORMAT)
    months = []
    while cursor <= stop:
        months.append(cursor.strftime(MONTH_KEY_FORMAT))
        cursor += relativedelta(months=1)
    return months
