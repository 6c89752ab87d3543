"""Date parsing utilities for statement lines."""

import re
import warnings
from datetime import date, datetime
from typing import Optional

import pandas as pd

MONTHS = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

# Tried in order; day-first forms come before the US form on purpose
DATE_FORMATS = [
    "%d/%m/%Y",
    "%d/%m/%y",
    "%Y-%m-%d",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%Y/%m/%d",
]

_MONTH_NAME_DATE = re.compile(
    r"^(?P<day>\d{1,2})[\s\-]+(?P<month>[A-Za-z]{3,9})\.?(?:[\s\-]+(?P<year>\d{2}|\d{4}))?$"
)
_DAY_MONTH_NUMERIC = re.compile(r"^(?P<day>\d{1,2})/(?P<month>\d{1,2})$")


def month_number(name: str) -> Optional[int]:
    """Return the month number for an English month name or abbreviation."""
    if not name:
        return None
    return MONTHS.get(name.strip().rstrip(".").lower())


def build_date(year: int, month: int, day: int) -> Optional[date]:
    """Build a date, returning None for impossible combinations such as 31 Feb."""
    try:
        return date(int(year), int(month), int(day))
    except (TypeError, ValueError):
        return None


def _expand_year(year_text: str) -> int:
    year = int(year_text)
    return year + 2000 if year < 100 else year


def parse_date(text: Optional[str], context=None) -> Optional[date]:
    """
    Parse a statement date token.

    Formats are tried in order: numeric day/month/year forms, month-name forms
    (``02 Apr 2024``, ``2 April``), numeric ``DD/MM``, then a pandas day-first
    fallback. Forms without a year use ``context.default_year``.

    Args:
        text: Date text
        context: ParsingContext supplying the default year (optional)

    Returns:
        Parsed date or None. Callers that need a date fall back to the
        statement date explicitly via ``resolve_date``.

    Example:
        >>> parse_date("23/02/2023")
        datetime.date(2023, 2, 23)
    """
    if text is None:
        return None
    txt = str(text).strip()
    if not txt:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(txt, fmt).date()
        except ValueError:
            continue

    default_year = getattr(context, "default_year", None)

    match = _MONTH_NAME_DATE.match(txt)
    if match:
        month = month_number(match.group("month"))
        if month is None:
            return None
        if match.group("year"):
            year = _expand_year(match.group("year"))
        elif default_year:
            year = default_year
        else:
            return None
        return build_date(year, month, int(match.group("day")))

    match = _DAY_MONTH_NUMERIC.match(txt)
    if match:
        if not default_year:
            return None
        return build_date(default_year, int(match.group("month")), int(match.group("day")))

    # Last resort for unusual day-first layouts; never for bare words or numbers
    if len(txt) < 6 or not any(ch.isdigit() for ch in txt) or not any(not ch.isdigit() for ch in txt):
        return None
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        parsed = pd.to_datetime(txt, dayfirst=True, errors="coerce")
    if pd.notna(parsed):
        return parsed.date()
    return None


def resolve_date(parsed: Optional[date], context) -> date:
    """Return ``parsed`` or, when it is missing, the statement date."""
    return parsed if parsed is not None else context.statement_date
