"""
Amount parsing utilities for statement lines.

Statement amounts arrive as OCR text: ``1,234.56``, ``54 882.66``,
``1310.00-``, ``7,500.00Cr``, ``R 1234.56``. Everything here returns ``None``
for text that is not an amount instead of raising.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import List, NamedTuple, Optional

MARKER_MINUS = "-"
MARKER_CREDIT = "CR"
MARKER_DEBIT = "DR"

_AMOUNT_TEXT = re.compile(
    r"""^
    (?P<open>\()?\s*
    (?P<lead>-)?\s*
    (?:ZAR|R|\$)?\s*
    (?P<lead2>-)?\s*
    (?P<number>\d[\d ,]*(?:\.\d+)?|\.\d+)
    \s*(?P<close>\))?
    \s*(?P<marker>-|[Cc][Rr]|[Dd][Rr])?
    $""",
    re.VERBOSE,
)

# comma thousands: 1,234.56 / 1234.56 with optional sign marker
_TOKEN_COMMA = re.compile(
    r"(?<![\d.,])(?P<number>\d{1,3}(?:,\d{3})+\.\d{2}|\d+\.\d{2})(?!\d)"
    r"(?P<marker>-|\s?(?:Cr|CR|Dr|DR)\b)?"
)

# space or comma thousands: 54 882.66 / 1 300.00
_TOKEN_SPACE = re.compile(
    r"(?<![\d.,])(?P<number>\d{1,3}(?:[ ,]\d{3})+\.\d{2}|\d+\.\d{2})(?!\d)"
    r"(?P<marker>-|\s?(?:Cr|CR|Dr|DR)\b)?"
)

_OCR_AMOUNT = re.compile(
    r"(?<![A-Za-z\d])(?P<token>[\dOolI]{1,3}(?:,[\dOolI]{3})+\.[\dOolI]{2}|[\dOolI]+\.[\dOolI]{2})"
    r"(?=-|Cr|CR|Dr|DR|\s|$)"
)
_OCR_TRANSLATION = str.maketrans({"O": "0", "o": "0", "l": "1", "I": "1"})


class AmountToken(NamedTuple):
    """An amount found on a line: unsigned value plus its explicit marker."""

    value: Decimal
    marker: Optional[str]
    start: int
    end: int
    text: str

    @property
    def is_minus(self) -> bool:
        return self.marker in (MARKER_MINUS, MARKER_DEBIT)

    @property
    def is_credit_marked(self) -> bool:
        return self.marker == MARKER_CREDIT


def _normalize_marker(raw: Optional[str]) -> Optional[str]:
    if not raw:
        return None
    raw = raw.strip().upper()
    return raw or None


def _to_decimal(number: str) -> Optional[Decimal]:
    cleaned = number.replace(",", "").replace(" ", "")
    if not cleaned or cleaned == ".":
        return None
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def parse_amount_token(text: Optional[str]) -> Optional[AmountToken]:
    """
    Parse a single amount token, keeping the explicit sign marker.

    Args:
        text: Token text such as ``"1,234.56-"`` or ``"7,500.00Cr"``

    Returns:
        AmountToken with the unsigned value, or None if not an amount

    Example:
        >>> parse_amount_token("1,310.00-").marker
        '-'
    """
    if text is None:
        return None
    stripped = str(text).strip()
    if not stripped:
        return None

    match = _AMOUNT_TEXT.match(stripped)
    if not match:
        return None
    if bool(match.group("open")) != bool(match.group("close")):
        return None

    value = _to_decimal(match.group("number"))
    if value is None:
        return None

    marker = _normalize_marker(match.group("marker"))
    if marker is None and (match.group("lead") or match.group("lead2") or match.group("open")):
        marker = MARKER_MINUS
    return AmountToken(value=abs(value), marker=marker, start=0, end=len(stripped), text=stripped)


def parse_amount(text: Optional[str]) -> Optional[Decimal]:
    """
    Parse an amount string into a signed Decimal.

    Thousands separators (comma or space) and currency markers are removed.
    A trailing ``-`` or ``Dr`` means negative, a trailing ``Cr`` means
    positive, parentheses mean negative.

    Args:
        text: Amount text

    Returns:
        Signed Decimal, or None for empty or non-numeric input

    Example:
        >>> parse_amount("1,234.56") == parse_amount("R 1234.56")
        True
        >>> parse_amount("1234.56-")
        Decimal('-1234.56')
    """
    token = parse_amount_token(text)
    if token is None:
        return None
    return -token.value if token.is_minus else token.value


def find_amount_tokens(text: str, allow_space_thousands: bool = False) -> List[AmountToken]:
    """
    Find amount-shaped tokens on a line, left to right.

    Only tokens with exactly two decimals count, so dates, reference numbers
    and ``MM DD`` columns are never mistaken for amounts.

    Args:
        text: Line or line fragment
        allow_space_thousands: Accept ``54 882.66`` style grouping (Absa)

    Returns:
        List of AmountToken with character offsets into ``text``
    """
    if not text:
        return []

    pattern = _TOKEN_SPACE if allow_space_thousands else _TOKEN_COMMA
    tokens = []
    for match in pattern.finditer(text):
        value = _to_decimal(match.group("number"))
        if value is None:
            continue
        tokens.append(
            AmountToken(
                value=value,
                marker=_normalize_marker(match.group("marker")),
                start=match.start(),
                end=match.end(),
                text=match.group(0),
            )
        )
    return tokens


def normalize_ocr_amounts(text: str) -> str:
    """
    Fix common OCR digit confusions inside amount-shaped tokens.

    Only ``O``/``o`` -> ``0`` and ``l``/``I`` -> ``1`` are corrected, and only
    in tokens that already look like an amount and contain a real digit.
    Words are never touched.

    Example:
        >>> normalize_ocr_amounts("FEE 1O.5O-")
        'FEE 10.50-'
    """
    if not text:
        return text

    def _fix(match: re.Match) -> str:
        token = match.group("token")
        if not any(ch.isdigit() for ch in token):
            return token
        return token.translate(_OCR_TRANSLATION)

    return _OCR_AMOUNT.sub(_fix, text)
