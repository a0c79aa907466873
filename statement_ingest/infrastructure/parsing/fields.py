"""Cell-level classifiers and tolerant parsers for statement fields.

Every function here is total: malformed input degrades to a neutral value
(zero, ``None``, ``MovementCategory.OTHER`` or ``UNKNOWN_DATE``) instead of
raising.
"""
from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation

from statement_ingest.domain.models import (
    INSTRUMENT_CATEGORIES,
    UNKNOWN_DATE,
    Currency,
    MovementCategory,
)


def fold(text: str) -> str:
    """Lower-case ``text`` and strip accents so ``Depósito`` matches ``deposito``."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


# Evaluated top to bottom, first hit wins. "caucion" must stay ahead of
# "liquidacion": a "Liquidación Caución" row is a repo placement.
CATEGORY_KEYWORDS: tuple[tuple[MovementCategory, tuple[str, ...]], ...] = (
    (MovementCategory.PURCHASE, ("compra",)),
    (MovementCategory.SALE, ("venta",)),
    (MovementCategory.DEPOSIT, ("deposito",)),
    (MovementCategory.WITHDRAWAL, ("extraccion",)),
    (MovementCategory.DIVIDEND, ("dividendo",)),
    (MovementCategory.REPO_LENDING, ("caucion",)),
    (MovementCategory.REPO_SETTLEMENT, ("liquidacion",)),
    (MovementCategory.FUND_SUBSCRIPTION, ("suscripcion",)),
    (MovementCategory.FUND_REDEMPTION, ("rescate",)),
    (MovementCategory.CREDIT, ("credito",)),
)

CURRENCY_KEYWORDS: tuple[tuple[Currency, tuple[str, ...]], ...] = (
    (Currency.ARS, ("peso",)),
    (Currency.USD, ("dolar", "usd", "u$s")),
    (Currency.EUR, ("euro",)),
)

_TICKER_RE = re.compile(r"\(([^)]+)\)")


def classify_movement(label: str | None) -> tuple[MovementCategory, str | None]:
    """Split a ``"Compra (YPFD)"`` style label into category and ticker."""
    text = (label or "").strip()
    if not text:
        return MovementCategory.OTHER, None

    ticker = None
    match = _TICKER_RE.search(text)
    if match:
        ticker = match.group(1).strip() or None

    head = fold(text.split("(", 1)[0].strip())
    category = MovementCategory.OTHER
    for candidate, keywords in CATEGORY_KEYWORDS:
        if any(keyword in head for keyword in keywords):
            category = candidate
            break

    if category not in INSTRUMENT_CATEGORIES:
        ticker = None
    return category, ticker


def classify_currency(label: str | None) -> Currency:
    text = fold((label or "").strip())
    for currency, keywords in CURRENCY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return currency
    return Currency.ARS


def parse_int(value: object) -> int:
    if value is None:
        return 0
    s = str(value).strip().replace(".", "").replace(",", "")
    if not s:
        return 0
    try:
        return int(s)
    except ValueError:
        return 0


_GROUPED_DOTS_RE = re.compile(r"^\d{1,3}(\.\d{3})+$")
_PLAIN_NUMBER_RE = re.compile(r"^(\d+(\.\d*)?|\.\d+)$")


def _normalize_separators(s: str) -> str:
    # es-AR: "," is the decimal mark and "." groups thousands. A lone "."
    # that cannot be a grouping separator is read as a decimal point.
    if "," in s and "." in s:
        if s.rfind(",") > s.rfind("."):
            return s.replace(".", "").replace(",", ".")
        return s.replace(",", "")
    if "," in s:
        if s.count(",") > 1:
            return s.replace(",", "")
        return s.replace(",", ".")
    if "." in s and (s.count(".") > 1 or _GROUPED_DOTS_RE.match(s)):
        return s.replace(".", "")
    return s


def parse_decimal(value: object) -> Decimal:
    if value is None:
        return Decimal("0")
    s = str(value).strip()
    if not s or s.upper() == "NAN":
        return Decimal("0")
    negative = False
    if s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1]
    for token in ("US$", "U$S", "$", "€", "\xa0", " "):
        s = s.replace(token, "")
    if s[:1] in "+-":
        negative = negative != (s[0] == "-")
        s = s[1:]
    s = _normalize_separators(s)
    if not _PLAIN_NUMBER_RE.match(s):
        return Decimal("0")
    try:
        result = Decimal(s)
    except InvalidOperation:
        return Decimal("0")
    return -result if negative else result


DATE_FORMATS = (
    "%d/%m/%Y",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%d/%m/%y",
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
)

# Serial day 1 is 1900-01-01; Excel also counts a non-existent 1900-02-29.
SERIAL_EPOCH = date(1900, 1, 1)
SERIAL_OFFSET_DAYS = 2
MAX_SERIAL = 2958465  # 9999-12-31


def parse_date(value: object) -> date:
    """Parse a statement date, returning ``UNKNOWN_DATE`` when impossible."""
    if value is None:
        return UNKNOWN_DATE
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if not s:
        return UNKNOWN_DATE

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue

    try:
        serial = int(s)
    except ValueError:
        return UNKNOWN_DATE
    if not 1 <= serial <= MAX_SERIAL:
        return UNKNOWN_DATE
    return serial_to_date(serial)


def serial_to_date(serial: int) -> date:
    return SERIAL_EPOCH + timedelta(days=serial - SERIAL_OFFSET_DAYS)
