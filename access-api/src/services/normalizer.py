import math
import re
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from dateutil import parser as dateparser
from services.mappings import (
    COLUMN_MAPPINGS,
    PRODUCTION,
    WELLS,
    WELL_STATUS_TOKENS,
    WELL_TYPE_TOKENS,
)

NON_NUMERIC_CHARS = re.compile(r"[^\d.\-]")
LEADING_FLOAT = re.compile(r"^-?(\d+(\.\d*)?|\.\d+)")
# Missing month or day in a date string falls back to the first
DATE_DEFAULT = datetime(1900, 1, 1)


class ColumnNormalizer:
    """
    Maps raw column labels to canonical field names for one record kind.

    Labels are compared lower-cased and trimmed; unknown labels pass through
    in that normalized form.
    """

    def __init__(self, mappings: Mapping[str, Mapping[str, str]] = COLUMN_MAPPINGS):
        self.mappings = {
            kind: {key.strip().lower(): value for key, value in table.items()}
            for kind, table in mappings.items()
        }

    def normalize(self, name: Any, data_type: str) -> str:
        normalized = str(name).lower().strip()
        kind = PRODUCTION if data_type == PRODUCTION else WELLS
        table = self.mappings.get(kind, {})
        return table.get(normalized, normalized)

    def map_row(
        self, row: Mapping[str, Any], columns: Sequence[str], data_type: str
    ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Build the canonical view and the original view of one row.

        Returns ``(mapped, original)``. When two columns map to the same
        canonical name the later one wins.
        """
        mapped: Dict[str, Any] = {}
        original: Dict[str, Any] = {}
        for column in columns:
            value = row.get(column)
            original[column] = value
            mapped[self.normalize(column, data_type)] = value
        return mapped, original


def _normalize_token(value: Any, tokens: Mapping[str, Sequence[str]]) -> str:
    if not value:
        return ""
    normalized = str(value).lower().strip()
    for canonical, spellings in tokens.items():
        if normalized in spellings:
            return canonical
    return str(value)


def normalize_type(value: Any, tokens: Mapping[str, Sequence[str]] = WELL_TYPE_TOKENS) -> str:
    return _normalize_token(value, tokens)


def normalize_status(
    value: Any, tokens: Mapping[str, Sequence[str]] = WELL_STATUS_TOKENS
) -> str:
    return _normalize_token(value, tokens)


def parse_number(value: Any) -> Optional[float]:
    """
    Locale-tolerant numeric coercion.

    Numbers are returned unchanged. Anything else is stringified, the first
    comma becomes the decimal point, every character other than digits,
    ``.`` and ``-`` is dropped, and the longest leading float is parsed.
    So ``"1.234,56"`` reads as ``1.234`` and ``"12 m"`` as ``12``.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        value = str(value)
    elif isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return value
    elif isinstance(value, Decimal):
        return float(value) if value.is_finite() else None

    cleaned = NON_NUMERIC_CHARS.sub("", str(value).replace(",", ".", 1))
    match = LEADING_FLOAT.match(cleaned)
    if not match:
        return None
    return float(match.group(0))


def number_or_zero(value: Any) -> float:
    number = parse_number(value)
    return number if number else 0


def parse_date(value: Any) -> Optional[str]:
    """
    Coerce a cell to an ISO calendar date (``YYYY-MM-DD``), or None.

    Numbers are read as epoch milliseconds. Time of day is discarded;
    timezone-aware values are moved to UTC first.
    """
    if not value or isinstance(value, bool):
        return None

    try:
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, date):
            return value.isoformat()
        elif isinstance(value, (int, float, Decimal)):
            parsed = datetime.fromtimestamp(float(value) / 1000, tz=timezone.utc)
        else:
            parsed = dateparser.parse(str(value).strip(), default=DATE_DEFAULT)
    except (ValueError, OverflowError, OSError, TypeError):
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat()
