import logging
from typing import Iterable, Sequence

from services.mappings import (
    PRODUCTION,
    PRODUCTION_INDICATORS,
    WELLS,
    WELLS_INDICATORS,
)

logger = logging.getLogger(__name__)


def count_indicator_matches(
    columns: Sequence[str], indicators: Iterable[str]
) -> int:
    """
    Number of indicators found as a substring of at least one column name.
    Column names must already be lower-cased.
    """
    return sum(1 for ind in indicators if any(ind in col for col in columns))


def detect_data_type(
    columns: Iterable[str],
    production_indicators: Iterable[str] = PRODUCTION_INDICATORS,
    wells_indicators: Iterable[str] = WELLS_INDICATORS,
) -> str:
    """
    Classify a table as ``production`` or ``wells`` from its column names.

    Production wins only with strictly more indicator hits; ties and empty
    tables are treated as wells.
    """
    normalized = [str(c).lower() for c in columns]
    production_matches = count_indicator_matches(normalized, production_indicators)
    wells_matches = count_indicator_matches(normalized, wells_indicators)

    logger.info(
        f"[detectDataType] production={production_matches}, wells={wells_matches}"
    )
    return PRODUCTION if production_matches > wells_matches else WELLS
