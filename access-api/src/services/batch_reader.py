import logging
from dataclasses import dataclass
from typing import Any, List, Tuple

from dto.schemas import ParseResult, RowOutcome
from services.errors import InvalidRequest
from services.row_validator import validator_for
from services.table_reader import TableReader
from services.type_detector import detect_data_type

logger = logging.getLogger(__name__)


@dataclass
class BatchPage:
    columns: List[str]
    data_type: str
    total_rows: int
    rows: List[RowOutcome]
    has_more: bool


def fetch_page(
    reader: TableReader,
    handle: Any,
    table_name: str,
    offset: int,
    limit: int,
) -> BatchPage:
    """
    Validate rows ``[offset, offset + limit)`` of a table.

    The reader cannot paginate, so the whole table is loaded and sliced on
    every call. Row numbers are global: ``offset + i + 1``.
    """
    if offset < 0:
        raise InvalidRequest("offset inválido")
    if limit <= 0:
        raise InvalidRequest("limit inválido")

    columns = reader.get_columns(handle, table_name)
    total_rows = reader.get_row_count(handle, table_name)
    sliced = reader.get_all_rows(handle, table_name)[offset : offset + limit]

    data_type = detect_data_type(columns)
    validate = validator_for(data_type)

    rows = [
        validate(row, columns, offset + i) for i, row in enumerate(sliced)
    ]
    has_more = offset + len(rows) < total_rows

    logger.info(
        f"[parse-table-batch] Table={table_name}, offset={offset}, "
        f"returned {len(rows)} rows, hasMore={has_more}"
    )
    return BatchPage(
        columns=columns,
        data_type=data_type,
        total_rows=total_rows,
        rows=rows,
        has_more=has_more,
    )


def parse_table(
    reader: TableReader, handle: Any, table_name: str
) -> Tuple[ParseResult, str]:
    """
    Validate every row of a table. Returns ``(ParseResult, data_type)``.
    """
    columns = reader.get_columns(handle, table_name)
    data = reader.get_all_rows(handle, table_name)

    data_type = detect_data_type(columns)
    logger.info(f"[parse-table] Detected data type: {data_type} for table {table_name}")
    validate = validator_for(data_type)

    result = ParseResult(total_rows=len(data))
    for i, row in enumerate(data):
        outcome = validate(row, columns, i)
        if outcome.is_valid:
            result.success.append(outcome)
        else:
            result.failed.append(outcome)

    logger.info(
        f"[parse-table] Processed {result.total_rows} rows: "
        f"{len(result.success)} valid, {len(result.failed)} failed"
    )
    return result, data_type
