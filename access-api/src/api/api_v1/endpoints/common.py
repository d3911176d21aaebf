import logging
import math
from typing import Any, Optional

from dto.schemas import TablesResponse
from services.session_cache import FileSession, FileSessionCache
from services.table_reader import TableReader, read_table_listing
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


def parse_int_field(raw: Any) -> Optional[int]:
    """
    Read an integer form field. Returns None for missing, non-numeric or
    fractional values.
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        number = float(str(raw).strip())
    except ValueError:
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)


async def list_session_tables(
    reader: TableReader,
    file_sessions: FileSessionCache,
    session: FileSession,
    tag: str,
) -> TablesResponse:
    """
    Read the table listing of a freshly registered session.

    If the file cannot be read the session is dropped again, so a broken
    upload does not linger until expiry.
    """
    try:
        tables = await run_in_threadpool(read_table_listing, reader, session.file_path)
    except Exception:
        file_sessions.clear(session.session_id)
        raise

    logger.info(f"[{tag}] Found {len(tables)} tables")
    return TablesResponse(tables=tables, session_id=session.session_id)
