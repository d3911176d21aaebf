import logging
import os
from typing import Optional

from api.api_v1.endpoints.common import list_session_tables
from api.deps import get_file_sessions, get_settings, get_table_reader
from config import Settings
from dto.schemas import (
    ListTablesFromUrlRequest,
    ParseTableBatchRequest,
    ParseTableBatchResponse,
    ParseTableResponse,
    SessionRequest,
    SuccessResponse,
    TablesResponse,
)
from fastapi import APIRouter, Depends, File, Form, UploadFile
from services.batch_reader import fetch_page, parse_table
from services.downloader import download_file
from services.errors import InvalidRequest
from services.file_manager import remove_file, sanitize_filename, save_upload
from services.session_cache import FileSessionCache, generate_session_id
from services.table_reader import TableReader
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/list-tables", response_model=TablesResponse)
async def list_tables(
    file: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_settings),
    file_sessions: FileSessionCache = Depends(get_file_sessions),
    reader: TableReader = Depends(get_table_reader),
):
    if file is None:
        raise InvalidRequest("Arquivo não fornecido")

    session_id = generate_session_id()
    filename = sanitize_filename(
        file.filename, settings.MAX_FILENAME_LENGTH, settings.DEFAULT_FILENAME
    )
    file_path = os.path.join(settings.UPLOADS_DIR, f"{session_id}-{filename}")
    size = await save_upload(file, file_path, settings.MAX_UPLOAD_SIZE_BYTES)

    logger.info(
        f"[list-tables] Processing file: {file.filename}, size: {size} bytes, path: {file_path}"
    )
    session = file_sessions.register(file_path, file.filename or filename, session_id)
    return await list_session_tables(reader, file_sessions, session, "list-tables")


@router.post("/list-tables-from-url", response_model=TablesResponse)
async def list_tables_from_url(
    body: ListTablesFromUrlRequest,
    settings: Settings = Depends(get_settings),
    file_sessions: FileSessionCache = Depends(get_file_sessions),
    reader: TableReader = Depends(get_table_reader),
):
    if not body.file_url:
        raise InvalidRequest("URL do arquivo não fornecida")

    logger.info(
        f"[list-tables-from-url] Downloading file from signed URL: {body.filename or 'unknown'}"
    )

    session_id = generate_session_id()
    filename = sanitize_filename(
        body.filename or settings.DEFAULT_DOWNLOAD_FILENAME,
        settings.MAX_FILENAME_LENGTH,
        settings.DEFAULT_DOWNLOAD_FILENAME,
    )
    file_path = os.path.join(settings.UPLOADS_DIR, f"{session_id}-{filename}")
    await run_in_threadpool(
        download_file, body.file_url, file_path, settings.DOWNLOAD_TIMEOUT_SECONDS
    )

    session = file_sessions.register(file_path, filename, session_id)
    return await list_session_tables(
        reader, file_sessions, session, "list-tables-from-url"
    )


@router.post("/parse-table-batch", response_model=ParseTableBatchResponse)
def parse_table_batch(
    body: ParseTableBatchRequest,
    settings: Settings = Depends(get_settings),
    file_sessions: FileSessionCache = Depends(get_file_sessions),
    reader: TableReader = Depends(get_table_reader),
):
    if not body.table_name:
        raise InvalidRequest("Nome da tabela não fornecido")

    limit = settings.DEFAULT_BATCH_LIMIT if body.limit is None else body.limit
    session = file_sessions.get(body.session_id)

    handle = reader.open(session.file_path)
    page = fetch_page(reader, handle, body.table_name, body.offset, limit)

    return ParseTableBatchResponse(
        table_name=body.table_name,
        columns=page.columns,
        data_type=page.data_type,
        total_rows=page.total_rows,
        offset=body.offset,
        limit=limit,
        rows=page.rows,
        has_more=page.has_more,
    )


@router.post("/parse-table", response_model=ParseTableResponse)
async def parse_full_table(
    tableName: Optional[str] = Form(None),
    sessionId: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_settings),
    file_sessions: FileSessionCache = Depends(get_file_sessions),
    reader: TableReader = Depends(get_table_reader),
):
    if not tableName:
        raise InvalidRequest("Nome da tabela não fornecido")

    temp_path = None
    if sessionId and sessionId in file_sessions:
        logger.info(f"[parse-table] Using cached file from session: {sessionId}")
        file_path = file_sessions.get(sessionId).file_path
    elif file is not None:
        filename = sanitize_filename(
            file.filename, settings.MAX_FILENAME_LENGTH, settings.DEFAULT_FILENAME
        )
        temp_path = os.path.join(
            settings.UPLOADS_DIR, f"{generate_session_id()}-{filename}"
        )
        size = await save_upload(file, temp_path, settings.MAX_UPLOAD_SIZE_BYTES)
        logger.info(
            f"[parse-table] Using uploaded file: {file.filename}, size: {size} bytes"
        )
        file_path = temp_path
    else:
        raise InvalidRequest(
            "Arquivo não fornecido. Sessão pode ter expirado - faça upload novamente."
        )

    logger.info(f"[parse-table] Processing table: {tableName}")
    try:
        result, data_type = await run_in_threadpool(
            _parse_file_table, reader, file_path, tableName
        )
    finally:
        if temp_path:
            try:
                remove_file(temp_path)
            except OSError as e:
                logger.warning(f"[parse-table] Failed to delete temp file: {e}")

    return ParseTableResponse(parse_result=result, data_type=data_type)


def _parse_file_table(reader: TableReader, file_path: str, table_name: str):
    handle = reader.open(file_path)
    return parse_table(reader, handle, table_name)


@router.post(
    "/clear-session", response_model=SuccessResponse, response_model_exclude_none=True
)
async def clear_session(
    body: Optional[SessionRequest] = None,
    file_sessions: FileSessionCache = Depends(get_file_sessions),
):
    if body and file_sessions.clear(body.session_id):
        return SuccessResponse()
    return SuccessResponse(success=False, error="Session not found")
