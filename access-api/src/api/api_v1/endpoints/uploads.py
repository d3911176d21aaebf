from typing import Optional

from api.api_v1.endpoints.common import list_session_tables, parse_int_field
from api.deps import (
    get_file_sessions,
    get_settings,
    get_table_reader,
    get_upload_registry,
)
from config import Settings
from dto.schemas import (
    SuccessResponse,
    TablesResponse,
    UploadIdRequest,
    UploadInitRequest,
    UploadInitResponse,
    UploadStatusResponse,
)
from fastapi import APIRouter, Depends, File, Form, UploadFile
from services.errors import InvalidRequest, PayloadTooLarge
from services.session_cache import FileSessionCache
from services.table_reader import TableReader
from services.upload_registry import UploadSessionRegistry

router = APIRouter()


@router.post("/upload-init", response_model=UploadInitResponse)
async def upload_init(
    body: UploadInitRequest,
    settings: Settings = Depends(get_settings),
    uploads: UploadSessionRegistry = Depends(get_upload_registry),
):
    session = uploads.init(body.filename, body.size, body.total_chunks)
    return UploadInitResponse(
        upload_id=session.upload_id, chunk_size=settings.CHUNK_SIZE_BYTES
    )


@router.get("/upload-status", response_model=UploadStatusResponse)
async def upload_status(
    uploadId: Optional[str] = None,
    uploads: UploadSessionRegistry = Depends(get_upload_registry),
):
    upload_id = (uploadId or "").strip()
    if not upload_id:
        raise InvalidRequest("uploadId não fornecido")

    status = uploads.status(upload_id)
    return UploadStatusResponse(
        upload_id=upload_id,
        total_chunks=status.total_chunks,
        received=status.received,
        received_indices=status.received_indices,
    )


@router.post(
    "/upload-chunk", response_model=SuccessResponse, response_model_exclude_none=True
)
async def upload_chunk(
    uploadId: Optional[str] = Form(None),
    index: Optional[str] = Form(None),
    totalChunks: Optional[str] = Form(None),
    chunk: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_settings),
    uploads: UploadSessionRegistry = Depends(get_upload_registry),
):
    if not uploadId:
        raise InvalidRequest("uploadId não fornecido")

    chunk_index = parse_int_field(index)
    if chunk_index is None or chunk_index < 0:
        raise InvalidRequest("index inválido")

    total_chunks = parse_int_field(totalChunks)
    if total_chunks is None or total_chunks <= 0:
        raise InvalidRequest("totalChunks inválido")

    if chunk is None:
        raise InvalidRequest("Chunk não fornecido")

    content = await chunk.read()
    if len(content) > settings.MAX_CHUNK_PAYLOAD_BYTES:
        raise PayloadTooLarge(
            f"Chunk excede o limite de {settings.MAX_CHUNK_PAYLOAD_BYTES} bytes"
        )

    await uploads.accept_chunk(uploadId, chunk_index, total_chunks, content)
    return SuccessResponse()


@router.post("/upload-complete", response_model=TablesResponse)
async def upload_complete(
    body: UploadIdRequest,
    uploads: UploadSessionRegistry = Depends(get_upload_registry),
    file_sessions: FileSessionCache = Depends(get_file_sessions),
    reader: TableReader = Depends(get_table_reader),
):
    session = await uploads.complete(body.upload_id)
    return await list_session_tables(reader, file_sessions, session, "upload-complete")


@router.post(
    "/upload-abort", response_model=SuccessResponse, response_model_exclude_none=True
)
async def upload_abort(
    body: Optional[UploadIdRequest] = None,
    uploads: UploadSessionRegistry = Depends(get_upload_registry),
):
    uploads.abort(body.upload_id if body else None)
    return SuccessResponse()
