from datetime import datetime, timezone

from api.deps import get_file_sessions, get_settings, get_upload_registry
from config import Settings
from dto.schemas import HealthResponse
from fastapi import APIRouter, Depends
from services.session_cache import FileSessionCache
from services.upload_registry import UploadSessionRegistry

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_settings),
    file_sessions: FileSessionCache = Depends(get_file_sessions),
    uploads: UploadSessionRegistry = Depends(get_upload_registry),
):
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc),
        active_sessions=len(file_sessions),
        active_chunk_uploads=len(uploads),
        chunk_size_bytes=settings.CHUNK_SIZE_BYTES,
    )
