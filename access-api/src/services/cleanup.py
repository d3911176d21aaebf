import asyncio
import logging
from typing import Optional

from services.session_cache import FileSessionCache
from services.upload_registry import UploadSessionRegistry
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


def sweep_expired(
    file_sessions: FileSessionCache,
    uploads: UploadSessionRegistry,
    now: Optional[float] = None,
) -> dict:
    """
    Evict idle file sessions and chunk uploads, deleting their files.
    """
    expired_sessions = file_sessions.expire(now)
    expired_uploads = uploads.expire(now)
    if expired_sessions or expired_uploads:
        logger.info(
            f"[cleanup] Expired {len(expired_sessions)} sessions, "
            f"{len(expired_uploads)} chunk uploads"
        )
    return {"sessions": expired_sessions, "uploads": expired_uploads}


async def run_cleanup_loop(
    file_sessions: FileSessionCache,
    uploads: UploadSessionRegistry,
    interval_seconds: float,
) -> None:
    """
    Sweep forever on a fixed interval. Cancelled on application shutdown.
    """
    logger.info(f"[cleanup] Sweeping every {interval_seconds}s")
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await run_in_threadpool(sweep_expired, file_sessions, uploads)
        except Exception as e:
            logger.exception(f"[cleanup] Sweep failed: {e}")
