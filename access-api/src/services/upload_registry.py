"""
Registry of in-flight chunked uploads.

Lifecycle of one upload id::

    INITIATED -> RECEIVING -> ASSEMBLING -> COMPLETED (becomes a FileSession)

ABORTED and EXPIRED can be reached from any state before COMPLETED.

Chunks may arrive in any order and may be re-sent; the chunk store skips
indices that are already on disk. Completeness is only checked when the
client asks to complete the upload.
"""

import logging
import os
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from services.errors import InvalidRequest, SessionNotFound, UploadNotFound
from services.file_manager import (
    ChunkStore,
    assemble_chunks,
    ensure_dir,
    sanitize_filename,
)
from services.session_cache import FileSession, FileSessionCache

logger = logging.getLogger(__name__)

SESSION_NOT_FOUND_MESSAGE = "Upload não encontrado ou expirado. Reenvie o arquivo."


def generate_upload_id() -> str:
    return secrets.token_hex(16)


def positive_int(value: Any) -> Optional[int]:
    """
    Coerce a declared count/size to a positive int, or None when absent,
    non-numeric, or not positive.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number <= 0 or number == float("inf"):
        return None
    return int(number)


@dataclass
class UploadSession:
    upload_id: str
    dir_path: str
    filename: str
    total_chunks: Optional[int]
    size: Optional[int]
    last_activity: float
    assembling: bool = False


@dataclass
class UploadStatus:
    upload_id: str
    total_chunks: Optional[int]
    received_indices: List[int]

    @property
    def received(self) -> int:
        return len(self.received_indices)


class UploadSessionRegistry:
    def __init__(
        self,
        store: ChunkStore,
        uploads_dir: str,
        file_sessions: FileSessionCache,
        timeout_seconds: float,
        max_filename_length: int = 200,
        default_filename: str = "upload.accdb",
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.uploads_dir = uploads_dir
        self.file_sessions = file_sessions
        self.timeout_seconds = timeout_seconds
        self.max_filename_length = max_filename_length
        self.default_filename = default_filename
        self._clock = clock
        self._uploads: Dict[str, UploadSession] = {}
        self._lock = threading.Lock()
        ensure_dir(uploads_dir)

    def __len__(self) -> int:
        with self._lock:
            return len(self._uploads)

    def __contains__(self, upload_id: str) -> bool:
        with self._lock:
            return upload_id in self._uploads

    def init(
        self,
        filename: Any,
        size: Any = None,
        total_chunks: Any = None,
    ) -> UploadSession:
        if not filename or not isinstance(filename, str):
            raise InvalidRequest("Nome do arquivo inválido")

        upload_id = generate_upload_id()
        session = UploadSession(
            upload_id=upload_id,
            dir_path=self.store.create(upload_id),
            filename=sanitize_filename(
                filename, self.max_filename_length, self.default_filename
            ),
            total_chunks=positive_int(total_chunks),
            size=positive_int(size),
            last_activity=self._clock(),
        )
        with self._lock:
            self._uploads[upload_id] = session

        logger.info(
            f"[upload-init] uploadId={upload_id}, file={filename}, "
            f"size={size}, totalChunks={total_chunks}"
        )
        return session

    def _require(self, upload_id: Optional[str]) -> UploadSession:
        session = self._uploads.get(upload_id) if upload_id else None
        if session is None:
            raise SessionNotFound(SESSION_NOT_FOUND_MESSAGE)
        return session

    async def accept_chunk(
        self, upload_id: str, index: int, total_chunks: int, content: bytes
    ) -> bool:
        """
        Store one chunk. Returns False if the chunk was already present.
        """
        if index < 0:
            raise InvalidRequest("index inválido")
        if total_chunks <= 0:
            raise InvalidRequest("totalChunks inválido")

        with self._lock:
            session = self._require(upload_id)
            session.last_activity = self._clock()
            if not session.total_chunks:
                session.total_chunks = total_chunks

        written = await self.store.save_chunk(upload_id, index, content)

        # complete/abort may have dropped the upload while the chunk was
        # being written; the write would then leave an untracked directory.
        with self._lock:
            still_open = upload_id in self._uploads
        if not still_open:
            logger.warning(
                f"[upload-chunk] uploadId={upload_id} closed during write, "
                f"discarding chunk {index}"
            )
            try:
                self.store.remove(upload_id)
            except OSError as e:
                logger.error(f"[upload-chunk] Failed to delete dir: {e}")
            raise SessionNotFound(SESSION_NOT_FOUND_MESSAGE)

        return written

    def status(self, upload_id: Optional[str]) -> UploadStatus:
        with self._lock:
            session = self._uploads.get(upload_id) if upload_id else None
            if session is None:
                raise UploadNotFound(SESSION_NOT_FOUND_MESSAGE)
            total_chunks = session.total_chunks

        return UploadStatus(
            upload_id=upload_id,
            total_chunks=total_chunks,
            received_indices=self.store.received_indices(upload_id),
        )

    async def complete(self, upload_id: Optional[str]) -> FileSession:
        """
        Assemble all chunks into one durable file and hand it over to the
        file session cache. The upload id is gone afterwards.
        """
        with self._lock:
            session = self._require(upload_id)
            total_chunks = session.total_chunks
            if not total_chunks or total_chunks <= 0:
                raise InvalidRequest("totalChunks ausente/ inválido")
            if session.assembling:
                raise InvalidRequest("Upload já está sendo finalizado")
            session.assembling = True
            session.last_activity = self._clock()

        final_path = os.path.join(
            self.uploads_dir, f"{upload_id}-{session.filename}"
        )
        logger.info(
            f"[upload-complete] Assembling uploadId={upload_id} into {final_path}"
        )

        try:
            await assemble_chunks(self.store, upload_id, total_chunks, final_path)
        except BaseException:
            with self._lock:
                session.assembling = False
                session.last_activity = self._clock()
            raise

        with self._lock:
            self._uploads.pop(upload_id, None)

        try:
            self.store.remove(upload_id)
        except OSError as e:
            logger.warning(f"[upload-complete] Failed to delete chunks dir: {e}")

        return self.file_sessions.register(final_path, session.filename)

    def abort(self, upload_id: Optional[str]) -> None:
        with self._lock:
            session = self._uploads.pop(upload_id, None) if upload_id else None
        if session is None:
            return

        try:
            self.store.remove(upload_id)
        except OSError as e:
            logger.error(f"[upload-abort] Failed to delete dir: {session.dir_path}: {e}")
        logger.info(f"[upload-abort] Aborted uploadId={upload_id}")

    def expire(self, now: Optional[float] = None) -> List[str]:
        now = self._clock() if now is None else now
        with self._lock:
            expired = [
                s
                for s in self._uploads.values()
                if not s.assembling
                and now - s.last_activity > self.timeout_seconds
            ]
            for session in expired:
                del self._uploads[session.upload_id]

        for session in expired:
            logger.info(f"[chunks] Expiring upload: {session.upload_id}")
            try:
                self.store.remove(session.upload_id)
            except OSError as e:
                logger.error(
                    f"[chunks] Failed to delete dir: {session.dir_path}: {e}"
                )
        return [s.upload_id for s in expired]
