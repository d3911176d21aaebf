import logging
import os
import re
import shutil
import uuid
from typing import Any, List, Optional

import aiofiles
from services.errors import IncompleteUpload, PayloadTooLarge

logger = logging.getLogger(__name__)

UNSAFE_FILENAME_CHARS = re.compile(r'[/\\?%*:|"<>]')
CHUNK_SUFFIX = ".part"


def sanitize_filename(
    filename: Optional[str],
    max_length: int = 200,
    default: str = "upload.accdb",
) -> str:
    """
    Replace path-unsafe characters with underscores and bound the length.
    """
    name = str(filename or default)
    return UNSAFE_FILENAME_CHARS.sub("_", name)[:max_length]


def ensure_dir(dir_path: str) -> None:
    if not os.path.exists(dir_path):
        os.makedirs(dir_path, exist_ok=True)
        logger.info(f"📁 Created directory: {dir_path}")


def remove_file(file_path: str) -> bool:
    """
    Delete a file if present. Returns True when something was removed.
    """
    if file_path and os.path.exists(file_path):
        os.unlink(file_path)
        return True
    return False


class ChunkStore:
    """
    Disk storage for upload chunks: ``{chunks_dir}/{upload_id}/{index}.part``.
    """

    def __init__(self, chunks_dir: str):
        self.chunks_dir = chunks_dir
        ensure_dir(chunks_dir)

    def chunk_dir(self, upload_id: str) -> str:
        return os.path.join(self.chunks_dir, upload_id)

    def chunk_path(self, upload_id: str, index: int) -> str:
        return os.path.join(self.chunk_dir(upload_id), f"{index}{CHUNK_SUFFIX}")

    def create(self, upload_id: str) -> str:
        dir_path = self.chunk_dir(upload_id)
        ensure_dir(dir_path)
        return dir_path

    def has_chunk(self, upload_id: str, index: int) -> bool:
        return os.path.exists(self.chunk_path(upload_id, index))

    async def save_chunk(self, upload_id: str, index: int, content: bytes) -> bool:
        """
        Persist one chunk. Existing chunks are left untouched so client
        retries are safe. Returns True if the chunk was written.
        """
        ensure_dir(self.chunk_dir(upload_id))
        file_path = self.chunk_path(upload_id, index)

        if os.path.exists(file_path):
            logger.info(f"[chunks] Chunk {index} of {upload_id} already stored")
            return False

        # Write under a temporary name so a concurrent status call never
        # sees a half-written chunk.
        tmp_path = f"{file_path}.{uuid.uuid4().hex}.tmp"
        async with aiofiles.open(tmp_path, mode="wb") as f:
            await f.write(content)
        os.replace(tmp_path, file_path)

        logger.debug(
            f"💾 Saved chunk {index} of {upload_id} ({len(content)} bytes)"
        )
        return True

    def received_indices(self, upload_id: str) -> List[int]:
        dir_path = self.chunk_dir(upload_id)
        if not os.path.isdir(dir_path):
            return []

        indices = []
        for entry in os.scandir(dir_path):
            if not entry.is_file() or not entry.name.endswith(CHUNK_SUFFIX):
                continue
            stem = entry.name[: -len(CHUNK_SUFFIX)]
            if stem.isdigit():
                indices.append(int(stem))
        return sorted(indices)

    def first_missing(self, upload_id: str, total_chunks: int) -> Optional[int]:
        for index in range(total_chunks):
            if not self.has_chunk(upload_id, index):
                return index
        return None

    def remove(self, upload_id: str) -> None:
        dir_path = self.chunk_dir(upload_id)
        if os.path.exists(dir_path):
            shutil.rmtree(dir_path)
            logger.info(f"[chunks] Deleted dir: {dir_path}")


async def assemble_chunks(
    store: ChunkStore, upload_id: str, total_chunks: int, out_path: str
) -> int:
    """
    Concatenate chunks ``0..total_chunks-1`` into ``out_path``.

    Completeness is checked before the output file is opened. If copying
    fails partway, the partial output is removed before the error propagates.
    Returns the number of bytes written.
    """
    missing = store.first_missing(upload_id, total_chunks)
    if missing is not None:
        raise IncompleteUpload(missing, total_chunks)

    written = 0
    try:
        async with aiofiles.open(out_path, mode="wb") as out:
            for index in range(total_chunks):
                chunk_path = store.chunk_path(upload_id, index)
                if not os.path.exists(chunk_path):
                    raise IncompleteUpload(index, total_chunks)
                async with aiofiles.open(chunk_path, mode="rb") as part:
                    data = await part.read()
                await out.write(data)
                written += len(data)
    except BaseException:
        try:
            remove_file(out_path)
        except OSError as e:
            logger.error(f"[assemble] Failed to remove partial file {out_path}: {e}")
        raise

    logger.info(
        f"[assemble] Wrote {written} bytes from {total_chunks} chunks to {out_path}"
    )
    return written


async def save_upload(
    upload: Any, destination: str, max_bytes: int, block_size: int = 1024 * 1024
) -> int:
    """
    Stream an uploaded file (FastAPI ``UploadFile``) to disk.

    Raises PayloadTooLarge, removing the partial file, once more than
    ``max_bytes`` have been received.
    """
    written = 0
    try:
        async with aiofiles.open(destination, mode="wb") as f:
            while True:
                block = await upload.read(block_size)
                if not block:
                    break
                written += len(block)
                if written > max_bytes:
                    raise PayloadTooLarge(
                        f"Arquivo excede o limite de {max_bytes // (1024 * 1024)} MB"
                    )
                await f.write(block)
    except BaseException:
        remove_file(destination)
        raise

    logger.info(f"💾 Saved upload to {destination} ({written} bytes)")
    return written
