"""
Error taxonomy for the ingestion API.

Every error raised on purpose by the services carries the HTTP status it
should be reported with. The application-level exception handler turns them
into the JSON envelope ``{"success": false, "error": message}``.

Row-level validation problems are NOT exceptions: they are collected into
``RowOutcome.errors`` and never abort a table or batch.
"""

from typing import Optional


class IngestError(Exception):
    """Base class for request-scoped failures."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidRequest(IngestError):
    status_code = 400


class SessionNotFound(IngestError):
    """Upload or file session is unknown or already expired."""

    status_code = 400


class SessionExpired(IngestError):
    """Session exists but its backing file is gone."""

    status_code = 400


class UploadNotFound(IngestError):
    status_code = 404


class IncompleteUpload(IngestError):
    status_code = 400

    def __init__(self, missing_index: int, total_chunks: int):
        super().__init__(f"Chunk ausente: {missing_index}/{total_chunks - 1}")
        self.missing_index = missing_index
        self.total_chunks = total_chunks


class DownloadFailure(IngestError):
    status_code = 400


class PayloadTooLarge(IngestError):
    status_code = 413


class MalformedFile(IngestError):
    status_code = 500


class TableNotFound(IngestError):
    status_code = 500
