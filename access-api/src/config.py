import os
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage
    UPLOADS_DIR: str = "./uploads"
    CHUNKS_SUBDIR: str = "_chunks"

    # Chunked Upload
    CHUNK_SIZE_BYTES: int = 8 * 1024 * 1024
    CHUNK_OVERHEAD_BYTES: int = 1024 * 1024
    MAX_UPLOAD_SIZE_MB: int = 200

    # Session Lifetimes
    SESSION_TIMEOUT_MINUTES: int = 60
    CHUNK_UPLOAD_TIMEOUT_MINUTES: int = 120
    CLEANUP_INTERVAL_SECONDS: int = 300

    # Filenames
    MAX_FILENAME_LENGTH: int = 200
    DEFAULT_FILENAME: str = "upload.accdb"
    DEFAULT_DOWNLOAD_FILENAME: str = "download.accdb"

    # Table Parsing
    DEFAULT_BATCH_LIMIT: int = 1000

    # Remote Fetch
    DOWNLOAD_TIMEOUT_SECONDS: int = 120

    # API Configuration
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3000
    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    @property
    def CHUNKS_DIR(self) -> str:
        return os.path.join(self.UPLOADS_DIR, self.CHUNKS_SUBDIR)

    @property
    def MAX_UPLOAD_SIZE_BYTES(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def MAX_CHUNK_PAYLOAD_BYTES(self) -> int:
        return self.CHUNK_SIZE_BYTES + self.CHUNK_OVERHEAD_BYTES

    @property
    def SESSION_TIMEOUT_SECONDS(self) -> float:
        return self.SESSION_TIMEOUT_MINUTES * 60.0

    @property
    def CHUNK_UPLOAD_TIMEOUT_SECONDS(self) -> float:
        return self.CHUNK_UPLOAD_TIMEOUT_MINUTES * 60.0

    class Config:
        # Values can be overridden by environment variables or a local .env
        env_file = ".env"


settings = Settings()
