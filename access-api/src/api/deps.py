from config import Settings
from fastapi import Request
from services.session_cache import FileSessionCache
from services.table_reader import TableReader
from services.upload_registry import UploadSessionRegistry


# Dependencies resolved from app.state, populated by main.create_app().
# Usage:
#     @router.post("/items")
#     def handler(cache: FileSessionCache = Depends(get_file_sessions)):
#         ...


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_file_sessions(request: Request) -> FileSessionCache:
    return request.app.state.file_sessions


def get_upload_registry(request: Request) -> UploadSessionRegistry:
    return request.app.state.uploads


def get_table_reader(request: Request) -> TableReader:
    return request.app.state.table_reader
