import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from api.api_v1.api import api_router
from config import Settings, settings
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from services.cleanup import run_cleanup_loop
from services.errors import IngestError
from services.file_manager import ChunkStore
from services.session_cache import FileSessionCache
from services.table_reader import AccessTableReader, TableReader
from services.upload_registry import UploadSessionRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Start the periodic expiry sweep; stop it on shutdown.
    """
    cfg: Settings = app.state.settings
    cleanup_task = asyncio.create_task(
        run_cleanup_loop(
            app.state.file_sessions, app.state.uploads, cfg.CLEANUP_INTERVAL_SECONDS
        )
    )
    logger.info(f"Access Parser Server ready, uploads in {cfg.UPLOADS_DIR}")

    yield

    cleanup_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await cleanup_task


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": message}
    )


def create_app(
    app_settings: Optional[Settings] = None,
    table_reader: Optional[TableReader] = None,
) -> FastAPI:
    cfg = app_settings or settings

    app = FastAPI(title="Access Ingestion API", lifespan=lifespan)

    file_sessions = FileSessionCache(cfg.SESSION_TIMEOUT_SECONDS)
    app.state.settings = cfg
    app.state.file_sessions = file_sessions
    app.state.uploads = UploadSessionRegistry(
        store=ChunkStore(cfg.CHUNKS_DIR),
        uploads_dir=cfg.UPLOADS_DIR,
        file_sessions=file_sessions,
        timeout_seconds=cfg.CHUNK_UPLOAD_TIMEOUT_SECONDS,
        max_filename_length=cfg.MAX_FILENAME_LENGTH,
        default_filename=cfg.DEFAULT_FILENAME,
    )
    app.state.table_reader = table_reader or AccessTableReader()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(IngestError)
    async def ingest_error_handler(request: Request, exc: IngestError):
        logger.error(f"[{request.url.path}] {exc.message}")
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Requisição inválida") if errors else "Requisição inválida"
        return _error_response(400, message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"[{request.url.path}] Error: {exc}")
        return _error_response(500, str(exc) or "Erro interno do servidor")

    # Clients call the routes at the root; /api/v1 is kept for versioned access
    app.include_router(api_router)
    app.include_router(api_router, prefix="/api/v1")

    return app


logging.basicConfig(level=settings.LOG_LEVEL)

app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)
