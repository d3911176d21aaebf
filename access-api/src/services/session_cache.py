import logging
import os
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from services.errors import SessionExpired, SessionNotFound
from services.file_manager import remove_file

logger = logging.getLogger(__name__)


def generate_session_id() -> str:
    return secrets.token_hex(16)


@dataclass
class FileSession:
    session_id: str
    file_path: str
    filename: str
    last_activity: float


class FileSessionCache:
    """
    Maps session ids to uploaded files kept on disk, so clients can list
    tables once and then parse them without re-uploading.

    Sessions idle for longer than ``timeout_seconds`` are evicted by
    ``expire()`` and their backing file is deleted.
    """

    def __init__(
        self,
        timeout_seconds: float,
        clock: Callable[[], float] = time.time,
    ):
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._sessions: Dict[str, FileSession] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def register(
        self, file_path: str, filename: str, session_id: Optional[str] = None
    ) -> FileSession:
        session = FileSession(
            session_id=session_id or generate_session_id(),
            file_path=os.path.abspath(file_path),
            filename=filename,
            last_activity=self._clock(),
        )
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info(
            f"[cache] Created session: {session.session_id} ({session.filename})"
        )
        return session

    def get(self, session_id: Optional[str]) -> FileSession:
        """
        Look up a session and refresh its activity time.

        Raises SessionNotFound for unknown ids. A session whose file has
        disappeared is purged and reported as SessionExpired.
        """
        with self._lock:
            session = self._sessions.get(session_id) if session_id else None
            if session is None:
                raise SessionNotFound("Sessão não encontrada. Faça upload novamente.")
            session.last_activity = self._clock()

        if not os.path.exists(session.file_path):
            with self._lock:
                self._sessions.pop(session.session_id, None)
            logger.warning(
                f"[cache] File missing for session {session.session_id}: {session.file_path}"
            )
            raise SessionExpired(
                "Arquivo da sessão não encontrado. Faça upload novamente."
            )
        return session

    def clear(self, session_id: Optional[str]) -> bool:
        """
        Drop a session and delete its file. Returns False if it was unknown.
        """
        with self._lock:
            session = self._sessions.pop(session_id, None) if session_id else None
        if session is None:
            return False

        self._delete_file(session, "clear-session")
        logger.info(f"[clear-session] Deleted session: {session.session_id}")
        return True

    def expire(self, now: Optional[float] = None) -> List[str]:
        now = self._clock() if now is None else now
        with self._lock:
            expired = [
                s
                for s in self._sessions.values()
                if now - s.last_activity > self.timeout_seconds
            ]
            for session in expired:
                del self._sessions[session.session_id]

        for session in expired:
            logger.info(f"[cache] Expiring session: {session.session_id}")
            self._delete_file(session, "cache")
        return [s.session_id for s in expired]

    @staticmethod
    def _delete_file(session: FileSession, tag: str) -> None:
        try:
            if remove_file(session.file_path):
                logger.info(f"[{tag}] Deleted file: {session.file_path}")
        except OSError as e:
            logger.error(f"[{tag}] Failed to delete file: {session.file_path}: {e}")
