"""Tests for file sessions and the expiry sweep."""

import os

import pytest

from conftest import write_file
from services.cleanup import sweep_expired
from services.errors import SessionExpired, SessionNotFound
from services.session_cache import FileSessionCache

TTL = 60 * 60


class TestFileSessionCache:
    def test_register_and_get(self, file_sessions: FileSessionCache, tmp_path):
        path = write_file(tmp_path / "a.accdb")
        session = file_sessions.register(path, "a.accdb")

        assert len(session.session_id) == 32
        assert file_sessions.get(session.session_id).file_path == os.path.abspath(path)
        assert len(file_sessions) == 1

    def test_get_refreshes_activity(self, file_sessions, clock, tmp_path):
        session = file_sessions.register(write_file(tmp_path / "a.accdb"), "a.accdb")
        clock.advance(TTL - 1)
        file_sessions.get(session.session_id)
        clock.advance(TTL - 1)

        assert file_sessions.expire() == []

    @pytest.mark.parametrize("session_id", [None, "", "unknown"])
    def test_unknown_session(self, file_sessions: FileSessionCache, session_id):
        with pytest.raises(SessionNotFound):
            file_sessions.get(session_id)

    def test_missing_file_purges_session(self, file_sessions, tmp_path):
        path = write_file(tmp_path / "a.accdb")
        session = file_sessions.register(path, "a.accdb")
        os.unlink(path)

        with pytest.raises(SessionExpired):
            file_sessions.get(session.session_id)
        assert session.session_id not in file_sessions

    def test_clear_deletes_file(self, file_sessions, tmp_path):
        path = write_file(tmp_path / "a.accdb")
        session = file_sessions.register(path, "a.accdb")

        assert file_sessions.clear(session.session_id) is True
        assert not os.path.exists(path)
        assert file_sessions.clear(session.session_id) is False
        assert file_sessions.clear(None) is False

    def test_expire_deletes_file(self, file_sessions, clock, tmp_path):
        stale_path = write_file(tmp_path / "stale.accdb")
        fresh_path = write_file(tmp_path / "fresh.accdb")
        stale = file_sessions.register(stale_path, "stale.accdb")
        fresh = file_sessions.register(fresh_path, "fresh.accdb")
        stale.last_activity = clock.now - TTL - 0.001
        fresh.last_activity = clock.now - 0.001

        assert file_sessions.expire() == [stale.session_id]
        assert not os.path.exists(stale_path)
        assert os.path.exists(fresh_path)
        assert fresh.session_id in file_sessions

    def test_expire_tolerates_delete_failure(self, file_sessions, clock, tmp_path, monkeypatch):
        session = file_sessions.register(write_file(tmp_path / "a.accdb"), "a.accdb")
        clock.advance(TTL + 1)

        def failing_unlink(path):
            raise PermissionError("locked")

        monkeypatch.setattr(os, "unlink", failing_unlink)

        assert file_sessions.expire() == [session.session_id]
        assert session.session_id not in file_sessions


class TestSweepExpired:
    def test_sweeps_both_registries(self, file_sessions, upload_registry, clock, tmp_path):
        file_session = file_sessions.register(write_file(tmp_path / "a.accdb"), "a.accdb")
        upload = upload_registry.init("b.accdb")

        clock.advance(TTL + 1)
        result = sweep_expired(file_sessions, upload_registry)

        # Chunk uploads live for two hours, file sessions for one
        assert result == {"sessions": [file_session.session_id], "uploads": []}
        assert upload.upload_id in upload_registry

        clock.advance(TTL)
        result = sweep_expired(file_sessions, upload_registry)
        assert result == {"sessions": [], "uploads": [upload.upload_id]}
