"""Shared pytest fixtures for all tests."""

import os
import tempfile
from typing import Any, Dict, List, Set, Tuple

import pytest
from fastapi.testclient import TestClient

# Keep the module-level app in main.py from writing into the working tree
os.environ.setdefault("UPLOADS_DIR", tempfile.mkdtemp(prefix="access-api-tests-"))

from config import Settings  # noqa: E402
from main import create_app  # noqa: E402
from services.errors import MalformedFile, TableNotFound
from services.file_manager import ChunkStore
from services.session_cache import FileSessionCache
from services.upload_registry import UploadSessionRegistry

CORRUPT_MARKER = b"CORRUPT"

WELLS_COLUMNS = [
    "Nome do Poço",
    "Bloco",
    "Campo",
    "Província",
    "Latitude",
    "Longitude",
    "Profundidade",
    "Tipo",
    "Status",
]

WELLS_ROWS = [
    {
        "Nome do Poço": f"POCO-{i}",
        "Bloco": "B-15",
        "Campo": "Kizomba",
        "Província": "Cabinda",
        "Latitude": "-8,5",
        "Longitude": 13.2,
        "Profundidade": "2500 m",
        "Tipo": "Petróleo",
        "Status": "Ativo",
    }
    for i in range(4)
] + [
    {
        "Nome do Poço": None,
        "Bloco": "B-15",
        "Campo": "Kizomba",
        "Província": "Cabinda",
        "Latitude": 95,
        "Longitude": 13.2,
        "Profundidade": 100,
        "Tipo": "oil",
        "Status": "active",
    }
]

PRODUCTION_COLUMNS = ["WLBR_ID", "WLBR_NM", "DAYTIME", "OIL", "WATER", "GAS", "BHP"]

PRODUCTION_ROWS = [
    {
        "WLBR_ID": "W-1",
        "WLBR_NM": "Well one",
        "DAYTIME": "2024-03-01 06:00:00",
        "OIL": "1200,5",
        "WATER": 30,
        "GAS": None,
        "BHP": "210",
    },
    {
        "WLBR_ID": "",
        "WLBR_NM": None,
        "DAYTIME": "xyz",
        "OIL": 1,
        "WATER": 2,
        "GAS": 3,
        "BHP": 4,
    },
]


class FakeTableReader:
    """In-memory stand-in for the Access reader.

    Any readable file opens to the same set of tables, unless its content
    starts with CORRUPT_MARKER.
    """

    def __init__(self, tables: Dict[str, Tuple[List[str], List[Dict[str, Any]]]]):
        self.tables = tables
        self.opened: List[str] = []
        # Tables read and not yet released
        self.loaded: Set[str] = set()

    def open(self, file_path: str) -> str:
        with open(file_path, "rb") as f:
            if f.read(len(CORRUPT_MARKER)) == CORRUPT_MARKER:
                raise MalformedFile("Arquivo Access inválido")
        self.opened.append(file_path)
        return file_path

    def list_tables(self, handle: Any) -> List[str]:
        return list(self.tables.keys())

    def _table(self, table_name: str):
        if table_name not in self.tables:
            raise TableNotFound(f"Tabela não encontrada: {table_name}")
        self.loaded.add(table_name)
        return self.tables[table_name]

    def get_columns(self, handle: Any, table_name: str) -> List[str]:
        return list(self._table(table_name)[0])

    def get_row_count(self, handle: Any, table_name: str) -> int:
        return len(self._table(table_name)[1])

    def get_all_rows(self, handle: Any, table_name: str) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._table(table_name)[1]]

    def release(self, handle: Any, table_name: str) -> None:
        self.loaded.discard(table_name)


@pytest.fixture
def fake_reader() -> FakeTableReader:
    return FakeTableReader(
        {
            "Pocos": (WELLS_COLUMNS, WELLS_ROWS),
            "Producao": (PRODUCTION_COLUMNS, PRODUCTION_ROWS),
        }
    )


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(UPLOADS_DIR=str(tmp_path / "uploads"), CHUNK_SIZE_BYTES=1024)


@pytest.fixture
def test_client(test_settings: Settings, fake_reader: FakeTableReader):
    app = create_app(test_settings, fake_reader)
    with TestClient(app) as client:
        yield client


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def chunk_store(tmp_path) -> ChunkStore:
    return ChunkStore(str(tmp_path / "uploads" / "_chunks"))


@pytest.fixture
def file_sessions(clock: FakeClock) -> FileSessionCache:
    return FileSessionCache(timeout_seconds=60 * 60, clock=clock)


@pytest.fixture
def upload_registry(
    tmp_path, chunk_store: ChunkStore, file_sessions: FileSessionCache, clock: FakeClock
) -> UploadSessionRegistry:
    return UploadSessionRegistry(
        store=chunk_store,
        uploads_dir=str(tmp_path / "uploads"),
        file_sessions=file_sessions,
        timeout_seconds=2 * 60 * 60,
        clock=clock,
    )


def write_file(path, content: bytes = b"data") -> str:
    os.makedirs(os.path.dirname(str(path)), exist_ok=True)
    with open(path, "wb") as f:
        f.write(content)
    return str(path)
