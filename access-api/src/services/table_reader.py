"""
Access (.mdb / .accdb) table reader.

The rest of the service only depends on the ``TableReader`` protocol:
list tables, columns of a table, its row count, and all of its rows. The
default implementation is backed by the ``access-parser`` package, which
has no pagination support, so a table is always materialized in full.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol

from access_parser import AccessParser
from dto.schemas import TableDescriptor
from services.errors import MalformedFile, TableNotFound

logger = logging.getLogger(__name__)

SYSTEM_TABLE_PREFIXES = ("MSys", "~")


class TableReader(Protocol):
    def open(self, file_path: str) -> Any: ...

    def list_tables(self, handle: Any) -> List[str]: ...

    def get_columns(self, handle: Any, table_name: str) -> List[str]: ...

    def get_row_count(self, handle: Any, table_name: str) -> int: ...

    def get_all_rows(self, handle: Any, table_name: str) -> List[Dict[str, Any]]: ...

    def release(self, handle: Any, table_name: str) -> None: ...


@dataclass
class AccessHandle:
    file_path: str
    parser: Any
    # Column-oriented tables parsed during the current request
    tables: Dict[str, Dict[str, list]] = field(default_factory=dict)


class AccessTableReader:
    def open(self, file_path: str) -> AccessHandle:
        try:
            parser = AccessParser(file_path)
        except Exception as e:
            logger.error(f"[reader] Cannot open {file_path}: {e}")
            raise MalformedFile(str(e) or "Arquivo Access inválido") from e
        return AccessHandle(file_path=file_path, parser=parser)

    def list_tables(self, handle: AccessHandle) -> List[str]:
        return [
            name
            for name in handle.parser.catalog.keys()
            if not name.startswith(SYSTEM_TABLE_PREFIXES)
        ]

    def _table(self, handle: AccessHandle, table_name: str) -> Dict[str, list]:
        if table_name in handle.tables:
            return handle.tables[table_name]
        if table_name not in handle.parser.catalog:
            raise TableNotFound(f"Tabela não encontrada: {table_name}")

        try:
            parsed = handle.parser.parse_table(table_name)
        except Exception as e:
            logger.error(f"[reader] Failed to parse table {table_name}: {e}")
            raise MalformedFile(str(e) or f"Erro ao ler tabela {table_name}") from e

        table = {str(column): list(values) for column, values in parsed.items()}
        handle.tables[table_name] = table
        return table

    def get_columns(self, handle: AccessHandle, table_name: str) -> List[str]:
        return list(self._table(handle, table_name).keys())

    def get_row_count(self, handle: AccessHandle, table_name: str) -> int:
        table = self._table(handle, table_name)
        return max((len(values) for values in table.values()), default=0)

    def get_all_rows(
        self, handle: AccessHandle, table_name: str
    ) -> List[Dict[str, Any]]:
        table = self._table(handle, table_name)
        columns = list(table.keys())
        row_count = self.get_row_count(handle, table_name)
        return [
            {
                column: (table[column][i] if i < len(table[column]) else None)
                for column in columns
            }
            for i in range(row_count)
        ]

    def release(self, handle: AccessHandle, table_name: str) -> None:
        handle.tables.pop(table_name, None)


def describe_tables(reader: TableReader, handle: Any) -> List[TableDescriptor]:
    """
    List every table with its row count and columns.

    A table that cannot be read is reported with no columns and zero rows
    instead of failing the whole listing. Each table is released once it
    has been counted, so only one table is held in memory at a time.
    """
    tables = []
    for name in reader.list_tables(handle):
        try:
            columns = reader.get_columns(handle, name)
            row_count = reader.get_row_count(handle, name)
            tables.append(
                TableDescriptor(name=name, row_count=row_count, columns=columns)
            )
        except Exception as e:
            logger.error(f"Error reading table {name}: {e}")
            tables.append(TableDescriptor(name=name, row_count=0, columns=[]))
        finally:
            reader.release(handle, name)
    return tables


def read_table_listing(reader: TableReader, file_path: str) -> List[TableDescriptor]:
    handle = reader.open(file_path)
    return describe_tables(reader, handle)
