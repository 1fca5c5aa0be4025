"""
Table dumping functionality for SQL Dumper.
"""

import logging
from typing import Any

from .adapters import DialectAdapter
from .column_types import classify_columns
from .connection import DatabaseConnection
from .exceptions import StructureError
from .models import DumpSession, DumpSettings, TableStats
from .sink import OutputSink


class TableDumper:
    """Writes the structure and rows of individual tables to the sink."""

    # Same as mysqldump
    MAX_LINE_SIZE = 1000000

    def __init__(
        self,
        connection: DatabaseConnection,
        adapter: DialectAdapter,
        sink: OutputSink,
        settings: DumpSettings,
        session: DumpSession,
        read_locks: bool = False,
        write_lock_blocks: bool = False
    ):
        self.connection = connection
        self.adapter = adapter
        self.sink = sink
        self.settings = settings
        self.session = session
        self.read_locks = read_locks
        self.write_lock_blocks = write_lock_blocks

    def dump_table(self, table: str) -> TableStats:
        """Write the table's DDL and, unless no-data is set, its rows."""
        stats = TableStats(table=table)
        self.dump_table_structure(table)
        if not self.settings.no_data:
            stats.rows_dumped = self.dump_table_data(table)
        return stats

    def dump_table_structure(self, table: str) -> None:
        """Write the CREATE statement and cache the table's column types."""
        create_statement = self.adapter.table_ddl(table)

        if not self.settings.no_create_info:
            self.sink.write(
                "--\n"
                f"-- Table structure for table {self.adapter.quote_identifier(table)}\n"
                "--\n\n"
            )
            if self.settings.add_drop_table:
                self.sink.write(self.adapter.drop_table_statement(table) + "\n")
            self.sink.write(f"{create_statement};\n\n")

        columns = self.adapter.describe_columns(table)
        if not columns:
            raise StructureError(f"Error getting columns for table '{table}', no rows returned")
        self.session.column_types[table] = classify_columns(columns)

    def dump_table_data(self, table: str) -> int:
        """Write the table rows as INSERT statements, returning the row count."""
        self.sink.write(
            "--\n"
            f"-- Dumping data for table {self.adapter.quote_identifier(table)}\n"
            "--\n\n"
        )

        if self.read_locks:
            self.adapter.lock_table_for_read(table)

        if self.write_lock_blocks:
            self.sink.write(self.adapter.begin_write_lock_block(table))

        rows_dumped = self._write_inserts(table)

        if self.write_lock_blocks:
            self.sink.write(self.adapter.end_write_lock_block(table))

        if self.read_locks:
            self.adapter.unlock_tables()

        self.sink.write("\n")
        return rows_dumped

    def _write_inserts(self, table: str) -> int:
        """Stream rows into size-bounded, optionally multi-row INSERTs."""
        query = self._build_select_query(table)
        logging.debug(f"Dumping table '{table}' with query: {query[:200]}")

        quoted_table = self.adapter.quote_identifier(table)
        extended = self.settings.extended_insert
        line_size = 0
        open_statement = False
        rows_dumped = 0

        for row in self.connection.iter_rows(query):
            values = ','.join(self.escape_row(table, row))
            if not open_statement or not extended:
                line_size += self.sink.write(f"INSERT INTO {quoted_table} VALUES ({values})")
                open_statement = True
            else:
                line_size += self.sink.write(f",({values})")
            rows_dumped += 1

            if line_size > self.MAX_LINE_SIZE or not extended:
                self.sink.write(";\n")
                line_size = 0
                open_statement = False

        if open_statement:
            self.sink.write(";\n")

        return rows_dumped

    def _build_select_query(self, table: str) -> str:
        """Build SELECT query with the configured WHERE clause."""
        columns = self.session.column_types.get(table)
        if columns:
            selected = ', '.join(self.adapter.quote_identifier(col) for col in columns)
        else:
            selected = '*'
        query = f"SELECT {selected} FROM {self.adapter.quote_identifier(table)}"

        if self.settings.where:
            query += f" WHERE {self.settings.where}"

        return query

    def escape_row(self, table: str, row: dict[str, Any]) -> list[str]:
        """Turn one row into SQL literals, in column order."""
        column_types = self.session.column_types.get(table)
        if column_types is None:
            raise StructureError(f"Column types for table '{table}' were not discovered")

        values = []
        for column, value in row.items():
            if value is None:
                values.append('NULL')
            elif column_types.get(column):
                values.append(self._format_numeric(value))
            else:
                values.append(self.adapter.escape_literal(value))
        return values

    def _format_numeric(self, value: Any) -> str:
        if isinstance(value, bool):
            return '1' if value else '0'
        if isinstance(value, (bytes, bytearray)):
            # BIT columns may come back as raw bytes
            return self.adapter.escape_literal(value)
        return str(value)
