"""
Database connection management for SQL Dumper.
"""

import logging
import sqlite3
from typing import Any, Iterator, Optional

import mysql.connector
import psycopg2
from mysql.connector import Error as MySQLError

from .exceptions import DumpConnectionError
from .models import ConnectionSettings, Dialect


class DatabaseConnection:
    """Manages one database session with context manager support."""

    DEFAULT_PORTS = {
        Dialect.MYSQL: 3306,
        Dialect.PGSQL: 5432,
    }
    DEFAULT_CHARSET = 'utf8mb4'
    FETCH_SIZE = 1000
    STREAM_CURSOR_NAME = 'sqldumper_rows'

    def __init__(self, settings: ConnectionSettings):
        self.settings = settings
        self.dialect = settings.dialect
        self.connection = None
        self.server_version: Optional[str] = None

    @property
    def port(self) -> Optional[int]:
        return self.settings.port or self.DEFAULT_PORTS.get(self.dialect)

    def __enter__(self) -> "DatabaseConnection":
        """Context manager entry - establish connection."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close connection."""
        self.disconnect()

    def connect(self) -> None:
        """Establish database connection."""
        try:
            if self.dialect == Dialect.MYSQL:
                self._connect_mysql()
            elif self.dialect == Dialect.SQLITE:
                self._connect_sqlite()
            else:
                self._connect_pgsql()
        except (MySQLError, sqlite3.Error, psycopg2.Error) as e:
            logging.error(f"Failed to connect to {self.dialect.value} database: {e}")
            raise DumpConnectionError(self.dialect.value, e) from e

        logging.info(
            f"Connected to {self.dialect.value} "
            f"{self.settings.host}:{self.port or '-'}/{self.settings.database or 'N/A'}"
        )

    def _connect_mysql(self) -> None:
        self.connection = mysql.connector.connect(
            host=self.settings.host,
            port=self.port,
            user=self.settings.user,
            password=self.settings.password,
            database=self.settings.database,
            charset=self.DEFAULT_CHARSET,
            use_unicode=True
        )
        self.server_version = self.connection.get_server_info()

    def _connect_sqlite(self) -> None:
        # isolation_level=None leaves BEGIN/COMMIT to the adapter
        self.connection = sqlite3.connect(self.settings.database, isolation_level=None)

    def _connect_pgsql(self) -> None:
        self.connection = psycopg2.connect(
            host=self.settings.host,
            port=self.port,
            user=self.settings.user,
            password=self.settings.password,
            dbname=self.settings.database
        )
        self.connection.autocommit = True
        self.server_version = str(self.connection.server_version)

    def disconnect(self) -> None:
        """Close database connection."""
        if self.connection is not None:
            self.connection.close()
            self.connection = None
            logging.debug("Database connection closed")

    def get_cursor(self, buffered: bool = False):
        """Get a cursor.

        Args:
            buffered: MySQL only. If False (default), rows are streamed from
                     the server instead of being loaded up front.
        """
        if self.dialect == Dialect.MYSQL:
            return self.connection.cursor(buffered=buffered)
        return self.connection.cursor()

    def execute(self, statement: str, params: Optional[tuple] = None) -> None:
        """Execute a statement that returns no rows."""
        logging.debug(f"Executing: {statement}")
        cursor = self.get_cursor(buffered=True)
        try:
            if params is None:
                cursor.execute(statement)
            else:
                cursor.execute(statement, params)
        finally:
            cursor.close()

    def execute_query(self, query: str, params: Optional[tuple] = None) -> list[tuple]:
        """Execute a query and return results."""
        cursor = self.get_cursor(buffered=True)
        try:
            if params is None:
                cursor.execute(query)
            else:
                cursor.execute(query, params)
            return cursor.fetchall()
        finally:
            cursor.close()

    def query_dicts(self, query: str, params: Optional[tuple] = None) -> list[dict[str, Any]]:
        """Execute a query and return rows keyed by column name."""
        cursor = self.get_cursor(buffered=True)
        try:
            if params is None:
                cursor.execute(query)
            else:
                cursor.execute(query, params)
            names = [desc[0] for desc in cursor.description]
            return [dict(zip(names, row)) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def get_streaming_cursor(self):
        """Get a cursor that keeps large result sets on the server.

        MySQL cursors are unbuffered by default. PostgreSQL needs a named
        (server-side) cursor; WITH HOLD lets it live outside a transaction
        block since the session runs in autocommit mode.
        """
        if self.dialect == Dialect.PGSQL:
            cursor = self.connection.cursor(name=self.STREAM_CURSOR_NAME, withhold=True)
            cursor.itersize = self.FETCH_SIZE
            return cursor
        return self.get_cursor()

    def iter_rows(self, query: str) -> Iterator[dict[str, Any]]:
        """Stream rows of a large result set, keyed by column name."""
        cursor = self.get_streaming_cursor()
        try:
            cursor.execute(query)
            names = None
            while True:
                batch = cursor.fetchmany(self.FETCH_SIZE)
                if not batch:
                    break
                if names is None:
                    # Named cursors only describe the result after a fetch
                    names = [desc[0] for desc in cursor.description]
                for row in batch:
                    yield dict(zip(names, row))
        finally:
            self._close_streaming_cursor(cursor)

    def _close_streaming_cursor(self, cursor) -> None:
        if self.dialect == Dialect.MYSQL and self.connection.unread_result:
            # Stream abandoned early; the server still has rows queued for this session
            logging.debug("Discarding unread rows of an aborted stream")
            self.connection.consume_results()
        cursor.close()
