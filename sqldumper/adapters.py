"""
Dialect adapters for SQL Dumper.

An adapter turns the abstract steps of a dump (list tables, fetch DDL,
lock, start a transaction, quote a literal, ...) into SQL for one database
engine. Each adapter declares the optional capabilities it implements; the
base class answers the rest with empty statements so the dumper can skip
them explicitly.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any

from .connection import DatabaseConnection
from .exceptions import StructureError
from .models import ColumnInfo, Dialect


class Capability(Enum):
    """Optional adapter features."""
    TRANSACTIONS = "transactions"
    READ_LOCKS = "read locks"
    WRITE_LOCK_BLOCKS = "write lock blocks"
    FOREIGN_KEY_CHECKS = "foreign key check toggling"
    DROP_DATABASE = "drop/create database"
    TRIGGERS = "triggers"


def _text(value: Any) -> Any:
    """Decode bytes returned by some drivers for metadata columns."""
    if isinstance(value, (bytes, bytearray)):
        return value.decode('utf-8')
    return value


class DialectAdapter(ABC):
    """Base adapter. Optional capabilities default to no-ops."""

    dialect: Dialect
    capabilities: frozenset[Capability] = frozenset()

    def __init__(self, connection: DatabaseConnection):
        self.connection = connection

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def quote_identifier(self, name: str) -> str:
        return '`' + name.replace('`', '``') + '`'

    # Structure discovery

    @abstractmethod
    def list_tables(self, database: str) -> list[str]:
        """Names of base tables, in a stable order."""

    @abstractmethod
    def list_views(self, database: str) -> list[str]:
        """Names of views, in a stable order."""

    def list_triggers(self, database: str) -> list[str]:
        return []

    @abstractmethod
    def describe_columns(self, table: str) -> list[ColumnInfo]:
        """Columns of a table in declaration order."""

    @abstractmethod
    def table_ddl(self, table: str) -> str:
        """CREATE statement for a table, without trailing semicolon."""

    @abstractmethod
    def view_ddl(self, view: str) -> str:
        """CREATE statement for a view, without trailing semicolon."""

    def trigger_definition(self, trigger: str) -> dict[str, Any]:
        return {}

    def render_trigger_ddl(self, row: dict[str, Any]) -> str:
        return ""

    # Consistency

    def begin_transaction(self) -> None:
        pass

    def commit_transaction(self) -> None:
        pass

    def rollback_transaction(self) -> None:
        pass

    def lock_table_for_read(self, table: str) -> None:
        pass

    def unlock_tables(self) -> None:
        pass

    # Statements written to the dump

    def begin_write_lock_block(self, table: str) -> str:
        return ""

    def end_write_lock_block(self, table: str) -> str:
        return ""

    def begin_foreign_key_check_disable(self) -> str:
        return ""

    def end_foreign_key_check_disable(self) -> str:
        return ""

    def drop_create_database(self, database: str) -> str:
        return ""

    def drop_trigger_statement(self, trigger: str) -> str:
        return ""

    def drop_table_statement(self, table: str) -> str:
        return f"DROP TABLE IF EXISTS {self.quote_identifier(table)};\n"

    def drop_view_statement(self, view: str) -> str:
        return f"DROP VIEW IF EXISTS {self.quote_identifier(view)};\n"

    # Literals

    def escape_literal(self, value: Any) -> str:
        """Quote a non-NULL value as an SQL literal."""
        if isinstance(value, (bytes, bytearray, memoryview)):
            return self._quote_bytes(bytes(value))
        return self._quote_string(self._to_text(value))

    def _to_text(self, value: Any) -> str:
        if isinstance(value, bool):
            return '1' if value else '0'
        if isinstance(value, datetime):
            return value.isoformat(sep=' ')
        if isinstance(value, (date, time)):
            return value.isoformat()
        return str(value)

    def _quote_bytes(self, value: bytes) -> str:
        return f"X'{value.hex()}'"

    def _quote_string(self, text: str) -> str:
        return "'" + text.replace("'", "''") + "'"


class MysqlAdapter(DialectAdapter):
    """MySQL and MariaDB."""

    dialect = Dialect.MYSQL
    capabilities = frozenset(Capability)

    _ESCAPES = str.maketrans({
        '\\': '\\\\',
        "'": "\\'",
        '"': '\\"',
        '\0': '\\0',
        '\n': '\\n',
        '\r': '\\r',
        '\x1a': '\\Z',
    })

    def list_tables(self, database: str) -> list[str]:
        return self._list_schema_objects(database, 'BASE TABLE')

    def list_views(self, database: str) -> list[str]:
        return self._list_schema_objects(database, 'VIEW')

    def _list_schema_objects(self, database: str, table_type: str) -> list[str]:
        rows = self.connection.execute_query(
            "SELECT TABLE_NAME FROM INFORMATION_SCHEMA.TABLES "
            "WHERE TABLE_TYPE = %s AND TABLE_SCHEMA = %s "
            "ORDER BY TABLE_NAME",
            (table_type, database)
        )
        return [_text(row[0]) for row in rows]

    def list_triggers(self, database: str) -> list[str]:
        rows = self.connection.query_dicts(f"SHOW TRIGGERS FROM {self.quote_identifier(database)}")
        return [_text(row['Trigger']) for row in rows]

    def describe_columns(self, table: str) -> list[ColumnInfo]:
        rows = self.connection.execute_query(f"SHOW COLUMNS FROM {self.quote_identifier(table)}")
        return [
            ColumnInfo(
                name=_text(row[0]),
                type=_text(row[1]),
                nullable=_text(row[2]),
                key=_text(row[3]),
                default=_text(row[4]),
                extra=_text(row[5])
            )
            for row in rows
        ]

    def table_ddl(self, table: str) -> str:
        return self._show_create(f"SHOW CREATE TABLE {self.quote_identifier(table)}", 'Create Table', 'table')

    def view_ddl(self, view: str) -> str:
        return self._show_create(f"SHOW CREATE VIEW {self.quote_identifier(view)}", 'Create View', 'view')

    def _show_create(self, query: str, column: str, kind: str) -> str:
        rows = self.connection.query_dicts(query)
        if not rows or column not in rows[0]:
            raise StructureError(f"Error getting {kind} structure, unknown output")
        return _text(rows[0][column])

    def trigger_definition(self, trigger: str) -> dict[str, Any]:
        rows = self.connection.query_dicts(f"SHOW CREATE TRIGGER {self.quote_identifier(trigger)}")
        if not rows:
            raise StructureError(f"Error getting trigger '{trigger}', no rows returned")
        return rows[0]

    def render_trigger_ddl(self, row: dict[str, Any]) -> str:
        if 'SQL Original Statement' not in row:
            raise StructureError("Error getting trigger code, unknown output")
        statement = _text(row['SQL Original Statement'])
        statement = statement.replace("CREATE", "/*!50003 CREATE*/", 1)
        return (
            "DELIMITER ;;\n"
            f"{statement};;\n"
            "DELIMITER ;\n\n"
        )

    def begin_transaction(self) -> None:
        self.connection.execute("SET SESSION TRANSACTION ISOLATION LEVEL REPEATABLE READ")
        self.connection.execute("START TRANSACTION /*!40100 WITH CONSISTENT SNAPSHOT */")

    def commit_transaction(self) -> None:
        self.connection.execute("COMMIT")

    def rollback_transaction(self) -> None:
        self.connection.execute("ROLLBACK")

    def lock_table_for_read(self, table: str) -> None:
        self.connection.execute(f"LOCK TABLES {self.quote_identifier(table)} READ LOCAL")

    def unlock_tables(self) -> None:
        self.connection.execute("UNLOCK TABLES")

    def begin_write_lock_block(self, table: str) -> str:
        return f"LOCK TABLES {self.quote_identifier(table)} WRITE;\n"

    def end_write_lock_block(self, table: str) -> str:
        return "UNLOCK TABLES;\n"

    def begin_foreign_key_check_disable(self) -> str:
        return (
            "-- Ignore checking of foreign keys\n"
            "SET AUTOCOMMIT = 0;\n"
            "SET FOREIGN_KEY_CHECKS = 0;\n\n"
        )

    def end_foreign_key_check_disable(self) -> str:
        return (
            "-- Unignore checking of foreign keys\n"
            "SET FOREIGN_KEY_CHECKS = 1;\n"
            "COMMIT;\n"
            "SET AUTOCOMMIT = 1;\n\n"
        )

    def drop_create_database(self, database: str) -> str:
        name = self.quote_identifier(database)
        charset = self._server_variable('character_set_database')
        collation = self._server_variable('collation_database')
        return (
            f"/*!40000 DROP DATABASE IF EXISTS {name}*/;\n"
            f"CREATE DATABASE /*!32312 IF NOT EXISTS*/ {name}"
            f" /*!40100 DEFAULT CHARACTER SET {charset} COLLATE {collation}*/;\n"
            f"USE {name};\n\n"
        )

    def _server_variable(self, variable: str) -> str:
        rows = self.connection.execute_query("SHOW VARIABLES LIKE %s", (variable,))
        if not rows:
            raise StructureError(f"Server variable '{variable}' is not available")
        return _text(rows[0][1])

    def drop_trigger_statement(self, trigger: str) -> str:
        return f"DROP TRIGGER IF EXISTS {self.quote_identifier(trigger)};\n"

    def drop_table_statement(self, table: str) -> str:
        return f"/*!50001 DROP TABLE IF EXISTS {self.quote_identifier(table)}*/;\n"

    def drop_view_statement(self, view: str) -> str:
        name = self.quote_identifier(view)
        return (
            f"/*!50001 DROP TABLE IF EXISTS {name}*/;\n"
            f"/*!50001 DROP VIEW IF EXISTS {name}*/;\n"
        )

    def _to_text(self, value: Any) -> str:
        if isinstance(value, timedelta):
            # TIME columns come back as timedelta and may exceed 24 hours
            sign = '-' if value < timedelta(0) else ''
            value = abs(value)
            hours, remainder = divmod(value.days * 86400 + value.seconds, 3600)
            minutes, seconds = divmod(remainder, 60)
            text = f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
            if value.microseconds:
                text += f".{value.microseconds:06d}"
            return text
        return super()._to_text(value)

    def _quote_string(self, text: str) -> str:
        return "'" + text.translate(self._ESCAPES) + "'"


class SqliteAdapter(DialectAdapter):
    """SQLite. Single writer, so there is nothing to lock per table."""

    dialect = Dialect.SQLITE
    capabilities = frozenset({Capability.TRANSACTIONS, Capability.TRIGGERS})

    def list_tables(self, database: str) -> list[str]:
        return self._catalog_names('table')

    def list_views(self, database: str) -> list[str]:
        return self._catalog_names('view')

    def list_triggers(self, database: str) -> list[str]:
        return self._catalog_names('trigger')

    def _catalog_names(self, object_type: str) -> list[str]:
        rows = self.connection.execute_query(
            "SELECT name FROM sqlite_master "
            "WHERE type = ? AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\' "
            "ORDER BY name",
            (object_type,)
        )
        return [row[0] for row in rows]

    def describe_columns(self, table: str) -> list[ColumnInfo]:
        name = '"' + table.replace('"', '""') + '"'
        rows = self.connection.execute_query(f"PRAGMA table_info({name})")
        return [
            ColumnInfo(
                name=row[1],
                type=row[2],
                nullable='NO' if row[3] else 'YES',
                key='PRI' if row[5] else '',
                default=row[4]
            )
            for row in rows
        ]

    def table_ddl(self, table: str) -> str:
        return self._catalog_sql('table', table)

    def view_ddl(self, view: str) -> str:
        return self._catalog_sql('view', view)

    def _catalog_sql(self, object_type: str, name: str) -> str:
        rows = self.connection.execute_query(
            "SELECT sql FROM sqlite_master WHERE type = ? AND name = ?",
            (object_type, name)
        )
        if not rows or not rows[0][0]:
            raise StructureError(f"Error getting {object_type} structure for '{name}', unknown output")
        return rows[0][0]

    def trigger_definition(self, trigger: str) -> dict[str, Any]:
        rows = self.connection.query_dicts(
            "SELECT name, sql FROM sqlite_master WHERE type = 'trigger' AND name = ?",
            (trigger,)
        )
        if not rows:
            raise StructureError(f"Error getting trigger '{trigger}', no rows returned")
        return rows[0]

    def render_trigger_ddl(self, row: dict[str, Any]) -> str:
        if not row.get('sql'):
            raise StructureError("Error getting trigger code, unknown output")
        return f"{row['sql']};\n\n"

    def begin_transaction(self) -> None:
        self.connection.execute("BEGIN EXCLUSIVE")

    def commit_transaction(self) -> None:
        self.connection.execute("COMMIT")

    def rollback_transaction(self) -> None:
        self.connection.execute("ROLLBACK")

    def drop_trigger_statement(self, trigger: str) -> str:
        return f"DROP TRIGGER IF EXISTS {self.quote_identifier(trigger)};\n"


class PgsqlAdapter(DialectAdapter):
    """
    PostgreSQL, partial support.

    Tables are rebuilt from the catalog (columns, defaults, primary key,
    unique and check constraints; no foreign keys or indexes). Locking,
    foreign key toggling, drop/create database and triggers are not
    implemented.
    """

    dialect = Dialect.PGSQL
    capabilities = frozenset({Capability.TRANSACTIONS})

    def quote_identifier(self, name: str) -> str:
        return '"' + name.replace('"', '""') + '"'

    def list_tables(self, database: str) -> list[str]:
        return self._list_schema_objects('BASE TABLE')

    def list_views(self, database: str) -> list[str]:
        return self._list_schema_objects('VIEW')

    def _list_schema_objects(self, table_type: str) -> list[str]:
        rows = self.connection.execute_query(
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = current_schema() AND table_type = %s "
            "ORDER BY table_name",
            (table_type,)
        )
        return [row[0] for row in rows]

    def describe_columns(self, table: str) -> list[ColumnInfo]:
        rows = self.connection.execute_query(
            "SELECT column_name, data_type, is_nullable, column_default "
            "FROM information_schema.columns "
            "WHERE table_schema = current_schema() AND table_name = %s "
            "ORDER BY ordinal_position",
            (table,)
        )
        return [
            ColumnInfo(name=row[0], type=row[1], nullable=row[2], default=row[3])
            for row in rows
        ]

    def table_ddl(self, table: str) -> str:
        relation = self.quote_identifier(table)
        columns = self.connection.execute_query(
            "SELECT a.attname, pg_catalog.format_type(a.atttypid, a.atttypmod), "
            "a.attnotnull, pg_catalog.pg_get_expr(d.adbin, d.adrelid) "
            "FROM pg_catalog.pg_attribute a "
            "LEFT JOIN pg_catalog.pg_attrdef d "
            "ON d.adrelid = a.attrelid AND d.adnum = a.attnum "
            "WHERE a.attrelid = %s::regclass AND a.attnum > 0 AND NOT a.attisdropped "
            "ORDER BY a.attnum",
            (relation,)
        )
        if not columns:
            raise StructureError(f"Error getting table structure for '{table}', no columns returned")

        lines = []
        for name, column_type, not_null, default in columns:
            line = f"  {self.quote_identifier(name)} {column_type}"
            if default is not None:
                line += f" DEFAULT {default}"
            if not_null:
                line += " NOT NULL"
            lines.append(line)

        constraints = self.connection.execute_query(
            "SELECT conname, pg_catalog.pg_get_constraintdef(oid) "
            "FROM pg_catalog.pg_constraint "
            "WHERE conrelid = %s::regclass AND contype IN ('p', 'u', 'c') "
            "ORDER BY conname",
            (relation,)
        )
        for name, definition in constraints:
            lines.append(f"  CONSTRAINT {self.quote_identifier(name)} {definition}")

        return f"CREATE TABLE {relation} (\n" + ",\n".join(lines) + "\n)"

    def view_ddl(self, view: str) -> str:
        relation = self.quote_identifier(view)
        rows = self.connection.execute_query(
            "SELECT pg_catalog.pg_get_viewdef(%s::regclass, true)",
            (relation,)
        )
        if not rows or not rows[0][0]:
            raise StructureError(f"Error getting view structure for '{view}', unknown output")
        definition = rows[0][0].strip().rstrip(';')
        return f"CREATE VIEW {relation} AS\n{definition}"

    def begin_transaction(self) -> None:
        self.connection.execute("BEGIN TRANSACTION ISOLATION LEVEL REPEATABLE READ")

    def commit_transaction(self) -> None:
        self.connection.execute("COMMIT")

    def rollback_transaction(self) -> None:
        self.connection.execute("ROLLBACK")

    def _to_text(self, value: Any) -> str:
        if isinstance(value, bool):
            return 'true' if value else 'false'
        return super()._to_text(value)

    def _quote_bytes(self, value: bytes) -> str:
        return f"'\\x{value.hex()}'"


ADAPTERS: dict[Dialect, type[DialectAdapter]] = {
    Dialect.MYSQL: MysqlAdapter,
    Dialect.SQLITE: SqliteAdapter,
    Dialect.PGSQL: PgsqlAdapter,
}


def create_adapter(connection: DatabaseConnection) -> DialectAdapter:
    """Adapter for the connection's dialect."""
    adapter = ADAPTERS[connection.dialect](connection)
    logging.debug(
        f"Using {type(adapter).__name__} "
        f"({', '.join(sorted(c.value for c in adapter.capabilities)) or 'no optional capabilities'})"
    )
    return adapter
