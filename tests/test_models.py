"""
Unit tests for models.py
"""

from pathlib import Path

import pytest

from sqldumper.exceptions import (
    ConfigurationError,
    UnsupportedCompressionError,
    UnsupportedDialectError,
)
from sqldumper.models import (
    ColumnInfo,
    CompressMethod,
    ConnectionSettings,
    Dialect,
    DumpSession,
    DumpSettings,
    DumpState,
    DumpStats,
    TableStats,
)


class TestCompressMethod:
    """Tests for CompressMethod enum."""

    def test_extensions(self):
        assert CompressMethod.NONE.extension == ""
        assert CompressMethod.GZIP.extension == ".gz"
        assert CompressMethod.BZIP2.extension == ".bz2"

    def test_from_name_case_insensitive(self):
        assert CompressMethod.from_name("Gzip") == CompressMethod.GZIP
        assert CompressMethod.from_name("BZIP2") == CompressMethod.BZIP2
        assert CompressMethod.from_name("None") == CompressMethod.NONE

    def test_from_name_passthrough(self):
        assert CompressMethod.from_name(CompressMethod.GZIP) == CompressMethod.GZIP
        assert CompressMethod.from_name(None) == CompressMethod.NONE

    def test_invalid_method_raises(self):
        with pytest.raises(UnsupportedCompressionError) as exc_info:
            CompressMethod.from_name("zip")
        assert exc_info.value.method == "zip"

    def test_destination(self):
        assert CompressMethod.GZIP.destination("dump.sql") == Path("dump.sql.gz")
        assert CompressMethod.NONE.destination("dump.sql") == Path("dump.sql")


class TestDialect:
    """Tests for Dialect enum."""

    def test_from_name(self):
        assert Dialect.from_name("MySQL") == Dialect.MYSQL
        assert Dialect.from_name("sqlite") == Dialect.SQLITE
        assert Dialect.from_name("pgsql") == Dialect.PGSQL

    def test_unknown_dialect_raises(self):
        with pytest.raises(UnsupportedDialectError):
            Dialect.from_name("oracle")


class TestColumnInfo:
    """Tests for ColumnInfo dataclass."""

    def test_column_info_creation(self):
        col = ColumnInfo(
            name="id",
            type="int(11)",
            nullable="NO",
            key="PRI",
            default=None,
            extra="auto_increment"
        )
        assert col.name == "id"
        assert col.type == "int(11)"
        assert col.key == "PRI"
        assert col.extra == "auto_increment"

    def test_column_info_defaults(self):
        col = ColumnInfo(name="status", type="varchar(20)")
        assert col.nullable == "YES"
        assert col.key == ""
        assert col.default is None


class TestStats:
    """Tests for TableStats and DumpStats."""

    def test_table_stats_defaults(self):
        stats = TableStats(table="users")
        assert stats.table == "users"
        assert stats.rows_dumped == 0

    def test_dump_stats_defaults(self):
        stats = DumpStats()
        assert stats.file_path == ""
        assert stats.tables == []
        assert stats.total_rows == 0
        assert stats.views == 0
        assert stats.triggers == 0


class TestConnectionSettings:
    """Tests for ConnectionSettings dataclass."""

    def test_defaults(self):
        settings = ConnectionSettings()
        assert settings.dialect == Dialect.MYSQL
        assert settings.host == "localhost"
        assert settings.port is None

    def test_dialect_tag_resolved(self):
        settings = ConnectionSettings(dialect="SQLite", database="/tmp/app.db")
        assert settings.dialect == Dialect.SQLITE

    def test_unknown_dialect_rejected_at_construction(self):
        with pytest.raises(UnsupportedDialectError):
            ConnectionSettings(dialect="dblib")

    def test_from_dict(self):
        settings = ConnectionSettings.from_dict({
            "dialect": "mysql",
            "host": "db.example.com",
            "port": 3307,
            "user": "root",
            "password": "secret",
            "database": "shop"
        })
        assert settings.port == 3307
        assert settings.database == "shop"

    def test_from_dict_unknown_keys(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ConnectionSettings.from_dict({"host": "x", "socket": "/tmp/s", "ssl": True})
        assert "socket" in str(exc_info.value)
        assert "ssl" in str(exc_info.value)


class TestDumpSettings:
    """Tests for DumpSettings dataclass."""

    def test_default_values(self):
        settings = DumpSettings()
        assert settings.include_tables == ()
        assert settings.exclude_tables == ()
        assert settings.compress == CompressMethod.NONE
        assert settings.no_data is False
        assert settings.add_drop_database is False
        assert settings.add_drop_table is False
        assert settings.single_transaction is True
        assert settings.lock_tables is True
        assert settings.add_locks is True
        assert settings.extended_insert is True
        assert settings.disable_foreign_keys_check is False
        assert settings.where == ""
        assert settings.no_create_info is False
        assert settings.skip_triggers is False
        assert settings.add_drop_trigger is True

    def test_from_dict_hyphenated_keys(self):
        settings = DumpSettings.from_dict({
            "include-tables": ["users", "orders"],
            "compress": "Gzip",
            "no-data": True,
            "where": "id > 10"
        })
        assert settings.include_tables == ("users", "orders")
        assert settings.compress == CompressMethod.GZIP
        assert settings.no_data is True
        assert settings.where == "id > 10"

    def test_from_dict_underscore_keys(self):
        settings = DumpSettings.from_dict({"exclude_tables": ["logs"], "extended_insert": False})
        assert settings.exclude_tables == ("logs",)
        assert settings.extended_insert is False

    def test_unknown_keys_reported_together(self):
        with pytest.raises(ConfigurationError) as exc_info:
            DumpSettings.from_dict({"no-data": True, "hex-blob": True, "routines": True})
        message = str(exc_info.value)
        assert "hex-blob" in message
        assert "routines" in message
        assert "no-data" not in message

    def test_invalid_compression(self):
        with pytest.raises(UnsupportedCompressionError):
            DumpSettings.from_dict({"compress": "lzma"})

    def test_string_table_list_rejected(self):
        with pytest.raises(ConfigurationError):
            DumpSettings(include_tables="users")

    def test_settings_are_immutable(self):
        settings = DumpSettings()
        with pytest.raises(AttributeError):
            settings.no_data = True

    def test_none_where_becomes_empty(self):
        assert DumpSettings(where=None).where == ""


class TestDumpSession:
    """Tests for DumpSession dataclass."""

    def test_initial_state(self):
        session = DumpSession()
        assert session.state == DumpState.IDLE
        assert session.tables == []
        assert session.column_types == {}
