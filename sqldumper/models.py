"""
Data models and enums for SQL Dumper.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from .exceptions import (
    ConfigurationError,
    UnsupportedCompressionError,
    UnsupportedDialectError,
)


class CompressMethod(Enum):
    """Supported compression methods for the dump file."""
    NONE = "none"
    GZIP = "gzip"
    BZIP2 = "bzip2"

    @property
    def extension(self) -> str:
        return {
            CompressMethod.NONE: "",
            CompressMethod.GZIP: ".gz",
            CompressMethod.BZIP2: ".bz2",
        }[self]

    def destination(self, path: Union[str, Path]) -> Path:
        """Final file name for a dump written with this method."""
        return Path(str(path) + self.extension)

    @classmethod
    def from_name(cls, name: Union[str, "CompressMethod", None]) -> "CompressMethod":
        """Resolve a method name case-insensitively ('Gzip', 'BZIP2', ...)."""
        if isinstance(name, cls):
            return name
        if name is None:
            return cls.NONE
        try:
            return cls(str(name).lower())
        except ValueError:
            raise UnsupportedCompressionError(str(name)) from None


class Dialect(Enum):
    """Database dialects the dumper can connect to."""
    MYSQL = "mysql"
    SQLITE = "sqlite"
    PGSQL = "pgsql"

    @classmethod
    def from_name(cls, name: Union[str, "Dialect"]) -> "Dialect":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).lower())
        except ValueError:
            raise UnsupportedDialectError(str(name)) from None


class DumpState(Enum):
    """Progress of a single dump run."""
    IDLE = "idle"
    CONNECTED = "connected"
    STRUCTURE_DISCOVERED = "structure_discovered"
    TABLES_EXPORTED = "tables_exported"
    VIEWS_EXPORTED = "views_exported"
    TRIGGERS_EXPORTED = "triggers_exported"
    CLOSED = "closed"
    FAILED = "failed"


@dataclass
class ColumnInfo:
    """Database column metadata."""
    name: str
    type: str
    nullable: str = "YES"
    key: str = ""
    default: Any = None
    extra: str = ""


@dataclass(frozen=True)
class ColumnType:
    """Parsed column type."""
    type: str
    length: Optional[str] = None
    attributes: Optional[str] = None
    is_numeric: bool = False


@dataclass
class TableStats:
    """Statistics for a single table dump."""
    table: str
    rows_dumped: int = 0


@dataclass
class DumpStats:
    """Overall dump statistics."""
    file_path: str = ""
    tables: list[TableStats] = field(default_factory=list)
    total_rows: int = 0
    views: int = 0
    triggers: int = 0


@dataclass(frozen=True)
class ConnectionSettings:
    """Where to connect. For SQLite, ``database`` is the file path."""
    dialect: Dialect = Dialect.MYSQL
    host: str = "localhost"
    port: Optional[int] = None
    user: str = ""
    password: str = ""
    database: str = ""

    def __post_init__(self):
        object.__setattr__(self, 'dialect', Dialect.from_name(self.dialect))

    @classmethod
    def from_dict(cls, options: dict[str, Any]) -> "ConnectionSettings":
        known = {f.name for f in fields(cls)}
        unexpected = sorted(set(options) - known)
        if unexpected:
            raise ConfigurationError(
                f"Unexpected value in connection settings: ({','.join(unexpected)})"
            )
        return cls(**options)


@dataclass(frozen=True)
class DumpSettings:
    """Behavioural options for one dump run, validated at construction."""
    include_tables: tuple[str, ...] = ()
    exclude_tables: tuple[str, ...] = ()
    compress: CompressMethod = CompressMethod.NONE
    no_data: bool = False
    add_drop_database: bool = False
    add_drop_table: bool = False
    single_transaction: bool = True
    lock_tables: bool = True
    add_locks: bool = True
    extended_insert: bool = True
    disable_foreign_keys_check: bool = False
    where: str = ""
    no_create_info: bool = False
    skip_triggers: bool = False
    add_drop_trigger: bool = True

    def __post_init__(self):
        for name in ('include_tables', 'exclude_tables'):
            value = getattr(self, name)
            if isinstance(value, str):
                raise ConfigurationError(f"'{name.replace('_', '-')}' must be a list of names")
            object.__setattr__(self, name, tuple(value or ()))
        object.__setattr__(self, 'compress', CompressMethod.from_name(self.compress))
        object.__setattr__(self, 'where', self.where or "")

    @classmethod
    def from_dict(cls, options: dict[str, Any]) -> "DumpSettings":
        """
        Build settings from option keys such as ``include-tables``.

        Underscore spellings are accepted too. Every unknown key is reported
        in a single ConfigurationError.
        """
        known = {f.name for f in fields(cls)}
        values = {}
        unexpected = []
        for key, value in options.items():
            attr = key.replace('-', '_')
            if attr in known:
                values[attr] = value
            else:
                unexpected.append(key)

        if unexpected:
            raise ConfigurationError(
                f"Unexpected value in dump settings: ({','.join(unexpected)})"
            )
        return cls(**values)


@dataclass
class DumpSession:
    """Working state of a run, owned by the orchestrator."""
    tables: list[str] = field(default_factory=list)
    views: list[str] = field(default_factory=list)
    triggers: list[str] = field(default_factory=list)
    column_types: dict[str, dict[str, bool]] = field(default_factory=dict)
    state: DumpState = DumpState.IDLE
