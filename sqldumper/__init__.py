"""
SQL Dumper
==========
A logical backup tool that dumps a relational database into a replayable
SQL script, with support for:
- MySQL, SQLite and (partially) PostgreSQL
- Table, view and trigger DDL
- Size-bounded extended INSERT statements
- Consistent snapshots via transactions or table locks
- Gzip and Bzip2 compression
"""

__version__ = "1.0.0"

from .adapters import (
    Capability,
    DialectAdapter,
    MysqlAdapter,
    PgsqlAdapter,
    SqliteAdapter,
    create_adapter,
)
from .column_types import NUMERIC_TYPES, classify_columns, parse_column_type
from .config import ConfigLoader
from .connection import DatabaseConnection
from .database_dumper import DatabaseDumper
from .exceptions import (
    ConfigurationError,
    DumpConnectionError,
    DumpError,
    NotFoundError,
    SinkError,
    StructureError,
    UnsupportedCompressionError,
    UnsupportedDialectError,
)
from .main import main
from .models import (
    ColumnInfo,
    ColumnType,
    CompressMethod,
    ConnectionSettings,
    Dialect,
    DumpSession,
    DumpSettings,
    DumpState,
    DumpStats,
    TableStats,
)
from .sink import Bzip2Sink, GzipSink, OutputSink, open_sink
from .table_dumper import TableDumper
from .utils import format_settings_display, print_dry_run_info, setup_logging

__all__ = [
    # Main entry point
    "main",
    # Core classes
    "ConfigLoader",
    "DatabaseConnection",
    "DatabaseDumper",
    "TableDumper",
    # Dialect adapters
    "Capability",
    "DialectAdapter",
    "MysqlAdapter",
    "PgsqlAdapter",
    "SqliteAdapter",
    "create_adapter",
    # Output sinks
    "OutputSink",
    "GzipSink",
    "Bzip2Sink",
    "open_sink",
    # Column classification
    "NUMERIC_TYPES",
    "classify_columns",
    "parse_column_type",
    # Models
    "ColumnInfo",
    "ColumnType",
    "CompressMethod",
    "ConnectionSettings",
    "Dialect",
    "DumpSession",
    "DumpSettings",
    "DumpState",
    "DumpStats",
    "TableStats",
    # Exceptions
    "ConfigurationError",
    "DumpConnectionError",
    "DumpError",
    "NotFoundError",
    "SinkError",
    "StructureError",
    "UnsupportedCompressionError",
    "UnsupportedDialectError",
    # Utilities
    "format_settings_display",
    "print_dry_run_info",
    "setup_logging",
]
