"""
Exceptions raised by SQL Dumper.

Every error aborts the dump. Callers can catch ``DumpError`` to handle all
of them in one place.
"""

from typing import Iterable


class DumpError(Exception):
    """Base class for all dump failures."""


class ConfigurationError(DumpError):
    """Missing output target, unknown option keys or invalid option values."""


class UnsupportedDialectError(ConfigurationError):
    """Unknown database dialect tag."""

    def __init__(self, dialect: str):
        self.dialect = dialect
        super().__init__(f"Database type support for ({dialect}) not yet available")


class UnsupportedCompressionError(ConfigurationError):
    """Unknown compression method."""

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Compression method ({method}) is not defined yet")


class DumpConnectionError(DumpError):
    """The database driver failed to open a connection."""

    def __init__(self, dialect: str, cause: Exception):
        self.dialect = dialect
        self.cause = cause
        super().__init__(f"Connection to {dialect} failed with message: {cause}")


class NotFoundError(DumpError):
    """Tables or views requested in include-tables were never discovered."""

    def __init__(self, names: Iterable[str]):
        self.names = list(names)
        super().__init__(f"Table or View ({','.join(self.names)}) not found in database")


class StructureError(DumpError):
    """An introspection query returned no row or an unexpected shape."""


class SinkError(DumpError):
    """The output file could not be opened or written."""
