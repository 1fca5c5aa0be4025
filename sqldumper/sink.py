"""
Output sinks for SQL Dumper.

A sink owns the dump file: it is opened once, written by a single writer
and closed once. Compressed sinks append their extension to the file name.
"""

import bz2
import gzip
import logging
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .exceptions import SinkError
from .models import CompressMethod


class OutputSink:
    """Uncompressed dump file."""

    method = CompressMethod.NONE

    def __init__(self, destination: Union[str, Path]):
        self.path = self.method.destination(destination)
        self.bytes_written = 0
        self._handle: Optional[BinaryIO] = None
        self._closed = False

    def __enter__(self) -> "OutputSink":
        if self._handle is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _open_handle(self) -> BinaryIO:
        return open(self.path, 'wb')

    def open(self) -> None:
        if self._handle is not None or self._closed:
            raise SinkError(f"Output file {self.path} was already opened")
        try:
            self._handle = self._open_handle()
        except OSError as e:
            raise SinkError(f"Output file is not writable: {self.path} ({e})") from e
        logging.debug(f"Opened {self.method.value} output {self.path}")

    def write(self, data: Union[str, bytes]) -> int:
        """Write text (UTF-8 encoded) or bytes, returning the bytes written."""
        if self._handle is None:
            raise SinkError(f"Output file {self.path} is not open")

        payload = data.encode('utf-8') if isinstance(data, str) else data
        try:
            written = self._handle.write(payload)
        except OSError as e:
            raise SinkError(
                f"Writing to {self.path} failed! Probably, there is no more free space left? ({e})"
            ) from e

        if written is not None and written != len(payload):
            raise SinkError(
                f"Short write to {self.path}: {written} of {len(payload)} bytes"
            )
        self.bytes_written += len(payload)
        return len(payload)

    def close(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        self._closed = True
        try:
            handle.close()
        except OSError as e:
            raise SinkError(f"Closing {self.path} failed: {e}") from e
        logging.debug(f"Closed {self.path} after {self.bytes_written} bytes")


class GzipSink(OutputSink):
    """Gzip compressed dump file (``.gz``)."""

    method = CompressMethod.GZIP

    def _open_handle(self) -> BinaryIO:
        return gzip.open(self.path, 'wb')


class Bzip2Sink(OutputSink):
    """Bzip2 compressed dump file (``.bz2``)."""

    method = CompressMethod.BZIP2

    def _open_handle(self) -> BinaryIO:
        return bz2.open(self.path, 'wb')


SINKS: dict[CompressMethod, type[OutputSink]] = {
    CompressMethod.NONE: OutputSink,
    CompressMethod.GZIP: GzipSink,
    CompressMethod.BZIP2: Bzip2Sink,
}


def open_sink(
    method: Union[str, CompressMethod, None],
    destination: Union[str, Path]
) -> OutputSink:
    """Create and open the sink for a compression method name."""
    sink = SINKS[CompressMethod.from_name(method)](destination)
    sink.open()
    return sink
