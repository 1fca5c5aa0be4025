"""
Main database dumping orchestration for SQL Dumper.
"""

import fnmatch
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from . import __version__
from .adapters import Capability, DialectAdapter, create_adapter
from .connection import DatabaseConnection
from .exceptions import ConfigurationError, NotFoundError
from .models import ConnectionSettings, DumpSession, DumpSettings, DumpState, DumpStats
from .sink import OutputSink, open_sink
from .table_dumper import TableDumper


class DatabaseDumper:
    """
    Dumps one database into a single SQL script.

    A run connects, discovers tables, views and triggers, writes their DDL
    and table rows, then closes the output. It is sequential and stops at
    the first error.
    """

    TOOL_NAME = "sqldumper"

    def __init__(
        self,
        connection_settings: ConnectionSettings,
        settings: DumpSettings,
        output_file: Optional[Union[str, Path]] = None
    ):
        self.connection_settings = connection_settings
        self.settings = settings
        self.output_file = output_file
        self.session = DumpSession()
        self.stats = DumpStats()
        self._warned: set[Capability] = set()
        self._exclude_patterns = self._compile_exclusion_patterns(list(settings.exclude_tables))

    def _compile_exclusion_patterns(self, exclude_patterns: list[str]) -> list[re.Pattern]:
        """
        Pre-compile exclusion patterns to regex for faster matching.

        Converts fnmatch patterns to compiled regex patterns.
        """
        return [re.compile(fnmatch.translate(pattern)) for pattern in exclude_patterns]

    def _is_table_excluded(self, name: str) -> bool:
        """
        Check if a table or view should be skipped.

        Supports:
        - Exact matches: 'users_backup', also for names such as 'log[1]'
        - Wildcard patterns: '*_old', 'tmp_*', '*_backup_*'
        """
        for pattern, compiled in zip(self.settings.exclude_tables, self._exclude_patterns):
            if name == pattern or compiled.match(name):
                logging.debug(f"'{name}' excluded by pattern '{pattern}'")
                return True
        return False

    def run(self, output_file: Optional[Union[str, Path]] = None) -> DumpStats:
        """Run the dump and return its statistics.

        Args:
            output_file: Destination file name; overrides the one given at
                        construction. Compressed output gets the method's
                        extension appended.
        """
        output_file = output_file or self.output_file
        if not output_file:
            raise ConfigurationError("Output file name is not set")

        self.session = DumpSession()
        self.stats = DumpStats()
        self._warned = set()

        try:
            with DatabaseConnection(self.connection_settings) as conn:
                self.session.state = DumpState.CONNECTED
                adapter = create_adapter(conn)
                with open_sink(self.settings.compress, output_file) as sink:
                    self.stats.file_path = str(sink.path)
                    self._dump(conn, adapter, sink)
            self.session.state = DumpState.CLOSED
        except Exception:
            self.session.state = DumpState.FAILED
            raise

        logging.info(f"Dump of '{self.connection_settings.database}' written to {self.stats.file_path}")
        return self.stats

    def _dump(self, conn: DatabaseConnection, adapter: DialectAdapter, sink: OutputSink) -> None:
        database = self.connection_settings.database
        sink.write(self._header(conn))

        if self.settings.add_drop_database and self._supported(
            adapter, Capability.DROP_DATABASE, 'add-drop-database'
        ):
            sink.write(adapter.drop_create_database(database))

        self._discover_structure(adapter, database)
        self.session.state = DumpState.STRUCTURE_DISCOVERED

        disable_fk_checks = self.settings.disable_foreign_keys_check and self._supported(
            adapter, Capability.FOREIGN_KEY_CHECKS, 'disable-foreign-keys-check'
        )
        if disable_fk_checks:
            sink.write(adapter.begin_foreign_key_check_disable())

        self._export_tables(conn, adapter, sink)
        self.session.state = DumpState.TABLES_EXPORTED
        self._export_views(adapter, sink)
        self.session.state = DumpState.VIEWS_EXPORTED
        self._export_triggers(adapter, sink)
        self.session.state = DumpState.TRIGGERS_EXPORTED

        if disable_fk_checks:
            sink.write(adapter.end_foreign_key_check_disable())

        sink.write(self._footer())

    def _supported(
        self,
        adapter: DialectAdapter,
        capability: Capability,
        option: str,
        default_on: bool = False
    ) -> bool:
        """Whether the adapter implements a capability; reports once per run if not.

        Options that are on by default are reported at DEBUG level only, so a
        run with default settings against a partial dialect logs no warnings.
        """
        if adapter.supports(capability):
            return True
        if capability not in self._warned:
            self._warned.add(capability)
            logging.log(
                logging.DEBUG if default_on else logging.WARNING,
                f"'{option}' requested but {capability.value} are not implemented "
                f"for {adapter.dialect.value}; skipping"
            )
        return False

    def _discover_structure(self, adapter: DialectAdapter, database: str) -> None:
        """Collect table, view and trigger names, honouring include-tables."""
        remaining = list(dict.fromkeys(self.settings.include_tables))

        self.session.tables = self._filter_included(adapter.list_tables(database), remaining)
        self.session.views = self._filter_included(adapter.list_views(database), remaining)

        self.session.triggers = []
        if not self.settings.skip_triggers and self._supported(
            adapter, Capability.TRIGGERS, 'triggers', default_on=True
        ):
            self.session.triggers = adapter.list_triggers(database)

        logging.info(
            f"Found {len(self.session.tables)} table(s), {len(self.session.views)} view(s) "
            f"and {len(self.session.triggers)} trigger(s) in '{database}'"
        )

        # Anything left in the allow-list was requested but never found
        if remaining:
            raise NotFoundError(remaining)

    def _filter_included(self, names: list[str], remaining: list[str]) -> list[str]:
        if not self.settings.include_tables:
            return list(names)

        kept = []
        for name in names:
            if name in remaining:
                kept.append(name)
                remaining.remove(name)
        return kept

    def _export_tables(self, conn: DatabaseConnection, adapter: DialectAdapter, sink: OutputSink) -> None:
        tables = [t for t in self.session.tables if not self._is_table_excluded(t)]
        excluded_count = len(self.session.tables) - len(tables)
        if excluded_count > 0:
            logging.info(f"Excluded {excluded_count} table(s) matching exclusion patterns")

        with_data = not self.settings.no_data
        use_transaction = with_data and self.settings.single_transaction and self._supported(
            adapter, Capability.TRANSACTIONS, 'single-transaction', default_on=True
        )
        read_locks = False
        if with_data and self.settings.lock_tables:
            if use_transaction:
                # LOCK TABLES would end the snapshot transaction
                logging.debug("'lock-tables' ignored while 'single-transaction' is active")
            else:
                read_locks = self._supported(
                    adapter, Capability.READ_LOCKS, 'lock-tables', default_on=True
                )
        write_lock_blocks = with_data and self.settings.add_locks and self._supported(
            adapter, Capability.WRITE_LOCK_BLOCKS, 'add-locks', default_on=True
        )

        dumper = TableDumper(
            conn, adapter, sink, self.settings, self.session,
            read_locks=read_locks,
            write_lock_blocks=write_lock_blocks
        )

        logging.info(f"Dumping {len(tables)} table(s)")
        if use_transaction:
            adapter.begin_transaction()

        try:
            for table in tables:
                table_stats = dumper.dump_table(table)
                self.stats.tables.append(table_stats)
                self.stats.total_rows += table_stats.rows_dumped
                if with_data:
                    logging.info(f"  ✓ {table}: {table_stats.rows_dumped} rows")
                else:
                    logging.info(f"  ✓ {table}: structure only")
        except Exception:
            self._release(adapter, use_transaction, read_locks)
            raise

        if use_transaction:
            adapter.commit_transaction()

    def _release(self, adapter: DialectAdapter, in_transaction: bool, read_locks: bool) -> None:
        """Best-effort cleanup after a failed table export."""
        if read_locks:
            try:
                adapter.unlock_tables()
            except Exception as e:
                logging.warning(f"Could not release table locks: {e}")
        if in_transaction:
            try:
                adapter.rollback_transaction()
            except Exception as e:
                logging.warning(f"Could not roll back dump transaction: {e}")

    def _export_views(self, adapter: DialectAdapter, sink: OutputSink) -> None:
        for view in self.session.views:
            if self._is_table_excluded(view):
                continue

            create_statement = adapter.view_ddl(view)
            if not self.settings.no_create_info:
                sink.write(
                    "--\n"
                    f"-- Table structure for view {adapter.quote_identifier(view)}\n"
                    "--\n\n"
                )
                if self.settings.add_drop_table:
                    sink.write(adapter.drop_view_statement(view) + "\n")
                sink.write(f"{create_statement};\n\n")
            self.stats.views += 1
            logging.info(f"  ✓ view {view}")

    def _export_triggers(self, adapter: DialectAdapter, sink: OutputSink) -> None:
        # Triggers are never filtered by name
        for trigger in self.session.triggers:
            definition = adapter.trigger_definition(trigger)
            if self.settings.add_drop_trigger:
                sink.write(adapter.drop_trigger_statement(trigger))
            sink.write(adapter.render_trigger_ddl(definition))
            self.stats.triggers += 1
            logging.info(f"  ✓ trigger {trigger}")

    def _header(self, conn: DatabaseConnection) -> str:
        lines = [
            f"-- {self.TOOL_NAME} {__version__}",
            "--",
            f"-- Host: {self.connection_settings.host}\tDatabase: {self.connection_settings.database}",
            "-- ------------------------------------------------------",
        ]
        if conn.server_version:
            lines.append(f"-- Server version \t{conn.server_version}")
        lines.append(f"-- Date: {self._timestamp()}")
        return "\n".join(lines) + "\n\n"

    def _footer(self) -> str:
        return f"-- Dump completed on: {self._timestamp()}\n"

    def _timestamp(self) -> str:
        return datetime.now().astimezone().strftime('%a, %d %b %Y %H:%M:%S %z')
