"""
Utility functions for SQL Dumper.
"""

import logging
import sys
from pathlib import Path
from typing import Any

from .models import ConnectionSettings, DumpSettings

DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(log_settings: dict[str, Any]) -> None:
    """Setup logging configuration."""
    log_level = getattr(logging, log_settings.get('level', 'INFO').upper())
    log_file = log_settings.get('file')

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format=log_settings.get('format', DEFAULT_LOG_FORMAT),
        handlers=handlers
    )

    # Quiet the MySQL driver unless debugging
    if log_level > logging.DEBUG:
        logging.getLogger('mysql.connector').setLevel(logging.WARNING)


def format_settings_display(settings: DumpSettings) -> list[str]:
    """Format the options that differ from the defaults."""
    defaults = DumpSettings()
    parts = []
    if settings.include_tables:
        parts.append(f"include={','.join(settings.include_tables)}")
    if settings.exclude_tables:
        parts.append(f"exclude={','.join(settings.exclude_tables)}")
    if settings.compress != defaults.compress:
        parts.append(f"compress={settings.compress.value}")
    if settings.where:
        parts.append(f"where='{settings.where}'")

    for name in (
        'no_data', 'add_drop_database', 'add_drop_table', 'single_transaction',
        'lock_tables', 'add_locks', 'extended_insert', 'disable_foreign_keys_check',
        'no_create_info', 'skip_triggers', 'add_drop_trigger',
    ):
        value = getattr(settings, name)
        if value != getattr(defaults, name):
            parts.append(f"{name.replace('_', '-')}={'on' if value else 'off'}")
    return parts


def print_dry_run_info(
    connection: ConnectionSettings,
    settings: DumpSettings,
    output_file: str
) -> None:
    """Log what would be dumped in dry-run mode."""
    logging.info(
        f"Would dump {connection.dialect.value} database: {connection.database} "
        f"from host: {connection.host}"
    )
    logging.info(f"  Output: {settings.compress.destination(output_file)}")

    if settings.include_tables:
        for name in settings.include_tables:
            logging.info(f"  - {name}")
    else:
        logging.info("  - All tables and views")

    parts = format_settings_display(settings)
    if parts:
        logging.info(f"  Options: {', '.join(parts)}")
    else:
        logging.info("  Options: defaults")
