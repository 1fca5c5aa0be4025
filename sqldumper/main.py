#!/usr/bin/env python3
"""
SQL Dumper - CLI Entry Point
============================
Dumps a MySQL, SQLite or PostgreSQL database into a replayable SQL script:
- Table, view and trigger DDL
- Batched INSERT statements
- Include/exclude table lists
- Consistent snapshots via transactions or table locks
- Gzip/Bzip2 compression
"""

import argparse
import logging
import sys

import yaml

from .config import ConfigLoader
from .database_dumper import DatabaseDumper
from .exceptions import DumpError
from .utils import print_dry_run_info, setup_logging


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='SQL Dumper - logical backups of relational databases'
    )
    parser.add_argument(
        '-c', '--config',
        default='config.yaml',
        help='Path to configuration file (default: config.yaml)'
    )
    parser.add_argument(
        '-o', '--output',
        help='Output file (overrides output.file from the configuration)'
    )
    parser.add_argument(
        '-d', '--database',
        help='Database name or SQLite file (overrides connection.database)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be dumped without actually dumping'
    )

    args = parser.parse_args()

    # Load configuration
    try:
        config = ConfigLoader(args.config)
        connection_settings = config.build_connection_settings(database=args.database)
        dump_settings = config.build_dump_settings()
    except FileNotFoundError:
        print(f"Error: Configuration file '{args.config}' not found")
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file: {e}")
        sys.exit(1)
    except DumpError as e:
        print(f"Error: {e}")
        sys.exit(1)

    # Setup logging
    log_settings = config.get_logging_settings()
    if args.verbose:
        log_settings['level'] = 'DEBUG'
    setup_logging(log_settings)

    output_file = args.output or config.get_output_settings().get('file')

    if args.dry_run:
        logging.info("DRY RUN MODE - No data will be dumped")
        print_dry_run_info(connection_settings, dump_settings, output_file or '<not set>')
        sys.exit(0)

    try:
        dumper = DatabaseDumper(connection_settings, dump_settings, output_file)
        stats = dumper.run()
    except DumpError as e:
        logging.error(f"Dump failed: {e}")
        sys.exit(1)
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        sys.exit(1)

    # Print summary
    logging.info("=" * 50)
    logging.info("DUMP COMPLETE")
    logging.info(f"File: {stats.file_path}")
    logging.info(f"Tables: {len(stats.tables)}")
    logging.info(f"Total Rows: {stats.total_rows}")
    logging.info(f"Views: {stats.views}")
    logging.info(f"Triggers: {stats.triggers}")


if __name__ == '__main__':
    main()
