"""
Unit tests for main.py
"""

import logging
import sqlite3
from unittest import mock

import pytest
import yaml

from sqldumper.main import main


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.WARNING)


@pytest.fixture
def config_path(tmp_path):
    db_path = tmp_path / "app.db"
    conn = sqlite3.connect(db_path)
    conn.executescript("CREATE TABLE t (id int, name varchar(20)); INSERT INTO t VALUES (1, 'a');")
    conn.close()

    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({
        "connection": {"dialect": "sqlite", "database": str(db_path)},
        "output": {"file": str(tmp_path / "dump.sql")},
        "logging": {"level": "INFO"}
    }))
    return path


def run_main(*argv):
    with mock.patch('sys.argv', ['sqldumper', *argv]):
        with pytest.raises(SystemExit) as exc_info:
            main()
    return exc_info.value.code


class TestMain:
    """Tests for the command line entry point."""

    def test_dump(self, config_path, tmp_path):
        with mock.patch('sys.argv', ['sqldumper', '-c', str(config_path)]):
            main()

        output = (tmp_path / "dump.sql").read_text(encoding='utf-8')
        assert "INSERT INTO `t` VALUES (1,'a');" in output

    def test_output_override(self, config_path, tmp_path):
        with mock.patch('sys.argv', ['sqldumper', '-c', str(config_path), '-o', str(tmp_path / "other.sql")]):
            main()

        assert (tmp_path / "other.sql").exists()
        assert not (tmp_path / "dump.sql").exists()

    def test_dry_run(self, config_path, tmp_path, caplog):
        with caplog.at_level(logging.INFO):
            assert run_main('-c', str(config_path), '--dry-run') == 0

        assert "Would dump sqlite database" in caplog.text
        assert not (tmp_path / "dump.sql").exists()

    def test_missing_config(self, tmp_path, capsys):
        assert run_main('-c', str(tmp_path / "missing.yaml")) == 1
        assert "not found" in capsys.readouterr().out

    def test_invalid_option(self, tmp_path, capsys):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"dump": {"compress": "zip"}}))

        assert run_main('-c', str(path)) == 1
        assert "Compression method (zip) is not defined yet" in capsys.readouterr().out

    def test_dump_failure_exit_code(self, config_path, tmp_path):
        assert run_main('-c', str(config_path), '-d', str(tmp_path / "missing" / "app.db")) == 1
