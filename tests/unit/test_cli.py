from __future__ import annotations

import logging
from pathlib import Path
from typing import Generator

import pytest
from typer.testing import CliRunner

from axion.main import app
from axion.publisher import PUBLISH_DIR

runner = CliRunner()


@pytest.fixture
def app_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[Path, None, None]:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("APP_BASE_PATH", str(tmp_path))
    monkeypatch.setenv("DB_CONNECTION", "sqlite")
    monkeypatch.setenv("DB_DATABASE", "database/cli.sqlite")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    # The CLI callback reconfigures root logging onto the runner's streams.
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield tmp_path
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def test_info_shows_driver_and_dsn(app_env: Path):
    result = runner.invoke(app, ["info"])
    assert result.exit_code == 0
    assert "Driver" in result.output
    assert "sqlite" in result.output


def test_check_succeeds_on_sqlite(app_env: Path):
    result = runner.invoke(app, ["check"])
    assert result.exit_code == 0
    assert "OK: sqlite:///" in result.output
    assert (app_env / "database" / "cli.sqlite").is_file()


def test_check_fails_for_unknown_driver(app_env: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DB_CONNECTION", "oracle")
    result = runner.invoke(app, ["check"])
    assert result.exit_code == 1


def test_publish_then_skip(app_env: Path):
    first = runner.invoke(app, ["publish"])
    assert first.exit_code == 0
    assert "Published 4 file(s)" in first.output

    second = runner.invoke(app, ["publish", "--force"])
    assert second.exit_code == 0
    assert second.output.count("Skipped existing file") == 4
    assert "Published 0 file(s)" in second.output


def test_publish_cancelled_at_prompt(app_env: Path):
    (app_env / PUBLISH_DIR).mkdir()
    result = runner.invoke(app, ["publish"], input="n\n")
    assert result.exit_code == 0
    assert "Canceled. No files were copied." in result.output
    assert list((app_env / PUBLISH_DIR).iterdir()) == []


def test_publish_to_explicit_path(app_env: Path, tmp_path: Path):
    other = tmp_path / "elsewhere"
    result = runner.invoke(app, ["publish", "--path", str(other)])
    assert result.exit_code == 0
    assert (other / PUBLISH_DIR / "routes" / "web.py").is_file()
