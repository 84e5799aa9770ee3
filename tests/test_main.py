"""
Notes API - Entry Point Tests
===============================

What:  Tests for the startup sequence in notes_api.__main__.main().
How:   uvicorn.run and setup_logging are patched; no socket is ever bound.

Startup failures (bad settings, uncreatable cache directory) must return a
non-zero status after logging a diagnostic.
"""

import logging
from unittest.mock import patch

import pytest

from notes_api.__main__ import main


@pytest.fixture(autouse=True)
def quiet_startup(monkeypatch):
    for var in ("NOTES_HOST", "NOTES_PORT", "NOTES_CACHE", "NOTES_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    with patch("notes_api.__main__.setup_logging"):
        yield


class TestMain:

    def test_starts_server_and_creates_cache(self, tmp_path):
        cache = tmp_path / "new" / "cache"

        with patch("notes_api.__main__.uvicorn.run") as mock_run:
            status = main(["--host", "127.0.0.1", "--port", "3000", "--cache", str(cache)])

        assert status == 0
        assert cache.is_dir()
        mock_run.assert_called_once()
        _, kwargs = mock_run.call_args
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 3000

    def test_missing_settings_exit_non_zero(self, caplog):
        with patch("notes_api.__main__.uvicorn.run") as mock_run, \
             caplog.at_level(logging.ERROR):
            status = main(["--host", "127.0.0.1"])

        assert status == 1
        mock_run.assert_not_called()
        assert "Invalid command-line arguments" in caplog.text

    def test_uncreatable_cache_exit_non_zero(self, tmp_path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with patch("notes_api.__main__.uvicorn.run") as mock_run, \
             caplog.at_level(logging.ERROR):
            status = main(
                ["--host", "127.0.0.1", "--port", "3000", "--cache", str(blocker / "cache")]
            )

        assert status == 1
        mock_run.assert_not_called()
        assert "cache directory" in caplog.text
