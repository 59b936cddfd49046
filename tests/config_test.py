"""Tests for environment-driven configuration."""

from __future__ import annotations

import logging
from pathlib import Path

from sealedfolio import config


class TestApiBase:
    """Tests for get_api_base."""

    def test_default(self, monkeypatch):
        monkeypatch.delenv("SEALEDFOLIO_API_BASE", raising=False)
        assert config.get_api_base() == "http://localhost:3000"

    def test_override_strips_slash(self, monkeypatch):
        monkeypatch.setenv("SEALEDFOLIO_API_BASE", "https://proxy.example/")
        assert config.get_api_base() == "https://proxy.example"


class TestDataDir:
    """Tests for data directory resolution."""

    def test_default(self, monkeypatch):
        monkeypatch.delenv("SEALEDFOLIO_DATA_DIR", raising=False)
        assert config.get_data_dir() == Path.home() / ".sealedfolio" / "data"

    def test_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SEALEDFOLIO_DATA_DIR", str(tmp_path))
        assert config.get_data_dir() == tmp_path
        assert config.get_db_path() == tmp_path / "portfolio.duckdb"


class TestHttpTimeout:
    """Tests for get_http_timeout."""

    def test_default(self, monkeypatch):
        monkeypatch.delenv("SEALEDFOLIO_HTTP_TIMEOUT", raising=False)
        assert config.get_http_timeout() == 15.0

    def test_override(self, monkeypatch):
        monkeypatch.setenv("SEALEDFOLIO_HTTP_TIMEOUT", "2.5")
        assert config.get_http_timeout() == 2.5

    def test_invalid_falls_back(self, monkeypatch, caplog):
        monkeypatch.setenv("SEALEDFOLIO_HTTP_TIMEOUT", "soon")
        with caplog.at_level(logging.WARNING):
            assert config.get_http_timeout() == 15.0
        assert "SEALEDFOLIO_HTTP_TIMEOUT" in caplog.text

    def test_non_positive_falls_back(self, monkeypatch):
        monkeypatch.setenv("SEALEDFOLIO_HTTP_TIMEOUT", "0")
        assert config.get_http_timeout() == 15.0


class TestLogLevel:
    """Tests for get_log_level."""

    def test_default(self, monkeypatch):
        monkeypatch.delenv("SEALEDFOLIO_LOG_LEVEL", raising=False)
        assert config.get_log_level() == logging.INFO

    def test_named_level(self, monkeypatch):
        monkeypatch.setenv("SEALEDFOLIO_LOG_LEVEL", "debug")
        assert config.get_log_level() == logging.DEBUG

    def test_unknown_level(self, monkeypatch):
        monkeypatch.setenv("SEALEDFOLIO_LOG_LEVEL", "chatty")
        assert config.get_log_level() == logging.INFO
