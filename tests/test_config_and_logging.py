"""
Tests for settings loading and logging configuration.
"""

import json
import logging
from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError

from medicore_admin.config import Settings, get_settings, reset_settings
from medicore_admin.core.cache import EntityCacheStore, MemorySnapshotStore
from medicore_admin.core.domain.events import EntityKind
from medicore_admin.core.notifications import NoticeBoard
from medicore_admin.core.session import Session
from medicore_admin.core.shared.logger import (
    ColoredFormatter,
    JSONFormatter,
    configure_logging,
    session_context,
    store_context,
)


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.API_BASE_URL.endswith("/api/v1")
        assert settings.LOGIN_PATH == "/login"
        assert settings.DEMO_MODE is True
        assert settings.is_test

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("API_BASE_URL", "http://localhost:4000/api/v1/")
        monkeypatch.setenv("SNAPSHOT_BACKEND", "REDIS")
        monkeypatch.setenv("DEMO_MODE", "false")
        reset_settings()

        settings = get_settings()

        assert settings.API_BASE_URL == "http://localhost:4000/api/v1"
        assert settings.SNAPSHOT_BACKEND == "redis"
        assert settings.DEMO_MODE is False

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    @pytest.mark.parametrize(
        "field, value",
        [
            ("API_BASE_URL", "ftp://medicore.test"),
            ("SNAPSHOT_BACKEND", "sqlite"),
            ("LOG_FORMAT", "xml"),
            ("LOGIN_PATH", "login"),
        ],
    )
    def test_invalid_values_are_rejected(self, field, value):
        with pytest.raises(ValidationError):
            Settings(**{field: value})


def make_record(level: int, message: str, **context) -> logging.LogRecord:
    record = logging.LogRecord("medicore_admin.test", level, __file__, 10, message, None, None)
    for key, value in context.items():
        setattr(record, key, value)
    return record


class TestLogging:
    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_configure_logging_installs_one_console_handler(self):
        configure_logging("DEBUG", "json")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_configure_logging_rejects_unknown_level(self):
        with pytest.raises(ValueError):
            configure_logging("CHATTY")

    def test_json_formatter_renders_store_context(self):
        record = make_record(logging.INFO, "doctors cache refreshed", **store_context(EntityKind.DOCTORS))

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "doctors cache refreshed"
        assert data["context"] == {"entity_kind": "doctors"}

    def test_json_formatter_omits_empty_context(self):
        data = json.loads(JSONFormatter().format(make_record(logging.INFO, "plain")))

        assert "context" not in data

    def test_colored_formatter_appends_session_context(self, admin):
        record = make_record(logging.WARNING, "changed", **session_context(Session.signed_in(admin)))

        output = ColoredFormatter("%(levelname)s %(message)s").format(record)

        assert output.endswith("[session_phase=authenticated principal_id=adm-1]")
        assert "\033[33m" in output
        assert record.levelname == "WARNING"

    def test_plain_format_has_no_color(self):
        formatter = ColoredFormatter("%(levelname)s %(message)s", use_color=False)

        assert formatter.format(make_record(logging.INFO, "hi")) == "INFO hi"

    @pytest.mark.asyncio
    async def test_store_records_carry_entity_kind(self, caplog, notices):
        store = EntityCacheStore(EntityKind.MESSAGES, AsyncMock(return_value=[]), MemorySnapshotStore(), notices)

        with caplog.at_level(logging.INFO, logger="medicore_admin.core.cache.entity_store"):
            await store.ensure_fresh()

        records = [r for r in caplog.records if r.name == "medicore_admin.core.cache.entity_store"]
        assert records
        assert {record.entity_kind for record in records} == {"messages"}

    def test_notice_records_carry_notice_fields(self, caplog):
        board = NoticeBoard()

        with caplog.at_level(logging.WARNING, logger="medicore_admin.core.notifications"):
            notice = board.error("Failed to fetch doctors")

        [record] = [r for r in caplog.records if r.name == "medicore_admin.core.notifications"]
        assert record.notice_id == notice.id
        assert record.notice_level == "error"
