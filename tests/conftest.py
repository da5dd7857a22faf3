from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from sms_notify.config import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Each test starts with no env overrides and an empty settings cache."""
    monkeypatch.delenv("SMS_NOTIFY_LOG_LEVEL", raising=False)
    monkeypatch.delenv("SMS_NOTIFY_HTTP_TIMEOUT", raising=False)
    get_settings.cache_clear()


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    """Write YAML text to a temporary config file and return its path."""

    def _write(content: str) -> Path:
        path = tmp_path / "config.yaml"
        path.write_text(content, encoding="utf-8")
        return path

    return _write
