from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from twilio.base.exceptions import TwilioRestException

from sms_notify import cli
from sms_notify.sms import OutboundSms


class RecordingSender:
    instances: list[RecordingSender] = []

    def __init__(self, client: Any, fail_for: str | None = None) -> None:
        self.client = client
        self.fail_for = fail_for
        self.sent: list[OutboundSms] = []
        RecordingSender.instances.append(self)

    def send(self, sms: OutboundSms) -> str:
        self.sent.append(sms)
        if sms.to == self.fail_for:
            raise TwilioRestException(
                status=400, uri="/Messages.json", msg="invalid number", code=21211
            )
        return "SM1"


@pytest.fixture
def wiring(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    """Replace the Twilio client and sender, and keep pytest's log capture intact."""
    seen: dict[str, Any] = {}

    def fake_client(account_sid: str, auth_token: str, timeout: float | None = None) -> object:
        seen["credentials"] = (account_sid, auth_token, timeout)
        return object()

    RecordingSender.instances = []
    monkeypatch.setattr(cli, "get_twilio_client", fake_client)
    monkeypatch.setattr(cli, "TwilioSmsSender", RecordingSender)
    monkeypatch.setattr(cli, "configure_logging", lambda level="INFO": None)
    return seen


def test_main_success(
    wiring: dict[str, Any], write_config: Callable[[str], Path]
) -> None:
    path = write_config(
        "account-sid: AC1\nauth-token: tok\nsubscribers: ['+100', '+200']\n"
        "notification-text: hi\nnumber: '+999'\n"
    )

    status = cli.main(["-config", str(path)])

    assert status == 0
    assert wiring["credentials"] == ("AC1", "tok", None)
    (sender,) = RecordingSender.instances
    assert [sms.to for sms in sender.sent] == ["+100", "+200"]


def test_main_passes_timeout_from_env(
    wiring: dict[str, Any], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SMS_NOTIFY_HTTP_TIMEOUT", "3")

    status = cli.main(["-sid", "AC1", "-token", "tok", "-subs", "+1", "-text", "x", "-from", "+2"])

    assert status == 0
    assert wiring["credentials"] == ("AC1", "tok", 3.0)


def test_main_config_error_exits_non_zero(
    wiring: dict[str, Any], caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.CRITICAL):
        status = cli.main([])

    assert status == 1
    assert "credentials" not in wiring
    assert caplog.messages == ["load config: invalid config: missing value: account SID"]


def test_main_send_error_exits_non_zero(
    wiring: dict[str, Any], monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    def failing_sender(client: Any) -> RecordingSender:
        return RecordingSender(client, fail_for="+100")

    monkeypatch.setattr(cli, "TwilioSmsSender", failing_sender)

    with caplog.at_level(logging.CRITICAL):
        status = cli.main(
            ["-sid", "AC1", "-token", "tok", "-subs", "+100,+200", "-text", "x", "-from", "+2"]
        )

    assert status == 1
    (sender,) = RecordingSender.instances
    assert [sms.to for sms in sender.sent] == ["+100"]
    assert caplog.messages[-1] == (
        "send SMS: code: 21211, status: 400, message: invalid number, "
        "more info: https://www.twilio.com/docs/errors/21211"
    )


def test_configure_logging_quiets_twilio_http_client() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        cli.configure_logging("DEBUG")
        assert root.level == logging.DEBUG
        assert logging.getLogger("twilio.http_client").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_main_bad_settings_exits_non_zero(
    wiring: dict[str, Any], monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("SMS_NOTIFY_HTTP_TIMEOUT", "abc")

    with caplog.at_level(logging.CRITICAL):
        status = cli.main(["-sid", "AC1", "-token", "tok", "-subs", "+1", "-text", "x", "-from", "+2"])

    assert status == 1
    assert "credentials" not in wiring
    assert len(caplog.messages) == 1
    assert caplog.messages[0].startswith("load settings: SMS_NOTIFY_HTTP_TIMEOUT: ")
