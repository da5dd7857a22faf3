from __future__ import annotations

from enum import StrEnum


class Stage(StrEnum):
    LOAD_SETTINGS = "load settings"
    LOAD_CONFIG = "load config"
    UNMARSHAL_CONFIG = "unmarshal config"
    INVALID_CONFIG = "invalid config"
    SEND_SMS = "send SMS"


class NotifierError(Exception):
    """
    Base error for a notification run.

    Every error records the stage it came from; the underlying exception
    (if any) is kept as ``__cause__`` via ``raise ... from``.
    """

    stage: Stage

    def __init__(self, stage: Stage, detail: str) -> None:
        super().__init__(detail)
        self.stage = stage
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.stage}: {self.detail}"


# --- Configuration ---


class SettingsError(NotifierError):
    """An environment override could not be used."""

    def __init__(self, detail: str) -> None:
        super().__init__(Stage.LOAD_SETTINGS, detail)


class ConfigError(NotifierError):
    def __str__(self) -> str:
        text = super().__str__()
        if self.stage is Stage.LOAD_CONFIG:
            return text
        return f"{Stage.LOAD_CONFIG}: {text}"


class ConfigLoadError(ConfigError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(Stage.LOAD_CONFIG, f"read {path}: {reason}")
        self.path = path


class ConfigParseError(ConfigError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(Stage.UNMARSHAL_CONFIG, f"{path}: {reason}")
        self.path = path


class MissingFieldError(ConfigError):
    def __init__(self, field: str) -> None:
        super().__init__(Stage.INVALID_CONFIG, f"missing value: {field}")
        self.field = field


# --- Sending ---


class SendError(NotifierError):
    def __init__(self, to: str, detail: str) -> None:
        super().__init__(Stage.SEND_SMS, detail)
        self.to = to


class SendTransportError(SendError):
    """The send call itself could not complete (network, auth, client side)."""


class SendProviderError(SendError):
    """
    The provider answered with a structured error payload.

    code, status and message are copied from the provider exception as is.
    twilio-python does not keep the payload's `more_info`, so more_info is
    rebuilt from the code as the Twilio error reference URL.
    """

    def __init__(
        self,
        to: str,
        code: int | None,
        status: int,
        message: str,
        more_info: str,
    ) -> None:
        super().__init__(
            to,
            f"code: {code}, status: {status}, message: {message}, more info: {more_info}",
        )
        self.code = code
        self.status = status
        self.message = message
        self.more_info = more_info
