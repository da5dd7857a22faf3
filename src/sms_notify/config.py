from __future__ import annotations

import argparse
import logging
import os
import re
from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from .errors import ConfigLoadError, ConfigParseError, MissingFieldError, SettingsError

# Settings field -> environment variable it is read from
SETTINGS_ENV: dict[str, str] = {
    "log_level": "SMS_NOTIFY_LOG_LEVEL",
    "http_timeout": "SMS_NOTIFY_HTTP_TIMEOUT",
}


class Settings(BaseModel):
    """Runtime knobs that are not part of the notification itself."""

    log_level: str = "INFO"

    # Per-request timeout (seconds) for the Twilio HTTP client.
    # None keeps the library default (block until the provider answers).
    http_timeout: float | None = Field(default=None, gt=0)

    @model_validator(mode="before")
    @classmethod
    def _from_env(cls, data: Any) -> Any:
        values = dict(data or {})
        for field, env_var in SETTINGS_ENV.items():
            raw = os.getenv(env_var)
            if raw:
                values[field] = raw
        return values

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value!r}")
        return level


def _env_name(loc: tuple[int | str, ...]) -> str:
    if not loc:
        return "settings"
    return SETTINGS_ENV.get(str(loc[0]), str(loc[0]))


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        problems = "; ".join(
            f"{_env_name(err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise SettingsError(problems) from exc


class _TextLoader(yaml.BaseLoader):
    """Keeps every scalar as text, except YAML nulls which load as None."""


_TextLoader.add_implicit_resolver(
    "tag:yaml.org,2002:null",
    re.compile(r"^(?:~|null|Null|NULL|)$"),
    list("~nN") + [""],
)
_TextLoader.add_constructor("tag:yaml.org,2002:null", lambda loader, node: None)


class NotificationConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    account_sid: str = Field(default="", alias="account-sid")
    auth_token: str = Field(default="", alias="auth-token")
    subscribers: list[str] = Field(default_factory=list)
    notification_text: str = Field(default="", alias="notification-text")
    number: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _null_is_empty(cls, value: Any, info: ValidationInfo) -> Any:
        # `key:`, `key: ~` and `key: null` all mean "not set"
        if value is None and info.field_name is not None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value


# Checked in this order; only the first missing one is reported.
REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("account_sid", "account SID"),
    ("auth_token", "auth token"),
    ("subscribers", "subscribers"),
    ("notification_text", "notification text"),
    ("number", "number"),
)


@dataclass(frozen=True)
class Flags:
    number: str = ""
    subs: str = ""
    text: str = ""
    sid: str = ""
    token: str = ""
    config: str = ""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sms-notify",
        description="Send one SMS notification to every subscriber via Twilio.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "-from",
        "--from",
        dest="number",
        default="",
        help="The number from which the SMS will be sent",
    )
    parser.add_argument(
        "-subs",
        "--subs",
        default="",
        help="Comma-separated subscribers list",
    )
    parser.add_argument("-text", "--text", default="", help="Text body")
    parser.add_argument("-sid", "--sid", default="", help="Twilio account SID")
    parser.add_argument("-token", "--token", default="", help="Twilio account token")
    parser.add_argument("-config", "--config", default="", help="Config path (YAML)")
    return parser


def parse_flags(argv: Sequence[str] | None = None) -> Flags:
    args = build_parser().parse_args(argv)
    return Flags(
        number=args.number,
        subs=args.subs,
        text=args.text,
        sid=args.sid,
        token=args.token,
        config=args.config,
    )


def load_config_file(path: str | Path) -> NotificationConfig:
    """
    Read a YAML config file into a NotificationConfig.

    Scalars are read as plain text (no int/bool resolution), so unquoted
    phone numbers such as +15551234567 stay strings. Nulls and missing
    keys keep their empty defaults; unknown keys are ignored.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ConfigLoadError(str(path), str(exc)) from exc

    try:
        data = yaml.load(raw.decode("utf-8"), Loader=_TextLoader)
    except (UnicodeDecodeError, yaml.YAMLError) as exc:
        raise ConfigParseError(str(path), str(exc)) from exc

    if data is None:
        return NotificationConfig()
    if not isinstance(data, dict):
        raise ConfigParseError(
            str(path), f"expected a mapping at top level, got {type(data).__name__}"
        )

    try:
        return NotificationConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigParseError(str(path), str(exc)) from exc


def merge(base: NotificationConfig, flags: Flags) -> NotificationConfig:
    """Overlay non-empty flag values onto the file configuration."""
    update: dict[str, Any] = {}
    if flags.sid:
        update["account_sid"] = flags.sid
    if flags.token:
        update["auth_token"] = flags.token
    if flags.subs:
        # replaces the file list, never merged with it
        update["subscribers"] = flags.subs.split(",")
    if flags.text:
        update["notification_text"] = flags.text
    if flags.number:
        update["number"] = flags.number
    return base.model_copy(update=update)


def validate(config: NotificationConfig) -> NotificationConfig:
    for attr, label in REQUIRED_FIELDS:
        if not getattr(config, attr):
            raise MissingFieldError(label)
    return config


def resolve(argv: Sequence[str] | None = None) -> NotificationConfig:
    """
    Build the validated configuration for one run.

    - parse the command-line flags
    - load the YAML file when -config is given
    - let every non-empty flag override its file value
    - reject the result on the first missing field
    """
    flags = parse_flags(argv)

    base = load_config_file(flags.config) if flags.config else NotificationConfig()

    return validate(merge(base, flags))
