from __future__ import annotations

import logging
import sys
from collections.abc import Sequence

from .config import get_settings, resolve
from .dispatcher import dispatch
from .errors import ConfigError, SendError, SettingsError
from .twilio_client import TwilioSmsSender, get_twilio_client

logger = logging.getLogger("sms_notify")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.handlers[:] = [handler]

    # The Twilio HTTP client logs full request URLs and params at INFO
    logging.getLogger("twilio.http_client").setLevel(logging.WARNING)


def main(argv: Sequence[str] | None = None) -> int:
    """
    Resolve the configuration and notify every subscriber.

    Returns the process exit status: 0 when every send succeeded,
    1 on any settings, configuration or send failure.
    """
    try:
        settings = get_settings()
    except SettingsError as err:
        configure_logging()
        logger.critical("%s", err)
        return 1
    configure_logging(settings.log_level)

    try:
        conf = resolve(argv)
    except ConfigError as err:
        logger.critical("%s", err)
        return 1

    client = get_twilio_client(conf.account_sid, conf.auth_token, timeout=settings.http_timeout)
    sender = TwilioSmsSender(client)

    try:
        dispatch(sender, conf.subscribers, conf.number, conf.notification_text)
    except SendError as err:
        logger.critical("%s", err)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
