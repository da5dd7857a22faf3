from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from requests import RequestException
from twilio.base.exceptions import TwilioException, TwilioRestException

from .errors import SendProviderError, SendTransportError
from .sms import OutboundSms
from .twilio_client import more_info_url

logger = logging.getLogger(__name__)


class SmsSender(Protocol):
    def send(self, sms: OutboundSms) -> str: ...


def dispatch(sender: SmsSender, subscribers: Sequence[str], from_: str, text: str) -> list[str]:
    """
    Send `text` from `from_` to every subscriber, one at a time, in order.

    Stops at the first failure:
      - SendProviderError if the provider rejected the message
      - SendTransportError if the request itself failed

    Messages already sent before a failure are not undone.
    Returns the provider message ids when every send succeeded.
    """
    sent: list[str] = []

    for sub in subscribers:
        logger.info("sending notification to %s from %s. body: %r", sub, from_, text)
        sms = OutboundSms(to=sub, from_=from_, body=text)

        try:
            sid = sender.send(sms)
        except TwilioRestException as exc:
            raise SendProviderError(
                to=sub,
                code=exc.code,
                status=exc.status,
                message=exc.msg,
                more_info=more_info_url(exc.code),
            ) from exc
        except (TwilioException, RequestException) as exc:
            raise SendTransportError(sub, str(exc)) from exc

        logger.debug("notification to %s accepted (sid=%s)", sub, sid)
        sent.append(sid)

    return sent
