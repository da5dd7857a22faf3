from __future__ import annotations

from typing import Any

from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from .sms import OutboundSms

TWILIO_ERROR_DOCS = "https://www.twilio.com/docs/errors/{code}"


def get_twilio_client(account_sid: str, auth_token: str, timeout: float | None = None) -> Client:
    if not account_sid or not auth_token:
        raise ValueError("Twilio credentials are not configured (account SID / auth token)")

    if timeout is None:
        return Client(account_sid, auth_token)

    return Client(account_sid, auth_token, http_client=TwilioHttpClient(timeout=timeout))


def more_info_url(code: int | None) -> str:
    """Reference page Twilio publishes for an error code."""
    if code is None:
        return ""
    return TWILIO_ERROR_DOCS.format(code=code)


class TwilioSmsSender:
    """
    Send one SMS through the Twilio REST API.

    Errors are left to propagate: TwilioRestException when Twilio answered
    with an error payload, TwilioException / requests errors when the call
    could not be made.
    """

    def __init__(self, client: Client) -> None:
        self.client = client

    def send(self, sms: OutboundSms) -> str:
        kwargs: dict[str, Any] = {}
        if sms.media_url:
            kwargs["media_url"] = [sms.media_url]
        if sms.status_callback:
            kwargs["status_callback"] = sms.status_callback

        message = self.client.messages.create(
            to=sms.to,
            from_=sms.from_,
            body=sms.body,
            **kwargs,
        )
        return message.sid
