from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class OutboundSms(BaseModel):
    model_config = ConfigDict(frozen=True)

    to: str
    from_: str
    body: str

    # Reserved by the provider API; always left empty by the dispatcher.
    media_url: str | None = None
    status_callback: str | None = None
