# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Chat session state for the client side of the proxy.

A ``ChatSession`` owns the transcript, the pending input text and the
in-flight flag. ``submit`` is the only state transition: it appends the user
turn, sends the whole transcript through a transport, and appends exactly one
assistant turn (the reply, or a fixed apology when anything goes wrong).
At most one submission is outstanding; extra submissions are dropped, not
queued.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx
from pydantic import ValidationError

from assistantchat.core.messages import DEFAULT_LOCALE, get_message
from assistantchat.models.chat import Message
from assistantchat.services.exceptions import UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_CHAT_ENDPOINT = "http://127.0.0.1:8000/api/v1/chat"


class ChatTransport(Protocol):
    async def send(self, messages: list[Message]) -> Message: ...


class HttpChatTransport:
    """Posts the transcript to the proxy route with httpx."""

    def __init__(
        self,
        endpoint: str = DEFAULT_CHAT_ENDPOINT,
        timeout_s: Optional[float] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint
        # None means wait indefinitely, the session has no cancellation policy
        self.timeout = httpx.Timeout(timeout_s)
        self._http_transport = http_transport

    async def send(self, messages: list[Message]) -> Message:
        body = {"messages": [m.model_dump() for m in messages]}
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._http_transport
        ) as client:
            response = await client.post(self.endpoint, json=body)
            response.raise_for_status()
            try:
                data = response.json()
                return Message(role="assistant", content=data["content"])
            except (ValueError, KeyError, TypeError, ValidationError) as exc:
                raise UpstreamError(f"Malformed chat response: {exc}") from exc


class ChatSession:
    def __init__(self, transport: ChatTransport, locale: str = DEFAULT_LOCALE):
        self._transport = transport
        self._transcript: list[Message] = []
        self.locale = locale
        self.pending_input = ""
        self.is_loading = False

    @property
    def transcript(self) -> list[Message]:
        return list(self._transcript)

    def _apology(self) -> Message:
        return Message(role="assistant", content=get_message("apology", self.locale))

    async def submit(self, text: Optional[str] = None) -> list[Message]:
        """Run one round trip and return the resulting transcript.

        ``text`` defaults to ``pending_input``. Blank input, or a call made
        while another submission is in flight, leaves everything untouched.
        """
        if text is None:
            text = self.pending_input
        content = text.strip()
        if not content or self.is_loading:
            return self.transcript

        self._transcript.append(Message(role="user", content=content))
        self.pending_input = ""
        self.is_loading = True

        try:
            reply = await self._transport.send(self.transcript)
        except Exception:
            logger.warning("Chat request failed", exc_info=True)
            reply = self._apology()
        finally:
            self.is_loading = False

        self._transcript.append(reply)
        return self.transcript
