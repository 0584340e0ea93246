# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the chat unit so this responsibility stays isolated, testable, and easy to evolve.

API endpoint that relays a full transcript to the completion API and returns
the single assistant reply.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from assistantchat.api.v1.http_responses import error_json, message_json
from assistantchat.core.config import AppConfig
from assistantchat.core.messages import get_message
from assistantchat.models.chat import ChatErrorResponse, ChatRequest, Message
from assistantchat.services.chat.chat_proxy_ops import relay_chat
from assistantchat.services.exceptions import BadRequestError

logger = logging.getLogger(__name__)


def create_chat_router(config: AppConfig) -> APIRouter:
    """Build the chat router bound to ``config``."""
    router = APIRouter(tags=["Chat"])

    @router.post(
        "/chat",
        response_model=Message,
        responses={400: {"model": ChatErrorResponse}, 500: {"model": ChatErrorResponse}},
    )
    async def api_chat(request: Request) -> JSONResponse:
        """Relay a transcript and return one assistant message.

        Body JSON:
          {"messages": [{"role": "user|assistant", "content": str}, ...]}

        Returns ``{"role": "assistant", "content": str}`` or ``{"error": str}``
        with status 500 when the upstream call fails for any reason.
        """
        try:
            payload = await request.json()
            chat_request = ChatRequest.model_validate(payload)
        except (ValueError, ValidationError) as exc:
            logger.info("Rejected chat request: %s", exc)
            raise BadRequestError(get_message("bad_request", config.locale)) from exc

        try:
            reply = await relay_chat(chat_request.messages, config)
        except Exception:
            logger.exception("Upstream chat completion failed")
            return error_json(get_message("server_error", config.locale), 500)

        logger.info(
            "Chat reply relayed: %d message(s) in, %d chars out",
            len(chat_request.messages),
            len(reply.content),
        )
        return message_json(reply)

    return router
