# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the chat proxy ops unit so this responsibility stays isolated, testable, and easy to evolve."""

from __future__ import annotations

import logging

from assistantchat.core.config import AppConfig
from assistantchat.models.chat import Message
from assistantchat.services.llm.llm_completion_ops import (
    first_choice_message,
    openai_chat_complete,
)

logger = logging.getLogger(__name__)


async def relay_chat(messages: list[Message], config: AppConfig) -> Message:
    """Forward the transcript verbatim and return the first candidate reply."""
    logger.debug(
        "Relaying %d message(s) to %s with model %s",
        len(messages),
        config.base_url,
        config.model,
    )
    resp_json = await openai_chat_complete(
        messages=[m.model_dump() for m in messages],
        base_url=config.base_url,
        api_key=config.api_key,
        model_id=config.model,
        timeout_s=config.timeout_s,
    )
    return Message(**first_choice_message(resp_json))
