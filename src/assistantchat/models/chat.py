# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the chat unit so this responsibility stays isolated, testable, and easy to evolve.

Pydantic models for chat messages and the proxy request/response bodies.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant"]


class Message(BaseModel):
    """One turn of the transcript. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class ChatRequest(BaseModel):
    """Request body for ``POST /api/v1/chat``.

    The full transcript is sent on every turn; role alternation is not
    checked.
    """

    messages: list[Message] = Field(min_length=1)


class ChatErrorResponse(BaseModel):
    error: str
