# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# Purpose: Defines the messages unit so this responsibility stays isolated, testable, and easy to evolve.

"""Fixed user-facing strings, keyed by locale.

Upstream failures are flattened to these strings; nothing else is shown to
the caller.
"""

from __future__ import annotations

from typing import Dict

DEFAULT_LOCALE = "zh"

MESSAGES: Dict[str, Dict[str, str]] = {
    "zh": {
        "server_error": "服务器处理请求时出错",
        "bad_request": "请求格式无效",
        "apology": "抱歉，服务出现了一些问题，请稍后再试。",
        "empty_state": "开始与 AI 助手对话吧！",
        "input_placeholder": "输入您的问题...",
        "typing": "AI 助手正在输入...",
    },
    "en": {
        "server_error": "The server failed to process the request",
        "bad_request": "Invalid request body",
        "apology": "Sorry, something went wrong with the service. Please try again later.",
        "empty_state": "Start a conversation with the AI assistant!",
        "input_placeholder": "Type your question...",
        "typing": "The AI assistant is typing...",
    },
}


def supported_locales() -> list[str]:
    return sorted(MESSAGES)


def get_message(key: str, locale: str = DEFAULT_LOCALE) -> str:
    """Return the string for ``key`` in ``locale``.

    Unknown locales fall back to the default locale; an unknown key is a
    programming error and raises ``KeyError``.
    """
    table = MESSAGES.get(locale) or MESSAGES[DEFAULT_LOCALE]
    return table[key]
