# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# Purpose: Defines the transcript view unit so this responsibility stays isolated, testable, and easy to evolve.

"""HTML view of a chat session: message bubbles plus the typing indicator."""

from __future__ import annotations

import html

from assistantchat.client.rendering import render_message
from assistantchat.client.session import ChatSession
from assistantchat.core.messages import get_message

TYPING_DOTS = 3


def _render_bubble(role: str, body: str) -> str:
    return (
        f'<div class="chat-message chat-message--{role}">'
        f'<div class="chat-bubble">{body}</div>'
        "</div>"
    )


def render_typing_indicator(locale: str) -> str:
    label = html.escape(get_message("typing", locale), quote=True)
    dots = '<span class="chat-typing-dot"></span>' * TYPING_DOTS
    return f'<div class="chat-typing" role="status" aria-label="{label}">{dots}</div>'


def render_transcript(session: ChatSession) -> str:
    """Render the transcript list and, while loading, the typing indicator.

    The indicator is a sibling of the transcript list, never one of its
    entries.
    """
    messages = session.transcript
    if not messages:
        placeholder = html.escape(get_message("empty_state", session.locale))
        items = f'<div class="chat-empty"><p>{placeholder}</p></div>'
    else:
        items = "".join(_render_bubble(m.role, render_message(m)) for m in messages)

    parts = [f'<div class="chat-transcript">{items}</div>']
    if session.is_loading:
        parts.append(render_typing_indicator(session.locale))
    return "\n".join(parts)


def render_page(session: ChatSession, title: str = "AI Assistant") -> str:
    """Wrap ``render_transcript`` in a standalone HTML document."""
    lang = "zh-CN" if session.locale == "zh" else session.locale
    return (
        "<!DOCTYPE html>\n"
        f'<html lang="{lang}">\n'
        '<head><meta charset="utf-8">'
        f"<title>{html.escape(title)}</title></head>\n"
        f"<body>\n{render_transcript(session)}\n</body>\n"
        "</html>\n"
    )
