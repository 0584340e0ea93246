# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Message rendering: Markdown parse, then sanitize.

Assistant replies are untrusted. They go through two separate stages so the
sanitizer can be exercised on its own:

1. ``parse_markdown``: CommonMark plus GFM tables and strikethrough, raw HTML
   passed through, code and links tagged with CSS classes.
2. ``sanitize_html``: allow-list cleaning with nh3. Scripts, event handlers
   and non-http(s)/mailto URLs are removed; every link opens in a new
   context with ``rel="noopener noreferrer"``.

User turns are never parsed; they are escaped as plain text.
"""

from __future__ import annotations

import html

import nh3
from markdown_it import MarkdownIt

from assistantchat.models.chat import Message

INLINE_CODE_CLASS = "code-inline"
BLOCK_CODE_CLASS = "code-block"
LINK_CLASS = "chat-link"

ALLOWED_TAGS = {
    "a",
    "b",
    "blockquote",
    "br",
    "code",
    "del",
    "em",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "hr",
    "i",
    "img",
    "kbd",
    "li",
    "ol",
    "p",
    "pre",
    "s",
    "span",
    "strong",
    "sub",
    "sup",
    "table",
    "tbody",
    "td",
    "th",
    "thead",
    "tr",
    "ul",
}

# "rel" and "target" are set by the sanitizer itself and must stay out of here
ALLOWED_ATTRIBUTES = {
    "a": {"href", "title", "class"},
    "code": {"class"},
    "pre": {"class"},
    "span": {"class"},
    "img": {"src", "alt", "title"},
    "ol": {"start"},
}

ALLOWED_URL_SCHEMES = {"http", "https", "mailto"}
LINK_REL = "noopener noreferrer"


def _with_class(default_rule, css_class: str):
    def rule(self, tokens, idx, options, env):
        tokens[idx].attrJoin("class", css_class)
        return default_rule(tokens, idx, options, env)

    return rule


def _link_open(self, tokens, idx, options, env):
    # links have no dedicated rule and go through the generic token renderer
    tokens[idx].attrJoin("class", LINK_CLASS)
    return self.renderToken(tokens, idx, options, env)


def build_markdown_parser() -> MarkdownIt:
    md = MarkdownIt("commonmark", {"html": True}).enable(["table", "strikethrough"])
    rules = md.renderer.rules
    md.add_render_rule(
        "code_inline", _with_class(rules["code_inline"], INLINE_CODE_CLASS)
    )
    md.add_render_rule("fence", _with_class(rules["fence"], BLOCK_CODE_CLASS))
    md.add_render_rule("code_block", _with_class(rules["code_block"], BLOCK_CODE_CLASS))
    md.add_render_rule("link_open", _link_open)
    return md


_markdown = build_markdown_parser()


def parse_markdown(text: str) -> str:
    """Convert Markdown to HTML. The output is NOT safe to display."""
    return _markdown.render(text)


def sanitize_html(raw_html: str) -> str:
    return nh3.clean(
        raw_html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        url_schemes=ALLOWED_URL_SCHEMES,
        link_rel=LINK_REL,
        set_tag_attribute_values={"a": {"target": "_blank"}},
    )


def render_markdown(text: str) -> str:
    return sanitize_html(parse_markdown(text))


def render_plain_text(text: str) -> str:
    return html.escape(text)


def render_message(message: Message) -> str:
    """Render the body of one transcript bubble."""
    if message.role == "user":
        return render_plain_text(message.content)
    return render_markdown(message.content)
