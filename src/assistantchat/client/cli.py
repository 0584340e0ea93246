# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the cli unit so this responsibility stays isolated, testable, and easy to evolve.

Terminal chat client that talks to a running AssistantChat server.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable, Optional, TextIO

from assistantchat.client.session import (
    DEFAULT_CHAT_ENDPOINT,
    ChatSession,
    HttpChatTransport,
)
from assistantchat.client.transcript_view import render_page
from assistantchat.core.messages import DEFAULT_LOCALE, get_message, supported_locales

EXIT_COMMANDS = {"/exit", "/quit"}


def build_arg_parser() -> argparse.ArgumentParser:
    """Build Arg Parser."""
    parser = argparse.ArgumentParser(
        prog="assistantchat-chat",
        description="Chat with the AssistantChat proxy from the terminal",
    )
    parser.add_argument(
        "--endpoint",
        default=DEFAULT_CHAT_ENDPOINT,
        help=f"Chat route of the server (default: {DEFAULT_CHAT_ENDPOINT})",
    )
    parser.add_argument(
        "--locale",
        default=DEFAULT_LOCALE,
        choices=supported_locales(),
        help=f"Language of fixed UI strings (default: {DEFAULT_LOCALE})",
    )
    parser.add_argument(
        "--timeout-s",
        type=float,
        default=None,
        help="Request timeout in seconds (default: wait indefinitely)",
    )
    parser.add_argument(
        "--html-out",
        default=None,
        help="Write the rendered transcript to this HTML file after every turn",
    )
    return parser


def _write_html(session: ChatSession, path: Optional[str]) -> None:
    if path:
        Path(path).write_text(render_page(session), encoding="utf-8")


async def run_chat(
    session: ChatSession,
    read_line: Callable[[str], str] = input,
    out: TextIO = sys.stdout,
    html_out: Optional[str] = None,
) -> None:
    """Read lines until EOF or an exit command, one round trip per line."""
    prompt = get_message("input_placeholder", session.locale) + " "
    if not session.transcript:
        print(get_message("empty_state", session.locale), file=out)
    _write_html(session, html_out)

    while True:
        try:
            line = await asyncio.to_thread(read_line, prompt)
        except EOFError:
            break
        if line.strip() in EXIT_COMMANDS:
            break

        session.pending_input = line
        before = len(session.transcript)
        pending = asyncio.ensure_future(session.submit())
        # submit sets the flag synchronously once the task starts
        await asyncio.sleep(0)
        if session.is_loading:
            print(get_message("typing", session.locale), file=out)
            _write_html(session, html_out)
        transcript = await pending

        if len(transcript) > before:
            print(transcript[-1].content, file=out)
        _write_html(session, html_out)


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.WARNING)

    transport = HttpChatTransport(args.endpoint, timeout_s=args.timeout_s)
    session = ChatSession(transport, locale=args.locale)
    try:
        asyncio.run(run_chat(session, html_out=args.html_out))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
