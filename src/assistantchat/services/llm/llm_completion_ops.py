# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the llm completion ops unit so this responsibility stays isolated, testable, and easy to evolve."""

from __future__ import annotations

import datetime
from typing import Any, Dict

import httpx

from assistantchat.services.exceptions import ConfigurationError, UpstreamError
from assistantchat.services.llm.llm_logging import add_llm_log, create_log_entry
from assistantchat.services.llm.llm_request_helpers import (
    build_headers,
    build_timeout,
    completions_url,
)


def _validate_base_url(base_url: str) -> None:
    """Reject base URLs that are not plain http(s) endpoints."""
    if not base_url:
        raise ConfigurationError("base_url is required")

    if not (base_url.startswith("http://") or base_url.startswith("https://")):
        raise ConfigurationError(f"Invalid base_url scheme: {base_url}")

    # userinfo and IPv6 literals are not expected for a completion endpoint
    if "@" in base_url or "[" in base_url or "]" in base_url:
        raise ConfigurationError(f"Potentially dangerous base_url: {base_url}")


async def _execute_llm_request(
    url: str, headers: Dict[str, str], body: Dict[str, Any], timeout_s: int
) -> dict:
    log_entry = create_log_entry(url, "POST", headers, body)
    add_llm_log(log_entry)

    async with httpx.AsyncClient(timeout=build_timeout(timeout_s)) as client:
        try:
            r = await client.post(url, headers=headers, json=body)
            log_entry["timestamp_end"] = datetime.datetime.now().isoformat()
            log_entry["response"]["status_code"] = r.status_code

            r.raise_for_status()
            resp_json = r.json()
            log_entry["response"]["body"] = resp_json
            return resp_json
        except Exception as e:
            log_entry["timestamp_end"] = datetime.datetime.now().isoformat()
            log_entry["response"]["error"] = str(e)
            raise


async def openai_chat_complete(
    *,
    messages: list[dict],
    base_url: str,
    api_key: str | None,
    model_id: str,
    timeout_s: int,
) -> dict:
    """Call the OpenAI-compatible chat completions endpoint and return JSON.

    Transport errors, non-2xx statuses and non-JSON bodies are raised as
    ``UpstreamError``.
    """
    _validate_base_url(base_url)

    url = completions_url(base_url)
    headers = build_headers(api_key)
    body: Dict[str, Any] = {"model": model_id, "messages": messages}

    try:
        resp_json = await _execute_llm_request(url, headers, body, timeout_s)
    except httpx.HTTPError as exc:
        raise UpstreamError(f"Upstream request failed: {exc}") from exc
    except ValueError as exc:
        raise UpstreamError(f"Upstream returned invalid JSON: {exc}") from exc

    if not isinstance(resp_json, dict):
        raise UpstreamError("Upstream returned a non-object JSON body")
    return resp_json


def first_choice_message(resp_json: dict) -> Dict[str, str]:
    """Return the first candidate as ``{"role": "assistant", "content": ...}``.

    Raises UpstreamError when there is no usable candidate.
    """
    choices = resp_json.get("choices")
    if not isinstance(choices, list) or not choices:
        raise UpstreamError("Upstream response contains no choices")

    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str) or not content:
        raise UpstreamError("Upstream response has no assistant content")

    return {"role": "assistant", "content": content}
