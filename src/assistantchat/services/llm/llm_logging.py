# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the llm logging unit so this responsibility stays isolated, testable, and easy to evolve.

Keeps a bounded in-memory record of upstream exchanges for the debug
endpoint, with credentials redacted.
"""

from __future__ import annotations

import datetime
import json
import logging
import os
import uuid
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

MAX_LLM_LOGS = 100
REDACTED_HEADERS = ("authorization", "x-api-key")

# Upstream communication log for the lifetime of the process
llm_logs: List[Dict[str, Any]] = []


def add_llm_log(log_entry: Dict[str, Any]) -> None:
    """Add a log entry to the global list, keeping only the last 100 entries.

    If ASSISTANTCHAT_LLM_DUMP is set, also append the raw entry to a file.
    """
    if log_entry not in llm_logs:
        llm_logs.append(log_entry)
        if len(llm_logs) > MAX_LLM_LOGS:
            llm_logs.pop(0)

    if os.getenv("ASSISTANTCHAT_LLM_DUMP") == "1":
        _dump_log_entry(log_entry)


def _dump_log_entry(log_entry: Dict[str, Any]) -> None:
    default_path = os.path.join("data", "logs", "llm_raw.log")
    log_path = os.getenv("ASSISTANTCHAT_LLM_DUMP_PATH") or default_path
    try:
        os.makedirs(os.path.dirname(log_path) or ".", exist_ok=True)
        with open(log_path, "a", encoding="utf-8") as f:
            f.write("=" * 80 + "\n")
            f.write(f"TIMESTAMP: {datetime.datetime.now().isoformat()}\n")
            f.write("-" * 80 + "\n")
            f.write(json.dumps(log_entry, indent=2, default=str) + "\n")
            f.write("=" * 80 + "\n\n")
    except OSError:
        # dev-only feature, the request itself must not fail because of it
        logger.warning("Could not write LLM dump to %s", log_path, exc_info=True)


def create_log_entry(
    url: str, method: str, headers: Dict[str, str], body: Any
) -> Dict[str, Any]:
    """Create a new log entry structure."""
    safe_body = body
    if isinstance(body, dict):
        safe_body = body.copy()
        for key in ["api_key", "secret", "password"]:
            if key in safe_body:
                safe_body[key] = "REDACTED"

    return {
        "id": str(uuid.uuid4()),
        "timestamp_start": datetime.datetime.now().isoformat(),
        "timestamp_end": None,
        "request": {
            "url": url,
            "method": method,
            "headers": {
                k: ("***" if k.lower() in REDACTED_HEADERS else v)
                for k, v in headers.items()
            },
            "body": safe_body,
        },
        "response": {
            "status_code": None,
            "body": None,
            "error": None,
        },
    }
