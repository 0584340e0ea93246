# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the conftest unit so this responsibility stays isolated, testable, and easy to evolve."""

import pytest

from assistantchat.services.llm.llm_logging import llm_logs

# Variables read by load_app_config / add_llm_log; a developer's shell must not leak into tests
_APP_ENV_VARS = (
    "DEEPSEEK_API_KEY",
    "DEEPSEEK_BASE_URL",
    "DEEPSEEK_MODEL",
    "DEEPSEEK_TIMEOUT_S",
    "ASSISTANTCHAT_LOCALE",
    "ASSISTANTCHAT_DEBUG",
    "ASSISTANTCHAT_CONFIG",
    "ASSISTANTCHAT_LLM_DUMP",
    "ASSISTANTCHAT_LLM_DUMP_PATH",
)


@pytest.fixture(autouse=True)
def clean_app_env(monkeypatch):
    for name in _APP_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    llm_logs.clear()
    yield
    llm_logs.clear()
