# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Adds REST contract tests for the chat proxy route, covering upstream success, upstream failure and invalid input."""

from unittest import TestCase
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
from fastapi.testclient import TestClient

from assistantchat.core.config import AppConfig
from assistantchat.core.messages import get_message
from assistantchat.main import create_app
from assistantchat.services.llm.llm_logging import llm_logs

UPSTREAM_URL = "http://fake/v1/chat/completions"
SERVER_ERROR_ZH = "服务器处理请求时出错"


def _upstream_response(status_code=200, **kwargs):
    return httpx.Response(
        status_code, request=httpx.Request("POST", UPSTREAM_URL), **kwargs
    )


def _completion(*contents):
    return {
        "id": "cmpl-1",
        "choices": [
            {"index": i, "message": {"role": "assistant", "content": c}}
            for i, c in enumerate(contents)
        ],
    }


class ChatEndpointTest(TestCase):
    def setUp(self):
        self.config = AppConfig(
            api_key="sk-test", base_url="http://fake/v1", model="deepseek-chat"
        )
        self.client = TestClient(create_app(self.config))

        patcher = patch(
            "assistantchat.services.llm.llm_completion_ops.httpx.AsyncClient"
        )
        MockClientClass = patcher.start()
        self.addCleanup(patcher.stop)

        self.upstream = MagicMock()
        MockClientClass.return_value = self.upstream
        self.upstream.__aenter__ = AsyncMock(return_value=self.upstream)
        self.upstream.__aexit__ = AsyncMock(return_value=False)
        self.upstream.post = AsyncMock()

    def test_returns_first_candidate_as_assistant_message(self):
        self.upstream.post.return_value = _upstream_response(
            json=_completion("hi there", "second candidate")
        )

        r = self.client.post(
            "/api/v1/chat", json={"messages": [{"role": "user", "content": "hello"}]}
        )

        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json(), {"role": "assistant", "content": "hi there"})

    def test_forwards_transcript_verbatim_with_model_and_credential(self):
        self.upstream.post.return_value = _upstream_response(json=_completion("ok"))
        # two user turns in a row: alternation is not enforced
        messages = [
            {"role": "user", "content": "first"},
            {"role": "assistant", "content": "reply"},
            {"role": "user", "content": "second"},
            {"role": "user", "content": "second"},
        ]

        r = self.client.post("/api/v1/chat", json={"messages": messages})
        self.assertEqual(r.status_code, 200, r.text)

        self.upstream.post.assert_awaited_once()
        args, kwargs = self.upstream.post.call_args
        self.assertEqual(args[0], UPSTREAM_URL)
        self.assertEqual(kwargs["json"], {"model": "deepseek-chat", "messages": messages})
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer sk-test")

    def test_transport_error_yields_generic_server_error(self):
        self.upstream.post.side_effect = httpx.ConnectError(
            "connection refused by 10.0.0.1"
        )

        r = self.client.post(
            "/api/v1/chat", json={"messages": [{"role": "user", "content": "hi"}]}
        )

        self.assertEqual(r.status_code, 500)
        self.assertEqual(r.json(), {"error": SERVER_ERROR_ZH})
        self.assertNotIn("10.0.0.1", r.text)

    def test_upstream_error_status_is_not_leaked(self):
        self.upstream.post.return_value = _upstream_response(
            401, json={"error": {"message": "Authentication Fails, key sk-test"}}
        )

        r = self.client.post(
            "/api/v1/chat", json={"messages": [{"role": "user", "content": "hi"}]}
        )

        self.assertEqual(r.status_code, 500)
        self.assertEqual(r.json(), {"error": SERVER_ERROR_ZH})
        self.assertNotIn("Authentication", r.text)

    def test_malformed_upstream_payloads_yield_server_error(self):
        bad_responses = [
            _upstream_response(content=b"<html>gateway</html>"),
            _upstream_response(json={"choices": []}),
            _upstream_response(json={"choices": [{"message": {}}]}),
            _upstream_response(json=[1, 2, 3]),
        ]
        for bad in bad_responses:
            with self.subTest(body=bad.content):
                self.upstream.post.return_value = bad
                r = self.client.post(
                    "/api/v1/chat",
                    json={"messages": [{"role": "user", "content": "hi"}]},
                )
                self.assertEqual(r.status_code, 500)
                self.assertEqual(r.json(), {"error": SERVER_ERROR_ZH})

    def test_invalid_request_bodies_are_rejected(self):
        bodies = [
            {"messages": []},
            {"messages": "hello"},
            {"messages": [{"role": "system", "content": "x"}]},
            {"messages": [{"role": "user"}]},
            {},
        ]
        for body in bodies:
            with self.subTest(body=body):
                r = self.client.post("/api/v1/chat", json=body)
                self.assertEqual(r.status_code, 400)
                self.assertIn("error", r.json())

        r_bad = self.client.post(
            "/api/v1/chat",
            content="{not-json",
            headers={"content-type": "application/json"},
        )
        self.assertEqual(r_bad.status_code, 400)
        self.upstream.post.assert_not_awaited()

    def test_error_message_follows_configured_locale(self):
        client = TestClient(create_app(self.config.model_copy(update={"locale": "en"})))
        self.upstream.post.side_effect = httpx.ReadTimeout("timed out")

        r = client.post(
            "/api/v1/chat", json={"messages": [{"role": "user", "content": "hi"}]}
        )

        self.assertEqual(r.status_code, 500)
        self.assertEqual(r.json(), {"error": get_message("server_error", "en")})

    def test_debug_log_route_is_absent_by_default(self):
        self.upstream.post.side_effect = httpx.ConnectError(
            "connection refused by 10.0.0.1"
        )
        r = self.client.post(
            "/api/v1/chat", json={"messages": [{"role": "user", "content": "my secret"}]}
        )
        self.assertEqual(r.status_code, 500)

        r_logs = self.client.get("/api/v1/debug/llm_logs")
        self.assertEqual(r_logs.status_code, 404)
        self.assertNotIn("10.0.0.1", r_logs.text)
        self.assertNotIn("my secret", r_logs.text)
        self.assertEqual(self.client.delete("/api/v1/debug/llm_logs").status_code, 404)

    def test_upstream_exchange_is_logged_with_redacted_credential(self):
        self.client = TestClient(
            create_app(self.config.model_copy(update={"debug": True}))
        )
        self.upstream.post.return_value = _upstream_response(json=_completion("hey"))
        self.client.post(
            "/api/v1/chat", json={"messages": [{"role": "user", "content": "hi"}]}
        )

        r_logs = self.client.get("/api/v1/debug/llm_logs")
        self.assertEqual(r_logs.status_code, 200)
        logs = r_logs.json()
        self.assertEqual(len(logs), 1)
        self.assertEqual(logs[0]["request"]["headers"]["Authorization"], "***")
        self.assertEqual(logs[0]["response"]["status_code"], 200)
        self.assertNotIn("sk-test", r_logs.text)

        r_clear = self.client.delete("/api/v1/debug/llm_logs")
        self.assertEqual(r_clear.status_code, 200)
        self.assertEqual(llm_logs, [])

    def test_health(self):
        r = self.client.get("/api/v1/health")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json().get("status"), "ok")
