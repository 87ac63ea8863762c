from __future__ import annotations

import unittest

import requests
from types import SimpleNamespace
from unittest.mock import patch

from jeopardy_stats.ai.anthropic_client import (
    ANTHROPIC_MAX_ATTEMPTS,
    CodeSynthesisError,
    _build_request_payload,
    calculate_cost,
    generate_analysis_code,
    strip_code_fences,
)
from jeopardy_stats.ai.prompt import SYSTEM_PROMPT


class _FakeResponse:
    def __init__(self, status_code: int, payload: dict, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else str(payload)

    def json(self):
        return self._payload


class _NonJsonResponse(_FakeResponse):
    def json(self):
        raise ValueError("not json")


def _settings(api_key: str | None = "key") -> SimpleNamespace:
    return SimpleNamespace(
        anthropic_api_key=api_key,
        anthropic_model="claude-sonnet-4-20250514",
        anthropic_max_tokens=2048,
    )


_SUCCESS_PAYLOAD = {
    "content": [{"type": "text", "text": "```python\nx = len(games)\n```"}],
    "stop_reason": "end_turn",
    "usage": {"input_tokens": 1000, "output_tokens": 2000},
}


class AnthropicClientTests(unittest.TestCase):
    def test_build_request_payload_embeds_question(self) -> None:
        body = _build_request_payload("model", 512, "Who wins most often?")

        self.assertEqual(SYSTEM_PROMPT, body["system"])
        self.assertEqual(512, body["max_tokens"])
        self.assertIn('"Who wins most often?"', body["messages"][0]["content"])

    def test_strip_code_fences(self) -> None:
        self.assertEqual("x = 1", strip_code_fences("```python\nx = 1\n```"))
        self.assertEqual("x = 1", strip_code_fences("```\nx = 1\n```"))
        self.assertEqual("x = 1", strip_code_fences("  x = 1  "))

    def test_calculate_cost(self) -> None:
        usage = calculate_cost({"input_tokens": 1000, "output_tokens": 2000})

        self.assertEqual(1000, usage["inputTokens"])
        self.assertAlmostEqual(0.003, usage["inputCost"])
        self.assertAlmostEqual(0.03, usage["outputCost"])
        self.assertAlmostEqual(0.033, usage["totalCost"])

    def test_missing_api_key_fails_without_a_request(self) -> None:
        with patch("jeopardy_stats.ai.anthropic_client.requests.post") as mock_post:
            with self.assertRaises(CodeSynthesisError):
                generate_analysis_code("question", _settings(api_key=None))

        mock_post.assert_not_called()

    def test_generate_analysis_code_returns_code_and_usage(self) -> None:
        with patch(
            "jeopardy_stats.ai.anthropic_client.requests.post",
            return_value=_FakeResponse(200, _SUCCESS_PAYLOAD),
        ) as mock_post:
            code, usage = generate_analysis_code("How many games?", _settings())

        self.assertEqual("x = len(games)", code)
        self.assertEqual(2000, usage["outputTokens"])
        headers = mock_post.call_args.kwargs["headers"]
        self.assertEqual("key", headers["x-api-key"])
        self.assertIn("anthropic-version", headers)

    def test_api_error_includes_debug_summary(self) -> None:
        error_payload = {
            "type": "error",
            "error": {"type": "invalid_request_error", "message": "max_tokens too large"},
        }

        with patch(
            "jeopardy_stats.ai.anthropic_client.requests.post",
            return_value=_FakeResponse(400, error_payload),
        ):
            with self.assertRaises(CodeSynthesisError) as ctx:
                generate_analysis_code("question", _settings())

        msg = str(ctx.exception)
        self.assertIn("Anthropic API error 400", msg)
        self.assertIn("error_type=invalid_request_error", msg)

    def test_non_json_response_is_reported(self) -> None:
        with patch(
            "jeopardy_stats.ai.anthropic_client.requests.post",
            return_value=_NonJsonResponse(502, {}, text="<html>Bad Gateway</html>"),
        ):
            with self.assertRaises(CodeSynthesisError) as ctx:
                generate_analysis_code("question", _settings())

        self.assertIn("non-JSON", str(ctx.exception))

    def test_missing_text_block_is_reported(self) -> None:
        payload = {"content": [{"type": "tool_use"}], "stop_reason": "max_tokens"}

        with patch(
            "jeopardy_stats.ai.anthropic_client.requests.post",
            return_value=_FakeResponse(200, payload),
        ):
            with self.assertRaises(CodeSynthesisError) as ctx:
                generate_analysis_code("question", _settings())

        msg = str(ctx.exception)
        self.assertIn("missing text content", msg)
        self.assertIn("stop_reason=max_tokens", msg)

    def test_retries_after_timeout(self) -> None:
        with patch(
            "jeopardy_stats.ai.anthropic_client.requests.post",
            side_effect=[requests.Timeout("read timed out"), _FakeResponse(200, _SUCCESS_PAYLOAD)],
        ) as mock_post, patch("jeopardy_stats.ai.anthropic_client.time.sleep") as mock_sleep:
            code, _usage = generate_analysis_code("question", _settings())

        self.assertEqual("x = len(games)", code)
        self.assertEqual(2, mock_post.call_count)
        mock_sleep.assert_called_once_with(1)

    def test_gives_up_after_repeated_timeouts(self) -> None:
        with patch(
            "jeopardy_stats.ai.anthropic_client.requests.post",
            side_effect=requests.Timeout("read timed out"),
        ) as mock_post, patch("jeopardy_stats.ai.anthropic_client.time.sleep"):
            with self.assertRaises(CodeSynthesisError) as ctx:
                generate_analysis_code("question", _settings())

        self.assertEqual(ANTHROPIC_MAX_ATTEMPTS, mock_post.call_count)
        self.assertIn("after retries", str(ctx.exception))

    def test_connection_error_is_not_retried(self) -> None:
        with patch(
            "jeopardy_stats.ai.anthropic_client.requests.post",
            side_effect=requests.ConnectionError("refused"),
        ) as mock_post:
            with self.assertRaises(CodeSynthesisError):
                generate_analysis_code("question", _settings())

        self.assertEqual(1, mock_post.call_count)


if __name__ == "__main__":
    unittest.main()
