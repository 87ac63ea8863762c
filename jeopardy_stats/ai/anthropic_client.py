from __future__ import annotations

import json
import logging
import time
from typing import Any

import requests

from jeopardy_stats.ai.prompt import SYSTEM_PROMPT, USER_PROMPT_TEMPLATE

logger = logging.getLogger(__name__)

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
MAX_ERROR_SNIPPET = 2000
ANTHROPIC_CONNECT_TIMEOUT_SECONDS = 15
ANTHROPIC_READ_TIMEOUT_SECONDS = 120
ANTHROPIC_MAX_ATTEMPTS = 3

# USD per million tokens.
PRICING = {"input": 3.0, "output": 15.0}


class CodeSynthesisError(RuntimeError):
    pass


def _truncate(value: str, limit: int = MAX_ERROR_SNIPPET) -> str:
    if len(value) <= limit:
        return value
    return value[:limit] + "...<truncated>"


def _response_debug_summary(response_json: dict[str, Any]) -> str:
    parts: list[str] = []

    stop_reason = response_json.get("stop_reason")
    if stop_reason:
        parts.append(f"stop_reason={stop_reason}")

    error = response_json.get("error")
    if isinstance(error, dict) and error:
        error_type = error.get("type")
        message = error.get("message")
        if error_type:
            parts.append(f"error_type={error_type}")
        if message:
            parts.append(f"error_message={message}")

    content = response_json.get("content")
    if isinstance(content, list):
        content_types = [
            str(block.get("type")) for block in content if isinstance(block, dict) and block.get("type")
        ]
        if content_types:
            parts.append(f"content_types={content_types}")

    if not parts:
        parts.append("no_debug_fields")

    parts.append("response_json=" + _truncate(json.dumps(response_json, ensure_ascii=False)))
    return "; ".join(parts)


def _build_request_payload(model: str, max_tokens: int, question: str) -> dict[str, Any]:
    return {
        "model": model,
        "max_tokens": max_tokens,
        "system": SYSTEM_PROMPT,
        "messages": [
            {
                "role": "user",
                "content": USER_PROMPT_TEMPLATE.format(question=question),
            }
        ],
    }


def _extract_text(response_json: dict[str, Any]) -> str:
    for block in response_json.get("content") or []:
        if isinstance(block, dict) and block.get("type") == "text":
            return block.get("text", "")
    return ""


def strip_code_fences(text: str) -> str:
    code = text.strip()
    for fence in ("```python", "```py", "```"):
        if code.startswith(fence):
            code = code[len(fence):]
            break
    if code.endswith("```"):
        code = code[:-3]
    return code.strip()


def calculate_cost(usage: dict[str, Any]) -> dict[str, Any]:
    input_tokens = int(usage.get("input_tokens") or 0)
    output_tokens = int(usage.get("output_tokens") or 0)
    input_cost = input_tokens / 1_000_000 * PRICING["input"]
    output_cost = output_tokens / 1_000_000 * PRICING["output"]
    return {
        "inputTokens": input_tokens,
        "outputTokens": output_tokens,
        "inputCost": input_cost,
        "outputCost": output_cost,
        "totalCost": input_cost + output_cost,
    }


def generate_analysis_code(question: str, settings) -> tuple[str, dict[str, Any]]:
    """Ask the model for a Python analysis fragment answering ``question``."""

    if not settings.anthropic_api_key:
        raise CodeSynthesisError("Missing Anthropic API key")

    body = _build_request_payload(
        settings.anthropic_model,
        settings.anthropic_max_tokens,
        question,
    )
    headers = {
        "x-api-key": settings.anthropic_api_key,
        "anthropic-version": ANTHROPIC_VERSION,
        "content-type": "application/json",
    }
    response = None
    last_exception: requests.RequestException | None = None
    for attempt in range(1, ANTHROPIC_MAX_ATTEMPTS + 1):
        try:
            response = requests.post(
                ANTHROPIC_MESSAGES_URL,
                headers=headers,
                json=body,
                timeout=(ANTHROPIC_CONNECT_TIMEOUT_SECONDS, ANTHROPIC_READ_TIMEOUT_SECONDS),
            )
            break
        except requests.Timeout as exc:
            last_exception = exc
            logger.warning("Anthropic request timed out (attempt %s/%s)", attempt, ANTHROPIC_MAX_ATTEMPTS)
            if attempt == ANTHROPIC_MAX_ATTEMPTS:
                break
            time.sleep(attempt)
        except requests.RequestException as exc:
            raise CodeSynthesisError(f"Anthropic request failed: {exc}") from exc

    if response is None:
        assert last_exception is not None
        raise CodeSynthesisError(
            f"Anthropic request failed after retries due to timeout. Last error: {last_exception}"
        ) from last_exception

    try:
        response_json = response.json()
    except ValueError as exc:
        raise CodeSynthesisError(
            f"Anthropic API error {response.status_code}: non-JSON response={_truncate(response.text)}"
        ) from exc

    if response.status_code >= 400:
        raise CodeSynthesisError(
            f"Anthropic API error {response.status_code}: {_response_debug_summary(response_json)}"
        )

    text = _extract_text(response_json)
    if not text:
        raise CodeSynthesisError(
            "Anthropic response missing text content: " + _response_debug_summary(response_json)
        )

    code = strip_code_fences(text)
    usage = calculate_cost(response_json.get("usage") or {})
    logger.info(
        "Generated analysis code (%s chars) tokens_in=%s tokens_out=%s",
        len(code),
        usage["inputTokens"],
        usage["outputTokens"],
    )
    return code, usage
