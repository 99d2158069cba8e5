"""Chat-completion client for the optional external recommendation model."""
from __future__ import annotations

import json
import logging
import time
from typing import Any

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3


def call_llm(
    prompt: str,
    system_prompt: str = "",
    model: str | None = None,
    temperature: float = 0.3,
    max_tokens: int = 2000,
    json_mode: bool = False,
    *,
    client: httpx.Client | None = None,
) -> str:
    """
    Call the configured OpenAI-compatible endpoint for a chat completion.

    Args:
        prompt: User message content.
        system_prompt: System instruction.
        model: Model ID (defaults to settings.LLM_MODEL).
        temperature: Sampling temperature.
        max_tokens: Maximum response tokens.
        json_mode: If True, request JSON output format.
        client: Optional pre-built httpx client (tests inject a mock transport).

    Returns:
        The assistant's response text.

    Raises:
        LLMError: If credentials are missing or the call fails after retries.
    """
    api_url = settings.LLM_API_URL
    api_key = settings.LLM_API_KEY
    if not api_url or not api_key:
        raise LLMError("LLM_API_URL / LLM_API_KEY not configured")

    model = model or settings.LLM_MODEL

    messages: list[dict[str, str]] = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})

    payload: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if json_mode:
        payload["response_format"] = {"type": "json_object"}

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }

    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=settings.LLM_TIMEOUT)

    last_error: Exception | None = None
    start_time = time.time()
    try:
        for attempt in range(MAX_ATTEMPTS):
            try:
                resp = client.post(api_url, json=payload, headers=headers)
                resp.raise_for_status()
                data = resp.json()
                if not isinstance(data, dict):
                    raise LLMError(f"Unexpected response type {type(data).__name__}")

                choices = data.get("choices")
                if not isinstance(choices, list) or not choices:
                    raise LLMError(f"No choices in response from model {model}")
                message = choices[0].get("message") if isinstance(choices[0], dict) else None
                if not isinstance(message, dict):
                    raise LLMError(f"Malformed choice in response from model {model}")
                content = message.get("content")
                if not isinstance(content, str):
                    raise LLMError(f"Non-text content from model {model}")
                if not content:
                    raise LLMError(f"Empty response from model {model}")

                logger.info(
                    "LLM call ok: model=%s duration=%.0fms",
                    model, (time.time() - start_time) * 1000,
                )
                return content

            except httpx.HTTPStatusError as e:
                last_error = e
                if e.response.status_code == 429:
                    wait = 2 ** attempt
                    logger.warning("Rate limited, waiting %ds...", wait)
                    time.sleep(wait)
                    continue
                raise LLMError(f"HTTP {e.response.status_code}: {e.response.text}") from e

            except httpx.RequestError as e:
                last_error = e
                logger.warning("Request error (attempt %d): %s", attempt + 1, e)
                time.sleep(1)
                continue

            except ValueError as e:
                # resp.json() on a non-JSON body
                raise LLMError(f"Malformed response body: {e}") from e
    finally:
        if owns_client:
            client.close()

    raise LLMError(f"Failed after {MAX_ATTEMPTS} attempts: {last_error}")


def call_llm_json(
    prompt: str,
    system_prompt: str = "",
    model: str | None = None,
    temperature: float = 0.1,
    max_tokens: int = 4000,
    *,
    client: httpx.Client | None = None,
) -> dict[str, Any] | list[Any]:
    """
    Call LLM and parse the response as JSON.

    Returns parsed JSON (dict or list).
    """
    raw = call_llm(
        prompt=prompt,
        system_prompt=system_prompt,
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        json_mode=True,
        client=client,
    )

    # Strip markdown code fences if present
    text = raw.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = [l for l in lines if not l.strip().startswith("```")]
        text = "\n".join(lines)

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise LLMError(f"Failed to parse LLM response as JSON: {e}\nRaw: {text[:500]}") from e


class LLMError(Exception):
    """Raised when LLM service call fails."""
