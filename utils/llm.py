"""
Generative backends - a hosted OpenAI model or a local Ollama server.

Both expose the same capability: given a system prompt and a user prompt,
return the assistant's JSON message as text. One backend is chosen at process
start (``get_backend(config.LLM_BACKEND)``) and injected into the pipeline.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import requests
from openai import APIConnectionError, APIError, APITimeoutError, OpenAI, RateLimitError

import config

log = logging.getLogger(__name__)

MAX_RETRIES = 5
BASE_DELAY = 10  # seconds


class LLMBackend(ABC):
    """Interface shared by all generative backends.

    Implementations raise ``ConnectionError``, ``TimeoutError`` or
    ``RuntimeError`` when the call fails.
    """

    name: str = ""

    @abstractmethod
    def chat_json(
        self,
        system: str,
        user: str,
        temperature: float = 0.3,
        max_tokens: int | None = None,
    ) -> str:
        """Send a chat request that must answer with a JSON object."""
        ...


class OpenAIBackend(LLMBackend):
    """Hosted OpenAI chat completions (or any OpenAI-compatible server)."""

    name = "openai"

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: OpenAI | None = None,
    ) -> None:
        self.model = model or config.OPENAI_MODEL
        if client is None:
            kwargs: dict[str, Any] = {
                "api_key": api_key or config.OPENAI_API_KEY,
                "timeout": timeout or config.LLM_TIMEOUT_SEC,
            }
            if base_url or config.OPENAI_BASE_URL:
                kwargs["base_url"] = base_url or config.OPENAI_BASE_URL
            client = OpenAI(**kwargs)
        self._client = client

    def chat_json(
        self,
        system: str,
        user: str,
        temperature: float = 0.3,
        max_tokens: int | None = None,
    ) -> str:
        """Retries up to MAX_RETRIES times on rate limit (429) errors with
        exponential backoff.
        """
        kwargs: dict = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens or config.LLM_MAX_TOKENS,
            "response_format": {"type": "json_object"},
        }

        for attempt in range(MAX_RETRIES):
            try:
                resp = self._client.chat.completions.create(**kwargs)
                break
            except RateLimitError as e:
                delay = BASE_DELAY * (2 ** attempt)
                log.warning(
                    "Rate limited (attempt %d/%d), retrying in %ds: %s",
                    attempt + 1, MAX_RETRIES, delay, e,
                )
                if attempt == MAX_RETRIES - 1:
                    raise RuntimeError(f"OpenAI rate limit exceeded: {e}") from e
                time.sleep(delay)
            except APITimeoutError as e:
                raise TimeoutError(f"OpenAI request timed out: {e}") from e
            except APIConnectionError as e:
                raise ConnectionError(f"Failed to connect to OpenAI API: {e}") from e
            except APIError as e:
                raise RuntimeError(f"OpenAI API error: {e}") from e

        if not resp.choices:
            raise RuntimeError("OpenAI returned empty response")
        content = resp.choices[0].message.content
        if content is None:
            raise RuntimeError("OpenAI returned null content")
        return content

    def __repr__(self) -> str:
        return f"OpenAIBackend(model={self.model!r})"


class OllamaBackend(LLMBackend):
    """Local Ollama server, see https://ollama.ai/."""

    name = "ollama"

    def __init__(
        self,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.model = model or config.OLLAMA_MODEL
        self.base_url = (base_url or config.OLLAMA_BASE_URL).rstrip("/")
        self.timeout = timeout or config.LLM_TIMEOUT_SEC

    def chat_json(
        self,
        system: str,
        user: str,
        temperature: float = 0.3,
        max_tokens: int | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "format": "json",
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens or config.LLM_MAX_TOKENS,
            },
        }

        try:
            response = requests.post(f"{self.base_url}/api/chat", json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.ConnectionError as e:
            raise ConnectionError(
                f"Failed to connect to Ollama at {self.base_url}. Is Ollama running?"
            ) from e
        except requests.exceptions.Timeout as e:
            raise TimeoutError(f"Ollama request timed out after {self.timeout}s") from e
        except requests.exceptions.HTTPError as e:
            raise RuntimeError(f"Ollama returned an error: {e}") from e

        data = response.json()
        # {"message": {"role": "assistant", "content": "..."}}
        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, dict) or "content" not in message:
            raise RuntimeError(f"Unexpected Ollama response format: {str(data)[:500]}")
        return message["content"]

    def __repr__(self) -> str:
        return f"OllamaBackend(model={self.model!r}, base_url={self.base_url!r})"


BACKENDS: dict[str, type[LLMBackend]] = {
    "openai": OpenAIBackend,
    "ollama": OllamaBackend,
}


def get_backend(kind: str, **kwargs) -> LLMBackend:
    """Build the backend named ``kind`` ("openai" or "ollama")."""
    try:
        cls = BACKENDS[kind.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown LLM backend: {kind}. Available: {', '.join(BACKENDS)}"
        ) from None
    backend = cls(**kwargs)
    log.info("Using generative backend: %r", backend)
    return backend
