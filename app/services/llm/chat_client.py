from __future__ import annotations

import os
from typing import List, Optional, Protocol

import requests

from config.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT,
    get_int_env,
)
from config.exceptions import EngineError
from utils.logging import get_logger

logger = get_logger(__name__)


class ChatEngine(Protocol):
    """Anything that can answer a single-turn system/user chat."""

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str:
        ...


class LocalChatClient:
    """Client for a local OpenAI-compatible chat server (e.g. `mlc_llm serve`)."""

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.api_key = api_key
        self.timeout = timeout
        self.full_endpoint = f"{self.base_url}/v1/chat/completions"
        self.models_endpoint = f"{self.base_url}/v1/models"

    @classmethod
    def from_env(cls, model: Optional[str] = None) -> "LocalChatClient":
        return cls(
            base_url=os.getenv("LLM_BASE_URL", DEFAULT_BASE_URL),
            model=model or os.getenv("LLM_MODEL", DEFAULT_MODEL),
            api_key=os.getenv("LLM_API_KEY") or None,
            timeout=get_int_env("LLM_TIMEOUT", DEFAULT_TIMEOUT) or DEFAULT_TIMEOUT,
        )

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def list_models(self) -> List[str]:
        """Return the model ids the server currently serves."""
        try:
            response = requests.get(
                self.models_endpoint, headers=self._headers(), timeout=self.timeout
            )
        except Exception as e:
            logger.error("Model listing failed: %s", e)
            raise EngineError(f"Chat server unreachable at {self.base_url}: {e}") from e

        if response.status_code != 200:
            logger.error("Model listing error [%d]: %s", response.status_code, response.text[:500])
            raise EngineError(f"Model listing error [{response.status_code}]")

        try:
            data = response.json()
        except Exception as e:
            raise EngineError(f"Failed to parse model listing: {e}") from e

        if not isinstance(data, dict):
            raise EngineError(f"Unexpected model listing payload: {type(data).__name__}")

        return [str(m.get("id", "")) for m in data.get("data", []) if isinstance(m, dict)]

    def ensure_ready(self) -> None:
        """Raise EngineError unless the server is up and serving the configured model."""
        served = self.list_models()
        logger.info("Chat server at %s serves %d model(s): %s", self.base_url, len(served), served)
        if self.model not in served:
            raise EngineError(
                f"Model '{self.model}' is not loaded on {self.base_url} (available: {served})"
            )

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str:
        """Send one system/user exchange and return the reply text.

        Raises:
            EngineError on transport failure, non-200 status or malformed body.
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "stream": False,
        }

        logger.debug(
            "Endpoint: %s, model=%s, prompt length: %d chars",
            self.full_endpoint,
            self.model,
            len(user_prompt),
        )

        try:
            response = requests.post(
                self.full_endpoint, headers=self._headers(), json=payload, timeout=self.timeout
            )
        except Exception as e:
            logger.error("Request failed: %s", e)
            raise EngineError(f"LLM request failed: {e}") from e

        if response.status_code != 200:
            error_msg = response.text[:500]
            try:
                error_msg = str(response.json())
            except Exception:
                pass
            logger.error("LLM error [%d]: %s", response.status_code, error_msg)
            raise EngineError(f"LLM error [{response.status_code}]: {error_msg}")

        try:
            data = response.json()
            message = data["choices"][0]["message"]["content"]
        except Exception as e:
            raise EngineError(f"Failed to parse LLM response: {e}") from e

        usage = data.get("usage") or {}
        if usage:
            logger.debug(
                "Tokens used: %d (prompt=%d, completion=%d)",
                usage.get("total_tokens", 0),
                usage.get("prompt_tokens", 0),
                usage.get("completion_tokens", 0),
            )
        logger.debug("Response: %s", message[:100] if message else "(empty)")

        return message or ""


__all__ = ["ChatEngine", "LocalChatClient"]
