"""Ollama provider implementation (local models).

Connects to a locally running Ollama instance, by default at
http://localhost:11434, and uses the non-streaming ``/api/generate`` endpoint.
"""
import logging
from typing import Optional

import httpx

from .base import AIProvider

logger = logging.getLogger(__name__)


class OllamaProvider(AIProvider):
    """AIProvider implementation using a local Ollama server.

    Attributes:
        model: Ollama model name.
        base_url: Ollama server URL.
        timeout: Request timeout in seconds.
    """

    DEFAULT_BASE_URL = "http://localhost:11434"
    DEFAULT_TIMEOUT = 120.0

    def __init__(
        self,
        model: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Initialize the Ollama provider.

        Args:
            model: Ollama model name (e.g. ``qwen2.5-coder:7b``).
            base_url: Optional custom server URL.
            timeout: Optional request timeout in seconds.
        """
        self.model = model
        self.base_url = base_url or self.DEFAULT_BASE_URL
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._client: Optional[httpx.Client] = None

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout)
        return self._client

    def call_model(
        self,
        prompt: str,
        max_tokens: int = 2048,
        system: str | None = None,
    ) -> str:
        """Call the Ollama model with a raw prompt.

        Args:
            prompt:     The prompt to send to the model.
            max_tokens: Maximum tokens to generate (``num_predict``).
            system:     Optional system instruction.

        Returns:
            str: The model's response text.

        Raises:
            httpx.HTTPError: On transport or HTTP status errors.
            ValueError: If the response carries no text.
        """
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {"num_predict": max_tokens},
        }
        if system:
            payload["system"] = system

        resp = self._get_client().post("/api/generate", json=payload)
        resp.raise_for_status()
        data = resp.json()

        text = data.get("response")
        if not isinstance(text, str):
            raise ValueError("Ollama response is missing the 'response' field")
        return text.strip()

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
