"""Ollama embedding provider (local models).

Calls the ``/api/embeddings`` endpoint of a locally running Ollama server,
one request per text.

Request body
------------
::

    { "model": "nomic-embed-text", "prompt": "text to embed" }

Response body
-------------
::

    { "embedding": [0.12, -0.04, ...] }
"""
import logging
import threading
from typing import Optional

import httpx

from .provider import EmbeddingProvider

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_TIMEOUT  = 120.0


class OllamaEmbeddingProvider(EmbeddingProvider):
    """Embedding provider backed by a local Ollama server.

    Args:
        model_id: Ollama model name (e.g. ``nomic-embed-text``).
        base_url: Ollama server URL.
        timeout:  Per-request timeout in seconds.
    """

    def __init__(
        self,
        model_id: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._model_id = model_id
        self._base_url = base_url
        self._timeout  = timeout
        self._client: Optional[httpx.Client] = None
        self._client_lock = threading.Lock()

    @property
    def model_id(self) -> str:
        return self._model_id

    def _get_client(self) -> httpx.Client:
        """Return a cached httpx client (shared by worker threads)."""
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client(base_url=self._base_url, timeout=self._timeout)
            return self._client

    def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed each text with one ``/api/embeddings`` call.

        Raises:
            httpx.HTTPError: On transport or HTTP status errors.
            ValueError:      If the response carries no embedding array.
        """
        client = self._get_client()
        vectors: list[list[float]] = []

        for text in texts:
            resp = client.post(
                "/api/embeddings",
                json={"model": self._model_id, "prompt": text},
            )
            resp.raise_for_status()
            data = resp.json()

            embedding = data.get("embedding") if isinstance(data, dict) else None
            if not isinstance(embedding, list):
                raise ValueError("Invalid embedding response from model: 'embedding' array missing")
            vectors.append(embedding)

        logger.debug(
            "[embeddings/ollama] model=%s texts=%d dim=%d",
            self._model_id, len(texts), len(vectors[0]) if vectors else 0,
        )
        return vectors

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
