"""Abstract EmbeddingProvider interface.

Every embedding back-end (Ollama, Bedrock, …) must implement this interface
so the indexer and retriever stay provider-agnostic.
"""
from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """Abstract base class for embedding providers.

    Implementations must be thread-safe: the indexer may call ``embed()``
    from several worker threads when ``embedConcurrency`` > 1.
    """

    @property
    @abstractmethod
    def model_id(self) -> str:
        """Model identifier taken from configuration (``embedModel``)."""

    @abstractmethod
    def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Args:
            texts: Non-empty list of strings to embed.

        Returns:
            A list of float vectors, one per input text, in input order.

        Raises:
            Exception: On provider error (network, auth, malformed response, …).
        """

    def close(self) -> None:
        """Release any connection held by the provider."""
