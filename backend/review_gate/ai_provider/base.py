"""AIProvider abstract interface for generative-model integrations.

The review service talks to every back-end (Ollama, Anthropic, OpenAI,
Claude on Bedrock) through ``call_model``; the CLI calls ``close`` once the
review is done.
"""
from abc import ABC, abstractmethod


class AIProvider(ABC):
    """Abstract base class for review-model providers."""

    @abstractmethod
    def call_model(
        self,
        prompt: str,
        max_tokens: int = 2048,
        system: str | None = None,
    ) -> str:
        """Call the AI model with a raw prompt and return the response text.

        Args:
            prompt:     The user-turn prompt to send to the model.
            max_tokens: Maximum tokens in the response (default: 2048).
            system:     Optional system-role instruction.

        Returns:
            str: The model's response text.

        Raises:
            Exception: If the API call fails.
        """
        pass

    def close(self) -> None:
        """Release any connection held by the provider."""
