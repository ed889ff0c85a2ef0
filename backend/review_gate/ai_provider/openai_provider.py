"""Review provider for the OpenAI chat completions API.

Selected with ``"llmProvider": "openai"``; the key comes from
``secrets.yaml`` (``openai.api_key``).
"""
import logging
from typing import Optional

from .base import AIProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(AIProvider):
    """Sends the review prompt as a chat completion.

    Attributes:
        api_key: OpenAI API key.
        model: Chat model name (``llmModel``).
        organization: Optional organization ID.
    """

    DEFAULT_MODEL = "gpt-4o"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        organization: Optional[str] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.organization = organization
        self._client: Optional[object] = None

    def _get_client(self) -> object:
        if self._client is None:
            try:
                import openai
            except ImportError:
                raise ImportError(
                    "openai package is required for OpenAIProvider. "
                    "Install it with: pip install openai"
                )
            kwargs = {"api_key": self.api_key}
            if self.organization:
                kwargs["organization"] = self.organization
            self._client = openai.OpenAI(**kwargs)
        return self._client

    def call_model(
        self,
        prompt: str,
        max_tokens: int = 2048,
        system: str | None = None,
    ) -> str:
        """Return the first choice's message text; ``system`` becomes a system message."""
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = self._get_client().chat.completions.create(
            model=self.model,
            max_tokens=max_tokens,
            messages=messages,
        )
        logger.debug("[OpenAIProvider] model=%s choices=%d", self.model, len(response.choices))
        return (response.choices[0].message.content or "").strip()

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
