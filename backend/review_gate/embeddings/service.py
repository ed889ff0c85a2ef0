"""EmbeddingService — thin orchestration layer over EmbeddingProvider.

Turns provider failures and malformed vectors into ``EMBEDDING`` errors so
callers see a single failure shape regardless of the back-end.
"""
import logging
import math

from review_gate.config import ReviewGateConfig, Secrets
from review_gate.errors import ErrorKind, ReviewGateError

from .bedrock import BedrockEmbeddingProvider
from .ollama import OllamaEmbeddingProvider
from .provider import EmbeddingProvider

logger = logging.getLogger(__name__)


class EmbeddingService:
    """Validates provider output and wraps provider errors.

    Args:
        provider: Concrete embedding provider to use.
    """

    def __init__(self, provider: EmbeddingProvider) -> None:
        self._provider = provider

    @property
    def model_id(self) -> str:
        return self._provider.model_id

    def embed_text(self, text: str) -> list[float]:
        """Embed a single text.

        Returns:
            The embedding vector.

        Raises:
            ReviewGateError: EMBEDDING when the call fails or the vector is
                missing, empty or non-numeric.
        """
        try:
            vectors = self._provider.embed([text])
        except Exception as exc:
            raise ReviewGateError(
                ErrorKind.EMBEDDING,
                f"Failed to generate embeddings with {self.model_id}: {exc}",
            ) from exc

        if not vectors or not vectors[0]:
            raise ReviewGateError(
                ErrorKind.EMBEDDING, f"Model {self.model_id} returned an empty embedding",
            )

        try:
            vector = [float(x) for x in vectors[0]]
        except (TypeError, ValueError) as exc:
            raise ReviewGateError(
                ErrorKind.EMBEDDING, f"Model {self.model_id} returned a non-numeric embedding",
            ) from exc
        if not all(math.isfinite(x) for x in vector):
            raise ReviewGateError(
                ErrorKind.EMBEDDING, f"Model {self.model_id} returned a non-finite embedding",
            )

        logger.debug("[EmbeddingService] embedded %d chars dim=%d", len(text), len(vector))
        return vector

    def close(self) -> None:
        self._provider.close()


def create_embedding_service(
    config: ReviewGateConfig,
    secrets: Secrets,
    input_type: str = "search_document",
) -> EmbeddingService:
    """Build the EmbeddingService selected by ``embeddingProvider``.

    *input_type* is forwarded to Bedrock (``search_document`` when indexing,
    ``search_query`` when embedding a review query); Ollama ignores it.
    """
    if config.embedding_provider == "aws_bedrock":
        aws = secrets.aws
        provider: EmbeddingProvider = BedrockEmbeddingProvider(
            model_id=config.embed_model,
            input_type=input_type,
            aws_access_key_id=aws.access_key_id,
            aws_secret_access_key=aws.secret_access_key,
            aws_session_token=aws.session_token,
            region_name=aws.region,
        )
    else:
        provider = OllamaEmbeddingProvider(
            model_id=config.embed_model,
            base_url=config.ollama_base_url,
            timeout=config.request_timeout_seconds,
        )

    logger.info(
        "[EmbeddingService] provider=%s model=%s",
        type(provider).__name__, config.embed_model,
    )
    return EmbeddingService(provider)
