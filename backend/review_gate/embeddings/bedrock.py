"""AWS Bedrock embedding provider (Cohere Embed models).

Calls ``bedrock-runtime:invoke_model`` with the Cohere Embed request schema.
Selected with ``"embeddingProvider": "aws_bedrock"``; ``embedModel`` is the
Bedrock model ID (e.g. ``cohere.embed-english-v3``).

Cohere request body
-------------------
::

    {
        "texts":       ["text1", "text2"],
        "input_type":  "search_document",   # or "search_query"
        "truncate":    "END"
    }

Cohere response body (both flat and nested float formats are handled)
---------------------------------------------------------------------
::

    # Flat format (Cohere Embed v2/v3):
    { "embeddings": [[...], [...]], ... }

    # Nested format (Cohere Embed v4):
    { "embeddings": { "float": [[...], [...]] }, ... }
"""
import json
import logging
from typing import Optional

from .provider import EmbeddingProvider

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"
MAX_TEXTS_PER_CALL = 96

# Bedrock rejects Cohere texts above this length before the model sees them,
# so ``"truncate": "END"`` never applies.  Truncate client-side instead.
_COHERE_BEDROCK_MAX_CHARS = 2048


class BedrockEmbeddingProvider(EmbeddingProvider):
    """Embedding provider backed by AWS Bedrock (Cohere Embed models).

    Args:
        model_id:              Bedrock model ID for the embedding model.
        input_type:            Cohere input type sent with every request.
        aws_access_key_id:     AWS access key.  ``None`` → default credential chain.
        aws_secret_access_key: AWS secret access key.
        aws_session_token:     Optional temporary-credential session token.
        region_name:           AWS region.  Defaults to ``us-east-1``.
    """

    def __init__(
        self,
        model_id: str,
        input_type: str = "search_document",
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        aws_session_token: Optional[str] = None,
        region_name: Optional[str] = None,
    ) -> None:
        self._model_id      = model_id
        self._input_type    = input_type
        self._access_key    = aws_access_key_id
        self._secret_key    = aws_secret_access_key
        self._session_token = aws_session_token
        self._region        = region_name or DEFAULT_REGION
        self._client: Optional[object] = None

    @property
    def model_id(self) -> str:
        return self._model_id

    def _get_client(self) -> object:
        """Return a cached boto3 bedrock-runtime client."""
        if self._client is None:
            try:
                import boto3  # lazy import; not required when mocked in tests
            except ImportError as exc:
                raise ImportError(
                    "boto3 is required for BedrockEmbeddingProvider. "
                    "Install it with: pip install boto3"
                ) from exc

            kwargs: dict = {"region_name": self._region}
            if self._access_key and self._secret_key:
                kwargs["aws_access_key_id"]     = self._access_key
                kwargs["aws_secret_access_key"] = self._secret_key
            if self._session_token:
                kwargs["aws_session_token"] = self._session_token

            self._client = boto3.client("bedrock-runtime", **kwargs)

        return self._client

    def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed texts with the configured Cohere model, in batches of 96.

        Raises:
            ValueError: If the provider returns an unexpected response shape.
            Exception:  On Bedrock API errors (network, auth, throttle, …).
        """
        vectors: list[list[float]] = []
        for i in range(0, len(texts), MAX_TEXTS_PER_CALL):
            vectors.extend(self._embed_batch(texts[i:i + MAX_TEXTS_PER_CALL]))
        return vectors

    def _embed_batch(self, texts: list[str]) -> list[list[float]]:
        client = self._get_client()

        truncated_texts: list[str] = []
        for text in texts:
            if len(text) > _COHERE_BEDROCK_MAX_CHARS:
                logger.warning(
                    "[embeddings/bedrock] Truncating text from %d to %d chars",
                    len(text), _COHERE_BEDROCK_MAX_CHARS,
                )
                truncated_texts.append(text[:_COHERE_BEDROCK_MAX_CHARS])
            else:
                truncated_texts.append(text)

        request_body = json.dumps(
            {
                "texts":      truncated_texts,
                "input_type": self._input_type,
                "truncate":   "END",
            }
        )

        logger.debug(
            "[embeddings/bedrock] invoking model=%s texts=%d",
            self._model_id,
            len(texts),
        )

        response = client.invoke_model(
            modelId=self._model_id,
            body=request_body,
            contentType="application/json",
            accept="application/json",
        )

        data = json.loads(response["body"].read())

        raw = data.get("embeddings")
        if raw is None:
            raise ValueError(
                f"Unexpected Bedrock response — 'embeddings' key missing: {list(data.keys())}"
            )

        if isinstance(raw, dict):
            if "float" in raw:
                vectors = raw["float"]
            else:
                raise ValueError(
                    f"Unexpected nested embeddings format, keys: {list(raw.keys())}"
                )
        else:
            vectors = raw

        if len(vectors) != len(texts):
            raise ValueError(
                f"Provider returned {len(vectors)} vectors for {len(texts)} texts"
            )
        return vectors
