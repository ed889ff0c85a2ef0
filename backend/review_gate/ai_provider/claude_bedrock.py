"""Review provider for Claude on AWS Bedrock.

Selected with ``"llmProvider": "aws_bedrock"``; ``llmModel`` is the Bedrock
model or inference-profile ID.  Credentials come from the ``aws`` section of
``secrets.yaml`` or, when absent, the default boto3 credential chain.
"""
import json
import logging
from typing import Optional

from .base import AIProvider

logger = logging.getLogger(__name__)

ANTHROPIC_BEDROCK_VERSION = "bedrock-2023-05-31"


class ClaudeBedrockProvider(AIProvider):
    """Invokes an Anthropic messages model through ``bedrock-runtime``."""

    DEFAULT_MODEL_ID = "us.anthropic.claude-sonnet-4-5-20250929-v1:0"
    DEFAULT_REGION = "us-east-1"

    def __init__(
        self,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        aws_session_token: Optional[str] = None,
        region_name: Optional[str] = None,
        model_id: Optional[str] = None,
    ) -> None:
        self.aws_access_key_id = aws_access_key_id
        self.aws_secret_access_key = aws_secret_access_key
        self.aws_session_token = aws_session_token
        self.region_name = region_name or self.DEFAULT_REGION
        self.model_id = model_id or self.DEFAULT_MODEL_ID
        self._client: Optional[object] = None

    def _get_client(self) -> object:
        if self._client is None:
            try:
                import boto3
            except ImportError:
                raise ImportError(
                    "boto3 package is required for ClaudeBedrockProvider. "
                    "Install it with: pip install boto3"
                )
            kwargs = {"region_name": self.region_name}
            if self.aws_access_key_id and self.aws_secret_access_key:
                kwargs["aws_access_key_id"] = self.aws_access_key_id
                kwargs["aws_secret_access_key"] = self.aws_secret_access_key
            if self.aws_session_token:
                kwargs["aws_session_token"] = self.aws_session_token
            self._client = boto3.client("bedrock-runtime", **kwargs)
        return self._client

    def call_model(
        self,
        prompt: str,
        max_tokens: int = 2048,
        system: str | None = None,
    ) -> str:
        """Return the text of the first content block of the model's reply."""
        request = {
            "anthropic_version": ANTHROPIC_BEDROCK_VERSION,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            request["system"] = system

        response = self._get_client().invoke_model(
            modelId=self.model_id,
            body=json.dumps(request),
        )
        body = json.loads(response["body"].read())
        logger.debug("[ClaudeBedrockProvider] model=%s stop=%s", self.model_id, body.get("stop_reason"))
        return body["content"][0]["text"].strip()
