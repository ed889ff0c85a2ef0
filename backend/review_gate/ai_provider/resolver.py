"""Provider selection for the review model.

Maps ``llmProvider`` from the configuration to a concrete AIProvider and
checks that the credentials it needs are present in the secrets file.

Usage:
    from review_gate.ai_provider.resolver import create_review_provider

    provider = create_review_provider(config, secrets)
"""
import logging
from enum import Enum

from review_gate.config import ReviewGateConfig, Secrets
from review_gate.errors import ErrorKind, ReviewGateError

from .base import AIProvider
from .claude_bedrock import ClaudeBedrockProvider
from .claude_direct import ClaudeDirectProvider
from .ollama_provider import OllamaProvider
from .openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)


class ProviderType(str, Enum):
    """Supported review-model provider types."""
    OLLAMA = "ollama"
    ANTHROPIC = "anthropic"
    AWS_BEDROCK = "aws_bedrock"
    OPENAI = "openai"


def is_provider_configured(provider_type: ProviderType, secrets: Secrets) -> bool:
    """Check if a provider has the credentials it needs.

    Ollama needs none.  Bedrock may fall back to the default AWS credential
    chain, so it is always considered configured.
    """
    if provider_type == ProviderType.ANTHROPIC:
        return bool(secrets.anthropic.api_key)
    elif provider_type == ProviderType.OPENAI:
        return bool(secrets.openai.api_key)
    return True


def create_review_provider(config: ReviewGateConfig, secrets: Secrets) -> AIProvider:
    """Create the provider selected by ``llmProvider`` for ``llmModel``.

    Raises:
        ReviewGateError: CONFIGURATION when the provider's API key is missing.
    """
    provider_type = ProviderType(config.llm_provider)

    if not is_provider_configured(provider_type, secrets):
        raise ReviewGateError(
            ErrorKind.CONFIGURATION,
            f"llmProvider '{provider_type.value}' selected but no API key found in secrets.yaml",
        )

    if provider_type == ProviderType.ANTHROPIC:
        provider: AIProvider = ClaudeDirectProvider(
            api_key=secrets.anthropic.api_key,
            model=config.llm_model,
        )
    elif provider_type == ProviderType.OPENAI:
        provider = OpenAIProvider(
            api_key=secrets.openai.api_key,
            model=config.llm_model,
            organization=secrets.openai.organization or None,
        )
    elif provider_type == ProviderType.AWS_BEDROCK:
        aws = secrets.aws
        provider = ClaudeBedrockProvider(
            aws_access_key_id=aws.access_key_id,
            aws_secret_access_key=aws.secret_access_key,
            aws_session_token=aws.session_token or None,
            region_name=aws.region,
            model_id=config.llm_model,
        )
    else:
        provider = OllamaProvider(
            model=config.llm_model,
            base_url=config.ollama_base_url,
            timeout=config.request_timeout_seconds,
        )

    logger.info(f"Review provider: {provider_type.value} (model={config.llm_model})")
    return provider
