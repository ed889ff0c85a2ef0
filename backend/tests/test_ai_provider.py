"""Tests for AIProvider interface, implementations and the provider resolver."""
import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from review_gate.ai_provider import (
    AIProvider,
    ClaudeBedrockProvider,
    ClaudeDirectProvider,
    OllamaProvider,
    OpenAIProvider,
    ProviderType,
    create_review_provider,
)
from review_gate.ai_provider.resolver import is_provider_configured
from review_gate.config import Secrets
from review_gate.errors import ErrorKind, ReviewGateError


def _ollama_response(method: str, path: str, payload: dict, status_code: int = 200) -> httpx.Response:
    request = httpx.Request(method, f"http://localhost:11434{path}")
    return httpx.Response(status_code, json=payload, request=request)


class TestAIProviderInterface:
    """Tests for the AIProvider abstract interface."""

    def test_cannot_instantiate_abstract_class(self):
        """AIProvider should not be directly instantiable."""
        with pytest.raises(TypeError):
            AIProvider()

    def test_interface_has_required_methods(self):
        assert hasattr(AIProvider, "call_model")
        assert hasattr(AIProvider, "close")


class TestOllamaProvider:
    """Tests for OllamaProvider implementation."""

    def test_initialization_with_defaults(self):
        provider = OllamaProvider(model="qwen2.5-coder:7b")
        assert provider.base_url == OllamaProvider.DEFAULT_BASE_URL
        assert provider.timeout == OllamaProvider.DEFAULT_TIMEOUT

    def test_call_model_posts_generate_request(self):
        provider = OllamaProvider(model="qwen2.5-coder:7b")
        mock_client = MagicMock()
        mock_client.post.return_value = _ollama_response(
            "POST", "/api/generate", {"response": '  {"generalComments": []}\n'}
        )
        provider._client = mock_client

        result = provider.call_model("review this", max_tokens=512, system="be strict")

        assert result == '{"generalComments": []}'
        mock_client.post.assert_called_once_with(
            "/api/generate",
            json={
                "model": "qwen2.5-coder:7b",
                "prompt": "review this",
                "stream": False,
                "options": {"num_predict": 512},
                "system": "be strict",
            },
        )

    def test_call_model_without_system(self):
        provider = OllamaProvider(model="m")
        mock_client = MagicMock()
        mock_client.post.return_value = _ollama_response("POST", "/api/generate", {"response": "ok"})
        provider._client = mock_client

        provider.call_model("p")
        assert "system" not in mock_client.post.call_args[1]["json"]

    def test_call_model_missing_response_field(self):
        provider = OllamaProvider(model="m")
        mock_client = MagicMock()
        mock_client.post.return_value = _ollama_response("POST", "/api/generate", {"error": "oops"})
        provider._client = mock_client

        with pytest.raises(ValueError, match="'response' field"):
            provider.call_model("p")

    def test_call_model_http_error(self):
        provider = OllamaProvider(model="m")
        mock_client = MagicMock()
        mock_client.post.return_value = _ollama_response("POST", "/api/generate", {}, status_code=404)
        provider._client = mock_client

        with pytest.raises(httpx.HTTPStatusError):
            provider.call_model("p")

    def test_close_releases_client(self):
        provider = OllamaProvider(model="m")
        mock_client = MagicMock()
        provider._client = mock_client

        provider.close()

        mock_client.close.assert_called_once()
        assert provider._client is None

    def test_close_without_client(self):
        OllamaProvider(model="m").close()


class TestClaudeDirectProvider:
    """Tests for ClaudeDirectProvider implementation."""

    def test_initialization_with_defaults(self):
        provider = ClaudeDirectProvider(api_key="test-key")
        assert provider.api_key == "test-key"
        assert provider.model == ClaudeDirectProvider.DEFAULT_MODEL
        assert provider.base_url == ClaudeDirectProvider.DEFAULT_BASE_URL

    def test_close_releases_client(self):
        mock_anthropic = MagicMock()
        mock_client = MagicMock()
        mock_anthropic.Anthropic.return_value = mock_client

        with patch.dict("sys.modules", {"anthropic": mock_anthropic}):
            provider = ClaudeDirectProvider(api_key="test-key")
            provider._get_client()
            provider.close()

        mock_client.close.assert_called_once()
        assert provider._client is None

    def test_call_model_success(self):
        mock_anthropic = MagicMock()
        mock_client = MagicMock()
        mock_anthropic.Anthropic.return_value = mock_client
        mock_response = MagicMock()
        mock_response.content = [MagicMock(text=' {"generalComments": ["ok"]} ')]
        mock_client.messages.create.return_value = mock_response

        with patch.dict("sys.modules", {"anthropic": mock_anthropic}):
            provider = ClaudeDirectProvider(api_key="test-key", model="claude-x")
            result = provider.call_model("review", max_tokens=100, system="strict")

        assert result == '{"generalComments": ["ok"]}'
        kwargs = mock_client.messages.create.call_args[1]
        assert kwargs["model"] == "claude-x"
        assert kwargs["max_tokens"] == 100
        assert kwargs["system"] == "strict"
        assert kwargs["messages"] == [{"role": "user", "content": "review"}]

    def test_get_client_raises_import_error(self):
        provider = ClaudeDirectProvider(api_key="test-key")
        with patch.dict("sys.modules", {"anthropic": None}):
            provider._client = None
            with pytest.raises(ImportError, match="anthropic package is required"):
                provider._get_client()


class TestOpenAIProvider:
    """Tests for OpenAIProvider implementation."""

    def test_call_model_prepends_system_message(self):
        mock_openai = MagicMock()
        mock_client = MagicMock()
        mock_openai.OpenAI.return_value = mock_client
        mock_response = MagicMock()
        mock_response.choices = [MagicMock(message=MagicMock(content="{}"))]
        mock_client.chat.completions.create.return_value = mock_response

        with patch.dict("sys.modules", {"openai": mock_openai}):
            provider = OpenAIProvider(api_key="sk-test", model="gpt-4o-mini")
            result = provider.call_model("review", system="strict")

        assert result == "{}"
        messages = mock_client.chat.completions.create.call_args[1]["messages"]
        assert messages == [
            {"role": "system", "content": "strict"},
            {"role": "user", "content": "review"},
        ]

    def test_organization_passed_to_client(self):
        mock_openai = MagicMock()
        with patch.dict("sys.modules", {"openai": mock_openai}):
            OpenAIProvider(api_key="sk-test", organization="org-1")._get_client()
        mock_openai.OpenAI.assert_called_once_with(api_key="sk-test", organization="org-1")

    def test_none_content_becomes_empty_string(self):
        mock_openai = MagicMock()
        mock_client = MagicMock()
        mock_openai.OpenAI.return_value = mock_client
        mock_response = MagicMock()
        mock_response.choices = [MagicMock(message=MagicMock(content=None))]
        mock_client.chat.completions.create.return_value = mock_response

        with patch.dict("sys.modules", {"openai": mock_openai}):
            assert OpenAIProvider(api_key="sk-test").call_model("p") == ""

    def test_close_releases_client(self):
        mock_openai = MagicMock()
        with patch.dict("sys.modules", {"openai": mock_openai}):
            provider = OpenAIProvider(api_key="sk-test")
            provider._get_client()
            provider.close()

        mock_openai.OpenAI.return_value.close.assert_called_once()
        assert provider._client is None

    def test_get_client_raises_import_error(self):
        provider = OpenAIProvider(api_key="sk-test")
        with patch.dict("sys.modules", {"openai": None}):
            with pytest.raises(ImportError, match="openai package is required"):
                provider._get_client()


class TestClaudeBedrockProvider:
    """Tests for ClaudeBedrockProvider implementation."""

    def test_initialization_with_defaults(self):
        provider = ClaudeBedrockProvider()
        assert provider.region_name == ClaudeBedrockProvider.DEFAULT_REGION
        assert provider.model_id == ClaudeBedrockProvider.DEFAULT_MODEL_ID

    def test_call_model_success(self):
        mock_boto3 = MagicMock()
        mock_client = MagicMock()
        mock_boto3.client.return_value = mock_client
        mock_body = MagicMock()
        mock_body.read.return_value = json.dumps({"content": [{"text": "Bedrock review."}]})
        mock_client.invoke_model.return_value = {"body": mock_body}

        with patch.dict("sys.modules", {"boto3": mock_boto3}):
            provider = ClaudeBedrockProvider(model_id="anthropic.claude-test")
            result = provider.call_model("review", max_tokens=64, system="strict")

        assert result == "Bedrock review."
        call_kwargs = mock_client.invoke_model.call_args[1]
        body = json.loads(call_kwargs["body"])
        assert call_kwargs["modelId"] == "anthropic.claude-test"
        assert body["max_tokens"] == 64
        assert body["system"] == "strict"

    def test_client_uses_credentials_when_provided(self):
        mock_boto3 = MagicMock()
        with patch.dict("sys.modules", {"boto3": mock_boto3}):
            provider = ClaudeBedrockProvider(
                aws_access_key_id="AKIATEST",
                aws_secret_access_key="secret123",
                aws_session_token="token456",
                region_name="us-west-2",
            )
            provider._get_client()

            mock_boto3.client.assert_called_once_with(
                "bedrock-runtime",
                region_name="us-west-2",
                aws_access_key_id="AKIATEST",
                aws_secret_access_key="secret123",
                aws_session_token="token456",
            )

    def test_get_client_raises_import_error(self):
        provider = ClaudeBedrockProvider()
        with patch.dict("sys.modules", {"boto3": None}):
            provider._client = None
            with pytest.raises(ImportError, match="boto3 package is required"):
                provider._get_client()


class TestAllProvidersImplementSameInterface:
    def test_all_are_instances_of_ai_provider(self):
        providers = [
            OllamaProvider(model="m"),
            ClaudeDirectProvider(api_key="k"),
            OpenAIProvider(api_key="k"),
            ClaudeBedrockProvider(),
        ]
        for provider in providers:
            assert isinstance(provider, AIProvider)


class TestProviderResolver:
    """Tests for create_review_provider."""

    def test_defaults_to_ollama(self, make_config):
        provider = create_review_provider(make_config(), Secrets())
        assert isinstance(provider, OllamaProvider)
        assert provider.model == "qwen2.5-coder:7b"

    def test_ollama_settings_forwarded(self, make_config):
        config = make_config(ollamaBaseUrl="http://gpu:11434", requestTimeoutSeconds=30)
        provider = create_review_provider(config, Secrets())
        assert provider.base_url == "http://gpu:11434"
        assert provider.timeout == 30

    def test_anthropic_requires_api_key(self, make_config):
        with pytest.raises(ReviewGateError) as exc_info:
            create_review_provider(make_config(llmProvider="anthropic"), Secrets())
        assert exc_info.value.kind is ErrorKind.CONFIGURATION

    def test_anthropic_with_key(self, make_config):
        secrets = Secrets.model_validate({"anthropic": {"api_key": "sk-ant"}})
        provider = create_review_provider(make_config(llmProvider="anthropic", llmModel="claude-x"), secrets)
        assert isinstance(provider, ClaudeDirectProvider)
        assert provider.model == "claude-x"

    def test_openai_requires_api_key(self, make_config):
        with pytest.raises(ReviewGateError):
            create_review_provider(make_config(llmProvider="openai"), Secrets())

    def test_openai_with_key(self, make_config):
        secrets = Secrets.model_validate({"openai": {"api_key": "sk-test", "organization": "org"}})
        provider = create_review_provider(make_config(llmProvider="openai"), secrets)
        assert isinstance(provider, OpenAIProvider)
        assert provider.organization == "org"

    def test_bedrock_uses_aws_secrets(self, make_config):
        secrets = Secrets.model_validate({"aws": {"region": "eu-central-1", "session_token": "tok"}})
        provider = create_review_provider(
            make_config(llmProvider="aws_bedrock", llmModel="anthropic.claude-test"), secrets,
        )
        assert isinstance(provider, ClaudeBedrockProvider)
        assert provider.region_name == "eu-central-1"
        assert provider.aws_session_token == "tok"
        assert provider.model_id == "anthropic.claude-test"

    @pytest.mark.parametrize("provider_type", [ProviderType.OLLAMA, ProviderType.AWS_BEDROCK])
    def test_keyless_providers_always_configured(self, provider_type):
        assert is_provider_configured(provider_type, Secrets()) is True
