"""AI Provider module for review-model integrations.

This module provides a unified interface for generative-model providers:
a local Ollama server (default), Anthropic's API, OpenAI, and Claude on
AWS Bedrock, plus the review prompt template and context budgeter.

Usage:
    from review_gate.ai_provider import create_review_provider, build_review_prompt

    provider = create_review_provider(config, secrets)
    prompt = build_review_prompt(chunks, diff_text, config)
    text = provider.call_model(prompt.text)
"""
from .base import AIProvider
from .claude_bedrock import ClaudeBedrockProvider
from .claude_direct import ClaudeDirectProvider
from .ollama_provider import OllamaProvider
from .openai_provider import OpenAIProvider
from .prompt_builder import (
    ReviewPrompt,
    assemble_prompt,
    build_review_prompt,
    format_context,
    pack_chunks,
    truncate_diff,
)
from .prompts import REVIEW_PROMPT, REVIEW_SYSTEM_PROMPT, get_review_prompt
from .resolver import ProviderType, create_review_provider

__all__ = [
    "AIProvider",
    "OllamaProvider",
    "ClaudeDirectProvider",
    "ClaudeBedrockProvider",
    "OpenAIProvider",
    "ProviderType",
    "create_review_provider",
    "REVIEW_PROMPT",
    "REVIEW_SYSTEM_PROMPT",
    "get_review_prompt",
    "assemble_prompt",
    "build_review_prompt",
    "ReviewPrompt",
    "format_context",
    "pack_chunks",
    "truncate_diff",
]
