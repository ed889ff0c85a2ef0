"""Embedding adapters for the review gate.

Provides text → vector embeddings through a provider abstraction: a local
Ollama server by default, or Cohere Embed models on AWS Bedrock.
"""
from .provider import EmbeddingProvider
from .ollama import OllamaEmbeddingProvider
from .bedrock import BedrockEmbeddingProvider
from .service import EmbeddingService, create_embedding_service

__all__ = [
    "EmbeddingProvider",
    "OllamaEmbeddingProvider",
    "BedrockEmbeddingProvider",
    "EmbeddingService",
    "create_embedding_service",
]
