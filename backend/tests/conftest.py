"""Shared test fixtures and fakes for the review gate tests."""
import json
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from review_gate.ai_provider.base import AIProvider
from review_gate.config import AI_CONTEXT_DIR, ReviewGateConfig
from review_gate.embeddings.provider import EmbeddingProvider
from review_gate.embeddings.service import EmbeddingService
from review_gate.rag.index_store import IndexedChunk, RagIndex, chunk_id, sha1_hex


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeEmbeddingProvider(EmbeddingProvider):
    """Deterministic embedder: vectors come from *vector_fn* (text -> vector)."""

    def __init__(self, vector_fn: Optional[Callable[[str], List[float]]] = None, model_id: str = "fake-embed"):
        self._vector_fn = vector_fn or (lambda text: [float(len(text)), 1.0, 0.0])
        self._model_id = model_id
        self.calls: List[str] = []
        self.closed = False

    @property
    def model_id(self) -> str:
        return self._model_id

    def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.extend(texts)
        return [self._vector_fn(t) for t in texts]

    def close(self) -> None:
        self.closed = True


class FakeAIProvider(AIProvider):
    """Returns scripted responses in order; Exception instances are raised."""

    def __init__(self, responses: List[object]):
        self._responses = list(responses)
        self.prompts: List[str] = []
        self.systems: List[Optional[str]] = []
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def call_model(self, prompt: str, max_tokens: int = 2048, system: str | None = None) -> str:
        self.prompts.append(prompt)
        self.systems.append(system)
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

BASE_CONFIG: Dict[str, object] = {
    "llmModel": "qwen2.5-coder:7b",
    "embedModel": "nomic-embed-text",
}


@pytest.fixture
def make_config():
    """Factory for ReviewGateConfig built from camelCase overrides."""
    def _make(**overrides) -> ReviewGateConfig:
        return ReviewGateConfig.model_validate({**BASE_CONFIG, **overrides})
    return _make


@pytest.fixture
def fake_embedder():
    """Factory for an EmbeddingService over a FakeEmbeddingProvider."""
    def _make(vector_fn=None, model_id: str = "nomic-embed-text") -> EmbeddingService:
        return EmbeddingService(FakeEmbeddingProvider(vector_fn, model_id=model_id))
    return _make


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    """A repository root with an ``.ai-context`` directory and a config file."""
    ctx = tmp_path / AI_CONTEXT_DIR
    ctx.mkdir()
    (ctx / "config.json").write_text(json.dumps(BASE_CONFIG), encoding="utf-8")
    return tmp_path


def make_chunk(file: str, start: int, end: int, text: str, vector: List[float]) -> IndexedChunk:
    text_hash = sha1_hex(text)
    return IndexedChunk(
        id=chunk_id(file, start, end, text_hash),
        file=file,
        start_line=start,
        end_line=end,
        text=text,
        hash=text_hash,
        vector=vector,
    )


def make_index(chunks: List[IndexedChunk], embed_model: str = "nomic-embed-text") -> RagIndex:
    dim = len(chunks[0].vector) if chunks else 0
    return RagIndex(
        embed_model=embed_model,
        dim=dim,
        created_at="2024-05-01T12:00:00+00:00",
        chunks=chunks,
    )


@pytest.fixture
def chunk_factory():
    return make_chunk


@pytest.fixture
def index_factory():
    return make_index


@pytest.fixture
def fake_provider():
    """Factory for a FakeAIProvider with scripted responses."""
    return FakeAIProvider
