"""Brute-force cosine-similarity retrieval over the RAG index.

Scores every indexed chunk against the query embedding and returns the
``top_k`` best, highest first.  The sort is stable, so chunks with equal
scores keep their index order and a fixed index and query always produce the
same ranking.
"""
import logging
from typing import List

import numpy as np

from review_gate.config import ReviewGateConfig
from review_gate.embeddings.service import EmbeddingService
from review_gate.errors import ErrorKind, ReviewGateError

from .index_store import IndexedChunk, RagIndex

logger = logging.getLogger(__name__)

VECTOR_EPSILON = 1e-8


def cosine(a, b) -> float:
    """``dot(a, b) / (|a| * |b| + eps)``; 0.0 for a zero vector."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    return float(np.dot(va, vb) / (np.linalg.norm(va) * np.linalg.norm(vb) + VECTOR_EPSILON))


def score_chunks(query_vector: List[float], chunks: List[IndexedChunk]) -> np.ndarray:
    """Cosine score of *query_vector* against every chunk, in chunk order."""
    if not chunks:
        return np.empty(0, dtype=np.float64)
    matrix = np.asarray([c.vector for c in chunks], dtype=np.float64)
    query = np.asarray(query_vector, dtype=np.float64)
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    return (matrix @ query) / (norms + VECTOR_EPSILON)


def rank(query_vector: List[float], chunks: List[IndexedChunk], top_k: int) -> List[IndexedChunk]:
    """Return up to *top_k* chunks by descending score, ties in index order."""
    scores = score_chunks(query_vector, chunks)
    order = np.argsort(-scores, kind="stable")
    return [chunks[i] for i in order[:top_k]]


def retrieve(
    query_text: str,
    config: ReviewGateConfig,
    index: RagIndex,
    embedder: EmbeddingService,
) -> List[IndexedChunk]:
    """Find the chunks most relevant to *query_text*.

    Args:
        query_text: Query (the staged diff on the review path).
        config:     Loaded configuration (``top_k``, ``embed_model``).
        index:      Loaded index.
        embedder:   Embedding service (``search_query`` flavour).

    Returns:
        Up to ``config.top_k`` chunks, most relevant first.

    Raises:
        ReviewGateError: RETRIEVAL for a blank query, a failed query
            embedding, or a query vector whose length differs from the
            index dimensionality.
    """
    if not query_text or not query_text.strip():
        raise ReviewGateError(ErrorKind.RETRIEVAL, "Query text must not be empty")

    if index.embed_model != config.embed_model:
        logger.warning(
            "[Retriever] Index was built with %s but queries use %s; rebuild the index",
            index.embed_model, config.embed_model,
        )

    try:
        query_vector = embedder.embed_text(query_text)
    except ReviewGateError as exc:
        raise ReviewGateError(ErrorKind.RETRIEVAL, f"Failed to embed query: {exc.message}") from exc

    if not index.chunks:
        logger.info("[Retriever] Index is empty; nothing to retrieve")
        return []

    if len(query_vector) != index.dim:
        raise ReviewGateError(
            ErrorKind.RETRIEVAL,
            f"Query vector has {len(query_vector)} dims, index declares {index.dim}",
        )

    results = rank(query_vector, index.chunks, config.top_k)
    logger.info(
        "[Retriever] %d/%d chunks returned (top_k=%d)",
        len(results), index.size, config.top_k,
    )
    return results
