"""Review path orchestration: retrieve → assemble → review → gate."""
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from review_gate.ai_provider.base import AIProvider
from review_gate.ai_provider.prompt_builder import build_review_prompt
from review_gate.config import ReviewGateConfig
from review_gate.embeddings.service import EmbeddingService
from review_gate.rag.index_store import IndexedChunk, RagIndex
from review_gate.rag.retriever import retrieve

from .gating import blocking_comments, decide
from .schemas import GateDecision, InlineComment, ReviewResult
from .service import request_review

logger = logging.getLogger(__name__)


@dataclass
class ReviewOutcome:
    """Everything the caller needs to report a review.

    Attributes:
        decision: ALLOW or BLOCK.
        result: Parsed review, or None when the model never produced one.
        blocking: Inline comments that caused a BLOCK.
        context_chunks: Chunks that fit into the prompt's context buffer.
    """
    decision: GateDecision
    result: Optional[ReviewResult]
    blocking: List[InlineComment] = field(default_factory=list)
    context_chunks: List[IndexedChunk] = field(default_factory=list)

    @property
    def has_context(self) -> bool:
        return bool(self.context_chunks)


def run_review(
    config: ReviewGateConfig,
    diff_text: str,
    index: RagIndex,
    embedder: EmbeddingService,
    provider: AIProvider,
    sleep: Callable[[float], None] = time.sleep,
) -> ReviewOutcome:
    """Review *diff_text* against the indexed codebase.

    Raises:
        ReviewGateError: RETRIEVAL when the query cannot be embedded or does
            not match the index dimensionality.
    """
    ranked = retrieve(diff_text, config, index, embedder)

    prompt = build_review_prompt(ranked, diff_text, config)
    if not prompt.context_chunks:
        logger.warning("[ReviewPipeline] No RAG context found for this diff")
    logger.info(
        "[ReviewPipeline] prompt=%d chars context_chunks=%d/%d",
        len(prompt.text), len(prompt.context_chunks), len(ranked),
    )

    result = request_review(
        provider,
        prompt.text,
        max_attempts=config.review_max_attempts,
        backoff_seconds=config.review_backoff_seconds,
        max_tokens=config.review_max_tokens,
        sleep=sleep,
    )

    block_on = config.review_config().block_on_severities
    return ReviewOutcome(
        decision=decide(result, block_on),
        result=result,
        blocking=blocking_comments(result, block_on),
        context_chunks=prompt.context_chunks,
    )
