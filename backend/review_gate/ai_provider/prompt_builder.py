"""Context budgeting and review-prompt assembly.

Retrieved chunks are packed into the prompt greedily, in ranking order, as
atomic blocks: a block that would overflow the context budget stops the
packing, so the buffer may end up shorter than the budget.  The diff is cut
to its own character cap independently (a blunt prefix cut that may sever a
line).
"""
import logging
from dataclasses import dataclass
from typing import List, Sequence

from review_gate.config import ReviewGateConfig
from review_gate.rag.index_store import IndexedChunk

from .prompts import get_review_prompt

logger = logging.getLogger(__name__)

CHUNK_SEPARATOR = "---\n"


def format_chunk(chunk: IndexedChunk) -> str:
    """``FILE: <path> [<start>-<end>]`` header, chunk text, separator."""
    header = f"FILE: {chunk.file} [{chunk.start_line}-{chunk.end_line}]"
    return f"{header}\n{chunk.text}\n{CHUNK_SEPARATOR}"


def pack_chunks(chunks: Sequence[IndexedChunk], budget_chars: int) -> List[IndexedChunk]:
    """Leading chunks whose formatted blocks fit in *budget_chars* together."""
    packed: List[IndexedChunk] = []
    used = 0
    for chunk in chunks:
        size = len(format_chunk(chunk))
        if used + size > budget_chars:
            break
        packed.append(chunk)
        used += size

    logger.debug(
        "[PromptBuilder] context: %d/%d blocks, %d/%d chars",
        len(packed), len(chunks), used, budget_chars,
    )
    return packed


def format_context(packed: Sequence[IndexedChunk]) -> str:
    """Concatenate the blocks of chunks already packed by ``pack_chunks``."""
    return "".join(format_chunk(c) for c in packed)


def truncate_diff(diff_text: str, max_chars: int) -> str:
    if len(diff_text) > max_chars:
        logger.warning(
            "[PromptBuilder] Diff truncated from %d to %d chars", len(diff_text), max_chars,
        )
    return diff_text[:max_chars]


@dataclass(frozen=True)
class ReviewPrompt:
    """Prompt text plus the chunks whose blocks make up its context."""

    text: str
    context_chunks: List[IndexedChunk]


def assemble_prompt(
    chunks: Sequence[IndexedChunk],
    diff_text: str,
    budget_chars: int,
    diff_max_chars: int,
) -> ReviewPrompt:
    """Assemble the review prompt from ranked chunks and the pending diff."""
    packed = pack_chunks(chunks, budget_chars)
    text = get_review_prompt(format_context(packed), truncate_diff(diff_text, diff_max_chars))
    return ReviewPrompt(text=text, context_chunks=packed)


def build_review_prompt(
    chunks: Sequence[IndexedChunk],
    diff_text: str,
    config: ReviewGateConfig,
) -> ReviewPrompt:
    """Assemble the review prompt with the budgets derived from *config*.

    ``maxContextChunksPerFile`` is a reserved setting and is not applied.
    """
    return assemble_prompt(
        chunks,
        diff_text,
        budget_chars=config.context_budget_chars,
        diff_max_chars=config.diff_budget_chars,
    )
