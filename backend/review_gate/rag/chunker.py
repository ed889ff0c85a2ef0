"""Line-bounded text chunking for the RAG index.

Splits file text into segments that stay under a character budget without
ever cutting a line in half.  Consecutive chunks may overlap by a few lines
when an overlap budget is configured; the overlap is approximated in whole
lines (budget divided by an assumed average line width) rather than measured
exactly in characters.

The chunker is total: it accepts any string, including the empty string and
single lines longer than the budget, and always terminates.
"""
import logging
import re
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)

# Assumed width of a source line when converting an overlap budget to lines.
AVG_LINE_WIDTH = 80

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class TextChunk:
    """A contiguous slice of a file (1-indexed, inclusive line range)."""

    text: str
    start_line: int
    end_line: int


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def split_lines(text: str) -> List[str]:
    """Split *text* on any line-ending convention.

    A single trailing terminator does not produce an extra empty line, so
    ``"a\\nb\\n"`` and ``"a\\nb"`` both yield ``["a", "b"]``.
    """
    if not text:
        return []
    lines = _LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def chunk_text(text: str, max_chars: int, overlap_chars: int = 0) -> List[TextChunk]:
    """Split *text* into ordered, line-bounded chunks.

    Lines are accumulated while ``running_total + len(line) < max_chars``,
    where every consumed line adds its length plus one separator to the
    running total.

    Args:
        text:          Full file text.
        max_chars:     Character budget per chunk.
        overlap_chars: Approximate overlap between consecutive chunks.

    Returns:
        List of TextChunk instances in file order.  Empty input yields an
        empty list.
    """
    lines = split_lines(text)
    overlap_lines = max(overlap_chars, 0) // AVG_LINE_WIDTH
    chunks: List[TextChunk] = []

    cursor = 0
    while cursor < len(lines):
        start = cursor
        length = 0
        while cursor < len(lines) and length + len(lines[cursor]) < max_chars:
            length += len(lines[cursor]) + 1
            cursor += 1

        if cursor == start:
            # The first line alone blows the budget: emit it by itself.
            chunks.append(TextChunk(text=lines[start], start_line=start + 1, end_line=start + 1))
            cursor = start + 1
            continue

        chunks.append(TextChunk(
            text="\n".join(lines[start:cursor]),
            start_line=start + 1,
            end_line=cursor,
        ))

        if overlap_lines and cursor < len(lines):
            # Never step back to (or before) this chunk's first line.
            cursor = max(cursor - overlap_lines, start + 1)

    logger.debug(
        "[Chunker] %d lines -> %d chunks (max_chars=%d overlap_lines=%d)",
        len(lines), len(chunks), max_chars, overlap_lines,
    )
    return chunks
