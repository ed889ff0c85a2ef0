"""Severity-based gating policy.

Fail-closed: a missing review (unreachable or unparseable model) blocks the
commit just like a blocking finding does.
"""
import logging
from typing import Iterable, List, Optional

from .schemas import GateDecision, InlineComment, ReviewResult

logger = logging.getLogger(__name__)


def blocking_comments(result: Optional[ReviewResult], block_on: Iterable[str]) -> List[InlineComment]:
    """Inline comments whose severity is in *block_on*, in review order."""
    if result is None:
        return []
    severities = set(block_on)
    return [c for c in result.inline_comments if c.severity in severities]


def decide(result: Optional[ReviewResult], block_on: Iterable[str]) -> GateDecision:
    """Return BLOCK for no result or any blocking finding, else ALLOW."""
    if result is None:
        logger.info("[Gate] no review result -> BLOCK")
        return GateDecision.BLOCK

    blocking = blocking_comments(result, block_on)
    if blocking:
        logger.info("[Gate] %d blocking finding(s) -> BLOCK", len(blocking))
        return GateDecision.BLOCK
    return GateDecision.ALLOW
