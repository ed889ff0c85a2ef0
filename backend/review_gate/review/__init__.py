"""Review path: model-output parsing, retry, gating and orchestration."""
from .gating import blocking_comments, decide
from .parser import extract_json_payload, parse_review
from .pipeline import ReviewOutcome, run_review
from .schemas import GateDecision, InlineComment, ReviewResult
from .service import request_review

__all__ = [
    "GateDecision",
    "InlineComment",
    "ReviewResult",
    "ReviewOutcome",
    "extract_json_payload",
    "parse_review",
    "request_review",
    "blocking_comments",
    "decide",
    "run_review",
]
