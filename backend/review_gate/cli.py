"""Command-line entry points.

``review-gate-index``:  rebuild ``.ai-context/index.json`` from the configured
                        include/ignore globs.
``review-gate-review``: review the staged diff and gate the commit.

Exit codes: 0 on success / ALLOW / nothing to do, 1 on any failure or BLOCK.
Diagnostics go to stderr through ``logging``; findings and the verdict are
printed to stdout.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from review_gate.ai_provider.resolver import create_review_provider
from review_gate.config import index_path, load_config, load_secrets
from review_gate.embeddings.service import create_embedding_service
from review_gate.errors import ReviewGateError
from review_gate.git_diff import get_staged_diff
from review_gate.rag.index_store import load_index
from review_gate.rag.indexer import RagIndexer
from review_gate.review.pipeline import ReviewOutcome, run_review
from review_gate.review.schemas import GateDecision

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

MESSAGES = {
    "NO_STAGED_CHANGES": "No staged changes.",
    "NO_RAG_CONTEXT": "No RAG context found. Did you build the index? (review-gate-index)",
    "INVALID_JSON": "Review model did not return valid JSON. Aborting commit.",
    "BLOCKERS_FOUND": "Blockers found. Commit aborted.",
    "REVIEW_PASSED": "AI review passed. Proceeding with commit.",
    "NO_FILES_TO_INDEX": "No files to index.",
    "INDEXING_FAILED": "Indexing failed:",
    "REVIEW_FAILED": "Review failed:",
    "UNEXPECTED_ERROR": "Unexpected error:",
}

# Third-party loggers that log every connection or request.
_NOISY_LOGGERS = (
    "botocore",
    "boto3",
    "urllib3",
    "urllib3.connectionpool",
    "httpx",
    "httpcore",
    "anthropic",
    "openai",
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    configured_level = getattr(logging, level.upper(), None)
    if isinstance(configured_level, int):
        logging.getLogger().setLevel(configured_level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _build_parser(prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument(
        "--root",
        type=Path,
        default=Path.cwd(),
        help="Repository root containing .ai-context/ (default: current directory)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override logLevel from config.json (debug, info, warning, error)",
    )
    return parser


def _report_error(prefix: str, exc: ReviewGateError) -> int:
    print(f"{prefix} {exc.kind.value} error: {exc.message}", file=sys.stderr)
    return EXIT_FAILURE


def _report_unexpected(prefix: str, exc: Exception) -> int:
    logger.debug("[CLI] Unexpected failure", exc_info=True)
    print(f"{prefix} {MESSAGES['UNEXPECTED_ERROR']} {exc}", file=sys.stderr)
    return EXIT_FAILURE


def _close_quietly(resource) -> None:
    if resource is None:
        return
    try:
        resource.close()
    except Exception as exc:
        logger.warning("[CLI] Failed to close %s: %s", type(resource).__name__, exc)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def run_index(root: Path, log_level: Optional[str] = None) -> int:
    """Rebuild the index under *root*; return the process exit code."""
    embedder = None
    try:
        config = load_config(root)
        _configure_logging(log_level or config.log_level)
        secrets = load_secrets(root)
        embedder = create_embedding_service(config, secrets, input_type="search_document")
        indexer = RagIndexer(config, embedder, root=root, index_path=index_path(root))
        index = indexer.build()
    except ReviewGateError as exc:
        return _report_error(MESSAGES["INDEXING_FAILED"], exc)
    except Exception as exc:
        return _report_unexpected(MESSAGES["INDEXING_FAILED"], exc)
    finally:
        _close_quietly(embedder)

    if index is None:
        print(MESSAGES["NO_FILES_TO_INDEX"])
        return EXIT_OK

    print(f"Indexed {index.size} chunks -> {index_path(root)}")
    return EXIT_OK


def print_outcome(outcome: ReviewOutcome) -> None:
    """Print general and inline findings, then the verdict."""
    if outcome.result is None:
        print(MESSAGES["INVALID_JSON"], file=sys.stderr)
        return

    if outcome.result.general_comments:
        print("\nGeneral comments:")
        for comment in outcome.result.general_comments:
            print(f" - {comment}")

    if outcome.result.inline_comments:
        print("\nInline comments:")
        for c in outcome.result.inline_comments:
            snippet = f" ({c.code})" if c.code else ""
            print(f" - {c.file}:{c.line} [{c.severity}] -> {c.comment}{snippet}")

    if outcome.decision is GateDecision.BLOCK:
        print("\nBlocking findings:")
        for c in outcome.blocking:
            print(f" - {c.file}:{c.line} [{c.severity}] {c.comment}")
        print(f"\n{MESSAGES['BLOCKERS_FOUND']}")
    else:
        print(f"\n{MESSAGES['REVIEW_PASSED']}")


def run_review_command(root: Path, log_level: Optional[str] = None) -> int:
    """Review the staged diff under *root*; return the process exit code."""
    embedder = provider = None
    try:
        config = load_config(root)
        _configure_logging(log_level or config.log_level)

        diff_text = get_staged_diff(root)
        if not diff_text.strip():
            print(MESSAGES["NO_STAGED_CHANGES"])
            return EXIT_OK

        secrets = load_secrets(root)
        index = load_index(index_path(root))
        embedder = create_embedding_service(config, secrets, input_type="search_query")
        provider = create_review_provider(config, secrets)
        outcome = run_review(config, diff_text, index, embedder, provider)
    except ReviewGateError as exc:
        return _report_error(MESSAGES["REVIEW_FAILED"], exc)
    except Exception as exc:
        return _report_unexpected(MESSAGES["REVIEW_FAILED"], exc)
    finally:
        _close_quietly(embedder)
        _close_quietly(provider)

    if not outcome.has_context:
        print(MESSAGES["NO_RAG_CONTEXT"], file=sys.stderr)

    print_outcome(outcome)
    return EXIT_OK if outcome.decision is GateDecision.ALLOW else EXIT_FAILURE


# ---------------------------------------------------------------------------
# Console scripts
# ---------------------------------------------------------------------------


def index_main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser("review-gate-index", "Build the RAG index for the review gate.")
    args = parser.parse_args(argv)
    return run_index(args.root, args.log_level)


def review_main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser("review-gate-review", "Review staged changes and gate the commit.")
    args = parser.parse_args(argv)
    return run_review_command(args.root, args.log_level)


def main(argv: Optional[List[str]] = None) -> int:
    """``python -m review_gate {index,review}``."""
    argv = list(sys.argv[1:] if argv is None else argv)
    commands = {"index": index_main, "review": review_main}
    if not argv or argv[0] not in commands:
        print("usage: python -m review_gate {index,review} [--root PATH] [--log-level LEVEL]", file=sys.stderr)
        return 2
    return commands[argv[0]](argv[1:])
