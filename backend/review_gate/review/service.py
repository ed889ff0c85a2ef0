"""Review-model call with JSON-contract enforcement and retry.

An attempt fails when the provider raises or when its response cannot be
decoded into a ``ReviewResult``.  Failed attempts are retried after an
exponential backoff; once every attempt has failed the service returns
``None`` and leaves the verdict to the caller.
"""
import logging
import time
from typing import Callable, Optional

from review_gate.ai_provider.base import AIProvider
from review_gate.ai_provider.prompts import REVIEW_SYSTEM_PROMPT

from .parser import parse_review
from .schemas import ReviewResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 1.0


def backoff_delay(attempt: int, base_seconds: float) -> float:
    """Delay after failed attempt *attempt* (0-based): ``base * 2**attempt``."""
    return base_seconds * (2 ** attempt)


def request_review(
    provider: AIProvider,
    prompt: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
    max_tokens: int = 2048,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[ReviewResult]:
    """Ask the review model for a structured review.

    Args:
        provider:        Review-model provider.
        prompt:          Assembled review prompt.
        max_attempts:    Total number of calls allowed (at least one is made).
        backoff_seconds: Base of the exponential backoff between attempts.
        max_tokens:      Response token cap forwarded to the provider.
        sleep:           Injected for tests.

    Returns:
        The parsed ReviewResult, or None once all attempts have failed.
    """
    attempts = max(1, max_attempts)
    provider_name = type(provider).__name__

    for attempt in range(attempts):
        try:
            raw = provider.call_model(prompt, max_tokens=max_tokens, system=REVIEW_SYSTEM_PROMPT)
        except Exception as exc:
            # Catch-all for provider errors (API errors, network issues, etc.)
            logger.warning(
                "[ReviewService] %s call failed (attempt %d/%d): %s",
                provider_name, attempt + 1, attempts, exc,
            )
        else:
            result = parse_review(raw)
            if result is not None:
                logger.info(
                    "[ReviewService] review parsed on attempt %d/%d: inline=%d general=%d",
                    attempt + 1, attempts,
                    len(result.inline_comments), len(result.general_comments),
                )
                return result
            logger.warning(
                "[ReviewService] %s returned no valid JSON (attempt %d/%d)",
                provider_name, attempt + 1, attempts,
            )

        if attempt + 1 < attempts:
            delay = backoff_delay(attempt, backoff_seconds)
            logger.info("[ReviewService] retrying in %.1fs", delay)
            sleep(delay)

    logger.error("[ReviewService] no valid review after %d attempts", attempts)
    return None
