"""Tests for the review-model call with retry and backoff."""
import json

import pytest

from review_gate.ai_provider.prompts import REVIEW_SYSTEM_PROMPT
from review_gate.review.service import backoff_delay, request_review

GOOD = json.dumps({"inlineComments": [], "generalComments": ["ok"]})


class SleepRecorder:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


class TestBackoffDelay:
    @pytest.mark.parametrize("attempt, expected", [(0, 1.0), (1, 2.0), (2, 4.0), (3, 8.0)])
    def test_doubles(self, attempt, expected):
        assert backoff_delay(attempt, 1.0) == expected

    def test_zero_base(self):
        assert backoff_delay(5, 0.0) == 0.0


class TestRequestReview:
    def test_first_attempt_succeeds(self, fake_provider):
        provider = fake_provider([GOOD])
        sleep = SleepRecorder()

        result = request_review(provider, "prompt", sleep=sleep)

        assert result.general_comments == ["ok"]
        assert len(provider.prompts) == 1
        assert sleep.delays == []

    def test_system_prompt_sent(self, fake_provider):
        provider = fake_provider([GOOD])
        request_review(provider, "prompt", sleep=SleepRecorder())
        assert provider.systems == [REVIEW_SYSTEM_PROMPT]

    def test_retries_after_invalid_json(self, fake_provider):
        provider = fake_provider(["not json", GOOD])
        sleep = SleepRecorder()

        result = request_review(provider, "prompt", max_attempts=3, backoff_seconds=0.5, sleep=sleep)

        assert result is not None
        assert len(provider.prompts) == 2
        assert sleep.delays == [0.5]

    def test_retries_after_provider_error(self, fake_provider):
        provider = fake_provider([ConnectionError("refused"), TimeoutError("slow"), GOOD])
        sleep = SleepRecorder()

        result = request_review(provider, "prompt", max_attempts=3, backoff_seconds=1.0, sleep=sleep)

        assert result is not None
        assert sleep.delays == [1.0, 2.0]

    def test_exhaustion_returns_none(self, fake_provider):
        provider = fake_provider(["nope", RuntimeError("500"), "{}"])
        sleep = SleepRecorder()

        assert request_review(provider, "prompt", max_attempts=3, sleep=sleep) is None
        assert len(provider.prompts) == 3
        assert sleep.delays == [1.0, 2.0]

    def test_single_attempt_never_sleeps(self, fake_provider):
        provider = fake_provider(["nope"])
        sleep = SleepRecorder()
        assert request_review(provider, "prompt", max_attempts=1, sleep=sleep) is None
        assert sleep.delays == []

    def test_non_positive_attempts_still_calls_once(self, fake_provider):
        provider = fake_provider([GOOD])
        assert request_review(provider, "prompt", max_attempts=0, sleep=SleepRecorder()) is not None

    def test_same_prompt_every_attempt(self, fake_provider):
        provider = fake_provider(["x", "y", GOOD])
        request_review(provider, "the prompt", sleep=SleepRecorder())
        assert provider.prompts == ["the prompt"] * 3
