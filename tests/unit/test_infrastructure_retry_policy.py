"""Unit tests for RetryPolicy and default_should_retry."""

import random
from uuid import uuid4

import pytest

from gymaccess.core.enums import ErrorCode
from gymaccess.core.result import Failure, Success
from gymaccess.domain.errors import (
    VendorAuthenticationError,
    VendorConfigurationError,
    VendorRateLimitError,
    VendorResourceError,
    VendorUnavailableError,
)
from gymaccess.infrastructure.vendor import CallOutcome, RetryPolicy, default_should_retry

BRANCH = uuid4()


class TestRetryPolicy:
    """Backoff computation."""

    def test_delay_without_jitter_is_exponential(self):
        policy = RetryPolicy(base_delay=1.0, max_delay=30.0, jitter=0.0)

        assert [policy.delay_for(n) for n in (1, 2, 3, 4)] == [2.0, 4.0, 8.0, 16.0]

    def test_delay_is_capped(self):
        policy = RetryPolicy(base_delay=1.0, max_delay=30.0, jitter=0.0)

        assert policy.delay_for(10) == 30.0

    def test_jitter_stays_within_bounds(self):
        policy = RetryPolicy(base_delay=1.0, jitter=0.2)
        rng = random.Random(42)

        delays = [policy.delay_for(2, rng=rng) for _ in range(200)]

        assert all(3.2 <= d <= 4.8 for d in delays)
        assert len(set(delays)) > 1

    @pytest.mark.parametrize("jitter", [0.2, 0.5, 0.9])
    def test_delays_never_decrease_past_the_cap(self, jitter: float):
        policy = RetryPolicy(max_attempts=10, base_delay=1.0, max_delay=30.0, jitter=jitter)
        rng = random.Random(7)

        for _ in range(50):
            delays = [policy.delay_for(n, rng=rng) for n in range(1, 10)]
            assert delays == sorted(delays)

    def test_capped_delay_after_capped_attempt_is_constant(self):
        policy = RetryPolicy(base_delay=1.0, max_delay=30.0, jitter=0.2)

        assert policy.delay_for(7, rng=random.Random(1)) == pytest.approx(36.0)

    def test_retry_after_raises_delay(self):
        policy = RetryPolicy(base_delay=1.0, jitter=0.0)

        assert policy.delay_for(1, retry_after=10) == 10.0

    def test_retry_after_is_capped(self):
        policy = RetryPolicy(base_delay=1.0, max_delay=30.0, jitter=0.0)

        assert policy.delay_for(1, retry_after=3600) == 30.0

    def test_short_retry_after_does_not_lower_backoff(self):
        policy = RetryPolicy(base_delay=1.0, jitter=0.0)

        assert policy.delay_for(2, retry_after=1) == 4.0

    def test_attempts_left(self):
        policy = RetryPolicy(max_attempts=3)

        assert policy.has_attempts_left(1)
        assert policy.has_attempts_left(2)
        assert not policy.has_attempts_left(3)


class TestDefaultShouldRetry:
    """Classification of attempt results."""

    def test_success(self):
        assert default_should_retry(Success(value={})) is CallOutcome.SUCCESS

    @pytest.mark.parametrize(
        "error",
        [
            VendorUnavailableError(
                code=ErrorCode.VENDOR_UNAVAILABLE, message="timeout", branch_id=BRANCH
            ),
            VendorRateLimitError(
                code=ErrorCode.VENDOR_RATE_LIMITED, message="slow down", branch_id=BRANCH
            ),
            VendorAuthenticationError(
                code=ErrorCode.VENDOR_TOKEN_EXPIRED,
                message="expired",
                branch_id=BRANCH,
                is_token_expired=True,
            ),
        ],
    )
    def test_retryable(self, error):
        assert default_should_retry(Failure(error=error)) is CallOutcome.RETRYABLE

    @pytest.mark.parametrize(
        "code",
        [
            ErrorCode.VENDOR_PERSON_NOT_FOUND,
            ErrorCode.VENDOR_DEVICE_OFFLINE,
            ErrorCode.VENDOR_REQUEST_REJECTED,
        ],
    )
    def test_vendor_domain_errors_are_fatal(self, code):
        error = VendorResourceError(code=code, message="no", branch_id=BRANCH)

        assert default_should_retry(Failure(error=error)) is CallOutcome.FATAL

    def test_configuration_error_is_fatal(self):
        error = VendorConfigurationError(
            code=ErrorCode.VENDOR_SETTINGS_NOT_FOUND, message="missing", branch_id=BRANCH
        )

        assert default_should_retry(Failure(error=error)) is CallOutcome.FATAL
