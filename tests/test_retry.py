"""
RETRY POLICY TESTS
"""

import pytest

from draftlens.services.retry import NO_RETRY, BackoffPolicy, call_with_retry


class Flaky:
    """Fails with the given errors in order, then returns "ok"."""

    def __init__(self, *errors):
        self.errors = list(errors)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


class Transient(Exception):
    pass


class Permanent(Exception):
    pass


def retry_transient(error):
    return isinstance(error, Transient)


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def no_sleep():
    return RecordingSleep()


class TestBackoffPolicy:

    def test_default_delays(self):
        policy = BackoffPolicy()
        assert [policy(attempt) for attempt in range(4)] == [1.0, 2.0, 4.0, None]

    def test_base_delay_scales(self):
        policy = BackoffPolicy(max_retries=2, base_delay=0.25)
        assert [policy(0), policy(1), policy(2)] == [0.25, 0.5, None]

    def test_no_retry(self):
        assert NO_RETRY(0) is None

    def test_negative_attempt(self):
        assert BackoffPolicy()(-1) is None


class TestCallWithRetry:

    @pytest.mark.asyncio
    async def test_success_first_time(self, no_sleep):
        operation = Flaky()
        assert await call_with_retry(operation, BackoffPolicy(), retry_transient, sleep=no_sleep) == "ok"
        assert operation.calls == 1
        assert no_sleep.delays == []

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self, no_sleep):
        operation = Flaky(Transient(), Transient())
        result = await call_with_retry(operation, BackoffPolicy(), retry_transient, sleep=no_sleep)

        assert result == "ok"
        assert operation.calls == 3
        assert no_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, no_sleep):
        operation = Flaky(*[Transient(str(i)) for i in range(10)])

        with pytest.raises(Transient) as exc:
            await call_with_retry(operation, BackoffPolicy(), retry_transient, sleep=no_sleep)

        assert operation.calls == 4
        assert str(exc.value) == "3"
        assert no_sleep.delays == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_non_retryable_propagates_immediately(self, no_sleep):
        operation = Flaky(Permanent("bad request"))

        with pytest.raises(Permanent):
            await call_with_retry(operation, BackoffPolicy(), retry_transient, sleep=no_sleep)

        assert operation.calls == 1
        assert no_sleep.delays == []

    @pytest.mark.asyncio
    async def test_policy_is_any_callable(self, no_sleep):
        operation = Flaky(Transient(), Transient())

        def fixed_once(attempt):
            return 0.1 if attempt == 0 else None

        with pytest.raises(Transient):
            await call_with_retry(operation, fixed_once, retry_transient, sleep=no_sleep)
        assert no_sleep.delays == [0.1]
