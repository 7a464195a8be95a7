import pytest

from prepcore.services.retry import RetryPolicy, is_transient, with_retries

from conftest import ProviderError


class Flaky:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        item = self.outcomes.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


def test_returns_first_success_without_sleeping():
    delays = []
    assert with_retries(Flaky("ok"), sleep=delays.append) == "ok"
    assert delays == []


def test_retries_transient_status_with_exponential_backoff():
    fn = Flaky(ProviderError("busy", 503), ProviderError("slow down", 429), "ok")
    delays = []

    assert with_retries(fn, RetryPolicy(), sleep=delays.append) == "ok"
    assert fn.calls == 3
    assert delays == [1.0, 2.0]


def test_reraises_last_error_unchanged_after_exhausting_attempts():
    last = ProviderError("still busy", 503)
    fn = Flaky(ProviderError("busy", 503), ProviderError("busy", 503), last)
    delays = []

    with pytest.raises(ProviderError) as exc:
        with_retries(fn, RetryPolicy(max_attempts=3), sleep=delays.append)
    assert exc.value is last
    assert fn.calls == 3
    assert delays == [1.0, 2.0]


def test_non_transient_error_aborts_immediately():
    fn = Flaky(ValueError("bad request"), "never reached")
    delays = []

    with pytest.raises(ValueError):
        with_retries(fn, sleep=delays.append)
    assert fn.calls == 1
    assert delays == []


@pytest.mark.parametrize(
    "exc, expected",
    [
        (ProviderError("x", 429), True),
        (ProviderError("x", 503), True),
        (ProviderError("x", 500), False),
        (RuntimeError("The model is overloaded"), True),
        (RuntimeError("Rate limit exceeded for requests"), True),
        (RuntimeError("invalid api key"), False),
    ],
)
def test_is_transient(exc, expected):
    assert is_transient(exc) is expected


def test_delay_doubles_per_attempt():
    policy = RetryPolicy(base_delay=1.0)
    assert [policy.delay_for(i) for i in range(3)] == [1.0, 2.0, 4.0]
