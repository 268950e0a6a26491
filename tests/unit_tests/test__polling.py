import pytest

from bluegreen.aws.utils.polling import poll_until
from bluegreen.errors import PollTimeout, ReadinessTimeout


def make_fetch(values, clock, seen_at):
    values = iter(values)

    def fetch():
        seen_at.append(clock.time())
        return next(values)
    return fetch


def test_returns_first_accepted_value(fake_clock):
    seen_at = []
    fetch = make_fetch(["a", "b", "ok", "never"], fake_clock, seen_at)

    result = poll_until(fetch, lambda v: v == "ok", interval=5,
                        sleep=fake_clock.sleep, clock=fake_clock.time)

    assert result == "ok"
    assert len(seen_at) == 3
    assert fake_clock.sleeps == [5, 5]


def test_accepted_on_first_fetch_never_sleeps(fake_clock):
    result = poll_until(lambda: 1, lambda v: v == 1, interval=10,
                        timeout=0, sleep=fake_clock.sleep, clock=fake_clock.time)

    assert result == 1
    assert fake_clock.sleeps == []


def test_timeout_raises_without_fetching_past_deadline(fake_clock):
    seen_at = []
    fetch = make_fetch(["pending"] * 10, fake_clock, seen_at)

    with pytest.raises(PollTimeout, match="Timed out"):
        poll_until(fetch, lambda v: v == "ok", interval=10, timeout=30,
                   sleep=fake_clock.sleep, clock=fake_clock.time)

    assert seen_at == [0, 10, 20, 30]
    assert all(t <= 30 for t in seen_at)


def test_timeout_uses_requested_error_class(fake_clock):
    with pytest.raises(ReadinessTimeout) as exc_info:
        poll_until(lambda: None, lambda v: False, interval=1, timeout=2,
                   sleep=fake_clock.sleep, clock=fake_clock.time,
                   error_cls=ReadinessTimeout, description="instance i-1")

    assert "instance i-1" in exc_info.value.message
    assert exc_info.value.code == "ReadinessTimeout"


def test_backoff_grows_wait_linearly(fake_clock):
    fetch = make_fetch([False, False, False, False, True], fake_clock, [])

    poll_until(fetch, bool, interval=30, backoff=15,
               sleep=fake_clock.sleep, clock=fake_clock.time)

    assert fake_clock.sleeps == [30, 45, 60, 75]
    assert all(b >= a for a, b in zip(fake_clock.sleeps, fake_clock.sleeps[1:]))
    assert min(fake_clock.sleeps) >= 30


def test_no_timeout_polls_until_predicate(fake_clock):
    fetch = make_fetch([False] * 99 + [True], fake_clock, [])

    assert poll_until(fetch, bool, interval=1, timeout=None,
                      sleep=fake_clock.sleep, clock=fake_clock.time) is True
    assert len(fake_clock.sleeps) == 99


def test_negative_interval_rejected():
    with pytest.raises(ValueError):
        poll_until(lambda: True, bool, interval=-1)
