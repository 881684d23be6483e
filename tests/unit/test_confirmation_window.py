from datetime import datetime, timedelta, timezone

from sms_activation.domain.services import confirmation_period_valid

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_zero_window_is_never_valid():
    assert confirmation_period_valid(NOW, timedelta(0), now=NOW) is False


def test_missing_sent_at_is_not_valid():
    assert confirmation_period_valid(None, timedelta(days=5), now=NOW) is False


def test_inside_and_outside_window():
    window = timedelta(days=5)
    assert confirmation_period_valid(NOW, window, now=NOW)
    assert confirmation_period_valid(NOW - timedelta(days=4), window, now=NOW)
    assert confirmation_period_valid(NOW - timedelta(days=5), window, now=NOW)
    assert not confirmation_period_valid(NOW - timedelta(days=6), window, now=NOW)


def test_naive_sent_at_is_read_as_utc():
    naive = datetime(2025, 2, 28, 12, 0)
    assert confirmation_period_valid(naive, timedelta(days=1), now=NOW)
    assert not confirmation_period_valid(naive, timedelta(hours=23), now=NOW)
