import security.rate_limiter as rate_limiter
from security.auth import is_allowed


def test_empty_whitelist_allows_everyone():
    assert is_allowed(123, allowed=[])


def test_whitelist_blocks_strangers():
    assert is_allowed(1, allowed=[1, 2])
    assert not is_allowed(3, allowed=[1, 2])


def test_rate_limit_window(monkeypatch):
    monkeypatch.setattr(rate_limiter, "_user_timestamps", rate_limiter.defaultdict(list))

    assert rate_limiter.allow(7, now=100.0, limit=2, window=60)
    assert rate_limiter.allow(7, now=110.0, limit=2, window=60)
    assert not rate_limiter.allow(7, now=120.0, limit=2, window=60)
    # First timestamp has left the window
    assert rate_limiter.allow(7, now=161.0, limit=2, window=60)
