"""Unit tests for the upload rate limiter window."""

from src.api.middleware import RateLimitMiddleware


async def _app(scope, receive, send):
    return None


def test_window_allows_up_to_limit_per_client():
    limiter = RateLimitMiddleware(_app, limit_per_minute=2)

    assert limiter._allow("10.0.0.1")
    assert limiter._allow("10.0.0.1")
    assert not limiter._allow("10.0.0.1")
    assert limiter._allow("10.0.0.2")


def test_old_hits_leave_the_window():
    limiter = RateLimitMiddleware(_app, limit_per_minute=1)
    assert limiter._allow("10.0.0.1")

    limiter._hits["10.0.0.1"][0] -= limiter.window_seconds

    assert limiter._allow("10.0.0.1")
