"""Request context utilities.

Carries the correlation ID and the acting uploader identity of the current
request so log lines can be tied back to both.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from uuid import uuid4

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
_actor_id_var: ContextVar[str | None] = ContextVar("actor_id", default=None)


def get_request_id() -> str | None:
    """Get the current request correlation ID (if any)."""

    return _request_id_var.get()


def set_request_id(request_id: str | None) -> Token[str | None]:
    return _request_id_var.set(request_id)


def reset_request_id(token: Token[str | None]) -> None:
    _request_id_var.reset(token)


def new_request_id() -> str:
    """Generate a new correlation ID."""

    return str(uuid4())


def get_actor_id() -> str | None:
    """Get the id of the user (real or synthetic) acting in this request."""

    return _actor_id_var.get()


def set_actor_id(actor_id: str | None) -> Token[str | None]:
    return _actor_id_var.set(actor_id)


@contextmanager
def request_id_context(request_id: str | None):
    """Context manager that sets the correlation ID for the duration.

    The actor id is scoped to the same block so it never leaks across
    requests.
    """

    token = set_request_id(request_id)
    actor_token = _actor_id_var.set(None)
    try:
        yield
    finally:
        _actor_id_var.reset(actor_token)
        reset_request_id(token)
