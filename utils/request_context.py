"""Carry the caller's backend bearer token through the call stack using contextvars."""

from contextlib import contextmanager
from contextvars import ContextVar

_current_token: ContextVar[str | None] = ContextVar("current_token", default=None)


def get_current_token() -> str:
    """
    Get the bearer token of the request being served.

    Raises RuntimeError if no token is set. Backend calls made outside an
    authenticated request are a bug, not something to paper over.
    """
    token = _current_token.get()
    if token is None:
        raise RuntimeError(
            "No request token set. Backend calls must happen inside an "
            "authenticated request or a token_context() block."
        )
    return token


def set_current_token(token: str) -> None:
    """Set the bearer token for the current request. Called by the auth middleware."""
    _current_token.set(token)


def clear_current_token() -> None:
    """
    Clear the bearer token.

    Must be called in a finally block so tokens never leak between requests.
    """
    _current_token.set(None)


@contextmanager
def token_context(token: str):
    """
    Temporarily act with the given bearer token.

    Example:
        with token_context(token):
            balance = loyalty_client.get_balance()
    """
    previous = _current_token.get()
    set_current_token(token)
    try:
        yield
    finally:
        if previous is None:
            clear_current_token()
        else:
            set_current_token(previous)
