"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc
from utils.request_context import (
    get_current_token,
    set_current_token,
    clear_current_token,
    token_context,
)
