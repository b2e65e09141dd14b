"""
Execution context tracking.

Upload state only exists while an HTTP request is being handled. Anything
running outside of one (scripts, shells, workers, tests) is treated as a
CLI context, where upload checks are skipped unless a rule opts in with
``validateInCli``.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def current_request_id() -> Optional[str]:
    """Return the ID of the request being handled, if any"""
    return _request_id.get()


def is_cli() -> bool:
    """True when no HTTP request is active in the current context"""
    return _request_id.get() is None


@contextmanager
def request_context(request_id: str) -> Iterator[str]:
    """Mark the current context as handling the given request"""
    token = _request_id.set(request_id)
    try:
        yield request_id
    finally:
        _request_id.reset(token)
