"""Session-scoped logging: tag every record with the chat session it belongs to.

A turn runs inside ``session_context(session_id)``; records emitted during
the turn carry ``record.session_id`` and the id is restored when the turn
ends, even on error. Outside any session the id is ``NO_SESSION``.

Usage:
    from lead_chatbot.logging_context import get_session_logger, session_context

    logger = get_session_logger(__name__)
    with session_context("web-4f2a"):
        logger.info("Processing message")  # record.session_id == "web-4f2a"
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator

NO_SESSION = "NO_SESSION"
SESSION_LOG_FORMAT = "%(asctime)s [%(name)s] [%(session_id)s] %(levelname)s: %(message)s"

_session_id: ContextVar[str] = ContextVar("session_id", default=NO_SESSION)


def set_session_id(session_id: str) -> Token:
    """Bind a session id; pass the returned token to ``reset_session_id``."""
    return _session_id.set(session_id)


def reset_session_id(token: Token) -> None:
    _session_id.reset(token)


def get_session_id() -> str:
    return _session_id.get()


@contextmanager
def session_context(session_id: str) -> Iterator[str]:
    """Bind ``session_id`` for the duration of the block."""
    token = set_session_id(session_id)
    try:
        yield session_id
    finally:
        reset_session_id(token)


class SessionIdFilter(logging.Filter):
    """Stamps the current session id on each record it sees."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def session_log_handler() -> logging.Handler:
    """Stream handler whose records always carry ``session_id``.

    The filter sits on the handler so records from any logger can be
    formatted with ``SESSION_LOG_FORMAT``.
    """
    handler = logging.StreamHandler()
    handler.addFilter(SessionIdFilter())
    return handler


def get_session_logger(name: str) -> logging.Logger:
    """Logger whose records carry ``session_id`` for every handler, capture included."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, SessionIdFilter) for f in logger.filters):
        logger.addFilter(SessionIdFilter())
    return logger
