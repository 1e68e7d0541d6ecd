"""
Logging Request Context

Carries the identity of the command being handled (sender, command name) into
every log line written while handling it. Backed by contextvars, so each
request-handling thread sees only its own values.
"""

import logging
from typing import Optional
from contextvars import ContextVar

_sender: ContextVar[Optional[str]] = ContextVar('sender', default=None)
_command: ContextVar[Optional[str]] = ContextVar('command', default=None)


class RequestContextFilter(logging.Filter):
    """
    Logging filter that adds request context to log records
    """

    def filter(self, record):
        for key, value in getRequestContext().items():
            if value:
                setattr(record, key, value)

        return True


def setRequestContext(sender: str, command: Optional[str] = None):
    """
    Set the request context for logging

    Args:
        sender: Sender name or mask of the request
        command: Command name being handled (optional)
    """
    _sender.set(sender)
    _command.set(command)


def getRequestContext() -> dict:
    """Get current request context"""
    return {
        'sender': _sender.get(),
        'command': _command.get()
    }


def clearRequestContext():
    """Clear request context"""
    _sender.set(None)
    _command.set(None)


def installRequestContextFilter(logger: logging.Logger):
    """
    Install the request context filter on a logger.

    Loggers from getLogger() do not propagate, so the filter goes on each
    logger that should carry the context. Installing twice is a no-op.
    """
    for f in logger.filters:
        if isinstance(f, RequestContextFilter):
            return

    logger.addFilter(RequestContextFilter())
