"""
SDK Logging - hierarchical logger with automatic name detection.

API:
    from sdk.logging import getLogger

    # Class-level (name detected once in __init__)
    class TermStore:
        def __init__(self):
            self.log = getLogger()  # 'termbook.core.store.TermStore'

    # Module-level
    log = getLogger()

    # Global configuration (optional, once at app startup)
    from sdk.logging import configureLogging
    configureLogging(logDir='./logs', maxBytes=10_000_000)

    # Per-request context (sender/command appended to every line)
    from sdk.logging import setRequestContext, installRequestContextFilter
"""

from .logger import getLogger, configureLogging
from .context import (
    setRequestContext,
    getRequestContext,
    clearRequestContext,
    installRequestContextFilter
)

__all__ = [
    'getLogger',
    'configureLogging',
    'setRequestContext',
    'getRequestContext',
    'clearRequestContext',
    'installRequestContextFilter'
]
