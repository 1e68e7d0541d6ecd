"""
Reader/writer lock

Many readers or one writer. Writer-preferring: once a writer is waiting, new
readers block until it has run, so a steady stream of lookups cannot starve
add/remove. Not reentrant.
"""

import threading
from contextlib import contextmanager


class ReadWriteLock:
    """Shared/exclusive lock built on a single condition variable."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writersWaiting = 0

    def acquireRead(self):
        with self._cond:
            while self._writer or self._writersWaiting:
                self._cond.wait()
            self._readers += 1

    def releaseRead(self):
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquireWrite(self):
        with self._cond:
            self._writersWaiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writersWaiting -= 1
            self._writer = True

    def releaseWrite(self):
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def readLocked(self):
        self.acquireRead()
        try:
            yield
        finally:
            self.releaseRead()

    @contextmanager
    def writeLocked(self):
        self.acquireWrite()
        try:
            yield
        finally:
            self.releaseWrite()
