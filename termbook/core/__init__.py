"""
termbook Core

Term table, codec and the thread-safe store that persists them.
"""

from .errors import (
    TermStoreError,
    NotFoundError,
    AlreadyExistsError,
    DecodeError,
    StorageError,
    EncodeError
)
from .termTable import TermTable, normalizeTerm
from .store import TermStore, LoadStatus, LoadResult

__all__ = [
    'TermStoreError',
    'NotFoundError',
    'AlreadyExistsError',
    'DecodeError',
    'StorageError',
    'EncodeError',
    'TermTable',
    'normalizeTerm',
    'TermStore',
    'LoadStatus',
    'LoadResult'
]
