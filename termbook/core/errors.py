"""
termbook error types

NotFoundError / AlreadyExistsError are expected outcomes of user commands and
are answered with a reply, not logged as faults. DecodeError / StorageError
mean the persisted file could not be read or written.
"""


class TermStoreError(Exception):
    """Base class for term store errors"""
    pass


class NotFoundError(TermStoreError, KeyError):
    """Term is not in the table"""

    def __init__(self, term: str):
        super().__init__(term)
        self.term = term

    def __str__(self):
        return f"Term not found: {self.term}"


class AlreadyExistsError(TermStoreError, KeyError):
    """Term is already in the table"""

    def __init__(self, term: str):
        super().__init__(term)
        self.term = term

    def __str__(self):
        return f"Term already defined: {self.term}"


class DecodeError(TermStoreError, ValueError):
    """Persisted content is not a gzip-compressed JSON object of strings"""
    pass


class EncodeError(TermStoreError, ValueError):
    """Table content cannot be written as UTF-8 JSON (e.g. lone surrogates)"""
    pass


class StorageError(TermStoreError):
    """Persisted file could not be read or written"""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path
