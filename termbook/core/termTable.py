"""
Term Table

In-memory mapping of term -> definition. Keys are stored in canonical
(lower-cased) form; callers normalize with normalizeTerm() before lookup.

No locking here: TermStore serializes all access.
"""

from typing import Dict, Iterator, List, Mapping, Optional

from .errors import NotFoundError, AlreadyExistsError


def normalizeTerm(term: str) -> str:
    """Canonical form of a term. 'Foo' and 'fOO' are the same term."""
    return term.lower()


class TermTable:
    """
    Term -> definition mapping.

    Invariants:
    - every key is already normalized
    - insert never overwrites, erase never touches an absent key
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None):
        self._entries: Dict[str, str] = {}
        # Normalized terms that more than one source key mapped to; the last one wins
        self.collisions: List[str] = []
        if entries:
            for term, definition in entries.items():
                key = normalizeTerm(term)
                if key in self._entries and key not in self.collisions:
                    self.collisions.append(key)
                self._entries[key] = definition

    def lookup(self, term: str) -> Optional[str]:
        return self._entries.get(term)

    def insert(self, term: str, definition: str):
        if term in self._entries:
            raise AlreadyExistsError(term)
        self._entries[term] = definition

    def erase(self, term: str) -> str:
        """Remove a term and return the definition it had."""
        if term not in self._entries:
            raise NotFoundError(term)
        return self._entries.pop(term)

    def snapshot(self) -> Dict[str, str]:
        """Copy of the entries, safe to hand outside the lock."""
        return dict(self._entries)

    def __contains__(self, term: str) -> bool:
        return term in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
