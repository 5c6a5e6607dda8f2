"""
Per-domain entity history store.

Keeps the latest HistoryEntry per entity key and the order in which keys
were first seen. The order is what index-based addressing uses, so keys are
appended exactly once and never reordered or removed; an entity that
disappears from the counter source stays addressable with its last values.

The store is not thread-safe. Each domain owns its own store and a
collection pass reads then replaces each entity's entry before the next
pass starts.
"""

from typing import Dict, Iterator, List, Optional

from hoststat.errors import EntityIndexError, UnknownEntityError
from hoststat.models import HistoryEntry


class EntityHistoryStore:

    def __init__(self, domain: str = ""):
        self.domain = domain
        self._entries: Dict[str, HistoryEntry] = {}
        self._keys: List[str] = []

    def get(self, key: str) -> Optional[HistoryEntry]:
        return self._entries.get(key)

    def put(self, key: str, entry: HistoryEntry) -> None:
        if key not in self._entries:
            self._keys.append(key)
        self._entries[key] = entry

    def require(self, key: str) -> HistoryEntry:
        """Return the entry for ``key`` or raise UnknownEntityError."""
        entry = self._entries.get(key)
        if entry is None:
            raise UnknownEntityError(key, domain=self.domain)
        return entry

    def keys(self) -> List[str]:
        """Entity keys in first-seen order."""
        return list(self._keys)

    def key_at(self, index) -> str:
        """
        Resolve an insertion-order index to an entity key.

        Accepts ints and decimal strings. Negative or out-of-range indexes
        raise EntityIndexError.
        """
        try:
            position = int(index)
        except (TypeError, ValueError):
            raise EntityIndexError(index, len(self._keys), domain=self.domain)
        if position < 0 or position >= len(self._keys):
            raise EntityIndexError(index, len(self._keys), domain=self.domain)
        return self._keys[position]

    def index_of(self, key: str) -> int:
        try:
            return self._keys.index(key)
        except ValueError:
            raise UnknownEntityError(key, domain=self.domain)

    def is_stale(self, key: str, pass_id: int) -> bool:
        """True if the entity was not part of pass ``pass_id``."""
        return self.require(key).pass_id != pass_id

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._keys))
