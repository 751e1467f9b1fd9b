"""
Category index for the question bank.

Maps a category label to the set of question ids carrying it. Membership
only: ids come back in set iteration order, which is unspecified and must
not be relied upon.
"""
from itertools import islice
from typing import Dict, Iterable, List, Set


class CategoryIndex:
    """Secondary index: category label -> set of ids."""

    def __init__(self):
        self._index: Dict[str, Set[int]] = {}

    def index_insert(self, record_id: int, categories: Iterable[str]) -> None:
        for category in categories:
            self._index.setdefault(category, set()).add(record_id)

    def index_remove(self, record_id: int, categories: Iterable[str]) -> None:
        for category in categories:
            ids = self._index.get(category)
            if ids is None:
                continue
            ids.discard(record_id)
            if not ids:
                del self._index[category]

    def reindex(self, record_id: int, old: Iterable[str], new: Iterable[str]) -> None:
        self.index_remove(record_id, old)
        self.index_insert(record_id, new)

    def lookup(self, category: str, limit: int) -> List[int]:
        """Up to ``limit`` ids under ``category``. Unknown category -> []."""
        if limit <= 0:
            return []
        ids = self._index.get(category)
        if not ids:
            return []
        return list(islice(ids, limit))

    def count(self, category: str) -> int:
        return len(self._index.get(category, ()))

    def categories(self) -> List[str]:
        return sorted(self._index)
