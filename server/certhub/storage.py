"""
In-memory storage for users, exams, certificates and questions.

Everything lives inside a ``Datastore`` that the service layer owns; nothing
here is a module-level global. Records are copied on the way in and on the
way out so no caller ever holds a live reference into a store.
"""
import enum
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Generic, Hashable, Iterator, List, Optional, TypeVar

from pydantic import BaseModel

from certhub.errors import NotFound
from certhub.models import Certificate, Exam, StoredQuestion, User
from certhub.services.category_index import CategoryIndex

K = TypeVar("K", bound=Hashable)
V = TypeVar("V", bound=BaseModel)


class EntityKind(str, enum.Enum):
    EXAM = "exam"
    CERTIFICATE = "certificate"
    QUESTION = "question"


class IdAllocator:
    """Issues monotonically increasing ids, one counter per entity kind.

    An id is consumed the moment it is handed out. Nothing gives it back if
    the insert that wanted it fails, so gaps in a sequence are expected.
    """

    def __init__(self):
        self._counters: Dict[EntityKind, int] = {kind: 0 for kind in EntityKind}
        self._lock = threading.Lock()

    def next_id(self, kind: EntityKind) -> int:
        with self._lock:
            value = self._counters[kind]
            self._counters[kind] = value + 1
            return value

    def peek(self, kind: EntityKind) -> int:
        """Next id that would be issued for ``kind``."""
        with self._lock:
            return self._counters[kind]


class RecordStore(Generic[K, V]):
    """Keyed collection of pydantic records.

    ``list_all`` order is unspecified; callers must not rely on it.
    """

    def __init__(self, entity: str):
        self.entity = entity
        self._records: Dict[K, V] = {}

    def insert(self, key: K, record: V) -> None:
        self._records[key] = record.model_copy(deep=True)

    def find(self, key: K) -> Optional[V]:
        record = self._records.get(key)
        return record.model_copy(deep=True) if record is not None else None

    def get(self, key: K) -> V:
        record = self.find(key)
        if record is None:
            raise NotFound(self.entity)
        return record

    def update(self, key: K, mutator: Callable[[V], None]) -> V:
        """Apply ``mutator`` to a copy and store it back; return the new record."""
        if key not in self._records:
            raise NotFound(self.entity)
        record = self._records[key].model_copy(deep=True)
        mutator(record)
        self._records[key] = record
        return record.model_copy(deep=True)

    def remove(self, key: K) -> V:
        try:
            return self._records.pop(key)
        except KeyError:
            raise NotFound(self.entity) from None

    def list_all(self) -> List[V]:
        return [record.model_copy(deep=True) for record in self._records.values()]

    def contains(self, key: K) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)


class Datastore:
    """All process state: the four stores, the category index and the counters."""

    def __init__(self):
        self.users: RecordStore[str, User] = RecordStore("user")
        self.exams: RecordStore[int, Exam] = RecordStore("exam")
        self.certificates: RecordStore[int, Certificate] = RecordStore("certificate")
        self.questions: RecordStore[int, StoredQuestion] = RecordStore("question")
        self.category_index = CategoryIndex()
        self.ids = IdAllocator()
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator["Datastore"]:
        """Serialize a whole operation against every other one."""
        with self._lock:
            yield self
