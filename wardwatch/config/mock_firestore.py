"""
In-memory document database for local development and tests.

Mirrors the subset of the Firestore client API that the services use:
collection/document references, where/order_by/offset/limit queries,
stream/get/set/update. Enable it with USE_MOCK_DB=true.

Writes to a single document are serialized by a lock, which gives the same
per-document atomicity the services rely on from Firestore.
"""

import copy
import threading
import uuid
from typing import Any, Dict, Iterator, List, Optional, Tuple

from google.api_core.exceptions import AlreadyExists, NotFound

ASCENDING = "ASCENDING"
DESCENDING = "DESCENDING"

_OPERATORS = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a is not None and a < b,
    "<=": lambda a, b: a is not None and a <= b,
    ">": lambda a, b: a is not None and a > b,
    ">=": lambda a, b: a is not None and a >= b,
    "in": lambda a, b: a in b,
    "not-in": lambda a, b: a not in b,
    "array_contains": lambda a, b: isinstance(a, list) and b in a,
}


class MockDocumentSnapshot:
    def __init__(self, reference: "MockDocumentReference", data: Optional[Dict[str, Any]]):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._data) if self._data is not None else None

    def get(self, field_path: str) -> Any:
        return (self._data or {}).get(field_path)


class MockDocumentReference:
    def __init__(self, db: "MockFirestore", collection: str, doc_id: str):
        self._db = db
        self._collection = collection
        self.id = doc_id

    @property
    def path(self) -> str:
        return f"{self._collection}/{self.id}"

    def get(self) -> MockDocumentSnapshot:
        with self._db._lock:
            data = self._db._collection_data(self._collection).get(self.id)
            return MockDocumentSnapshot(self, copy.deepcopy(data))

    def create(self, data: Dict[str, Any]) -> None:
        """Insert only if absent, like DocumentReference.create."""
        with self._db._lock:
            docs = self._db._collection_data(self._collection)
            if self.id in docs:
                raise AlreadyExists(f"Document already exists: {self.path}")
            docs[self.id] = copy.deepcopy(data)

    def set(self, data: Dict[str, Any], merge: bool = False) -> None:
        with self._db._lock:
            docs = self._db._collection_data(self._collection)
            if merge and self.id in docs:
                docs[self.id].update(copy.deepcopy(data))
            else:
                docs[self.id] = copy.deepcopy(data)

    def update(self, data: Dict[str, Any]) -> None:
        with self._db._lock:
            docs = self._db._collection_data(self._collection)
            if self.id not in docs:
                raise NotFound(f"No document to update: {self.path}")
            docs[self.id].update(copy.deepcopy(data))

    def delete(self) -> None:
        with self._db._lock:
            self._db._collection_data(self._collection).pop(self.id, None)


class MockQuery:
    def __init__(
        self,
        db: "MockFirestore",
        collection: str,
        filters: Tuple = (),
        orders: Tuple = (),
        offset_count: int = 0,
        limit_count: Optional[int] = None,
    ):
        self._db = db
        self._collection = collection
        self._filters = filters
        self._orders = orders
        self._offset = offset_count
        self._limit = limit_count

    def _copy(self, **changes) -> "MockQuery":
        params = {
            "filters": self._filters,
            "orders": self._orders,
            "offset_count": self._offset,
            "limit_count": self._limit,
        }
        params.update(changes)
        return MockQuery(self._db, self._collection, **params)

    def where(self, field_path: str, op_string: str, value: Any) -> "MockQuery":
        if op_string not in _OPERATORS:
            raise ValueError(f"Unsupported operator: {op_string}")
        return self._copy(filters=self._filters + ((field_path, op_string, value),))

    def order_by(self, field_path: str, direction: str = ASCENDING) -> "MockQuery":
        return self._copy(orders=self._orders + ((field_path, direction),))

    def offset(self, num_to_skip: int) -> "MockQuery":
        return self._copy(offset_count=num_to_skip)

    def limit(self, count: int) -> "MockQuery":
        return self._copy(limit_count=count)

    def _matches(self, data: Dict[str, Any]) -> bool:
        for field_path, op_string, value in self._filters:
            if not _OPERATORS[op_string](data.get(field_path), value):
                return False
        return True

    def stream(self) -> Iterator[MockDocumentSnapshot]:
        with self._db._lock:
            docs = self._db._collection_data(self._collection)
            matched: List[Tuple[str, Dict[str, Any]]] = [
                (doc_id, copy.deepcopy(data))
                for doc_id, data in docs.items()
                if self._matches(data)
            ]

        # Stable sorts applied last-key-first give multi-key ordering
        for field_path, direction in reversed(self._orders):
            # Firestore drops documents lacking an ordered field
            matched = [item for item in matched if item[1].get(field_path) is not None]
            matched.sort(key=lambda item: item[1][field_path], reverse=direction == DESCENDING)

        matched = matched[self._offset:]
        if self._limit is not None:
            matched = matched[: self._limit]

        for doc_id, data in matched:
            reference = MockDocumentReference(self._db, self._collection, doc_id)
            yield MockDocumentSnapshot(reference, data)

    def get(self) -> List[MockDocumentSnapshot]:
        return list(self.stream())


class MockCollectionReference(MockQuery):
    def __init__(self, db: "MockFirestore", collection: str):
        super().__init__(db, collection)
        self.id = collection

    def document(self, document_id: Optional[str] = None) -> MockDocumentReference:
        return MockDocumentReference(self._db, self._collection, document_id or uuid.uuid4().hex[:20])

    def add(self, data: Dict[str, Any]) -> Tuple[None, MockDocumentReference]:
        ref = self.document()
        ref.set(data)
        return None, ref


class MockFirestore:
    """Process-local stand-in for firestore.Client."""

    def __init__(self):
        self._lock = threading.RLock()
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _collection_data(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._data.setdefault(name, {})

    def collection(self, name: str) -> MockCollectionReference:
        return MockCollectionReference(self, name)

    def collections(self) -> List[MockCollectionReference]:
        with self._lock:
            return [MockCollectionReference(self, name) for name, docs in self._data.items() if docs]

    def reset(self) -> None:
        with self._lock:
            self._data.clear()


_mock_db: Optional[MockFirestore] = None


def get_mock_db() -> MockFirestore:
    global _mock_db
    if _mock_db is None:
        _mock_db = MockFirestore()
    return _mock_db
