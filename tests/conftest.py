import itertools
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from google.api_core.exceptions import NotFound as DocumentNotFound
from google.api_core.exceptions import ServiceUnavailable
from google.cloud.firestore_v1 import SERVER_TIMESTAMP


def _matches(data: Dict[str, Any], field: str, op: str, value: Any) -> bool:
    if field not in data:
        return False
    current = data[field]
    try:
        if op == "==":
            return current == value
        if op == "<=":
            return current <= value
        if op == "<":
            return current < value
        if op == ">=":
            return current >= value
        if op == ">":
            return current > value
        if op == "in":
            return current in value
        if op == "array_contains":
            return isinstance(current, list) and value in current
    except TypeError:
        return False
    raise AssertionError(f"unsupported operator {op}")


def _resolve(payload: Dict[str, Any]) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    return {key: now if value is SERVER_TIMESTAMP else value for key, value in payload.items()}


class StubSnapshot:
    def __init__(self, ref: "StubDocRef", data: Optional[Dict[str, Any]]):
        self.reference = ref
        self.id = ref.id
        self.exists = data is not None
        self._data = data

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class StubDocRef:
    def __init__(self, db: "StubFirestore", collection: str, doc_id: str):
        self._db = db
        self.collection_name = collection
        self.id = doc_id

    @property
    def _docs(self):
        return self._db.data.setdefault(self.collection_name, {})

    def get(self):
        return StubSnapshot(self, self._docs.get(self.id))

    def set(self, payload, merge=False):
        existing = dict(self._docs.get(self.id, {})) if merge else {}
        existing.update(_resolve(payload))
        self._docs[self.id] = existing

    def update(self, payload):
        if self.id not in self._docs:
            raise DocumentNotFound(f"No document to update: {self.id}")
        self._docs[self.id].update(_resolve(payload))

    def delete(self):
        self._docs.pop(self.id, None)


class StubQuery:
    def __init__(self, db: "StubFirestore", collection: str, filters=(), limit=None):
        self._db = db
        self._collection = collection
        self._filters = list(filters)
        self._limit = limit

    def where(self, *args, filter=None):
        assert filter is not None, "queries must use the filter= keyword"
        clause = (filter.field_path, filter.op_string, filter.value)
        return StubQuery(self._db, self._collection, self._filters + [clause], self._limit)

    def limit(self, count):
        return StubQuery(self._db, self._collection, self._filters, count)

    def stream(self):
        self._db.queries.append((self._collection, list(self._filters)))
        docs = self._db.data.get(self._collection, {})
        results = []
        for doc_id, data in list(docs.items()):
            if all(_matches(data, *clause) for clause in self._filters):
                ref = StubDocRef(self._db, self._collection, doc_id)
                results.append(StubSnapshot(ref, dict(data)))
        if self._limit is not None:
            results = results[: self._limit]
        return iter(results)


class StubCollection(StubQuery):
    def document(self, doc_id=None):
        return StubDocRef(self._db, self._collection, doc_id or self._db.next_id(self._collection))

    def add(self, payload):
        ref = self.document()
        ref.set(payload)
        return datetime.now(), ref


class StubBatch:
    def __init__(self, db: "StubFirestore"):
        self._db = db
        self._ops: List[Any] = []

    def set(self, ref, payload, merge=False):
        self._ops.append(lambda: ref.set(payload, merge=merge))

    def update(self, ref, payload):
        self._ops.append(lambda: ref.update(payload))

    def delete(self, ref):
        self._ops.append(ref.delete)

    def commit(self):
        number = len(self._db.commits) + 1
        if self._db.fail_on_commit == number:
            raise ServiceUnavailable("commit failed")
        assert len(self._ops) <= 500
        for op in self._ops:
            op()
        self._db.commits.append(len(self._ops))


class StubFirestore:
    def __init__(self):
        self.data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.queries: List[Any] = []
        self.commits: List[int] = []
        self.fail_on_commit: Optional[int] = None
        self._ids = itertools.count(1)

    def next_id(self, collection):
        return f"{collection}-{next(self._ids)}"

    def collection(self, name):
        return StubCollection(self, name)

    def batch(self):
        return StubBatch(self)

    def docs(self, collection):
        return self.data.get(collection, {})


class RecordingCalendar:
    def __init__(self, fail_after: Optional[int] = None):
        self.created = []
        self.updated = []
        self.deleted = []
        self.fail_after = fail_after

    def create_event(self, details):
        if self.fail_after is not None and len(self.created) >= self.fail_after:
            from scheduling.errors import Internal

            raise Internal("calendar unavailable")
        self.created.append(details)
        return {"eventId": f"evt-{len(self.created)}", "meetLink": f"https://meet.test/{len(self.created)}"}

    def update_event(self, event_id, *, start, end):
        self.updated.append((event_id, start, end))
        return True

    def delete_event(self, event_id):
        self.deleted.append(event_id)
        return True


@pytest.fixture
def fake_db():
    return StubFirestore()


@pytest.fixture
def calendar():
    return RecordingCalendar()


@pytest.fixture
def make_calendar():
    return RecordingCalendar
