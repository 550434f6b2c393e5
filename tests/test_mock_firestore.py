"""
Tests for the in-memory document database used in development and tests.
"""

import pytest
from google.api_core.exceptions import AlreadyExists, NotFound

from wardwatch.config.mock_firestore import DESCENDING, MockFirestore


@pytest.fixture
def store():
    return MockFirestore()


def test_create_refuses_existing_document(store):
    ref = store.collection("wards").document("3")
    ref.create({"name": "Ward 3"})

    with pytest.raises(AlreadyExists):
        ref.create({"name": "Impostor"})

    assert ref.get().to_dict() == {"name": "Ward 3"}


def test_update_missing_document_raises(store):
    with pytest.raises(NotFound):
        store.collection("wards").document("nope").update({"name": "x"})


def test_snapshots_are_copies(store):
    ref = store.collection("problems").document("p1")
    ref.set({"images": ["a"]})

    ref.get().to_dict()["images"].append("b")

    assert ref.get().to_dict() == {"images": ["a"]}


def test_where_order_offset_limit(store):
    problems = store.collection("problems")
    for i in range(6):
        problems.document(f"p{i}").set({"n": i, "status": "Open" if i % 2 else "Closed"})

    query = problems.where("status", "==", "Open").order_by("n", direction=DESCENDING).offset(1).limit(1)

    assert [doc.id for doc in query.stream()] == ["p3"]


def test_in_operator(store):
    problems = store.collection("problems")
    problems.document("a").set({"status": "Open"})
    problems.document("b").set({"status": "Resolved"})
    problems.document("c").set({"status": "In Progress"})

    ids = {doc.id for doc in problems.where("status", "in", ["Open", "In Progress"]).stream()}

    assert ids == {"a", "c"}


def test_order_by_drops_documents_missing_the_field(store):
    problems = store.collection("problems")
    problems.document("with").set({"created_at": 1})
    problems.document("without").set({"title": "no timestamp"})

    assert [doc.id for doc in problems.order_by("created_at").stream()] == ["with"]


def test_unknown_operator_rejected(store):
    with pytest.raises(ValueError):
        store.collection("problems").where("n", "~=", 1)


def test_collections_lists_non_empty_only(store):
    store.collection("wards").document("1").set({"name": "Ward 1"})
    store.collection("empty")

    assert [c.id for c in store.collections()] == ["wards"]
