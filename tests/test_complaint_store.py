"""Tests for the complaint document stores."""

from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest

from civiclens.core.analytics import IssueAnalytics
from civiclens.core.config import settings
from civiclens.core.errors import ComplaintStoreError
from civiclens.core.models import AnalysisResult
from civiclens.services.complaint_store import (
    FirestoreComplaintStore,
    InMemoryComplaintStore,
    create_complaint_store,
    follow_store,
    sync_analytics,
    unique_locations,
)
from civiclens.services.storage import LocalStorage


def make_analysis(category="Sanitation", urgency="high"):
    return AnalysisResult(
        category=category,
        sentiment="negative",
        urgency=urgency,
        urgency_score=70,
        summary="Garbage piling up",
        recommendations=["Clean up"],
    )


class TestInMemoryStore:
    """Test the process-local store."""

    def test_save_returns_id_and_loads_newest_first(self):
        store = InMemoryComplaintStore()
        first = store.save_complaint(make_analysis("Noise"), "loud", lat=1.0, lng=2.0)
        second = store.save_complaint(make_analysis("Safety"), "unsafe")

        complaints = store.load_complaints()
        assert [c["id"] for c in complaints] == [second, first]
        assert complaints[1]["urgencyScore"] == 70
        assert complaints[1]["lat"] == 1.0
        assert complaints[0]["location"] is None
        assert complaints[0]["createdAt"]

    def test_load_limit(self):
        store = InMemoryComplaintStore()
        for _ in range(5):
            store.save_complaint(make_analysis(), "text")
        assert len(store.load_complaints(limit=3)) == 3

    def test_listener_receives_updates(self):
        store = InMemoryComplaintStore()
        snapshots = []
        unsubscribe = store.listen_for_updates(lambda records: snapshots.append(len(records)), limit=2)

        store.save_complaint(make_analysis(), "a")
        store.save_complaint(make_analysis(), "b")
        store.save_complaint(make_analysis(), "c")
        unsubscribe()
        store.clear_all()

        assert snapshots == [0, 1, 2, 2]

    def test_clear_all(self):
        store = InMemoryComplaintStore()
        store.save_complaint(make_analysis(), "a")
        store.clear_all()
        assert store.load_complaints() == []


class TestFirestoreStore:
    """Test the Firestore adapter against a mocked client."""

    def test_not_configured(self, monkeypatch):
        monkeypatch.setattr(settings, "firestore_project", "")
        store = FirestoreComplaintStore()
        assert not store.is_connected
        assert store.save_complaint(make_analysis(), "text") is None
        assert store.load_complaints() == []

    def test_save_complaint(self):
        client = Mock()
        client.collection.return_value.add.return_value = (None, SimpleNamespace(id="doc-1"))
        store = FirestoreComplaintStore(client=client, collection="complaints")

        complaint_id = store.save_complaint(make_analysis(), "Garbage", "Park Street", 12.5, 77.1)

        assert complaint_id == "doc-1"
        client.collection.assert_called_with("complaints")
        document = client.collection.return_value.add.call_args[0][0]
        assert document["complaint"] == "Garbage"
        assert document["category"] == "Sanitation"
        assert document["location"] == "Park Street"
        assert document["lat"] == 12.5
        assert "timestamp" in document

    def test_save_failure_returns_none(self):
        store = FirestoreComplaintStore(client=Mock())
        with patch.object(FirestoreComplaintStore, "_add", side_effect=RuntimeError("offline")):
            assert store.save_complaint(make_analysis(), "text") is None

    def test_load_complaints(self):
        client = Mock()
        doc = Mock(id="doc-9")
        doc.to_dict.return_value = {"category": "Noise", "urgency": "low"}
        query = client.collection.return_value.order_by.return_value.limit.return_value
        query.stream.return_value = [doc]
        store = FirestoreComplaintStore(client=client)

        assert store.load_complaints(limit=10) == [{"id": "doc-9", "category": "Noise", "urgency": "low"}]
        client.collection.return_value.order_by.return_value.limit.assert_called_with(10)

    def test_load_failure_returns_empty(self):
        client = Mock()
        client.collection.side_effect = RuntimeError("offline")
        store = FirestoreComplaintStore(client=client)
        assert store.load_complaints() == []

    def test_clear_all_failure_raises(self):
        client = Mock()
        client.batch.side_effect = RuntimeError("denied")
        store = FirestoreComplaintStore(client=client)
        with pytest.raises(ComplaintStoreError):
            store.clear_all()

    def test_factory_without_project_uses_memory(self, monkeypatch):
        monkeypatch.setattr(settings, "firestore_project", "")
        assert isinstance(create_complaint_store(), InMemoryComplaintStore)


def test_unique_locations():
    records = [
        {"lat": 28.6129, "lng": 77.2295},
        {"lat": 28.6131, "lng": 77.2302},
        {"lat": 19.076, "lng": 72.8777},
        {"lat": None, "lng": 72.0},
        {},
    ]
    assert unique_locations(records) == 2
    assert unique_locations([]) == 1


def test_sync_analytics_rebuilds_from_store(tmp_path):
    store = InMemoryComplaintStore()
    store.save_complaint(make_analysis("Garbage"), "a")
    store.save_complaint(make_analysis("Crime wave", urgency="critical"), "b")
    analytics = IssueAnalytics(LocalStorage(str(tmp_path)))
    analytics.record(make_analysis("Noise"), "stale")

    complaints = sync_analytics(store, analytics)

    assert len(complaints) == 2
    assert analytics.category_counts["sanitation"] == 1
    assert analytics.category_counts["safety"] == 1
    assert analytics.category_counts["noise"] == 0
    assert analytics.recent_issues[0].category == "Crime wave"


def test_follow_store_until_unsubscribed(tmp_path):
    store = InMemoryComplaintStore()
    store.save_complaint(make_analysis("Garbage"), "a")
    analytics = IssueAnalytics(LocalStorage(str(tmp_path)))

    stop_following = follow_store(store, analytics)
    assert analytics.total_issues() == 1

    store.save_complaint(make_analysis("Noise"), "b")
    assert analytics.category_counts["noise"] == 1

    stop_following()
    store.save_complaint(make_analysis("Noise"), "c")
    assert analytics.total_issues() == 2


def test_follow_store_returns_firestore_watch_handle():
    client = Mock()
    query = client.collection.return_value.order_by.return_value.limit.return_value
    store = FirestoreComplaintStore(client=client)
    analytics = Mock()

    stop_following = follow_store(store, analytics, limit=5)
    stop_following()

    client.collection.return_value.order_by.return_value.limit.assert_called_with(5)
    query.on_snapshot.return_value.unsubscribe.assert_called_once_with()
