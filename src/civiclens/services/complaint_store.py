"""Remote complaint document store (Firestore) and an in-memory stand-in."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from google.cloud import firestore
from tenacity import retry, stop_after_attempt, wait_exponential

from ..core.config import settings
from ..core.constants import MapConstants
from ..core.errors import ComplaintStoreError
from ..core.models import AnalysisResult

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[List[Dict[str, Any]]], None]


def build_document(analysis: AnalysisResult, complaint: str, location: Optional[str],
                   lat: Optional[float], lng: Optional[float]) -> Dict[str, Any]:
    """Document shape written for every complaint (timestamp added by the store)."""
    document = analysis.to_dict()
    document.update({
        "complaint": complaint,
        "location": location or None,
        "lat": lat,
        "lng": lng,
        "createdAt": datetime.now(timezone.utc).isoformat(),
    })
    return document


class ComplaintStore:
    """Interface of the remote document store."""

    is_connected: bool = False
    is_remote: bool = False

    def save_complaint(self, analysis: AnalysisResult, complaint: str, location: Optional[str] = None,
                       lat: Optional[float] = None, lng: Optional[float] = None) -> Optional[str]:
        """Store one complaint; returns the generated id, or None on failure."""
        raise NotImplementedError

    def load_complaints(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Most recent complaints, newest first."""
        raise NotImplementedError

    def listen_for_updates(self, callback: SnapshotCallback, limit: int = 20) -> Callable[[], None]:
        """Call ``callback`` with the newest ``limit`` records on every change."""
        raise NotImplementedError

    def clear_all(self) -> None:
        raise NotImplementedError


class InMemoryComplaintStore(ComplaintStore):
    """Process-local store used in demo mode and tests."""

    is_connected = True

    def __init__(self):
        self._documents: List[Dict[str, Any]] = []
        self._listeners: List[tuple] = []
        self._sequence = 0

    def save_complaint(self, analysis, complaint, location=None, lat=None, lng=None):
        document = build_document(analysis, complaint, location, lat, lng)
        self._sequence += 1
        document["id"] = uuid.uuid4().hex
        document["timestamp"] = self._sequence
        self._documents.append(document)
        logger.info(f"Complaint saved to memory store: {document['id']}")
        self._broadcast()
        return document["id"]

    def load_complaints(self, limit=50):
        ordered = sorted(self._documents, key=lambda d: d["timestamp"], reverse=True)
        return [dict(d) for d in ordered[:limit]]

    def listen_for_updates(self, callback, limit=20):
        listener = (callback, limit)
        self._listeners.append(listener)
        callback(self.load_complaints(limit))

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _broadcast(self) -> None:
        for callback, limit in list(self._listeners):
            callback(self.load_complaints(limit))

    def clear_all(self):
        self._documents.clear()
        logger.info("In-memory complaints cleared")
        self._broadcast()


class FirestoreComplaintStore(ComplaintStore):
    """Complaints kept in a Google Cloud Firestore collection."""

    is_remote = True

    def __init__(self, client=None, collection: Optional[str] = None):
        self.collection_name = collection or settings.firestore_collection
        self.db = client
        self.is_connected = False
        if self.db is None:
            if not settings.firestore_project:
                logger.info("Firestore not configured. Using local storage only.")
                return
            try:
                self.db = firestore.Client(project=settings.firestore_project)
            except Exception as e:
                logger.error(f"Firestore initialization error: {e}")
                return
        self.is_connected = True
        logger.info("Firestore connected successfully")

    def _collection(self):
        return self.db.collection(self.collection_name)

    @retry(
        stop=stop_after_attempt(settings.max_retries),
        wait=wait_exponential(multiplier=settings.retry_delay, max=settings.retry_backoff * 10),
        reraise=True,
    )
    def _add(self, document: Dict[str, Any]) -> str:
        _, doc_ref = self._collection().add(document)
        return doc_ref.id

    def save_complaint(self, analysis, complaint, location=None, lat=None, lng=None):
        if not self.is_connected:
            logger.info("Saving to local storage only (Firestore not connected)")
            return None

        document = build_document(analysis, complaint, location, lat, lng)
        document["timestamp"] = firestore.SERVER_TIMESTAMP
        try:
            complaint_id = self._add(document)
        except Exception as e:
            logger.error(f"Error saving complaint: {e}")
            return None
        logger.info(f"Complaint saved to database: {complaint_id}")
        return complaint_id

    def _recent_query(self, limit: int):
        return self._collection().order_by("timestamp", direction=firestore.Query.DESCENDING).limit(limit)

    @staticmethod
    def _to_records(docs) -> List[Dict[str, Any]]:
        return [{"id": doc.id, **(doc.to_dict() or {})} for doc in docs]

    def load_complaints(self, limit=50):
        if not self.is_connected:
            return []
        try:
            complaints = self._to_records(self._recent_query(limit).stream())
        except Exception as e:
            logger.error(f"Error loading complaints: {e}")
            return []
        logger.info(f"Loaded {len(complaints)} complaints from database")
        return complaints

    def listen_for_updates(self, callback, limit=20):
        if not self.is_connected:
            return lambda: None

        def on_snapshot(docs, changes, read_time):
            callback(self._to_records(docs))

        watch = self._recent_query(limit).on_snapshot(on_snapshot)
        return watch.unsubscribe

    def clear_all(self):
        if not self.is_connected:
            return
        try:
            batch = self.db.batch()
            for doc in self._collection().stream():
                batch.delete(doc.reference)
            batch.commit()
        except Exception as e:
            raise ComplaintStoreError(f"Failed to delete complaints: {e}") from e
        logger.info("All complaints deleted")


def create_complaint_store() -> ComplaintStore:
    """Firestore when a project is configured, otherwise the in-memory store."""
    if settings.firestore_project:
        store = FirestoreComplaintStore()
        if store.is_connected:
            return store
    return InMemoryComplaintStore()


def unique_locations(records: List[Dict[str, Any]]) -> int:
    """Distinct coordinates rounded to two decimals, at least 1 (rough city count)."""
    seen = set()
    for record in records:
        lat, lng = record.get("lat"), record.get("lng")
        if lat and lng:
            try:
                seen.add((round(float(lat), MapConstants.LOCATION_ROUNDING),
                          round(float(lng), MapConstants.LOCATION_ROUNDING)))
            except (TypeError, ValueError):
                continue
    return max(1, len(seen))


def sync_analytics(store: ComplaintStore, analytics, limit: int = 50) -> List[Dict[str, Any]]:
    """Rebuild ``analytics`` from the store's most recent complaints."""
    complaints = store.load_complaints(limit)
    if store.is_connected:
        analytics.rebuild_from(complaints)
    return complaints


def follow_store(store: ComplaintStore, analytics, limit: int = 20) -> Callable[[], None]:
    """Keep ``analytics`` rebuilt from live store snapshots; returns the unsubscribe handle."""
    unsubscribe = store.listen_for_updates(analytics.rebuild_from, limit)
    logger.info(f"Following complaint store updates (newest {limit})")
    return unsubscribe
