"""Services for CivicLens."""

from .llm import LLMServiceFactory, ComplaintClassifier
from .storage import LocalStorage, CooldownGate
from .complaint_store import FirestoreComplaintStore, InMemoryComplaintStore
from .intake import ComplaintIntake, create_intake

__all__ = [
    "LLMServiceFactory",
    "ComplaintClassifier",
    "LocalStorage",
    "CooldownGate",
    "FirestoreComplaintStore",
    "InMemoryComplaintStore",
    "ComplaintIntake",
    "create_intake",
]
