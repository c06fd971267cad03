"""In-memory clinical data store and deterministic sample data."""

from .sample_data import build_sample_store
from .store import InMemoryClinicalStore

__all__ = ["InMemoryClinicalStore", "build_sample_store"]
