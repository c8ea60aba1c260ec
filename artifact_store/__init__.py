"""
Artifact Store
==============

Content-addressed storage for accepted contract code: Pinata/IPFS in
production, an in-memory store for mock and development runs.
"""

from .memory_store import InMemoryArtifactStore
from .pinata_store import PinataStorage

__all__ = ["InMemoryArtifactStore", "PinataStorage"]
