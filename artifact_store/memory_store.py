"""
In-memory content-addressed store used in mock/dev mode and tests.
"""

import hashlib
import json
from typing import Any, Dict, Optional

from healing.errors import StorageError


class InMemoryArtifactStore:
    """Keeps artifacts in a dict keyed by a sha256 content id"""

    PREFIX = "mem-"

    def __init__(self):
        self._items: Dict[str, str] = {}
        self._metadata: Dict[str, Dict[str, Any]] = {}

    async def put(self, content: str, metadata: Optional[Dict[str, Any]] = None) -> str:
        if not isinstance(content, str):
            raise StorageError("Artifact content must be text")
        cid = self.PREFIX + hashlib.sha256(content.encode("utf-8")).hexdigest()
        self._items[cid] = content
        self._metadata[cid] = json.loads(json.dumps(metadata or {}, default=str))
        return cid

    async def get(self, identifier: str) -> str:
        try:
            return self._items[identifier]
        except KeyError:
            raise StorageError(f"Unknown artifact: {identifier}") from None

    def metadata(self, identifier: str) -> Dict[str, Any]:
        return dict(self._metadata.get(identifier, {}))

    def __len__(self) -> int:
        return len(self._items)

    async def test_connection(self) -> bool:
        return True
