"""
Pinata IPFS Store
=================

Uploads accepted contract code as a pinned JSON document and reads it back
through the Pinata gateway. Calls are blocking ``requests`` calls moved off
the event loop with ``asyncio.to_thread``.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from healing.errors import StorageError

PINATA_API_URL = "https://api.pinata.cloud"
DEFAULT_GATEWAY_URL = "https://gateway.pinata.cloud/ipfs"
METADATA_VERSION = "1.0.0"


class PinataStorage:
    """Content-addressed artifact store backed by Pinata"""

    def __init__(
        self,
        api_key: Optional[str],
        secret_key: Optional[str],
        gateway_url: str = DEFAULT_GATEWAY_URL,
        api_url: str = PINATA_API_URL,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
        verbose: bool = False,
    ):
        if not api_key or not secret_key:
            raise RuntimeError(
                "Pinata credentials not found. Set PINATA_API_KEY and PINATA_SECRET_KEY."
            )
        self.api_key = api_key
        self.secret_key = secret_key
        self.gateway_url = gateway_url.rstrip("/")
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.verbose = verbose

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "pinata_api_key": self.api_key,
            "pinata_secret_api_key": self.secret_key,
        }

    def build_payload(self, content: str, metadata: Dict[str, Any]) -> Dict[str, Any]:
        generation_id = metadata.get("generationId")
        return {
            "pinataContent": {
                "code": content,
                "metadata": {
                    "generationId": generation_id,
                    "description": metadata.get("description"),
                    "category": metadata.get("category"),
                    "creator": metadata.get("creator"),
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "version": METADATA_VERSION,
                },
            },
            "pinataMetadata": {
                "name": f"contract-{generation_id}",
                "keyvalues": {
                    "generationId": str(generation_id),
                    "category": str(metadata.get("category")),
                },
            },
            "pinataOptions": {"cidVersion": 1},
        }

    async def put(self, content: str, metadata: Dict[str, Any]) -> str:
        payload = self.build_payload(content, metadata)
        return await asyncio.to_thread(self._pin_json, payload)

    def _pin_json(self, payload: Dict[str, Any]) -> str:
        try:
            response = self.session.post(
                f"{self.api_url}/pinning/pinJSONToIPFS",
                json=payload,
                headers=self._headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise StorageError(f"Failed to upload to IPFS: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Failed to upload to IPFS: unexpected response {data!r:.200}")
        cid = data.get("IpfsHash")
        if not cid:
            raise StorageError("Failed to upload to IPFS: no IpfsHash in response")
        if self.verbose:
            print(f"  📦 Pinned to IPFS: {cid}")
        return cid

    async def get(self, identifier: str) -> str:
        return await asyncio.to_thread(self._fetch, identifier)

    def _fetch(self, identifier: str) -> str:
        try:
            response = self.session.get(self.gateway_link(identifier), timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise StorageError(f"Failed to retrieve from IPFS: {e}") from e
        code = data.get("code") if isinstance(data, dict) else None
        if not isinstance(code, str):
            raise StorageError(f"Artifact {identifier} has no code field")
        return code

    def gateway_link(self, identifier: str) -> str:
        return f"{self.gateway_url}/{identifier}"

    async def test_connection(self) -> bool:
        return await asyncio.to_thread(self._test_authentication)

    def _test_authentication(self) -> bool:
        try:
            response = self.session.get(
                f"{self.api_url}/data/testAuthentication",
                headers=self._headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            print(f"  ✗ Pinata connection failed: {e}")
            return False
        if self.verbose:
            print("  ✓ Pinata connection successful")
        return True
