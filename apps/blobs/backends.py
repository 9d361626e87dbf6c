import json
import logging
import os
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Protocol
from urllib.parse import quote

import httpx

from config.settings import BLOB_BACKEND, LOCAL_STORAGE_PATH, KV_API_BASE, KV_ACCOUNT_ID, KV_NAMESPACE_ID, \
    KV_API_TOKEN
from apps.blobs.models import BlobRecord

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class StoredObject:
    value: bytes
    metadata: dict = field(default_factory=dict)


class BlobBackend(Protocol):
    async def put(self, key: str, data: bytes, *, metadata: dict, ttl_seconds: int) -> None:
        ...

    async def get_with_metadata(self, key: str) -> Optional[StoredObject]:
        ...


def _expires_at(clock: Clock, ttl_seconds: int) -> float | None:
    if not ttl_seconds:
        return None
    return clock() + ttl_seconds


class MemoryBackend:
    """Dict-backed store for development and tests. Expired keys are dropped on read."""

    def __init__(self, clock: Clock = time.time):
        self._clock = clock
        self._entries: dict[str, tuple[bytes, dict, float | None]] = {}

    async def put(self, key: str, data: bytes, *, metadata: dict, ttl_seconds: int) -> None:
        self._entries[key] = (bytes(data), dict(metadata), _expires_at(self._clock, ttl_seconds))

    async def get_with_metadata(self, key: str) -> Optional[StoredObject]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        data, metadata, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._entries[key]
            return None
        return StoredObject(value=data, metadata=dict(metadata))

    def __len__(self) -> int:
        return len(self._entries)


class LocalBackend:
    """Store each blob as ``<key>.blob`` with a ``<key>.meta.json`` sidecar.

    The sidecar holds the metadata map and the expiry deadline. It is written
    before the payload, and a key only exists once its payload file does, so a
    failed write never leaves a readable blob behind.
    """

    PAYLOAD_SUFFIX = '.blob'
    META_SUFFIX = '.meta.json'

    def __init__(self, base_path: str, clock: Clock = time.time):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._clock = clock

    def _resolve(self, key: str, suffix: str) -> Optional[Path]:
        root = self.base_path.resolve()
        try:
            candidate = (self.base_path / f'{key}{suffix}').resolve()
            candidate.relative_to(root)
        except (OSError, ValueError):
            # outside the root, too long for the filesystem, or an embedded NUL
            return None
        return candidate

    @staticmethod
    def _is_file(path: Path) -> bool:
        try:
            return path.is_file()
        except OSError:
            return False

    def _write_atomic(self, path: Path, data: bytes) -> None:
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix='.tmp-')
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def _remove(self, key: str) -> None:
        for suffix in (self.PAYLOAD_SUFFIX, self.META_SUFFIX):
            path = self._resolve(key, suffix)
            if path is not None:
                path.unlink(missing_ok=True)

    async def put(self, key: str, data: bytes, *, metadata: dict, ttl_seconds: int) -> None:
        payload_path = self._resolve(key, self.PAYLOAD_SUFFIX)
        meta_path = self._resolve(key, self.META_SUFFIX)
        if payload_path is None or meta_path is None:
            raise ValueError(f'Blob key {key!r} is not a valid storage key')
        sidecar = {'metadata': metadata, 'expires_at': _expires_at(self._clock, ttl_seconds)}
        self._write_atomic(meta_path, json.dumps(sidecar).encode('utf-8'))
        try:
            self._write_atomic(payload_path, bytes(data))
        except BaseException:
            meta_path.unlink(missing_ok=True)
            raise

    async def get_with_metadata(self, key: str) -> Optional[StoredObject]:
        payload_path = self._resolve(key, self.PAYLOAD_SUFFIX)
        meta_path = self._resolve(key, self.META_SUFFIX)
        if payload_path is None or meta_path is None or not self._is_file(payload_path):
            return None

        sidecar = {}
        try:
            sidecar = json.loads(meta_path.read_text(encoding='utf-8'))
        except FileNotFoundError:
            logger.warning('blob %s has no metadata sidecar', key)
        except json.JSONDecodeError:
            logger.warning('blob %s has an unreadable metadata sidecar', key)
        if not isinstance(sidecar, dict):
            sidecar = {}

        expires_at = sidecar.get('expires_at')
        if isinstance(expires_at, (int, float)) and expires_at <= self._clock():
            self._remove(key)
            return None

        try:
            data = payload_path.read_bytes()
        except FileNotFoundError:
            return None
        metadata = sidecar.get('metadata')
        return StoredObject(value=data, metadata=metadata if isinstance(metadata, dict) else {})


class DBBackend:
    """Store blobs in the BlobRecord table; payload, metadata and expiry share one row."""

    def __init__(self, clock: Clock = time.time):
        self._clock = clock

    async def put(self, key: str, data: bytes, *, metadata: dict, ttl_seconds: int) -> None:
        expires_at = _expires_at(self._clock, ttl_seconds)
        await BlobRecord.create(
            id=key,
            data=bytes(data),
            metadata=dict(metadata),
            expires_at=int(expires_at) if expires_at is not None else None,
        )

    async def get_with_metadata(self, key: str) -> Optional[StoredObject]:
        row = await BlobRecord.filter(id=key).first()
        if not row:
            return None
        if row.expires_at is not None and row.expires_at <= self._clock():
            await row.delete()
            return None
        metadata = row.metadata if isinstance(row.metadata, dict) else {}
        return StoredObject(value=bytes(row.data), metadata=metadata)


class KVHTTPBackend:
    """Workers KV namespace reached through the Cloudflare REST API.

    Expiry is enforced by KV itself through ``expiration_ttl``; an expired key
    answers 404 like one that never existed.
    """

    def __init__(
        self,
        account_id: str,
        namespace_id: str,
        api_token: str,
        base_url: str = 'https://api.cloudflare.com/client/v4',
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip('/')
        self.account_id = account_id
        self.namespace_id = namespace_id
        self.api_token = api_token
        self.timeout = timeout

    def _url(self, resource: str, key: str) -> str:
        """
        resource is either:
            - values:    raw payload
            - metadata:  JSON metadata attached at write time
        """
        return (
            f"{self.base_url}/accounts/{self.account_id}"
            f"/storage/kv/namespaces/{self.namespace_id}/{resource}/{quote(key, safe='')}"
        )

    def _auth_headers(self) -> dict:
        if not self.api_token:
            return {}
        return {"Authorization": f"Bearer {self.api_token}"}

    async def put(self, key: str, data: bytes, *, metadata: dict, ttl_seconds: int) -> None:
        params = {"expiration_ttl": ttl_seconds} if ttl_seconds else None

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.put(
                self._url("values", key),
                params=params,
                data={"metadata": json.dumps(metadata)},
                files={"value": (key, bytes(data), "application/octet-stream")},
                headers=self._auth_headers(),
            )
            if resp.status_code not in (200, 201):
                raise RuntimeError(f"KV PUT failed: {resp.status_code} {resp.text}")

    async def get_with_metadata(self, key: str) -> Optional[StoredObject]:
        headers = self._auth_headers()

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(self._url("values", key), headers=headers)
            if resp.status_code == 404:
                return None
            if resp.status_code != 200:
                raise RuntimeError(f"KV GET failed: {resp.status_code} {resp.text}")
            value = resp.content

            meta_resp = await client.get(self._url("metadata", key), headers=headers)

        metadata = {}
        if meta_resp.status_code == 200:
            result = meta_resp.json().get("result")
            if isinstance(result, dict):
                metadata = result
        elif meta_resp.status_code != 404:
            raise RuntimeError(f"KV metadata GET failed: {meta_resp.status_code} {meta_resp.text}")
        return StoredObject(value=value, metadata=metadata)


def pick_backend() -> BlobBackend:
    """Pick the backend implementation named by BLOB_BACKEND.

    Unknown names fall back to LOCAL.
    """
    backend_type = BLOB_BACKEND.lower()
    if backend_type == 'memory':
        return MemoryBackend()
    if backend_type == 'db':
        return DBBackend()
    if backend_type == 'kv':
        return KVHTTPBackend(account_id=KV_ACCOUNT_ID, namespace_id=KV_NAMESPACE_ID,
                             api_token=KV_API_TOKEN, base_url=KV_API_BASE)
    if backend_type != 'local':
        logger.warning('unknown BLOB_BACKEND %r, using local storage', BLOB_BACKEND)
    return LocalBackend(LOCAL_STORAGE_PATH)
