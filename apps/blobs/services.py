import logging
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable

from config.settings import MAX_UPLOAD_BYTES, BLOB_TTL_SECONDS, ALLOW_EMPTY_UPLOADS
from apps.blobs.backends import BlobBackend, pick_backend
from apps.blobs.errors import BadRequestError, BlobNotFoundError, EmptyPayloadError, \
    InternalStoreError, PayloadTooLargeError
from apps.blobs.sniffer import DEFAULT_SIGNATURES, OCTET_STREAM, sniff_mime

logger = logging.getLogger(__name__)

MIME_METADATA_KEY = 'mime'


@dataclass(frozen=True)
class BlobConfig:
    max_bytes: int = 5 * 1024 * 1024
    ttl_seconds: int = 60 * 60 * 24 * 7
    signatures: tuple[tuple[bytes, str], ...] = DEFAULT_SIGNATURES
    fallback_mime: str = OCTET_STREAM
    allow_empty: bool = False

    @classmethod
    def from_settings(cls) -> 'BlobConfig':
        return cls(max_bytes=MAX_UPLOAD_BYTES, ttl_seconds=BLOB_TTL_SECONDS, allow_empty=ALLOW_EMPTY_UPLOADS)


@dataclass(frozen=True)
class Blob:
    id: str
    data: bytes
    mime: str


def new_blob_id() -> str:
    return str(uuid.uuid4())


class BlobStore:
    """Write and read blobs through a single backend.

    Writes sniff the payload's MIME type, store it as metadata next to the
    bytes and ask the backend to expire the entry after ``ttl_seconds``.
    Reads return the MIME type recorded at write time; nothing is re-sniffed.
    """

    def __init__(
        self,
        backend: BlobBackend,
        config: BlobConfig | None = None,
        id_factory: Callable[[], str] = new_blob_id,
    ):
        self.backend = backend
        self.config = config or BlobConfig()
        self.id_factory = id_factory

    async def put(self, data: bytes) -> str:
        size = len(data)
        if size > self.config.max_bytes:
            logger.warning('rejected upload of %d bytes (limit %d)', size, self.config.max_bytes)
            raise PayloadTooLargeError(size, self.config.max_bytes)
        if size == 0 and not self.config.allow_empty:
            raise EmptyPayloadError()

        mime = sniff_mime(data, self.config.signatures, fallback=self.config.fallback_mime)
        blob_id = self.id_factory()
        try:
            await self.backend.put(
                blob_id,
                data,
                metadata={MIME_METADATA_KEY: mime},
                ttl_seconds=self.config.ttl_seconds,
            )
        except Exception as e:
            logger.exception('failed to store blob %s', blob_id)
            raise InternalStoreError(str(e) or InternalStoreError.message) from e

        logger.info('stored blob %s (%s, %d bytes)', blob_id, mime, size)
        return blob_id

    async def get(self, blob_id: str) -> Blob:
        if not blob_id:
            raise BadRequestError('Missing ID')

        try:
            stored = await self.backend.get_with_metadata(blob_id)
        except Exception as e:
            logger.exception('failed to read blob %s', blob_id)
            raise InternalStoreError(str(e) or InternalStoreError.message) from e
        if stored is None:
            raise BlobNotFoundError(blob_id)

        mime = (stored.metadata or {}).get(MIME_METADATA_KEY)
        if not isinstance(mime, str) or not mime:
            mime = self.config.fallback_mime
        return Blob(id=blob_id, data=stored.value, mime=mime)


@lru_cache
def get_blob_store() -> BlobStore:
    return BlobStore(pick_backend(), BlobConfig.from_settings())
