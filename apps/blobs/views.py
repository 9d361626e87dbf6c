from fastapi import Depends, Request, Response

from config.settings import CACHE_MAX_AGE
from apps.blobs.errors import BadRequestError, PayloadTooLargeError
from apps.blobs.schema import BlobCreated
from apps.blobs.services import BlobStore, get_blob_store


def _declared_length(request: Request) -> int | None:
    value = request.headers.get('content-length')
    if value is None or not value.isdigit():
        return None
    return int(value)


async def upload_blob(request: Request, store: BlobStore = Depends(get_blob_store)):
    # refuse before buffering the body when the client already told us it is too big
    declared = _declared_length(request)
    if declared is not None and declared > store.config.max_bytes:
        raise PayloadTooLargeError(declared, store.config.max_bytes)

    data = await request.body()
    blob_id = await store.put(data)
    return BlobCreated(id=blob_id)


async def retrieve_blob(blob_id: str, store: BlobStore = Depends(get_blob_store)):
    blob = await store.get(blob_id)
    return Response(
        content=blob.data,
        media_type=blob.mime,
        headers={'Cache-Control': f'public, max-age={CACHE_MAX_AGE}'},
    )


async def missing_blob_id():
    raise BadRequestError('Missing ID')
