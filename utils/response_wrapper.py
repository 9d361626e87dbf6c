import functools
import logging

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import Response

from apps.blobs.errors import BlobError, BlobNotFoundError
from apps.blobs.schema import ErrorOut

logger = logging.getLogger(__name__)


def error_response(exc: BlobError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=ErrorOut(error=exc.message).model_dump())


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors (unknown path, wrong method) in the same error shape as blob errors."""
    message = BlobNotFoundError.message if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content=ErrorOut(error=message).model_dump(),
                        headers=getattr(exc, "headers", None))


def response_wrapper(view):
    """Wrap a view so blob errors become JSON error bodies.

    Responses built by the view (raw blob bytes) pass through untouched;
    anything else is encoded as JSON.
    """

    @functools.wraps(view)
    async def wrapper(*args, **kwargs):
        try:
            result = await view(*args, **kwargs)
        except BlobError as exc:
            logger.debug('%s: %s', type(exc).__name__, exc.message)
            return error_response(exc)
        if isinstance(result, Response):
            return result
        return JSONResponse(content=jsonable_encoder(result))

    return wrapper
