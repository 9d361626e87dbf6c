import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import BLOB_BACKEND, CORS_ALLOW_ORIGIN, LOG_LEVEL
from config.middleware import CorsMiddleware
from config.db import init_db, close_db
from apps.blobs.routers import router as blobs_router
from utils.response_wrapper import http_error_handler

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("starting blob gateway with %s backend", BLOB_BACKEND)
    # only the db backend needs a connection pool
    if BLOB_BACKEND.lower() != "db":
        yield
        return
    await init_db()
    try:
        yield
    finally:
        await close_db()


app = FastAPI(title="Blob Gateway", version="0.1.0", lifespan=lifespan)
app.add_middleware(CorsMiddleware, allow_origin=CORS_ALLOW_ORIGIN)
app.include_router(blobs_router)
app.add_exception_handler(StarletteHTTPException, http_error_handler)


@app.get("/health")
async def health():
    return {"status": "ok", "backend": BLOB_BACKEND.lower()}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000)
