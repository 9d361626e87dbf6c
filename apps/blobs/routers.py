from fastapi import APIRouter

from utils.response_wrapper import response_wrapper
from .views import upload_blob, retrieve_blob, missing_blob_id

router = APIRouter()

router.post("/upload")(response_wrapper(upload_blob))
router.api_route("/bg/{blob_id}", methods=["GET", "HEAD"])(response_wrapper(retrieve_blob))
router.api_route("/bg/", methods=["GET", "HEAD"])(response_wrapper(missing_blob_id))
