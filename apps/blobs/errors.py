"""Blob store outcomes that callers are expected to handle.

Each error carries the HTTP status the boundary answers with and a short
message that is safe to send to clients.
"""


class BlobError(Exception):
    status_code = 500
    message = 'Blob store error'

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class BadRequestError(BlobError):
    status_code = 400
    message = 'Bad request'


class EmptyPayloadError(BadRequestError):
    message = 'Empty upload'


class PayloadTooLargeError(BlobError):
    status_code = 413
    message = 'File too large'

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__()


class BlobNotFoundError(BlobError):
    status_code = 404
    message = 'Not found'

    def __init__(self, blob_id: str):
        self.blob_id = blob_id
        super().__init__()


class InternalStoreError(BlobError):
    status_code = 500
    message = 'Blob store unavailable'
