from pydantic import BaseModel, Field


class BlobCreated(BaseModel):
    id: str = Field(..., min_length=1)


class ErrorOut(BaseModel):
    error: str
