"""Pydantic schemas for the assets API wire format."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class ApiMessage(BaseModel):
    """Error or informational entry in an API envelope."""
    code: Optional[int] = None
    message: str = ""


class ApiEnvelope(BaseModel):
    """Envelope every API response is wrapped in."""
    success: bool
    errors: List[ApiMessage] = Field(default_factory=list)
    messages: List[Any] = Field(default_factory=list)
    result: Any = None


class UploadTokenResult(BaseModel):
    """Result of the upload-token endpoint."""
    jwt: str


class FingerprintsRequest(BaseModel):
    """Request body for check-missing and upsert-hashes."""
    hashes: List[str]


class UploadPayloadMetadata(BaseModel):
    contentType: str


class UploadPayloadFile(BaseModel):
    """One file inside a batch upload request."""
    key: str
    value: str
    metadata: UploadPayloadMetadata
    base64: bool = True
