"""
Webhook record schemas — what gets stored per request and what the list API returns.
"""
import base64
import binascii
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationError

BODY_ENCODING_TEXT = "utf-8"
BODY_ENCODING_BASE64 = "base64"


class SerializationError(Exception):
    """Raised when a record or config cannot be encoded or decoded."""
    pass


def encode_body(raw: bytes) -> tuple[str, str]:
    """
    Bodies that are valid UTF-8 are kept as text, anything else is base64.
    Returns (body, encoding).
    """
    try:
        return raw.decode("utf-8"), BODY_ENCODING_TEXT
    except UnicodeDecodeError:
        return base64.b64encode(raw).decode("ascii"), BODY_ENCODING_BASE64


class WebhookRecord(BaseModel):
    """A single received webhook. Immutable once created."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Record key, webhook:<nanoseconds>")
    timestamp: datetime
    headers: dict[str, list[str]] = Field(default_factory=dict)
    body: str = Field(default="", description="Raw request body, never parsed")
    body_encoding: str = Field(
        default=BODY_ENCODING_TEXT,
        alias="bodyEncoding",
        description="utf-8 when body is the text itself, base64 for non-UTF-8 bytes",
    )
    method: str
    url: str = Field(..., description="Request path plus query string")

    def raw_body(self) -> bytes:
        """The exact bytes that were received."""
        if self.body_encoding == BODY_ENCODING_BASE64:
            try:
                return base64.b64decode(self.body, validate=True)
            except binascii.Error as e:
                raise SerializationError(f"Corrupt base64 body in {self.id}") from e
        return self.body.encode("utf-8")

    def to_json(self) -> str:
        try:
            return self.model_dump_json(by_alias=True)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot encode webhook {self.id}: {e}") from e

    @classmethod
    def from_json(cls, raw: str) -> "WebhookRecord":
        try:
            return cls.model_validate_json(raw)
        except ValidationError as e:
            raise SerializationError(f"Cannot decode webhook record: {e.error_count()} errors") from e


class WebhookListResponse(BaseModel):
    webhooks: list[WebhookRecord]
    count: int
    total: int = Field(..., description="Index entries considered before filtering")


class ClearResponse(BaseModel):
    status: str = "success"
    message: str
    count: int
