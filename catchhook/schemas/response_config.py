"""
Synthetic response descriptor — what POST /webhook answers with.
JSON field names follow the public API (statusCode, headers, body, delay).
"""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from catchhook.schemas.webhook import SerializationError


class ResponseConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status_code: int = Field(200, alias="statusCode")
    headers: dict[str, str] = Field(default_factory=dict)
    body: str = Field(default="", description="Empty means the built-in success body")
    delay: int = Field(default=0, description="Milliseconds to wait before responding")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # An explicit null behaves like an absent field
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    def to_json(self) -> str:
        try:
            return self.model_dump_json(by_alias=True)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot encode response config: {e}") from e


class ConfigUpdateResponse(BaseModel):
    status: str = "success"
    message: str = "Response configuration updated"
