"""API request/response models."""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


ROLES = ("user", "assistant", "system")


class Message(BaseModel):
    """One client-supplied conversation message."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    role: str = Field(default="user", description="user, assistant or system")
    content: str = Field(default="", description="Message text")

    @field_validator("role", mode="before")
    @classmethod
    def coerce_role(cls, value: Any) -> str:
        role = str(value).strip().lower() if value is not None else ""
        return role if role in ROLES else "user"

    @field_validator("content", mode="before")
    @classmethod
    def coerce_content(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False, default=str)


class ChatRequest(BaseModel):
    """Request body of the search endpoints."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    messages: list[Message] = Field(min_length=1, description="Conversation so far")
    model: str | None = Field(default=None, description="Model id, e.g. t3-4o")
    group: str | None = Field(default=None, description="Route key")
    id: str | None = Field(default=None, description="Chat identifier")


class ErrorResponse(BaseModel):
    """Error body returned before streaming starts."""

    error: str
    details: str | None = None


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    version: str
