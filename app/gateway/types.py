"""Core types for the session gateway."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

INTERNAL_ERROR_MESSAGE = "Internal server error"
SESSION_ERROR_MESSAGE = "Error while getting session..."
COMPLETION_ERROR_MESSAGE = "Error while getting completions..."


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class CompletionMode(str, Enum):
    """Wire shape of the request sent to the completion service."""

    CONVERSATION = "conversation"  # {"session": ..., "conversation": ...}
    SESSION = "session"  # session bundle alone

    @property
    def endpoint_path(self) -> str:
        if self is CompletionMode.CONVERSATION:
            return "/v1/generate-conversation"
        return "/v1/chat-completion"


# ---------------------------------------------------------------------------
# ApiResponse: the envelope shared by both upstreams and the gateway
# ---------------------------------------------------------------------------


class ApiResponse(BaseModel):
    """Uniform result of an upstream call.

    Upstream bodies are taken as-is, so unknown top-level keys are kept
    and relayed to the caller untouched.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    status_code: int = Field(default=500, alias="statusCode")
    status: bool = False
    error: str | None = None
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.status

    @classmethod
    def failure(cls, status_code: int = 500, error: str | None = INTERNAL_ERROR_MESSAGE) -> ApiResponse:
        return cls(status_code=status_code, status=False, error=error)

    def with_default_error(self, message: str) -> ApiResponse:
        """Fill in a context message on a failed result that has none."""
        if not self.status and not self.error:
            self.error = message
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the gateway's caller.

        Only the envelope's own optional fields are dropped when empty;
        ``None`` values inside pass-through payloads are left alone.
        """
        body = self.model_dump(by_alias=True)
        for key in ("error", "data"):
            if body.get(key) is None:
                body.pop(key, None)
        return body
