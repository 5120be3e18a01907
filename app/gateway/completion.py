"""Completion Composer: builds the completion request and sends it once."""

from __future__ import annotations

import logging
from typing import Any

from app.gateway.types import COMPLETION_ERROR_MESSAGE, ApiResponse, CompletionMode
from app.gateway.upstream import UpstreamClient

logger = logging.getLogger(__name__)


def compose_request(mode: CompletionMode, session: Any, conversation: Any = None) -> Any:
    """Build the on-wire body for the completion service."""
    if mode is CompletionMode.SESSION:
        return session
    return {"session": session, "conversation": conversation}


class CompletionComposer:
    def __init__(self, upstream: UpstreamClient, mode: CompletionMode = CompletionMode.CONVERSATION):
        self.upstream = upstream
        self.mode = mode

    async def compose_and_send(self, session: Any, conversation: Any = None) -> ApiResponse:
        # Without a session the completion service can't be called
        if not session:
            logger.warning("No session bundle, skipping completion request")
            return ApiResponse.failure()

        body = compose_request(self.mode, session, conversation)
        result = await self.upstream.fetch_completion(body)
        return result.with_default_error(COMPLETION_ERROR_MESSAGE)
