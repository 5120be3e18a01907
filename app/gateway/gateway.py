"""Chat Gateway: orchestrator for a single chat completion request.

Flow per inbound request:
  1. Acquire a fresh session bundle (SessionAcquirer, bounded retries)
  2. On failure, relay the session result as-is
  3. Compose the completion request from the bundle (+ caller conversation)
  4. Relay the completion result as-is, success or not

Usage:
    async with httpx.AsyncClient() as http:
        gateway = ChatGateway.from_settings(http, settings)
        result = await gateway.handle_chat_completion(conversation)
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

import httpx

from app.gateway.completion import CompletionComposer
from app.gateway.session import SessionAcquirer
from app.gateway.types import ApiResponse, CompletionMode
from app.gateway.upstream import SESSION_PATH, UpstreamClient

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


class RequestState(str, Enum):
    """Lifecycle of a chat completion request through the gateway."""

    ACQUIRING_SESSION = "acquiring_session"
    SESSION_FAILED = "session_failed"  # terminal
    COMPOSING_COMPLETION = "composing_completion"
    COMPLETION_FAILED = "completion_failed"  # terminal
    COMPLETION_OK = "completion_ok"  # terminal


class ChatGateway:
    """Session-then-completion pipeline.

    Holds no per-request state; one instance serves all requests.
    """

    def __init__(self, acquirer: SessionAcquirer, composer: CompletionComposer):
        self.acquirer = acquirer
        self.composer = composer

    @property
    def wants_conversation(self) -> bool:
        """Whether the caller's body is forwarded to the completion service."""
        return self.composer.mode is CompletionMode.CONVERSATION

    @classmethod
    def from_settings(cls, http: httpx.AsyncClient, settings: Settings) -> ChatGateway:
        mode = CompletionMode(settings.completion_mode)
        upstream = UpstreamClient(
            http,
            session_url=settings.session_service_host.rstrip("/") + SESSION_PATH,
            completion_url=settings.chat_completion_service_host.rstrip("/") + mode.endpoint_path,
        )
        return cls(
            acquirer=SessionAcquirer(
                upstream,
                max_retries=settings.session_retries,
                retry_delay=settings.session_retry_delay,
            ),
            composer=CompletionComposer(upstream, mode=mode),
        )

    async def handle_chat_completion(self, conversation: Any = None) -> ApiResponse:
        """Run the full pipeline and return the result to relay to the caller."""
        logger.debug("Request state: %s", RequestState.ACQUIRING_SESSION.value)
        session_result = await self.acquirer.acquire()
        if not session_result.ok:
            logger.warning(
                "Request ended in %s: %d %s",
                RequestState.SESSION_FAILED.value,
                session_result.status_code,
                session_result.error,
            )
            return session_result

        logger.debug("Request state: %s", RequestState.COMPOSING_COMPLETION.value)
        result = await self.composer.compose_and_send(session_result.data, conversation)

        state = RequestState.COMPLETION_OK if result.ok else RequestState.COMPLETION_FAILED
        logger.info("Request ended in %s: %d", state.value, result.status_code)
        return result
