"""Upstream Client: the two outbound HTTP calls of the gateway.

  - Session service: GET  <SESSION_SERVICE_HOST>/v1/new-openai-session
  - Completion service: POST <CHAT_COMPLETION_SERVICE_HOST>/v1/generate-conversation
    (or /v1/chat-completion in session-only mode)

Every answer is normalized into an ApiResponse:
  - 2xx: the upstream body is the envelope, statusCode set from HTTP
  - non-2xx: status=False, statusCode copied, error from body["message"]
  - no response at all: 500 "Internal server error"
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from app.gateway.types import ApiResponse

logger = logging.getLogger(__name__)

SESSION_PATH = "/v1/new-openai-session"


def create_http_client(
    timeout: float = 5.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build the outbound client shared by all requests.

    Upstream hosts are opaque, so redirects (http → https, moved paths)
    are followed rather than relayed as failures.
    """
    return httpx.AsyncClient(timeout=timeout, follow_redirects=True, transport=transport)


class UpstreamClient:
    """Issues the session and completion calls over a shared httpx client.

    The httpx.AsyncClient is owned by the caller (the app lifespan in
    production, a MockTransport-backed client in tests).
    """

    def __init__(self, http: httpx.AsyncClient, session_url: str, completion_url: str):
        self.http = http
        self.session_url = session_url
        self.completion_url = completion_url

    async def fetch_session(self) -> ApiResponse:
        """Fetch a new session bundle.

        Raises:
            httpx.RequestError: the call produced no HTTP response
                (DNS failure, connection reset, timeout). The session
                acquirer retries on these.
        """
        resp = await self.http.get(self.session_url)
        return self._to_api_response(resp)

    async def fetch_completion(self, body: Any) -> ApiResponse:
        """Send the composed request to the completion service (single attempt)."""
        if not body:
            return ApiResponse.failure()

        try:
            resp = await self.http.post(self.completion_url, json=body)
        except httpx.RequestError as e:
            logger.warning(
                "Completion request to %s failed: %s",
                self.completion_url,
                e,
                extra={"upstream_url": self.completion_url},
            )
            return ApiResponse.failure()

        return self._to_api_response(resp)

    @staticmethod
    def _to_api_response(resp: httpx.Response) -> ApiResponse:
        body = _parse_body(resp)

        if not resp.is_success:
            logger.error(
                "Error: Status Code %d %s",
                resp.status_code,
                body,
                extra={"upstream_url": str(resp.request.url), "upstream_status": resp.status_code},
            )
            message = body.get("message") if isinstance(body, dict) else None
            return ApiResponse.failure(
                status_code=resp.status_code,
                error=message if isinstance(message, str) else None,
            )

        if isinstance(body, dict):
            envelope = {**body, "statusCode": resp.status_code}
            envelope.setdefault("status", True)
            try:
                return ApiResponse.model_validate(envelope)
            except ValidationError:
                logger.warning("Upstream body from %s is not an envelope, wrapping as data", resp.url)

        return ApiResponse(status_code=resp.status_code, status=True, data=body)


def _parse_body(resp: httpx.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text
