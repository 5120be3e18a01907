"""Session Acquirer: bounded retry around the session fetch.

Only transport failures (no HTTP response obtained) are retried, with a
fixed short delay between attempts. An upstream error answer is returned
as soon as it arrives.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from app.gateway.types import SESSION_ERROR_MESSAGE, ApiResponse
from app.gateway.upstream import UpstreamClient

logger = logging.getLogger(__name__)

DEFAULT_SESSION_RETRIES = 100
DEFAULT_RETRY_DELAY = 0.001  # seconds


class SessionAcquirer:
    """Acquires a fresh session bundle for a single inbound request.

    Usage:
        acquirer = SessionAcquirer(upstream)
        result = await acquirer.acquire()
        if result.ok:
            bundle = result.data
    """

    def __init__(
        self,
        upstream: UpstreamClient,
        max_retries: int = DEFAULT_SESSION_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ):
        self.upstream = upstream
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    async def acquire(self, attempt: int = 0) -> ApiResponse:
        """Fetch a session, retrying transport failures.

        Args:
            attempt: Attempt number to start from (0-based). At most
                ``max_retries - attempt`` retries follow the first call.

        Returns:
            The session service's result, or a 500 failure once retries
            are exhausted. Failed results always carry an error message.
        """
        while True:
            try:
                result = await self.upstream.fetch_session()
            except httpx.RequestError as e:
                log_extra = {"upstream_url": self.upstream.session_url, "attempt": attempt + 1}
                if attempt >= self.max_retries:
                    logger.error(
                        "Session fetch failed after %d attempts: %s",
                        attempt + 1,
                        e,
                        extra=log_extra,
                    )
                    return ApiResponse.failure().with_default_error(SESSION_ERROR_MESSAGE)

                logger.debug("Session fetch attempt %d failed (%s), retrying", attempt + 1, e, extra=log_extra)
                await asyncio.sleep(self.retry_delay)
                attempt += 1
                continue

            return result.with_default_error(SESSION_ERROR_MESSAGE)
