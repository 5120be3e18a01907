"""Chat completions API: the gateway's OpenAI-style entry point."""

import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.core.dependencies import get_chat_gateway
from app.core.exceptions import invalid_request
from app.gateway.gateway import ChatGateway

router = APIRouter(prefix="/chat", tags=["chat"])


def _reject_constant(token: str):
    raise ValueError(f"{token} is not valid JSON")


@router.post("/completions")
async def create_chat_completion(
    request: Request,
    gateway: ChatGateway = Depends(get_chat_gateway),
):
    """Acquire a session, forward the conversation, relay the upstream result.

    The body is passed through untouched (model + messages); an empty body
    is forwarded as ``{}``. In session-only mode it is not read at all.
    """
    conversation = None
    if gateway.wants_conversation:
        conversation = {}
        raw = await request.body()
        if raw:
            try:
                # NaN/Infinity can't be re-encoded for the completion service
                conversation = json.loads(raw, parse_constant=_reject_constant)
            except ValueError:
                return invalid_request(400, "Request body must be valid JSON")

    result = await gateway.handle_chat_completion(conversation)
    return JSONResponse(status_code=result.status_code, content=result.to_dict())
