"""Root route: plain-text liveness banner, and OPTIONS on any path."""

from fastapi import APIRouter, Response
from fastapi.responses import PlainTextResponse

WELCOME_TEXT = "Welcome OpenAI Gateway API - The service running correctly"

web_router = APIRouter(tags=["web"])


@web_router.get("/", response_class=PlainTextResponse)
async def welcome():
    return WELCOME_TEXT


# CORSMiddleware answers real preflights before they get here
@web_router.options("/{path:path}", include_in_schema=False)
async def options_any(path: str):
    return Response(status_code=200)
