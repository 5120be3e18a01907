import json
from collections.abc import AsyncGenerator, Callable

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from app.core.config import settings

# Override settings for tests
settings.session_service_host = "http://session.test"
settings.chat_completion_service_host = "http://completion.test"
settings.app_port = 8000

from app.core.dependencies import get_chat_gateway  # noqa: E402
from app.gateway.completion import CompletionComposer  # noqa: E402
from app.gateway.gateway import ChatGateway  # noqa: E402
from app.gateway.session import SessionAcquirer  # noqa: E402
from app.gateway.types import CompletionMode  # noqa: E402
from app.gateway.upstream import UpstreamClient, create_http_client  # noqa: E402
from app.main import app  # noqa: E402

SESSION_URL = "http://session.test/v1/new-openai-session"
CONVERSATION_URL = "http://completion.test/v1/generate-conversation"
CHAT_COMPLETION_URL = "http://completion.test/v1/chat-completion"

SESSION_BUNDLE = {
    "deviceId": "device-1",
    "persona": "chatgpt-freeaccount",
    "arkose": {"required": False, "dx": None},
    "turnstile": {"required": False},
    "proofofwork": {"required": True, "seed": "0.42", "difficulty": "0fffff"},
    "token": "tok-123",
}

CONVERSATION = {
    "model": "gpt-3.5-turbo",
    "messages": [
        {"role": "system", "content": "You are a helpful assistant."},
        {"role": "user", "content": "Hello"},
    ],
}


class FakeUpstream:
    """Both upstream services behind one httpx.MockTransport.

    ``session_handler`` / ``completion_handler`` may return an
    httpx.Response or raise an httpx.RequestError. By default the session
    service hands out SESSION_BUNDLE and the completion service echoes
    the request body.
    """

    def __init__(self):
        self.session_calls = 0
        self.completion_calls = 0
        self.completion_bodies: list = []
        self.session_handler: Callable[[httpx.Request], httpx.Response] = self._session_ok
        self.completion_handler: Callable[[httpx.Request], httpx.Response] = self._echo

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "session.test":
            self.session_calls += 1
            return self.session_handler(request)
        self.completion_calls += 1
        self.completion_bodies.append(json.loads(request.content))
        return self.completion_handler(request)

    @staticmethod
    def _session_ok(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"statusCode": 200, "status": True, "data": SESSION_BUNDLE})

    @staticmethod
    def _echo(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=request.content, headers={"Content-Type": "application/json"})


@pytest.fixture
def fake_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
async def http(fake_upstream: FakeUpstream) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with create_http_client(transport=httpx.MockTransport(fake_upstream.handler)) as c:
        yield c


@pytest.fixture
def upstream(http: httpx.AsyncClient) -> UpstreamClient:
    return UpstreamClient(http, session_url=SESSION_URL, completion_url=CONVERSATION_URL)


@pytest.fixture
def make_gateway(http: httpx.AsyncClient) -> Callable[..., ChatGateway]:
    def _make(
        mode: CompletionMode = CompletionMode.CONVERSATION,
        max_retries: int = 100,
        retry_delay: float = 0.0,
    ) -> ChatGateway:
        completion_url = CONVERSATION_URL if mode is CompletionMode.CONVERSATION else CHAT_COMPLETION_URL
        upstream = UpstreamClient(http, session_url=SESSION_URL, completion_url=completion_url)
        return ChatGateway(
            acquirer=SessionAcquirer(upstream, max_retries=max_retries, retry_delay=retry_delay),
            composer=CompletionComposer(upstream, mode=mode),
        )

    return _make


@pytest.fixture
def gateway(make_gateway: Callable[..., ChatGateway]) -> ChatGateway:
    return make_gateway()


@pytest.fixture
async def client(gateway: ChatGateway) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_chat_gateway] = lambda: gateway
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.pop(get_chat_gateway, None)
