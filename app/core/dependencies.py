from fastapi import Request

from app.gateway.gateway import ChatGateway


def get_chat_gateway(request: Request) -> ChatGateway:
    """Return the process-wide gateway created in the app lifespan."""
    return request.app.state.gateway
