"""FastAPI route handlers."""

from fastapi import Request, Response

from services.relay import Relay

RELAY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


async def handle_relay(request: Request) -> Response:
    """Relay the request to the Salesforce endpoint it names."""
    relay: Relay = request.app.state.relay
    return await relay.handle(request)
