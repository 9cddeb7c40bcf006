"""
Catch-all route: serve a mocked response or forward to the default upstream.

Registered last so the admin and health routes take precedence.
"""

from fastapi import APIRouter, Depends, Request, Response

from mockserver.api.dependencies import get_dispatcher
from mockserver.routing.dispatcher import InboundRequest, MockDispatcher

router = APIRouter(tags=["proxy"])

PROXY_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS", "TRACE"]


@router.api_route(
    "/{request_path:path}",
    methods=PROXY_METHODS,
    include_in_schema=False
)
async def mock_or_forward(
    request: Request,
    request_path: str,
    dispatcher: MockDispatcher = Depends(get_dispatcher)
) -> Response:
    """Match the request against the active rules, else relay it upstream."""
    inbound = await InboundRequest.from_request(request)
    outcome = await dispatcher.dispatch(inbound)
    return outcome.response
