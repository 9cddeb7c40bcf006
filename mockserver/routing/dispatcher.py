"""
Per-request orchestration.

Every inbound request walks one of two paths::

    RECEIVED -> MATCHED   -> RENDERED  -> RESPONDED
    RECEIVED -> UNMATCHED -> FORWARDED -> RESPONDED

The rule set snapshot is captured once at the start, so a concurrent hot
edit never changes the rules a request is being handled with.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from fastapi import Request, Response

from mockserver.config import get_logger
from mockserver.core.status import is_bodyless_status
from mockserver.proxy.http_client import ForwardRequest
from mockserver.routing.matcher import RequestMatcher, request_matcher
from mockserver.routing.rules import EndpointRule
from mockserver.routing.store import ConfigStore
from mockserver.routing.templates import render_template

logger = get_logger(__name__)

class RequestState(str, Enum):
    """States a request passes through."""
    RECEIVED = "received"
    MATCHED = "matched"
    RENDERED = "rendered"
    UNMATCHED = "unmatched"
    FORWARDED = "forwarded"
    RESPONDED = "responded"


@dataclass(frozen=True)
class InboundRequest:
    """The parts of an HTTP request the dispatcher needs."""
    method: str
    path: str
    raw_path: str
    query: str = ""
    headers: Sequence[Tuple[str, str]] = ()
    body: bytes = b""

    @classmethod
    async def from_request(cls, request: Request) -> "InboundRequest":
        """Capture a FastAPI request.

        ``path`` is percent-decoded and only used for logging. ``raw_path``
        keeps the original encoding: it is matched segment by segment and
        forwarded as is.
        """
        path = request.scope["path"]
        raw_path = request.scope.get("raw_path")
        return cls(
            method=request.method,
            path=path,
            raw_path=raw_path.decode("latin-1").split("?", 1)[0] if raw_path else path,
            query=request.scope.get("query_string", b"").decode("latin-1"),
            headers=tuple(request.headers.items()),
            body=await request.body(),
        )


class Forwarder(Protocol):
    """Relays an unmatched request to the default upstream."""

    async def forward(self, request: ForwardRequest) -> Response:
        ...


@dataclass
class RouteOutcome:
    """Result of dispatching one request."""
    response: Response
    states: List[RequestState] = field(default_factory=list)
    rule: Optional[EndpointRule] = None
    bindings: Dict[str, str] = field(default_factory=dict)

    @property
    def mocked(self) -> bool:
        return self.rule is not None


class MockDispatcher:
    """Serves a mocked response for matching requests and forwards the rest."""

    def __init__(
        self,
        store: ConfigStore,
        forwarder: Forwarder,
        matcher: RequestMatcher = request_matcher
    ):
        self.store = store
        self.forwarder = forwarder
        self.matcher = matcher

    async def dispatch(self, inbound: InboundRequest) -> RouteOutcome:
        """
        Handle one inbound request.

        Args:
            inbound: The captured request

        Returns:
            The outcome, including the response to send

        Raises:
            UpstreamError: Forwarding to the default upstream failed
        """
        outcome = RouteOutcome(response=Response(), states=[RequestState.RECEIVED])
        rule_set = self.store.current()

        match = self.matcher.match(rule_set, inbound.method, inbound.raw_path)
        if match is not None:
            outcome.states.append(RequestState.MATCHED)
            outcome.rule = match.rule
            outcome.bindings = match.bindings
            outcome.response = self._render(match.rule, match.bindings)
            outcome.states.append(RequestState.RENDERED)
        else:
            outcome.states.append(RequestState.UNMATCHED)
            outcome.response = await self.forwarder.forward(
                ForwardRequest(
                    method=inbound.method,
                    path=inbound.raw_path,
                    query=inbound.query,
                    headers=inbound.headers,
                    body=inbound.body,
                    default_endpoint=rule_set.default_endpoint,
                )
            )
            outcome.states.append(RequestState.FORWARDED)

        outcome.states.append(RequestState.RESPONDED)

        if outcome.mocked:
            logger.info(
                f"Mocked {inbound.method} {inbound.path} -> {outcome.response.status_code}",
                extra={"pattern": outcome.rule.path, "rule_index": outcome.rule.index}
            )
        else:
            logger.info(
                f"Forwarded {inbound.method} {inbound.path} to {rule_set.default_endpoint} "
                f"-> {outcome.response.status_code}"
            )

        return outcome

    def _render(self, rule: EndpointRule, bindings: Dict[str, str]) -> Response:
        if is_bodyless_status(rule.status):
            body = b""
        else:
            body = render_template(rule.payload_template, bindings).encode("utf-8")

        # Passed as a header rather than media_type so no charset is appended
        return Response(
            content=body,
            status_code=rule.status,
            headers={"content-type": rule.content_type}
        )
