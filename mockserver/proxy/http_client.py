"""
HTTP client for the default upstream.

Requests that match no endpoint rule are forwarded here and the upstream's
response is relayed back unmodified: same status, same body bytes, same
headers apart from hop-by-hop ones.
"""

import time
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import httpx
from fastapi import Response

from mockserver.config import StructuredLogger, UpstreamConfig
from mockserver.core.exceptions import UpstreamTimeout, UpstreamUnavailable
from mockserver.core.status import is_bodyless_status

logger = StructuredLogger(__name__)

HOP_BY_HOP_HEADERS = frozenset({
    'connection', 'keep-alive', 'proxy-authenticate',
    'proxy-authorization', 'te', 'trailers', 'transfer-encoding', 'upgrade'
})

# Not forwarded upstream: httpx sets Host from the target URL and
# recomputes Content-Length from the body.
_REQUEST_EXCLUDED_HEADERS = HOP_BY_HOP_HEADERS | {'host', 'content-length'}

_RESPONSE_EXCLUDED_HEADERS = HOP_BY_HOP_HEADERS | {'content-length'}


@dataclass(frozen=True)
class ForwardRequest:
    """Everything needed to replay an unmatched request upstream."""
    method: str
    path: str
    query: str
    headers: Sequence[Tuple[str, str]]
    body: bytes
    default_endpoint: str

    @property
    def url(self) -> str:
        url = f"{self.default_endpoint.rstrip('/')}{self.path}"
        if self.query:
            url += f"?{self.query}"
        return url


class UpstreamHTTPClient:
    """Forwards requests to the default upstream."""

    def __init__(
        self,
        config: Optional[UpstreamConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the HTTP client.

        Args:
            config: Upstream timeouts and TLS settings
            transport: Optional httpx transport, replaces the network layer
        """
        self.config = config or UpstreamConfig()
        self._transport = transport

    async def forward(self, request: ForwardRequest) -> Response:
        """
        Forward a request to the default upstream and relay its response.

        Args:
            request: The unmatched request and its target

        Returns:
            The upstream response, ready to send to the client

        Raises:
            UpstreamTimeout: The upstream did not answer in time
            UpstreamUnavailable: The upstream could not be reached
        """
        url = request.url
        headers = self._prepare_headers(request.headers)
        start_time = time.time()

        try:
            async with httpx.AsyncClient(
                timeout=self._get_timeout_config(),
                verify=self.config.verify_tls,
                transport=self._transport
            ) as client:
                upstream_request = client.build_request(
                    method=request.method,
                    url=url,
                    headers=headers,
                    content=request.body
                )
                self._drop_client_defaults(client, upstream_request, headers)
                upstream_response = await client.send(upstream_request, stream=True)
                try:
                    content = await self._read_raw(upstream_response)
                finally:
                    await upstream_response.aclose()

        except httpx.TimeoutException as e:
            self._log_failure(request, url, start_time, f"timeout: {e}")
            raise UpstreamTimeout(url, "Upstream request timed out") from e
        except httpx.TransportError as e:
            self._log_failure(request, url, start_time, str(e))
            raise UpstreamUnavailable(url, f"Failed to connect to upstream: {e}") from e

        logger.log_upstream_call(
            url=url,
            method=request.method,
            status_code=upstream_response.status_code,
            response_time=(time.time() - start_time) * 1000,
            success=True
        )

        return self._prepare_response(upstream_response, content, request.method)

    async def _read_raw(self, upstream_response: httpx.Response) -> bytes:
        """Read the body without content decoding so it is relayed as sent."""
        if upstream_response.is_stream_consumed:
            # Buffering transports such as httpx.MockTransport hand the body over already read
            return upstream_response.content
        return b"".join([chunk async for chunk in upstream_response.aiter_raw()])

    def _prepare_headers(self, headers: Sequence[Tuple[str, str]]) -> List[Tuple[str, str]]:
        """
        Prepare headers for the upstream request.

        Args:
            headers: Original request headers, duplicates preserved

        Returns:
            Header pairs to send upstream
        """
        return [
            (name, value) for name, value in headers
            if name.lower() not in _REQUEST_EXCLUDED_HEADERS
        ]

    def _drop_client_defaults(
        self,
        client: httpx.AsyncClient,
        upstream_request: httpx.Request,
        headers: Sequence[Tuple[str, str]]
    ):
        """Remove the default headers httpx merged in that the caller did not send."""
        sent = {name.lower() for name, _ in headers}
        for name in client.headers.keys():
            if name.lower() not in sent and name in upstream_request.headers:
                del upstream_request.headers[name]

    def _get_timeout_config(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.config.connect_timeout,
            read=self.config.read_timeout,
            write=self.config.write_timeout,
            pool=self.config.pool_timeout
        )

    def _prepare_response(
        self,
        upstream_response: httpx.Response,
        content: bytes,
        method: str
    ) -> Response:
        """
        Build the client response from the upstream one.

        Args:
            upstream_response: Response from the upstream
            content: Raw response body
            method: Method of the forwarded request

        Returns:
            FastAPI Response relaying status, headers and body
        """
        status_code = upstream_response.status_code
        # Bodyless relays keep the upstream Content-Length, e.g. for HEAD
        recompute_length = method.upper() != "HEAD" and not is_bodyless_status(status_code)
        excluded = _RESPONSE_EXCLUDED_HEADERS if recompute_length else HOP_BY_HOP_HEADERS

        # ASGI expects lower-cased header names
        raw_headers = [
            (name.lower(), value) for name, value in upstream_response.headers.raw
            if name.decode("latin-1").lower() not in excluded
        ]
        if recompute_length:
            raw_headers.append((b"content-length", str(len(content)).encode("latin-1")))

        response = Response(content=content, status_code=status_code)
        response.raw_headers = raw_headers
        return response

    def _log_failure(self, request: ForwardRequest, url: str, start_time: float, error: str):
        logger.log_upstream_call(
            url=url,
            method=request.method,
            status_code=0,
            response_time=(time.time() - start_time) * 1000,
            success=False,
            error=error
        )
