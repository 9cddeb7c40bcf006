"""
Upstream forwarding package.

Relays requests that match no endpoint rule to the default upstream.
"""

from .http_client import ForwardRequest, UpstreamHTTPClient

__all__ = [
    "ForwardRequest",
    "UpstreamHTTPClient",
]
