"""
HTTP intercepting mock server.

Serves templated responses for declared endpoints and forwards every other
request to a default upstream.
"""

__version__ = "0.1.0"
