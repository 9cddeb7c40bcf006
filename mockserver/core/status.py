"""
HTTP status helpers shared by mocked and relayed responses.
"""

# Statuses whose responses never carry a body, besides 1xx
BODYLESS_STATUSES = frozenset({204, 304})


def is_bodyless_status(status_code: int) -> bool:
    """Whether a response with this status must not carry a body."""
    return status_code < 200 or status_code in BODYLESS_STATUSES
