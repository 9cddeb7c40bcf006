"""
Exception hierarchy for the mock server.

Compile errors are raised while turning a configuration document into a
rule set. Upstream errors are raised by the forwarding client and mapped to
gateway responses by the application's exception handlers.
"""

from typing import Any, Dict, List, Optional


class MockServerError(Exception):
    """Base class for all mock server errors."""


class CompileError(MockServerError):
    """A declared path pattern could not be compiled."""

    code = "compile_error"

    def __init__(self, pattern: str, message: str):
        self.pattern = pattern
        self.message = message
        super().__init__(f"{message} in pattern '{pattern}'")


class DuplicateVariableError(CompileError):
    """A variable name appears more than once in the same pattern."""

    code = "duplicate_variable"

    def __init__(self, pattern: str, variable: str):
        self.variable = variable
        super().__init__(pattern, f"Duplicate variable '{variable}'")


class MalformedVariableError(CompileError):
    """A segment has unbalanced, nested or empty braces."""

    code = "malformed_variable"

    def __init__(self, pattern: str, segment: str):
        self.segment = segment
        super().__init__(pattern, f"Malformed variable segment '{segment}'")


class EmptySegmentError(CompileError):
    """An empty segment appears between two slashes."""

    code = "empty_segment"

    def __init__(self, pattern: str, position: int):
        self.position = position
        super().__init__(pattern, f"Empty segment at position {position}")


class RuleSetCompileError(MockServerError):
    """One endpoint of a configuration document failed to compile."""

    def __init__(self, index: int, method: str, path: str, cause: CompileError):
        self.index = index
        self.method = method
        self.path = path
        self.cause = cause
        super().__init__(f"Endpoint #{index} ({method} {path}): {cause}")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for an admin error response."""
        return {
            "detail": str(self),
            "endpoint_index": self.index,
            "method": self.method,
            "path": self.path,
            "error": self.cause.code,
        }


class SettingsDocumentError(MockServerError):
    """The configuration document could not be read, parsed or validated."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class SettingsWriteError(MockServerError):
    """An accepted configuration document could not be written back to disk."""


class UpstreamError(MockServerError):
    """Forwarding to the default upstream failed."""

    def __init__(self, url: str, message: str):
        self.url = url
        self.message = message
        super().__init__(message)


class UpstreamUnavailable(UpstreamError):
    """The upstream could not be reached."""


class UpstreamTimeout(UpstreamError):
    """The upstream did not answer within the configured timeout."""
