"""
Path pattern compilation.

A declared path such as ``/api/v1/message/{name}`` is split on ``/`` into
segments. A segment wrapped in braces is a named variable; every other
segment is literal text that must match exactly. Patterns have a fixed
segment count: there are no wildcard or greedy segments.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import unquote

from mockserver.core.exceptions import (
    CompileError,
    DuplicateVariableError,
    EmptySegmentError,
    MalformedVariableError,
)


@dataclass(frozen=True)
class Literal:
    """A segment that must equal the request segment exactly."""
    text: str


@dataclass(frozen=True)
class Variable:
    """A segment that binds the request segment to ``name``."""
    name: str


Segment = Union[Literal, Variable]


def split_path(path: str) -> List[str]:
    """Split a path into its slash-separated segments.

    The leading slash produces an empty first segment, so ``/a/b`` gives
    ``["", "a", "b"]`` and a trailing slash adds an empty last segment.
    """
    return path.split("/")


def split_request_path(raw_path: str) -> List[str]:
    """Split a raw request path, then percent-decode each segment.

    Splitting first keeps an encoded slash (``%2F``) inside its segment.
    """
    return [unquote(segment) for segment in split_path(raw_path)]


@dataclass(frozen=True)
class PathPattern:
    """A compiled path pattern."""
    source: str
    segments: Tuple[Segment, ...]

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def variable_names(self) -> Tuple[str, ...]:
        return tuple(s.name for s in self.segments if isinstance(s, Variable))

    @property
    def literal_count(self) -> int:
        """Number of literal segments; higher means more specific."""
        return sum(1 for s in self.segments if isinstance(s, Literal))

    @property
    def shape(self) -> Tuple[Optional[str], ...]:
        """The pattern with variable names erased.

        Two patterns with the same shape match exactly the same paths.
        """
        return tuple(s.text if isinstance(s, Literal) else None for s in self.segments)

    def bind(self, request_segments: Sequence[str]) -> Optional[Dict[str, str]]:
        """Match already-split request segments against this pattern.

        Args:
            request_segments: Result of :func:`split_request_path` on the request path

        Returns:
            Variable bindings on a match, None otherwise. A variable accepts
            any segment text, including the empty string.
        """
        if len(request_segments) != len(self.segments):
            return None

        bindings: Dict[str, str] = {}
        for segment, value in zip(self.segments, request_segments):
            if isinstance(segment, Literal):
                if segment.text != value:
                    return None
            else:
                bindings[segment.name] = value
        return bindings


def _compile_segment(pattern: str, raw: str) -> Segment:
    if "{" not in raw and "}" not in raw:
        return Literal(raw)

    if not (raw.startswith("{") and raw.endswith("}")):
        raise MalformedVariableError(pattern, raw)

    name = raw[1:-1]
    if not name or "{" in name or "}" in name:
        raise MalformedVariableError(pattern, raw)

    return Variable(name)


def compile_pattern(path: str) -> PathPattern:
    """
    Compile a declared path into a :class:`PathPattern`.

    Args:
        path: Declared path, e.g. ``/api/v1/endpoint/{id}``

    Returns:
        The compiled pattern

    Raises:
        MalformedVariableError: A segment has unbalanced, nested or empty braces
        DuplicateVariableError: A variable name is used twice
        EmptySegmentError: Two consecutive slashes inside the path
        CompileError: The path does not start with ``/``
    """
    if not path.startswith("/"):
        raise CompileError(path, "Pattern must start with '/'")

    raw_segments = split_path(path)
    last = len(raw_segments) - 1

    segments: List[Segment] = []
    seen = set()
    for position, raw in enumerate(raw_segments):
        if raw == "" and position not in (0, last):
            raise EmptySegmentError(path, position)

        segment = _compile_segment(path, raw)
        if isinstance(segment, Variable):
            if segment.name in seen:
                raise DuplicateVariableError(path, segment.name)
            seen.add(segment.name)
        segments.append(segment)

    return PathPattern(source=path, segments=tuple(segments))
