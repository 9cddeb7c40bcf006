"""
Request matching and response templating.

This package compiles declared endpoints into immutable rule sets, matches
requests against them and renders mocked responses.
"""

from .dispatcher import InboundRequest, MockDispatcher, RequestState, RouteOutcome
from .matcher import MatchResult, RequestMatcher, request_matcher
from .patterns import (
    Literal,
    PathPattern,
    Variable,
    compile_pattern,
    split_path,
    split_request_path,
)
from .rules import EndpointRule, RuleSet, compile_rule_set
from .store import ConfigStore, StoreSnapshot
from .templates import render_template

__all__ = [
    "ConfigStore",
    "EndpointRule",
    "InboundRequest",
    "Literal",
    "MatchResult",
    "MockDispatcher",
    "PathPattern",
    "RequestMatcher",
    "RequestState",
    "RouteOutcome",
    "RuleSet",
    "StoreSnapshot",
    "Variable",
    "compile_pattern",
    "compile_rule_set",
    "render_template",
    "request_matcher",
    "split_path",
    "split_request_path",
]
