"""
Request matching against a compiled rule set.

Precedence among rules that match a request:

1. more literal segments (more specific) wins;
2. among equally specific rules, the first declared wins.

Matching is a linear scan over the rules declared for the request method,
O(rules x segments) per request. No index is built; rule sets are small and
are rebuilt on every hot edit.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from mockserver.config import get_logger
from mockserver.routing.patterns import split_request_path
from mockserver.routing.rules import EndpointRule, RuleSet

logger = get_logger(__name__)


@dataclass(frozen=True)
class MatchResult:
    """The winning rule and the variables captured from the request path."""
    rule: EndpointRule
    bindings: Dict[str, str]


class RequestMatcher:
    """Finds the best rule for a request method and path."""

    def match(self, rule_set: RuleSet, method: str, path: str) -> Optional[MatchResult]:
        """
        Match a request against a rule set.

        Args:
            rule_set: Rule set snapshot to match against
            method: Request method, compared case-insensitively
            path: Raw request path without query string; segments are
                percent-decoded after splitting

        Returns:
            MatchResult for the best rule, or None when nothing matches
        """
        request_segments = split_request_path(path)

        best: Optional[MatchResult] = None
        best_score = -1

        for rule in rule_set.rules_for(method):
            bindings = rule.pattern.bind(request_segments)
            if bindings is None:
                continue

            # Strictly greater keeps the earlier rule on ties
            score = rule.pattern.literal_count
            if score > best_score:
                best = MatchResult(rule=rule, bindings=bindings)
                best_score = score

        if best is not None:
            logger.debug(
                "Path matched",
                extra={
                    "method": method,
                    "path": path,
                    "pattern": best.rule.path,
                    "rule_index": best.rule.index,
                    "bindings": best.bindings,
                }
            )
        else:
            logger.debug(f"No rule matched {method} {path}")

        return best


request_matcher = RequestMatcher()
