"""
Endpoint rules and rule sets.

A :class:`RuleSet` is the compiled, immutable form of a configuration
document. Rule sets are only ever produced by :func:`compile_rule_set`, so
every rule in circulation carries a pattern that passed compilation.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from mockserver.config import get_logger
from mockserver.core.exceptions import CompileError, RuleSetCompileError
from mockserver.models.settings import SettingsDocument
from mockserver.routing.patterns import PathPattern, compile_pattern

logger = get_logger(__name__)


@dataclass(frozen=True)
class EndpointRule:
    """One compiled endpoint: method, pattern and the response to serve."""
    method: str
    pattern: PathPattern
    status: int
    content_type: str
    payload_template: str
    index: int = 0

    @property
    def path(self) -> str:
        return self.pattern.source

    @property
    def identity(self) -> Tuple[str, Tuple[Optional[str], ...]]:
        """Method and pattern shape; rules sharing it are ambiguous."""
        return self.method, self.pattern.shape


@dataclass(frozen=True)
class RuleSet:
    """Ordered endpoint rules plus the upstream to forward unmatched requests to."""
    rules: Tuple[EndpointRule, ...]
    default_endpoint: str
    document: SettingsDocument
    _by_method: Mapping[str, Tuple[EndpointRule, ...]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self):
        grouped: Dict[str, List[EndpointRule]] = {}
        for rule in self.rules:
            grouped.setdefault(rule.method, []).append(rule)
        object.__setattr__(
            self,
            "_by_method",
            MappingProxyType({method: tuple(rules) for method, rules in grouped.items()}),
        )

    def __len__(self) -> int:
        return len(self.rules)

    def rules_for(self, method: str) -> Tuple[EndpointRule, ...]:
        """Rules declared for ``method`` (any case), in declaration order."""
        return self._by_method.get(method.upper(), ())


def compile_rule_set(document: SettingsDocument) -> RuleSet:
    """
    Compile every endpoint of a configuration document.

    Compilation is all-or-nothing: the first endpoint that fails aborts the
    whole document.

    Args:
        document: Validated configuration document

    Returns:
        The compiled rule set

    Raises:
        RuleSetCompileError: An endpoint's path failed to compile
    """
    rules: List[EndpointRule] = []
    declared: Dict[Tuple[str, Tuple[Optional[str], ...]], EndpointRule] = {}

    for index, endpoint in enumerate(document.endpoints):
        try:
            pattern = compile_pattern(endpoint.path)
        except CompileError as e:
            raise RuleSetCompileError(index, endpoint.method, endpoint.path, e) from e

        rule = EndpointRule(
            method=endpoint.method.upper(),
            pattern=pattern,
            status=endpoint.status,
            content_type=endpoint.content_type,
            payload_template=endpoint.payload_template,
            index=index,
        )

        earlier = declared.get(rule.identity)
        if earlier is not None:
            logger.warning(
                f"Endpoint #{index} {rule.method} {rule.path} is shadowed by "
                f"endpoint #{earlier.index} {earlier.method} {earlier.path}"
            )
        else:
            declared[rule.identity] = rule

        rules.append(rule)

    logger.debug(f"Compiled {len(rules)} endpoint rules")

    return RuleSet(
        rules=tuple(rules),
        default_endpoint=document.default_endpoint,
        document=document,
    )
