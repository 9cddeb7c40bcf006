"""
Response payload templating.

``{{name}}`` placeholders are replaced with the value bound to ``name``.
Placeholders without a binding are left verbatim, so payloads may contain
unrelated double braces. Substitution is a single pass: inserted values are
never scanned again.
"""

import re
from typing import Mapping

_PLACEHOLDER = re.compile(r"\{\{([^{}]+)\}\}")


def render_template(template: str, bindings: Mapping[str, str]) -> str:
    """
    Render a payload template.

    Args:
        template: Payload text with ``{{name}}`` placeholders
        bindings: Variable values captured from the request path

    Returns:
        The rendered body
    """
    if not bindings:
        return template

    def substitute(match: "re.Match[str]") -> str:
        return bindings.get(match.group(1), match.group(0))

    return _PLACEHOLDER.sub(substitute, template)
