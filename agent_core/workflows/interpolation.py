"""
Template interpolation

Resolves ``{{ path.to.value }}`` placeholders against the run context.
A path that cannot be resolved renders as an empty string.
"""

import json
import logging
import re
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([\w.]+)\s*\}\}")

INPUT_KEY = "input"

_MISSING = object()


def find_placeholders(template: str) -> List[str]:
    """Return the dotted paths referenced by a template, in order of appearance."""
    if not isinstance(template, str):
        return []
    return [match.group(1) for match in PLACEHOLDER_PATTERN.finditer(template)]


def resolve_path(path: str, context: Mapping[str, Any]) -> Any:
    """Walk a dotted path through mappings and sequences.

    Returns the sentinel ``_MISSING`` when any segment is absent.
    """
    current: Any = context
    for segment in path.split("."):
        if segment == "":
            return _MISSING
        if isinstance(current, Mapping):
            if segment not in current:
                return _MISSING
            current = current[segment]
        elif isinstance(current, (list, tuple)):
            try:
                index = int(segment)
            except ValueError:
                return _MISSING
            if index < 0 or index >= len(current):
                return _MISSING
            current = current[index]
        else:
            return _MISSING
    return current


def render_value(value: Any) -> str:
    """Render a resolved value for substitution into a template."""
    if isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, indent=2, default=str)
    if value is None or isinstance(value, (bool, int, float)):
        return json.dumps(value)
    return str(value)


def interpolate(template: Any, context: Mapping[str, Any]) -> Any:
    """Substitute every placeholder in ``template`` with its context value.

    Non-string templates are returned unchanged.
    """
    if not isinstance(template, str):
        return template

    def replace(match: "re.Match[str]") -> str:
        value = resolve_path(match.group(1), context)
        if value is _MISSING:
            logger.debug(f"Placeholder '{match.group(1)}' did not resolve")
            return ""
        return render_value(value)

    return PLACEHOLDER_PATTERN.sub(replace, template)


def interpolate_args(
    args: Optional[Mapping[str, Any]], context: Mapping[str, Any]
) -> Dict[str, Any]:
    """Interpolate the top-level string values of a step's arguments."""
    return {key: interpolate(value, context) for key, value in (args or {}).items()}


def check_references(workflow) -> List[str]:
    """List placeholders that cannot refer to ``input`` or an earlier step.

    Returns:
        One message per offending placeholder
    """
    problems: List[str] = []
    earlier = {INPUT_KEY}
    for step in workflow.steps:
        templates = []
        if isinstance(step.condition, str):
            templates.append(("if", step.condition))
        if isinstance(step.args, Mapping):
            templates.extend(
                (f"args.{key}", value)
                for key, value in step.args.items()
                if isinstance(value, str)
            )

        for where, template in templates:
            for path in find_placeholders(template):
                root = path.split(".", 1)[0]
                if root in earlier:
                    continue
                if root == step.id:
                    reason = "refers to its own step"
                else:
                    reason = f"refers to unknown or later step '{root}'"
                problems.append(f"Step '{step.id}' {where}: '{{{{{path}}}}}' {reason}")

        earlier.add(step.id)
    return problems
