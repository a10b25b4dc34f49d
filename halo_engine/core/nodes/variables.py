"""
Template References

Step config values may reference earlier outputs with ``{{stepId.path}}``:

1. Whole-value reference - ``"{{fetch.json.items}}"`` keeps the referenced type
2. Template string - ``"Order {{trigger.orderId}} shipped"`` interpolates text

``trigger`` names the run's trigger payload. For node-backed step outputs
(``{"channel", "json", "channels"}``) a path that does not start with one of
those keys is looked up in the step's primary ``json`` item, so
``{{check.status}}`` and ``{{check.json.status}}`` are equivalent.
Unresolved references are left untouched.
"""

import json
import logging
import re
from typing import Any, Dict, Optional

from halo_engine.core.nodes.base import is_node_output

logger = logging.getLogger(__name__)

TEMPLATE_PATTERN = re.compile(r"\{\{\s*([A-Za-z0-9_\-]+(?:\.[A-Za-z0-9_\-]+)*)\s*\}\}")
_FULL_REFERENCE = re.compile(r"^\s*\{\{\s*([A-Za-z0-9_\-]+(?:\.[A-Za-z0-9_\-]+)*)\s*\}\}\s*$")

_MISSING = object()
_NODE_OUTPUT_KEYS = {"channel", "json", "channels"}


def _walk(value: Any, path: list) -> Any:
    current = value
    for key in path:
        if isinstance(current, dict):
            if key not in current:
                return _MISSING
            current = current[key]
        elif isinstance(current, list) and key.isdigit():
            index = int(key)
            if index >= len(current):
                return _MISSING
            current = current[index]
        else:
            return _MISSING
    return current


def resolve_reference(path: str, outputs: Dict[str, Any]) -> Optional[Any]:
    """
    Resolve ``stepId.field.subfield`` against accumulated step outputs.

    Returns:
        The referenced value, or None if any segment is missing

    Examples:
        >>> resolve_reference("trigger.status", {"trigger": {"status": "active"}})
        'active'
        >>> resolve_reference("a.x", {"a": {"channel": "main", "json": {"x": 1}, "channels": {}}})
        1
    """
    step_id, _, rest = path.partition(".")
    if step_id not in outputs:
        logger.debug(f"Step '{step_id}' has no recorded output")
        return None

    step_output = outputs[step_id]
    if not rest:
        return step_output

    parts = rest.split(".")
    if is_node_output(step_output) and parts[0] not in _NODE_OUTPUT_KEYS:
        value = _walk(step_output.get("json") or {}, parts)
    else:
        value = _walk(step_output, parts)

    if value is _MISSING:
        logger.debug(f"Reference '{path}' not found")
        return None
    return value


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def resolve_template(template: str, outputs: Dict[str, Any]) -> Any:
    """
    Resolve every ``{{...}}`` in a string.

    A string that is exactly one reference returns the referenced value
    unchanged (dicts stay dicts, numbers stay numbers).
    """
    full = _FULL_REFERENCE.match(template)
    if full:
        value = resolve_reference(full.group(1), outputs)
        return template if value is None else value

    def replace(match: re.Match) -> str:
        value = resolve_reference(match.group(1), outputs)
        if value is None:
            return match.group(0)
        return _to_text(value)

    return TEMPLATE_PATTERN.sub(replace, template)


def resolve_config(config: Any, outputs: Dict[str, Any]) -> Any:
    """Return a copy of ``config`` with templates resolved at every depth."""
    if isinstance(config, str):
        if "{{" not in config:
            return config
        return resolve_template(config, outputs)
    if isinstance(config, dict):
        return {key: resolve_config(value, outputs) for key, value in config.items()}
    if isinstance(config, list):
        return [resolve_config(value, outputs) for value in config]
    return config
