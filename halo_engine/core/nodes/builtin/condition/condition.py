"""
Condition Node - Route items down a true or false branch

Each input item is compared against a configured value and emitted on
exactly one of the two output channels.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from halo_engine.core.execution.exceptions import NodeOperationError
from halo_engine.core.nodes.base import HaloNode, NodeExecutionData, NodeOutput
from halo_engine.schemas.node import (
    DisplayOptions,
    NodeDescription,
    NodeProperty,
    ParameterKind,
    ParameterOption,
)
from halo_engine.utils.timezone import to_iso, utc_now

logger = logging.getLogger(__name__)

_NO_VALUE_OPERATIONS = ["isEmpty", "isNotEmpty"]


def get_field_value(data: Dict[str, Any], path: str) -> Any:
    """Read ``a.b.0.c`` from an item; missing segments give None."""
    current: Any = data
    for key in path.split("."):
        if isinstance(current, dict):
            current = current.get(key)
        elif isinstance(current, list) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
        else:
            return None
    return current


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _is_empty(value: Any) -> bool:
    """Falsy values count as empty: None, "", 0, False and empty collections."""
    return not value


def evaluate(operation: str, field_value: Any, value: Any) -> bool:
    """
    Compare ``field_value`` with ``value``.

    Equality is textual. contains/startsWith/endsWith ignore case.
    greaterThan/lessThan compare numerically and are false when either
    side is not a number.
    """
    if operation == "equal":
        return _as_text(field_value) == _as_text(value)
    if operation == "notEqual":
        return _as_text(field_value) != _as_text(value)
    if operation == "contains":
        return _as_text(value).lower() in _as_text(field_value).lower()
    if operation == "notContains":
        return _as_text(value).lower() not in _as_text(field_value).lower()
    if operation == "startsWith":
        return _as_text(field_value).lower().startswith(_as_text(value).lower())
    if operation == "endsWith":
        return _as_text(field_value).lower().endswith(_as_text(value).lower())
    if operation in ("greaterThan", "lessThan"):
        left, right = _as_number(field_value), _as_number(value)
        if left is None or right is None:
            return False
        return left > right if operation == "greaterThan" else left < right
    if operation == "isEmpty":
        return _is_empty(field_value)
    if operation == "isNotEmpty":
        return not _is_empty(field_value)
    raise ValueError(f"Unknown operation '{operation}'")


class ConditionNode(HaloNode):
    """
    Condition Node - Two-way branching.

    Output channels:
    - true: items for which the comparison holds
    - false: all other items

    Each output item keeps the input fields and adds the evaluation details
    (field, operation, value, fieldValue, conditionResult, conditionPassed,
    timestamp, inputData).
    """

    description = NodeDescription(
        name="condition",
        display_name="Condition",
        description="Route items based on a comparison",
        group=["logic"],
        color="#10B981",
        inputs=["main"],
        outputs=["true", "false"],
        properties=[
            NodeProperty(
                name="field",
                display_name="Field",
                required=True,
                default="",
                placeholder="status",
                description="Field to check, dot notation for nested values",
            ),
            NodeProperty(
                name="operation",
                display_name="Operation",
                kind=ParameterKind.OPTIONS,
                default="equal",
                options=[
                    ParameterOption(name="Equal", value="equal"),
                    ParameterOption(name="Not Equal", value="notEqual"),
                    ParameterOption(name="Contains", value="contains"),
                    ParameterOption(name="Not Contains", value="notContains"),
                    ParameterOption(name="Greater Than", value="greaterThan"),
                    ParameterOption(name="Less Than", value="lessThan"),
                    ParameterOption(name="Is Empty", value="isEmpty"),
                    ParameterOption(name="Is Not Empty", value="isNotEmpty"),
                    ParameterOption(name="Starts With", value="startsWith"),
                    ParameterOption(name="Ends With", value="endsWith"),
                ],
            ),
            NodeProperty(
                name="value",
                display_name="Value",
                default="",
                description="Value to compare against",
                display_options=DisplayOptions(hide={"operation": _NO_VALUE_OPERATIONS}),
            ),
        ],
    )

    async def execute(self, context) -> NodeOutput:
        true_items: List[NodeExecutionData] = []
        false_items: List[NodeExecutionData] = []

        try:
            for index, item in enumerate(context.get_input_data()):
                field = context.get_node_parameter("field", index)
                operation = context.get_node_parameter("operation", index)
                value = context.get_node_parameter("value", index)

                if not field:
                    raise ValueError("Field is required")

                field_value = get_field_value(item.json, field)
                passed = evaluate(operation, field_value, value)

                result = NodeExecutionData(json={
                    **item.json,
                    "field": field,
                    "operation": operation,
                    "value": value,
                    "fieldValue": field_value,
                    "conditionResult": passed,
                    "conditionPassed": passed,
                    "timestamp": to_iso(utc_now()),
                    "inputData": copy.deepcopy(item.json),
                })
                (true_items if passed else false_items).append(result)
        except (NodeOperationError, ValueError, TypeError) as e:
            raise NodeOperationError(f"Failed to evaluate condition: {e}") from e

        logger.info(f"🔀 Condition: {len(true_items)} true, {len(false_items)} false")
        return [true_items, false_items]
