"""
Node Base Class

Abstract interface that all HALO nodes implement.

A node is one module under ``halo_engine.core.nodes.builtin.<folder>``
exporting a single ``HaloNode`` subclass. The class carries an immutable
``description`` and implements ``execute()``. It is added to the explicit
registration list in ``halo_engine.core.nodes.builtin``.

Example:
    from halo_engine.core.nodes.base import HaloNode, NodeExecutionData
    from halo_engine.schemas.node import NodeDescription, NodeProperty

    class EchoNode(HaloNode):
        description = NodeDescription(
            name="echo",
            display_name="Echo",
            properties=[NodeProperty(name="prefix", display_name="Prefix", default="")],
        )

        async def execute(self, context):
            prefix = context.get_node_parameter("prefix", 0)
            return [[
                NodeExecutionData(json={"text": f"{prefix}{item.json.get('text', '')}"})
                for item in context.get_input_data()
            ]]
"""

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, TYPE_CHECKING

from halo_engine.schemas.node import NodeDescription

if TYPE_CHECKING:
    from halo_engine.core.execution.context import NodeExecuteContext


@dataclass
class NodeExecutionData:
    """
    The unit of data exchanged between nodes.

    ``json`` is the record payload, ``binary`` an optional attachment map.
    """
    json: Dict[str, Any] = field(default_factory=dict)
    binary: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeExecutionData":
        """Build an item from ``{"json": ..., "binary": ...}``."""
        return cls(
            json=copy.deepcopy(data.get("json") or {}),
            binary=copy.deepcopy(data.get("binary")),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"json": self.json}
        if self.binary is not None:
            result["binary"] = self.binary
        return result

    def copy(self) -> "NodeExecutionData":
        return NodeExecutionData(json=copy.deepcopy(self.json), binary=copy.deepcopy(self.binary))


# Outer list = output channel (in description.outputs order), inner = items
NodeOutput = List[List[NodeExecutionData]]


class HaloNode(ABC):
    """
    Abstract base class for all workflow nodes.

    Subclasses must set ``description`` and implement ``execute()``.
    Instances hold no per-run state, so one instance serves every execution.
    """

    description: ClassVar[NodeDescription]

    @property
    def name(self) -> str:
        return self.description.name

    @property
    def display_name(self) -> str:
        return self.description.display_name

    @abstractmethod
    async def execute(self, context: "NodeExecuteContext") -> NodeOutput:
        """
        Run the node against the items on its primary input.

        Args:
            context: Per-step facade over parameters, input items,
                credentials and HTTP helpers

        Returns:
            One list of fresh items per output channel

        Raises:
            NodeOperationError: The step failed; nothing is partially emitted
        """

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name='{self.description.name}'>"


def is_node_output(value: Any) -> bool:
    """Whether a recorded step output has the node-backed shape."""
    return isinstance(value, dict) and "channels" in value and "json" in value


def to_step_output(channel_names: List[str], outputs: NodeOutput) -> Dict[str, Any]:
    """
    Convert an ``execute()`` result into the recorded step output.

    Shape: ``{"channel": <first channel with items or None>,
    "json": <first item's json on that channel>,
    "channels": {name: [item dicts]}}``.

    Raises:
        ValueError: More channels returned than the node declares
    """
    if len(outputs) > len(channel_names):
        raise ValueError(
            f"Node returned {len(outputs)} output channels but declares {len(channel_names)}"
        )

    channels: Dict[str, List[Dict[str, Any]]] = {}
    for index, name in enumerate(channel_names):
        items = outputs[index] if index < len(outputs) else []
        channels[name] = [
            item.to_dict() if isinstance(item, NodeExecutionData) else NodeExecutionData.from_dict(item).to_dict()
            for item in items
        ]

    active = next((name for name in channel_names if channels[name]), None)
    primary = channels[active][0]["json"] if active else {}
    return {"channel": active, "json": primary, "channels": channels}
