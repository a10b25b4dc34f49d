"""
Unit tests for the node registry

Tests:
- Every built-in node is registered with its icons
- Malformed and duplicate definitions are skipped
- Listing order follows display names
"""

import pytest

from halo_engine.core.nodes.base import HaloNode, NodeExecutionData
from halo_engine.core.nodes.builtin import BUILTIN_NODES
from halo_engine.core.nodes.registry import build_registry, get_node_registry
from halo_engine.schemas.node import NodeDescription


class EchoNode(HaloNode):
    description = NodeDescription(name="echo", display_name="Echo")

    async def execute(self, context):
        return [[NodeExecutionData(json=item.json) for item in context.get_input_data()]]


class OtherEchoNode(HaloNode):
    description = NodeDescription(name="echo", display_name="Another Echo")

    async def execute(self, context):
        return [[]]


class BlankNameNode(HaloNode):
    description = NodeDescription(name="blank", display_name="  ")

    async def execute(self, context):
        return [[]]


class SyncNode(HaloNode):
    description = NodeDescription(name="sync", display_name="Sync")

    def execute(self, context):
        return [[]]


class AbstractNode(HaloNode):
    description = NodeDescription(name="abstract", display_name="Abstract")


class NotANode:
    description = NodeDescription(name="imposter", display_name="Imposter")

    async def execute(self, context):
        return [[]]


class TestBuiltinRegistry:
    """The process-wide registry of built-in nodes"""

    def test_all_builtin_nodes_registered(self):
        registry = get_node_registry()

        assert len(registry) == len(BUILTIN_NODES)
        for name in ("webhook", "scheduleTrigger", "condition", "delay", "httpRequest",
                     "gmail", "slack", "hubspot", "salesforce", "notionDatabase", "sesEmail"):
            assert name in registry

    def test_sorted_by_display_name(self):
        registry = get_node_registry()
        names = [entry.display_name.casefold() for entry in registry]

        assert names == sorted(names)

    def test_every_builtin_has_an_icon(self):
        for entry in get_node_registry():
            assert entry.icon.endswith(".svg"), entry.name
            assert f"/{entry.folder}/" in entry.icon

    def test_dark_icons_are_optional(self):
        registry = get_node_registry()

        assert registry.get_by_id("condition").icon_dark.endswith(".dark.svg")
        assert registry.get_by_id("delay").icon_dark == ""

    def test_find_by_display_name(self):
        registry = get_node_registry()

        assert registry.find_by_name("amazon ses").name == "sesEmail"
        assert registry.find_by_name("missing") is None

    def test_to_dict_is_serializable(self):
        data = get_node_registry().get_by_id("condition").to_dict()

        assert data["outputs"] == ["true", "false"]
        assert [prop["name"] for prop in data["properties"]] == ["field", "operation", "value"]


class TestBuildRegistry:
    """Registration list filtering"""

    def test_registers_conforming_node(self):
        registry = build_registry([EchoNode], icon_url_prefix="/icons")

        entry = registry.get_by_id("echo")
        assert entry is not None
        assert entry.icon == ""
        assert isinstance(registry.get_node("echo"), EchoNode)

    @pytest.mark.parametrize("candidate", [BlankNameNode, SyncNode, AbstractNode, NotANode, "echo", 42])
    def test_skips_malformed_definitions(self, candidate):
        registry = build_registry([EchoNode, candidate])

        assert registry.list_types() == ["echo"]

    def test_duplicate_name_keeps_first(self):
        registry = build_registry([EchoNode, OtherEchoNode])

        assert len(registry) == 1
        assert registry.get_by_id("echo").display_name == "Echo"

    def test_accepts_instances(self):
        registry = build_registry([EchoNode()])

        assert "echo" in registry
