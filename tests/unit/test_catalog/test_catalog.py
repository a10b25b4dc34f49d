"""
Unit tests for the integration catalog

Tests:
- Legacy field adapter
- Node-backed, merged and legacy-only descriptors
- Config normalization for legacy step configs
"""

import pytest

from halo_engine.catalog import IntegrationCatalog, get_integration_by_id, get_integration_catalog
from halo_engine.catalog.descriptors import IntegrationDescriptor, LegacyField, lift_legacy_field
from halo_engine.core.nodes.registry import get_node_registry
from halo_engine.schemas.node import ParameterKind


class TestLiftLegacyField:
    """Legacy field → parameter descriptor"""

    def test_select_becomes_options(self):
        field = LegacyField.model_validate({
            "name": "method",
            "label": "Method",
            "type": "select",
            "options": ["GET", {"label": "Post", "value": "POST"}],
        })

        prop = lift_legacy_field(field)

        assert prop.kind == ParameterKind.OPTIONS
        assert prop.option_values() == ["GET", "POST"]
        assert prop.default == "GET"

    def test_text_types(self):
        for legacy_type in ("text", "email", "password", "textarea", "url"):
            prop = lift_legacy_field(LegacyField(name="x", label="X", type=legacy_type))
            assert prop.kind == ParameterKind.STRING
            assert prop.default == ""

    def test_help_text_and_dependencies(self):
        field = LegacyField.model_validate({
            "name": "cron",
            "label": "Cron",
            "helpText": "Five fields",
            "dependsOn": {"mode": ["cron"]},
            "defaultValue": "0 * * * *",
        })

        prop = lift_legacy_field(field)

        assert prop.description == "Five fields"
        assert prop.default == "0 * * * *"
        assert prop.is_visible({"mode": "cron"})
        assert not prop.is_visible({"mode": "interval"})

    def test_unknown_type_is_string(self):
        assert lift_legacy_field(LegacyField(name="x", label="X", type="color")).kind == ParameterKind.STRING

    def test_select_without_options_is_string(self):
        assert lift_legacy_field(LegacyField(name="x", label="X", type="select")).kind == ParameterKind.STRING


class TestIntegrationDescriptor:

    def test_config_schema_becomes_properties(self):
        descriptor = IntegrationDescriptor.model_validate({
            "id": "mailer",
            "name": "Mailer",
            "requiresAuth": True,
            "configSchema": {
                "to": {"type": "email", "label": "To", "required": True},
                "count": {"type": "number", "label": "Count"},
            },
            "endpoints": [{"id": "send", "name": "Send", "parameters": {"to": {"type": "email", "label": "To"}}}],
        })

        assert descriptor.requires_auth is True
        assert [prop.name for prop in descriptor.properties] == ["to", "count"]
        assert descriptor.properties[1].kind == ParameterKind.NUMBER
        assert descriptor.endpoints[0].parameters[0].name == "to"

    def test_resolve_endpoint(self):
        descriptor = IntegrationDescriptor(id="x", name="X", endpoints=[
            {"id": "first", "name": "First"},
            {"id": "second", "name": "Second"},
        ])

        assert descriptor.resolve_endpoint({}) == "first"
        assert descriptor.resolve_endpoint({"endpoint": "second"}) == "second"
        assert IntegrationDescriptor(id="y", name="Y").resolve_endpoint({}) is None

    def test_normalize_config(self):
        descriptor = get_integration_by_id("condition")

        normalized = descriptor.normalize_config({
            "condition_type": "greater_than",
            "field_path": "total",
            "comparison_value": "10",
        })

        assert normalized == {"operation": "greaterThan", "field": "total", "value": "10"}

    def test_new_keys_win_over_aliases(self):
        descriptor = get_integration_by_id("condition")

        normalized = descriptor.normalize_config({"field": "status", "field_path": "old"})

        assert normalized["field"] == "status"
        assert normalized["field_path"] == "old"


class TestIntegrationCatalog:

    def test_every_node_is_an_integration(self):
        catalog = get_integration_catalog()

        for entry in get_node_registry():
            assert entry.name in catalog

    def test_node_only_descriptor(self):
        descriptor = get_integration_by_id("slack")

        assert descriptor.source == "node"
        assert descriptor.node_name == "slack"
        assert descriptor.requires_auth is True
        assert [endpoint.id for endpoint in descriptor.endpoints] == ["execute"]
        assert descriptor.icon.endswith("slack.svg")

    def test_merged_descriptor_keeps_legacy_endpoints(self):
        descriptor = get_integration_by_id("gmail")

        assert descriptor.source == "node"
        assert descriptor.category == "communication"
        assert [endpoint.id for endpoint in descriptor.endpoints] == ["send"]
        assert any(prop.name == "operation" for prop in descriptor.properties)

    def test_legacy_only_descriptor(self):
        descriptor = get_integration_by_id("sendgrid")

        assert descriptor.source == "legacy"
        assert descriptor.node_name is None
        assert descriptor.properties

    def test_legacy_alias_of_other_node(self):
        descriptor = get_integration_by_id("aws-ses")

        assert descriptor.node_name == "sesEmail"
        assert descriptor.normalize_config({"from": "a@example.com", "to": "b@example.com"}) == {
            "fromEmail": "a@example.com",
            "toEmail": "b@example.com",
        }

    def test_list_nodes_first(self):
        catalog = get_integration_catalog()
        ids = [descriptor.id for descriptor in catalog.list()]
        node_names = get_node_registry().list_types()

        assert ids[:len(node_names)] == node_names
        assert len(ids) == len(set(ids))
        assert "sendgrid" in ids

    def test_unknown_integration(self):
        catalog = get_integration_catalog()

        assert catalog.get("teleport") is None
        assert "teleport" not in catalog
        assert catalog.resolve_endpoint("teleport", {"endpoint": "go"}) == "go"

    def test_duplicate_legacy_entries_keep_first(self):
        catalog = IntegrationCatalog(get_node_registry(), [
            {"id": "custom", "name": "First"},
            {"id": "custom", "name": "Second"},
        ])

        assert catalog.get("custom").name == "First"

    @pytest.mark.parametrize("integration_id,endpoint", [
        ("condition", "evaluate"),
        ("hubspot", "create-contact"),
        ("webhook", "execute"),
    ])
    def test_default_endpoints(self, integration_id, endpoint):
        assert get_integration_catalog().resolve_endpoint(integration_id, {}) == endpoint
