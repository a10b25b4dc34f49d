"""
Integration Catalog

Single lookup over every integration a step ``type`` may name:

- Registered nodes (``source="node"``), described by their properties
- Legacy service/action descriptors (``source="legacy"``)

A legacy descriptor whose id equals a node name is merged into that node's
descriptor (its endpoints and config aliases are kept). A legacy descriptor
naming a different node through ``node_name`` stays separate and runs that
node after its config has been normalized.
"""

import logging
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional

from halo_engine.catalog.descriptors import (
    IntegrationDescriptor,
    IntegrationEndpoint,
    LegacyField,
    lift_legacy_field,
)
from halo_engine.catalog.integrations import LEGACY_INTEGRATIONS
from halo_engine.core.nodes.registry import NodeRegistry, NodeRegistryEntry, get_node_registry

logger = logging.getLogger(__name__)

DEFAULT_NODE_ENDPOINT = "execute"


def node_descriptor(entry: NodeRegistryEntry) -> IntegrationDescriptor:
    """Describe a registered node as an integration."""
    description = entry.description
    return IntegrationDescriptor(
        id=description.name,
        name=description.display_name,
        description=description.description,
        category=description.group[0] if description.group else "general",
        icon=entry.icon or None,
        color=description.color,
        requires_auth=any(req.required for req in description.credentials),
        endpoints=[IntegrationEndpoint(id=DEFAULT_NODE_ENDPOINT, name=f"Run {description.display_name}")],
        properties=list(description.properties),
        node_name=description.name,
        source="node",
    )


class IntegrationCatalog:
    """
    Read-only integration lookup.

    Args:
        registry: Node registry supplying node-backed descriptors
        legacy: Raw legacy descriptor dicts (or already built descriptors)
    """

    def __init__(self, registry: NodeRegistry, legacy: Iterable[Any] = ()):
        self._registry = registry
        self._legacy: Dict[str, IntegrationDescriptor] = {}
        for raw in legacy:
            descriptor = raw if isinstance(raw, IntegrationDescriptor) else IntegrationDescriptor.model_validate(raw)
            if descriptor.id in self._legacy:
                logger.warning(f"⚠️ Duplicate legacy integration '{descriptor.id}' ignored")
                continue
            if descriptor.node_name and descriptor.node_name not in registry:
                logger.warning(
                    f"⚠️ Legacy integration '{descriptor.id}' names unregistered node '{descriptor.node_name}'"
                )
            self._legacy[descriptor.id] = descriptor

    @property
    def registry(self) -> NodeRegistry:
        return self._registry

    def _merge(self, entry: NodeRegistryEntry, legacy: IntegrationDescriptor) -> IntegrationDescriptor:
        base = node_descriptor(entry)
        return base.model_copy(update={
            "category": legacy.category,
            "requires_auth": base.requires_auth or legacy.requires_auth,
            "auth_type": legacy.auth_type,
            "fields": legacy.fields,
            "endpoints": legacy.endpoints or base.endpoints,
            "config_aliases": legacy.config_aliases,
            "value_aliases": legacy.value_aliases,
        })

    def get(self, integration_id: str) -> Optional[IntegrationDescriptor]:
        """
        Get a descriptor by integration id.

        Returns:
            Descriptor or None if neither a node nor a legacy entry matches
        """
        legacy = self._legacy.get(integration_id)
        entry = self._registry.get_by_id(integration_id)

        if entry is not None and legacy is not None:
            return self._merge(entry, legacy)
        if entry is not None:
            return node_descriptor(entry)
        return legacy

    def list(self) -> List[IntegrationDescriptor]:
        """Node-backed descriptors in registry order, then legacy-only ones."""
        descriptors = [self.get(entry.name) for entry in self._registry]
        descriptors.extend(
            descriptor for descriptor in self._legacy.values()
            if descriptor.id not in self._registry
        )
        return descriptors

    def resolve_endpoint(self, integration_id: str, config: Dict[str, Any]) -> Optional[str]:
        """``config["endpoint"]``, else the integration's first endpoint."""
        descriptor = self.get(integration_id)
        if descriptor is None:
            return config.get("endpoint")
        return descriptor.resolve_endpoint(config)

    def __contains__(self, integration_id: object) -> bool:
        return integration_id in self._legacy or integration_id in self._registry


@lru_cache(maxsize=1)
def get_integration_catalog() -> IntegrationCatalog:
    """Catalog over the built-in registry and legacy descriptors, built once."""
    return IntegrationCatalog(get_node_registry(), LEGACY_INTEGRATIONS)


def get_integration_by_id(integration_id: str) -> Optional[IntegrationDescriptor]:
    return get_integration_catalog().get(integration_id)


__all__ = [
    "IntegrationCatalog",
    "IntegrationDescriptor",
    "IntegrationEndpoint",
    "LegacyField",
    "get_integration_by_id",
    "get_integration_catalog",
    "lift_legacy_field",
    "node_descriptor",
]
