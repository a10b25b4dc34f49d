"""
Node Registry

Immutable, display-ordered catalog of node definitions.

The registry is assembled once from an explicit registration list
(``halo_engine.core.nodes.builtin.BUILTIN_NODES``). Entries that are not
valid node definitions are logged and left out; they never abort the build.
"""

import inspect
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from halo_engine.config import settings
from halo_engine.core.nodes.base import HaloNode
from halo_engine.schemas.node import NodeDescription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeRegistryEntry:
    """A registered node plus the icon assets found next to its module."""
    node: HaloNode
    folder: str = ""
    icon: str = ""
    icon_dark: str = ""

    @property
    def description(self) -> NodeDescription:
        return self.node.description

    @property
    def name(self) -> str:
        return self.node.description.name

    @property
    def display_name(self) -> str:
        return self.node.description.display_name

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form for the node listing API."""
        description = self.description
        return {
            "name": description.name,
            "display_name": description.display_name,
            "description": description.description,
            "group": list(description.group),
            "version": description.version,
            "color": description.color,
            "inputs": list(description.inputs),
            "outputs": list(description.outputs),
            "credentials": [req.model_dump() for req in description.credentials],
            "properties": [prop.model_dump(mode="json") for prop in description.properties],
            "icon": self.icon,
            "icon_dark": self.icon_dark,
        }


class NodeRegistry:
    """
    Read-only node lookup.

    Safe to share between concurrent executions: nothing mutates it after
    construction.
    """

    def __init__(self, entries: Iterable[NodeRegistryEntry]):
        self._entries: Tuple[NodeRegistryEntry, ...] = tuple(entries)
        self._by_name = MappingProxyType({entry.name: entry for entry in self._entries})

    @property
    def entries(self) -> Tuple[NodeRegistryEntry, ...]:
        return self._entries

    def get_by_id(self, name: str) -> Optional[NodeRegistryEntry]:
        """
        Get entry by node name.

        Returns:
            Entry or None if not registered
        """
        return self._by_name.get(name)

    def find_by_name(self, name: str) -> Optional[NodeRegistryEntry]:
        """Match on node name first, then case-insensitively on display name."""
        entry = self._by_name.get(name)
        if entry is not None:
            return entry

        wanted = name.casefold()
        for candidate in self._entries:
            if candidate.display_name.casefold() == wanted:
                return candidate
        return None

    def get_node(self, name: str) -> Optional[HaloNode]:
        entry = self._by_name.get(name)
        return entry.node if entry else None

    def list_types(self) -> List[str]:
        """Node names in display order"""
        return [entry.name for entry in self._entries]

    def list_all(self) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[NodeRegistryEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def _candidate_label(candidate: Any) -> str:
    return getattr(candidate, "__qualname__", None) or type(candidate).__name__


def _as_node(candidate: Any) -> Optional[HaloNode]:
    """
    Turn a registration-list entry into a node instance.

    Returns None (after logging a warning) when the entry is not a
    conforming definition.
    """
    label = _candidate_label(candidate)

    if isinstance(candidate, type):
        if not issubclass(candidate, HaloNode):
            logger.warning(f"⚠️ Skipping {label}: not a HaloNode subclass")
            return None
        if inspect.isabstract(candidate):
            logger.warning(f"⚠️ Skipping {label}: execute() is not implemented")
            return None
        try:
            node = candidate()
        except TypeError as e:
            logger.warning(f"⚠️ Skipping {label}: cannot instantiate ({e})")
            return None
    elif isinstance(candidate, HaloNode):
        node = candidate
    else:
        logger.warning(f"⚠️ Skipping {label}: not a node definition")
        return None

    description = getattr(node, "description", None)
    if not isinstance(description, NodeDescription):
        logger.warning(f"⚠️ Skipping {label}: missing node description")
        return None

    if not description.display_name or not description.display_name.strip():
        logger.warning(f"⚠️ Skipping {label}: missing display name")
        return None

    if not inspect.iscoroutinefunction(getattr(node, "execute", None)):
        logger.warning(f"⚠️ Skipping {label}: execute() must be a coroutine function")
        return None

    return node


def _find_icons(node: HaloNode, url_prefix: str) -> Tuple[str, str, str]:
    """
    Locate ``<folder>.svg`` and ``<folder>.dark.svg`` beside the node module.

    Filenames are matched case-insensitively against the folder name.

    Returns:
        (folder, icon_url, dark_icon_url); missing icons are ""
    """
    try:
        folder_path = Path(inspect.getfile(type(node))).parent
    except TypeError:
        logger.warning(f"⚠️ Cannot locate module folder for node '{node.name}'")
        return "", "", ""

    folder = folder_path.name
    light_name = f"{folder.lower()}.svg"
    dark_name = f"{folder.lower()}.dark.svg"

    icon = ""
    icon_dark = ""
    for path in sorted(folder_path.iterdir()):
        lowered = path.name.lower()
        if lowered == light_name:
            icon = f"{url_prefix}/{folder}/{path.name}"
        elif lowered == dark_name:
            icon_dark = f"{url_prefix}/{folder}/{path.name}"

    if not icon:
        logger.warning(f"⚠️ No icon found for node '{node.name}' in {folder_path}")

    return folder, icon, icon_dark


def build_registry(
    candidates: Iterable[Any],
    icon_url_prefix: Optional[str] = None,
) -> NodeRegistry:
    """
    Build a registry from a registration list.

    Args:
        candidates: HaloNode subclasses or instances
        icon_url_prefix: Overrides settings.NODE_ICON_URL_PREFIX

    Returns:
        NodeRegistry sorted by display name
    """
    prefix = settings.NODE_ICON_URL_PREFIX if icon_url_prefix is None else icon_url_prefix.rstrip("/")

    entries: Dict[str, NodeRegistryEntry] = {}
    skipped = 0

    for candidate in candidates:
        node = _as_node(candidate)
        if node is None:
            skipped += 1
            continue

        if node.name in entries:
            logger.warning(
                f"⚠️ Skipping {_candidate_label(candidate)}: node name '{node.name}' already registered"
            )
            skipped += 1
            continue

        folder, icon, icon_dark = _find_icons(node, prefix)
        entries[node.name] = NodeRegistryEntry(
            node=node,
            folder=folder,
            icon=icon,
            icon_dark=icon_dark,
        )

    ordered = sorted(
        entries.values(),
        key=lambda entry: (entry.display_name.casefold(), entry.name),
    )

    logger.info(f"✅ Node registry built: {len(ordered)} registered, {skipped} skipped")
    return NodeRegistry(ordered)


@lru_cache(maxsize=1)
def get_node_registry() -> NodeRegistry:
    """Registry of the built-in nodes, built once per process."""
    from halo_engine.core.nodes.builtin import BUILTIN_NODES

    return build_registry(BUILTIN_NODES)
