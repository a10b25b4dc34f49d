"""
Integration Descriptors

Declarative, behaviour-free description of each integration: configurable
fields, endpoints and auth requirements.

Two shapes exist:

- Node-backed descriptors, derived from a registered node's ``properties``
- Legacy "service + action" descriptors with ``fields``/``configSchema`` and
  ``endpoints``

Both are normalized to the same ``NodeProperty`` parameter descriptor. The
legacy adapter (``lift_legacy_field``) runs once, when a legacy descriptor
is validated.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from halo_engine.schemas.node import (
    DisplayOptions,
    NodeProperty,
    ParameterKind,
    ParameterOption,
)

logger = logging.getLogger(__name__)


# Legacy field type → parameter kind
LEGACY_FIELD_KINDS: Dict[str, ParameterKind] = {
    "text": ParameterKind.STRING,
    "email": ParameterKind.STRING,
    "password": ParameterKind.STRING,
    "textarea": ParameterKind.STRING,
    "url": ParameterKind.STRING,
    "select": ParameterKind.OPTIONS,
    "number": ParameterKind.NUMBER,
    "boolean": ParameterKind.BOOLEAN,
    "json": ParameterKind.JSON,
    "object": ParameterKind.COLLECTION,
}


class LegacyFieldOption(BaseModel):
    label: str
    value: Any


class LegacyField(BaseModel):
    """Field of the older service/action descriptor shape."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    label: str
    type: str = "text"
    required: bool = False
    placeholder: Optional[str] = None
    help_text: Optional[str] = Field(default=None, alias="helpText")
    default_value: Any = Field(default=None, alias="defaultValue")
    options: List[Union[LegacyFieldOption, str]] = Field(default_factory=list)
    # Shown only when another field holds one of the listed values
    depends_on: Optional[Dict[str, List[Any]]] = Field(default=None, alias="dependsOn")


class IntegrationEndpoint(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: str = ""
    method: str = "POST"
    path: str = ""
    parameters: List[NodeProperty] = Field(default_factory=list)


def lift_legacy_field(field: LegacyField) -> NodeProperty:
    """
    Adapter: legacy field → NodeProperty.

    Unknown legacy types are treated as strings.
    """
    kind = LEGACY_FIELD_KINDS.get(field.type.lower())
    if kind is None:
        logger.warning(f"Unknown legacy field type '{field.type}' on '{field.name}', treating as string")
        kind = ParameterKind.STRING

    options = [
        ParameterOption(name=option, value=option) if isinstance(option, str)
        else ParameterOption(name=option.label, value=option.value)
        for option in field.options
    ]
    if kind == ParameterKind.OPTIONS and not options:
        kind = ParameterKind.STRING

    default = field.default_value
    if default is None and kind == ParameterKind.OPTIONS:
        default = options[0].value
    elif default is None and kind == ParameterKind.BOOLEAN:
        default = False
    elif default is None and kind == ParameterKind.STRING:
        default = ""

    return NodeProperty(
        name=field.name,
        display_name=field.label,
        kind=kind,
        default=default,
        required=field.required,
        description=field.help_text,
        placeholder=field.placeholder,
        options=options,
        display_options=DisplayOptions(show=field.depends_on) if field.depends_on else None,
    )


def _schema_to_fields(schema: Dict[str, Dict[str, Any]]) -> List[Dict[str, Any]]:
    """``configSchema``/endpoint ``parameters`` maps become field lists."""
    return [{"name": name, **options} for name, options in schema.items()]


class IntegrationDescriptor(BaseModel):
    """
    Normalized integration description.

    ``properties`` is the single parameter schema consumers read. For
    legacy descriptors it is filled from ``fields`` (or ``configSchema``)
    by the adapter. ``node_name`` names the node that executes this
    integration in-process, when there is one. ``config_aliases`` and
    ``value_aliases`` translate legacy config keys and values into that
    node's parameter names.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    name: str
    description: str = ""
    category: str = "general"
    icon: Optional[str] = None
    color: Optional[str] = None
    requires_auth: bool = Field(default=False, alias="requiresAuth")
    auth_type: Optional[str] = Field(default=None, alias="authType")
    fields: List[LegacyField] = Field(default_factory=list)
    endpoints: List[IntegrationEndpoint] = Field(default_factory=list)
    properties: List[NodeProperty] = Field(default_factory=list)
    node_name: Optional[str] = None
    config_aliases: Dict[str, str] = Field(default_factory=dict)
    value_aliases: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    source: str = "legacy"

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_maps(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        schema = data.pop("configSchema", None)
        if schema and not data.get("fields"):
            data["fields"] = _schema_to_fields(schema)

        endpoints = []
        for endpoint in data.get("endpoints") or []:
            if isinstance(endpoint, dict) and isinstance(endpoint.get("parameters"), dict):
                endpoint = dict(endpoint)
                endpoint["parameters"] = [
                    lift_legacy_field(LegacyField.model_validate(field))
                    for field in _schema_to_fields(endpoint["parameters"])
                ]
            endpoints.append(endpoint)
        data["endpoints"] = endpoints
        return data

    @model_validator(mode="after")
    def lift_fields(self):
        if self.fields and not self.properties:
            self.properties = [lift_legacy_field(field) for field in self.fields]
        return self

    def default_endpoint(self) -> Optional[str]:
        return self.endpoints[0].id if self.endpoints else None

    def resolve_endpoint(self, config: Dict[str, Any]) -> Optional[str]:
        """``config["endpoint"]`` when set, else the first declared endpoint."""
        return config.get("endpoint") or self.default_endpoint()

    def normalize_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Rename legacy config keys and values to the executing node's names.

        Keys already present under the new name win over aliased ones.
        """
        normalized = dict(config)
        for legacy_key, node_key in self.config_aliases.items():
            if legacy_key in normalized and node_key not in normalized:
                normalized[node_key] = normalized.pop(legacy_key)

        for key, mapping in self.value_aliases.items():
            value = normalized.get(key)
            if isinstance(value, str) and value in mapping:
                normalized[key] = mapping[value]
        return normalized
