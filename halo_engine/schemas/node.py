"""
Node Description Schemas

Static metadata every node definition carries: channels, credential
requirements and the ordered parameter descriptors. Legacy catalog fields
are lifted into the same ``NodeProperty`` shape (see halo_engine.catalog).
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ParameterKind(str, Enum):
    """Kind tag of a parameter descriptor."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OPTIONS = "options"
    JSON = "json"
    COLLECTION = "collection"


class ParameterOption(BaseModel):
    """One selectable value of an OPTIONS parameter."""
    model_config = ConfigDict(frozen=True)

    name: str
    value: Any
    description: Optional[str] = None


class DisplayOptions(BaseModel):
    """
    Conditional visibility keyed on other parameter values.

    ``show``: every listed parameter must currently hold one of the listed values.
    ``hide``: any listed parameter holding one of the listed values hides this one.
    """
    model_config = ConfigDict(frozen=True)

    show: Dict[str, List[Any]] = Field(default_factory=dict)
    hide: Dict[str, List[Any]] = Field(default_factory=dict)

    def is_visible(self, values: Dict[str, Any]) -> bool:
        for name, allowed in self.show.items():
            if values.get(name) not in allowed:
                return False
        for name, blocked in self.hide.items():
            if values.get(name) in blocked:
                return False
        return True


class NodeProperty(BaseModel):
    """
    Parameter descriptor.

    Example:
        NodeProperty(
            name="operation",
            display_name="Operation",
            kind=ParameterKind.OPTIONS,
            default="send",
            options=[ParameterOption(name="Send", value="send")],
        )
    """
    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    kind: ParameterKind = ParameterKind.STRING
    default: Any = None
    required: bool = False
    description: Optional[str] = None
    placeholder: Optional[str] = None
    options: List[ParameterOption] = Field(default_factory=list)
    display_options: Optional[DisplayOptions] = None
    # Nested descriptors for COLLECTION parameters
    fields: List["NodeProperty"] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_options(self):
        if self.kind == ParameterKind.OPTIONS and not self.options:
            raise ValueError(f"Options parameter '{self.name}' must declare at least one option")
        return self

    def is_visible(self, values: Dict[str, Any]) -> bool:
        """Whether this parameter is shown given the other parameter values."""
        if self.display_options is None:
            return True
        return self.display_options.is_visible(values)

    def option_values(self) -> List[Any]:
        return [option.value for option in self.options]


NodeProperty.model_rebuild()


class CredentialRequirement(BaseModel):
    """A named credential a node asks for (e.g. ``googleCredentials``)."""
    model_config = ConfigDict(frozen=True)

    name: str
    required: bool = False


class NodeDescription(BaseModel):
    """
    Immutable metadata of a node definition.

    ``outputs`` fixes how many channels ``execute()`` returns and in which order.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    description: str = ""
    group: List[str] = Field(default_factory=list)
    version: int = 1
    color: Optional[str] = None
    inputs: List[str] = Field(default_factory=lambda: ["main"])
    outputs: List[str] = Field(default_factory=lambda: ["main"])
    credentials: List[CredentialRequirement] = Field(default_factory=list)
    properties: List[NodeProperty] = Field(default_factory=list)

    @field_validator("outputs")
    @classmethod
    def outputs_not_empty(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("A node must declare at least one output channel")
        if len(set(v)) != len(v):
            raise ValueError("Output channel names must be unique")
        return v

    @field_validator("properties")
    @classmethod
    def unique_property_names(cls, v: List[NodeProperty]) -> List[NodeProperty]:
        names = [prop.name for prop in v]
        duplicates = {name for name in names if names.count(name) > 1}
        if duplicates:
            raise ValueError(f"Duplicate parameter names: {sorted(duplicates)}")
        return v

    def get_property(self, name: str) -> Optional[NodeProperty]:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def defaults(self) -> Dict[str, Any]:
        """Declared default of every parameter."""
        return {prop.name: prop.default for prop in self.properties}

    @property
    def is_trigger(self) -> bool:
        return not self.inputs
