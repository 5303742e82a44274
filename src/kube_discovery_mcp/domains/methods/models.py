"""Pydantic models for the Kubernetes client method catalog."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Action(str, Enum):
    """Operation kind derived from a method name."""

    LIST = "list"
    READ = "read"
    CREATE = "create"
    DELETE = "delete"
    PATCH = "patch"
    REPLACE = "replace"
    CONNECT = "connect"
    GET = "get"
    WATCH = "watch"
    UNKNOWN = "unknown"


class Scope(str, Enum):
    """Namespace scope derived from a method name."""

    NAMESPACED = "namespaced"
    CLUSTER = "cluster"
    FOR_ALL_NAMESPACES = "forAllNamespaces"


@dataclass(frozen=True)
class ApiGrouping:
    """A client API class and the method names it exposes."""

    grouping_id: str
    description: str
    method_names: tuple[str, ...] = ()


class MethodParameter(BaseModel):
    """A parameter inferred for a client method."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Parameter name")
    type: str = Field(..., description="JSON type of the parameter")
    optional: bool = Field(False, description="Whether the parameter may be omitted")
    description: str = Field("", description="What the parameter means")


class SchemaProperty(BaseModel):
    """A property in a method input schema."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="JSON type")
    description: str = Field("", description="Property description")


class InputSchema(BaseModel):
    """JSON-schema-shaped description of a method's arguments."""

    model_config = ConfigDict(frozen=True)

    type: str = Field("object", description="Always 'object'")
    properties: dict[str, SchemaProperty] = Field(
        default_factory=dict, description="Parameter properties"
    )
    required: list[str] = Field(default_factory=list, description="Required parameter names")
    description: str = Field("", description="How to pass the arguments")


class OutputSchema(BaseModel):
    """Description of what a method returns."""

    model_config = ConfigDict(frozen=True)

    description: str = Field(..., description="Shape of the response")
    type_name: str | None = Field(
        None, description="Type name to pass to get_type_definition for the response"
    )


class MethodRecord(BaseModel):
    """A single callable operation on a Kubernetes client API class."""

    model_config = ConfigDict(frozen=True)

    grouping_id: str = Field(..., description="Client API class, e.g. CoreV1Api")
    method_name: str = Field(..., description="Method name on the API class")
    resource_type: str = Field("Resource", min_length=1, description="Resource the method acts on")
    action: Action = Field(..., description="Operation kind")
    scope: Scope = Field(..., description="Namespace scope")
    parameters: list[MethodParameter] = Field(default_factory=list, description="Inferred parameters")
    description: str = Field("", description="Human readable summary")
    example: str = Field("", description="Usage example snippet")
    input_schema: InputSchema = Field(default_factory=InputSchema, description="Argument schema")
    output_schema: OutputSchema = Field(..., description="Response description")

    @property
    def qualified_name(self) -> str:
        """Unique identifier of the method across groupings."""
        return f"{self.grouping_id}.{self.method_name}"
