"""Descriptions, usage examples and schemas for client methods."""

from __future__ import annotations

import re

from kube_discovery_mcp.domains.methods.models import (
    Action,
    InputSchema,
    MethodParameter,
    OutputSchema,
    SchemaProperty,
)
from kube_discovery_mcp.domains.methods.naming import CUSTOM_OBJECTS_GROUPING, split_identifier

_VERSION_PATTERN = re.compile(r"(V\d+(?:(?:alpha|beta)\d+)?)Api$")

_EXAMPLE_VALUES: dict[str, str] = {
    "name": '"my-resource"',
    "namespace": '"default"',
    "body": "body",
    "group": '"example.com"',
    "version": '"v1"',
    "plural": '"widgets"',
}


def describe_method(method_name: str, resource_type: str, grouping_description: str) -> str:
    """Build a one-line summary, e.g. ``List namespaced pod (Pod) - Core resources``."""
    words = [word.lower() for word in split_identifier(method_name)]
    if not words:
        sentence = method_name
    else:
        sentence = " ".join(words)
        sentence = sentence[0].upper() + sentence[1:]
    description = f"{sentence} ({resource_type})"
    if grouping_description:
        description += f" - {grouping_description}"
    return description


def api_version_prefix(grouping_id: str) -> str | None:
    """Model class prefix for a grouping, e.g. ``V1`` for ``AppsV1Api``."""
    match = _VERSION_PATTERN.search(grouping_id)
    if match is None:
        return None
    return match.group(1)


def return_type_name(grouping_id: str, resource_type: str, action: Action) -> str | None:
    """Name of the model a method returns, when it can be guessed."""
    if grouping_id == CUSTOM_OBJECTS_GROUPING:
        return None
    prefix = api_version_prefix(grouping_id)
    if prefix is None:
        return None
    if action is Action.LIST:
        return f"{prefix}{resource_type}List"
    if action in (Action.READ, Action.CREATE, Action.REPLACE, Action.PATCH):
        return f"{prefix}{resource_type}"
    if action is Action.DELETE:
        return "V1Status"
    return None


def build_input_schema(parameters: list[MethodParameter]) -> InputSchema:
    properties = {
        param.name: SchemaProperty(type=param.type, description=param.description)
        for param in parameters
    }
    required = [param.name for param in parameters if not param.optional]
    if required:
        description = f"Keyword arguments. Required: {', '.join(required)}"
    elif parameters:
        description = "Keyword arguments. All parameters are optional."
    else:
        description = "No arguments required."
    return InputSchema(properties=properties, required=required, description=description)


def build_output_schema(resource_type: str, action: Action, type_name: str | None) -> OutputSchema:
    if action is Action.LIST:
        description = (
            f"Response has an 'items' list of {resource_type} objects, "
            "plus 'metadata' with the continue token and resource version."
        )
    elif action in (Action.READ, Action.GET):
        description = f"Response is the {resource_type} object itself."
    elif action is Action.CREATE:
        description = f"Response is the created {resource_type} object."
    elif action in (Action.PATCH, Action.REPLACE):
        description = f"Response is the updated {resource_type} object."
    elif action is Action.DELETE:
        description = "Response is a status object describing the deletion."
    elif action is Action.WATCH:
        description = "Response is a stream of watch events."
    else:
        description = "Response shape depends on the operation."
    return OutputSchema(description=description, type_name=type_name)


def _call_arguments(parameters: list[MethodParameter]) -> str:
    args = [
        f"{param.name}={_EXAMPLE_VALUES.get(param.name, repr(param.name))}"
        for param in parameters
        if not param.optional or param.name == "body"
    ]
    return ", ".join(args)


def _handling_lines(resource_type: str, action: Action) -> list[str]:
    if action is Action.LIST:
        return [
            "for item in response.items:",
            "    print(item.metadata.name)",
        ]
    if action in (Action.READ, Action.GET):
        return [f"print(response)  # the {resource_type}"]
    if action is Action.CREATE:
        return [f"print(response.metadata.name)  # the created {resource_type}"]
    if action in (Action.PATCH, Action.REPLACE):
        return [f"print(response.metadata.resource_version)  # the updated {resource_type}"]
    if action is Action.DELETE:
        return ["print(response.status)  # status of the deletion"]
    return ["print(response)"]


def build_example(
    grouping_id: str,
    method_name: str,
    resource_type: str,
    action: Action,
    parameters: list[MethodParameter],
) -> str:
    """Build a runnable kubernetes client snippet for a method."""
    lines = [
        "from kubernetes import client, config",
        "",
        "config.load_kube_config()",
        f"api = client.{grouping_id}()",
    ]
    if any(param.name == "body" for param in parameters):
        lines.append(f"body = {{}}  # {resource_type} manifest")
    lines.append(f"response = api.{method_name}({_call_arguments(parameters)})")
    lines.extend(_handling_lines(resource_type, action))
    return "\n".join(lines)
