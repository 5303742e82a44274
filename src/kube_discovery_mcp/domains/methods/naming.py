"""Derive resource type, action, scope and parameters from client method names.

Kubernetes client method names follow a regular convention, e.g.
``list_namespaced_pod`` or ``listNamespacedPod``: an action verb, an optional
scope word, the resource, and optional suffixes. Everything here works on
names alone and never fails; odd names fall back to defaults.
"""

from __future__ import annotations

import re

from kube_discovery_mcp.domains.methods.models import Action, MethodParameter, Scope

DEFAULT_RESOURCE_TYPE = "Resource"

CUSTOM_OBJECTS_GROUPING = "CustomObjectsApi"

# First prefix match wins.
ACTION_PRIORITY: tuple[Action, ...] = (
    Action.LIST,
    Action.READ,
    Action.CREATE,
    Action.DELETE,
    Action.PATCH,
    Action.REPLACE,
    Action.CONNECT,
    Action.WATCH,
    Action.GET,
)

_ACTION_WORDS = frozenset(action.value for action in ACTION_PRIORITY)
_SCOPE_WORDS = frozenset({"namespaced", "cluster"})
_DUPLICATE_MARKER = ("with", "http", "info")
_ALL_NAMESPACES_MARKER = ("for", "all", "namespaces")

_WORD_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z0-9]+|[A-Z]+[0-9]*")
_SEPARATOR_PATTERN = re.compile(r"[^A-Za-z0-9]+")

_PARAMETER_SPECS: dict[str, tuple[str, str]] = {
    "name": ("string", "Name of the resource"),
    "namespace": ("string", "Namespace the resource lives in"),
    "body": ("object", "Resource object to send"),
    "group": ("string", "API group of the custom resource, e.g. example.com"),
    "version": ("string", "API version of the custom resource, e.g. v1"),
    "plural": ("string", "Plural resource name of the custom resource, e.g. widgets"),
}

_PARAMETER_RULES: dict[tuple[Scope, Action], tuple[str, ...]] = {
    (Scope.NAMESPACED, Action.LIST): ("namespace",),
    (Scope.NAMESPACED, Action.READ): ("name", "namespace"),
    (Scope.NAMESPACED, Action.DELETE): ("name", "namespace"),
    (Scope.NAMESPACED, Action.PATCH): ("name", "namespace"),
    (Scope.NAMESPACED, Action.REPLACE): ("name", "namespace"),
    (Scope.NAMESPACED, Action.CREATE): ("namespace", "body"),
    (Scope.CLUSTER, Action.READ): ("name",),
    (Scope.CLUSTER, Action.DELETE): ("name",),
    (Scope.CLUSTER, Action.PATCH): ("name",),
    (Scope.CLUSTER, Action.REPLACE): ("name",),
    (Scope.CLUSTER, Action.CREATE): ("body",),
}

_SINGLE_RESOURCE_ACTIONS = frozenset(
    {Action.READ, Action.GET, Action.DELETE, Action.PATCH, Action.REPLACE}
)


def split_identifier(identifier: str) -> list[str]:
    """Split a snake_case or camelCase identifier into words.

    Words keep their original casing, so acronyms survive:
    ``readAPIService`` gives ``["read", "API", "Service"]``.
    """
    words: list[str] = []
    for piece in _SEPARATOR_PATTERN.split(identifier):
        words.extend(_WORD_PATTERN.findall(piece))
    return words


def compact_identifier(identifier: str) -> str:
    """Lowercase an identifier and drop its separators."""
    return _SEPARATOR_PATTERN.sub("", identifier).lower()


def is_duplicate_variant(identifier: str) -> bool:
    """Whether the method is the raw-response twin of another method."""
    return compact_identifier(identifier).endswith("".join(_DUPLICATE_MARKER))


def derive_action(identifier: str) -> Action:
    lowered = identifier.lower()
    for action in ACTION_PRIORITY:
        if lowered.startswith(action.value):
            return action
    return Action.UNKNOWN


def derive_scope(identifier: str) -> Scope:
    compact = compact_identifier(identifier)
    if "forallnamespaces" in compact:
        return Scope.FOR_ALL_NAMESPACES
    if "namespaced" in compact:
        return Scope.NAMESPACED
    return Scope.CLUSTER


def _strip_suffix(words: list[str], marker: tuple[str, ...]) -> list[str]:
    size = len(marker)
    if len(words) >= size and tuple(w.lower() for w in words[-size:]) == marker:
        return words[:-size]
    return words


def derive_resource_type(identifier: str) -> str:
    """Derive the resource a method acts on, e.g. ``Pod`` for ``list_namespaced_pod``."""
    words = split_identifier(identifier)
    if words and words[0].lower() in _ACTION_WORDS:
        words = words[1:]
    # delete_collection_namespaced_pod puts the scope word after "collection".
    if words and words[0].lower() == "collection":
        words = words[1:]
    if words and words[0].lower() in _SCOPE_WORDS:
        words = words[1:]
    words = _strip_suffix(words, _DUPLICATE_MARKER)
    words = _strip_suffix(words, _ALL_NAMESPACES_MARKER)
    resource = "".join(word[0].upper() + word[1:] for word in words)
    return resource or DEFAULT_RESOURCE_TYPE


def _parameter(name: str, optional: bool = False) -> MethodParameter:
    param_type, description = _PARAMETER_SPECS[name]
    return MethodParameter(name=name, type=param_type, optional=optional, description=description)


def _custom_object_parameters(identifier: str, action: Action, scope: Scope) -> list[MethodParameter]:
    compact = compact_identifier(identifier)
    names = ["group", "version"]
    if scope is Scope.NAMESPACED:
        names.append("namespace")
    names.append("plural")
    if action in _SINGLE_RESOURCE_ACTIONS and "collection" not in compact:
        names.append("name")
    params = [_parameter(name) for name in names]
    if action in (Action.CREATE, Action.REPLACE):
        params.append(_parameter("body"))
    elif action is Action.PATCH:
        params.append(_parameter("body", optional=True))
    return params


def infer_parameters(
    identifier: str, grouping_id: str, action: Action, scope: Scope
) -> list[MethodParameter]:
    """Infer a method's parameters from its action and scope.

    This is a best-effort guess from naming alone; methods outside the
    rule table get no parameters.
    """
    if grouping_id == CUSTOM_OBJECTS_GROUPING:
        if "customobject" in compact_identifier(identifier):
            return _custom_object_parameters(identifier, action, scope)
        return []

    params = [_parameter(name) for name in _PARAMETER_RULES.get((scope, action), ())]
    if action in (Action.PATCH, Action.REPLACE) and params:
        params.append(_parameter("body", optional=True))
    return params
