"""Repositories of raw type declarations keyed by type name."""

from __future__ import annotations

import importlib
import importlib.util
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Protocol

import anyio
import anyio.to_thread

from kube_discovery_mcp.utils.errors import DeclarationSourceError

logger = logging.getLogger(__name__)

_TYPE_NAME_PATTERN = re.compile(r"^[A-Za-z_$][\w$]*$")
_LIST_PATTERN = re.compile(r"^[Ll]ist\[(.*)\]$")
# Older clients emit list[...] and dict(k, v); newer ones List[...] and Dict[k, v].
_DICT_PATTERN = re.compile(r"^[Dd]ict[\[(]([^,]+),\s*(.*)[\])]$")
_REQUIRED_MARKER = "must not be `None`"

_OPENAPI_PRIMITIVES: dict[str, str] = {
    "str": "string",
    "int": "number",
    "float": "number",
    "bool": "boolean",
    "datetime": "Date",
    "date": "Date",
    "object": "any",
}


@dataclass(frozen=True)
class Declaration:
    """Raw declaration text for one type."""

    type_name: str
    text: str
    location: str


class DeclarationSource(Protocol):
    """Anything that can look up declaration text by type name."""

    async def fetch(self, type_name: str) -> Declaration | None:
        """Return the declaration for ``type_name``, or None when there is none.

        Raises:
            DeclarationSourceError: If the declaration exists but cannot be read.
        """
        ...

    def is_available(self) -> tuple[bool, str]:
        ...


def is_valid_type_name(type_name: str) -> bool:
    return bool(_TYPE_NAME_PATTERN.match(type_name))


class DirectoryDeclarationSource:
    """Reads ``<root>/<TypeName>.d.ts`` files."""

    def __init__(self, root: Path, suffix: str = ".d.ts") -> None:
        self._root = root
        self._suffix = suffix

    @property
    def root(self) -> Path:
        return self._root

    async def fetch(self, type_name: str) -> Declaration | None:
        if not is_valid_type_name(type_name):
            return None
        path = anyio.Path(self._root / f"{type_name}{self._suffix}")
        if not await path.is_file():
            return None
        try:
            text = await path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DeclarationSourceError(type_name, str(e)) from e
        return Declaration(type_name=type_name, text=text, location=str(path))

    def is_available(self) -> tuple[bool, str]:
        if self._root.is_dir():
            return True, f"Reading declarations from {self._root}"
        return False, f"Declarations directory not found: {self._root}"


def openapi_type_to_signature(openapi_type: str) -> str:
    """Translate a client model type string, e.g. ``List[V1Container]``, to declaration syntax."""
    openapi_type = openapi_type.strip()
    if match := _LIST_PATTERN.match(openapi_type):
        return f"Array<{openapi_type_to_signature(match.group(1))}>"
    if match := _DICT_PATTERN.match(openapi_type):
        return f"{{ [key: string]: {openapi_type_to_signature(match.group(2))}; }}"
    return _OPENAPI_PRIMITIVES.get(openapi_type, openapi_type)


def _property_doc(model_class: type, attribute: str) -> str | None:
    prop = getattr(model_class, attribute, None)
    doc = getattr(prop, "__doc__", None) if isinstance(prop, property) else None
    if not doc:
        return None
    lines = []
    for line in doc.splitlines():
        line = line.replace("# noqa: E501", "").strip()
        if not line or line.startswith((":return:", ":rtype:", "Gets the ")):
            continue
        lines.append(line)
    return " ".join(lines) or None


def _is_required(model_class: type, attribute: str) -> bool:
    prop = getattr(model_class, attribute, None)
    setter = prop.fset if isinstance(prop, property) else None
    if setter is None:
        return False
    return any(
        isinstance(const, str) and _REQUIRED_MARKER in const for const in setter.__code__.co_consts
    )


def render_model_declaration(model_class: type) -> str:
    """Render a kubernetes client model class as declaration text.

    Fields use the Python attribute names; the serialized JSON name is noted
    in the field's doc comment when it differs.
    """
    openapi_types: dict[str, str] = getattr(model_class, "openapi_types", {})
    attribute_map: dict[str, str] = getattr(model_class, "attribute_map", {})

    lines = [f"export class {model_class.__name__} {{"]
    for attribute, openapi_type in openapi_types.items():
        doc = _property_doc(model_class, attribute)
        json_name = attribute_map.get(attribute, attribute)
        if json_name != attribute:
            note = f"Serialized as '{json_name}'."
            doc = f"{doc} {note}" if doc else note
        if doc:
            lines.append(f"    /** {doc.replace('*/', '* /')} */")
        marker = "" if _is_required(model_class, attribute) else "?"
        lines.append(f"    '{attribute}'{marker}: {openapi_type_to_signature(openapi_type)};")
    lines.append("}")
    return "\n".join(lines) + "\n"


class KubernetesModelSource:
    """Renders declarations from the installed kubernetes client's model classes."""

    def __init__(self, models_module: ModuleType | None = None) -> None:
        self._models = models_module

    def _load_models(self) -> ModuleType:
        if self._models is None:
            self._models = importlib.import_module("kubernetes.client.models")
        return self._models

    def _render(self, type_name: str) -> Declaration | None:
        models = self._load_models()
        model_class: Any = getattr(models, type_name, None)
        if not isinstance(model_class, type) or not hasattr(model_class, "openapi_types"):
            return None
        return Declaration(
            type_name=type_name,
            text=render_model_declaration(model_class),
            location=model_class.__module__,
        )

    async def fetch(self, type_name: str) -> Declaration | None:
        if not is_valid_type_name(type_name):
            return None
        try:
            return await anyio.to_thread.run_sync(self._render, type_name)
        except ImportError as e:
            raise DeclarationSourceError(type_name, f"kubernetes client not importable: {e}") from e

    def is_available(self) -> tuple[bool, str]:
        if self._models is not None or importlib.util.find_spec("kubernetes") is not None:
            return True, "Reading declarations from kubernetes client models"
        return False, "kubernetes client package is not installed"
