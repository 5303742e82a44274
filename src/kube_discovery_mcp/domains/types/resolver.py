"""Type lookup by name or dot-addressed property path.

A reference is either a bare type name (``V1Deployment``) or a path into
a type's fields (``V1Deployment.spec.template``). Each hop moves into the
field's element type: arrays reduce to their element, unions to their
first alternative that is not null or undefined.

Lookups expand breadth-first into nested types, one layer per depth step.
Inline expansion renders nested types in place, bounded by a nesting cap,
a per-chain visited set and a denylist of high fan-out types.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from kube_discovery_mcp.domains.types.models import (
    ArrayType,
    FieldDescriptor,
    IntersectionType,
    NamedType,
    PRIMITIVE_TYPES,
    TypeDescriptor,
    TypeExpr,
    UnionType,
    element_type_name,
    nested_type_names,
    render_type,
)
from kube_discovery_mcp.domains.types.store import RequestCache, TypeDescriptorStore

logger = logging.getLogger(__name__)

OPAQUE_PLACEHOLDER = "{ [key: string]: unknown }"
NOT_FOUND_FILE = "not found"
ERROR_FILE = "error"

MIN_LOOKUP_DEPTH = 1
MAX_LOOKUP_DEPTH = 2

# Types with deep or highly variant structure that agents rarely need inline.
DEFAULT_DENYLIST = frozenset(
    {
        # Scheduling and affinity
        "V1Affinity",
        "V1NodeAffinity",
        "V1PodAffinity",
        "V1PodAntiAffinity",
        "V1NodeSelector",
        "V1NodeSelectorRequirement",
        "V1LabelSelectorRequirement",
        # Security contexts
        "V1SecurityContext",
        "V1PodSecurityContext",
        "V1SELinuxOptions",
        "V1SeccompProfile",
        "V1WindowsSecurityContextOptions",
        "V1Capabilities",
        "V1AppArmorProfile",
        # Probes and actions
        "V1Probe",
        "V1HTTPGetAction",
        "V1TCPSocketAction",
        "V1ExecAction",
        "V1GRPCAction",
        "V1SleepAction",
        "V1HTTPHeader",
        # Lifecycle hooks
        "V1Lifecycle",
        "V1LifecycleHandler",
        # Volume sources
        "V1VolumeMount",
        "V1PersistentVolumeClaimVolumeSource",
        "V1ConfigMapVolumeSource",
        "V1SecretVolumeSource",
        "V1EmptyDirVolumeSource",
        "V1HostPathVolumeSource",
        "V1ProjectedVolumeSource",
        "V1CSIVolumeSource",
        # References
        "V1ResourceClaim",
        "V1TypedLocalObjectReference",
        "V1LocalObjectReference",
        "V1ObjectReference",
        # Selectors
        "V1EnvVarSource",
        "V1ConfigMapKeySelector",
        "V1SecretKeySelector",
        "V1ObjectFieldSelector",
        "V1ResourceFieldSelector",
        "V1ConfigMapEnvSource",
        "V1SecretEnvSource",
        # Taints and topology
        "V1Taint",
        "V1TopologySpreadConstraint",
        "V1PodAffinityTerm",
        "V1WeightedPodAffinityTerm",
        # Other
        "V1PodReadinessGate",
        "V1PodResourceClaim",
        "V1ContainerResizePolicy",
        "V1EphemeralContainer",
        "V1HostAlias",
        "V1PodOS",
    }
)


@dataclass(frozen=True)
class TypePath:
    """A type name followed by zero or more field names."""

    root: str
    segments: tuple[str, ...] = ()

    @classmethod
    def parse(cls, reference: str) -> TypePath | None:
        """Parse ``Type.field.field``; returns None for empty names or segments."""
        parts = [part.strip() for part in reference.strip().split(".")]
        if not parts or any(not part for part in parts):
            return None
        return cls(root=parts[0], segments=tuple(parts[1:]))

    def __str__(self) -> str:
        return ".".join((self.root, *self.segments))


@dataclass(frozen=True)
class TypeLookupEntry:
    """The outcome of resolving one reference."""

    name: str
    definition: str
    file: str
    nested_types: list[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.file not in (NOT_FOUND_FILE, ERROR_FILE)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "definition": self.definition,
            "file": self.file,
            "nested_types": list(self.nested_types),
        }


@dataclass
class TypeLookupResult:
    """All entries of a lookup, keyed by reference, with requested references first."""

    requested: list[str]
    entries: dict[str, TypeLookupEntry]

    @property
    def nested_count(self) -> int:
        return len(self.entries) - len([ref for ref in self.requested if ref in self.entries])

    def summary(self) -> str:
        if not self.requested:
            return "No types requested."
        lines = [
            f"Fetched {len(self.entries)} type definition(s) "
            f"({len(self.requested)} requested, {self.nested_count} nested)",
            "",
        ]
        for reference in self.requested:
            entry = self.entries[reference]
            if entry.found:
                lines.append(f"{reference}: {len(entry.nested_types)} nested type(s)")
            else:
                lines.append(f"{reference}: {entry.file}")
        return "\n".join(lines)


def format_descriptor(descriptor: TypeDescriptor, max_properties: int = 20) -> str:
    """Render a descriptor as a compact block, capping the number of fields shown."""
    lines = [f"{descriptor.name} {{"]
    for member in descriptor.fields[:max_properties]:
        marker = "?" if member.optional else ""
        lines.append(f"  {member.name}{marker}: {member.type_signature}")
    hidden = len(descriptor.fields) - max_properties
    if hidden > 0:
        lines.append(f"  ... {hidden} more properties")
    lines.append("}")
    return "\n".join(lines)


class TypePathResolver:
    """Resolves type references against a descriptor store."""

    def __init__(
        self,
        store: TypeDescriptorStore,
        max_properties: int = 20,
        max_expansion_depth: int = 3,
        denylist: frozenset[str] = DEFAULT_DENYLIST,
    ) -> None:
        self._store = store
        self._max_properties = max_properties
        self._max_expansion_depth = max_expansion_depth
        self._denylist = denylist

    @property
    def store(self) -> TypeDescriptorStore:
        return self._store

    async def resolve_path(self, path: TypePath, cache: RequestCache) -> TypeDescriptor | None:
        """Walk a path and describe the type at its end.

        Returns None when a segment names no field or an intermediate type
        cannot be loaded. A terminal type without its own declaration is
        described by a synthetic descriptor holding just the final field.
        """
        descriptor = await self._store.load(path.root, cache)
        if descriptor is None:
            return None

        for index, segment in enumerate(path.segments):
            member = descriptor.get_field(segment)
            if member is None:
                logger.debug(f"{descriptor.name} has no field '{segment}' (resolving {path})")
                return None

            target = element_type_name(member.type_expr)
            loaded = await self._store.load(target, cache) if target else None
            if index == len(path.segments) - 1:
                return loaded or self._synthetic_descriptor(path, member, descriptor.location)
            if loaded is None:
                logger.debug(f"Cannot continue {path} past '{segment}': {member.type_signature}")
                return None
            descriptor = loaded

        return descriptor

    @staticmethod
    def _synthetic_descriptor(
        path: TypePath, member: FieldDescriptor, location: str | None
    ) -> TypeDescriptor:
        return TypeDescriptor(
            name=str(path),
            fields=(member,),
            doc_comment=f"Property type: {member.type_signature}",
            location=location,
        )

    async def resolve_reference(
        self, reference: str, cache: RequestCache, inline: bool = False
    ) -> TypeLookupEntry:
        """Resolve one reference into an entry; failures become sentinel entries."""
        path = TypePath.parse(reference)
        if path is None:
            return TypeLookupEntry(
                name=reference,
                definition=f"// Invalid type reference: '{reference}'",
                file=ERROR_FILE,
            )

        if path.segments:
            descriptor = await self.resolve_path(path, cache)
            if descriptor is None:
                return TypeLookupEntry(
                    name=reference,
                    definition=f"// Could not resolve property path: {reference}",
                    file=NOT_FOUND_FILE,
                )
        else:
            descriptor = await self._store.load(path.root, cache)
            if descriptor is None:
                return TypeLookupEntry(
                    name=reference,
                    definition=f"// Type {reference} not found in declaration source",
                    file=NOT_FOUND_FILE,
                )

        if inline:
            definition = await self.expand(descriptor, cache)
        else:
            definition = format_descriptor(descriptor, self._max_properties)
        return TypeLookupEntry(
            name=descriptor.name,
            definition=definition,
            file=descriptor.location or "unknown",
            nested_types=nested_type_names(descriptor),
        )

    async def lookup(
        self, references: list[str], depth: int = 1, inline: bool = False
    ) -> TypeLookupResult:
        """Resolve a batch of references, expanding nested types breadth-first.

        ``depth`` is clamped to 1..2. Depth 1 returns only the requested
        references; depth 2 adds the types they reference directly, except
        denylisted ones. Unknown nested types are left out rather than
        reported.
        """
        depth = min(max(depth, MIN_LOOKUP_DEPTH), MAX_LOOKUP_DEPTH)
        cache: RequestCache = {}
        requested = list(dict.fromkeys(reference.strip() for reference in references))
        entries: dict[str, TypeLookupEntry] = {}

        level = requested
        for current in range(depth):
            next_level: list[str] = []
            for reference in level:
                if reference in entries:
                    continue
                entry = await self.resolve_reference(reference, cache, inline)
                if current > 0 and not entry.found:
                    continue
                entries[reference] = entry
                if current + 1 < depth:
                    next_level.extend(
                        name
                        for name in entry.nested_types
                        if name not in entries and name not in self._denylist
                    )
            level = list(dict.fromkeys(next_level))

        logger.debug(f"Type lookup of {len(requested)} reference(s) produced {len(entries)} entries")
        return TypeLookupResult(requested=requested, entries=entries)

    async def expand(self, descriptor: TypeDescriptor, cache: RequestCache) -> str:
        """Render a descriptor with nested types expanded in place."""
        body = await self._expand_fields(descriptor.fields, 1, {descriptor.name}, cache, "  ")
        return f"{descriptor.name} {body}"

    async def _expand_fields(
        self,
        fields: tuple[FieldDescriptor, ...],
        depth: int,
        chain: set[str],
        cache: RequestCache,
        indent: str,
    ) -> str:
        lines = ["{"]
        for member in fields[: self._max_properties]:
            rendered = await self._expand_expr(member.type_expr, depth, chain, cache, indent)
            marker = "?" if member.optional else ""
            lines.append(f"{indent}{member.name}{marker}: {rendered}")
        hidden = len(fields) - self._max_properties
        if hidden > 0:
            lines.append(f"{indent}... {hidden} more properties")
        lines.append(f"{indent[:-2]}}}")
        return "\n".join(lines)

    async def _expand_expr(
        self, expr: TypeExpr, depth: int, chain: set[str], cache: RequestCache, indent: str
    ) -> str:
        if isinstance(expr, ArrayType):
            return f"Array<{await self._expand_expr(expr.element, depth, chain, cache, indent)}>"
        if isinstance(expr, UnionType):
            options = [await self._expand_expr(o, depth, chain, cache, indent) for o in expr.options]
            return " | ".join(options)
        if isinstance(expr, IntersectionType):
            parts = [await self._expand_expr(p, depth, chain, cache, indent) for p in expr.parts]
            return " & ".join(parts)
        if not isinstance(expr, NamedType):
            return render_type(expr)

        if expr.args:
            args = [await self._expand_expr(a, depth, chain, cache, indent) for a in expr.args]
            return f"{expr.name}<{', '.join(args)}>"
        if expr.name in PRIMITIVE_TYPES:
            return expr.name
        if expr.name in self._denylist or expr.name in chain or depth > self._max_expansion_depth:
            return OPAQUE_PLACEHOLDER

        nested = await self._store.load(expr.name, cache)
        if nested is None:
            return expr.name
        chain.add(expr.name)
        try:
            return await self._expand_fields(nested.fields, depth + 1, chain, cache, indent + "  ")
        finally:
            chain.discard(expr.name)
