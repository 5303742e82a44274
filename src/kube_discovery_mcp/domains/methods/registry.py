"""Static registry of Kubernetes client API groupings.

Groupings are enumerated once at initialization, either by introspecting the
installed ``kubernetes.client`` package or from a YAML registry file of the
form::

    groupings:
      - id: CoreV1Api
        description: Core Kubernetes resources
        methods:
          - list_namespaced_pod
          - read_namespaced_pod
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import ModuleType
from typing import Any

import yaml

from kube_discovery_mcp.domains.methods.models import ApiGrouping
from kube_discovery_mcp.utils.errors import RegistryError

logger = logging.getLogger(__name__)

KUBERNETES_API_GROUPINGS: tuple[tuple[str, str], ...] = (
    ("CoreV1Api", "Core Kubernetes resources (Pods, Services, ConfigMaps, Secrets, Namespaces, Nodes, etc.)"),
    ("AppsV1Api", "Applications API (Deployments, StatefulSets, DaemonSets, ReplicaSets)"),
    ("BatchV1Api", "Batch operations (Jobs, CronJobs)"),
    ("NetworkingV1Api", "Networking resources (Ingresses, NetworkPolicies, IngressClasses)"),
    ("RbacAuthorizationV1Api", "RBAC (Roles, RoleBindings, ClusterRoles, ClusterRoleBindings)"),
    ("StorageV1Api", "Storage resources (StorageClasses, CSIDrivers, VolumeAttachments)"),
    ("CustomObjectsApi", "Custom resources defined by CustomResourceDefinitions"),
    ("ApiextensionsV1Api", "CustomResourceDefinitions"),
    ("AutoscalingV1Api", "Autoscaling resources (HorizontalPodAutoscalers)"),
    ("PolicyV1Api", "Policy resources (PodDisruptionBudgets)"),
)


def _public_callables(api_class: type) -> tuple[str, ...]:
    return tuple(name for name, member in vars(api_class).items() if callable(member))


def introspect_groupings(client_module: ModuleType | None = None) -> list[ApiGrouping]:
    """Enumerate groupings from the installed kubernetes client.

    Args:
        client_module: Module holding the API classes. Defaults to
            ``kubernetes.client``.

    Returns:
        One grouping per API class found, in registry order.
    """
    if client_module is None:
        from kubernetes import client as client_module

    groupings: list[ApiGrouping] = []
    for grouping_id, description in KUBERNETES_API_GROUPINGS:
        api_class = getattr(client_module, grouping_id, None)
        if not isinstance(api_class, type):
            logger.warning(f"API class {grouping_id} not available in kubernetes client, skipping")
            continue
        groupings.append(
            ApiGrouping(
                grouping_id=grouping_id,
                description=description,
                method_names=_public_callables(api_class),
            )
        )

    logger.info(f"Introspected {len(groupings)} API groupings from kubernetes client")
    return groupings


def _parse_grouping(entry: Any, index: int) -> ApiGrouping:
    if not isinstance(entry, dict):
        raise RegistryError(f"Grouping #{index} must be a mapping")
    grouping_id = entry.get("id")
    if not grouping_id or not isinstance(grouping_id, str):
        raise RegistryError(f"Grouping #{index} is missing an 'id'")
    methods = entry.get("methods") or []
    if not isinstance(methods, list) or not all(isinstance(m, str) for m in methods):
        raise RegistryError(f"Grouping '{grouping_id}' must list method names as strings")
    return ApiGrouping(
        grouping_id=grouping_id,
        description=str(entry.get("description", "")),
        method_names=tuple(methods),
    )


def load_registry_file(path: Path) -> list[ApiGrouping]:
    """Load groupings from a YAML registry file.

    Raises:
        RegistryError: If the file cannot be read or is malformed.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise RegistryError(f"Cannot read registry file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise RegistryError(f"Invalid YAML in registry file {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("groupings"), list):
        raise RegistryError(f"Registry file {path} must contain a 'groupings' list")

    groupings = [_parse_grouping(entry, i) for i, entry in enumerate(data["groupings"])]
    logger.info(f"Loaded {len(groupings)} API groupings from {path}")
    return groupings


def load_groupings(registry_path: Path | None = None) -> list[ApiGrouping]:
    """Load groupings from a registry file, or the kubernetes client when none is given."""
    if registry_path is not None:
        return load_registry_file(registry_path)
    return introspect_groupings()
