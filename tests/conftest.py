"""Shared pytest fixtures for discovery tests."""

from pathlib import Path

import pytest

from kube_discovery_mcp.domains.methods.extractor import MethodExtractor
from kube_discovery_mcp.domains.methods.models import ApiGrouping, MethodRecord
from kube_discovery_mcp.domains.search.index import SearchIndex


@pytest.fixture
def api_groupings() -> list[ApiGrouping]:
    """A small slice of the kubernetes client API classes."""
    return [
        ApiGrouping(
            grouping_id="CoreV1Api",
            description="Core Kubernetes resources (Pods, Services, ConfigMaps, Secrets, Namespaces, Nodes)",
            method_names=(
                "__init__",
                "_private_helper",
                "set_default_authentication",
                "list_namespaced_pod",
                "list_namespaced_pod_with_http_info",
                "list_pod_for_all_namespaces",
                "read_namespaced_pod",
                "create_namespaced_pod",
                "delete_namespaced_pod",
                "patch_namespaced_pod",
                "replace_namespaced_pod",
                "delete_collection_namespaced_pod",
                "read_namespaced_pod_log",
                "create_namespaced_pod_eviction",
                "connect_get_namespaced_pod_exec",
                "list_namespaced_pod_template",
                "list_namespaced_service",
                "read_namespaced_service",
                "list_namespaced_config_map",
                "list_namespace",
                "read_namespace",
                "create_namespace",
                "list_node",
                "read_node",
            ),
        ),
        ApiGrouping(
            grouping_id="AppsV1Api",
            description="Applications API (Deployments, StatefulSets, DaemonSets, ReplicaSets)",
            method_names=(
                "list_namespaced_deployment",
                "list_deployment_for_all_namespaces",
                "read_namespaced_deployment",
                "create_namespaced_deployment",
                "delete_namespaced_deployment",
                "patch_namespaced_deployment",
                "read_namespaced_deployment_scale",
                "list_namespaced_stateful_set",
            ),
        ),
        ApiGrouping(
            grouping_id="PolicyV1Api",
            description="Policy resources (PodDisruptionBudgets)",
            method_names=(
                "list_namespaced_pod_disruption_budget",
                "read_namespaced_pod_disruption_budget",
            ),
        ),
        ApiGrouping(
            grouping_id="CustomObjectsApi",
            description="Custom resources defined by CustomResourceDefinitions",
            method_names=(
                "list_namespaced_custom_object",
                "list_cluster_custom_object",
                "get_namespaced_custom_object",
                "create_namespaced_custom_object",
                "delete_namespaced_custom_object",
                "patch_namespaced_custom_object",
                "replace_cluster_custom_object",
                "delete_collection_namespaced_custom_object",
                "get_api_resources",
            ),
        ),
    ]


@pytest.fixture
def method_records(api_groupings: list[ApiGrouping]) -> list[MethodRecord]:
    """Records extracted from the sample groupings."""
    return MethodExtractor(api_groupings).extract()


@pytest.fixture
def search_index(method_records: list[MethodRecord]) -> SearchIndex:
    """Search index over the sample records."""
    return SearchIndex.build(method_records)


DECLARATIONS: dict[str, str] = {
    "V1Deployment": """
/**
 * Deployment enables declarative updates for Pods and ReplicaSets.
 */
export declare class V1Deployment {
    /**
     * APIVersion defines the versioned schema of this representation of an object.
     */
    'apiVersion'?: string;
    'kind'?: string;
    'metadata'?: V1ObjectMeta;
    'spec'?: V1DeploymentSpec;
    'status'?: V1DeploymentStatus;
    static readonly discriminator: string | undefined;
    static readonly mapping: {[index: string]: string} | undefined;
    static readonly attributeTypeMap: Array<{
        "name": string,
        "baseName": string,
        "type": string,
        "format": string
    }>;
    static getAttributeTypeMap(): {
        name: string;
        baseName: string;
        type: string;
        format: string;
    }[];
    constructor();
}
""",
    "V1DeploymentSpec": """
/**
 * DeploymentSpec is the specification of the desired behavior of the Deployment.
 */
export declare class V1DeploymentSpec {
    /**
     * Number of desired pods.
     */
    'replicas'?: number;
    'selector': V1LabelSelector;
    'template': V1PodTemplateSpec;
    'strategy'?: V1DeploymentStrategy;
    'paused'?: boolean;
}
""",
    "V1PodTemplateSpec": """
export declare class V1PodTemplateSpec {
    'metadata'?: V1ObjectMeta;
    'spec'?: V1PodSpec;
}
""",
    "V1PodSpec": """
export declare class V1PodSpec {
    'containers': Array<V1Container>;
    'initContainers'?: V1Container[];
    'affinity'?: V1Affinity;
    'nodeSelector'?: { [key: string]: string; };
    'restartPolicy'?: string;
    'securityContext'?: V1PodSecurityContext | null;
}
""",
    "V1Container": """
export declare class V1Container {
    'name': string;
    'image'?: string;
    'ports'?: Array<V1ContainerPort>;
    'livenessProbe'?: V1Probe;
}
""",
    "V1ObjectMeta": """
export declare class V1ObjectMeta {
    'name'?: string;
    'namespace'?: string;
    'labels'?: { [key: string]: string; };
}
""",
    "V1Affinity": """
export declare class V1Affinity {
    'nodeAffinity'?: V1NodeAffinity;
}
""",
    "V1LabelSelector": """
export declare class V1LabelSelector {
    'matchLabels'?: { [key: string]: string; };
}
""",
    "TreeNode": """
export interface TreeNode {
    name: string;
    children?: Array<TreeNode>;
    parent?: TreeNode | undefined;
}
""",
    "AlphaNode": """
export interface AlphaNode {
    beta?: BetaNode;
}
""",
    "BetaNode": """
export interface BetaNode {
    alpha?: AlphaNode;
}
""",
    "Level1": "export interface Level1 { next: Level2; }\n",
    "Level2": "export interface Level2 { next: Level3; }\n",
    "Level3": "export interface Level3 { next: Level4; }\n",
    "Level4": "export interface Level4 { next: Level5; }\n",
    "Level5": "export interface Level5 { value: string; }\n",
    "WideType": "export interface WideType {\n"
    + "".join(f"    field{i}: string;\n" for i in range(25))
    + "}\n",
    "Broken": "export class Broken {\n    name: string;\n",
    "Mislabeled": "export class SomethingElse {\n    name: string;\n}\n",
}


@pytest.fixture
def declarations_dir(tmp_path: Path) -> Path:
    """A directory of ``<TypeName>.d.ts`` declaration files."""
    root = tmp_path / "declarations"
    root.mkdir()
    for name, text in DECLARATIONS.items():
        (root / f"{name}.d.ts").write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def declaration_texts() -> dict[str, str]:
    """Declaration text keyed by type name."""
    return dict(DECLARATIONS)
