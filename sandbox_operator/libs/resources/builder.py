"""
Resource Spec Builder

Maps a Sandbox declaration to the desired manifest of every derived object.
Pure and deterministic: no I/O, a fresh dict on every call.
"""

from typing import Any, Dict, List, Optional, Tuple

from ..core.constants import KubernetesConstants, QuotaConstants, SandboxConstants
from ..core.models import Sandbox
from . import naming

Kind = KubernetesConstants.Kind
Verb = KubernetesConstants.RBACVerb


class ManifestTemplates:
    """Templates for the manifests derived from a Sandbox"""

    @staticmethod
    def metadata(name: str, namespace: Optional[str] = None) -> Dict[str, Any]:
        metadata = {
            'name': name,
            'labels': naming.common_labels(),
        }
        if namespace:
            metadata['namespace'] = namespace
        return metadata

    @staticmethod
    def policy_rule(verbs: List[str], api_groups: List[str], resources: List[str],
                    resource_names: Optional[List[str]] = None) -> Dict[str, Any]:
        """RBAC PolicyRule"""
        rule = {
            'verbs': [str(verb) for verb in verbs],
            'apiGroups': list(api_groups),
            'resources': list(resources),
        }
        if resource_names:
            rule['resourceNames'] = list(resource_names)
        return rule

    @staticmethod
    def role_ref(kind: Kind, name: str) -> Dict[str, str]:
        return {
            'apiGroup': KubernetesConstants.RBAC_API_GROUP,
            'kind': kind.value,
            'name': name,
        }


def build_namespace(sandbox: Sandbox) -> Dict[str, Any]:
    return {
        'apiVersion': KubernetesConstants.CORE_API_VERSION,
        'kind': Kind.NAMESPACE.value,
        'metadata': ManifestTemplates.metadata(naming.namespace_name(sandbox.name)),
    }


def quota_limits(size: SandboxConstants.Size) -> Dict[str, str]:
    """Hard limits for a size tier (copy of the literal table)"""
    if size == SandboxConstants.Size.LARGE:
        return dict(QuotaConstants.LARGE)
    return dict(QuotaConstants.SMALL)


def build_resource_quota(sandbox: Sandbox) -> Dict[str, Any]:
    return {
        'apiVersion': KubernetesConstants.CORE_API_VERSION,
        'kind': Kind.RESOURCE_QUOTA.value,
        'metadata': ManifestTemplates.metadata(
            naming.resource_quota_name(sandbox.name),
            naming.namespace_name(sandbox.name)
        ),
        'spec': {
            'hard': quota_limits(sandbox.tier),
        },
    }


def owner_role_rules() -> List[Dict[str, Any]]:
    """
    Rules granted to sandbox owners inside their namespace

    All verbs on workload, networking and config primitives, self-service
    RBAC limited to create/list/get, and secret creation.
    """
    rule = ManifestTemplates.policy_rule
    return [
        rule([Verb.WILDCARD], [KubernetesConstants.CORE_API_GROUP], [
            "pods",
            "pods/log",
            "pods/portforward",
            "services",
            "services/finalizers",
            "endpoints",
            "persistentvolumeclaims",
            "events",
            "configmaps",
            "replicationcontrollers",
        ]),
        rule([Verb.WILDCARD], [KubernetesConstants.APPS_API_GROUP, KubernetesConstants.EXTENSIONS_API_GROUP], [
            "deployments",
            "daemonsets",
            "replicasets",
            "statefulsets",
        ]),
        rule([Verb.WILDCARD], [KubernetesConstants.AUTOSCALING_API_GROUP], ["horizontalpodautoscalers"]),
        rule([Verb.WILDCARD], [KubernetesConstants.BATCH_API_GROUP], ["jobs", "cronjobs"]),
        rule([Verb.CREATE, Verb.LIST, Verb.GET], [KubernetesConstants.RBAC_API_GROUP], ["roles", "rolebindings"]),
        rule([Verb.CREATE], [KubernetesConstants.CORE_API_GROUP], ["secrets"]),
    ]


def build_role(sandbox: Sandbox) -> Dict[str, Any]:
    return {
        'apiVersion': KubernetesConstants.RBAC_API_VERSION,
        'kind': Kind.ROLE.value,
        'metadata': ManifestTemplates.metadata(
            naming.role_name(sandbox.name),
            naming.namespace_name(sandbox.name)
        ),
        'rules': owner_role_rules(),
    }


def build_role_binding(sandbox: Sandbox) -> Dict[str, Any]:
    """RoleBinding shell; subjects are filled in during convergence"""
    return {
        'apiVersion': KubernetesConstants.RBAC_API_VERSION,
        'kind': Kind.ROLE_BINDING.value,
        'metadata': ManifestTemplates.metadata(
            naming.role_binding_name(sandbox.name),
            naming.namespace_name(sandbox.name)
        ),
        'roleRef': ManifestTemplates.role_ref(Kind.ROLE, naming.role_name(sandbox.name)),
        'subjects': [],
    }


def build_cluster_role(sandbox: Sandbox) -> Dict[str, Any]:
    """Lets owners delete or patch this one Sandbox and nothing else"""
    rule = ManifestTemplates.policy_rule
    return {
        'apiVersion': KubernetesConstants.RBAC_API_VERSION,
        'kind': Kind.CLUSTER_ROLE.value,
        'metadata': ManifestTemplates.metadata(naming.cluster_role_name(sandbox.name)),
        'rules': [
            rule([Verb.DELETE], [SandboxConstants.API_GROUP], [SandboxConstants.PLURAL], [sandbox.name]),
            rule([Verb.PATCH], [SandboxConstants.API_GROUP], [SandboxConstants.PLURAL], [sandbox.name]),
        ],
    }


def build_cluster_role_binding(sandbox: Sandbox) -> Dict[str, Any]:
    """ClusterRoleBinding shell; subjects are filled in during convergence"""
    return {
        'apiVersion': KubernetesConstants.RBAC_API_VERSION,
        'kind': Kind.CLUSTER_ROLE_BINDING.value,
        'metadata': ManifestTemplates.metadata(naming.cluster_role_binding_name(sandbox.name)),
        'roleRef': ManifestTemplates.role_ref(Kind.CLUSTER_ROLE, naming.cluster_role_name(sandbox.name)),
        'subjects': [],
    }


def build_pull_secret(sandbox: Sandbox, secret_name: str, payload: str) -> Dict[str, Any]:
    """
    Copy of the configured pull secret inside the sandbox namespace

    Args:
        sandbox: Sandbox declaration
        secret_name: Name of the configured pull secret (kept in the copy)
        payload: Base64-encoded docker config, copied verbatim

    Returns:
        Secret manifest
    """
    return {
        'apiVersion': KubernetesConstants.CORE_API_VERSION,
        'kind': Kind.SECRET.value,
        'metadata': ManifestTemplates.metadata(secret_name, naming.namespace_name(sandbox.name)),
        'type': KubernetesConstants.DOCKER_CONFIG_JSON_TYPE,
        'data': {
            KubernetesConstants.DOCKER_CONFIG_JSON_KEY: payload,
        },
    }


def build_service_account_patch(secret_name: str) -> Dict[str, Any]:
    """Merge patch adding the pull secret to the default service account"""
    return {
        'imagePullSecrets': [
            {'name': secret_name},
        ],
    }


# Convergence order of the bundle that is always present
BUNDLE_STEPS: Tuple[Tuple[Kind, Any], ...] = (
    (Kind.NAMESPACE, build_namespace),
    (Kind.RESOURCE_QUOTA, build_resource_quota),
    (Kind.ROLE, build_role),
    (Kind.ROLE_BINDING, build_role_binding),
    (Kind.CLUSTER_ROLE, build_cluster_role),
    (Kind.CLUSTER_ROLE_BINDING, build_cluster_role_binding),
)


def build_bundle(sandbox: Sandbox) -> List[Dict[str, Any]]:
    """
    Desired manifests for the fixed bundle, in convergence order

    Args:
        sandbox: Sandbox declaration

    Returns:
        Namespace, ResourceQuota, Role, RoleBinding, ClusterRole, ClusterRoleBinding
    """
    return [build(sandbox) for _, build in BUNDLE_STEPS]
