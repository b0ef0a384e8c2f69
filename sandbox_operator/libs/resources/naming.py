"""
Naming and Labeling

Derived object names are a pure function of the Sandbox name and a fixed
suffix. Every derived object carries the same label pair.
"""

from typing import Dict

from ..core.constants import KubernetesConstants, SandboxConstants


def namespace_name(sandbox_name: str) -> str:
    return f"{SandboxConstants.NAME_PREFIX}{sandbox_name}"


def derived_name(sandbox_name: str, suffix: SandboxConstants.Suffix) -> str:
    """
    Name of a derived object

    Args:
        sandbox_name: Sandbox name
        suffix: Fixed suffix for the object type

    Returns:
        e.g. ``sandbox-test-owner`` for ("test", Suffix.ROLE)
    """
    return f"{namespace_name(sandbox_name)}{suffix.value}"


def resource_quota_name(sandbox_name: str) -> str:
    return derived_name(sandbox_name, SandboxConstants.Suffix.RESOURCE_QUOTA)


def role_name(sandbox_name: str) -> str:
    return derived_name(sandbox_name, SandboxConstants.Suffix.ROLE)


def role_binding_name(sandbox_name: str) -> str:
    return derived_name(sandbox_name, SandboxConstants.Suffix.ROLE_BINDING)


def cluster_role_name(sandbox_name: str) -> str:
    return derived_name(sandbox_name, SandboxConstants.Suffix.CLUSTER_ROLE)


def cluster_role_binding_name(sandbox_name: str) -> str:
    return derived_name(sandbox_name, SandboxConstants.Suffix.CLUSTER_ROLE_BINDING)


def common_labels() -> Dict[str, str]:
    """Label pair identifying objects managed by the operator (fresh dict per call)"""
    return {
        KubernetesConstants.NAME_LABEL: SandboxConstants.OPERATOR_NAME,
        KubernetesConstants.PART_OF_LABEL: SandboxConstants.OPERATOR_NAME,
    }
