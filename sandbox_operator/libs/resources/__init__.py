"""
Resource Libraries

Naming utilities and the desired-state builder for Sandbox derived objects.
"""

from . import naming
from .builder import (
    ManifestTemplates,
    BUNDLE_STEPS,
    build_bundle,
    build_namespace,
    build_resource_quota,
    build_role,
    build_role_binding,
    build_cluster_role,
    build_cluster_role_binding,
    build_pull_secret,
    build_service_account_patch,
    quota_limits,
)

__all__ = [
    'naming',
    'ManifestTemplates',
    'BUNDLE_STEPS',
    'build_bundle',
    'build_namespace',
    'build_resource_quota',
    'build_role',
    'build_role_binding',
    'build_cluster_role',
    'build_cluster_role_binding',
    'build_pull_secret',
    'build_service_account_patch',
    'quota_limits',
]
