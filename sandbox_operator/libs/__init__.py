"""
Sandbox Operator Library

Reconciles Sandbox declarations into isolated, quota-bounded namespaces
with owner RBAC.
"""

# Core libraries
from .core import ClusterAuth, ConfigManager, OperatorSettings, load_settings
from .core.exceptions import SandboxOperatorError, ReconcileError

# Resource and subject libraries
from .resources import build_bundle
from .subjects import PassthroughSubjectResolver, DirectorySubjectResolver, create_subject_resolver

# Controller libraries
from .controller import ConvergenceEngine, KubernetesObjectStore, SandboxReconciler, ReconcileResult

__all__ = [
    # Core
    'ClusterAuth',
    'ConfigManager',
    'OperatorSettings',
    'load_settings',
    'SandboxOperatorError',
    'ReconcileError',
    # Resources and subjects
    'build_bundle',
    'PassthroughSubjectResolver',
    'DirectorySubjectResolver',
    'create_subject_resolver',
    # Controller
    'ConvergenceEngine',
    'KubernetesObjectStore',
    'SandboxReconciler',
    'ReconcileResult',
]
