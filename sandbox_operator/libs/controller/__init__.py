"""
Controller Libraries

Object store access, convergence protocol and the Sandbox reconciler.
"""

from .convergence import ConvergenceEngine, OperationResult, owner_reference, set_controller_reference
from .reconciler import ReconcileResult, SandboxReconciler
from .store import KubernetesObjectStore

__all__ = [
    'ConvergenceEngine',
    'OperationResult',
    'owner_reference',
    'set_controller_reference',
    'ReconcileResult',
    'SandboxReconciler',
    'KubernetesObjectStore',
]
