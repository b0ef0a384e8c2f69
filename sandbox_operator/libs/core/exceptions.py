"""
Exceptions Module

Exception hierarchy for the Sandbox Operator.
"""

from typing import Optional


class SandboxOperatorError(Exception):
    """Base exception for all Sandbox Operator errors"""


class ConfigurationError(SandboxOperatorError):
    """Raised when operator configuration is missing or invalid"""


class AuthenticationError(SandboxOperatorError):
    """Raised when a cluster client cannot be obtained"""


class ObjectStoreError(SandboxOperatorError):
    """Raised when a call against the cluster object store fails"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ObjectNotFoundError(ObjectStoreError):
    """Raised when the requested object does not exist"""

    def __init__(self, message: str):
        super().__init__(message, status=404)


class OwnershipConflictError(SandboxOperatorError):
    """Raised when a live object is already controlled by a different owner"""


class DirectoryError(SandboxOperatorError):
    """Raised when the identity directory cannot be queried"""


class PullSecretError(SandboxOperatorError):
    """Raised when the configured pull secret cannot be copied"""


class ReconcileError(SandboxOperatorError):
    """
    Raised when a reconcile aborts at one of its steps.

    The hosting runtime treats this as retryable.
    """

    def __init__(self, step: str, cause: Exception):
        super().__init__(f"reconcile {step}: {cause}")
        self.step = step
        self.cause = cause
