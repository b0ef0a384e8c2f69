"""
Core Libraries

Shared functionality and utilities for the Sandbox Operator.
"""

from .auth import ClusterAuth
from .config import ConfigManager, OperatorSettings, load_settings
from .exceptions import (
    SandboxOperatorError,
    ConfigurationError,
    AuthenticationError,
    ObjectStoreError,
    ObjectNotFoundError,
    OwnershipConflictError,
    DirectoryError,
    PullSecretError,
    ReconcileError,
)
from .models import ObjectKey, Sandbox, Subject
from .utils import setup_logging, disable_ssl_warnings

__all__ = [
    'ClusterAuth',
    'ConfigManager',
    'OperatorSettings',
    'load_settings',
    'SandboxOperatorError',
    'ConfigurationError',
    'AuthenticationError',
    'ObjectStoreError',
    'ObjectNotFoundError',
    'OwnershipConflictError',
    'DirectoryError',
    'PullSecretError',
    'ReconcileError',
    'ObjectKey',
    'Sandbox',
    'Subject',
    'setup_logging',
    'disable_ssl_warnings',
]
