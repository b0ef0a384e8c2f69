"""
Sandbox Operator

Kubernetes operator provisioning isolated sandbox namespaces.
"""

__version__ = "0.3.0"
__author__ = "Plex Platform Team"
