"""
Subject Resolution Libraries

Owner identifier to RBAC subject resolvers. The variant is chosen once at
start-up by ``create_subject_resolver`` and injected into the reconciler.
"""

import logging
from typing import Optional

import requests

from ..core.config import OperatorSettings
from ..core.protocols import SubjectResolver
from .directory import DirectorySubjectResolver, GraphDirectoryClient
from .passthrough import PassthroughSubjectResolver

logger = logging.getLogger(__name__)


def create_directory_credential(settings: OperatorSettings):
    """
    Build the azure-identity credential for the directory

    A client id with a secret selects a client-secret credential; anything
    else falls back to the default credential chain (environment, workload
    identity, managed identity). Token requests are bounded by the directory
    probe timeout so the start-up probe stays short end to end.
    """
    from azure.identity import ClientSecretCredential, DefaultAzureCredential

    transport_timeouts = {
        'connection_timeout': settings.directory_probe_timeout,
        'read_timeout': settings.directory_probe_timeout,
    }
    if settings.azure_client_id and settings.azure_client_secret:
        return ClientSecretCredential(
            tenant_id=settings.azure_tenant_id,
            client_id=settings.azure_client_id,
            client_secret=settings.azure_client_secret,
            **transport_timeouts,
        )
    return DefaultAzureCredential(exclude_interactive_browser_credential=True, **transport_timeouts)


def create_subject_resolver(settings: OperatorSettings, credential=None,
                            session: Optional[requests.Session] = None) -> SubjectResolver:
    """
    Select the subject resolver for this process

    Args:
        settings: Operator settings; a tenant id selects the directory variant
        credential: Optional pre-built directory credential
        session: Optional requests session for the directory client

    Returns:
        PassthroughSubjectResolver or DirectorySubjectResolver

    Raises:
        DirectoryError: If the directory is configured but unreachable
    """
    if not settings.directory_enabled:
        logger.info("No directory tenant configured, owners are used as subjects verbatim")
        return PassthroughSubjectResolver()

    directory = GraphDirectoryClient(
        credential=credential or create_directory_credential(settings),
        base_url=settings.graph_api_url,
        timeout=settings.request_timeout,
        session=session,
    )
    directory.probe(timeout=settings.directory_probe_timeout)

    logger.info(f"Resolving owners through the identity directory of tenant {settings.azure_tenant_id}")
    return DirectorySubjectResolver(directory)


__all__ = [
    'PassthroughSubjectResolver',
    'DirectorySubjectResolver',
    'GraphDirectoryClient',
    'create_directory_credential',
    'create_subject_resolver',
]
