"""
Authentication Module

Obtains a Kubernetes API client from in-cluster configuration or kubeconfig.
"""

import logging
from typing import Optional

from kubernetes import client, config

from .constants import ErrorMessages
from .exceptions import AuthenticationError
from .utils import disable_ssl_warnings

logger = logging.getLogger(__name__)


class ClusterAuth:
    """Handles cluster authentication and API client construction"""

    def __init__(self, skip_tls: bool = False):
        """
        Initialize cluster authentication handler

        Args:
            skip_tls: Whether to skip TLS verification of the API server
        """
        self.skip_tls = skip_tls
        self.k8s_client: Optional[client.ApiClient] = None
        self.source: Optional[str] = None

    def configure_auth(self, kubeconfig: Optional[str] = None, context: Optional[str] = None) -> client.ApiClient:
        """
        Load cluster configuration and build an API client

        The in-cluster service account is tried first, then kubeconfig.
        An explicit kubeconfig path skips the in-cluster attempt.

        Args:
            kubeconfig: Path to a kubeconfig file (optional)
            context: Kubeconfig context name (optional)

        Returns:
            Configured ApiClient

        Raises:
            AuthenticationError: If no configuration source works
        """
        configuration = client.Configuration()

        try:
            if kubeconfig:
                config.load_kube_config(config_file=kubeconfig, context=context,
                                        client_configuration=configuration)
                self.source = "kubeconfig"
            else:
                try:
                    config.load_incluster_config(client_configuration=configuration)
                    self.source = "in-cluster"
                except config.ConfigException as incluster_error:
                    logger.debug(f"In-cluster config not available: {incluster_error}")
                    config.load_kube_config(context=context, client_configuration=configuration)
                    self.source = "kubeconfig"
        except Exception as e:
            raise AuthenticationError(ErrorMessages.AuthError.NO_CLUSTER_CONFIG.format(error=e))

        if self.skip_tls:
            configuration.verify_ssl = False
            configuration.ssl_ca_cert = None
            disable_ssl_warnings()

        self.k8s_client = client.ApiClient(configuration)
        logger.info(f"Loaded cluster configuration from {self.source}")
        return self.k8s_client
