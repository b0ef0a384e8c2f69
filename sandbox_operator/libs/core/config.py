"""
Configuration Management

Loads operator settings from the process environment once at start-up.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from decouple import config, UndefinedValueError

from .constants import DirectoryConstants, ErrorMessages, KubernetesConstants, NetworkConstants
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperatorSettings:
    """Immutable operator settings, threaded explicitly to every consumer"""
    azure_tenant_id: Optional[str] = None
    azure_client_id: Optional[str] = None
    azure_client_secret: Optional[str] = None
    graph_api_url: str = DirectoryConstants.DEFAULT_GRAPH_API_URL
    pull_secret_name: Optional[str] = None
    pull_secret_namespace: str = KubernetesConstants.DEFAULT_NAMESPACE
    request_timeout: float = NetworkConstants.DEFAULT_TIMEOUT
    directory_probe_timeout: float = NetworkConstants.DIRECTORY_PROBE_TIMEOUT
    explicit_cleanup: bool = False
    worker_limit: int = 10
    skip_tls: bool = False
    debug: bool = False

    @property
    def directory_enabled(self) -> bool:
        """Directory-backed subject resolution is selected by the tenant id"""
        return bool(self.azure_tenant_id)

    @property
    def pull_secret_enabled(self) -> bool:
        return bool(self.pull_secret_name)


class ConfigManager:
    """Reads OperatorSettings from environment variables"""

    def __init__(self, source: Callable[..., Any] = config):
        """
        Initialize configuration manager

        Args:
            source: python-decouple style lookup (defaults to ``decouple.config``)
        """
        self.source = source

    def load(self) -> OperatorSettings:
        """
        Load and validate settings

        Returns:
            OperatorSettings

        Raises:
            ConfigurationError: If a value is present but invalid
        """
        client_id = self._optional('AZURE_CLIENT_ID')
        client_secret = self._optional('AZURE_CLIENT_SECRET')
        if client_secret and not client_id:
            raise ConfigurationError(ErrorMessages.ConfigError.SECRET_WITHOUT_CLIENT.value)

        settings = OperatorSettings(
            azure_tenant_id=self._optional('AZURE_TENANT_ID'),
            azure_client_id=client_id,
            azure_client_secret=client_secret,
            graph_api_url=(self._optional('GRAPH_API_URL') or DirectoryConstants.DEFAULT_GRAPH_API_URL).rstrip('/'),
            pull_secret_name=self._optional('PULL_SECRET_NAME'),
            pull_secret_namespace=self._optional('PULL_SECRET_NAMESPACE') or KubernetesConstants.DEFAULT_NAMESPACE,
            request_timeout=self._positive_number('REQUEST_TIMEOUT', NetworkConstants.DEFAULT_TIMEOUT),
            directory_probe_timeout=self._positive_number('DIRECTORY_PROBE_TIMEOUT', NetworkConstants.DIRECTORY_PROBE_TIMEOUT),
            explicit_cleanup=self._flag('EXPLICIT_CLEANUP'),
            worker_limit=int(self._positive_number('WORKER_LIMIT', 10)),
            skip_tls=self._flag('SKIP_TLS'),
            debug=self._flag('DEBUG'),
        )

        logger.debug(
            f"Loaded settings: directory={settings.directory_enabled}, "
            f"pull_secret={settings.pull_secret_enabled}, explicit_cleanup={settings.explicit_cleanup}"
        )
        return settings

    def _optional(self, name: str) -> Optional[str]:
        """Return a stripped value, or None when unset or blank"""
        try:
            value = self.source(name)
        except UndefinedValueError:
            return None
        value = str(value).strip()
        return value or None

    def _positive_number(self, name: str, default: float) -> float:
        raw = self._optional(name)
        if raw is None:
            return default
        try:
            value = float(raw)
        except ValueError:
            raise ConfigurationError(ErrorMessages.ConfigError.INVALID_NUMBER.format(name=name, value=raw))
        if value <= 0:
            raise ConfigurationError(ErrorMessages.ConfigError.INVALID_NUMBER.format(name=name, value=raw))
        return value

    def _flag(self, name: str) -> bool:
        raw = self._optional(name)
        if raw is None:
            return False
        lowered = raw.lower()
        if lowered in ('1', 'true', 'yes', 'on'):
            return True
        if lowered in ('0', 'false', 'no', 'off'):
            return False
        raise ConfigurationError(ErrorMessages.ConfigError.INVALID_FLAG.format(name=name, value=raw))


def load_settings() -> OperatorSettings:
    """Load settings from the process environment"""
    return ConfigManager().load()
