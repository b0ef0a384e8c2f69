"""
Kubernetes Object Store

Reads and writes cluster objects as plain manifests through the typed
Kubernetes API clients. Every call carries a bounded request timeout.
"""

import logging
from typing import Any, Dict, NamedTuple, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException

from ..core.constants import KubernetesConstants, NetworkConstants, SandboxConstants
from ..core.exceptions import ObjectStoreError
from ..core.utils import translate_api_error

logger = logging.getLogger(__name__)

Kind = KubernetesConstants.Kind


class KindRoute(NamedTuple):
    """Where the typed client methods for one kind live"""
    api: str  # 'core' or 'rbac'
    resource: str  # method suffix, e.g. 'role_binding'
    namespaced: bool


ROUTES: Dict[str, KindRoute] = {
    Kind.NAMESPACE.value: KindRoute('core', 'namespace', False),
    Kind.RESOURCE_QUOTA.value: KindRoute('core', 'resource_quota', True),
    Kind.SECRET.value: KindRoute('core', 'secret', True),
    Kind.SERVICE_ACCOUNT.value: KindRoute('core', 'service_account', True),
    Kind.ROLE.value: KindRoute('rbac', 'role', True),
    Kind.ROLE_BINDING.value: KindRoute('rbac', 'role_binding', True),
    Kind.CLUSTER_ROLE.value: KindRoute('rbac', 'cluster_role', False),
    Kind.CLUSTER_ROLE_BINDING.value: KindRoute('rbac', 'cluster_role_binding', False),
}


def describe(kind: str, name: str, namespace: Optional[str] = None) -> str:
    if namespace:
        return f"{kind} {namespace}/{name}"
    return f"{kind} {name}"


class KubernetesObjectStore:
    """ObjectStore backed by the Kubernetes API"""

    def __init__(self, api_client: client.ApiClient, timeout: float = NetworkConstants.DEFAULT_TIMEOUT):
        """
        Initialize the object store

        Args:
            api_client: Configured Kubernetes ApiClient
            timeout: Request timeout in seconds for every call
        """
        self.api_client = api_client
        self.timeout = timeout
        self.core_api = client.CoreV1Api(api_client)
        self.rbac_api = client.RbacAuthorizationV1Api(api_client)
        self.custom_api = client.CustomObjectsApi(api_client)

    def _route(self, kind: str) -> KindRoute:
        try:
            return ROUTES[str(kind)]
        except KeyError:
            raise ObjectStoreError(f"Unsupported kind: {kind}")

    def _call(self, verb: str, kind: str, name: str, namespace: Optional[str],
              body: Optional[Dict[str, Any]] = None) -> Any:
        """Dispatch ``<verb>_[namespaced_]<resource>`` on the typed client for kind"""
        route = self._route(kind)
        api = self.core_api if route.api == 'core' else self.rbac_api
        scope = 'namespaced_' if route.namespaced else ''
        method = getattr(api, f"{verb}_{scope}{route.resource}")

        kwargs: Dict[str, Any] = {'_request_timeout': self.timeout}
        if name is not None and verb != 'create':
            kwargs['name'] = name
        if route.namespaced:
            kwargs['namespace'] = namespace
        if body is not None:
            kwargs['body'] = body

        action = describe(kind, name, namespace if route.namespaced else None)
        logger.debug(f"{verb} {action}")
        try:
            return method(**kwargs)
        except ApiException as e:
            raise translate_api_error(e, f"{verb} {action}") from e

    def _to_dict(self, obj: Any) -> Dict[str, Any]:
        if obj is None or isinstance(obj, dict):
            return obj or {}
        return self.api_client.sanitize_for_serialization(obj)

    def get(self, kind: str, name: str, namespace: Optional[str] = None) -> Dict[str, Any]:
        """Read one object as a manifest; raises ObjectNotFoundError when absent"""
        return self._to_dict(self._call('read', kind, name, namespace))

    def create(self, manifest: Dict[str, Any]) -> Dict[str, Any]:
        metadata = manifest['metadata']
        return self._to_dict(self._call('create', manifest['kind'], metadata['name'], metadata.get('namespace'), manifest))

    def replace(self, manifest: Dict[str, Any]) -> Dict[str, Any]:
        metadata = manifest['metadata']
        return self._to_dict(
            self._call('replace', manifest['kind'], metadata['name'], metadata.get('namespace'), manifest)
        )

    def patch(self, kind: str, name: str, namespace: Optional[str], body: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a strategic merge patch (the client selects it for dict bodies)"""
        return self._to_dict(self._call('patch', kind, name, namespace, body))

    def delete(self, kind: str, name: str, namespace: Optional[str] = None) -> None:
        self._call('delete', kind, name, namespace)

    def get_sandbox(self, name: str) -> Dict[str, Any]:
        """Read a cluster-scoped Sandbox custom object"""
        action = describe(SandboxConstants.KIND, name)
        try:
            return self.custom_api.get_cluster_custom_object(
                group=SandboxConstants.API_GROUP,
                version=SandboxConstants.API_VERSION,
                plural=SandboxConstants.PLURAL,
                name=name,
                _request_timeout=self.timeout,
            )
        except ApiException as e:
            raise translate_api_error(e, f"get {action}") from e
