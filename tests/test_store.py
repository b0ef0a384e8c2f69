"""
Kubernetes object store tests: kind dispatch and API error mapping.
"""

from unittest.mock import Mock, patch

import pytest
from kubernetes.client.rest import ApiException

from sandbox_operator.libs.controller.store import KubernetesObjectStore
from sandbox_operator.libs.core.exceptions import ObjectNotFoundError, ObjectStoreError
from sandbox_operator.libs.core.models import Sandbox
from sandbox_operator.libs.core.utils import translate_api_error
from sandbox_operator.libs.resources import build_cluster_role, build_role_binding

from test_constants import ResourceTestConstants as TestConstants


@pytest.fixture
def api_client():
    api_client = Mock()
    api_client.sanitize_for_serialization.side_effect = lambda obj: {'converted': obj}
    return api_client


@pytest.fixture
def object_store(api_client):
    with patch('sandbox_operator.libs.controller.store.client') as mock_client:
        mock_client.CoreV1Api.return_value = Mock()
        mock_client.RbacAuthorizationV1Api.return_value = Mock()
        mock_client.CustomObjectsApi.return_value = Mock()
        yield KubernetesObjectStore(api_client, timeout=TestConstants.DEFAULT_TIMEOUT)


class TestDispatch:
    """Test typed client method selection"""

    def test_get_namespaced_core_object(self, object_store, api_client):
        model = Mock()
        object_store.core_api.read_namespaced_resource_quota.return_value = model

        result = object_store.get('ResourceQuota', TestConstants.RESOURCE_QUOTA, TestConstants.NAMESPACE)

        object_store.core_api.read_namespaced_resource_quota.assert_called_once_with(
            name=TestConstants.RESOURCE_QUOTA,
            namespace=TestConstants.NAMESPACE,
            _request_timeout=TestConstants.DEFAULT_TIMEOUT,
        )
        assert result == {'converted': model}

    def test_get_cluster_scoped_core_object(self, object_store):
        object_store.get('Namespace', TestConstants.NAMESPACE)

        object_store.core_api.read_namespace.assert_called_once_with(
            name=TestConstants.NAMESPACE,
            _request_timeout=TestConstants.DEFAULT_TIMEOUT,
        )

    def test_create_cluster_role(self, object_store):
        manifest = build_cluster_role(Sandbox(name=TestConstants.SANDBOX_NAME))

        object_store.create(manifest)

        object_store.rbac_api.create_cluster_role.assert_called_once_with(
            body=manifest,
            _request_timeout=TestConstants.DEFAULT_TIMEOUT,
        )

    def test_replace_role_binding(self, object_store):
        manifest = build_role_binding(Sandbox(name=TestConstants.SANDBOX_NAME))

        object_store.replace(manifest)

        object_store.rbac_api.replace_namespaced_role_binding.assert_called_once_with(
            name=TestConstants.ROLE_BINDING,
            namespace=TestConstants.NAMESPACE,
            body=manifest,
            _request_timeout=TestConstants.DEFAULT_TIMEOUT,
        )

    def test_patch_service_account(self, object_store):
        body = {'imagePullSecrets': [{'name': 'reg'}]}

        object_store.patch('ServiceAccount', 'default', TestConstants.NAMESPACE, body)

        object_store.core_api.patch_namespaced_service_account.assert_called_once_with(
            name='default',
            namespace=TestConstants.NAMESPACE,
            body=body,
            _request_timeout=TestConstants.DEFAULT_TIMEOUT,
        )

    def test_delete_cluster_role_binding(self, object_store):
        object_store.delete('ClusterRoleBinding', TestConstants.CLUSTER_ROLE_BINDING)

        object_store.rbac_api.delete_cluster_role_binding.assert_called_once_with(
            name=TestConstants.CLUSTER_ROLE_BINDING,
            _request_timeout=TestConstants.DEFAULT_TIMEOUT,
        )

    def test_get_sandbox(self, object_store):
        object_store.custom_api.get_cluster_custom_object.return_value = {'metadata': {'name': 'test'}}

        assert object_store.get_sandbox('test') == {'metadata': {'name': 'test'}}

        object_store.custom_api.get_cluster_custom_object.assert_called_once_with(
            group="operators.plex.dev",
            version="v1alpha1",
            plural="sandboxes",
            name='test',
            _request_timeout=TestConstants.DEFAULT_TIMEOUT,
        )

    def test_unsupported_kind(self, object_store):
        with pytest.raises(ObjectStoreError):
            object_store.get('Deployment', 'x', 'ns')


class TestErrorMapping:
    """Test ApiException translation"""

    def test_not_found(self, object_store):
        object_store.core_api.read_namespace.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(ObjectNotFoundError) as exc_info:
            object_store.get('Namespace', TestConstants.NAMESPACE)

        assert exc_info.value.status == 404

    def test_sandbox_not_found(self, object_store):
        object_store.custom_api.get_cluster_custom_object.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(ObjectNotFoundError):
            object_store.get_sandbox('gone')

    def test_forbidden(self):
        error = translate_api_error(ApiException(status=403, reason="Forbidden"), "create Role ns/x")

        assert not isinstance(error, ObjectNotFoundError)
        assert error.status == 403
        assert "403 Forbidden" in str(error)
        assert "permissions" in str(error)

    def test_server_error(self, object_store):
        manifest = {'kind': 'Role', 'metadata': {'name': 'x', 'namespace': 'ns'}}
        object_store.rbac_api.create_namespaced_role.side_effect = ApiException(
            status=500, reason="Internal Server Error"
        )

        with pytest.raises(ObjectStoreError) as exc_info:
            object_store.create(manifest)

        assert exc_info.value.status == 500
        assert "create Role ns/x" in str(exc_info.value)
