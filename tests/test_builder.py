"""
Resource Spec Builder tests: names, labels, quota tables and rule shapes.
"""

import pytest

from sandbox_operator.libs.core.constants import KubernetesConstants, SandboxConstants
from sandbox_operator.libs.core.models import Sandbox
from sandbox_operator.libs.resources import (
    build_bundle,
    build_cluster_role,
    build_cluster_role_binding,
    build_namespace,
    build_pull_secret,
    build_resource_quota,
    build_role,
    build_role_binding,
    build_service_account_patch,
    naming,
)

from test_constants import PullSecretTestConstants, ResourceTestConstants as TestConstants


class TestNaming:
    """Test derived object naming"""

    def test_names_for_test_sandbox(self):
        """Test every derived name of Sandbox 'test'"""
        name = TestConstants.SANDBOX_NAME
        assert naming.namespace_name(name) == TestConstants.NAMESPACE
        assert naming.resource_quota_name(name) == TestConstants.RESOURCE_QUOTA
        assert naming.role_name(name) == TestConstants.ROLE
        assert naming.role_binding_name(name) == TestConstants.ROLE_BINDING
        assert naming.cluster_role_name(name) == TestConstants.CLUSTER_ROLE
        assert naming.cluster_role_binding_name(name) == TestConstants.CLUSTER_ROLE_BINDING

    @pytest.mark.parametrize("name", ["a", "team-alpha", "x1"])
    def test_names_are_independent_of_call_order(self, name):
        """Test names depend only on the sandbox name"""
        first = [m['metadata']['name'] for m in build_bundle(Sandbox(name=name))]
        build_bundle(Sandbox(name="someone-else", owners=["z"], size="large"))
        second = [m['metadata']['name'] for m in build_bundle(Sandbox(name=name, owners=["q"]))]

        assert first == second
        assert all(n.startswith(f"sandbox-{name}") for n in first)

    def test_common_labels_are_fresh(self):
        """Test callers cannot mutate a shared label dict"""
        labels = naming.common_labels()
        labels['extra'] = 'x'
        assert 'extra' not in naming.common_labels()


class TestBundle:
    """Test the bundle as a whole"""

    def test_bundle_order_and_kinds(self):
        bundle = build_bundle(Sandbox(name=TestConstants.SANDBOX_NAME))
        assert [m['kind'] for m in bundle] == TestConstants.BUNDLE_KINDS

    def test_every_object_carries_common_labels(self):
        for manifest in build_bundle(Sandbox(name=TestConstants.SANDBOX_NAME)):
            labels = manifest['metadata']['labels']
            assert labels[KubernetesConstants.NAME_LABEL] == SandboxConstants.OPERATOR_NAME
            assert labels[KubernetesConstants.PART_OF_LABEL] == SandboxConstants.OPERATOR_NAME

    def test_scoping(self):
        """Test cluster-scoped objects have no namespace and the rest live in the sandbox namespace"""
        cluster_scoped = ['Namespace', 'ClusterRole', 'ClusterRoleBinding']
        for manifest in build_bundle(Sandbox(name=TestConstants.SANDBOX_NAME)):
            if manifest['kind'] in cluster_scoped:
                assert 'namespace' not in manifest['metadata']
            else:
                assert manifest['metadata']['namespace'] == TestConstants.NAMESPACE

    def test_builders_return_fresh_objects(self):
        sandbox = Sandbox(name=TestConstants.SANDBOX_NAME)
        first = build_resource_quota(sandbox)
        first['spec']['hard']['requests.cpu'] = "99"
        assert build_resource_quota(sandbox)['spec']['hard'] == TestConstants.SMALL_QUOTA


class TestResourceQuota:
    """Test quota table selection"""

    def test_large_quota_is_exact(self):
        quota = build_resource_quota(Sandbox(name=TestConstants.SANDBOX_NAME, size="large"))
        assert quota['spec']['hard'] == TestConstants.LARGE_QUOTA
        assert quota['metadata']['name'] == TestConstants.RESOURCE_QUOTA

    @pytest.mark.parametrize("size", ["small", "", "Large", "LARGE", "medium", "huge"])
    def test_anything_but_large_is_small(self, size):
        quota = build_resource_quota(Sandbox(name=TestConstants.SANDBOX_NAME, size=size))
        assert quota['spec']['hard'] == TestConstants.SMALL_QUOTA

    def test_absent_size_is_small(self):
        sandbox = Sandbox.from_manifest({'metadata': {'name': TestConstants.SANDBOX_NAME}, 'spec': {}})
        assert build_resource_quota(sandbox)['spec']['hard'] == TestConstants.SMALL_QUOTA


class TestRoles:
    """Test role and binding shapes"""

    def test_role_rules(self):
        role = build_role(Sandbox(name=TestConstants.SANDBOX_NAME))
        rules = role['rules']

        core_rule = rules[0]
        assert core_rule['verbs'] == ["*"]
        assert core_rule['apiGroups'] == [""]
        assert "pods" in core_rule['resources']
        assert "configmaps" in core_rule['resources']

        rbac_rule = next(r for r in rules if r['apiGroups'] == [KubernetesConstants.RBAC_API_GROUP])
        assert rbac_rule['verbs'] == ["create", "list", "get"]
        assert rbac_rule['resources'] == ["roles", "rolebindings"]

        secret_rule = rules[-1]
        assert secret_rule == {'verbs': ["create"], 'apiGroups': [""], 'resources': ["secrets"]}

    def test_role_binding_shell(self):
        binding = build_role_binding(Sandbox(name=TestConstants.SANDBOX_NAME, owners=["foo"]))
        assert binding['subjects'] == []
        assert binding['roleRef'] == {
            'apiGroup': KubernetesConstants.RBAC_API_GROUP,
            'kind': 'Role',
            'name': TestConstants.ROLE,
        }

    def test_cluster_role_is_limited_to_this_sandbox(self):
        cluster_role = build_cluster_role(Sandbox(name=TestConstants.SANDBOX_NAME))
        assert [rule['verbs'] for rule in cluster_role['rules']] == [["delete"], ["patch"]]
        for rule in cluster_role['rules']:
            assert rule['apiGroups'] == [SandboxConstants.API_GROUP]
            assert rule['resources'] == [SandboxConstants.PLURAL]
            assert rule['resourceNames'] == [TestConstants.SANDBOX_NAME]

    def test_cluster_role_binding_shell(self):
        binding = build_cluster_role_binding(Sandbox(name=TestConstants.SANDBOX_NAME))
        assert binding['subjects'] == []
        assert binding['roleRef']['kind'] == 'ClusterRole'
        assert binding['roleRef']['name'] == TestConstants.CLUSTER_ROLE

    def test_namespace(self):
        namespace = build_namespace(Sandbox(name=TestConstants.SANDBOX_NAME))
        assert namespace['apiVersion'] == "v1"
        assert namespace['metadata']['name'] == TestConstants.NAMESPACE


class TestPullSecret:
    """Test pull secret copy and service account patch"""

    def test_pull_secret_copy(self):
        secret = build_pull_secret(
            Sandbox(name=TestConstants.SANDBOX_NAME),
            PullSecretTestConstants.SECRET_NAME,
            PullSecretTestConstants.PAYLOAD,
        )
        assert secret['metadata']['name'] == PullSecretTestConstants.SECRET_NAME
        assert secret['metadata']['namespace'] == TestConstants.NAMESPACE
        assert secret['type'] == "kubernetes.io/dockerconfigjson"
        assert secret['data'] == {".dockerconfigjson": PullSecretTestConstants.PAYLOAD}

    def test_service_account_patch(self):
        assert build_service_account_patch("reg") == {'imagePullSecrets': [{'name': "reg"}]}
