"""
Constants Module

Centralized constants for the Sandbox Operator to eliminate magic strings
and improve maintainability.
"""


class KubernetesConstants:
    """Kubernetes-related constants"""

    from enum import Enum

    DEFAULT_NAMESPACE = "default"
    DEFAULT_SERVICE_ACCOUNT = "default"

    # API Group constants
    CORE_API_GROUP = ""  # Core API group (empty string)
    APPS_API_GROUP = "apps"
    EXTENSIONS_API_GROUP = "extensions"
    AUTOSCALING_API_GROUP = "autoscaling"
    BATCH_API_GROUP = "batch"
    RBAC_API_GROUP = "rbac.authorization.k8s.io"

    CORE_API_VERSION = "v1"
    RBAC_API_VERSION = "rbac.authorization.k8s.io/v1"

    # Standard labels
    NAME_LABEL = "app.kubernetes.io/name"
    PART_OF_LABEL = "app.kubernetes.io/part-of"

    # Pull secret payload
    DOCKER_CONFIG_JSON_KEY = ".dockerconfigjson"
    DOCKER_CONFIG_JSON_TYPE = "kubernetes.io/dockerconfigjson"

    class Kind(str, Enum):
        """Object kinds the operator reads or writes"""
        NAMESPACE = "Namespace"
        RESOURCE_QUOTA = "ResourceQuota"
        ROLE = "Role"
        ROLE_BINDING = "RoleBinding"
        CLUSTER_ROLE = "ClusterRole"
        CLUSTER_ROLE_BINDING = "ClusterRoleBinding"
        SECRET = "Secret"
        SERVICE_ACCOUNT = "ServiceAccount"

        def __str__(self) -> str:
            return self.value

    class RBACVerb(str, Enum):
        """RBAC verbs used in role definitions"""
        CREATE = "create"
        GET = "get"
        LIST = "list"
        PATCH = "patch"
        DELETE = "delete"
        WILDCARD = "*"

        def __str__(self) -> str:
            """Return the verb value for use in RBAC rules"""
            return self.value

    class SubjectKind(str, Enum):
        """RBAC subject kinds"""
        USER = "User"

        def __str__(self) -> str:
            return self.value


class SandboxConstants:
    """Sandbox custom resource and derived-object naming constants"""

    from enum import Enum

    API_GROUP = "operators.plex.dev"
    API_VERSION = "v1alpha1"
    KIND = "Sandbox"
    PLURAL = "sandboxes"

    OPERATOR_NAME = "sandbox-operator"
    NAME_PREFIX = "sandbox-"

    class Suffix(str, Enum):
        """Fixed suffixes appended to the sandbox namespace name"""
        RESOURCE_QUOTA = "-resourcequota"
        ROLE = "-owner"
        ROLE_BINDING = "-owners"
        CLUSTER_ROLE = "-admin"
        CLUSTER_ROLE_BINDING = "-admins"

        def __str__(self) -> str:
            return self.value

    class Size(str, Enum):
        """Sandbox size tiers"""
        SMALL = "small"
        LARGE = "large"

        def __str__(self) -> str:
            return self.value

        @classmethod
        def from_spec(cls, value) -> 'SandboxConstants.Size':
            """Anything other than the literal 'large' is small"""
            return cls.LARGE if value == cls.LARGE.value else cls.SMALL


class QuotaConstants:
    """Hard limits for each sandbox size tier"""

    REQUESTS_CPU = "requests.cpu"
    LIMITS_CPU = "limits.cpu"
    REQUESTS_MEMORY = "requests.memory"
    LIMITS_MEMORY = "limits.memory"
    REQUESTS_STORAGE = "requests.storage"
    PERSISTENT_VOLUME_CLAIMS = "persistentvolumeclaims"

    SMALL = {
        REQUESTS_CPU: "0.25",
        LIMITS_CPU: "0.5",
        REQUESTS_MEMORY: "250Mi",
        LIMITS_MEMORY: "500Mi",
        REQUESTS_STORAGE: "10Gi",
        PERSISTENT_VOLUME_CLAIMS: "2",
    }

    LARGE = {
        REQUESTS_CPU: "1",
        LIMITS_CPU: "2",
        REQUESTS_MEMORY: "2Gi",
        LIMITS_MEMORY: "8Gi",
        REQUESTS_STORAGE: "40Gi",
        PERSISTENT_VOLUME_CLAIMS: "8",
    }


class NetworkConstants:
    """Network-related constants"""

    from enum import IntEnum

    # Timeout constants (seconds)
    DEFAULT_TIMEOUT = 30
    DIRECTORY_PROBE_TIMEOUT = 5

    USER_AGENT = "sandbox-operator/0.3"

    class HTTPStatus(IntEnum):
        """HTTP status codes the operator reacts to"""
        UNAUTHORIZED = 401
        FORBIDDEN = 403
        NOT_FOUND = 404

        def __str__(self) -> str:
            descriptions = {
                401: "Unauthorized",
                403: "Forbidden",
                404: "Not Found",
            }
            return f"{self.value} {descriptions.get(self.value, 'Unknown')}"


class DirectoryConstants:
    """Identity directory (Microsoft Graph) constants"""

    DEFAULT_GRAPH_API_URL = "https://graph.microsoft.com/v1.0"
    GRAPH_SCOPE = "https://graph.microsoft.com/.default"
    USERS_PATH = "/users"
    SELECT_FIELDS = "id,mail,userPrincipalName"

    ID_FIELD = "id"
    MAIL_FIELD = "mail"
    PRINCIPAL_NAME_FIELD = "userPrincipalName"


class ErrorMessages:
    """Centralized error message templates"""

    from enum import Enum

    class ConfigError(str, Enum):
        """Configuration-related error message templates"""
        INVALID_NUMBER = "{name} must be a positive number, got: {value}"
        INVALID_FLAG = "{name} must be a boolean, got: {value}"
        SECRET_WITHOUT_CLIENT = "AZURE_CLIENT_SECRET is set but AZURE_CLIENT_ID is missing"

        def __str__(self) -> str:
            return self.value

    class AuthError(str, Enum):
        """Cluster authentication error message templates"""
        NO_CLUSTER_CONFIG = (
            "Could not load cluster configuration.\n"
            "Tried in-cluster service account and kubeconfig.\n"
            "Original error: {error}"
        )

        def __str__(self) -> str:
            return self.value

    class DirectoryError(str, Enum):
        """Identity directory error message templates"""
        UNREACHABLE = "Identity directory is unreachable: {error}"
        QUERY_FAILED = "Directory query for '{identifier}' failed: {error}"
        TOKEN_FAILED = "Could not acquire directory access token: {error}"

        def __str__(self) -> str:
            return self.value

    class PullSecretError(str, Enum):
        """Pull secret stage error message templates"""
        MISSING_PAYLOAD = "Secret {namespace}/{name} is missing the {key} payload"

        def __str__(self) -> str:
            return self.value
