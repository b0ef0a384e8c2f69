"""
Data Models Module

Typed data structures for the Sandbox declaration, object keys and
authorization subjects.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import KubernetesConstants, SandboxConstants


@dataclass(frozen=True)
class ObjectKey:
    """Identity of a cluster object. Cluster-scoped objects have no namespace."""
    name: str
    namespace: Optional[str] = None

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name


@dataclass(frozen=True)
class Subject:
    """RBAC subject attachable to a RoleBinding or ClusterRoleBinding"""
    name: str
    kind: str = KubernetesConstants.SubjectKind.USER.value
    api_group: str = KubernetesConstants.RBAC_API_GROUP

    def to_dict(self) -> Dict[str, str]:
        """Serialize in the cluster API wire shape"""
        return {
            'apiGroup': self.api_group,
            'kind': self.kind,
            'name': self.name,
        }


@dataclass
class Sandbox:
    """
    Sandbox declaration.

    Only the fields the operator acts on are kept. ``size`` is stored as
    declared; use ``tier`` for the effective size.
    """
    name: str
    owners: List[str] = field(default_factory=list)
    size: str = SandboxConstants.Size.SMALL.value
    uid: Optional[str] = None
    status: Dict[str, Any] = field(default_factory=dict)

    @property
    def tier(self) -> SandboxConstants.Size:
        """Effective size tier"""
        return SandboxConstants.Size.from_spec(self.size)

    @property
    def api_version(self) -> str:
        return f"{SandboxConstants.API_GROUP}/{SandboxConstants.API_VERSION}"

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> 'Sandbox':
        """
        Build a Sandbox from its custom object body

        Args:
            manifest: Custom object as returned by the cluster API

        Returns:
            Sandbox instance
        """
        metadata = manifest.get('metadata') or {}
        spec = manifest.get('spec') or {}
        return cls(
            name=metadata['name'],
            owners=list(spec.get('owners') or []),
            size=spec.get('size') or SandboxConstants.Size.SMALL.value,
            uid=metadata.get('uid'),
            status=dict(manifest.get('status') or {}),
        )
