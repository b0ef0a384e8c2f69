"""
Protocols Module

Structural interfaces for the collaborators the reconciler depends on.
Concrete implementations are injected at construction time.
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence

from .models import Subject


class ObjectStore(Protocol):
    """Remote object store holding cluster objects as plain manifests"""

    def get(self, kind: str, name: str, namespace: Optional[str] = None) -> Dict[str, Any]:
        """Read one object; raises ObjectNotFoundError when absent"""
        ...

    def create(self, manifest: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def replace(self, manifest: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def patch(self, kind: str, name: str, namespace: Optional[str], body: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def delete(self, kind: str, name: str, namespace: Optional[str] = None) -> None:
        ...

    def get_sandbox(self, name: str) -> Dict[str, Any]:
        """Read a Sandbox custom object; raises ObjectNotFoundError when absent"""
        ...


class SubjectResolver(Protocol):
    """Translates owner identifiers into RBAC subjects"""

    def resolve(self, identifiers: Sequence[str]) -> List[Subject]:
        ...
