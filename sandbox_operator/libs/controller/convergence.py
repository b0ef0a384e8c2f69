"""
Convergence Engine

Create-or-update protocol driving one live object towards its desired
manifest, with a controller owner reference back to the Sandbox so the
cluster garbage collector can cascade deletes.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..core.constants import SandboxConstants
from ..core.exceptions import ObjectNotFoundError, OwnershipConflictError
from ..core.models import Sandbox
from ..core.protocols import ObjectStore
from ..core.utils import deep_copy, merged_labels

logger = logging.getLogger(__name__)

Mutation = Callable[[Dict[str, Any]], None]


class OperationResult(str, Enum):
    """Outcome of converging one object"""
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"

    def __str__(self) -> str:
        return self.value


def object_label(manifest: Dict[str, Any]) -> str:
    """Human readable 'Kind ns/name' for log lines"""
    metadata = manifest.get('metadata') or {}
    namespace = metadata.get('namespace')
    name = metadata.get('name')
    return f"{manifest.get('kind')} {namespace}/{name}" if namespace else f"{manifest.get('kind')} {name}"


def _api_group(api_version: str) -> str:
    return api_version.split('/', 1)[0] if '/' in api_version else ''


def owner_reference(owner: Sandbox) -> Dict[str, Any]:
    """Controller owner reference pointing at a Sandbox"""
    reference = {
        'apiVersion': owner.api_version,
        'kind': SandboxConstants.KIND,
        'name': owner.name,
        'controller': True,
        'blockOwnerDeletion': True,
    }
    if owner.uid:
        reference['uid'] = owner.uid
    return reference


def _same_owner(reference: Dict[str, Any], wanted: Dict[str, Any]) -> bool:
    return (
        _api_group(reference.get('apiVersion', '')) == _api_group(wanted['apiVersion'])
        and reference.get('kind') == wanted['kind']
        and reference.get('name') == wanted['name']
    )


def set_controller_reference(owner: Sandbox, manifest: Dict[str, Any]) -> None:
    """
    Make owner the controller of manifest, in place

    An existing reference to the same owner is replaced, otherwise one is
    appended.

    Args:
        owner: Sandbox that controls the object
        manifest: Object manifest to modify

    Raises:
        OwnershipConflictError: If a different controller already owns the object
    """
    wanted = owner_reference(owner)
    metadata = manifest.setdefault('metadata', {})
    references: List[Dict[str, Any]] = list(metadata.get('ownerReferences') or [])

    for reference in references:
        if reference.get('controller') and not _same_owner(reference, wanted):
            raise OwnershipConflictError(
                f"{object_label(manifest)} is already controlled by "
                f"{reference.get('kind')} {reference.get('name')}"
            )

    for index, reference in enumerate(references):
        if _same_owner(reference, wanted):
            references[index] = wanted
            break
    else:
        references.append(wanted)

    metadata['ownerReferences'] = references


class ConvergenceEngine:
    """Idempotent create-or-update against an ObjectStore"""

    def __init__(self, store: ObjectStore):
        self.store = store

    def converge(self, desired: Dict[str, Any], owner: Sandbox,
                 mutate: Optional[Mutation] = None) -> OperationResult:
        """
        Drive the live object towards desired

        Args:
            desired: Desired manifest from the resource builder
            owner: Sandbox that will control the object
            mutate: Optional in-place mutation applied after the desired fields

        Returns:
            OperationResult for the object

        Raises:
            ObjectStoreError: If a store call fails
            OwnershipConflictError: If the live object has another controller
        """
        metadata = desired['metadata']
        kind = desired['kind']

        try:
            live = self.store.get(kind, metadata['name'], metadata.get('namespace'))
        except ObjectNotFoundError:
            live = None

        if live is None:
            manifest = deep_copy(desired)
            if mutate:
                mutate(manifest)
            set_controller_reference(owner, manifest)
            self.store.create(manifest)
            logger.info(f"{object_label(manifest)} {OperationResult.CREATED}")
            return OperationResult.CREATED

        manifest = deep_copy(live)
        for field, value in desired.items():
            if field == 'metadata':
                continue
            manifest[field] = deep_copy(value) if isinstance(value, (dict, list)) else value

        live_metadata = manifest.setdefault('metadata', {})
        live_metadata['labels'] = merged_labels(live_metadata.get('labels'), metadata.get('labels'))

        if mutate:
            mutate(manifest)
        set_controller_reference(owner, manifest)

        if manifest == live:
            logger.info(f"{object_label(manifest)} {OperationResult.UNCHANGED}")
            return OperationResult.UNCHANGED

        self.store.replace(manifest)
        logger.info(f"{object_label(manifest)} {OperationResult.UPDATED}")
        return OperationResult.UPDATED

    def patch(self, kind: str, name: str, namespace: Optional[str], body: Dict[str, Any]) -> OperationResult:
        """Apply a merge patch to an existing object"""
        self.store.patch(kind, name, namespace, body)
        logger.info(f"{kind} {namespace}/{name} patched" if namespace else f"{kind} {name} patched")
        return OperationResult.UPDATED

    def remove(self, manifest: Dict[str, Any]) -> bool:
        """
        Delete one object, treating not-found as success

        Returns:
            True if the object was deleted, False if it was already gone
        """
        metadata = manifest['metadata']
        try:
            self.store.delete(manifest['kind'], metadata['name'], metadata.get('namespace'))
        except ObjectNotFoundError:
            logger.debug(f"{object_label(manifest)} already gone")
            return False
        logger.info(f"{object_label(manifest)} deleted")
        return True
