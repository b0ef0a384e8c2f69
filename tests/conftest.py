"""
Shared fixtures: an in-memory object store standing in for the cluster API.
"""

import copy
import itertools
from typing import Any, Dict, List, Optional, Tuple

import pytest

from sandbox_operator.libs.core.config import OperatorSettings
from sandbox_operator.libs.core.constants import SandboxConstants
from sandbox_operator.libs.core.exceptions import ObjectNotFoundError, ObjectStoreError
from sandbox_operator.libs.subjects import PassthroughSubjectResolver
from sandbox_operator.libs.controller import SandboxReconciler

from test_constants import CommonTestConstants as TestConstants


def _key(kind: str, name: str, namespace: Optional[str]) -> Tuple[str, Optional[str], str]:
    return (str(kind), namespace or None, name)


def _as_stored(manifest: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of manifest as the API server persists it (empty subjects omitted)"""
    stored = copy.deepcopy(manifest)
    if stored.get('subjects') == []:
        del stored['subjects']
    return stored


def _merge_patch(target: Dict[str, Any], patch: Dict[str, Any]) -> None:
    """Strategic merge for the fields the operator patches (lists merged by name)"""
    for field, value in patch.items():
        if isinstance(value, dict) and isinstance(target.get(field), dict):
            _merge_patch(target[field], value)
        elif isinstance(value, list) and isinstance(target.get(field), list):
            names = {item.get('name') for item in target[field] if isinstance(item, dict)}
            target[field].extend(item for item in value if item.get('name') not in names)
        else:
            target[field] = copy.deepcopy(value)


class FakeObjectStore:
    """In-memory ObjectStore that behaves like the API server for the calls the operator makes"""

    def __init__(self):
        self.objects: Dict[Tuple[str, Optional[str], str], Dict[str, Any]] = {}
        self.sandboxes: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Tuple[str, str, str]] = []
        self.failures: Dict[Tuple[str, str], Exception] = {}
        self._versions = itertools.count(1)

    # Test helpers

    def add_sandbox(self, name: str, owners: Optional[List[str]] = None, size: Optional[str] = None,
                    uid: str = TestConstants.SANDBOX_UID) -> Dict[str, Any]:
        spec: Dict[str, Any] = {'owners': list(owners or [])}
        if size is not None:
            spec['size'] = size
        self.sandboxes[name] = {
            'apiVersion': f"{SandboxConstants.API_GROUP}/{SandboxConstants.API_VERSION}",
            'kind': SandboxConstants.KIND,
            'metadata': {'name': name, 'uid': uid},
            'spec': spec,
        }
        return self.sandboxes[name]

    def put(self, manifest: Dict[str, Any]) -> None:
        metadata = manifest['metadata']
        self.objects[_key(manifest['kind'], metadata['name'], metadata.get('namespace'))] = copy.deepcopy(manifest)

    def find(self, kind: str, name: str, namespace: Optional[str] = None) -> Optional[Dict[str, Any]]:
        return self.objects.get(_key(kind, name, namespace))

    def fail(self, verb: str, kind: str, error: Exception) -> None:
        self.failures[(verb, str(kind))] = error

    def writes(self) -> List[Tuple[str, str, str]]:
        return [call for call in self.calls if call[0] in ('create', 'replace', 'patch', 'delete')]

    def _record(self, verb: str, kind: str, name: str) -> None:
        self.calls.append((verb, str(kind), name))
        error = self.failures.get((verb, str(kind)))
        if error is not None:
            raise error

    def _bump(self, manifest: Dict[str, Any]) -> None:
        manifest['metadata']['resourceVersion'] = str(next(self._versions))

    # ObjectStore protocol

    def get(self, kind: str, name: str, namespace: Optional[str] = None) -> Dict[str, Any]:
        self._record('get', kind, name)
        live = self.find(kind, name, namespace)
        if live is None:
            raise ObjectNotFoundError(f"get {kind} {name}: not found")
        return copy.deepcopy(live)

    def create(self, manifest: Dict[str, Any]) -> Dict[str, Any]:
        metadata = manifest['metadata']
        self._record('create', manifest['kind'], metadata['name'])
        key = _key(manifest['kind'], metadata['name'], metadata.get('namespace'))
        if key in self.objects:
            raise ObjectStoreError(f"create {manifest['kind']} {metadata['name']}: AlreadyExists", status=409)

        stored = _as_stored(manifest)
        stored['metadata']['uid'] = f"uid-{len(self.objects) + 1}"
        self._bump(stored)
        self.objects[key] = stored

        if manifest['kind'] == 'Namespace':
            # The cluster provisions the default service account in new namespaces
            self.put({
                'apiVersion': 'v1',
                'kind': 'ServiceAccount',
                'metadata': {'name': 'default', 'namespace': metadata['name']},
            })
        return copy.deepcopy(stored)

    def replace(self, manifest: Dict[str, Any]) -> Dict[str, Any]:
        metadata = manifest['metadata']
        self._record('replace', manifest['kind'], metadata['name'])
        key = _key(manifest['kind'], metadata['name'], metadata.get('namespace'))
        if key not in self.objects:
            raise ObjectNotFoundError(f"replace {manifest['kind']} {metadata['name']}: not found")

        stored = _as_stored(manifest)
        self._bump(stored)
        self.objects[key] = stored
        return copy.deepcopy(stored)

    def patch(self, kind: str, name: str, namespace: Optional[str], body: Dict[str, Any]) -> Dict[str, Any]:
        self._record('patch', kind, name)
        live = self.find(kind, name, namespace)
        if live is None:
            raise ObjectNotFoundError(f"patch {kind} {name}: not found")
        _merge_patch(live, body)
        self._bump(live)
        return copy.deepcopy(live)

    def delete(self, kind: str, name: str, namespace: Optional[str] = None) -> None:
        self._record('delete', kind, name)
        if self.objects.pop(_key(kind, name, namespace), None) is None:
            raise ObjectNotFoundError(f"delete {kind} {name}: not found")

    def get_sandbox(self, name: str) -> Dict[str, Any]:
        self._record('get', SandboxConstants.KIND, name)
        if name not in self.sandboxes:
            raise ObjectNotFoundError(f"get Sandbox {name}: not found")
        return copy.deepcopy(self.sandboxes[name])


@pytest.fixture
def store():
    return FakeObjectStore()


@pytest.fixture
def settings():
    return OperatorSettings()


@pytest.fixture
def reconciler(store, settings):
    return SandboxReconciler(store, PassthroughSubjectResolver(), settings)
