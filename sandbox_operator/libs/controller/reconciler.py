"""
Sandbox Reconciler

Converges the derived bundle of one Sandbox in a fixed order, aborting at
the first failing step. Holds no state between calls: a retried reconcile
starts from scratch and converges whatever is still missing.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from ..core.config import OperatorSettings
from ..core.constants import ErrorMessages, KubernetesConstants, SandboxConstants
from ..core.exceptions import ObjectNotFoundError, PullSecretError, ReconcileError, SandboxOperatorError
from ..core.models import ObjectKey, Sandbox
from ..core.protocols import ObjectStore, SubjectResolver
from ..resources import BUNDLE_STEPS, build_bundle, build_pull_secret, build_service_account_patch, naming
from .convergence import ConvergenceEngine, OperationResult

logger = logging.getLogger(__name__)

Kind = KubernetesConstants.Kind

# Binding kinds whose subjects come from the owner resolver
SUBJECT_KINDS = (Kind.ROLE_BINDING, Kind.CLUSTER_ROLE_BINDING)


@dataclass
class ReconcileResult:
    """Outcome handed back to the hosting runtime"""
    requeue: bool = False
    requeue_after: Optional[float] = None
    operations: Dict[str, OperationResult] = field(default_factory=dict)


class SandboxReconciler:
    """Reconciles Sandbox declarations into their derived objects"""

    def __init__(self, store: ObjectStore, resolver: SubjectResolver, settings: OperatorSettings):
        """
        Initialize the reconciler

        Args:
            store: Object store the bundle is converged against
            resolver: Owner subject resolver selected at start-up
            settings: Operator settings
        """
        self.store = store
        self.resolver = resolver
        self.settings = settings
        self.engine = ConvergenceEngine(store)

    def _subjects_for(self, owners: Sequence[str]) -> List[Dict[str, str]]:
        return [subject.to_dict() for subject in self.resolver.resolve(owners)]

    def _bind_subjects(self, sandbox: Sandbox):
        """Mutation replacing binding subjects with the resolved owners"""
        def mutate(manifest: Dict[str, Any]) -> None:
            subjects = self._subjects_for(sandbox.owners)
            if subjects:
                manifest['subjects'] = subjects
            else:
                # The API server omits an empty subject list
                manifest.pop('subjects', None)
        return mutate

    def _fetch(self, key: Union[ObjectKey, str]) -> Optional[Sandbox]:
        name = key.name if isinstance(key, ObjectKey) else key
        try:
            return Sandbox.from_manifest(self.store.get_sandbox(name))
        except ObjectNotFoundError:
            return None

    def reconcile(self, key: Union[ObjectKey, str]) -> ReconcileResult:
        """
        Converge every derived object of one Sandbox

        Args:
            key: ObjectKey or bare name of the Sandbox

        Returns:
            ReconcileResult with the outcome of each step

        Raises:
            ReconcileError: If any step fails; names the step and chains the cause
        """
        try:
            sandbox = self._fetch(key)
        except SandboxOperatorError as e:
            raise ReconcileError(SandboxConstants.KIND, e) from e

        result = ReconcileResult()
        if sandbox is None:
            logger.info(f"Sandbox {key} not found, assuming it was deleted")
            return result

        logger.info(f"Reconciling Sandbox {sandbox.name} (size={sandbox.tier}, owners={len(sandbox.owners)})")

        for (kind, _), desired in zip(BUNDLE_STEPS, build_bundle(sandbox)):
            mutate = self._bind_subjects(sandbox) if kind in SUBJECT_KINDS else None
            result.operations[kind.value] = self._step(
                kind.value, self.engine.converge, desired, sandbox, mutate
            )

        if self.settings.pull_secret_enabled:
            self._converge_pull_secret(sandbox, result)

        logger.info(f"Reconciled Sandbox {sandbox.name}")
        return result

    def _step(self, step: str, action, *args):
        try:
            return action(*args)
        except SandboxOperatorError as e:
            logger.error(f"reconcile {step} failed: {e}")
            raise ReconcileError(step, e) from e

    def _read_pull_secret_payload(self) -> str:
        name = self.settings.pull_secret_name
        namespace = self.settings.pull_secret_namespace
        source = self.store.get(Kind.SECRET.value, name, namespace)
        payload = (source.get('data') or {}).get(KubernetesConstants.DOCKER_CONFIG_JSON_KEY)
        if not payload:
            raise PullSecretError(ErrorMessages.PullSecretError.MISSING_PAYLOAD.format(
                namespace=namespace, name=name, key=KubernetesConstants.DOCKER_CONFIG_JSON_KEY
            ))
        return payload

    def _converge_pull_secret(self, sandbox: Sandbox, result: ReconcileResult) -> None:
        """Copy the configured pull secret and reference it from the default service account"""
        secret_name = self.settings.pull_secret_name
        namespace = naming.namespace_name(sandbox.name)

        def copy_secret() -> OperationResult:
            desired = build_pull_secret(sandbox, secret_name, self._read_pull_secret_payload())
            return self.engine.converge(desired, sandbox)

        def patch_service_account() -> OperationResult:
            account = self.store.get(Kind.SERVICE_ACCOUNT.value, KubernetesConstants.DEFAULT_SERVICE_ACCOUNT, namespace)
            referenced = {ref.get('name') for ref in account.get('imagePullSecrets') or []}
            if secret_name in referenced:
                return OperationResult.UNCHANGED
            return self.engine.patch(
                Kind.SERVICE_ACCOUNT.value,
                KubernetesConstants.DEFAULT_SERVICE_ACCOUNT,
                namespace,
                build_service_account_patch(secret_name),
            )

        result.operations[Kind.SECRET.value] = self._step(Kind.SECRET.value, copy_secret)
        result.operations[Kind.SERVICE_ACCOUNT.value] = self._step(Kind.SERVICE_ACCOUNT.value, patch_service_account)

    def render(self, sandbox: Sandbox, resolve_subjects: bool = False) -> List[Dict[str, Any]]:
        """
        Desired bundle for a Sandbox without touching the object store

        Args:
            sandbox: Sandbox declaration
            resolve_subjects: Fill binding subjects through the resolver

        Returns:
            Manifests in convergence order
        """
        bundle = build_bundle(sandbox)
        if resolve_subjects:
            subjects = self._subjects_for(sandbox.owners)
            for manifest in bundle:
                if manifest['kind'] in SUBJECT_KINDS:
                    manifest['subjects'] = [dict(subject) for subject in subjects]
        return bundle

    def cleanup(self, sandbox: Sandbox) -> List[str]:
        """
        Remove the derived bundle in reverse convergence order

        Only used where owner references do not cascade deletes.

        Returns:
            Labels of the objects that were deleted
        """
        manifests = build_bundle(sandbox)
        if self.settings.pull_secret_enabled:
            manifests.append(build_pull_secret(sandbox, self.settings.pull_secret_name, ''))

        removed = []
        for manifest in reversed(manifests):
            if self._step(f"cleanup {manifest['kind']}", self.engine.remove, manifest):
                removed.append(f"{manifest['kind']}/{manifest['metadata']['name']}")
        logger.info(f"Cleaned up Sandbox {sandbox.name}: {len(removed)} objects removed")
        return removed
