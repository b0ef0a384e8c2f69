"""
Operator Runtime

kopf handlers wiring the Sandbox reconciler into the watch/queue runtime.
kopf owns event delivery, per-object serialization and retry backoff; the
handlers only translate reconcile outcomes into kopf signals. kopf logs in
with the same cluster configuration the reconciler writes through.
"""

import logging
from typing import Any, Optional

import kopf
from kubernetes import client

from .controller import KubernetesObjectStore, SandboxReconciler
from .core import ClusterAuth, OperatorSettings, load_settings
from .core.constants import SandboxConstants
from .core.exceptions import AuthenticationError, ReconcileError, SandboxOperatorError
from .core.models import Sandbox
from .subjects import create_subject_resolver

logger = logging.getLogger(__name__)

RESOURCE = (SandboxConstants.API_GROUP, SandboxConstants.API_VERSION, SandboxConstants.PLURAL)

# Seconds kopf waits before re-delivering a failed reconcile
RETRY_DELAY = 30


def create_reconciler(settings: OperatorSettings, auth: Optional[ClusterAuth] = None,
                      kubeconfig: Optional[str] = None, context: Optional[str] = None) -> SandboxReconciler:
    """
    Factory building the reconciler and its collaborators once

    Args:
        settings: Operator settings
        auth: Cluster authentication handler (defaults to ClusterAuth)
        kubeconfig: Optional kubeconfig path
        context: Optional kubeconfig context

    Returns:
        SandboxReconciler

    Raises:
        AuthenticationError: If no cluster client can be obtained
        DirectoryError: If the configured directory is unreachable
    """
    auth = auth or ClusterAuth(skip_tls=settings.skip_tls)
    api_client = auth.configure_auth(kubeconfig, context)
    store = KubernetesObjectStore(api_client, timeout=settings.request_timeout)
    resolver = create_subject_resolver(settings)
    return SandboxReconciler(store, resolver, settings)


def connection_info(configuration: client.Configuration) -> kopf.ConnectionInfo:
    """
    Translate a loaded kubernetes client configuration into kopf credentials

    Args:
        configuration: Configuration filled by ClusterAuth

    Returns:
        kopf.ConnectionInfo for the same API server and identity
    """
    header = configuration.get_api_key_with_prefix('authorization')
    scheme, token = None, None
    if header:
        parts = header.split(' ', 1)
        scheme, token = (parts[0], parts[1]) if len(parts) == 2 else (None, parts[0])

    return kopf.ConnectionInfo(
        server=configuration.host,
        ca_path=configuration.ssl_ca_cert,
        insecure=not configuration.verify_ssl,
        username=configuration.username or None,
        password=configuration.password or None,
        scheme=scheme,
        token=token,
        certificate_path=configuration.cert_file,
        private_key_path=configuration.key_file,
    )


@kopf.on.login()
def login(memo: kopf.Memo, **_: Any) -> kopf.ConnectionInfo:
    """Log kopf in with the same cluster configuration the reconciler writes through"""
    operator_settings = memo.get('operator_settings') or load_settings()
    auth = ClusterAuth(skip_tls=operator_settings.skip_tls)
    try:
        api_client = auth.configure_auth(memo.get('kubeconfig'), memo.get('context'))
    except AuthenticationError as e:
        logger.error(f"Operator login failed: {e}")
        raise kopf.PermanentError(str(e)) from e
    return connection_info(api_client.configuration)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, memo: kopf.Memo, **_: Any) -> None:
    """Build the reconciler (unless handed in through the memo) and tune kopf"""
    try:
        if memo.get('reconciler') is None:
            memo.operator_settings = memo.get('operator_settings') or load_settings()
            memo.reconciler = create_reconciler(
                memo.operator_settings, kubeconfig=memo.get('kubeconfig'), context=memo.get('context')
            )
    except SandboxOperatorError as e:
        logger.error(f"Operator start-up failed: {e}")
        raise kopf.PermanentError(str(e)) from e

    worker_limit = memo.operator_settings.worker_limit
    settings.batching.worker_limit = worker_limit
    settings.execution.max_workers = worker_limit

    # Sandbox status is reserved; keep kopf bookkeeping in annotations
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    logger.info(f"Sandbox operator started (workers={worker_limit}, resolver={memo.reconciler.resolver!r})")


@kopf.on.create(*RESOURCE)
@kopf.on.update(*RESOURCE)
@kopf.on.resume(*RESOURCE)
def reconcile_sandbox(name: str, memo: kopf.Memo, **_: Any) -> None:
    """Reconcile one Sandbox; failures are retried by kopf"""
    try:
        result = memo.reconciler.reconcile(name)
    except ReconcileError as e:
        raise kopf.TemporaryError(str(e), delay=RETRY_DELAY) from e

    summary = ", ".join(f"{step}={outcome}" for step, outcome in result.operations.items())
    logger.debug(f"Sandbox {name}: {summary}")


def cleanup_sandbox(body: kopf.Body, memo: kopf.Memo, **_: Any) -> None:
    """Remove the derived bundle of a deleted Sandbox"""
    sandbox = Sandbox.from_manifest(dict(body))
    try:
        memo.reconciler.cleanup(sandbox)
    except ReconcileError as e:
        raise kopf.TemporaryError(str(e), delay=RETRY_DELAY) from e


def register_cleanup_handler() -> None:
    """
    Register the delete handler

    Only needed where owner references do not cascade deletes. Registering it
    makes kopf put a finalizer on every Sandbox.
    """
    kopf.on.delete(*RESOURCE)(cleanup_sandbox)
    logger.info("Explicit cleanup enabled, Sandboxes get a finalizer")


@kopf.on.probe(id='resolver')
def resolver_probe(memo: kopf.Memo, **_: Any) -> str:
    return repr(memo.reconciler.resolver)


def run_operator(settings: OperatorSettings, reconciler: Optional[SandboxReconciler] = None,
                 liveness_endpoint: Optional[str] = None, kubeconfig: Optional[str] = None,
                 context: Optional[str] = None) -> None:
    """
    Run the operator until interrupted

    Args:
        settings: Operator settings
        reconciler: Pre-built reconciler; built at start-up when omitted
        liveness_endpoint: Optional kopf liveness URL, e.g. http://0.0.0.0:8080/healthz
        kubeconfig: Optional kubeconfig path, used by the reconciler and the kopf login
        context: Optional kubeconfig context, used by the reconciler and the kopf login
    """
    if settings.explicit_cleanup:
        register_cleanup_handler()

    kopf.run(
        clusterwide=True,
        liveness_endpoint=liveness_endpoint,
        memo=kopf.Memo(operator_settings=settings, reconciler=reconciler, kubeconfig=kubeconfig, context=context),
    )
