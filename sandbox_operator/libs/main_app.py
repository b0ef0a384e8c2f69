"""
Main Application

Command line entry point: run the operator, reconcile one Sandbox, or
render the desired bundle of a Sandbox as YAML.
"""

import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

import yaml

from .core import OperatorSettings, load_settings, setup_logging, disable_ssl_warnings
from .core.constants import SandboxConstants
from .core.exceptions import ConfigurationError, SandboxOperatorError
from .core.models import Sandbox
from .controller import SandboxReconciler
from .subjects import PassthroughSubjectResolver

logger = logging.getLogger(__name__)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create argument parser with sub-commands sharing parent parsers"""

    # Arguments shared by all commands
    common_parser = argparse.ArgumentParser(add_help=False)
    common_parser.add_argument('--debug', action='store_true', help='Enable debug logging')

    # Arguments shared by commands that talk to the cluster
    cluster_parser = argparse.ArgumentParser(add_help=False)
    cluster_parser.add_argument('--skip-tls', action='store_true', help='Skip TLS verification of the API server')
    cluster_parser.add_argument('--kubeconfig', help='Path to a kubeconfig file (default: in-cluster, then ~/.kube/config)')
    cluster_parser.add_argument('--context', help='Kubeconfig context to use')

    parser = argparse.ArgumentParser(
        prog=SandboxConstants.OPERATOR_NAME,
        description='Sandbox Operator - provision isolated namespaces from Sandbox declarations',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sandbox-operator run --liveness-endpoint http://0.0.0.0:8080/healthz
  sandbox-operator reconcile demo --kubeconfig ~/.kube/config
  sandbox-operator render demo --owner alice@example.com --size large
        """
    )
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    run_parser = subparsers.add_parser(
        'run',
        parents=[common_parser, cluster_parser],
        help='Run the operator against the cluster'
    )
    run_parser.add_argument('--liveness-endpoint', help='Serve kopf liveness probes on this URL')

    reconcile_parser = subparsers.add_parser(
        'reconcile',
        parents=[common_parser, cluster_parser],
        help='Reconcile one Sandbox once and exit'
    )
    reconcile_parser.add_argument('name', help='Sandbox name')

    render_parser = subparsers.add_parser(
        'render',
        parents=[common_parser],
        help='Print the desired objects of a Sandbox as YAML without contacting the cluster'
    )
    render_parser.add_argument('name', help='Sandbox name')
    render_parser.add_argument('--owner', action='append', default=[], dest='owners',
                               help='Owner identifier (repeatable)')
    render_parser.add_argument('--size', default=SandboxConstants.Size.SMALL.value,
                               choices=[size.value for size in SandboxConstants.Size],
                               help='Sandbox size tier')

    return parser


def settings_from_args(args) -> OperatorSettings:
    """Environment settings with command line flags layered on top"""
    settings = load_settings()
    return dataclasses.replace(
        settings,
        debug=settings.debug or args.debug,
        skip_tls=settings.skip_tls or getattr(args, 'skip_tls', False),
    )


def handle_run_command(args) -> int:
    """Handle run command execution."""
    from .operator import create_reconciler, run_operator

    settings = settings_from_args(args)
    setup_logging(settings.debug)
    reconciler = create_reconciler(settings, kubeconfig=args.kubeconfig, context=args.context)
    run_operator(settings, reconciler, liveness_endpoint=args.liveness_endpoint,
                 kubeconfig=args.kubeconfig, context=args.context)
    return 0


def handle_reconcile_command(args) -> int:
    """Handle reconcile command execution."""
    from .operator import create_reconciler

    settings = settings_from_args(args)
    setup_logging(settings.debug)
    reconciler = create_reconciler(settings, kubeconfig=args.kubeconfig, context=args.context)
    result = reconciler.reconcile(args.name)

    for step, outcome in result.operations.items():
        print(f"{step}: {outcome}")
    return 0


def handle_render_command(args) -> int:
    """Handle render command execution."""
    setup_logging(args.debug)
    sandbox = Sandbox(name=args.name, owners=list(args.owners), size=args.size)
    reconciler = SandboxReconciler(store=None, resolver=PassthroughSubjectResolver(), settings=OperatorSettings())
    bundle = reconciler.render(sandbox, resolve_subjects=True)
    sys.stdout.write(yaml.safe_dump_all(bundle, default_flow_style=False, sort_keys=False))
    return 0


# Command dispatcher mapping
COMMAND_HANDLERS = {
    'run': handle_run_command,
    'reconcile': handle_reconcile_command,
    'render': handle_render_command,
}


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if getattr(args, 'skip_tls', False):
        disable_ssl_warnings()

    handler = COMMAND_HANDLERS[args.command]
    try:
        return handler(args)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except SandboxOperatorError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
