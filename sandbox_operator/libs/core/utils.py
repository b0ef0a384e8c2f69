"""
Core Utilities

Common utility functions used across the Sandbox Operator.
"""

import copy
import logging
from typing import Any, Dict, Optional

import urllib3
from kubernetes.client.rest import ApiException

from .constants import NetworkConstants
from .exceptions import ObjectNotFoundError, ObjectStoreError


def setup_logging(debug: bool = False) -> None:
    """
    Set up logging configuration for the operator.

    Args:
        debug: Enable debug logging level
    """
    level = logging.DEBUG if debug else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    root_logger.addHandler(console_handler)

    # Reduce noise from the HTTP stack
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('kubernetes').setLevel(logging.WARNING)

    if debug:
        logging.getLogger(__name__).debug("Debug mode enabled")


def disable_ssl_warnings() -> None:
    """Disable SSL warnings when TLS verification is skipped"""
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


def translate_api_error(error: ApiException, action: str) -> ObjectStoreError:
    """
    Convert a Kubernetes ApiException into an operator exception

    Args:
        error: The caught ApiException
        action: Short description of the failed call, e.g. "get Role sandbox-x/sandbox-x-owner"

    Returns:
        ObjectNotFoundError for 404, ObjectStoreError otherwise
    """
    status = getattr(error, 'status', None)
    reason = getattr(error, 'reason', None) or str(error)

    if status == NetworkConstants.HTTPStatus.NOT_FOUND:
        return ObjectNotFoundError(f"{action}: not found")

    if status in (NetworkConstants.HTTPStatus.UNAUTHORIZED, NetworkConstants.HTTPStatus.FORBIDDEN):
        return ObjectStoreError(
            f"{action}: {NetworkConstants.HTTPStatus(status)}. "
            "Check the operator service account permissions.",
            status=status
        )

    return ObjectStoreError(f"{action}: {reason}", status=status)


def merged_labels(live: Optional[Dict[str, str]], desired: Optional[Dict[str, str]]) -> Dict[str, str]:
    """Desired labels win; labels only present on the live object are kept"""
    labels = dict(live or {})
    labels.update(desired or {})
    return labels


def deep_copy(manifest: Dict[str, Any]) -> Dict[str, Any]:
    return copy.deepcopy(manifest)
