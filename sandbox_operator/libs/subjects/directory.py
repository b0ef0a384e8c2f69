"""
Directory-backed Subject Resolver

Resolves owner identifiers (mail addresses or user principal names) to
directory object ids through Microsoft Graph. Resolution is best-effort per
identifier: an identifier without a match is logged and skipped, while a
failed directory call fails the whole batch.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests
from azure.core.exceptions import AzureError

from ..core.constants import DirectoryConstants, ErrorMessages, NetworkConstants
from ..core.exceptions import DirectoryError
from ..core.models import Subject

logger = logging.getLogger(__name__)


def build_user_filter(identifier: str) -> str:
    """OData filter matching either mail or userPrincipalName"""
    quoted = identifier.replace("'", "''")
    return (
        f"{DirectoryConstants.MAIL_FIELD} eq '{quoted}' or "
        f"{DirectoryConstants.PRINCIPAL_NAME_FIELD} eq '{quoted}'"
    )


def matches_identifier(entry: Dict[str, Any], identifier: str) -> bool:
    """Exact, case-sensitive comparison against mail or userPrincipalName"""
    return (
        entry.get(DirectoryConstants.MAIL_FIELD) == identifier
        or entry.get(DirectoryConstants.PRINCIPAL_NAME_FIELD) == identifier
    )


class GraphDirectoryClient:
    """Thin Microsoft Graph users client with bounded timeouts"""

    def __init__(self, credential, base_url: str = DirectoryConstants.DEFAULT_GRAPH_API_URL,
                 timeout: float = NetworkConstants.DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        """
        Initialize Graph client

        Args:
            credential: azure-identity credential exposing ``get_token(scope)``
            base_url: Graph API base URL
            timeout: Timeout in seconds for every query
            session: Optional pre-built requests session
        """
        self.credential = credential
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': NetworkConstants.USER_AGENT})

    def _auth_headers(self) -> Dict[str, str]:
        try:
            token = self.credential.get_token(DirectoryConstants.GRAPH_SCOPE)
        except AzureError as e:
            raise DirectoryError(ErrorMessages.DirectoryError.TOKEN_FAILED.format(error=e)) from e
        return {
            'Authorization': f"Bearer {token.token}",
            'Accept': 'application/json',
        }

    def _list_users(self, params: Dict[str, str], timeout: float) -> List[Dict[str, Any]]:
        url = f"{self.base_url}{DirectoryConstants.USERS_PATH}"
        response = self.session.get(url, params=params, headers=self._auth_headers(), timeout=timeout)
        response.raise_for_status()
        return response.json().get('value') or []

    def probe(self, timeout: float = NetworkConstants.DIRECTORY_PROBE_TIMEOUT) -> None:
        """
        Check that the directory is reachable with the configured credential

        Raises:
            DirectoryError: If the directory cannot be listed
        """
        try:
            self._list_users({'$top': '1', '$select': DirectoryConstants.ID_FIELD}, timeout)
        except (requests.RequestException, ValueError) as e:
            raise DirectoryError(ErrorMessages.DirectoryError.UNREACHABLE.format(error=e)) from e
        logger.info(f"Identity directory reachable at {self.base_url}")

    def find_user(self, identifier: str) -> Optional[Dict[str, Any]]:
        """
        Find the first directory user whose mail or principal name equals identifier

        Args:
            identifier: Mail address or user principal name

        Returns:
            Directory entry, or None when nothing matches

        Raises:
            DirectoryError: If the query fails
        """
        params = {
            '$filter': build_user_filter(identifier),
            '$select': DirectoryConstants.SELECT_FIELDS,
        }
        try:
            entries = self._list_users(params, self.timeout)
        except (requests.RequestException, ValueError) as e:
            raise DirectoryError(
                ErrorMessages.DirectoryError.QUERY_FAILED.format(identifier=identifier, error=e)
            ) from e

        for entry in entries:
            if matches_identifier(entry, identifier):
                return entry
        return None


class DirectorySubjectResolver:
    """Resolves identifiers to User subjects named by directory object id"""

    def __init__(self, directory: GraphDirectoryClient):
        self.directory = directory

    def resolve(self, identifiers: Sequence[str]) -> List[Subject]:
        """
        Resolve identifiers, preserving input order among the matches

        Args:
            identifiers: Owner identifiers

        Returns:
            Subjects for the identifiers that matched a directory entry

        Raises:
            DirectoryError: If any directory query fails
        """
        subjects = []
        for identifier in identifiers:
            entry = self.directory.find_user(identifier)
            if entry is None or not entry.get(DirectoryConstants.ID_FIELD):
                logger.warning(f"{identifier} could not be found in the identity directory")
                continue
            subjects.append(Subject(name=entry[DirectoryConstants.ID_FIELD]))
        return subjects

    def __repr__(self) -> str:
        return f"DirectorySubjectResolver(base_url={self.directory.base_url!r})"
