# graph.py - Microsoft Graph session shared by the Intune and Entra stores

import logging
import time
from typing import Any, Dict, List, Optional

import jwt
import requests
from requests.exceptions import RequestException

from device_cleanup.services.base import StoreError

logger = logging.getLogger(__name__)

TOKEN_URL = "https://login.microsoftonline.com/{tenant_id}/oauth2/v2.0/token"
GRAPH_SCOPE = "https://graph.microsoft.com/.default"

# Application permissions the cleanup needs, keyed by capability.
# Each capability is satisfied by any role in its tuple.
REQUIRED_ROLES = {
    "read/write device-inventory records": ("DeviceManagementManagedDevices.ReadWrite.All",),
    "read directory records": ("Device.Read.All", "Device.ReadWrite.All", "Directory.Read.All",
                               "Directory.ReadWrite.All"),
    "delete directory records": ("Device.ReadWrite.All", "Directory.ReadWrite.All"),
}


class GraphError(StoreError):
    """Microsoft Graph request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 method: str = "", url: str = "", body: str = ""):
        super().__init__(message, status_code)
        self.method = method
        self.url = url
        self.body = body


class AuthenticationError(GraphError):
    """Could not obtain a Graph access token."""


def odata_quote(value: str) -> str:
    """Quote a string as an OData literal."""
    return "'" + value.replace("'", "''") + "'"


class GraphSession:
    """
    Authenticated Microsoft Graph session.

    Holds one requests.Session and a cached client-credentials token. Created
    once before a run and shared by every store call; close() ends it.
    """

    def __init__(self, tenant_id: str, client_id: str, client_secret: str,
                 endpoint: str = "https://graph.microsoft.com/v1.0",
                 timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        if not (tenant_id and client_id and client_secret):
            raise AuthenticationError("Microsoft Graph credentials not available")

        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.graph_endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.access_token: Optional[str] = None
        self.token_expires_at = 0.0

    @classmethod
    def from_config(cls, config) -> "GraphSession":
        creds = config.get_graph_credentials()
        return cls(
            tenant_id=creds['tenant_id'],
            client_id=creds['client_id'],
            client_secret=creds['client_secret'],
            endpoint=config.graph_endpoint,
            timeout=config.graph_timeout,
        )

    def __enter__(self) -> "GraphSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Drop the cached token and close the HTTP session."""
        self.access_token = None
        self.token_expires_at = 0.0
        self.session.close()
        logger.debug("Microsoft Graph session closed")

    # ---- Auth ----------------------------------------------------------------

    def _get_access_token(self) -> str:
        """Get OAuth2 access token for Microsoft Graph with caching."""
        if self.access_token and time.time() < self.token_expires_at:
            return self.access_token

        token_url = TOKEN_URL.format(tenant_id=self.tenant_id)
        data = {
            'grant_type': 'client_credentials',
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'scope': GRAPH_SCOPE,
        }

        try:
            response = self.session.post(token_url, data=data, timeout=self.timeout)
            response.raise_for_status()
            token_data = response.json()
            self.access_token = token_data['access_token']
        except (RequestException, ValueError, KeyError) as e:
            logger.error(f"Failed to get Microsoft Graph access token: {e}")
            raise AuthenticationError(f"Failed to get Microsoft Graph access token: {e}") from e

        # Cache token with 5-minute buffer before expiration
        expires_in = int(token_data.get('expires_in', 3600))
        self.token_expires_at = time.time() + expires_in - 300

        logger.info("Successfully obtained Microsoft Graph access token")
        return self.access_token

    def connect(self) -> None:
        """Acquire a token up front so auth failures surface before the run."""
        self._get_access_token()

    def granted_roles(self) -> List[str]:
        """Application roles carried by the current token."""
        token = self._get_access_token()
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError as e:
            logger.warning(f"Could not decode access token claims: {e}")
            return []
        return list(claims.get('roles', []))

    def check_capabilities(self) -> List[str]:
        """Return the capabilities the token does not grant."""
        roles = set(self.granted_roles())
        missing = [
            capability for capability, accepted in REQUIRED_ROLES.items()
            if not roles.intersection(accepted)
        ]
        for capability in missing:
            logger.warning(f"Token lacks permission to {capability} "
                           f"(needs one of: {', '.join(REQUIRED_ROLES[capability])})")
        return missing

    # ---- Requests ------------------------------------------------------------

    def request(self, method: str, endpoint: str,
                params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """Make authenticated request to Microsoft Graph API."""
        token = self._get_access_token()
        headers = {
            'Authorization': f'Bearer {token}',
            'Accept': 'application/json',
        }

        if endpoint.startswith("https://"):
            url = endpoint
        else:
            url = f"{self.graph_endpoint}/{endpoint.lstrip('/')}"

        try:
            response = self.session.request(method.upper(), url, headers=headers,
                                            params=params, timeout=self.timeout)
            response.raise_for_status()
        except RequestException as e:
            status = None
            body = ""
            if getattr(e, 'response', None) is not None:
                status = e.response.status_code
                body = e.response.text[:500]
                logger.debug(f"Graph response content: {body}")
            raise GraphError(f"{method.upper()} {url} failed: {e}", status_code=status,
                             method=method.upper(), url=url, body=body) from e

        # Empty responses (204 No Content on DELETE)
        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise GraphError(f"{method.upper()} {url} returned invalid JSON",
                             status_code=response.status_code,
                             method=method.upper(), url=url) from e

    def get_all(self, endpoint: str, params: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        """GET a collection, following @odata.nextLink until exhausted."""
        items: List[Dict[str, Any]] = []
        page = self.request('GET', endpoint, params=params)
        items.extend(page.get('value', []))

        next_link = page.get('@odata.nextLink')
        while next_link:
            # nextLink already carries the query string
            page = self.request('GET', next_link)
            items.extend(page.get('value', []))
            next_link = page.get('@odata.nextLink')

        return items

    def delete(self, endpoint: str) -> None:
        self.request('DELETE', endpoint)
