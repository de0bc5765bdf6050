"""HTTP client for the Onshape REST API.

The client carries one fixed Basic credential, attached when it is created,
and performs exactly one HTTP exchange per request() call. Failures are
normalized into ApiError (or one of its subclasses) so the dispatch layer
sees a single error shape regardless of what went wrong on the wire.
"""

import json
import logging
from typing import Any

import httpx

from onshape_mcp.config import DEFAULT_API_URL, ServerConfig
from onshape_mcp.errors import (
    ApiError,
    ConfigurationError,
    ConnectionFailedError,
    ResponseDecodeError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

ONSHAPE_MEDIA_TYPE = "application/json;charset=UTF-8; qs=0.09"
DEFAULT_TIMEOUT = 30.0
USER_AGENT = "onshape-mcp"


class OnshapeClient:
    """Async client for the Onshape REST API.

    Attributes:
        base_url: API base URL, including the version segment.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        access_key: str | None = None,
        secret_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API base URL, e.g. "https://cad.onshape.com/api/v1".
            access_key: API access key. Requests are sent unauthenticated if
                either key is missing, and the backend will reject them.
            secret_key: API secret key.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self.base_url = base_url.rstrip("/")
        auth = None
        if access_key and secret_key:
            auth = httpx.BasicAuth(access_key, secret_key)
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            auth=auth,
            headers={
                "Accept": ONSHAPE_MEDIA_TYPE,
                "Content-Type": ONSHAPE_MEDIA_TYPE,
                "User-Agent": USER_AGENT,
            },
            timeout=timeout,
            transport=transport,
        )
        self._authenticated = auth is not None

    @classmethod
    def from_config(cls, config: ServerConfig) -> "OnshapeClient":
        """Create a client from server configuration.

        A missing credential is logged and tolerated unless the configuration
        sets require_credentials, in which case startup is aborted.

        Raises:
            ConfigurationError: If credentials are missing and required.
        """
        if not config.has_credentials:
            msg = (
                "Onshape API keys not set. Please set ONSHAPE_ACCESS_KEY and "
                "ONSHAPE_SECRET_KEY environment variables."
            )
            if config.require_credentials:
                raise ConfigurationError(msg)
            logger.warning("%s API calls will fail until they are configured.", msg)
        return cls(
            base_url=config.api_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            timeout=config.timeout_ms / 1000,
        )

    @property
    def is_authenticated(self) -> bool:
        """Whether a credential is attached to outgoing requests."""
        return self._authenticated

    async def __aenter__(self) -> "OnshapeClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        query: dict[str, Any] | None = None,
    ) -> Any:
        """Perform one request against the Onshape API.

        Args:
            method: HTTP method.
            path: Path relative to the API base URL, e.g. "/documents".
            body: JSON-serializable request body, or None.
            query: Query parameters; entries whose value is None are dropped.

        Returns:
            The parsed JSON response, or an empty dict if the body was empty.

        Raises:
            UnauthorizedError: If the backend answers 401.
            ApiError: For any other non-success status.
            ConnectionFailedError: If no HTTP response was received.
            ResponseDecodeError: If the body is not valid JSON.
        """
        params = {k: v for k, v in (query or {}).items() if v is not None}
        logger.debug("Onshape API request: %s %s %s", method, path, params)

        try:
            response = await self._http.request(
                method,
                path,
                params=params or None,
                json=body,
            )
        except httpx.TransportError as e:
            logger.error("Error during Onshape API request to %s: %s", path, e)
            raise ConnectionFailedError(f"{type(e).__name__}: {e}") from e

        text = response.text
        if response.is_error:
            error_class = (
                UnauthorizedError if response.status_code == 401 else ApiError
            )
            error = error_class(response.status_code, response.reason_phrase, text)
            logger.error("Error during Onshape API request to %s: %s", path, error)
            raise error

        if not text.strip():
            return {}
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ResponseDecodeError(text, str(e)) from e


async def get_default_workspace(client: OnshapeClient, document_id: str) -> str | None:
    """Look up the ID of a document's default workspace.

    Returns:
        The workspace ID, or None if the document reports no default workspace.
    """
    doc_info = await client.request("GET", f"/documents/{document_id}")
    return (doc_info.get("defaultWorkspace") or {}).get("id")


async def find_element_by_name(
    client: OnshapeClient,
    document_id: str,
    workspace_id: str,
    name: str,
    element_type: str = "PARTSTUDIO",
) -> dict[str, Any] | None:
    """Find the first element of a type with an exact name in a workspace.

    Returns:
        The element JSON, or None if no element matches.
    """
    elements = await client.request(
        "GET",
        f"/documents/d/{document_id}/w/{workspace_id}/elements",
        query={"elementType": element_type},
    )
    return next((elem for elem in elements or [] if elem.get("name") == name), None)
