"""
HTTP transport for the SpoonFeeder content API.
"""

import logging
from typing import Optional, Dict, Any

import httpx

from spoonfeeder.config import ConfigManager, get_config_manager
from spoonfeeder.exceptions import (
    AuthenticationError,
    APIError,
    NotFoundError,
    ServerError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class HTTPClient:
    """
    Thin wrapper over :class:`httpx.Client`.

    Adds the bearer token to authenticated requests and turns error
    responses into :mod:`spoonfeeder.exceptions`.
    """

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        api_url: Optional[str] = None,
        token: Optional[str] = None,
        config_manager: Optional[ConfigManager] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Args:
            api_url: API base URL. Taken from configuration if not given.
            token: Bearer token. Taken from configuration if not given.
            config_manager: Configuration manager.
            timeout: Request timeout in seconds.
            transport: Custom httpx transport (tests use MockTransport).
        """
        self.config_manager = config_manager or get_config_manager()
        self._api_url = api_url.rstrip("/") if api_url else None
        self._token = token
        self.timeout = timeout
        self._transport = transport

        self._client: Optional[httpx.Client] = None

    @property
    def api_url(self) -> str:
        return self._api_url or self.config_manager.get_config().api_url

    @property
    def token(self) -> Optional[str]:
        return self._token or self.config_manager.get_token()

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            # Trailing slash keeps the /api prefix when joining relative paths
            self._client = httpx.Client(
                base_url=self.api_url + "/",
                timeout=self.timeout,
                transport=self._transport
            )
        return self._client

    def _get_auth_headers(self) -> Dict[str, str]:
        token = self.token
        if not token:
            raise AuthenticationError(
                "No API token configured. Run 'spoonfeeder config set-token TOKEN'."
            )
        return {"Authorization": f"Bearer {token}"}

    def _handle_response_error(self, response: httpx.Response) -> None:
        """
        Raise the exception matching an error response.

        The API answers errors with ``{"error": "..."}``.

        Raises:
            AuthenticationError: 401 / 403
            NotFoundError: 404
            ValidationError: 400 / 422
            ServerError: 5xx
            APIError: any other error status
        """
        if response.is_success:
            return

        message = response.text or f"HTTP {response.status_code}"
        details = None
        try:
            error_data = response.json()
        except ValueError:
            error_data = None
        if isinstance(error_data, dict):
            message = error_data.get("error") or error_data.get("message") or message
            details = error_data.get("details")

        logger.warning(f"API error {response.status_code}: {message}")

        if response.status_code in (401, 403):
            raise AuthenticationError(message, details)
        elif response.status_code == 404:
            raise NotFoundError(message, details)
        elif response.status_code in (400, 422):
            raise ValidationError(message, details, status_code=response.status_code)
        elif response.status_code >= 500:
            raise ServerError(message, details, status_code=response.status_code)
        else:
            raise APIError(message, response.status_code, "unknown_error", details)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        require_auth: bool = True
    ) -> httpx.Response:
        """
        Send a request.

        Args:
            method: HTTP method
            path: Path relative to the API base URL
            params: Query parameters
            require_auth: Send the bearer token

        Returns:
            Successful HTTP response

        Raises:
            SpoonFeederError: On an error response or missing token
        """
        headers = self._get_auth_headers() if require_auth else {}
        client = self._get_client()

        logger.debug(f"{method} {self.api_url}/{path.lstrip('/')}")
        response = client.request(method, path.lstrip("/"), params=params, headers=headers)

        self._handle_response_error(response)
        return response

    def get(self, path: str, **kwargs) -> httpx.Response:
        """GET request."""
        return self.request("GET", path, **kwargs)

    def close(self) -> None:
        """Close the underlying connection pool."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
