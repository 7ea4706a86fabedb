"""
Domo Async REST Client

Shared client handle for the Domo REST API. Uses tornado.httpclient for
fully non-blocking I/O. One DomoClient may be used by many tasks at once.

Usage:
    from domorest import ClientConfig, DomoClient

    config = ClientConfig(client_id="...", client_secret="...")

    async with DomoClient(config) as domo:
        datasets = await domo.datasets().list().limit(10).execute()
        info = await domo.datasets().info(datasets[0].id)

        builder = domo.datasets().upload(info.id)
        await builder.csv_str("a,b\\n1,2\\n").execute()
"""

import logging
from typing import Any
from urllib.parse import quote, urlencode

import tornado.httpclient

from .auth import ClientCredentials
from .config import ClientConfig
from .errors import ApiRequestFailed, HttpRequestFailed

logger = logging.getLogger("domorest.client")


class DomoClient:
    """
    Async Domo REST API client.

    Args:
        config: Client settings and credentials
        http_client: Optional pre-built AsyncHTTPClient. By default a
            dedicated instance is created on first use and closed by close().

    Usage:
        domo = DomoClient(ClientConfig.from_env())
        rows = await domo.datasets().query_data(dataset_id, "SELECT * FROM table").execute()
        await domo.close()
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: tornado.httpclient.AsyncHTTPClient | None = None,
    ):
        self.config = config
        self.credentials = ClientCredentials(
            client_id=config.client_id,
            client_secret=config.client_secret,
            scope=config.scope,
            token_url=config.token_url,
            timeout=config.timeout,
            validate_cert=config.validate_cert,
            check_expiry=config.check_token_expiry,
            leeway=config.token_leeway,
        )
        self._http_client = http_client
        self._owns_http_client = http_client is None

    # =========================================================================
    # Resources
    # =========================================================================

    def datasets(self) -> "DatasetApi":
        """DataSet endpoints."""
        from .datasets import DatasetApi

        return DatasetApi(self)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def http_client(self) -> tornado.httpclient.AsyncHTTPClient:
        """The underlying HTTP client, created inside the running loop."""
        if self._http_client is None:
            self._http_client = tornado.httpclient.AsyncHTTPClient(
                force_instance=True, max_clients=self.config.max_clients
            )
        return self._http_client

    async def get_token(self) -> str:
        """Bearer token for the next request."""
        return await self.credentials.get_token(self.http_client)

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    async def __aenter__(self):
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    # =========================================================================
    # HTTP Methods (Internal)
    # =========================================================================

    def url(self, path: str, query: dict[str, Any] | None = None) -> str:
        """Absolute URL for an API path, dropping query values that are None."""
        url = f"{self.config.api_host}{path}"
        if query:
            params = {k: _query_value(v) for k, v in query.items() if v is not None}
            if params:
                url = f"{url}?{urlencode(params)}"
        return url

    async def request(
        self,
        method: str,
        path: str,
        query: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        body: bytes | str | None = None,
    ) -> tornado.httpclient.HTTPResponse:
        """
        Make one authenticated request to the Domo API.

        Returns:
            The 2xx response

        Raises:
            ApiRequestFailed: On a non-2xx response
            HttpRequestFailed: On transport failure
            AuthError: If no token could be obtained
        """
        token = await self.get_token()
        url = self.url(path, query)

        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)
        request_headers["Authorization"] = f"Bearer {token}"

        # Tornado rejects a None body on methods that expect one
        if body is None and method in ("POST", "PUT", "PATCH"):
            body = b""

        request = tornado.httpclient.HTTPRequest(
            url=url,
            method=method,
            headers=request_headers,
            body=body,
            request_timeout=self.config.timeout,
            validate_cert=self.config.validate_cert,
        )

        try:
            response = await self.http_client.fetch(request, raise_error=False)
        except Exception as e:
            raise HttpRequestFailed(f"Request failed: {method} {path}: {e!s}") from e

        logger.debug("%s %s -> %s", method, path, response.code)

        if not 200 <= response.code < 300:
            error_body = response.body.decode("utf-8", errors="replace") if response.body else ""
            logger.warning("%s %s failed: %s %s", method, path, response.code, response.reason)
            raise ApiRequestFailed(response.code, response.reason, error_body)

        return response


# =============================================================================
# Factory Functions
# =============================================================================


def connect(
    client_id: str,
    client_secret: str,
    **kwargs: Any,
) -> DomoClient:
    """
    Create a DomoClient from credentials.

    Extra keyword arguments are passed to ClientConfig.

    Example:
        async with connect("client-id", "client-secret") as domo:
            datasets = await domo.datasets().list().execute()
    """
    return DomoClient(ClientConfig(client_id=client_id, client_secret=client_secret, **kwargs))


# =============================================================================
# Helpers
# =============================================================================


def quote_path(segment: str) -> str:
    """URL-encode a single path segment."""
    return quote(segment, safe="")


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value
