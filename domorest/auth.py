"""
OAuth client-credentials authentication for the Domo API.

ClientCredentials holds the client id/secret and requested scopes, fetches
an access token from the token endpoint on first use and caches it for
later calls. Concurrent first use shares a single token request.
"""

import asyncio
import base64
import logging
import time

import tornado.httpclient
from pydantic import ValidationError

from .config import DEFAULT_API_HOST, DomoScope
from .errors import AuthDeserializeFailed, AuthError, AuthRequestFailed, HttpRequestFailed
from .models import DomoToken

logger = logging.getLogger("domorest.auth")

MISSING_CREDENTIALS_MESSAGE = (
    "Domo API credentials are not set. Pass client_id and client_secret, "
    "or set DOMO_CLIENT_ID and DOMO_CLIENT_SECRET and use ClientConfig.from_env()"
)


class ClientCredentials:
    """
    Store and retrieve access tokens for the Domo API.

    Args:
        client_id: OAuth client id
        client_secret: OAuth client secret
        scope: Requested scopes (defaults to the data scope)
        token_url: Token endpoint URL
        timeout: Token request timeout in seconds
        validate_cert: Whether to verify TLS certificates
        check_expiry: Refetch the token once ``expires_in`` has elapsed.
            When False a token is cached for the lifetime of the instance.
        leeway: Seconds before expiry at which the cached token counts as stale,
            capped at half the token lifetime

    Usage:
        creds = ClientCredentials("id", "secret", DomoScope().with_data_scope())
        token = await creds.get_token()
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        scope: DomoScope | None = None,
        token_url: str = f"{DEFAULT_API_HOST}/oauth/token",
        timeout: float = 30.0,
        validate_cert: bool = True,
        check_expiry: bool = True,
        leeway: float = 60.0,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.scope = scope if scope is not None else DomoScope.default()
        self.token_url = token_url
        self.timeout = timeout
        self.validate_cert = validate_cert
        self.check_expiry = check_expiry
        self.leeway = leeway

        self._token: DomoToken | None = None
        self._token_acquired: float = 0.0
        self._lock = asyncio.Lock()

        if not (client_id and client_secret):
            logger.warning(MISSING_CREDENTIALS_MESSAGE)

    @property
    def token(self) -> DomoToken | None:
        """The cached token, if any."""
        return self._token

    def token_info(self, token: DomoToken) -> "ClientCredentials":
        """Seed the cache with an already issued token."""
        self._token = token
        self._token_acquired = time.monotonic()
        return self

    def invalidate(self) -> None:
        """Drop the cached token so the next call fetches a new one."""
        self._token = None
        self._token_acquired = 0.0

    def is_token_valid(self) -> bool:
        """Whether a cached token exists and may still be used."""
        if self._token is None:
            return False
        if not self.check_expiry:
            return True
        age = time.monotonic() - self._token_acquired
        leeway = min(self.leeway, self._token.expires_in / 2)
        return age < self._token.expires_in - leeway

    async def get_token(
        self, http_client: tornado.httpclient.AsyncHTTPClient | None = None
    ) -> str:
        """
        Get the cached access token or authenticate and retrieve a new one.

        Args:
            http_client: Client used for the token request. Defaults to the
                shared AsyncHTTPClient of the current IOLoop.

        Returns:
            The bearer access token string

        Raises:
            AuthError: If no scope is requested
            AuthRequestFailed: If the token endpoint answers non-2xx
            AuthDeserializeFailed: If the token body is malformed
            HttpRequestFailed: On transport failure
        """
        if self.is_token_valid():
            return self._token.access_token

        async with self._lock:
            # Another task may have fetched while we waited
            if self.is_token_valid():
                return self._token.access_token

            token = await self.request_access_token(
                http_client or tornado.httpclient.AsyncHTTPClient()
            )
            self.token_info(token)
            return token.access_token

    async def request_access_token(
        self, http_client: tornado.httpclient.AsyncHTTPClient
    ) -> DomoToken:
        """Perform the client-credentials exchange. Does not touch the cache."""
        if self.scope.is_empty:
            raise AuthError("No OAuth scope requested; enable at least one scope")

        url = f"{self.token_url}?grant_type=client_credentials&scope={self.scope.encoded()}"
        basic = base64.b64encode(f"{self.client_id}:{self.client_secret}".encode()).decode()
        request = tornado.httpclient.HTTPRequest(
            url=url,
            method="POST",
            headers={"Authorization": f"Basic {basic}", "Accept": "application/json"},
            body="",
            request_timeout=self.timeout,
            validate_cert=self.validate_cert,
        )

        logger.info("Requesting Domo access token (scope: %s)", self.scope.scope_string())
        try:
            response = await http_client.fetch(request, raise_error=False)
        except Exception as e:
            raise HttpRequestFailed(f"Token request failed: {e!s}") from e

        body = response.body.decode("utf-8", errors="replace") if response.body else ""

        if not 200 <= response.code < 300:
            logger.warning("Token request failed: HTTP %s %s", response.code, response.reason)
            raise AuthRequestFailed(
                f"Token request failed: {response.code} {response.reason}",
                status_code=response.code,
                response_body=body,
            )

        try:
            token = DomoToken.model_validate_json(body)
        except ValidationError as e:
            raise AuthDeserializeFailed(
                f"Could not parse token response: {e.error_count()} validation error(s)",
                status_code=response.code,
                response_body=body,
            ) from e

        logger.info(
            "Obtained Domo access token for %s (expires in %ss)", token.domain, token.expires_in
        )
        return token
