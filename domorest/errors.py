"""
Exceptions raised by the Domo client.

Every failure surfaces as a subclass of DomoError. Nothing is retried.
"""


class DomoError(Exception):
    """Domo REST API error."""

    def __init__(self, message: str, status_code: int = 0, response_body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class AuthError(DomoError):
    """Authentication error."""

    pass


class AuthRequestFailed(AuthError):
    """The token endpoint answered with a non-2xx status."""

    pass


class AuthDeserializeFailed(AuthError):
    """The token endpoint answered 2xx but the body is not a token."""

    pass


class NoDataToUpload(DomoError):
    """An upload was executed before any data was set."""

    def __init__(self, message: str = "No data was set to upload"):
        super().__init__(message)


class HttpRequestFailed(DomoError):
    """Transport-level failure (connection, DNS, TLS, timeout)."""

    pass


class ApiRequestFailed(DomoError):
    """A resource endpoint answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str, response_body: str = ""):
        super().__init__(f"{reason}: {response_body}", status_code, response_body)
        self.reason = reason


class ResponseDeserializeFailed(DomoError):
    """A 2xx response body could not be decoded into the expected type."""

    pass
