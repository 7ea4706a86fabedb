"""
Pytest configuration and shared fixtures for domorest tests.
"""

import io
import json
import shutil
import sys
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import tornado.httpclient

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from domorest.client import DomoClient
from domorest.config import ClientConfig, DomoScope
from domorest.models import DomoToken

TEST_CLIENT_ID = "test-client-id"
TEST_CLIENT_SECRET = "test-client-secret"
TEST_ACCESS_TOKEN = "test-access-token"


@pytest.fixture
def temp_dir() -> Generator[Path]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def token_payload() -> dict[str, Any]:
    """Token endpoint response body."""
    return {
        "access_token": TEST_ACCESS_TOKEN,
        "token_type": "bearer",
        "expires_in": 3599,
        "scope": "data user",
        "customer": "acme",
        "env": "prod1",
        "userId": 12345,
        "role": "Admin",
        "jti": "4e3b2c1a-0000-0000-0000-000000000000",
        "domain": "acme.domo.com",
    }


@pytest.fixture
def sample_dataset() -> dict[str, Any]:
    """DataSet metadata as returned by the info endpoint."""
    return {
        "id": "08a061e2-12a2-4646-b4bc-20beddb403f3",
        "name": "Sales",
        "description": "Monthly sales",
        "rows": 3,
        "columns": 2,
        "owner": {"id": 27, "name": "Jane Admin"},
        "schema": {"columns": [{"type": "STRING", "name": "Region"}, {"type": "DOUBLE", "name": "Amount"}]},
        "pdpEnabled": False,
        "createdAt": "2024-01-05T18:40:55Z",
        "updatedAt": "2024-02-11T09:12:00Z",
    }


@pytest.fixture
def sample_query_result() -> dict[str, Any]:
    """Query execution response body."""
    return {
        "datasource": "08a061e2-12a2-4646-b4bc-20beddb403f3",
        "columns": ["Region", "Amount"],
        "metadata": [
            {"type": "STRING", "dataSourceId": "08a061e2", "maxLength": 5, "minLength": 4, "periodIndex": 0},
            {"type": "DOUBLE", "dataSourceId": "08a061e2", "maxLength": -1, "minLength": -1, "periodIndex": 0},
        ],
        "rows": [["North", 100.0], ["South", 250.5]],
        "numRows": 2,
        "numColumns": 2,
        "fromcache": True,
    }


@pytest.fixture
def make_response() -> Callable[..., tornado.httpclient.HTTPResponse]:
    """Factory for real tornado HTTPResponse objects."""

    def _make(
        code: int = 200,
        body: Any = b"",
        reason: str | None = None,
        url: str = "https://api.domo.com/",
    ) -> tornado.httpclient.HTTPResponse:
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode()
        elif isinstance(body, str):
            body = body.encode()
        request = tornado.httpclient.HTTPRequest(url)
        return tornado.httpclient.HTTPResponse(
            request, code, reason=reason, buffer=io.BytesIO(body)
        )

    return _make


@pytest.fixture
def http_client() -> MagicMock:
    """Stand-in AsyncHTTPClient whose fetch is an AsyncMock."""
    client = MagicMock()
    client.fetch = AsyncMock()
    return client


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(
        client_id=TEST_CLIENT_ID,
        client_secret=TEST_CLIENT_SECRET,
        scope=DomoScope().with_data_scope(),
    )


@pytest.fixture
def domo(client_config: ClientConfig, http_client: MagicMock, token_payload) -> DomoClient:
    """DomoClient with an already cached token, so fetch only sees API calls."""
    client = DomoClient(client_config, http_client=http_client)
    client.credentials.token_info(DomoToken.model_validate(token_payload))
    return client


def sent_request(http_client: MagicMock, index: int = -1) -> tornado.httpclient.HTTPRequest:
    """The HTTPRequest passed to fetch on call ``index``."""
    return http_client.fetch.call_args_list[index].args[0]


@pytest.fixture
def last_request() -> Callable[..., tornado.httpclient.HTTPRequest]:
    return sent_request
