"""
domorest - Async Domo REST API Client
=====================================

A small, fully async client for the Domo DataSet API built on
tornado.httpclient. Authenticates with the OAuth client-credentials flow
and caches the access token.

=== QUICK START ===

    from domorest import ClientConfig, DomoClient, DomoScope

    config = ClientConfig(
        client_id="...",
        client_secret="...",
        scope=DomoScope().with_data_scope(),
    )

    async with DomoClient(config) as domo:
        datasets = await domo.datasets().list().limit(5).execute()

=== QUERY A DATASET ===

    result = await domo.datasets().query_data(dataset_id, "SELECT * FROM table").execute()
    for row in result.records():
        ...

=== EXPORT / UPLOAD CSV ===

    csv_bytes = await domo.datasets().get_data(dataset_id).with_csv_headers().execute()
    await domo.datasets().upload(dataset_id).data([{"a": 1, "b": 2}]).execute()

=== CONCURRENT REQUESTS ===

    pages = await asyncio.gather(*(
        domo.datasets().list().limit(5).offset(n * 5).execute() for n in range(5)
    ))
"""

__version__ = "0.3.0"

from .auth import ClientCredentials
from .client import DomoClient, connect
from .config import ClientConfig, DomoScope, load_env_file
from .datasets import (
    DatasetApi,
    DatasetGetDataBuilder,
    DatasetListBuilder,
    DatasetQueryBuilder,
    DatasetUploadBuilder,
)
from .errors import (
    ApiRequestFailed,
    AuthDeserializeFailed,
    AuthError,
    AuthRequestFailed,
    DomoError,
    HttpRequestFailed,
    NoDataToUpload,
    ResponseDeserializeFailed,
)
from .models import Dataset, DatasetQueryResult, DomoToken
from .serialization import serialize_csv_str

__all__ = [
    "ApiRequestFailed",
    "AuthDeserializeFailed",
    "AuthError",
    "AuthRequestFailed",
    # Auth
    "ClientConfig",
    "ClientCredentials",
    # Datasets
    "DatasetApi",
    "DatasetGetDataBuilder",
    "DatasetListBuilder",
    "DatasetQueryBuilder",
    "DatasetUploadBuilder",
    # Models
    "Dataset",
    "DatasetQueryResult",
    # Client
    "DomoClient",
    # Errors
    "DomoError",
    "DomoScope",
    "DomoToken",
    "HttpRequestFailed",
    "NoDataToUpload",
    "ResponseDeserializeFailed",
    "__version__",
    "connect",
    "load_env_file",
    "serialize_csv_str",
]
