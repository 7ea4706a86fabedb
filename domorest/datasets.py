"""
DataSet API builders.

Each operation returns a small builder. Setters only record values and
return the builder for chaining; nothing touches the network until
``await builder.execute()``, which issues exactly one request.

Usage:
    datasets = domo.datasets()

    page = await datasets.list().limit(5).offset(10).sort("-lastUpdated").execute()
    csv_bytes = await datasets.get_data(dataset_id).with_csv_headers().execute()
    result = await datasets.query_data(dataset_id, "SELECT * FROM table").execute()

    await datasets.upload(dataset_id).data(records).execute()
    await datasets.delete(dataset_id)
"""

import logging
from collections.abc import Iterable
from typing import Any

from .client import DomoClient, quote_path
from .errors import NoDataToUpload
from .models import Dataset, DatasetQueryResult
from .serialization import decode_json, encode_json, serialize_csv_str

logger = logging.getLogger("domorest.datasets")

DATASETS_PATH = "/v1/datasets"


class DatasetApi:
    """Entry point for DataSet operations on a shared DomoClient."""

    def __init__(self, client: DomoClient):
        self.client = client

    def list(self) -> "DatasetListBuilder":
        return DatasetListBuilder(self.client)

    async def info(self, dataset_id: str) -> Dataset:
        """
        Get metadata for a single DataSet.

        Args:
            dataset_id: DataSet id

        Returns:
            Dataset metadata
        """
        response = await self.client.request("GET", f"{DATASETS_PATH}/{quote_path(dataset_id)}")
        return decode_json(response.body, Dataset)

    async def delete(self, dataset_id: str) -> None:
        """Permanently delete a DataSet."""
        await self.client.request("DELETE", f"{DATASETS_PATH}/{quote_path(dataset_id)}")
        logger.info("Deleted dataset %s", dataset_id)

    def query_data(self, dataset_id: str, sql_query: str) -> "DatasetQueryBuilder":
        return DatasetQueryBuilder(self.client, dataset_id, sql_query)

    def get_data(self, dataset_id: str) -> "DatasetGetDataBuilder":
        return DatasetGetDataBuilder(self.client, dataset_id)

    def upload(self, dataset_id: str) -> "DatasetUploadBuilder":
        return DatasetUploadBuilder(self.client, dataset_id)


class DatasetListBuilder:
    """List DataSets: ``GET /v1/datasets?limit=&offset=&sort=``."""

    def __init__(self, client: DomoClient):
        self.client = client
        self._limit: int | None = 50
        self._offset: int | None = None
        self._sort: str | None = "name"

    def limit(self, limit: int) -> "DatasetListBuilder":
        self._limit = limit
        return self

    def offset(self, offset: int) -> "DatasetListBuilder":
        self._offset = offset
        return self

    def sort(self, sort: str) -> "DatasetListBuilder":
        """Sort field, e.g. ``name``, ``lastTouched``, ``-lastUpdated``."""
        self._sort = sort
        return self

    def query_params(self) -> dict[str, Any]:
        return {"limit": self._limit, "offset": self._offset, "sort": self._sort}

    async def execute(self) -> list[Dataset]:
        response = await self.client.request("GET", DATASETS_PATH, query=self.query_params())
        return decode_json(response.body, list[Dataset])


class DatasetQueryBuilder:
    """Run SQL against a DataSet: ``POST /v1/datasets/query/execute/{id}``."""

    def __init__(self, client: DomoClient, dataset_id: str, sql_query: str):
        self.client = client
        self.dataset_id = dataset_id
        self.sql_query = sql_query

    def request_body(self) -> dict[str, str]:
        return {"sql": self.sql_query}

    async def execute(self) -> DatasetQueryResult:
        response = await self.client.request(
            "POST",
            f"{DATASETS_PATH}/query/execute/{quote_path(self.dataset_id)}",
            headers={"Content-Type": "application/json"},
            body=encode_json(self.request_body()),
        )
        return decode_json(response.body, DatasetQueryResult)


class DatasetGetDataBuilder:
    """Export DataSet rows as CSV: ``GET /v1/datasets/{id}/data``."""

    def __init__(self, client: DomoClient, dataset_id: str):
        self.client = client
        self.dataset_id = dataset_id
        self.include_headers = False

    def with_csv_headers(self) -> "DatasetGetDataBuilder":
        self.include_headers = True
        return self

    def query_params(self) -> dict[str, Any]:
        return {"includeHeader": self.include_headers}

    async def execute(self) -> bytes:
        """Raw CSV bytes as returned by the API."""
        response = await self.client.request(
            "GET",
            f"{DATASETS_PATH}/{quote_path(self.dataset_id)}/data",
            query=self.query_params(),
            headers={"Accept": "text/csv"},
        )
        return response.body or b""


class DatasetUploadBuilder:
    """
    Replace DataSet rows: ``PUT /v1/datasets/{id}/data`` with a CSV body.

    Records passed to data() are written without a header row, matching
    the column order of the DataSet schema.
    """

    def __init__(self, client: DomoClient, dataset_id: str):
        self.client = client
        self.dataset_id = dataset_id
        self._data: str | None = None

    @property
    def body(self) -> str | None:
        return self._data

    def data(self, records: Iterable[Any]) -> "DatasetUploadBuilder":
        """Serialize records to CSV without a header row."""
        self._data = serialize_csv_str(records, include_header=False)
        return self

    def csv_str(self, csv: str) -> "DatasetUploadBuilder":
        """Upload ``csv`` verbatim."""
        self._data = csv
        return self

    async def execute(self) -> None:
        if self._data is None:
            raise NoDataToUpload()

        await self.client.request(
            "PUT",
            f"{DATASETS_PATH}/{quote_path(self.dataset_id)}/data",
            headers={"Content-Type": "text/csv"},
            body=self._data.encode("utf-8"),
        )
        logger.info("Uploaded %d bytes to dataset %s", len(self._data), self.dataset_id)
