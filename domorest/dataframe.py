"""
Domo DataSet Polars DataFrame Integration

Pull DataSet rows into Polars DataFrames and push DataFrames back.

Usage:
    import polars as pl
    from domorest import connect
    from domorest.dataframe import pull_dataframe, push_dataframe

    async with connect("client-id", "client-secret") as domo:
        # Whole DataSet (CSV export)
        df = await pull_dataframe(domo, dataset_id)

        # SQL query result
        df = await pull_dataframe(domo, dataset_id, sql="SELECT * FROM table WHERE x > 1")

        # Replace DataSet rows
        await push_dataframe(domo, dataset_id, df)
"""

import io
import logging
from typing import Any

from .client import DomoClient
from .models import DatasetQueryResult

logger = logging.getLogger("domorest.dataframe")

# Try to import Polars
try:
    import polars as pl

    POLARS_AVAILABLE = True
except ImportError:
    pl = None
    POLARS_AVAILABLE = False


def _check_polars() -> None:
    """Raise error if Polars not available."""
    if not POLARS_AVAILABLE:
        raise ImportError(
            "Polars is required for DataFrame operations. "
            "Install with: pip install domorest[dataframe]"
        )


def query_result_to_dataframe(result: DatasetQueryResult) -> Any:
    """Build a DataFrame from a query result, one column per result column."""
    _check_polars()
    if not result.columns:
        return pl.DataFrame()
    return pl.DataFrame(result.rows, schema=result.columns, orient="row")


def csv_to_dataframe(data: bytes | str, has_header: bool = True) -> Any:
    """Parse CSV export bytes into a DataFrame."""
    _check_polars()
    if isinstance(data, str):
        data = data.encode("utf-8")
    if not data.strip():
        return pl.DataFrame()
    return pl.read_csv(io.BytesIO(data), has_header=has_header)


def dataframe_to_csv(df: Any) -> str:
    """Serialize a DataFrame to CSV without a header row."""
    _check_polars()
    return df.write_csv(include_header=False)


async def pull_dataframe(client: DomoClient, dataset_id: str, sql: str | None = None) -> Any:
    """
    Load a DataSet into a DataFrame.

    Args:
        client: DomoClient instance
        dataset_id: DataSet id
        sql: Optional SQL query. Without it the full DataSet is exported.

    Returns:
        Polars DataFrame
    """
    _check_polars()
    datasets = client.datasets()
    if sql is not None:
        result = await datasets.query_data(dataset_id, sql).execute()
        df = query_result_to_dataframe(result)
    else:
        data = await datasets.get_data(dataset_id).with_csv_headers().execute()
        df = csv_to_dataframe(data, has_header=True)

    logger.info("Pulled %d row(s) from dataset %s", df.height, dataset_id)
    return df


async def push_dataframe(client: DomoClient, dataset_id: str, df: Any) -> int:
    """
    Replace the rows of a DataSet with a DataFrame.

    Columns must be in the DataSet schema's column order.

    Returns:
        Number of rows uploaded
    """
    _check_polars()
    await client.datasets().upload(dataset_id).csv_str(dataframe_to_csv(df)).execute()
    logger.info("Pushed %d row(s) to dataset %s", df.height, dataset_id)
    return df.height
