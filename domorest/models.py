"""
Typed payloads returned by the Domo API.

Models accept the camelCase wire names and expose snake_case attributes.
Unknown fields are ignored so new server-side fields never break decoding.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DomoModel(BaseModel):
    """Base for all response models."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class DomoToken(DomoModel):
    """OAuth access token issued by the Domo token endpoint."""

    access_token: str
    token_type: str
    expires_in: int
    scope: str
    customer: str
    env: str
    user_id: int = Field(alias="userId")
    role: str
    jti: str
    domain: str


class DatasetOwner(DomoModel):
    id: int
    name: str = ""


class DatasetColumn(DomoModel):
    type: str
    name: str


class DatasetSchema(DomoModel):
    columns: list[DatasetColumn] = Field(default_factory=list)


class Dataset(DomoModel):
    """DataSet metadata as returned by the list and info endpoints."""

    id: str
    name: str = ""
    description: str = ""
    rows: int = 0
    columns: int = 0
    owner: DatasetOwner | None = None
    table_schema: DatasetSchema | None = Field(default=None, alias="schema")
    pdp_enabled: bool = Field(default=False, alias="pdpEnabled")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    data_current_at: datetime | None = Field(default=None, alias="dataCurrentAt")


class QueryColumnMetadata(DomoModel):
    type: str = ""
    data_source_id: str = Field(default="", alias="dataSourceId")
    max_length: int = Field(default=0, alias="maxLength")
    min_length: int = Field(default=0, alias="minLength")
    period_index: int = Field(default=0, alias="periodIndex")


class DatasetQueryResult(DomoModel):
    """Result of a SQL query executed against a DataSet."""

    datasource: str = ""
    columns: list[str] = Field(default_factory=list)
    metadata: list[QueryColumnMetadata] = Field(default_factory=list)
    rows: list[list[Any]] = Field(default_factory=list)
    num_rows: int = Field(default=0, alias="numRows")
    num_columns: int = Field(default=0, alias="numColumns")
    from_cache: bool = Field(default=False, alias="fromcache")

    def records(self) -> list[dict[str, Any]]:
        """Rows as dicts keyed by column name."""
        return [dict(zip(self.columns, row, strict=False)) for row in self.rows]
