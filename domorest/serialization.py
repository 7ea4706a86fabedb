"""
Wire encoding helpers.

CSV for DataSet uploads, JSON decoding into typed results for responses.
"""

import csv
import dataclasses
import io
import json
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from .errors import ResponseDeserializeFailed

T = TypeVar("T")


def serialize_csv_str(records: Iterable[Any], include_header: bool = False) -> str:
    """
    Serialize a sequence of records to CSV text.

    Args:
        records: Mappings, dataclasses, pydantic models, named tuples or
            plain sequences. All records should share the same fields.
        include_header: Write the first record's field names as a header row

    Returns:
        CSV text with ``\\n`` line endings

    Example:
        serialize_csv_str([{"id": 1, "name": "a"}, {"id": 2, "name": "b"}])
        # '1,a\\n2,b\\n'
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    header_written = not include_header
    for record in records:
        names, values = _record_fields(record)
        if not header_written:
            if names is None:
                raise TypeError(f"Cannot derive CSV header from {type(record).__name__}")
            writer.writerow(names)
            header_written = True
        writer.writerow([_csv_value(v) for v in values])

    return buffer.getvalue()


def _record_fields(record: Any) -> tuple[list[str] | None, list[Any]]:
    """Split a record into (field names or None, values)."""
    if isinstance(record, BaseModel):
        data = record.model_dump()
        return list(data.keys()), list(data.values())
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        names = [f.name for f in dataclasses.fields(record)]
        return names, [getattr(record, n) for n in names]
    if isinstance(record, Mapping):
        return [str(k) for k in record.keys()], list(record.values())
    if isinstance(record, tuple) and hasattr(record, "_fields"):
        return list(record._fields), list(record)
    if isinstance(record, (str, bytes)):
        raise TypeError("CSV records must be rows, not strings")
    if isinstance(record, Iterable):
        return None, list(record)
    raise TypeError(f"Unsupported CSV record type: {type(record).__name__}")


def _csv_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def decode_json(body: bytes | str, type_: type[T] | Any) -> T:
    """
    Decode a JSON response body into ``type_``.

    ``type_`` may be a pydantic model or any type pydantic can validate,
    e.g. ``list[Dataset]``.

    Raises:
        ResponseDeserializeFailed: If the body is not valid JSON or does not
            match the expected shape
    """
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    try:
        return TypeAdapter(type_).validate_json(text)
    except ValidationError as e:
        raise ResponseDeserializeFailed(
            f"Unexpected response shape: {e.error_count()} validation error(s)",
            response_body=text,
        ) from e


def encode_json(payload: Any) -> bytes:
    """Encode a request payload as UTF-8 JSON."""
    return json.dumps(payload).encode("utf-8")
