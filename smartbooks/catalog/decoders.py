"""
Decoders for uploaded book lists.

Each decoder turns a complete CSV, JSON or XML document into a list of
BookRecord objects. Documents are decoded as a whole: if any part of the
document is malformed a DecodeError is raised and no records are returned.
"""

import csv
import enum
import io
import json
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from smartbooks.catalog.errors import DecodeError
from smartbooks.catalog.models import BookRecord
from smartbooks.db.models import DataSource
from smartbooks.utils.logging import get_logger

logger = get_logger(__name__)


class FileType(enum.Enum):
    """Supported upload formats."""
    CSV = "csv"
    JSON = "json"
    XML = "xml"

    @property
    def data_source(self) -> DataSource:
        return DataSource[self.name]

    @classmethod
    def parse(cls, value: Union["FileType", str]) -> "FileType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unsupported file type: {value!r}") from None


def _to_text(data: bytes, file_type: FileType) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DecodeError(file_type.name, f"not valid UTF-8 ({e})") from e


def _build_records(rows: List[Dict[str, Any]], file_type: FileType) -> List[BookRecord]:
    records = []
    for index, row in enumerate(rows, start=1):
        try:
            records.append(BookRecord.model_validate(row))
        except ValidationError as e:
            raise DecodeError(file_type.name, f"invalid entry #{index}: {e}") from e
    return records


def decode_csv(data: bytes) -> List[BookRecord]:
    """
    Decode a comma-separated file whose first line names the columns.
    """
    text = _to_text(data, FileType.CSV)
    reader = csv.DictReader(io.StringIO(text, newline=""), delimiter=",")
    rows = []
    try:
        for row in reader:
            # DictReader collects surplus cells under the None key
            if None in row:
                raise DecodeError(
                    "CSV", f"line {reader.line_num} has more values than the header"
                )
            rows.append(row)
    except csv.Error as e:
        raise DecodeError("CSV", str(e)) from e

    if reader.fieldnames is None:
        raise DecodeError("CSV", "missing header line")

    return _build_records(rows, FileType.CSV)


def decode_json(data: bytes, collection_field: Optional[str] = None) -> List[BookRecord]:
    """
    Decode a JSON object holding the books in an array-valued member.

    Args:
        data: Raw document
        collection_field: Name of the member holding the array. When not
            given, the object must have exactly one array-valued member.
    """
    text = _to_text(data, FileType.JSON)
    try:
        root = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError("JSON", str(e)) from e

    if not isinstance(root, dict):
        raise DecodeError("JSON", "top-level value must be an object")

    if collection_field:
        if collection_field not in root:
            raise DecodeError("JSON", f"missing '{collection_field}' array")
        items = root[collection_field]
    else:
        arrays = [key for key, value in root.items() if isinstance(value, list)]
        if len(arrays) != 1:
            raise DecodeError(
                "JSON", f"expected exactly one array-valued member, found {len(arrays)}"
            )
        items = root[arrays[0]]

    if not isinstance(items, list):
        raise DecodeError("JSON", "book collection is not an array")
    if not all(isinstance(item, dict) for item in items):
        raise DecodeError("JSON", "book collection must contain only objects")

    return _build_records(items, FileType.JSON)


def decode_xml(data: bytes) -> List[BookRecord]:
    """
    Decode an XML list element with one child element per book.

    The tag names of each book element's children are the field names.
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise DecodeError("XML", str(e)) from e

    rows = []
    for element in root:
        row = {}
        for child in element:
            if len(child):
                raise DecodeError("XML", f"field <{child.tag}> must not contain elements")
            row[child.tag] = child.text
        rows.append(row)

    return _build_records(rows, FileType.XML)


def decode(
    data: bytes,
    file_type: Union[FileType, str],
    json_collection_field: Optional[str] = None,
) -> List[BookRecord]:
    """
    Decode an uploaded document of the given type.

    Raises:
        DecodeError: If the document is malformed
        ValueError: If the file type is not supported
    """
    file_type = FileType.parse(file_type)

    if file_type is FileType.CSV:
        records = decode_csv(data)
    elif file_type is FileType.JSON:
        records = decode_json(data, json_collection_field)
    else:
        records = decode_xml(data)

    logger.debug("Decoded document", file_type=file_type.name, records=len(records))
    return records
