"""The Get request: read one row."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from hrpc.call import Call, Option, apply_options
from hrpc.call import deserialize_cell_blocks as _decode_cells
from hrpc.messages import Column, RegionSpecifier, ResultMessage, TimeRange
from hrpc.query import (
    DEFAULT_CACHE_BLOCKS,
    DEFAULT_MAX_RESULTS_PER_COLUMN_FAMILY,
    DEFAULT_MAX_VERSIONS,
    MAX_TIMESTAMP,
    MIN_TIMESTAMP,
    BaseQuery,
    Consistency,
    ConsistencyType,
)

BytesLike = Union[bytes, bytearray, str, None]


def _as_bytes(value: BytesLike) -> bytes:
    if value is None:
        return b""
    if isinstance(value, str):
        return value.encode()
    return bytes(value)


@dataclass
class GetMessage:
    """What to read from a row."""

    row: Optional[bytes] = None
    column: list[Column] = field(default_factory=list)
    time_range: Optional[TimeRange] = None
    filter: Any = None
    max_versions: Optional[int] = None
    cache_blocks: Optional[bool] = None
    store_limit: Optional[int] = None
    store_offset: Optional[int] = None
    existence_only: Optional[bool] = None
    consistency: Optional[Consistency] = None


@dataclass
class GetRequest:
    """A Get addressed to a region."""

    region: Optional[RegionSpecifier] = None
    get: Optional[GetMessage] = None


@dataclass
class GetResponse:
    """The response to a Get request."""

    result: Optional[ResultMessage] = None


def families_to_column(families: Optional[dict[str, Optional[list[str]]]]) -> list[Column]:
    """Turn a mapping of family to qualifiers into column messages."""
    if not families:
        return []
    return [
        Column(family=_as_bytes(family),
               qualifier=[_as_bytes(q) for q in (qualifiers or ())])
        for family, qualifiers in families.items()
    ]


class Get(BaseQuery, Call):
    """A request for a single row."""

    name = "Get"
    batchable = True

    def __init__(self, table: bytes = b"", key: bytes = b"") -> None:
        super().__init__(table, key)
        self.existence_only = False

    def exists_only(self) -> None:
        """Only ask whether the row exists, without returning its cells."""
        self.existence_only = True

    def to_proto(self) -> GetRequest:
        message = GetMessage(
            row=self.key,
            column=families_to_column(self.families),
            time_range=TimeRange(),
        )
        if self.store_limit != DEFAULT_MAX_RESULTS_PER_COLUMN_FAMILY:
            message.store_limit = self.store_limit
        if self.store_offset != 0:
            message.store_offset = self.store_offset
        if self.max_versions != DEFAULT_MAX_VERSIONS:
            message.max_versions = self.max_versions
        if self.from_timestamp != MIN_TIMESTAMP:
            message.time_range.from_ = self.from_timestamp
        if self.to_timestamp != MAX_TIMESTAMP:
            message.time_range.to = self.to_timestamp
        if self.existence_only:
            message.existence_only = True
        if self.cache_blocks != DEFAULT_CACHE_BLOCKS:
            message.cache_blocks = self.cache_blocks
        if self.consistency != ConsistencyType.DEFAULT:
            message.consistency = self.consistency.to_proto()
        message.filter = self.filter
        return GetRequest(region=self.region_specifier(), get=message)

    def new_response(self) -> GetResponse:
        return GetResponse()

    def deserialize_cell_blocks(self, response: GetResponse, data: bytes) -> int:
        """Append the cells carried in cell blocks to the result; return bytes read."""
        result = response.result
        if result is None:
            return 0
        cells, read = _decode_cells(data, result.associated_cell_count or 0)
        result.cell.extend(cells)
        return read


def new_get(table: BytesLike, key: BytesLike, *options: Option) -> Get:
    """Create a Get request for the given table and row key."""
    get = Get(_as_bytes(table), _as_bytes(key))
    apply_options(get, *options)
    return get