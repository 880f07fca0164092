"""Protocol messages shared by the RPC calls."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional


class CellType(enum.IntEnum):
    """Type byte stored with every cell."""

    MINIMUM = 0
    PUT = 4
    DELETE = 8
    DELETE_FAMILY_VERSION = 10
    DELETE_COLUMN = 12
    DELETE_FAMILY = 14
    MAXIMUM = 255


@dataclass
class Cell:
    """A single cell: one value of one qualifier of one row."""

    row: Optional[bytes] = None
    family: Optional[bytes] = None
    qualifier: Optional[bytes] = None
    timestamp: Optional[int] = None
    cell_type: Optional[int] = None
    value: Optional[bytes] = None


class RegionSpecifierType(enum.IntEnum):
    """How a region is named in a request."""

    REGION_NAME = 1
    ENCODED_REGION_NAME = 2


@dataclass
class RegionSpecifier:
    """Names the region a request is addressed to."""

    type: Optional[RegionSpecifierType] = None
    value: Optional[bytes] = None


@dataclass
class TableName:
    """A table name within a namespace."""

    namespace: Optional[bytes] = None
    qualifier: Optional[bytes] = None


@dataclass
class NameBytesPair:
    """A named attribute with a binary value."""

    name: Optional[str] = None
    value: Optional[bytes] = None


@dataclass
class BytesBytesPair:
    """A pair of binary strings."""

    first: Optional[bytes] = None
    second: Optional[bytes] = None


@dataclass
class TimeRange:
    """A half-open time range in milliseconds; unset ends are unbounded."""

    from_: Optional[int] = None
    to: Optional[int] = None


@dataclass
class Column:
    """A column family and the qualifiers selected within it."""

    family: Optional[bytes] = None
    qualifier: list[bytes] = field(default_factory=list)


@dataclass
class ResultMessage:
    """A row as returned on the wire."""

    cell: list[Cell] = field(default_factory=list)
    associated_cell_count: Optional[int] = None
    exists: Optional[bool] = None
    stale: Optional[bool] = None
    partial: Optional[bool] = None