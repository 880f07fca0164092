"""Machinery shared by every RPC call, and cell-block decoding."""

from __future__ import annotations

import queue
import struct
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional

from hrpc.messages import (
    Cell,
    CellType,
    RegionSpecifier,
    RegionSpecifierType,
    ResultMessage,
)

Option = Callable[["Call"], None]

_U32 = struct.Struct(">I")
_U64 = struct.Struct(">Q")
_KV_HEADER = struct.Struct(">IIH")
_MASK32 = 0xFFFFFFFF


class HrpcError(Exception):
    """Base class for errors raised by this package."""


class OptionError(HrpcError, ValueError):
    """An option was rejected by the call it was applied to."""


class CellBlockError(HrpcError, ValueError):
    """A cell block could not be decoded."""


@dataclass(frozen=True)
class RegionInfo:
    """A region of a table, as known to the client."""

    name: bytes
    table: bytes = b""
    namespace: bytes = b""
    start_key: bytes = b""
    stop_key: bytes = b""
    id: int = 0


@dataclass
class RPCResult:
    """The response message of a call, or the error it failed with."""

    msg: Any = None
    error: Optional[BaseException] = None


class Call(ABC):
    """An RPC call addressed to a table and row."""

    name: ClassVar[str] = ""
    batchable: ClassVar[bool] = False

    def __init__(self, table: bytes = b"", key: bytes = b"") -> None:
        self.table = table
        self.key = key
        self.options: tuple[Option, ...] = ()
        self.region: Any = None
        self.skip_batching = False
        self.results: queue.Queue[RPCResult] = queue.Queue(maxsize=1)

    def region_specifier(self) -> RegionSpecifier:
        """Return the specifier naming the region this call is sent to."""
        if self.region is None:
            raise HrpcError(f"{self.name or type(self).__name__} call has no region")
        custom = getattr(self.region, "region_specifier", None)
        if callable(custom):
            return custom()
        return RegionSpecifier(type=RegionSpecifierType.REGION_NAME, value=self.region.name)

    def description(self) -> str:
        """Return the label used for tracing and metrics."""
        return self.name

    @abstractmethod
    def to_proto(self) -> Any:
        """Return the request message for this call."""

    @abstractmethod
    def new_response(self) -> Any:
        """Return an empty message to read the response into."""


def skip_batch() -> Option:
    """Option asking for the call to be sent right away instead of batched."""

    def option(call: Call) -> None:
        if not call.batchable:
            raise OptionError("'SkipBatch' option only works with Get and Mutate requests")
        call.skip_batching = True

    return option


def can_batch(call: Call) -> bool:
    """Tell whether the call may be included in a multi request."""
    return call.batchable and not call.skip_batching


def apply_options(call: Call, *options: Option) -> None:
    """Record the options on the call and apply them in order."""
    call.options = options
    for option in options:
        option(call)


def _cell_type(value: int) -> int:
    try:
        return CellType(value)
    except ValueError:
        return value


def cell_from_cell_block(data: bytes | bytearray | memoryview) -> tuple[Cell, int]:
    """Decode one cell; return it with the number of bytes it took."""
    view = memoryview(data)
    if len(view) < 4:
        raise CellBlockError(f"buffer is too small: expected 4, got {len(view)}")
    (kv_len,) = _U32.unpack_from(view)
    if len(view) < kv_len + 4:
        raise CellBlockError(f"buffer is too small: expected {kv_len + 4}, got {len(view)}")

    record = view[4:4 + kv_len]
    if len(record) < _KV_HEADER.size:
        raise CellBlockError(f"KeyValue of {kv_len} bytes is too short")
    key_len, value_len, row_len = _KV_HEADER.unpack_from(record)
    pos = _KV_HEADER.size

    row = record[pos:pos + row_len]
    pos += row_len
    if pos >= len(record):
        raise CellBlockError("KeyValue is truncated within its key")
    family_len = record[pos]
    pos += 1
    family = record[pos:pos + family_len]
    pos += family_len

    qualifier_len = key_len - row_len - family_len - 2 - 1 - 8 - 1
    declared = (4 + 4 + 2 + row_len + 1 + family_len + qualifier_len + 8 + 1
                + value_len) & _MASK32
    if declared != kv_len:
        raise CellBlockError(
            f"HBase has lied about KeyValue length: expected {kv_len}, got {declared}")
    if qualifier_len < 0 or pos + qualifier_len + 9 + value_len > len(record):
        raise CellBlockError("KeyValue lengths are inconsistent")

    qualifier = record[pos:pos + qualifier_len]
    pos += qualifier_len
    (timestamp,) = _U64.unpack_from(record, pos)
    pos += 8
    cell_type = record[pos]
    pos += 1
    value = record[pos:pos + value_len]

    cell = Cell(
        row=bytes(row),
        family=bytes(family),
        qualifier=bytes(qualifier),
        timestamp=timestamp,
        value=bytes(value),
        cell_type=_cell_type(cell_type),
    )
    return cell, kv_len + 4


def deserialize_cell_blocks(data: bytes | bytearray | memoryview,
                            count: int) -> tuple[list[Cell], int]:
    """Decode ``count`` consecutive cells; return them with the bytes read."""
    view = memoryview(data)
    cells: list[Cell] = []
    read = 0
    for _ in range(count):
        cell, size = cell_from_cell_block(view[read:])
        cells.append(cell)
        read += size
    return cells, read


@dataclass
class Result:
    """The cells of a row along with flags about the response."""

    cells: list[Cell] = field(default_factory=list)
    stale: bool = False
    partial: bool = False
    exists: Optional[bool] = None

    def __str__(self) -> str:
        return (f"cells:{self.cells} stale:{self.stale} partial:{self.partial} "
                f"exists:{self.exists}")


def to_local_result(message: Optional[ResultMessage]) -> Result:
    """Turn a result message into a Result sharing its cell list."""
    if message is None:
        return Result()
    return Result(
        cells=message.cell,
        stale=bool(message.stale),
        partial=bool(message.partial),
        exists=message.exists,
    )