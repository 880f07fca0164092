"""Mutations of a single row: put, delete, append and increment."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional, Union

from hrpc.call import Call, HrpcError, Option, OptionError, apply_options
from hrpc.call import deserialize_cell_blocks as _decode_cells
from hrpc.messages import CellType, NameBytesPair, RegionSpecifier, ResultMessage
from hrpc.query import MAX_TIMESTAMP, to_millis

BytesLike = Union[bytes, bytearray, str, None]
Values = dict[Any, Optional[dict[Any, Optional[bytes]]]]

ATTRIBUTE_NAME_TTL = "_ttl"

# HBase's LATEST_TIMESTAMP, the largest signed 64-bit value.
_LATEST_TIMESTAMP = 2**63 - 1
_MASK64 = 2**64 - 1
_MILLISECOND = timedelta(milliseconds=1)
_U64 = struct.Struct(">Q")
_CELL_HEADER = struct.Struct(">IIIH")
_EMPTY_QUALIFIER: dict[str, Optional[bytes]] = {"": None}


def _as_bytes(value: BytesLike) -> bytes:
    if value is None:
        return b""
    if isinstance(value, str):
        return value.encode()
    return bytes(value)


class DurabilityType(enum.IntEnum):
    """How durably the server writes a mutation."""

    USE_DEFAULT = 0
    SKIP_WAL = 1
    ASYNC_WAL = 2
    SYNC_WAL = 3
    FSYNC_WAL = 4


class MutationType(enum.IntEnum):
    """The kind of mutation."""

    APPEND = 0
    INCREMENT = 1
    PUT = 2
    DELETE = 3


class DeleteType(enum.IntEnum):
    """What a delete of a qualifier removes."""

    DELETE_ONE_VERSION = 0
    DELETE_MULTIPLE_VERSIONS = 1
    DELETE_FAMILY = 2
    DELETE_FAMILY_VERSION = 3


@dataclass
class QualifierValue:
    """A qualifier and its value within a column family."""

    qualifier: Optional[bytes] = None
    value: Optional[bytes] = None
    timestamp: Optional[int] = None
    delete_type: Optional[DeleteType] = None


@dataclass
class ColumnValue:
    """The qualifiers of one column family touched by a mutation."""

    family: Optional[bytes] = None
    qualifier_value: list[QualifierValue] = field(default_factory=list)


@dataclass
class MutationProto:
    """A mutation of one row as sent on the wire."""

    row: Optional[bytes] = None
    mutate_type: Optional[MutationType] = None
    column_value: list[ColumnValue] = field(default_factory=list)
    timestamp: Optional[int] = None
    attribute: list[NameBytesPair] = field(default_factory=list)
    durability: Optional[DurabilityType] = None
    associated_cell_count: Optional[int] = None


@dataclass
class MutateRequest:
    """A mutation addressed to a region, with an optional condition."""

    region: Optional[RegionSpecifier] = None
    mutation: Optional[MutationProto] = None
    condition: Any = None


@dataclass
class MutateResponse:
    """The response to a mutation."""

    result: Optional[ResultMessage] = None
    processed: Optional[bool] = None


def _encode_cell(row: bytes, family: bytes, qualifier: bytes, value: bytes,
                 ts: int, cell_type: int) -> bytes:
    if len(row) > 0xFFFF:
        raise HrpcError(f"row key of {len(row)} bytes is too long")
    if len(family) > 0xFF:
        raise HrpcError(f"column family of {len(family)} bytes is too long")
    key_length = 2 + len(row) + 1 + len(family) + len(qualifier) + 8 + 1
    kv_length = 4 + 4 + key_length + len(value)
    return b"".join((
        _CELL_HEADER.pack(kv_length, key_length, len(value), len(row)),
        row,
        bytes((len(family),)),
        family,
        qualifier,
        _U64.pack(ts),
        bytes((cell_type,)),
        value,
    ))


class Mutate(Call):
    """A mutation of a single row."""

    name = "Mutate"
    batchable = True

    def __init__(self, table: bytes = b"", key: bytes = b"",
                 values: Optional[Values] = None,
                 mutation_type: MutationType = MutationType.PUT) -> None:
        super().__init__(table, key)
        self.mutation_type = mutation_type
        self.values = values
        self.ttl = b""
        self.timestamp = MAX_TIMESTAMP
        self.durability = DurabilityType.USE_DEFAULT
        self.delete_one_version = False

    def description(self) -> str:
        """Return the kind of mutation, such as ``PUT``."""
        return self.mutation_type.name

    def _delete_type(self, qualifiers: Optional[dict]) -> DeleteType:
        if not qualifiers:
            if self.delete_one_version:
                return DeleteType.DELETE_FAMILY_VERSION
            return DeleteType.DELETE_FAMILY
        if self.delete_one_version:
            return DeleteType.DELETE_ONE_VERSION
        return DeleteType.DELETE_MULTIPLE_VERSIONS

    def _cell_type(self, qualifiers: Optional[dict]) -> int:
        if self.mutation_type is not MutationType.DELETE:
            return CellType.PUT
        return {
            DeleteType.DELETE_FAMILY_VERSION: CellType.DELETE_FAMILY_VERSION,
            DeleteType.DELETE_FAMILY: CellType.DELETE_FAMILY,
            DeleteType.DELETE_ONE_VERSION: CellType.DELETE,
            DeleteType.DELETE_MULTIPLE_VERSIONS: CellType.DELETE_COLUMN,
        }[self._delete_type(qualifiers)]

    def _qualifiers(self, qualifiers: Optional[dict]) -> dict:
        if qualifiers is None and self.mutation_type is MutationType.DELETE:
            return _EMPTY_QUALIFIER
        return qualifiers or {}

    def _values_to_proto(self, ts: Optional[int]) -> list[ColumnValue]:
        columns = []
        for family, qualifiers in (self.values or {}).items():
            delete_type = None
            if self.mutation_type is MutationType.DELETE:
                delete_type = self._delete_type(qualifiers)
            columns.append(ColumnValue(
                family=_as_bytes(family),
                qualifier_value=[
                    QualifierValue(
                        qualifier=_as_bytes(qualifier),
                        value=None if value is None else bytes(value),
                        timestamp=ts,
                        delete_type=delete_type,
                    )
                    for qualifier, value in self._qualifiers(qualifiers).items()
                ],
            ))
        return columns

    def _values_to_cellblocks(self) -> tuple[bytes, int]:
        if not self.values:
            return b"", 0
        ts = _LATEST_TIMESTAMP if self.timestamp == MAX_TIMESTAMP else self.timestamp
        row = _as_bytes(self.key)
        encoded = []
        for family, qualifiers in self.values.items():
            cell_type = self._cell_type(qualifiers)
            family_bytes = _as_bytes(family)
            for qualifier, value in self._qualifiers(qualifiers).items():
                encoded.append(_encode_cell(row, family_bytes, _as_bytes(qualifier),
                                            _as_bytes(value), ts, cell_type))
        return b"".join(encoded), len(encoded)

    def _to_proto(self, cellblocks: bool) -> tuple[MutateRequest, bytes]:
        ts = None if self.timestamp == MAX_TIMESTAMP else self.timestamp
        mutation = MutationProto(
            row=self.key,
            mutate_type=self.mutation_type,
            durability=self.durability,
            timestamp=ts,
        )
        block = b""
        if cellblocks:
            block, count = self._values_to_cellblocks()
            mutation.associated_cell_count = count
        else:
            mutation.column_value = self._values_to_proto(ts)
        if self.ttl:
            mutation.attribute.append(NameBytesPair(name=ATTRIBUTE_NAME_TTL, value=self.ttl))
        return MutateRequest(region=self.region_specifier(), mutation=mutation), block

    def to_proto(self) -> MutateRequest:
        request, _ = self._to_proto(False)
        return request

    def new_response(self) -> MutateResponse:
        return MutateResponse()

    def serialize_cell_blocks(
            self, cellblocks: Optional[list[bytes]] = None
    ) -> tuple[MutateRequest, list[bytes], int]:
        """Return the request without values, the cell blocks with this call's
        appended, and the size of what was appended."""
        blocks = list(cellblocks or ())
        request, block = self._to_proto(True)
        if block:
            blocks.append(block)
        return request, blocks, len(block)

    def deserialize_cell_blocks(self, response: MutateResponse, data: bytes) -> int:
        """Append the cells carried in cell blocks to the result; return bytes read."""
        result = response.result
        if result is None:
            return 0
        cells, read = _decode_cells(data, result.associated_cell_count or 0)
        result.cell.extend(cells)
        return read

    def cell_blocks_enabled(self) -> bool:
        return True


def _mutation_only(call: Call, option_name: str) -> Mutate:
    if not isinstance(call, Mutate):
        raise OptionError(f"'{option_name}' option can only be used with mutation queries")
    return call


def ttl(seconds: Union[float, timedelta]) -> Option:
    """Set a time-to-live on the mutation, kept at millisecond resolution."""
    span = seconds if isinstance(seconds, timedelta) else timedelta(seconds=seconds)
    millis = span // _MILLISECOND

    def option(call: Call) -> None:
        _mutation_only(call, "TTL").ttl = _U64.pack(millis & _MASK64)

    return option


def timestamp(moment: datetime) -> Option:
    """Set the timestamp of the mutation, rounded to milliseconds."""
    millis = to_millis(moment) & _MASK64

    def option(call: Call) -> None:
        _mutation_only(call, "Timestamp").timestamp = millis

    return option


def timestamp_uint64(value: int) -> Option:
    """Set the timestamp of the mutation as a raw number."""

    def option(call: Call) -> None:
        mutate = _mutation_only(call, "TimestampUint64")
        if not 0 <= value <= _MASK64:
            raise OptionError("'TimestampUint64' value is out of range")
        mutate.timestamp = value

    return option


def durability(value: Union[DurabilityType, int]) -> Option:
    """Set the durability of the mutation."""

    def option(call: Call) -> None:
        mutate = _mutation_only(call, "Durability")
        try:
            mutate.durability = DurabilityType(value)
        except ValueError:
            raise OptionError("invalid durability value") from None

    return option


def delete_one_version() -> Option:
    """Delete only the latest version, or the one at the given timestamp."""

    def option(call: Call) -> None:
        _mutation_only(call, "DeleteOneVersion").delete_one_version = True

    return option


def _base_mutate(table: BytesLike, key: BytesLike, values: Optional[Values],
                 mutation_type: MutationType, options: tuple[Option, ...]) -> Mutate:
    mutate = Mutate(_as_bytes(table), _as_bytes(key), values, mutation_type)
    apply_options(mutate, *options)
    return mutate


def new_put(table: BytesLike, key: BytesLike, values: Optional[Values],
            *options: Option) -> Mutate:
    """Create a request storing the given values in a row."""
    return _base_mutate(table, key, values, MutationType.PUT, options)


def new_del(table: BytesLike, key: BytesLike, values: Optional[Values],
            *options: Option) -> Mutate:
    """Create a delete of a whole row (no values), of families, or of qualifiers."""
    mutate = _base_mutate(table, key, values, MutationType.DELETE, options)
    if not mutate.values and mutate.delete_one_version:
        raise OptionError(
            "'DeleteOneVersion' option cannot be specified for delete entire row request")
    return mutate


def new_app(table: BytesLike, key: BytesLike, values: Optional[Values],
            *options: Option) -> Mutate:
    """Create a request appending the given values to existing cells."""
    return _base_mutate(table, key, values, MutationType.APPEND, options)


def new_inc(table: BytesLike, key: BytesLike, values: Optional[Values],
            *options: Option) -> Mutate:
    """Create a request incrementing the given cells."""
    return _base_mutate(table, key, values, MutationType.INCREMENT, options)


def new_inc_single(table: BytesLike, key: BytesLike, family: str, qualifier: str,
                   amount: int, *options: Option) -> Mutate:
    """Create a request incrementing one cell by ``amount``."""
    value = _U64.pack(amount & _MASK64)
    return new_inc(table, key, {family: {qualifier: value}}, *options)