"""Administrative requests: table management, balancer, procedures and regions."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from hrpc.call import Call, Option, OptionError, apply_options
from hrpc.messages import (
    BytesBytesPair,
    RegionSpecifier,
    RegionSpecifierType,
    TableName,
)

BytesLike = Union[bytes, bytearray, str, None]

DEFAULT_NAMESPACE = b"default"

DEFAULT_FAMILY_ATTRIBUTES: dict[str, str] = {
    "BLOOMFILTER": "ROW",
    "VERSIONS": "3",
    "IN_MEMORY": "false",
    "KEEP_DELETED_CELLS": "false",
    "DATA_BLOCK_ENCODING": "FAST_DIFF",
    "TTL": "2147483647",
    "COMPRESSION": "NONE",
    "MIN_VERSIONS": "0",
    "BLOCKCACHE": "true",
    "BLOCKSIZE": "65536",
    "REPLICATION_SCOPE": "0",
}


def _as_bytes(value: BytesLike) -> bytes:
    if value is None:
        return b""
    if isinstance(value, str):
        return value.encode()
    return bytes(value)


def _default_table_name(table: bytes) -> TableName:
    return TableName(namespace=DEFAULT_NAMESPACE, qualifier=table)


# Messages


@dataclass
class ColumnFamilySchema:
    """A column family and its attributes."""

    name: Optional[bytes] = None
    attributes: list[BytesBytesPair] = field(default_factory=list)


@dataclass
class TableSchema:
    """A table, its attributes and its column families."""

    table_name: Optional[TableName] = None
    attributes: list[BytesBytesPair] = field(default_factory=list)
    column_families: list[ColumnFamilySchema] = field(default_factory=list)


@dataclass
class ServerName:
    """A region server: host, port and start code."""

    host_name: Optional[str] = None
    port: Optional[int] = None
    start_code: Optional[int] = None


@dataclass
class CreateTableRequest:
    table_schema: Optional[TableSchema] = None
    split_keys: list[bytes] = field(default_factory=list)


@dataclass
class CreateTableResponse:
    proc_id: Optional[int] = None


@dataclass
class DeleteTableRequest:
    table_name: Optional[TableName] = None


@dataclass
class DeleteTableResponse:
    proc_id: Optional[int] = None


@dataclass
class DisableTableRequest:
    table_name: Optional[TableName] = None


@dataclass
class DisableTableResponse:
    proc_id: Optional[int] = None


@dataclass
class EnableTableRequest:
    table_name: Optional[TableName] = None


@dataclass
class EnableTableResponse:
    proc_id: Optional[int] = None


@dataclass
class SetBalancerRunningRequest:
    on: Optional[bool] = None


@dataclass
class SetBalancerRunningResponse:
    prev_balance_value: Optional[bool] = None


@dataclass
class GetProcedureResultRequest:
    proc_id: Optional[int] = None


@dataclass
class GetProcedureResultResponse:
    state: Optional[int] = None
    start_time: Optional[int] = None
    last_update: Optional[int] = None
    result: Optional[bytes] = None
    exception: Any = None


@dataclass
class GetClusterStatusRequest:
    pass


@dataclass
class GetClusterStatusResponse:
    cluster_status: Any = None


@dataclass
class GetTableNamesRequest:
    regex: Optional[str] = None
    include_sys_tables: Optional[bool] = None
    namespace: Optional[str] = None


@dataclass
class GetTableNamesResponse:
    table_names: list[TableName] = field(default_factory=list)


@dataclass
class MoveRegionRequest:
    region: Optional[RegionSpecifier] = None
    dest_server_name: Optional[ServerName] = None


@dataclass
class MoveRegionResponse:
    pass


# Calls

CreateTableOption = Callable[["CreateTable"], None]


class CreateTable(Call):
    """Creates a table with the given column families."""

    name = "CreateTable"

    def __init__(self, table: bytes = b"") -> None:
        super().__init__(table)
        self.attributes: dict[str, str] = {}
        self.families: dict[str, dict[str, str]] = {}
        self.split_keys: list[bytes] = []

    def to_proto(self) -> CreateTableRequest:
        attributes = [
            BytesBytesPair(first=k.encode(), second=v.encode())
            for k, v in self.attributes.items()
        ]
        column_families = [
            ColumnFamilySchema(
                name=family.encode(),
                attributes=[
                    BytesBytesPair(first=k.encode(), second=v.encode())
                    for k, v in attrs.items()
                ],
            )
            for family, attrs in self.families.items()
        ]
        return CreateTableRequest(
            table_schema=TableSchema(
                table_name=_default_table_name(self.table),
                attributes=attributes,
                column_families=column_families,
            ),
            split_keys=list(self.split_keys),
        )

    def new_response(self) -> CreateTableResponse:
        return CreateTableResponse()


def _create_table_only(call: Call, option_name: str) -> CreateTable:
    if not isinstance(call, CreateTable):
        raise OptionError(f"'{option_name}' option can only be used with CreateTable")
    return call


def split_keys(keys: Iterable[BytesLike]) -> CreateTableOption:
    """Pre-split the created table at these keys."""
    values = [_as_bytes(k) for k in keys]

    def option(call: CreateTable) -> None:
        _create_table_only(call, "SplitKeys").split_keys = list(values)

    return option


def table_attributes(attributes: Mapping[str, str]) -> CreateTableOption:
    """Set attributes on the created table."""
    values = dict(attributes)

    def option(call: CreateTable) -> None:
        _create_table_only(call, "TableAttributes").attributes = dict(values)

    return option


def new_create_table(table: BytesLike,
                     families: Mapping[str, Optional[Mapping[str, str]]],
                     *options: CreateTableOption) -> CreateTable:
    """Create a CreateTable request; each family gets the default attributes,
    overridden by the ones given for it."""
    create = CreateTable(_as_bytes(table))
    for option in options:
        option(create)
    for family, attrs in families.items():
        given = attrs or {}
        create.families[family] = {
            key: given.get(key, default)
            for key, default in DEFAULT_FAMILY_ATTRIBUTES.items()
        }
    return create


class _TableCall(Call):
    def __init__(self, table: BytesLike) -> None:
        super().__init__(_as_bytes(table))


class DeleteTable(_TableCall):
    """Deletes a table; it must be disabled first."""

    name = "DeleteTable"

    def to_proto(self) -> DeleteTableRequest:
        return DeleteTableRequest(table_name=_default_table_name(self.table))

    def new_response(self) -> DeleteTableResponse:
        return DeleteTableResponse()


class DisableTable(_TableCall):
    """Disables a table."""

    name = "DisableTable"

    def to_proto(self) -> DisableTableRequest:
        return DisableTableRequest(table_name=_default_table_name(self.table))

    def new_response(self) -> DisableTableResponse:
        return DisableTableResponse()


class EnableTable(_TableCall):
    """Enables a table."""

    name = "EnableTable"

    def to_proto(self) -> EnableTableRequest:
        return EnableTableRequest(table_name=_default_table_name(self.table))

    def new_response(self) -> EnableTableResponse:
        return EnableTableResponse()


class SetBalancer(Call):
    """Turns the balancer on or off."""

    name = "SetBalancerRunning"

    def __init__(self, enabled: bool) -> None:
        super().__init__()
        self.request = SetBalancerRunningRequest(on=bool(enabled))

    def to_proto(self) -> SetBalancerRunningRequest:
        return self.request

    def new_response(self) -> SetBalancerRunningResponse:
        return SetBalancerRunningResponse()


class GetProcedureState(Call):
    """Asks for the state of a procedure."""

    name = "getProcedureResult"

    def __init__(self, proc_id: int) -> None:
        super().__init__()
        if not 0 <= proc_id < 2**64:
            raise ValueError(f"procedure id {proc_id} is out of range")
        self.proc_id = proc_id

    def to_proto(self) -> GetProcedureResultRequest:
        return GetProcedureResultRequest(proc_id=self.proc_id)

    def new_response(self) -> GetProcedureResultResponse:
        return GetProcedureResultResponse()


class ClusterStatus(Call):
    """Asks for the status of the cluster."""

    name = "GetClusterStatus"

    def __init__(self) -> None:
        super().__init__(b"")

    def to_proto(self) -> GetClusterStatusRequest:
        return GetClusterStatusRequest()

    def new_response(self) -> GetClusterStatusResponse:
        return GetClusterStatusResponse()


class ListTableNames(Call):
    """Lists table names; by default every non-system table."""

    name = "GetTableNames"

    def __init__(self) -> None:
        super().__init__()
        self.regex = ".*"
        self.include_sys_tables = False
        self.namespace = ""

    def to_proto(self) -> GetTableNamesRequest:
        return GetTableNamesRequest(
            regex=self.regex,
            include_sys_tables=self.include_sys_tables,
            namespace=self.namespace,
        )

    def new_response(self) -> GetTableNamesResponse:
        return GetTableNamesResponse()


def _list_only(call: Call, option_name: str) -> ListTableNames:
    if not isinstance(call, ListTableNames):
        raise OptionError(f"{option_name} option can only be used with ListTableNames")
    return call


def list_regex(regex: str) -> Option:
    """Only list tables whose names match this regular expression."""

    def option(call: Call) -> None:
        _list_only(call, "ListRegex").regex = regex

    return option


def list_namespace(namespace: str) -> Option:
    """Only list tables in this namespace."""

    def option(call: Call) -> None:
        _list_only(call, "ListNamespace").namespace = namespace

    return option


def list_sys_tables(include: bool) -> Option:
    """Include system tables in the listing."""

    def option(call: Call) -> None:
        _list_only(call, "ListSysTables").include_sys_tables = bool(include)

    return option


def new_list_table_names(*options: Option) -> ListTableNames:
    """Create a request listing table names."""
    listing = ListTableNames()
    apply_options(listing, *options)
    return listing


class MoveRegion(Call):
    """Moves a region, named by its encoded name, to another region server."""

    name = "MoveRegion"

    def __init__(self, region_name: bytes) -> None:
        super().__init__()
        self.request = MoveRegionRequest(
            region=RegionSpecifier(
                type=RegionSpecifierType.ENCODED_REGION_NAME,
                value=region_name,
            ),
        )

    def to_proto(self) -> MoveRegionRequest:
        return self.request

    def new_response(self) -> MoveRegionResponse:
        return MoveRegionResponse()


def _parse_uint(text: str, bits: int, what: str) -> int:
    if not (text.isascii() and text.isdigit()):
        raise OptionError(f"failed to parse {what}: invalid syntax in {text!r}")
    value = int(text)
    if value >= 1 << bits:
        raise OptionError(f"failed to parse {what}: value {text!r} out of range")
    return value


def with_destination_region_server(server_name: str) -> Option:
    """Move the region to this server, given as ``<host>,<port>,<startcode>``."""

    def option(call: Call) -> None:
        if not isinstance(call, MoveRegion):
            raise OptionError(
                "WithDestinationRegionServer option can only be used with MoveRegion")
        parts = server_name.split(",", 2)
        if len(parts) != 3:
            raise OptionError(
                "invalid server name, needs to be of format <host>,<port>,<startcode>")
        host, port_text, start_code_text = parts
        port = _parse_uint(port_text, 32, "port")
        start_code = _parse_uint(start_code_text, 64, "startcode")
        call.request.dest_server_name = ServerName(
            host_name=host, port=port, start_code=start_code)

    return option


def new_move_region(region_name: BytesLike, *options: Option) -> MoveRegion:
    """Create a request moving the region with this encoded name."""
    move = MoveRegion(_as_bytes(region_name))
    apply_options(move, *options)
    return move