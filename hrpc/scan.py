"""The Scan request: read rows of a table in key order."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from hrpc.call import Call, CellBlockError, Option, OptionError, apply_options
from hrpc.call import deserialize_cell_blocks as _decode_cells
from hrpc.get import families_to_column
from hrpc.messages import (
    Column,
    NameBytesPair,
    RegionSpecifier,
    ResultMessage,
    TimeRange,
)
from hrpc.query import (
    DEFAULT_CACHE_BLOCKS,
    DEFAULT_MAX_RESULTS_PER_COLUMN_FAMILY,
    DEFAULT_MAX_VERSIONS,
    MAX_INT32,
    MAX_TIMESTAMP,
    MIN_TIMESTAMP,
    BaseQuery,
    Consistency,
    ConsistencyType,
)

BytesLike = Union[bytes, bytearray, str, None]

DEFAULT_MAX_RESULT_SIZE = 2097152
DEFAULT_NUMBER_OF_ROWS = MAX_INT32
NO_SCANNER_ID = 2**64 - 1
_MAX_UINT32 = 2**32 - 1


def _as_bytes(value: BytesLike) -> bytes:
    if value is None:
        return b""
    if isinstance(value, str):
        return value.encode()
    return bytes(value)


@dataclass
class ScanMessage:
    """What to read when opening a scanner."""

    column: list[Column] = field(default_factory=list)
    attribute: list[NameBytesPair] = field(default_factory=list)
    start_row: Optional[bytes] = None
    stop_row: Optional[bytes] = None
    filter: Any = None
    time_range: Optional[TimeRange] = None
    max_versions: Optional[int] = None
    cache_blocks: Optional[bool] = None
    max_result_size: Optional[int] = None
    store_limit: Optional[int] = None
    store_offset: Optional[int] = None
    reversed: Optional[bool] = None
    consistency: Optional[Consistency] = None


@dataclass
class ScanRequest:
    """Opens, continues or closes a scanner on a region."""

    region: Optional[RegionSpecifier] = None
    scan: Optional[ScanMessage] = None
    scanner_id: Optional[int] = None
    number_of_rows: Optional[int] = None
    close_scanner: Optional[bool] = None
    client_handles_partials: Optional[bool] = None
    client_handles_heartbeats: Optional[bool] = None
    track_scan_metrics: Optional[bool] = None


@dataclass
class ScanResponse:
    """The response to a Scan request."""

    cells_per_result: list[int] = field(default_factory=list)
    scanner_id: Optional[int] = None
    more_results: Optional[bool] = None
    ttl: Optional[int] = None
    results: list[ResultMessage] = field(default_factory=list)
    stale: Optional[bool] = None
    partial_flag_per_result: list[bool] = field(default_factory=list)
    more_results_in_region: Optional[bool] = None
    heartbeat_message: Optional[bool] = None
    scan_metrics: Optional[dict[str, int]] = None


class Scan(BaseQuery, Call):
    """A scanner over a table, optionally bounded to a key range."""

    name = "Scan"

    def __init__(self, table: bytes = b"") -> None:
        super().__init__(table, b"")
        self.start_row = b""
        self.stop_row = b""
        self.scanner_id = NO_SCANNER_ID
        self.max_result_size = DEFAULT_MAX_RESULT_SIZE
        self.number_of_rows = DEFAULT_NUMBER_OF_ROWS
        self.reversed = False
        self.attributes: list[NameBytesPair] = []
        self.track_scan_metrics = False
        self.close_scanner = False
        self.allow_partial_results = False

    def __str__(self) -> str:
        return (
            f"Scan{{Table={self.table!r} StartRow={self.start_row!r} "
            f"StopRow={self.stop_row!r} "
            f"TimeRange=({self.from_timestamp}, {self.to_timestamp}) "
            f"MaxVersions={self.max_versions} NumberOfRows={self.number_of_rows} "
            f"MaxResultSize={self.max_result_size} Familes={self.families} "
            f"Filter={self.filter} StoreLimit={self.store_limit} "
            f"StoreOffset={self.store_offset} ScannerID={self.scanner_id} "
            f"Close={self.close_scanner}}}"
        )

    def to_proto(self) -> ScanRequest:
        request = ScanRequest(
            region=self.region_specifier(),
            close_scanner=self.close_scanner,
            number_of_rows=self.number_of_rows,
            client_handles_partials=True,
            client_handles_heartbeats=True,
            track_scan_metrics=self.track_scan_metrics,
        )
        if self.scanner_id != NO_SCANNER_ID:
            request.scanner_id = self.scanner_id
            return request

        message = ScanMessage(
            column=families_to_column(self.families),
            start_row=self.start_row,
            stop_row=self.stop_row,
            time_range=TimeRange(),
            max_result_size=self.max_result_size,
        )
        if self.max_versions != DEFAULT_MAX_VERSIONS:
            message.max_versions = self.max_versions
        if self.store_limit != DEFAULT_MAX_RESULTS_PER_COLUMN_FAMILY:
            message.store_limit = self.store_limit
        if self.store_offset != 0:
            message.store_offset = self.store_offset
        if self.from_timestamp != MIN_TIMESTAMP:
            message.time_range.from_ = self.from_timestamp
        if self.to_timestamp != MAX_TIMESTAMP:
            message.time_range.to = self.to_timestamp
        if self.reversed:
            message.reversed = True
        if self.cache_blocks != DEFAULT_CACHE_BLOCKS:
            message.cache_blocks = self.cache_blocks
        if self.consistency != ConsistencyType.DEFAULT:
            message.consistency = self.consistency.to_proto()
        message.attribute = list(self.attributes)
        message.filter = self.filter
        request.scan = message
        return request

    def new_response(self) -> ScanResponse:
        return ScanResponse()

    def deserialize_cell_blocks(self, response: ScanResponse, data: bytes) -> int:
        """Fill the response results from cell blocks; return bytes read."""
        partials = response.partial_flag_per_result
        counts = response.cells_per_result
        if len(counts) > len(partials):
            raise CellBlockError(
                f"{len(counts)} cell counts given for {len(partials)} partial flags")
        view = memoryview(data)
        results: list[ResultMessage] = []
        read = 0
        for count, partial in zip(counts, partials):
            cells, size = _decode_cells(view[read:], count)
            results.append(ResultMessage(cell=cells, partial=partial))
            read += size
        response.results = results
        return read


def new_scan(table: BytesLike, *options: Option) -> Scan:
    """Create a scanner over the whole table."""
    scan = Scan(_as_bytes(table))
    apply_options(scan, *options)
    return scan


def new_scan_range(table: BytesLike, start_row: BytesLike, stop_row: BytesLike,
                   *options: Option) -> Scan:
    """Create a scanner over the half-open key range [start_row, stop_row)."""
    scan = new_scan(table, *options)
    scan.start_row = _as_bytes(start_row)
    scan.stop_row = _as_bytes(stop_row)
    scan.key = scan.start_row
    return scan


def _scan_only(call: Call, option_name: str) -> Scan:
    if not isinstance(call, Scan):
        raise OptionError(f"'{option_name}' option can only be used with Scan queries")
    return call


def scanner_id(value: int) -> Option:
    """Continue an ongoing scan with the given scanner id."""

    def option(call: Call) -> None:
        _scan_only(call, "ScannerID").scanner_id = value

    return option


def close_scanner() -> Option:
    """Close the scanner after the first response."""

    def option(call: Call) -> None:
        _scan_only(call, "Close").close_scanner = True

    return option


def max_result_size(size: int) -> Option:
    """Limit the number of bytes fetched per round trip."""

    def option(call: Call) -> None:
        scan = _scan_only(call, "MaxResultSize")
        if size <= 0:
            raise OptionError("'MaxResultSize' option must be greater than 0")
        scan.max_result_size = size

    return option


def number_of_rows(count: int) -> Option:
    """Set how many rows are fetched per round trip."""

    def option(call: Call) -> None:
        scan = _scan_only(call, "NumberOfRows")
        if not 0 <= count <= _MAX_UINT32:
            raise OptionError("'NumberOfRows' is out of range")
        scan.number_of_rows = count

    return option


def allow_partial_results() -> Option:
    """Let the scanner return rows in parts."""

    def option(call: Call) -> None:
        _scan_only(call, "AllowPartialResults").allow_partial_results = True

    return option


def track_scan_metrics() -> Option:
    """Ask the server to report scan metrics."""

    def option(call: Call) -> None:
        _scan_only(call, "TrackScanMetrics").track_scan_metrics = True

    return option


def reverse() -> Option:
    """Scan in reverse key order."""

    def option(call: Call) -> None:
        _scan_only(call, "Reversed").reversed = True

    return option


def attribute(key: str, value: bytes) -> Option:
    """Add a named attribute to the scan; may be given several times."""

    def option(call: Call) -> None:
        scan = _scan_only(call, "Attributes")
        scan.attributes.append(NameBytesPair(name=key, value=value))

    return option