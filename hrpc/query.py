"""Options shared by Get and Scan requests."""

from __future__ import annotations

import enum
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from hrpc.call import Call, Option, OptionError

DEFAULT_MAX_VERSIONS = 1
MIN_TIMESTAMP = 0
MAX_TIMESTAMP = 2**64 - 1
MAX_INT32 = 2**31 - 1
DEFAULT_MAX_RESULTS_PER_COLUMN_FAMILY = MAX_INT32
DEFAULT_CACHE_BLOCKS = True

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MILLISECOND = timedelta(milliseconds=1)


def to_millis(moment: datetime) -> int:
    """Return a point in time as whole milliseconds since the Unix epoch."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return (moment - _EPOCH) // _MILLISECOND


class Consistency(enum.IntEnum):
    """Consistency values as they appear in request messages."""

    STRONG = 0
    TIMELINE = 1


class ConsistencyType(enum.IntEnum):
    """Consistency of data a client asks for."""

    DEFAULT = 0
    STRONG = 1
    TIMELINE = 2

    def to_proto(self) -> Consistency:
        """Return the message value; the default has none of its own."""
        if self is ConsistencyType.TIMELINE:
            return Consistency.TIMELINE
        if self is ConsistencyType.STRONG:
            return Consistency.STRONG
        raise ValueError("default consistency depends on context")


class BaseQuery:
    """Fields common to the querying requests, set to their defaults."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.families: Optional[dict[str, list[str]]] = None
        self.filter: Any = None
        self.from_timestamp = MIN_TIMESTAMP
        self.to_timestamp = MAX_TIMESTAMP
        self.max_versions = DEFAULT_MAX_VERSIONS
        self.store_limit = DEFAULT_MAX_RESULTS_PER_COLUMN_FAMILY
        self.store_offset = 0
        self.priority = 0
        self.cache_blocks = DEFAULT_CACHE_BLOCKS
        self.consistency = ConsistencyType.DEFAULT


def get_priority(call: Call) -> int:
    """Return the priority of a call, or 0 if it has none."""
    if isinstance(call, BaseQuery):
        return call.priority
    return 0


def _query_only(call: Call, option_name: str, requests: str = "request") -> BaseQuery:
    if not isinstance(call, BaseQuery):
        raise OptionError(
            f"'{option_name}' option can only be used with Get or Scan {requests}")
    return call


def _check_int32(value: int, option_name: str, message: str) -> int:
    value = int(value)
    if value < 0:
        raise OptionError(f"'{option_name}' must not be negative")
    if value > MAX_INT32:
        raise OptionError(message)
    return value


def families(value: Optional[dict[str, list[str]]]) -> Option:
    """Restrict the request to these families and qualifiers."""

    def option(call: Call) -> None:
        _query_only(call, "Families").families = value

    return option


def filters(value: Any) -> Option:
    """Apply a filter; objects with ``construct_pb_filter`` are converted first."""

    def option(call: Call) -> None:
        query = _query_only(call, "Filters")
        construct = getattr(value, "construct_pb_filter", None)
        query.filter = construct() if callable(construct) else value

    return option


def time_range_uint64(start: int, end: int) -> Option:
    """Restrict to cells with timestamps in [start, end), in milliseconds."""

    def option(call: Call) -> None:
        query = _query_only(call, "TimeRange")
        if start >= end:
            raise OptionError("'from' timestamp is greater or equal to 'to' timestamp")
        query.from_timestamp = start
        query.to_timestamp = end

    return option


def time_range(start: datetime, end: datetime) -> Option:
    """Restrict to cells with timestamps in [start, end)."""
    return time_range_uint64(to_millis(start), to_millis(end))


def max_versions(versions: int) -> Option:
    """Limit the number of versions returned per cell."""

    def option(call: Call) -> None:
        query = _query_only(call, "MaxVersions")
        query.max_versions = _check_int32(
            versions, "MaxVersions", "'MaxVersions' exceeds supported number of versions")

    return option


def max_results_per_column_family(max_results: int) -> Option:
    """Limit the number of cells returned per column family in a row."""

    def option(call: Call) -> None:
        query = _query_only(call, "MaxResultsPerColumnFamily")
        query.store_limit = _check_int32(
            max_results, "MaxResultsPerColumnFamily",
            "'MaxResultsPerColumnFamily' exceeds supported number of value results")

    return option


def result_offset(offset: int) -> Option:
    """Skip this many cells within each column family."""

    def option(call: Call) -> None:
        query = _query_only(call, "ResultOffset")
        query.store_offset = _check_int32(
            offset, "ResultOffset", "'ResultOffset' exceeds supported offset value")

    return option


def cache_blocks(enabled: bool) -> Option:
    """Enable or disable the block cache for the request."""

    def option(call: Call) -> None:
        _query_only(call, "CacheBlocks").cache_blocks = bool(enabled)

    return option


def consistency(value: ConsistencyType) -> Option:
    """Ask for the given consistency of data."""

    def option(call: Call) -> None:
        query = _query_only(call, "Consistency", "requests")
        try:
            query.consistency = ConsistencyType(value)
        except ValueError:
            raise OptionError("invalid value for ConsistencyType") from None

    return option


def priority(value: int) -> Option:
    """Set the priority of the request."""

    def option(call: Call) -> None:
        query = _query_only(call, "Priority", "requests")
        if value < 0:
            raise OptionError("'Priority' must not be negative")
        query.priority = int(value)

    return option