# hrpc

Request objects for talking to HBase, plus the codec for the cell-block
format that region servers use to carry cells after a request or response
message.

The package builds requests and decodes responses. A transport layer takes
a request's `to_proto()` message, sends it, fills in the message from
`new_response()` and decodes any trailing cell blocks with the call's
`deserialize_cell_blocks` method.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Addressing a region

Requests that go to a region server (`Get`, `Scan`, `Mutate`) need a region
before `to_proto()` is called; without one it raises `hrpc.call.HrpcError`.

```python
from hrpc.call import RegionInfo

get.region = RegionInfo(name=b"users,,1")
request = get.to_proto()
```

## Reading

```python
from hrpc.get import new_get
from hrpc.scan import new_scan_range, number_of_rows
from hrpc.query import families, max_versions, time_range_uint64

get = new_get(b"users", b"row-1", families({"info": ["name", "email"]}), max_versions(3))
get.exists_only()

scan = new_scan_range(b"users", b"a", b"m", number_of_rows(100), time_range_uint64(0, 1000))
```

Options are plain callables passed after the positional arguments. An
option used with the wrong kind of request, or given a value out of range,
raises `hrpc.call.OptionError` when the request is built. Options shared by
Get and Scan live in `hrpc.query` (`families`, `filters`, `time_range`,
`time_range_uint64`, `max_versions`, `max_results_per_column_family`,
`result_offset`, `cache_blocks`, `consistency`, `priority`); scan-only
options live in `hrpc.scan` (`scanner_id`, `close_scanner`,
`max_result_size`, `number_of_rows`, `allow_partial_results`,
`track_scan_metrics`, `reverse`, `attribute`).

## Writing

```python
from hrpc.mutate import new_put, new_del, new_inc_single, ttl, durability, DurabilityType

put = new_put(b"users", b"row-1", {"info": {"name": b"Ada"}}, ttl(60),
              durability(DurabilityType.SKIP_WAL))
delete = new_del(b"users", b"row-1", {"info": None})
counter = new_inc_single(b"stats", b"day-1", "c", "hits", 1)
```

`new_app` and `new_inc` build append and increment mutations; `timestamp`,
`timestamp_uint64` and `delete_one_version` are further mutation options.
`Mutate.serialize_cell_blocks` returns the request message without values,
the list of cell blocks with this mutation's block appended, and the size
of that block.

`hrpc.checkandput.new_check_and_put` wraps a put so that it is applied only
when a cell holds an expected value; given anything but a put it raises
`hrpc.call.HrpcError`.

## Administration

`hrpc.admin` builds master requests: `new_create_table` (with
`split_keys` and `table_attributes`; each family gets the default
attributes in `DEFAULT_FAMILY_ATTRIBUTES` unless overridden),
`DeleteTable`, `DisableTable`, `EnableTable`, `SetBalancer`,
`GetProcedureState`, `ClusterStatus`, `new_list_table_names` (with
`list_regex`, `list_namespace`, `list_sys_tables`) and `new_move_region`
(with `with_destination_region_server`, taking `<host>,<port>,<startcode>`).

`hrpc.snapshot` covers snapshots: `new_snapshot` (with `snapshot_version`,
`snapshot_owner`, `snapshot_skip_flush`), and `SnapshotDone`,
`DeleteSnapshot`, `RestoreSnapshot` and `RestoreSnapshotDone` built from a
`Snapshot`, plus `ListSnapshots`.

## Cell blocks

```python
from hrpc.call import deserialize_cell_blocks, to_local_result

cells, consumed = deserialize_cell_blocks(payload, 2)
```

Malformed or short input raises `hrpc.call.CellBlockError`.
`to_local_result` turns a `ResultMessage` into a `Result` holding its cells
and flags.

## What the package does not do

It opens no connections, locates no regions, and retries nothing: sending
requests and reading responses off the wire is left to the caller. Messages
are plain dataclasses; the package does not encode them to or from protobuf
bytes. It keeps no metrics and does no tracing.