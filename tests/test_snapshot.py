import pytest

from hrpc.call import OptionError
from hrpc.get import new_get
from hrpc.snapshot import (
    DeleteSnapshot,
    DeleteSnapshotResponse,
    GetCompletedSnapshotsRequest,
    GetCompletedSnapshotsResponse,
    IsRestoreSnapshotDoneResponse,
    IsSnapshotDoneResponse,
    ListSnapshots,
    RestoreSnapshot,
    RestoreSnapshotDone,
    RestoreSnapshotResponse,
    SnapshotDescription,
    SnapshotDone,
    SnapshotResponse,
    SnapshotType,
    new_snapshot,
    snapshot_owner,
    snapshot_skip_flush,
    snapshot_version,
)


def test_new_snapshot_defaults():
    sn = new_snapshot("snap1", "table1")
    assert sn.table == b"table1"
    assert sn.name == "Snapshot"
    assert sn.description() == "Snapshot"
    assert sn.to_proto().snapshot == SnapshotDescription(
        name="snap1", table="table1", type=None, version=None, owner="")
    assert isinstance(sn.new_response(), SnapshotResponse)


def test_snapshot_options():
    sn = new_snapshot("snap1", "table1", snapshot_version(3),
                      snapshot_owner("someone"), snapshot_skip_flush())
    desc = sn.to_proto().snapshot
    assert desc.version == 3
    assert desc.owner == "someone"
    assert desc.type is SnapshotType.SKIPFLUSH
    assert desc.name == "snap1"
    assert len(sn.options) == 3


@pytest.mark.parametrize("option,label", [
    (snapshot_version(1), "SnapshotVersion"),
    (snapshot_owner("o"), "SnapshotOwner"),
    (snapshot_skip_flush(), "SnapshotSkipFlush"),
])
def test_snapshot_options_rejected_by_other_calls(option, label):
    with pytest.raises(OptionError) as exc:
        new_get("t", "k", option)
    assert str(exc.value) == f"'{label}' option can only be used with Snapshot queries"


def test_snapshot_version_out_of_range():
    with pytest.raises(OptionError):
        new_snapshot("s", "t", snapshot_version(2**31))


@pytest.mark.parametrize("cls,name,response", [
    (SnapshotDone, "IsSnapshotDone", IsSnapshotDoneResponse),
    (DeleteSnapshot, "DeleteSnapshot", DeleteSnapshotResponse),
    (RestoreSnapshot, "RestoreSnapshot", RestoreSnapshotResponse),
    (RestoreSnapshotDone, "IsRestoreSnapshotDone", IsRestoreSnapshotDoneResponse),
])
def test_requests_from_snapshot(cls, name, response):
    sn = new_snapshot("snap1", "table1", snapshot_owner("someone"))
    call = cls(sn)
    assert call.name == name
    assert isinstance(call.new_response(), response)
    assert call.to_proto() == sn.to_proto()
    assert call.table == b"table1"
    assert call.description() == "Snapshot"


def test_requests_share_snapshot_settings():
    sn = new_snapshot("snap1", "table1")
    done = SnapshotDone(sn)
    snapshot_owner("later")(sn)
    assert done.to_proto().snapshot.owner == "later"


def test_list_snapshots():
    ls = ListSnapshots()
    assert ls.name == "GetCompletedSnapshots"
    assert ls.description() == "GetCompletedSnapshots"
    assert ls.to_proto() == GetCompletedSnapshotsRequest()
    resp = ls.new_response()
    assert isinstance(resp, GetCompletedSnapshotsResponse)
    assert resp.snapshots == []