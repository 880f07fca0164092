"""Snapshot requests: take, check, delete, list and restore snapshots."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

from hrpc.call import Call, Option, OptionError, apply_options

_MIN_INT32 = -(2**31)
_MAX_INT32 = 2**31 - 1


class SnapshotType(enum.IntEnum):
    """How the server takes a snapshot."""

    DISABLED = 0
    FLUSH = 1
    SKIPFLUSH = 2


@dataclass
class SnapshotDescription:
    """A snapshot as described on the wire."""

    name: Optional[str] = None
    table: Optional[str] = None
    creation_time: Optional[int] = None
    type: Optional[SnapshotType] = None
    version: Optional[int] = None
    owner: Optional[str] = None


@dataclass
class SnapshotRequest:
    snapshot: Optional[SnapshotDescription] = None


@dataclass
class SnapshotResponse:
    expected_timeout: Optional[int] = None


@dataclass
class IsSnapshotDoneResponse:
    done: Optional[bool] = None
    snapshot: Optional[SnapshotDescription] = None


@dataclass
class DeleteSnapshotResponse:
    pass


@dataclass
class GetCompletedSnapshotsRequest:
    pass


@dataclass
class GetCompletedSnapshotsResponse:
    snapshots: list[SnapshotDescription] = field(default_factory=list)


@dataclass
class RestoreSnapshotResponse:
    proc_id: Optional[int] = None


@dataclass
class IsRestoreSnapshotDoneResponse:
    done: Optional[bool] = None


@dataclass
class _SnapshotSettings:
    name: str
    table: str
    snapshot_type: Optional[SnapshotType] = None
    version: Optional[int] = None
    owner: str = ""

    def to_description(self) -> SnapshotDescription:
        return SnapshotDescription(
            type=self.snapshot_type,
            table=self.table,
            name=self.name,
            version=self.version,
            owner=self.owner,
        )


class Snapshot(Call):
    """Requests a new snapshot of a table."""

    name = "Snapshot"

    def __init__(self, name: str, table: str) -> None:
        super().__init__(table.encode())
        self.settings = _SnapshotSettings(name=name, table=table)

    @property
    def snapshot_name(self) -> str:
        return self.settings.name

    def description(self) -> str:
        # Requests built from a snapshot report as the snapshot itself.
        return Snapshot.name

    def to_proto(self) -> SnapshotRequest:
        return SnapshotRequest(snapshot=self.settings.to_description())

    def new_response(self) -> SnapshotResponse:
        return SnapshotResponse()


class _FromSnapshot(Snapshot):
    """A request about an existing snapshot, sharing its settings."""

    def __init__(self, snapshot: Snapshot) -> None:
        Call.__init__(self, snapshot.table, snapshot.key)
        self.settings = snapshot.settings
        self.options = snapshot.options
        self.region = snapshot.region


class SnapshotDone(_FromSnapshot):
    """Asks whether a snapshot has been completed."""

    name = "IsSnapshotDone"

    def new_response(self) -> IsSnapshotDoneResponse:
        return IsSnapshotDoneResponse()


class DeleteSnapshot(_FromSnapshot):
    """Deletes a snapshot."""

    name = "DeleteSnapshot"

    def new_response(self) -> DeleteSnapshotResponse:
        return DeleteSnapshotResponse()


class RestoreSnapshot(_FromSnapshot):
    """Restores a table from a snapshot."""

    name = "RestoreSnapshot"

    def new_response(self) -> RestoreSnapshotResponse:
        return RestoreSnapshotResponse()


class RestoreSnapshotDone(_FromSnapshot):
    """Asks whether restoring a snapshot has been completed."""

    name = "IsRestoreSnapshotDone"

    def new_response(self) -> IsRestoreSnapshotDoneResponse:
        return IsRestoreSnapshotDoneResponse()


class ListSnapshots(Call):
    """Lists all completed snapshots."""

    name = "GetCompletedSnapshots"

    def __init__(self) -> None:
        super().__init__()

    def to_proto(self) -> GetCompletedSnapshotsRequest:
        return GetCompletedSnapshotsRequest()

    def new_response(self) -> GetCompletedSnapshotsResponse:
        return GetCompletedSnapshotsResponse()


def _snapshot_only(call: Call, option_name: str) -> Snapshot:
    if not isinstance(call, Snapshot):
        raise OptionError(f"'{option_name}' option can only be used with Snapshot queries")
    return call


def snapshot_version(version: int) -> Option:
    """Set the version of the snapshot."""

    def option(call: Call) -> None:
        snapshot = _snapshot_only(call, "SnapshotVersion")
        if not _MIN_INT32 <= version <= _MAX_INT32:
            raise OptionError("'SnapshotVersion' value is out of range")
        snapshot.settings.version = int(version)

    return option


def snapshot_owner(owner: str) -> Option:
    """Set the owner of the snapshot."""

    def option(call: Call) -> None:
        _snapshot_only(call, "SnapshotOwner").settings.owner = owner

    return option


def snapshot_skip_flush() -> Option:
    """Take the snapshot without flushing first."""

    def option(call: Call) -> None:
        _snapshot_only(call, "SnapshotSkipFlush").settings.snapshot_type = \
            SnapshotType.SKIPFLUSH

    return option


def new_snapshot(name: str, table: str, *options: Option) -> Snapshot:
    """Create a request for a new snapshot of a table."""
    snapshot = Snapshot(name, table)
    apply_options(snapshot, *options)
    return snapshot