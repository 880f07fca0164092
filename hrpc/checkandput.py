"""CheckAndPut: apply a Put only if a cell holds an expected value."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from hrpc.call import HrpcError
from hrpc.mutate import Mutate, MutateRequest, MutationType

COMPARE_TYPE_EQUAL = 2

_Name = Union[str, bytes, bytearray]


def _as_bytes(value: _Name) -> bytes:
    if isinstance(value, str):
        return value.encode()
    return bytes(value)


@dataclass(frozen=True)
class BinaryComparator:
    """Compares a cell value byte for byte with ``value``."""

    value: bytes = b""


@dataclass
class Condition:
    """The condition a cell must meet for a mutation to be applied."""

    row: Optional[bytes] = None
    family: Optional[bytes] = None
    qualifier: Optional[bytes] = None
    compare_type: Optional[int] = None
    comparator: Optional[BinaryComparator] = None


class CheckAndPut(Mutate):
    """A Put applied only if family:qualifier of the row equals a given value."""

    def __init__(self, put: Mutate, family: _Name, qualifier: _Name,
                 comparator: BinaryComparator) -> None:
        super().__init__(put.table, put.key, put.values, put.mutation_type)
        self.ttl = put.ttl
        self.timestamp = put.timestamp
        self.durability = put.durability
        self.delete_one_version = put.delete_one_version
        self.options = put.options
        self.region = put.region
        self.skip_batching = put.skip_batching
        self.family = _as_bytes(family)
        self.qualifier = _as_bytes(qualifier)
        self.comparator = comparator

    def to_proto(self) -> MutateRequest:
        request, _ = self._to_proto(False)
        request.condition = Condition(
            row=self.key,
            family=self.family,
            qualifier=self.qualifier,
            compare_type=COMPARE_TYPE_EQUAL,
            comparator=self.comparator,
        )
        return request

    def cell_blocks_enabled(self) -> bool:
        """Cell blocks are not supported for conditional puts."""
        return False


def new_check_and_put(put: Mutate, family: _Name, qualifier: _Name,
                      expected_value: bytes) -> CheckAndPut:
    """Create a CheckAndPut from a Put and the value the cell must hold."""
    if put.mutation_type is not MutationType.PUT:
        raise HrpcError("'CheckAndPut' only takes 'Put' request")
    comparator = BinaryComparator(value=bytes(expected_value or b""))
    # The multi response carries no processed flag, so this is never batched.
    put.skip_batching = True
    return CheckAndPut(put, family, qualifier, comparator)