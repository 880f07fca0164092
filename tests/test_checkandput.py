import pytest

from hrpc.call import HrpcError, RegionInfo, can_batch
from hrpc.checkandput import (
    COMPARE_TYPE_EQUAL,
    BinaryComparator,
    Condition,
    new_check_and_put,
)
from hrpc.mutate import (
    MutateResponse,
    MutationType,
    new_app,
    new_del,
    new_inc,
    new_put,
    timestamp_uint64,
)


def _put(*options):
    return new_put("table", "key", {"cf": {"q": b"value"}}, *options)


def test_condition_in_proto():
    cp = new_check_and_put(_put(), "cf", "q", b"expected")
    cp.region = RegionInfo(name=b"region")
    request = cp.to_proto()
    assert request.condition == Condition(
        row=b"key",
        family=b"cf",
        qualifier=b"q",
        compare_type=COMPARE_TYPE_EQUAL,
        comparator=BinaryComparator(value=b"expected"),
    )
    assert request.region.value == b"region"


def test_mutation_carried_over():
    cp = new_check_and_put(_put(timestamp_uint64(42)), "cf", "q", b"x")
    cp.region = RegionInfo(name=b"region")
    mutation = cp.to_proto().mutation
    assert mutation.row == b"key"
    assert mutation.mutate_type is MutationType.PUT
    assert mutation.timestamp == 42
    assert mutation.column_value[0].family == b"cf"
    assert mutation.column_value[0].qualifier_value[0].value == b"value"
    assert cp.name == "Mutate"
    assert cp.description() == "PUT"
    assert isinstance(cp.new_response(), MutateResponse)


def test_not_batchable_and_no_cell_blocks():
    put = _put()
    assert can_batch(put) is True
    cp = new_check_and_put(put, "cf", "q", b"x")
    assert can_batch(put) is False
    assert can_batch(cp) is False
    assert cp.cell_blocks_enabled() is False


@pytest.mark.parametrize("make", [new_del, new_app, new_inc])
def test_only_put_accepted(make):
    mutate = make("table", "key", {"cf": {"q": b"v"}})
    with pytest.raises(HrpcError) as exc:
        new_check_and_put(mutate, "cf", "q", b"x")
    assert str(exc.value) == "'CheckAndPut' only takes 'Put' request"


def test_requires_region_for_proto():
    cp = new_check_and_put(_put(), "cf", "q", b"x")
    with pytest.raises(HrpcError):
        cp.to_proto()