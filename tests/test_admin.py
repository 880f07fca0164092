import pytest

from hrpc.admin import (
    DEFAULT_FAMILY_ATTRIBUTES,
    ClusterStatus,
    CreateTable,
    CreateTableResponse,
    DeleteTable,
    DisableTable,
    EnableTable,
    GetProcedureState,
    ListTableNames,
    MoveRegion,
    ServerName,
    SetBalancer,
    list_namespace,
    list_regex,
    list_sys_tables,
    new_create_table,
    new_list_table_names,
    new_move_region,
    split_keys,
    table_attributes,
    with_destination_region_server,
)
from hrpc.call import OptionError, apply_options
from hrpc.messages import BytesBytesPair, RegionSpecifierType, TableName

C_FAMILIES = {"cf": None, "cf2": {"MIN_VERSIONS": "1"}}


def _family_attrs(request, family):
    for schema in request.table_schema.column_families:
        if schema.name == family:
            return {p.first.decode(): p.second.decode() for p in schema.attributes}
    raise AssertionError(f"family {family!r} missing")


def test_create_table_fills_default_attributes():
    create = new_create_table(b"test1", C_FAMILIES)
    request = create.to_proto()
    assert request.table_schema.table_name == TableName(namespace=b"default",
                                                         qualifier=b"test1")
    assert _family_attrs(request, b"cf") == DEFAULT_FAMILY_ATTRIBUTES
    cf2 = _family_attrs(request, b"cf2")
    assert cf2["MIN_VERSIONS"] == "1"
    assert cf2["BLOOMFILTER"] == "ROW"
    assert set(cf2) == set(DEFAULT_FAMILY_ATTRIBUTES)
    assert request.split_keys == []
    assert request.table_schema.attributes == []


def test_create_table_ignores_unknown_family_attributes():
    create = new_create_table("t", {"cf": {"NOT_AN_ATTRIBUTE": "x"}})
    assert "NOT_AN_ATTRIBUTE" not in _family_attrs(create.to_proto(), b"cf")


def test_create_table_split_keys():
    keys = [b"\x03", b"foo", b"wow"]
    create = new_create_table(b"t", C_FAMILIES, split_keys(keys))
    assert create.to_proto().split_keys == keys


def test_create_table_attributes():
    attrs = {"NORMALIZATION_ENABLED": "TRUE"}
    create = new_create_table(b"t", C_FAMILIES, table_attributes(attrs))
    assert create.to_proto().table_schema.attributes == [
        BytesBytesPair(first=b"NORMALIZATION_ENABLED", second=b"TRUE")]


def test_create_table_name_and_response():
    create = new_create_table(b"t", {})
    assert create.name == "CreateTable"
    assert create.description() == "CreateTable"
    assert create.new_response() == CreateTableResponse()


@pytest.mark.parametrize("cls, name", [
    (DeleteTable, "DeleteTable"),
    (DisableTable, "DisableTable"),
    (EnableTable, "EnableTable"),
])
def test_table_calls(cls, name):
    call = cls(b"tbl")
    assert call.description() == name
    assert call.table == b"tbl"
    assert call.to_proto().table_name == TableName(namespace=b"default", qualifier=b"tbl")


def test_set_balancer():
    call = SetBalancer(True)
    assert call.description() == "SetBalancerRunning"
    assert call.to_proto().on is True
    assert SetBalancer(False).to_proto().on is False


def test_get_procedure_state():
    call = GetProcedureState(42)
    assert call.description() == "getProcedureResult"
    assert call.to_proto().proc_id == 42
    with pytest.raises(ValueError):
        GetProcedureState(-1)


def test_cluster_status():
    call = ClusterStatus()
    assert call.description() == "GetClusterStatus"
    assert call.table == b""


def test_list_table_names_defaults():
    request = new_list_table_names().to_proto()
    assert request.regex == ".*"
    assert request.include_sys_tables is False
    assert request.namespace == ""
    assert ListTableNames().name == "GetTableNames"


def test_list_table_names_options():
    request = new_list_table_names(
        list_regex("^foo"), list_namespace("ns"), list_sys_tables(True)).to_proto()
    assert request.regex == "^foo"
    assert request.namespace == "ns"
    assert request.include_sys_tables is True


@pytest.mark.parametrize("option, message", [
    (list_regex("x"), "ListRegex option can only be used with ListTableNames"),
    (list_namespace("x"), "ListNamespace option can only be used with ListTableNames"),
    (list_sys_tables(True), "ListSysTables option can only be used with ListTableNames"),
])
def test_list_options_rejected_elsewhere(option, message):
    with pytest.raises(OptionError, match=message):
        apply_options(DeleteTable(b"t"), option)


def test_move_region_without_destination():
    move = new_move_region(b"abc")
    request = move.to_proto()
    assert move.description() == "MoveRegion"
    assert request.region.type == RegionSpecifierType.ENCODED_REGION_NAME
    assert request.region.value == b"abc"
    assert request.dest_server_name is None


def test_move_region_with_destination():
    move = new_move_region(
        b"abc", with_destination_region_server("host187.example.com,60020,1289493121758"))
    assert move.to_proto().dest_server_name == ServerName(
        host_name="host187.example.com", port=60020, start_code=1289493121758)


@pytest.mark.parametrize("server", ["host", "host,1", ""])
def test_move_region_bad_format(server):
    with pytest.raises(OptionError, match="invalid server name"):
        new_move_region(b"r", with_destination_region_server(server))


@pytest.mark.parametrize("server", ["h,abc,1", "h,-1,1", "h,4294967296,1"])
def test_move_region_bad_port(server):
    with pytest.raises(OptionError, match="failed to parse port"):
        new_move_region(b"r", with_destination_region_server(server))


@pytest.mark.parametrize("server", ["h,1,x", "h,1,2,3", "h,1,18446744073709551616"])
def test_move_region_bad_startcode(server):
    with pytest.raises(OptionError, match="failed to parse startcode"):
        new_move_region(b"r", with_destination_region_server(server))


def test_destination_option_rejected_elsewhere():
    with pytest.raises(OptionError,
                       match="WithDestinationRegionServer option can only be used"):
        apply_options(ListTableNames(), with_destination_region_server("h,1,2"))


def test_create_table_option_rejected_elsewhere():
    with pytest.raises(OptionError):
        split_keys([b"a"])(MoveRegion(b"r"))


def test_create_table_is_independent_of_option_input():
    keys = [b"a"]
    create = new_create_table(b"t", {}, split_keys(keys))
    keys.append(b"b")
    assert create.split_keys == [b"a"]
    assert isinstance(create, CreateTable)