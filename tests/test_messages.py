import pytest

from hrpc.messages import (
    Cell,
    CellType,
    Column,
    RegionSpecifier,
    RegionSpecifierType,
    ResultMessage,
    TimeRange,
)


@pytest.mark.parametrize("raw,member", [
    (4, CellType.PUT),
    (8, CellType.DELETE),
    (10, CellType.DELETE_FAMILY_VERSION),
    (12, CellType.DELETE_COLUMN),
    (14, CellType.DELETE_FAMILY),
])
def test_cell_type_from_key_value_type_byte(raw, member):
    assert CellType(raw) is member


def test_cell_type_unknown_byte_rejected():
    with pytest.raises(ValueError):
        CellType(99)


def test_cell_equality():
    a = Cell(row=b"row7", family=b"cf", qualifier=b"a", timestamp=51, value=b"1",
             cell_type=CellType.PUT)
    b = Cell(row=b"row7", family=b"cf", qualifier=b"a", timestamp=51, value=b"1",
             cell_type=CellType.PUT)
    assert a == b
    assert a != Cell(row=b"row7", family=b"cf", qualifier=b"b", timestamp=51, value=b"1",
                     cell_type=CellType.PUT)


def test_cell_defaults_unset():
    cell = Cell()
    assert cell.cell_type is None
    assert cell.timestamp is None


def test_result_message_lists_are_independent():
    first = ResultMessage()
    second = ResultMessage()
    first.cell.append(Cell(row=b"r"))
    assert second.cell == []
    assert len(first.cell) == 1


def test_column_qualifiers_are_independent():
    first = Column(family=b"cf")
    second = Column(family=b"cf")
    first.qualifier.append(b"q")
    assert second.qualifier == []


def test_time_range_unbounded_by_default():
    tr = TimeRange()
    assert tr.from_ is None and tr.to is None
    assert TimeRange(from_=3456, to=6789) == TimeRange(3456, 6789)


def test_region_specifier_equality():
    rs = RegionSpecifier(type=RegionSpecifierType.REGION_NAME, value=b"region")
    assert rs == RegionSpecifier(RegionSpecifierType.REGION_NAME, b"region")
    assert rs != RegionSpecifier(RegionSpecifierType.ENCODED_REGION_NAME, b"region")