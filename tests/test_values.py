import pytest

from ptipy.types import NONE, ListVal, RangeVal, is_int, to_string, type_name


def test_type_names():
    assert type_name(1) == 'int'
    assert type_name(True) == 'bool'
    assert type_name('a') == 'str'
    assert type_name(NONE) == 'NoneType'
    assert type_name(RangeVal(0, 3)) == 'range'
    assert type_name(ListVal([])) == 'list'


def test_bool_is_not_int():
    assert is_int(3)
    assert not is_int(True)
    assert not is_int('3')


def test_to_string_scalars():
    assert to_string(42) == '42'
    assert to_string(-7) == '-7'
    assert to_string(True) == 'True'
    assert to_string(False) == 'False'
    assert to_string(NONE) == 'None'
    assert to_string('hi') == 'hi'
    assert to_string('hi', escape=True) == "'hi'"


def test_to_string_nested_lists_escape_strings():
    value = ListVal(['a', ListVal([1, 'b']), ListVal([])])
    assert to_string(value) == "['a', [1, 'b'], []]"


def test_to_string_range():
    assert to_string(RangeVal(2, 10, 3)) == 'range(2, 10, 3)'


def test_to_string_self_referencing_list():
    value = ListVal([1])
    value.items.append(value)
    assert to_string(value) == '[1, [...]]'


@pytest.mark.parametrize('start, stop, step', [
    (0, 10, 1),
    (0, 10, 3),
    (10, 0, -2),
    (-5, 5, 2),
    (5, 5, 1),
    (5, 0, 1),
    (0, 5, -1),
])
def test_range_length_matches_materialization(start, stop, step):
    r = RangeVal(start, stop, step)
    assert len(r) == len(r.materialize().items) == len(list(r))
    assert r.materialize().items == list(range(start, stop, step))


def test_lists_compare_by_identity():
    assert ListVal([1]) != ListVal([1])
    shared = ListVal([1])
    assert shared == shared
