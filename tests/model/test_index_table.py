#!filepath: tests/model/test_index_table.py
import pytest

from maxent.model.index_table import IndexTable, stable_hash
from maxent.utils.errors import ConfigurationError, StructuralError


def test_lookup_returns_original_position():
    keys = ["4", "7", "5", "abc", "a longer predicate=1"]
    table = IndexTable(keys)

    for i, key in enumerate(keys):
        assert table[key] == i
        assert table.get(key) == i
        assert key in table

    assert len(table) == len(keys)
    assert table.to_list() == keys


def test_missing_key_returns_not_found():
    table = IndexTable(["4", "7", "5"])

    assert table.get("1") == IndexTable.NOT_FOUND
    assert table["9"] == -1
    assert "1" not in table
    assert table.get(None) == IndexTable.NOT_FOUND


def test_missing_key_on_collision_chain():
    # capacity = ceil(3 / 1.0) + 1 = 4
    # "7"  hash 55   -> slot 3
    # "21" hash 1599 -> slot 3 (collides, wraps to 0)
    # "0"  hash 48   -> slot 0 (taken, probes to 1)
    table = IndexTable(["7", "21", "0"], load_factor=1.0)

    assert table.capacity == 4
    assert table["7"] == 0
    assert table["21"] == 1
    assert table["0"] == 2

    # "4" hash 52 -> slot 0, walks the chain 0 -> 1 -> 2 (empty)
    assert table.get("4") == IndexTable.NOT_FOUND


def test_capacity_keeps_an_empty_slot():
    table = IndexTable(["a", "b", "c", "d", "e"], load_factor=0.5)
    assert table.capacity == 11

    full = IndexTable(["a", "b"], load_factor=1.0)
    assert full.capacity == 3


def test_empty_table():
    table = IndexTable([])
    assert len(table) == 0
    assert table.get("x") == IndexTable.NOT_FOUND
    assert table.to_list() == []


@pytest.mark.parametrize("load_factor", [0.0, -0.5, 1.5])
def test_invalid_load_factor(load_factor):
    with pytest.raises(ConfigurationError):
        IndexTable(["a"], load_factor=load_factor)


def test_duplicate_keys_rejected():
    with pytest.raises(StructuralError):
        IndexTable(["a", "b", "a"])


def test_structural_equality():
    a = IndexTable(["x", "y", "z"])
    b = IndexTable(["x", "y", "z"])
    assert a == b
    assert hash(a) == hash(b)

    # same mapping, different layout
    assert a != IndexTable(["x", "y", "z"], load_factor=0.3)
    assert a != IndexTable(["z", "y", "x"])


def test_stable_hash_matches_31_polynomial():
    assert stable_hash("") == 0
    assert stable_hash("a") == 97
    assert stable_hash("ab") == 97 * 31 + 98
    # wraps into signed 32-bit
    assert stable_hash("polygenelubricants") == -2147483648
    assert stable_hash(12) == 12
