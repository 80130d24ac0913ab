import struct

import pytest

from binread import FormatError, TruncatedTable
from tpag import RECORD_SIZE, decode_table, load_table
from conftest import record, table_bytes


def test_decode_single_entry():
    table = decode_table(table_bytes(100, [record(5, 5, 10, 10)]))
    assert table.entry_count == 1
    assert table.lowest_key == 100
    assert table.highest_key == 5 | 5 << 16
    assert table.attribute_region_start == 8


def test_highest_key_shares_bytes_with_first_record():
    table = decode_table(table_bytes(100, [record(0x10, 0x2, 1, 1)] * 3))
    assert list(table.offset_index) == [100, 122, 144, 0x20010]
    assert table.highest_key == 0x20010


@pytest.mark.parametrize("n", [1, 2, 7])
def test_size_invariant(n):
    data = table_bytes(0, [record(0, 1, 1, 1)] * n)
    assert len(data) == n * RECORD_SIZE + 4 * (n + 1)
    assert decode_table(data).entry_count == n
    with pytest.raises(TruncatedTable):
        decode_table(data[:-1])


def test_empty_table():
    table = decode_table(struct.pack('<I', 0))
    assert table.entry_count == 0
    assert not table.has_keys
    assert table.lowest_key is None

    table = decode_table(struct.pack('<II', 0, 64))
    assert table.lowest_key == table.highest_key == 64


def test_trailing_bytes_are_allowed():
    data = table_bytes(0, [record(0, 1, 1, 1)]) + b'\xff' * 5
    assert decode_table(data).entry_count == 1


@pytest.mark.parametrize("data", [b'', b'\x01\x00\x00'])
def test_missing_entry_count(data):
    with pytest.raises(TruncatedTable):
        decode_table(data)


def test_huge_entry_count():
    with pytest.raises(TruncatedTable):
        decode_table(struct.pack('<I', 0xFFFFFFFF) + b'\0' * 64)


def test_truncated_table_is_a_value_error():
    assert issubclass(TruncatedTable, FormatError)
    assert issubclass(FormatError, ValueError)


def test_record_at():
    table = decode_table(table_bytes(100, [record(1, 2, 3, 4, 0), (5, 6, 7, 8, 9, 10, 11, 12, 0, 0, 3)]))
    rec = table.record_at(122)
    assert rec.rect == (5, 6, 7, 8)
    assert (rec.bb_x, rec.bb_y, rec.bb_w, rec.bb_h) == (9, 10, 11, 12)
    assert rec.sheet == 3
    assert "sheet:3" in rec.describe()


def test_record_at_past_end():
    table = decode_table(table_bytes(100, [record(0, 1, 1, 1)]))
    with pytest.raises(FormatError):
        table.record_at(122)


def test_load_table(tmp_path):
    path = tmp_path / "tpag.dat"
    path.write_bytes(table_bytes(40, [record(0, 1, 2, 2)]))
    assert load_table(path).lowest_key == 40
