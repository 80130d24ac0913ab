"""
Paging table (TPAG) decoder.

Layout, all little-endian:
    u32 entry_count
    u32 offset_index[entry_count]
    u16 attributes[entry_count][11]     # 22 byte records

The key range is offset_index[0] .. offset_index[entry_count]; that last
value is read from the first 4 bytes after the index, so it is only ever
used as an upper bound.

A frame key is a raw file offset; its record lives at
attribute_region_start + (key - lowest_key).
"""
from dataclasses import dataclass

import numpy as np

from binread import DW, ATT_SIZE, TruncatedTable, read_u32, read_u32_array, read_u16_array

ATT_LEN = 11  # Number of attributes per entry in paging table
RECORD_SIZE = ATT_LEN * ATT_SIZE


@dataclass(frozen=True)
class AttributeRecord:
    x: int
    y: int
    width: int
    height: int
    bb_x: int
    bb_y: int
    bb_w: int
    bb_h: int
    pad0: int
    pad1: int
    sheet: int

    @property
    def rect(self):
        return (self.x, self.y, self.width, self.height)

    def describe(self):
        return (f"[x:{self.x}, y:{self.y}, w:{self.width}, h:{self.height}, "
                f"bbX:{self.bb_x}, bbY:{self.bb_y}, bbW:{self.bb_w}, bbH:{self.bb_h}, "
                f"sheet:{self.sheet}]")


@dataclass(frozen=True, eq=False)
class RawTable:
    data: bytes
    entry_count: int
    offset_index: np.ndarray

    @property
    def attribute_region_start(self):
        return DW * (self.entry_count + 1)

    @property
    def has_keys(self):
        return len(self.offset_index) > 0

    @property
    def lowest_key(self):
        return int(self.offset_index[0]) if self.has_keys else None

    @property
    def highest_key(self):
        return int(self.offset_index[self.entry_count]) if self.has_keys else None

    def record_offset(self, key):
        return self.attribute_region_start + (key - self.lowest_key)

    def record_at(self, key):
        """Read the record for `key`. Raises FormatError past the end of the table."""
        return AttributeRecord(*read_u16_array(self.data, self.record_offset(key), ATT_LEN))


def decode_table(data):
    data = bytes(data)
    if len(data) < DW:
        raise TruncatedTable(f"Invalid table size: {len(data)} bytes, no entry count")

    n_entries = read_u32(data, 0)
    attrib_offset = DW * (n_entries + 1)
    if n_entries * RECORD_SIZE + attrib_offset > len(data):
        raise TruncatedTable(f"Invalid table size: {n_entries} entries need "
                             f"{n_entries * RECORD_SIZE + attrib_offset} bytes, got {len(data)}")

    if len(data) < attrib_offset + DW:
        # Only possible with 0 entries: no room for a key, nothing can resolve
        index = np.empty(0, dtype="<u4")
    else:
        # The last key shares its bytes with the first attribute record
        index = read_u32_array(data, DW, n_entries + 1)
    index.setflags(write=False)
    return RawTable(data, n_entries, index)


def load_table(path):
    with open(path, 'rb') as f:
        return decode_table(f.read())
