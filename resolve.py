"""
Turns SPRT frame keys into crop rectangles on the loaded sheets.

A frame that can't be resolved gives back a SkipReason instead of raising,
so one bad entry only costs that frame.
"""
from dataclasses import dataclass
from enum import Enum

from binread import FormatError
from tpag import RECORD_SIZE


class SkipReason(Enum):
    KEY_OUT_OF_RANGE = "invalid table entry"
    MISALIGNED = "misaligned table entry"
    UNKNOWN_SHEET = "invalid sheet"
    INVALID_GEOMETRY = "incorrect frame data"


@dataclass(frozen=True)
class FrameResolution:
    sheet_index: int
    rect: tuple  # (x, y, w, h)
    source_descriptor_name: str
    frame_ordinal: int
    record: object = None

    @property
    def box(self):
        """Pillow crop box (left, upper, right, lower)."""
        x, y, w, h = self.rect
        return (x, y, x + w, y + h)


def sheet_size(sheet):
    # Sheets that failed to decode are kept as None
    if sheet is None:
        return (0, 0)
    return sheet.size

def is_data_correct(record, sheet):
    width, height = sheet_size(sheet)
    if width == 0 or height == 0:
        return False
    return (record.x < width and record.y < height and
            record.x + record.width <= width and
            record.y + record.height <= height)


def resolve(table, sheets, key, descriptor_name="", ordinal=0):
    key = int(key)
    if not table.has_keys or key < table.lowest_key or key > table.highest_key:
        return SkipReason.KEY_OUT_OF_RANGE
    if (key - table.lowest_key) % RECORD_SIZE != 0:
        return SkipReason.MISALIGNED

    try:
        record = table.record_at(key)
    except FormatError:
        # In range but past the last record
        return SkipReason.KEY_OUT_OF_RANGE

    if record.sheet >= len(sheets):
        return SkipReason.UNKNOWN_SHEET
    if not is_data_correct(record, sheets[record.sheet]):
        return SkipReason.INVALID_GEOMETRY

    return FrameResolution(record.sheet, record.rect, descriptor_name, ordinal, record)


def resolve_descriptor(table, sheets, descriptor):
    """Yield (ordinal, key, FrameResolution | SkipReason) in descriptor order, ordinals from 1."""
    for i, key in enumerate(descriptor.frame_offset_keys):
        yield i + 1, key, resolve(table, sheets, key, descriptor.name, i + 1)
