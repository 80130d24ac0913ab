"""
Sprite descriptor (SPRT) decoder. Only the frame list is used: a u32 count
at 13 double words in, followed by that many u32 TPAG offset keys.
"""
import os
from dataclasses import dataclass

from binread import DW, FormatError, TruncatedDescriptor, read_u32, read_u32_array

SPRT_COUNT_OFFSET = 13 * DW
SPRT_KEYS_OFFSET = 14 * DW
# Smallest descriptor worth opening: header plus at least one frame key
MIN_SPRT_SIZE = SPRT_KEYS_OFFSET + DW


@dataclass(frozen=True)
class SpriteDescriptor:
    name: str
    frame_offset_keys: tuple

    @property
    def frame_count(self):
        return len(self.frame_offset_keys)


def decode_descriptor(data, name=""):
    try:
        n_frames = read_u32(data, SPRT_COUNT_OFFSET)
        keys = read_u32_array(data, SPRT_KEYS_OFFSET, n_frames)
    except FormatError as e:
        raise TruncatedDescriptor(f"Descriptor {name!r} is truncated: {e}") from e
    return SpriteDescriptor(name, tuple(int(k) for k in keys))


def descriptor_name(path):
    return os.path.splitext(os.path.basename(path))[0]


def load_descriptor(path):
    name = descriptor_name(path)
    with open(path, 'rb') as f:
        return decode_descriptor(f.read(), name)
