"""
Little-endian field readers for the GameMaker TPAG/SPRT dumps.
Every read checks the buffer length first, so a bad offset raises
FormatError instead of reading garbage.
"""
import struct
import numpy as np

DW = 4        # Double word byte size
ATT_SIZE = 2  # Single word byte size


class FormatError(ValueError):
    pass

class TruncatedTable(FormatError):
    pass

class TruncatedDescriptor(FormatError):
    pass


def check_span(data, offset, size, what="field"):
    if offset < 0 or offset + size > len(data):
        raise FormatError(f"{what} at {offset} (+{size}) is outside buffer of {len(data)} bytes")

def read_u32(data, offset):
    check_span(data, offset, DW, "u32")
    return struct.unpack_from('<I', data, offset)[0]

def read_u16_array(data, offset, count):
    check_span(data, offset, count * ATT_SIZE, f"u16[{count}]")
    # Plain ints so sums like x + w can't wrap at 16 bits
    return [int(v) for v in struct.unpack_from(f'<{count}H', data, offset)]

def read_u32_array(data, offset, count):
    check_span(data, offset, count * DW, f"u32[{count}]")
    if count == 0:
        return np.empty(0, dtype="<u4")
    return np.frombuffer(data, dtype='<u4', count=count, offset=offset)
