import os
import struct

import pytest
from PIL import Image


def record(x, y, w, h, sheet=0):
    return (x, y, w, h, 0, 0, w, h, 0, 0, sheet)


def table_bytes(lowest, records):
    """Count, one key per record, then the records. The highest key is read
    from the first record's x and y: x | y << 16."""
    n = len(records)
    index = [lowest + 22 * i for i in range(n)]
    data = struct.pack('<I', n) + struct.pack(f'<{n}I', *index)
    for rec in records:
        data += struct.pack('<11H', *rec)
    return data


def sprt_bytes(keys):
    return b'\0' * 52 + struct.pack('<I', len(keys)) + struct.pack(f'<{len(keys)}I', *keys)


def sheet_image(w, h):
    img = Image.new("RGBA", (w, h))
    for y in range(h):
        for x in range(w):
            img.putpixel((x, y), (x * 10 % 256, y * 10 % 256, 128, 255))
    return img


@pytest.fixture
def dump_dir(tmp_path):
    """Builds a dumped data.win layout: dump_dir(records, sprites={name: keys}, sheets=[(w, h)])."""
    def build(records, sprites, sheets=((20, 20),), lowest=100):
        root = tmp_path / "data"
        for sub in ("SPRT", "TPAG", "TXTR"):
            os.makedirs(root / sub, exist_ok=True)
        (root / "TPAG" / "tpag.dat").write_bytes(table_bytes(lowest, records))
        for name, keys in sprites.items():
            (root / "SPRT" / name).write_bytes(sprt_bytes(keys))
        for i, (w, h) in enumerate(sheets):
            sheet_image(w, h).save(root / "TXTR" / f"{i}.png")
        return root
    return build
