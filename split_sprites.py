"""
Sprite-Splitter: bulk frame extraction for GameMaker Studio sprite sheets
(written for Nuclear Throne, other GMS titles likely work too).

Needs an already unpacked data.win (e.g. with quickbms + yoyogames.bms):
    TPAG/  paging table (*.dat)
    SPRT/  one descriptor per sprite
    TXTR/  sprite sheet images

Frames go to <target>/<sprite>/<sprite><n>.png

    python split_sprites.py --data dumped_data -t frames -v
    python split_sprites.py --sprt SPRT --tpag TPAG --txtr TXTR -t frames
"""
import argparse
import os
import sys
from dataclasses import dataclass, field

from PIL import Image

from binread import FormatError
from resolve import FrameResolution, resolve_descriptor
from sprt import MIN_SPRT_SIZE, descriptor_name, load_descriptor
from tpag import load_table

TABLE_EXT = ".dat"
SPRT_DIR = "SPRT"
TPAG_DIR = "TPAG"
TXTR_DIR = "TXTR"


@dataclass
class SplitResult:
    written: list = field(default_factory=list)
    skipped: list = field(default_factory=list)  # (ordinal, SkipReason)


def find_table(tpag_dir):
    tab = None
    for filename in sorted(os.listdir(tpag_dir)):
        path = os.path.join(tpag_dir, filename)
        # Format is roughly checked in decode_table()
        if os.path.isfile(path) and filename.endswith(TABLE_EXT):
            tab = path
    if tab is None:
        raise FileNotFoundError(f"No paging table was found in {tpag_dir}")
    return tab


def load_sheets(txtr_dir, verbose=False):
    sheets = []
    for filename in sorted(os.listdir(txtr_dir)):
        path = os.path.join(txtr_dir, filename)
        try:
            img = Image.open(path)
            img.load()
        except (OSError, ValueError) as e:
            # Keep the slot so later sheet indices still line up
            if verbose:
                print(f"Couldn't load sheet {len(sheets)} ({filename}): {e}", file=sys.stderr)
            img = None
        sheets.append(img)
    return sheets


def frame_output_path(target, descriptor_name, ordinal):
    return os.path.join(target, descriptor_name, f"{descriptor_name}{ordinal}.png")


def export_frame(sheets, frame, target):
    output = frame_output_path(target, frame.source_descriptor_name, frame.frame_ordinal)
    os.makedirs(os.path.dirname(output), exist_ok=True)
    sheets[frame.sheet_index].crop(frame.box).save(output, format="PNG")
    return output


def split_sprite(table, sheets, sprt_path, target, verbose=False):
    """Split every frame listed in `sprt_path` into `target`. Bad frames are skipped."""
    result = SplitResult()
    descriptor = load_descriptor(sprt_path)

    if verbose:
        print(f"\nFile: {sprt_path}")
        print(f"Number of frames: {descriptor.frame_count}")

    for i, key, frame in resolve_descriptor(table, sheets, descriptor):
        if not isinstance(frame, FrameResolution):
            result.skipped.append((i, frame))
            if verbose:
                print(f"\tSkipping frame {i} ({frame.value}, key {key})", file=sys.stderr)
            continue

        output = frame_output_path(target, descriptor.name, i)
        if verbose:
            print(f"\tFrame {i}: {frame.record.describe()}")
            print(f"\tOutput: {output}")

        try:
            export_frame(sheets, frame, target)
        except (OSError, ValueError) as e:
            print(f"Couldn't save {output}: {e}", file=sys.stderr)
            continue
        result.written.append(output)

    return result


def split_all(tpag_dir, sprt_dir, txtr_dir, target, verbose=False):
    table = load_table(find_table(tpag_dir))
    if verbose:
        print(f"Paging table: {table.entry_count} entries, keys {table.lowest_key}-{table.highest_key}")

    sheets = load_sheets(txtr_dir, verbose)
    if verbose:
        print(f"Sprite sheets: {len(sheets)}")

    os.makedirs(target, exist_ok=True)

    results = {}
    names = set()
    for filename in sorted(os.listdir(sprt_dir)):
        path = os.path.join(sprt_dir, filename)
        if not os.path.isfile(path) or os.path.getsize(path) < MIN_SPRT_SIZE:
            continue

        # Output folders are named by stem, one descriptor per stem
        name = descriptor_name(path)
        if name in names:
            print(f"Skipping {filename}: output name {name!r} already used", file=sys.stderr)
            continue
        names.add(name)

        try:
            results[filename] = split_sprite(table, sheets, path, target, verbose)
        except (FormatError, OSError) as e:
            print(f"Error processing {filename}: {e}", file=sys.stderr)

    return results


def build_parser():
    parser = argparse.ArgumentParser(
        description="Separates single frames from GameMaker Studio sprite sheets."
    )
    parser.add_argument("--data", help="Folder with the unpacked data.win (assumes SPRT, TPAG and TXTR folders exist)")
    parser.add_argument("--sprt", help="Folder with sprite descriptor files")
    parser.add_argument("--tpag", help="Paging table folder")
    parser.add_argument("--txtr", help="Sprite sheets' location")
    parser.add_argument("-t", "--target", required=True, help="Folder where split sprites will be saved")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show information during execution")
    return parser


def parse_args(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    separate = (args.sprt, args.tpag, args.txtr)
    if args.data:
        if any(separate):
            parser.error("--data can't be combined with --sprt/--tpag/--txtr")
        args.sprt = os.path.join(args.data, SPRT_DIR)
        args.tpag = os.path.join(args.data, TPAG_DIR)
        args.txtr = os.path.join(args.data, TXTR_DIR)
    elif not all(separate):
        parser.error("Must specify either --data folder or all folders individually")
    return args


def main(argv=None):
    args = parse_args(argv)
    try:
        results = split_all(args.tpag, args.sprt, args.txtr, args.target, args.verbose)
    except (FormatError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    total = sum(len(r.written) for r in results.values())
    print(f"\nDone! {total} frames from {len(results)} sprites saved to {args.target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
