# BLeeds - Scripts for working with R* Leeds (GTA Stories, Chinatown Wars, Manhunt 2, etc) formats in Blender
# Author: spicybung
# Years: 2025 -

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
unIMG 2 - Stories LVZ/IMG slave WRLD extractor (headless)
Usage: python -m unimg <path-to>.lvz [--img X.IMG] [--out DIR] [--list] [-v]
"""

import argparse
import sys

from pathlib import Path

from .leedsLib import extract

EXIT_USAGE = 1
EXIT_FAILED = 1
EXIT_NO_IMG = 2
EXIT_IMG_OPEN = 5


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="unimg",
        description="unIMG 2 Stories IMG Extractor: pull slave WRLD blocks out of an LVZ + IMG pair",
    )
    parser.add_argument("lvz", help="path to the .lvz (compressed or raw)")
    parser.add_argument("--img", help="companion IMG (default: <stem>.IMG / .img / .img.zip next to the LVZ)")
    parser.add_argument("--out", help=f"output folder (default: {extract.OUT_DIR_NAME} next to the LVZ)")
    parser.add_argument("--list", action="store_true", help="scan and log headers only, write no WRLD files")
    parser.add_argument("-v", "--verbose", action="store_true", help="echo the log to the console")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return EXIT_USAGE if e.code else 0

    if not Path(args.lvz).is_file():
        print(f"ERROR: cannot open LVZ: {args.lvz}", file=sys.stderr)
        return EXIT_USAGE

    try:
        res = extract.extract_lvz(
            args.lvz,
            out_dir=args.out,
            img_path=args.img,
            console=args.verbose,
            dry_run=args.list,
        )
    except extract.ImgOpenError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_IMG_OPEN
    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_NO_IMG
    except OSError as e:
        # LVZ, output folder or log
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILED

    print(res.summary(), file=sys.stderr)
    print(f"Log: {res.log_path}", file=sys.stderr)
    return res.exit_code


if __name__ == "__main__":
    sys.exit(main())
