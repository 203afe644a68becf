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

import zlib
import numpy as np

from pathlib import Path
from dataclasses import dataclass
from typing import BinaryIO, Callable, List, Optional, TextIO, Tuple


#   #   #   #   #   #   #   #   #   #   #   #   #   #   #   #   #   #   #   #   #   #
#   This script is for .LVZ & .IMG - slave WRLD extraction for Stories worlds        #
#   #   #   #   #   #   #   #   #   #   #   #   #   #   #   #   #   #   #   #   #   #
# - Script resources:
# • https://gtamods.com/wiki/IMG_archive
# • https://web.archive.org/web/20180406213309/http://gtamodding.ru/wiki/LVZ (*Russian*)
# • https://web.archive.org/web/20180729202923/http://gtamodding.ru/wiki/WRLD (*Russian*)
# • https://github.com/aap/librwgta/blob/master/tools/storiesview/worldstream.cpp
# • https://web-archive-org.translate.goog/web/20180810183857/http://gtamodding.ru/wiki/LVZ?_x_tr_sl=ru&_x_tr_tl=en&_x_tr_hl=en (*English*)
# - Mod resources/cool stuff:
# • https://gtaforums.com/topic/285544-gtavcslcs-modding/ (includes old unimg.exe for GTA: Stories)

WRLD_MAGIC = b"DLRW"
WRLD_HEADER_SIZE = 32
SCAN_LOG_LIMIT = 50
COPY_CHUNK = 1 << 20

# 32-byte slave WRLD preface, as it sits in the decompressed LVZ
WRLD_HEADER_DTYPE = np.dtype([
    ("magic",        "S4"),
    ("wrld_type",    "<u4"),
    ("total_size",   "<u4"),
    ("global0",      "<u4"),
    ("global1",      "<u4"),
    ("global_count", "<u4"),
    ("continuation", "<u4"),
    ("reserved",     "<u4"),
])

STATUS_FULL = "full"
STATUS_CLIPPED = "clipped"
STATUS_HEADER_ONLY = "header_only"


#######################################################
class DebugOut:
    """
    Log sink for one run:
      - Keeps every line in memory
      - Echoes to console when enabled
      - Streams to the log file as lines arrive
    The file is opened up front, so a bad log path fails before any work is done.
    """
    def __init__(self, enable_console: bool, write_file: bool, file_path: Optional[str]):
        self.enable_console = enable_console
        self.write_file = write_file and bool(file_path)
        self.file_path = file_path
        self.lines: List[str] = []
        self._fh: Optional[TextIO] = None
        if self.write_file:
            self._fh = open(file_path, "w", encoding="utf-8")

    def log(self, msg: str):
        self.lines.append(msg)
        if self.enable_console:
            print(msg)
        if self._fh is not None:
            self._fh.write(msg + "\n")

    def close(self):
        if self._fh is not None:
            self._fh.close()
            self._fh = None

DEBUG: Optional[DebugOut] = None
def dbg(msg: str):
    if DEBUG is not None:
        DEBUG.log(msg)
    else:
        print(msg)

#######################################################
# Helpers
#######################################################

def padhex(n: int, w: int = 8) -> str:
    return "0x{:0{}X}".format(n, w)

def is_zlib(data: bytes) -> bool:
    return len(data) >= 2 and data[0] == 0x78 and data[1] in (0x01, 0x9C, 0xDA)

def wrld_type_name(t: int) -> str:
    return "Master" if t == 1 else "Slave" if t == 0 else "Unknown"

#######################################################
# Decompression cascade
#######################################################

# (label, wbits) in the order they are tried
INFLATE_MODES: Tuple[Tuple[str, int], ...] = (
    ("zlib",    zlib.MAX_WBITS),
    ("gzip",    16 + zlib.MAX_WBITS),
    ("deflate", -zlib.MAX_WBITS),
)

def try_inflate(data: bytes, wbits: int) -> Optional[bytes]:
    """Inflate one whole stream, or None unless the decoder reaches a clean end of stream."""
    # output starts at ~3x the input and zlib grows it as needed
    bufsize = max(len(data) * 3 + 1024, 4096)
    try:
        return zlib.decompress(data, wbits, bufsize)
    except zlib.error:
        return None

def maybe_decompress_lvz(data: bytes) -> Tuple[bytes, str]:
    """
    Try zlib, then gzip, then raw DEFLATE; the first clean stream wins.
    Anything else is taken as already-decompressed LVZ and returned verbatim.
    Returns (stream, method) where method is "zlib", "gzip", "deflate" or "raw".
    """
    for label, wbits in INFLATE_MODES:
        out = try_inflate(data, wbits)
        if out is not None:
            return out, label
    return bytes(data), "raw"

#######################################################
# Slave WRLD headers
#######################################################

@dataclass
class SlaveHeader:
    lvz_off: int
    wrld_type: int
    total_size: int
    global0: int
    global1: int
    global_count: int
    continuation: int
    reserved: int

    @property
    def body_size(self) -> int:
        return max(0, self.total_size - WRLD_HEADER_SIZE)

    def header_bytes(self, decomp: bytes) -> bytes:
        return bytes(decomp[self.lvz_off:self.lvz_off + WRLD_HEADER_SIZE])

def parse_slave_header(decomp: bytes, off: int) -> SlaveHeader:
    if off < 0 or off + WRLD_HEADER_SIZE > len(decomp):
        raise ValueError(f"WRLD header at {padhex(off)} runs past LVZ end ({len(decomp)} bytes)")
    rec = np.frombuffer(decomp, dtype=WRLD_HEADER_DTYPE, count=1, offset=off)[0]
    return SlaveHeader(
        lvz_off=off,
        wrld_type=int(rec["wrld_type"]),
        total_size=int(rec["total_size"]),
        global0=int(rec["global0"]),
        global1=int(rec["global1"]),
        global_count=int(rec["global_count"]),
        continuation=int(rec["continuation"]),
        reserved=int(rec["reserved"]),
    )

def is_plausible_slave(h: SlaveHeader) -> bool:
    return h.total_size >= WRLD_HEADER_SIZE and h.continuation != 0

def log_scan_hit(index: int, h: SlaveHeader):
    dbg(f"[scan] [{index}] @LVZ+{padhex(h.lvz_off)} type={h.wrld_type} ({wrld_type_name(h.wrld_type)}) "
        f"size={h.total_size} g0=0x{h.global0:X} g1=0x{h.global1:X} gcnt={h.global_count} "
        f"cont=0x{h.continuation:X}")

def scan_slave_headers(decomp: bytes,
                       on_header: Optional[Callable[[int, SlaveHeader], None]] = log_scan_hit,
                       log_limit: int = SCAN_LOG_LIMIT) -> List[SlaveHeader]:
    """
    Heuristic scan: the LVZ carries no trustworthy table of slave WRLDs, so every
    DLRW tag is a candidate. The cursor resumes 4 bytes past the tag start.
    """
    n = len(decomp)
    found: List[SlaveHeader] = []
    i = 0
    while True:
        j = decomp.find(WRLD_MAGIC, i)
        if j < 0 or j + WRLD_HEADER_SIZE > n:
            break
        h = parse_slave_header(decomp, j)
        if is_plausible_slave(h):
            if on_header is not None and len(found) < log_limit:
                on_header(len(found), h)
            found.append(h)
        i = j + 4
    return found

def normalize_headers(headers: List[SlaveHeader]) -> List[SlaveHeader]:
    """Ascending by LVZ offset, one entry per offset (first one seen wins)."""
    if not headers:
        return []
    offs = np.fromiter((h.lvz_off for h in headers), dtype=np.uint64, count=len(headers))
    order = np.argsort(offs, kind="stable")
    ordered = offs[order]
    keep = np.ones(len(order), dtype=bool)
    keep[1:] = ordered[1:] != ordered[:-1]
    return [headers[int(k)] for k in order[keep]]

#######################################################
# WRLD build: LVZ header + IMG continuation
#######################################################

@dataclass
class WrldBuild:
    path: Optional[str]
    header: int
    body: int
    expected: int
    start: int
    end: int
    status: str

    @property
    def total_out(self) -> int:
        return self.header + self.body

def payload_window(h: SlaveHeader, img_size: int) -> Tuple[int, int, str]:
    start = h.continuation
    end = start + h.body_size
    if start > img_size:
        dbg(f"[warn] continuation start beyond IMG ({start} > {img_size}); writing header only")
        return start, start, STATUS_HEADER_ONLY
    if end > img_size:
        dbg(f"[warn] continuation clipped ({end} -> {img_size})")
        return start, img_size, STATUS_CLIPPED
    return start, end, STATUS_FULL

def copy_img_slice(img: BinaryIO, start: int, end: int, out: BinaryIO, chunk: int = COPY_CHUNK) -> int:
    left = max(0, end - start)
    if not left:
        return 0
    img.seek(start)
    total = 0
    while left:
        want = min(left, chunk)
        got = img.read(want)
        if not got:
            break
        out.write(got)
        left -= len(got)
        total += len(got)
        if len(got) < want:
            # IMG ended earlier than its reported size
            break
    return total

def materialize(h: SlaveHeader, decomp: bytes, img: BinaryIO, img_size: int, out: BinaryIO,
                chunk: int = COPY_CHUNK) -> WrldBuild:
    head = h.header_bytes(decomp)
    if len(head) != WRLD_HEADER_SIZE:
        raise ValueError(f"header at LVZ+{padhex(h.lvz_off)} is truncated")
    out.write(head)
    start, end, status = payload_window(h, img_size)
    body = copy_img_slice(img, start, end, out, chunk)
    return WrldBuild(getattr(out, "name", None), WRLD_HEADER_SIZE, body, h.total_size, start, end, status)

def write_wrld(h: SlaveHeader, decomp: bytes, img: BinaryIO, img_size: int, out_path: str,
               chunk: int = COPY_CHUNK) -> Optional[WrldBuild]:
    try:
        f = open(out_path, "wb")
    except OSError as e:
        dbg(f"[error] cannot write {out_path} ({e.strerror or e})")
        return None
    with f:
        try:
            build = materialize(h, decomp, img, img_size, f, chunk)
        except (OSError, ValueError) as e:
            dbg(f"[error] write failed for {out_path} ({e})")
            return None
    build.path = str(out_path)
    dbg(f"[build] {Path(out_path).name} header={build.header} body={build.body} "
        f"total_out={build.total_out} (expected {build.expected})")
    return build
