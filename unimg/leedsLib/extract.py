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

import datetime
import shutil
import tempfile
import zipfile
import zlib

from contextlib import ExitStack, contextmanager
from pathlib import Path
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, List, Tuple

from . import lvz_img as LVZ
from .lvz_img import dbg, padhex


OUT_DIR_NAME = "out_wrld"
LOG_NAME = "wrld_import.log"
WRLD_NAME_FMT = "wrld_{:04d}.wrld"
BANNER = "===== unIMG 2 ====="

STATUS_OK = "ok"
STATUS_TOO_SMALL = "too_small"
STATUS_NO_HEADERS = "no_headers"

_EXIT_CODES = {STATUS_OK: 0, STATUS_TOO_SMALL: 3, STATUS_NO_HEADERS: 4}


class ImgOpenError(OSError):
    """The companion IMG is there but cannot be opened or read."""


#######################################################
# Companion files
#######################################################

def derive_img_path(lvz_path) -> Path:
    """<stem>.IMG, then <stem>.img, then <stem>.img.zip next to the LVZ."""
    lvz_p = Path(lvz_path)
    cands = [lvz_p.with_suffix(".IMG"), lvz_p.with_suffix(".img"), lvz_p.with_suffix(".img.zip")]
    for cand in cands:
        if cand.is_file():
            return cand
    return cands[0]

def out_dir_default(lvz_path) -> Path:
    return Path(lvz_path).parent / OUT_DIR_NAME

def _zip_img_member(zf: zipfile.ZipFile) -> zipfile.ZipInfo:
    infos = [i for i in zf.infolist() if not i.is_dir()]
    for info in infos:
        if info.filename.lower().endswith(".img"):
            return info
    if not infos:
        raise FileNotFoundError(f"no IMG member inside {zf.filename}")
    return infos[0]

@contextmanager
def open_img_source(img_path) -> Iterator[Tuple[BinaryIO, int]]:
    """
    Yield (seekable reader, size in bytes) for a plain IMG or a zipped one.
    A zipped IMG is inflated once into a temporary file, so records whose
    continuations go backwards never re-inflate the member from its start.
    """
    img_p = Path(img_path)
    if img_p.suffix.lower() == ".zip":
        with tempfile.TemporaryFile() as tmp:
            try:
                with zipfile.ZipFile(img_p, "r") as zf:
                    info = _zip_img_member(zf)
                    with zf.open(info, "r") as f:
                        shutil.copyfileobj(f, tmp, LVZ.COPY_CHUNK)
            except (zipfile.BadZipFile, NotImplementedError, EOFError, zlib.error) as e:
                raise ImgOpenError(f"cannot read IMG archive {img_p} ({e})") from e
            size = tmp.tell()
            tmp.seek(0)
            yield tmp, size
        return
    with open(img_p, "rb") as f:
        size = f.seek(0, 2)
        f.seek(0)
        yield f, size

#######################################################
# Run
#######################################################

@dataclass
class ExtractResult:
    status: str
    lvz_path: str
    img_path: str
    out_dir: str
    log_path: str
    lvz_bytes: int = 0
    decomp_bytes: int = 0
    method: str = "raw"
    img_bytes: int = 0
    headers: List[LVZ.SlaveHeader] = field(default_factory=list)
    builds: List[LVZ.WrldBuild] = field(default_factory=list)
    written: int = 0
    dry_run: bool = False

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self.status]

    def summary(self) -> str:
        if self.status == STATUS_TOO_SMALL:
            return f"unIMG 2: decompressed LVZ too small ({self.decomp_bytes} bytes)"
        if self.status == STATUS_NO_HEADERS:
            return "No slave WRLD headers found."
        if self.dry_run:
            return f"unIMG 2: listed {len(self.headers)} WRLD headers (nothing written)"
        return f"unIMG 2: extracted {self.written} WRLD files to {self.out_dir}"


def extract_lvz(lvz_path, out_dir=None, img_path=None, console: bool = False,
                dry_run: bool = False, chunk: int = LVZ.COPY_CHUNK) -> ExtractResult:
    """
    Pull every slave WRLD out of an LVZ + IMG pair.

    Raises FileNotFoundError when the IMG is missing, ImgOpenError when it is
    there but unreadable, and OSError when the LVZ or the log cannot be opened.
    Everything past that point is logged and reported through the returned
    ExtractResult.
    """
    lvz_p = Path(lvz_path)
    img_p = Path(img_path) if img_path else derive_img_path(lvz_p)
    if not img_p.is_file():
        raise FileNotFoundError(f"matching IMG not found for {lvz_p} (tried: {img_p})")

    out_p = Path(out_dir) if out_dir else out_dir_default(lvz_p)
    out_p.mkdir(parents=True, exist_ok=True)
    log_path = out_p / LOG_NAME

    res = ExtractResult(STATUS_OK, str(lvz_p), str(img_p), str(out_p), str(log_path), dry_run=dry_run)

    prev = LVZ.DEBUG
    LVZ.DEBUG = LVZ.DebugOut(console, True, str(log_path))
    try:
        _run(res, lvz_p, img_p, out_p, dry_run, chunk)
    finally:
        LVZ.DEBUG.close()
        LVZ.DEBUG = prev
    return res


def _run(res: ExtractResult, lvz_p: Path, img_p: Path, out_p: Path, dry_run: bool, chunk: int):
    now = datetime.datetime.now()
    dbg(BANNER)
    dbg(f"Time: {now.isoformat(sep=' ', timespec='seconds')}")
    dbg(f"LVZ: {lvz_p}")
    dbg(f"IMG: {img_p}")
    dbg(f"Out: {out_p}")
    dbg("")

    lvz_bytes_in = lvz_p.read_bytes()
    decomp, method = LVZ.maybe_decompress_lvz(lvz_bytes_in)
    res.lvz_bytes, res.decomp_bytes, res.method = len(lvz_bytes_in), len(decomp), method
    dbg(f"[io] LVZ bytes: {len(lvz_bytes_in)}; decompressed: {len(decomp)} ({method})")
    if method == "raw" and LVZ.is_zlib(lvz_bytes_in):
        dbg("[warn] LVZ has a zlib header but did not inflate cleanly; using it as raw")

    if len(decomp) < LVZ.WRLD_HEADER_SIZE:
        dbg("[error] decompressed stream too small")
        res.status = STATUS_TOO_SMALL
        return
    if decomp[:4] != LVZ.WRLD_MAGIC:
        dbg("[warn] decompressed data does not start with DLRW, scanning anyway")

    headers = LVZ.normalize_headers(LVZ.scan_slave_headers(decomp))
    res.headers = headers
    dbg(f"[scan] total slave headers: {len(headers)}")
    if not headers:
        dbg("[error] no slave headers")
        res.status = STATUS_NO_HEADERS
        return

    with ExitStack() as stack:
        try:
            img, img_size = stack.enter_context(open_img_source(img_p))
        except OSError as e:
            dbg(f"[error] cannot open IMG ({e})")
            if isinstance(e, (ImgOpenError, FileNotFoundError)):
                raise
            raise ImgOpenError(f"cannot open IMG {img_p} ({e.strerror or e})") from e
        res.img_bytes = img_size
        dbg(f"[io] IMG bytes: {img_size}")
        dbg("")

        if dry_run:
            for i, h in enumerate(headers):
                start, end, status = LVZ.payload_window(h, img_size)
                dbg(f"[list] {WRLD_NAME_FMT.format(i)} @LVZ+{padhex(h.lvz_off)} "
                    f"size={h.total_size} IMG[{padhex(start)}, {padhex(end)}) {status}")
            dbg(f"\n[done] listed {len(headers)} WRLD headers (nothing written)")
            return

        for i, h in enumerate(headers):
            name = WRLD_NAME_FMT.format(i)
            build = LVZ.write_wrld(h, decomp, img, img_size, str(out_p / name), chunk)
            if build is None:
                dbg(f"[warn] failed to write {name}")
                continue
            res.builds.append(build)
            res.written += 1

    dbg(f"\n[done] wrote {res.written} WRLD files to {out_p}")
