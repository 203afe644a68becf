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

import struct

import pytest

from unimg.leedsLib import lvz_img as LVZ


def wrld_header(wrld_type=0, total_size=32, g0=0, g1=0, gcnt=0, cont=0, reserved=0):
    return struct.pack("<4s7I", b"DLRW", wrld_type, total_size, g0, g1, gcnt, cont, reserved)


@pytest.fixture
def make_header():
    return wrld_header


@pytest.fixture
def debug_log(monkeypatch):
    """In-memory log sink installed as the module DEBUG for one test."""
    sink = LVZ.DebugOut(False, False, None)
    monkeypatch.setattr(LVZ, "DEBUG", sink)
    return sink


@pytest.fixture
def lvz_pair(tmp_path):
    """Write <tmp>/LEVEL.LVZ and its companion <tmp>/LEVEL.IMG, return the LVZ path."""
    def _write(lvz_bytes, img_bytes, img_name="LEVEL.IMG"):
        lvz = tmp_path / "LEVEL.LVZ"
        lvz.write_bytes(lvz_bytes)
        if img_bytes is not None:
            (tmp_path / img_name).write_bytes(img_bytes)
        return lvz
    return _write
