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

from unimg import cli
from unimg.leedsLib import extract


def test_cli_extracts(lvz_pair, make_header, capsys):
    lvz = lvz_pair(make_header(total_size=36, cont=1) + b"\x00" * 8, b"0123456789")
    rc = cli.main([str(lvz)])
    err = capsys.readouterr().err
    assert rc == 0
    out = lvz.parent / extract.OUT_DIR_NAME
    assert f"unIMG 2: extracted 1 WRLD files to {out}" in err
    assert f"Log: {out / extract.LOG_NAME}" in err
    assert (out / "wrld_0000.wrld").read_bytes()[32:] == b"1234"


def test_cli_verbose_echoes_log(lvz_pair, make_header, capsys):
    lvz = lvz_pair(make_header(total_size=36, cont=1), b"0123456789")
    assert cli.main([str(lvz), "-v", "--list"]) == 0
    captured = capsys.readouterr()
    assert "[scan] total slave headers: 1" in captured.out
    assert "listed 1 WRLD headers" in captured.err


def test_cli_exit_codes(lvz_pair, make_header, tmp_path, capsys):
    assert cli.main([]) == cli.EXIT_USAGE
    assert cli.main([str(tmp_path / "nope.lvz")]) == cli.EXIT_USAGE

    lvz = lvz_pair(make_header(total_size=36, cont=1), None)
    assert cli.main([str(lvz)]) == cli.EXIT_NO_IMG

    lvz = lvz_pair(b"\x00" * 8, b"img")
    assert cli.main([str(lvz)]) == 3

    lvz = lvz_pair(b"\x00" * 64, b"img")
    assert cli.main([str(lvz)]) == 4
    assert "No slave WRLD headers found." in capsys.readouterr().err


def test_cli_explicit_img_and_out(tmp_path, make_header):
    lvz = tmp_path / "a.lvz"
    lvz.write_bytes(make_header(total_size=34, cont=2))
    img = tmp_path / "elsewhere.bin"
    img.write_bytes(b"xxYZ")
    out = tmp_path / "o"
    assert cli.main([str(lvz), "--img", str(img), "--out", str(out)]) == 0
    assert (out / "wrld_0000.wrld").read_bytes()[32:] == b"YZ"


def test_cli_unreadable_img_archive(lvz_pair, make_header, tmp_path, capsys):
    lvz = lvz_pair(make_header(total_size=36, cont=1), None)
    (tmp_path / "LEVEL.img.zip").write_bytes(b"this is not a zip archive at all")

    assert cli.main([str(lvz)]) == cli.EXIT_IMG_OPEN
    assert "ERROR: cannot read IMG archive" in capsys.readouterr().err
    log = (lvz.parent / extract.OUT_DIR_NAME / extract.LOG_NAME).read_text(encoding="utf-8")
    assert "[error] cannot open IMG" in log


def test_cli_log_failure_is_not_blamed_on_img(lvz_pair, make_header, tmp_path, capsys):
    lvz = lvz_pair(make_header(total_size=36, cont=1), b"0123456789")
    out = tmp_path / "o"
    (out / extract.LOG_NAME).mkdir(parents=True)

    assert cli.main([str(lvz), "--out", str(out)]) == cli.EXIT_FAILED
    err = capsys.readouterr().err
    assert "IMG" not in err
    assert extract.LOG_NAME in err
