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

import time
from pathlib import Path

import bpy
from bpy.types import Operator
from bpy_extras.io_utils import ImportHelper
from bpy.props import StringProperty, BoolProperty

from ..leedsLib import extract


class IMPORT_SCENE_OT_leeds_unimg(Operator, ImportHelper):
    """Extract slave WRLD blocks from a Rockstar Leeds LevelZlib & IMG Archive"""
    bl_idname = "import_scene.leeds_unimg"
    bl_label = "Extract WRLDs"
    bl_options = {'REGISTER'}

    filename_ext = ".lvz"

    out_dir_name: StringProperty(
        name="Output folder",
        description="Folder created next to the LVZ for the extracted .wrld files",
        default=extract.OUT_DIR_NAME,
    )
    list_only: BoolProperty(
        name="List headers only",
        description="Scan and log slave WRLD headers without writing any files",
        default=False
    )
    debug_print: BoolProperty(
        name="Debug print",
        default=True
    )

    filter_glob: StringProperty(
        default="*.lvz;*.LVZ",
        options={'HIDDEN'},
        maxlen=255,
    )

    def execute(self, context):
        lvz_path = self.filepath
        if not lvz_path or not Path(lvz_path).is_file():
            self.report({'ERROR'}, "No LVZ selected.")
            return {'CANCELLED'}

        out_dir = Path(lvz_path).parent / (self.out_dir_name or extract.OUT_DIR_NAME)

        t0 = time.time()
        try:
            res = extract.extract_lvz(
                lvz_path,
                out_dir=out_dir,
                console=self.debug_print,
                dry_run=self.list_only,
            )
        except extract.ImgOpenError as e:
            self.report({'ERROR'}, f"Cannot open IMG: {e}")
            return {'CANCELLED'}
        except FileNotFoundError as e:
            self.report({'ERROR'}, str(e))
            return {'CANCELLED'}
        except OSError as e:
            self.report({'ERROR'}, f"Failed to extract LVZ: {e}")
            return {'CANCELLED'}

        if res.exit_code != 0:
            self.report({'WARNING'}, f"{res.summary()} (log: {res.log_path})")
            return {'CANCELLED'}

        print(f"[total] finished in {time.time() - t0:.2f}s")
        self.report({'INFO'}, f"{res.summary()} (log: {res.log_path})")
        return {'FINISHED'}

#######################################################
classes = (IMPORT_SCENE_OT_leeds_unimg,)

def register():
    for c in classes:
        bpy.utils.register_class(c)

def unregister():
    for c in reversed(classes):
        bpy.utils.unregister_class(c)
