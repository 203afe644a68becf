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

from bpy.types import Menu

from .lvz_img_ot import IMPORT_SCENE_OT_leeds_unimg


#######################################################
class TOPBAR_MT_file_import_unimg(Menu):
    bl_idname = "TOPBAR_MT_file_import_unimg"
    bl_label = "unIMG"

    def draw(self, context):
        layout = self.layout
        layout.operator(
            IMPORT_SCENE_OT_leeds_unimg.bl_idname,
            text="R* Leeds: Slave WRLDs from LeVelZlib IMG Archive (.lvz + .img)",
        )


def unimg_menu_import(self, context):
    self.layout.menu(TOPBAR_MT_file_import_unimg.bl_idname)
