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

# bpy is only imported from register()/unregister() so leedsLib and the
# command line runner work outside Blender.

bl_info = {
    "name": "unIMG",
    "author": "SpicyBung",
    "version": (0, 2, 0),
    "blender": (2, 80, 0),
    "category": "Import-Export",
    "location": "File > Import > unIMG",
    "description": "Extract slave WRLD blocks from Leeds Engine LVZ + IMG archives",
}

def register():
    import bpy
    from .gui import gui_menus, lvz_img_ot

    lvz_img_ot.register()
    bpy.utils.register_class(gui_menus.TOPBAR_MT_file_import_unimg)

    if (2, 80, 0) > bpy.app.version:
        bpy.types.INFO_MT_file_import.append(gui_menus.unimg_menu_import)
    else:
        bpy.types.TOPBAR_MT_file_import.append(gui_menus.unimg_menu_import)

def unregister():
    import bpy
    from .gui import gui_menus, lvz_img_ot

    if (2, 80, 0) > bpy.app.version:
        bpy.types.INFO_MT_file_import.remove(gui_menus.unimg_menu_import)
    else:
        bpy.types.TOPBAR_MT_file_import.remove(gui_menus.unimg_menu_import)

    bpy.utils.unregister_class(gui_menus.TOPBAR_MT_file_import_unimg)
    lvz_img_ot.unregister()

if __name__ == "__main__":
    register()
