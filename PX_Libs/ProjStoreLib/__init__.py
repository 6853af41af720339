"""
ProjStoreLib - Application data storage

This module handles persistence of Pixelargon's recent files list.
"""

from PX_Libs.ProjStoreLib.recent_files import RecentFilesStore, add_recent_file

__all__ = [
    "RecentFilesStore",
    "add_recent_file",
]
