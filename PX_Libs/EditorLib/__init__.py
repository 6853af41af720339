"""
EditorLib - Interactive editor

This module provides the editor session that owns the editing state and
routes pointer and keyboard input. The PyQt5 window lives in
PX_Libs.EditorLib.editor_window and is imported by the launcher.
"""

from PX_Libs.EditorLib.editor_session import (
    ACTION_EXPORT,
    ACTION_OPEN,
    EditorSession,
    first_openable_path,
    is_openable_path,
)

__all__ = [
    "ACTION_EXPORT",
    "ACTION_OPEN",
    "EditorSession",
    "first_openable_path",
    "is_openable_path",
]
