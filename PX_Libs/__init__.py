"""
PX_Libs - Pixelargon Library Modules

This package contains core functionality for the Pixelargon image editor,
organized into specialized sub-packages:

- ViewportLib: Zoom/pan model and pointer-to-image coordinate mapping
- CropLib: Crop rectangle, drag-handle state machine and aspect presets
- PixelateLib: Freehand pixelate strokes, undo/redo and block averaging
- ImageEditingLib: Image models, transform/filter operations and chroma key
- ProcessingLib: Image processor that decodes, bakes and exports edits
- ExportLib: Apply/export request models and the edit compositor
- ProjStoreLib: Recent files persistence
- EditorLib: Editor session (event routing) and the PyQt5 window
"""

__version__ = "0.1.0"
