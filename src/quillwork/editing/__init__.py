"""Editing surfaces dispatching commands to a document session."""

from .surface import ContainerEditor, Surface, TextPropertyEditor
from .surface_manager import SurfaceManager

__all__ = ["ContainerEditor", "Surface", "SurfaceManager", "TextPropertyEditor"]
