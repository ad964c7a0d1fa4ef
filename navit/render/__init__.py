"""Rendering helpers: ANSI clipping, highlighting, help text, and full frames."""

from .screen import RenderContext, body_rows, render_screen

__all__ = ["RenderContext", "body_rows", "render_screen"]
