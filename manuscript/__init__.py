"""manuscript/ — Manuscript loading and dual-mode rendering package."""

from manuscript.base import LoadError, RenderError, SectionLayout, parse_name
from manuscript.loader import load_chapter, load_manuscript, load_unit
from manuscript.render import Renderers, build_renderers

__all__ = [
    "LoadError",
    "RenderError",
    "Renderers",
    "SectionLayout",
    "build_renderers",
    "load_chapter",
    "load_manuscript",
    "load_unit",
    "parse_name",
]
