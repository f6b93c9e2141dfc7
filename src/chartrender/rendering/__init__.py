"""
Rendering package for chart trees.

This module exposes a single import surface so callers do not need to know
where value coalescing, the template backend or the orchestrator live.
"""

from .coalesce import ReleaseOptions, coalesce_values, deep_merge
from .engine import JinjaBackend, RenderedFile, TemplateInput, build_template_inputs, render_all
from .renderer import Renderer, render

__all__ = [
    "JinjaBackend",
    "ReleaseOptions",
    "RenderedFile",
    "Renderer",
    "TemplateInput",
    "build_template_inputs",
    "coalesce_values",
    "deep_merge",
    "render",
    "render_all",
]
