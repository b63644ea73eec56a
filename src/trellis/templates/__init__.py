"""Trellis template rendering (pure, deterministic).

This module provides page templates, layouts and the renderer that composes
them. Templates may be Python functions or Jinja2 sources; either way the
same template and context always produce identical output.
"""

from trellis.templates.base import Layout, PageTemplate, layout, page
from trellis.templates.jinja import JinjaTemplateFactory
from trellis.templates.renderer import TemplateRenderer

__all__ = [
    "JinjaTemplateFactory",
    "Layout",
    "PageTemplate",
    "TemplateRenderer",
    "layout",
    "page",
]
