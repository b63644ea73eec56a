"""Trellis render helpers shared by Python and Jinja2 templates."""

from trellis.renderers.filters import recent_entries

__all__ = ["recent_entries"]
