"""Trellis data models.

This module exports the core entities handed to every render call:
- Entry: One item of a content collection
- Collections: Read-only mapping of collection name to entries
- Context: Per-render input bundle
"""

from trellis.models.site import Collections, Context, Entry

__all__ = [
    "Collections",
    "Context",
    "Entry",
]
