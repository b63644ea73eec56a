"""Trellis - Layout-composing template renderer for static sites.

Trellis turns a page template, its declared metadata and the site's content
collections into a finished HTML string by wrapping the page body in a chain
of layouts.

Core principles:
- Pure rendering: Same context always produces byte-identical output
- Explicit inputs: Layouts are injected, collections are declared and validated
- Trusted fragments: Rendered HTML is tagged as safe markup, never re-escaped
- Page isolation: A failing page never affects the rest of a build
"""

import logging

__version__ = "0.1.0"
__author__ = "Trellis Contributors"

logging.getLogger(__name__).addHandler(logging.NullHandler())
