"""Shared pytest fixtures for Trellis tests.

Fixtures are organized by category:
- Path fixtures: Sample site on disk
- Content fixtures: Blog entries and collections
- Template fixtures: Python-defined pages and layouts mirroring the sample site
"""

import logging
from pathlib import Path

import pytest

from tests.fixtures import SAMPLE_MANIFEST, SAMPLE_SITE_PATH, make_posts
from trellis.models import Collections, Context, Entry
from trellis.renderers import recent_entries
from trellis.templates import Layout, PageTemplate, TemplateRenderer, layout, page

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def sample_site_dir() -> Path:
    """Return the path to the sample site."""
    return SAMPLE_SITE_PATH


@pytest.fixture
def sample_manifest() -> Path:
    """Return the path to the sample site manifest."""
    return SAMPLE_MANIFEST


@pytest.fixture(autouse=True)
def reset_trellis_logger() -> None:
    """Let records reach caplog even after the CLI reconfigured logging."""
    logger = logging.getLogger("trellis")
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# =============================================================================
# Content Fixtures
# =============================================================================


@pytest.fixture
def blog_posts() -> list[Entry]:
    """Four blog posts, oldest first."""
    return make_posts("Post1", "Post2", "Post3", "Post4")


@pytest.fixture
def collections(blog_posts: list[Entry]) -> Collections:
    """Collections holding the blog posts."""
    return Collections({"blog": blog_posts})


# =============================================================================
# Template Fixtures
# =============================================================================


@pytest.fixture
def base_layout() -> Layout:
    """HTML shell placing the wrapped page body inside <body>."""

    @layout("base", site_name="My website")
    def base(ctx: Context) -> str:
        return (
            f"<html><head><title>{ctx.title} | {ctx.get('site_name')}</title></head>"
            f"<body><nav><a href=\"/\">Home</a></nav>{ctx.content}</body></html>"
        )

    return base


@pytest.fixture
def blog_index() -> PageTemplate:
    """Blog index listing the three most recent posts."""

    @page("blog", layout="base", title="Blog", requires={"blog"})
    def blog(ctx: Context) -> str:
        items = "".join(
            f'<li><a href="{post.url}">{post.title}</a></li>'
            for post in recent_entries(ctx.collections.blog, 3)
        )
        return f"<h1>My blog</h1><ul>{items}</ul>"

    return blog


@pytest.fixture
def renderer(base_layout: Layout) -> TemplateRenderer:
    """Renderer with the base layout registered."""
    return TemplateRenderer({"base": base_layout})


@pytest.fixture
def page_context(blog_index: PageTemplate, collections: Collections) -> Context:
    """Context for rendering the blog index."""
    return Context.for_page(blog_index.metadata, collections)
