"""Page template and layout definitions.

A PageTemplate pairs declared metadata with a render function from Context
to string. Templates are immutable once defined and may be written either as
plain Python functions or as Jinja2 sources (see trellis.templates.jinja).

Defining templates in Python:

    @page("index", layout="base", title="Home", requires={"blog"})
    def index(ctx: Context) -> str:
        items = "".join(
            f'<li><a href="{post.url}">{post.title}</a></li>'
            for post in recent_entries(ctx.collections.blog, 3)
        )
        return f"<h1>My website</h1><ul>{items}</ul>"
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from trellis.models.site import Context

RenderFunction = Callable[[Context], str]


@dataclass(frozen=True)
class PageTemplate:
    """Named render unit for one page.

    Attributes:
        name: Template identifier used in error messages and reports
        render: Function from Context to the rendered body
        metadata: Declared page data (e.g. "layout", "title")
        requires: Collection names the render function dereferences
    """

    name: str
    render: RenderFunction
    metadata: Mapping[str, Any] = field(default_factory=dict)
    requires: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        """Validate and freeze the template definition."""
        if not self.name or not self.name.strip():
            raise ValueError("Template name cannot be empty")

        if not callable(self.render):
            raise TypeError(f"Template '{self.name}' render must be callable")

        layout = self.metadata.get("layout")
        if layout is not None and not isinstance(layout, str):
            raise TypeError(
                f"Template '{self.name}' layout must be a string (got {type(layout).__name__})"
            )

        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))
        object.__setattr__(self, "requires", frozenset(self.requires))

    @property
    def layout(self) -> str | None:
        """Name of the layout this template is wrapped in, if any."""
        return self.metadata.get("layout") or None


@dataclass(frozen=True)
class Layout(PageTemplate):
    """Template that wraps another template's rendered body.

    Its render function receives a Context whose ``content`` holds the
    wrapped body. A layout may itself declare a further ``layout``.
    """


def page(
    name: str,
    *,
    requires: Iterable[str] = (),
    **metadata: Any,
) -> Callable[[RenderFunction], PageTemplate]:
    """Decorator turning a render function into a PageTemplate."""

    def decorator(func: RenderFunction) -> PageTemplate:
        return PageTemplate(name, func, metadata, frozenset(requires))

    return decorator


def layout(
    name: str,
    *,
    requires: Iterable[str] = (),
    **metadata: Any,
) -> Callable[[RenderFunction], Layout]:
    """Decorator turning a render function into a Layout."""

    def decorator(func: RenderFunction) -> Layout:
        return Layout(name, func, metadata, frozenset(requires))

    return decorator
