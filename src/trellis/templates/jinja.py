"""Jinja2-backed page templates.

Builds PageTemplate and Layout objects whose render function evaluates a
compiled Jinja2 template. Templates are trusted site source, so autoescaping
is off and output is passed through verbatim. Undefined variables are errors
rather than empty strings.

Template variables:
- every metadata key at top level (``title``, ``layout``, ...)
- ``metadata``: the full metadata mapping
- ``collections``: the site's Collections
- ``content``: wrapped body (layouts only, None for pages)

Example:
    <ul>
    {% for post in collections.blog | recent(3) %}
      <li><a href="{{ post.url }}">{{ post.data.title }}</a></li>
    {% endfor %}
    </ul>
"""

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, TypeVar

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateSyntaxError,
    UndefinedError,
)

from trellis.exceptions import TemplateDefinitionError, TemplateRenderError
from trellis.models.site import Context
from trellis.renderers.filters import recent_entries
from trellis.templates.base import PageTemplate

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=PageTemplate)


class JinjaRenderFunction:
    """Render function wrapping a compiled Jinja2 template."""

    def __init__(self, name: str, template: Template) -> None:
        self.name = name
        self.template = template

    def __call__(self, context: Context) -> str:
        try:
            return self.template.render(context.to_template_vars())
        except UndefinedError as e:
            raise TemplateRenderError(self.name, e.message or str(e)) from e

    def __repr__(self) -> str:
        return f"JinjaRenderFunction({self.name!r})"


class JinjaTemplateFactory:
    """Creates templates from Jinja2 sources sharing one environment.

    Usage:
        factory = JinjaTemplateFactory(search_path=site_root)
        base = factory.from_file("base", site_root / "_includes/base.html.j2", kind=Layout)
        index = factory.from_string("index", source, {"layout": "base"}, {"blog"})
    """

    def __init__(self, search_path: Path | None = None) -> None:
        """Initialize the factory.

        Args:
            search_path: Directory for {% include %} and {% extends %} lookups
        """
        loader = FileSystemLoader(str(search_path)) if search_path is not None else None
        self._env = Environment(
            loader=loader,
            undefined=StrictUndefined,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        self._env.filters["recent"] = recent_entries

    @property
    def environment(self) -> Environment:
        """The shared Jinja2 environment."""
        return self._env

    def from_string(
        self,
        name: str,
        source: str,
        metadata: Mapping[str, Any] | None = None,
        requires: Iterable[str] = (),
        kind: type[T] = PageTemplate,  # type: ignore[assignment]
    ) -> T:
        """Compile a template from source text.

        Args:
            name: Template name
            source: Jinja2 source
            metadata: Declared template metadata
            requires: Collection names the template dereferences
            kind: PageTemplate or Layout

        Returns:
            Template of the requested kind

        Raises:
            TemplateDefinitionError: If the source has a syntax error
        """
        try:
            compiled = self._env.from_string(source)
        except TemplateSyntaxError as e:
            raise TemplateDefinitionError(name, e.message or str(e), e.lineno) from e

        logger.debug("Compiled template %s (%s)", name, kind.__name__)
        return kind(
            name=name,
            render=JinjaRenderFunction(name, compiled),
            metadata=metadata or {},
            requires=frozenset(requires),
        )

    def from_file(
        self,
        name: str,
        path: Path,
        metadata: Mapping[str, Any] | None = None,
        requires: Iterable[str] = (),
        kind: type[T] = PageTemplate,  # type: ignore[assignment]
    ) -> T:
        """Compile a template from a file.

        Raises:
            TemplateDefinitionError: If the file is missing or has a syntax error
        """
        if not path.is_file():
            raise TemplateDefinitionError(name, f"Template file not found: {path}")

        source = path.read_text(encoding="utf-8")
        return self.from_string(name, source, metadata, requires, kind)
