"""Template renderer with layout composition (pure rendering).

Renders a page template, then wraps the result in each layout of its
declared chain. All output is deterministic: the same template and context
always produce the same string, and nothing is cached between calls.
"""

import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from markupsafe import Markup

from trellis.exceptions import (
    LayoutCycleError,
    MissingCollectionError,
    TemplateRenderError,
    TrellisError,
    UnknownLayoutError,
)
from trellis.models.site import Context
from trellis.templates.base import Layout, PageTemplate

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10


def atomic_write_text(path: Path, text: str, mode: int = 0o644) -> None:
    """Write text to a file atomically using a temporary file.

    Args:
        path: Destination file path
        text: Text content to write
        mode: File permissions (octal)
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
        os.chmod(path, mode)
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)


class TemplateRenderer:
    """Composes page templates with their layout chains.

    Layouts are injected at construction and held in a read-only mapping.
    A renderer has no other state, so one instance can serve any number of
    render calls, including concurrent ones.

    Usage:
        renderer = TemplateRenderer({"base": base_layout})
        html = renderer.render(index_page, Context.for_page(...))
    """

    def __init__(
        self,
        layouts: Mapping[str, Layout] | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        """Initialize the renderer.

        Args:
            layouts: Layouts by name
            max_depth: Maximum number of layouts a page may be wrapped in
        """
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1 (got {max_depth})")

        for name, layout in (layouts or {}).items():
            if not isinstance(layout, Layout):
                raise TypeError(f"Layout '{name}' must be a Layout (got {type(layout).__name__})")

        self._layouts: Mapping[str, Layout] = MappingProxyType(dict(layouts or {}))
        self.max_depth = max_depth

    @property
    def layouts(self) -> Mapping[str, Layout]:
        """Registered layouts by name (read-only)."""
        return self._layouts

    def layout_chain(self, template: PageTemplate) -> list[Layout]:
        """Resolve the layouts a template is wrapped in, innermost first.

        Args:
            template: Page or layout template

        Returns:
            Layouts in application order

        Raises:
            UnknownLayoutError: If a layout name is not registered
            LayoutCycleError: If the chain revisits a layout or is too deep
        """
        chain: list[Layout] = []
        path = [template.name]
        visited = {template.name} if isinstance(template, Layout) else set()
        current = template

        while current.layout is not None:
            name = current.layout
            path.append(name)

            if name in visited:
                raise LayoutCycleError(path)
            if len(chain) >= self.max_depth:
                raise LayoutCycleError(path, self.max_depth)

            try:
                next_layout = self._layouts[name]
            except KeyError:
                raise UnknownLayoutError(current.name, name, self._layouts) from None

            visited.add(name)
            chain.append(next_layout)
            current = next_layout

        return chain

    def render(self, template: PageTemplate, context: Context) -> Markup:
        """Render a template through its full layout chain.

        Args:
            template: Page template to render
            context: Page context

        Returns:
            Final HTML, exactly as produced by the outermost layout

        Raises:
            MissingCollectionError: If a required collection is absent
            UnknownLayoutError: If a layout name is not registered
            LayoutCycleError: If the layout chain is cyclic or too deep
            TemplateRenderError: If a render function fails
        """
        # Resolve the chain first so layout errors surface before any rendering
        chain = self.layout_chain(template)

        body = self._render_one(template, context)
        for layout in chain:
            context = context.with_content(body, layout.metadata)
            body = self._render_one(layout, context)

        logger.debug(
            "Rendered %s through %d layout(s) (%d characters)",
            template.name,
            len(chain),
            len(body),
        )
        return body

    def _render_one(self, template: PageTemplate, context: Context) -> Markup:
        """Render a single template without applying its layout."""
        context.collections.require(sorted(template.requires), template.name)

        try:
            body = template.render(context)
        except MissingCollectionError as e:
            if e.template is not None:
                raise
            raise e.for_template(template.name) from e
        except TrellisError:
            raise
        except Exception as e:
            logger.error("Template %s failed: %s", template.name, e)
            raise TemplateRenderError(template.name, str(e)) from e

        if not isinstance(body, str):
            raise TemplateRenderError(
                template.name, f"render returned {type(body).__name__}, expected str"
            )
        return Markup(body)

    def render_to_file(
        self,
        template: PageTemplate,
        context: Context,
        output_path: Path,
    ) -> Path:
        """Render a template and write the result atomically.

        Args:
            template: Page template to render
            context: Page context
            output_path: Destination file

        Returns:
            Path to written file
        """
        content = self.render(template, context)
        atomic_write_text(output_path, str(content))
        logger.info("Wrote %s to %s", template.name, output_path)
        return output_path
