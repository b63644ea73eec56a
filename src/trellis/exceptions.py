"""Trellis exception types.

Every error raised while defining or rendering templates derives from
TrellisError. Errors are local to a single render call: the build driver
catches TrellisError per page, records it and moves on to the next page.
"""

from collections.abc import Iterable, Sequence


class TrellisError(Exception):
    """Base class for all Trellis errors."""

    #: Short machine-readable error kind, used in build reports and JSON logs
    kind = "error"


class InvalidEntryError(TrellisError, ValueError):
    """Raised when a collection entry is missing its url or title."""

    kind = "invalid_entry"


class MissingCollectionError(TrellisError):
    """Raised when a template dereferences a collection that was not supplied.

    Deliberately not a LookupError: Jinja2 turns LookupErrors raised during
    attribute access into undefined values, which would hide the failure.
    """

    kind = "missing_collection"

    def __init__(
        self,
        key: str,
        template: str | None = None,
        available: Iterable[str] = (),
    ) -> None:
        self.key = key
        self.template = template
        self.available = sorted(available)
        where = f" (template '{template}')" if template else ""
        super().__init__(
            f"Collection '{key}' not found{where}. Available: {self.available}"
        )

    def for_template(self, template: str) -> "MissingCollectionError":
        """Return a copy of this error attributed to the given template."""
        return MissingCollectionError(self.key, template, self.available)


class UnknownLayoutError(TrellisError):
    """Raised when a template declares a layout that is not registered."""

    kind = "unknown_layout"

    def __init__(
        self,
        template: str,
        layout: str,
        available: Iterable[str] = (),
    ) -> None:
        self.template = template
        self.layout = layout
        self.available = sorted(available)
        super().__init__(
            f"Template '{template}' uses unknown layout '{layout}'. "
            f"Available: {self.available}"
        )


class LayoutCycleError(TrellisError):
    """Raised when a layout chain revisits a layout or grows too deep."""

    kind = "layout_cycle"

    def __init__(self, path: Sequence[str], max_depth: int | None = None) -> None:
        self.path = list(path)
        self.max_depth = max_depth
        chain = " -> ".join(self.path)
        if max_depth is not None:
            message = f"Layout chain exceeds maximum depth {max_depth}: {chain}"
        else:
            message = f"Layout cycle detected: {chain}"
        super().__init__(message)


class TemplateDefinitionError(TrellisError):
    """Raised when a template source cannot be compiled."""

    kind = "template_definition"

    def __init__(self, template: str, message: str, lineno: int | None = None) -> None:
        self.template = template
        self.lineno = lineno
        location = f" at line {lineno}" if lineno is not None else ""
        super().__init__(f"Invalid template '{template}'{location}: {message}")


class TemplateRenderError(TrellisError):
    """Raised when a template fails while producing its output."""

    kind = "template_render"

    def __init__(self, template: str, message: str) -> None:
        self.template = template
        super().__init__(f"Template '{template}' failed to render: {message}")


class ManifestError(TrellisError):
    """Raised when a site manifest is malformed."""

    kind = "manifest"
