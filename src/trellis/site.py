"""Site manifest loading.

A site manifest is a YAML file declaring everything the renderer consumes:
layouts, pages (with their externally assigned URL and metadata) and content
collections. Nothing is discovered or parsed from template files; the
manifest is the content-discovery collaborator's output written down.

Example manifest:

    layouts:
      base:
        file: _includes/base.html.j2
    pages:
      index:
        file: index.html.j2
        url: /
        data: {layout: base, title: Home}
        requires: [blog]
    collections:
      blog:
        - url: /blog/first-post/
          data: {title: First post}

Template ``file`` paths are relative to the manifest. A template may give
its Jinja2 ``source`` inline instead of a file.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from trellis.exceptions import ManifestError, TrellisError
from trellis.models.site import Collections, Context, Entry
from trellis.templates.base import Layout, PageTemplate
from trellis.templates.jinja import JinjaTemplateFactory
from trellis.templates.renderer import DEFAULT_MAX_DEPTH, TemplateRenderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page:
    """A page to build: its template plus the URL it is published at.

    Attributes:
        template: Page template
        url: Externally computed page URL (e.g. "/blog/")
    """

    template: PageTemplate
    url: str

    @property
    def name(self) -> str:
        """Template name of the page."""
        return self.template.name


@dataclass
class Site:
    """Everything needed to render a site.

    Attributes:
        root: Directory containing the manifest
        layouts: Layouts by name
        pages: Pages in declaration order
        collections: Content collections
        data: Ambient site data merged under every page's metadata
    """

    root: Path
    layouts: dict[str, Layout] = field(default_factory=dict)
    pages: list[Page] = field(default_factory=list)
    collections: Collections = field(default_factory=Collections)
    data: dict[str, Any] = field(default_factory=dict)

    def get_page(self, name: str) -> Page:
        """Look up a page by template name.

        Raises:
            ManifestError: If no page has that name
        """
        for page in self.pages:
            if page.name == name:
                return page
        available = [page.name for page in self.pages]
        raise ManifestError(f"Page '{name}' not found. Available: {available}")

    def context_for(self, page: Page) -> Context:
        """Build a fresh render context for a page.

        The page URL is exposed as ``url`` unless the page declares its own.
        """
        return Context.for_page(
            {"url": page.url, **page.template.metadata},
            self.collections,
            self.data,
        )

    def create_renderer(self, max_depth: int = DEFAULT_MAX_DEPTH) -> TemplateRenderer:
        """Create a renderer holding this site's layouts."""
        return TemplateRenderer(self.layouts, max_depth=max_depth)

    def validate(self) -> None:
        """Check every template's declared collections exist.

        Raises:
            MissingCollectionError: For the first undeclared collection
        """
        for template in [*self.layouts.values(), *(page.template for page in self.pages)]:
            self.collections.require(sorted(template.requires), template.name)


# =============================================================================
# Manifest parsing
# =============================================================================


def _as_mapping(value: Any, where: str) -> Mapping[str, Any]:
    """Return value as a mapping, treating None as empty."""
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ManifestError(f"{where} must be a mapping (got {type(value).__name__})")
    return value


def _as_names(value: Any, where: str) -> list[str]:
    """Return value as a list of collection names."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ManifestError(f"{where} must be a list of collection names")
    return value


def _load_template(
    factory: JinjaTemplateFactory,
    root: Path,
    name: Any,
    definition: Mapping[str, Any],
    kind: type[PageTemplate],
) -> PageTemplate:
    """Build one template from its manifest definition."""
    label = "layout" if issubclass(kind, Layout) else "page"
    if not isinstance(name, str):
        raise ManifestError(f"{label} name must be a string (got {name!r})")

    where = f"{label} '{name}'"
    metadata = _as_mapping(definition.get("data"), f"{where} data")
    requires = _as_names(definition.get("requires"), f"{where} requires")

    try:
        if "source" in definition:
            return factory.from_string(name, str(definition["source"]), metadata, requires, kind)
        if "file" in definition:
            file = definition["file"]
            if not isinstance(file, str):
                raise ManifestError(f"{where} file must be a string path (got {file!r})")
            return factory.from_file(name, root / file, metadata, requires, kind)
    except TrellisError:
        raise
    except (TypeError, ValueError, OSError) as e:
        raise ManifestError(f"Invalid {where}: {e}") from e
    raise ManifestError(f"{where} needs either 'file' or 'source'")


def _load_collections(raw: Mapping[str, Any]) -> Collections:
    """Build collections from manifest entries."""
    collections: dict[str, list[Entry]] = {}
    for name, entries in raw.items():
        if not isinstance(name, str):
            raise ManifestError(f"collection name must be a string (got {name!r})")
        if entries is None:
            entries = []
        if not isinstance(entries, list):
            raise ManifestError(f"collection '{name}' must be a list of entries")
        collections[name] = [Entry.from_dict(entry) for entry in entries]
    return Collections(collections)


def parse_site(
    data: Mapping[str, Any],
    root: Path,
    site_data: Mapping[str, Any] | None = None,
    factory: JinjaTemplateFactory | None = None,
) -> Site:
    """Build a Site from an already-parsed manifest.

    Args:
        data: Manifest content
        root: Directory template paths are relative to
        site_data: Ambient site data (from configuration)
        factory: Template factory (defaults to one searching root)

    Returns:
        Validated Site

    Raises:
        ManifestError: If the manifest is malformed
        InvalidEntryError: If a collection entry is invalid
        TemplateDefinitionError: If a template cannot be compiled
        MissingCollectionError: If a template requires an undeclared collection
    """
    data = _as_mapping(data, "manifest")
    if factory is None:
        factory = JinjaTemplateFactory(search_path=root)

    collections = _load_collections(_as_mapping(data.get("collections"), "collections"))

    layouts: dict[str, Layout] = {}
    for name, definition in _as_mapping(data.get("layouts"), "layouts").items():
        layouts[name] = _load_template(  # type: ignore[assignment]
            factory, root, name, _as_mapping(definition, f"layout '{name}'"), Layout
        )

    pages: list[Page] = []
    seen_urls: dict[str, str] = {}
    for name, definition in _as_mapping(data.get("pages"), "pages").items():
        definition = _as_mapping(definition, f"page '{name}'")
        url = definition.get("url")
        if not isinstance(url, str) or not url.startswith("/") or url.startswith("//"):
            raise ManifestError(
                f"page '{name}' needs a url starting with a single '/' (got {url!r})"
            )
        if url in seen_urls:
            raise ManifestError(f"pages '{seen_urls[url]}' and '{name}' share url {url}")
        seen_urls[url] = name

        template = _load_template(factory, root, name, definition, PageTemplate)
        pages.append(Page(template=template, url=url))

    site = Site(
        root=root,
        layouts=layouts,
        pages=pages,
        collections=collections,
        data=dict(site_data or {}),
    )
    site.validate()

    logger.info(
        "Loaded site: %d page(s), %d layout(s), %d collection(s)",
        len(pages),
        len(layouts),
        len(collections),
    )
    return site


def load_site(
    path: Path,
    site_data: Mapping[str, Any] | None = None,
) -> Site:
    """Load and validate a site manifest file.

    Args:
        path: Manifest file path
        site_data: Ambient site data (from configuration)

    Returns:
        Validated Site

    Raises:
        ManifestError: If the manifest is missing or malformed
    """
    if not path.is_file():
        raise ManifestError(f"Site manifest not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ManifestError(f"Cannot read site manifest {path}: {e}") from e

    logger.debug("Loading site manifest %s", path)
    return parse_site(data, path.parent.resolve(), site_data)

