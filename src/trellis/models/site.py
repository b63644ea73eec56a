"""Site content entities.

This module contains the read-only values handed to every render call:
- Entry: One item of a content collection (url + metadata)
- Collections: Typed, read-only mapping of collection name to entries
- Context: Per-render input bundle (metadata, collections, wrapped content)
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from markupsafe import Markup

from trellis.exceptions import InvalidEntryError, MissingCollectionError


def _freeze(data: Mapping[str, Any] | None) -> Mapping[str, Any]:
    """Copy a mapping into a read-only proxy."""
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True)
class Entry:
    """Single item in a content collection.

    Entries are produced by content discovery and are never mutated by the
    renderer. Insertion order within a collection is publication order,
    oldest first.

    Attributes:
        url: Absolute site URL of the item (e.g. "/blog/first-post/")
        data: Item metadata; must contain a "title" string
    """

    url: str
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate url and title, then freeze the metadata."""
        if not isinstance(self.url, str) or not self.url.strip():
            raise InvalidEntryError(f"Entry url must be a non-empty string (got {self.url!r})")

        if not isinstance(self.data, Mapping):
            raise InvalidEntryError(f"Entry data for {self.url} must be a mapping")

        if not isinstance(self.data.get("title"), str):
            raise InvalidEntryError(f"Entry {self.url} must have a string 'title'")

        object.__setattr__(self, "data", _freeze(self.data))

    @property
    def title(self) -> str:
        """Shortcut for data["title"]."""
        return self.data["title"]

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Entry":
        """Build an entry from a manifest mapping with "url" and "data" keys."""
        if not isinstance(raw, Mapping):
            raise InvalidEntryError(f"Entry must be a mapping (got {type(raw).__name__})")
        return cls(url=raw.get("url", ""), data=raw.get("data") or {})

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"url": self.url, "data": dict(self.data)}


class Collections(Mapping[str, tuple[Entry, ...]]):
    """Read-only mapping from collection name to an ordered tuple of entries.

    Unlike a plain dict, looking up an absent collection raises
    MissingCollectionError rather than KeyError, so a template that asks for
    a collection nobody supplied fails loudly instead of rendering an empty
    list. Collections are also reachable as attributes (``collections.blog``)
    unless the name clashes with a Mapping method such as ``items``.

    Usage:
        collections = Collections({"blog": [Entry("/a/", {"title": "A"})]})
        collections.require(["blog"])
        posts = collections.blog
    """

    def __init__(self, collections: Mapping[str, Iterable[Entry]] | None = None) -> None:
        items: dict[str, tuple[Entry, ...]] = {}
        for name, entries in (collections or {}).items():
            frozen = tuple(entries)
            for entry in frozen:
                if not isinstance(entry, Entry):
                    raise InvalidEntryError(
                        f"Collection '{name}' contains a non-Entry value: {entry!r}"
                    )
            items[name] = frozen
        self._items: Mapping[str, tuple[Entry, ...]] = MappingProxyType(items)

    def __getitem__(self, key: str) -> tuple[Entry, ...]:
        try:
            return self._items[key]
        except KeyError:
            raise MissingCollectionError(key, available=self._items) from None

    def __getattr__(self, name: str) -> tuple[Entry, ...]:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        sizes = {name: len(entries) for name, entries in self._items.items()}
        return f"Collections({sizes})"

    def get(self, key: str, default: Any = None) -> Any:
        """Return a collection or the default, without raising."""
        return self._items.get(key, default)

    def require(self, names: Iterable[str], template: str | None = None) -> None:
        """Validate that every named collection is present.

        Args:
            names: Collection names a template dereferences
            template: Template name to report in the error

        Raises:
            MissingCollectionError: For the first absent name
        """
        for name in names:
            if name not in self._items:
                raise MissingCollectionError(name, template, self._items)


@dataclass(frozen=True)
class Context:
    """Per-render input bundle.

    A Context is built fresh for every page render and never mutated; layout
    composition derives new contexts with with_content().

    Attributes:
        metadata: Page metadata merged over ambient site data
        collections: Site-wide content collections
        content: Rendered body of the wrapped page (layouts only)
    """

    metadata: Mapping[str, Any] = field(default_factory=dict)
    collections: Collections = field(default_factory=Collections)
    content: Markup | None = None

    def __post_init__(self) -> None:
        """Freeze metadata and normalize collections and content."""
        object.__setattr__(self, "metadata", _freeze(self.metadata))
        if not isinstance(self.collections, Collections):
            object.__setattr__(self, "collections", Collections(self.collections))
        if self.content is not None and not isinstance(self.content, Markup):
            object.__setattr__(self, "content", Markup(self.content))

    @classmethod
    def for_page(
        cls,
        page_metadata: Mapping[str, Any],
        collections: Collections | Mapping[str, Iterable[Entry]],
        site_data: Mapping[str, Any] | None = None,
    ) -> "Context":
        """Build the context for rendering a page.

        Page metadata takes precedence over ambient site data.
        """
        return cls(
            metadata={**(site_data or {}), **page_metadata},
            collections=collections,
        )

    def with_content(
        self,
        content: str,
        layout_metadata: Mapping[str, Any] | None = None,
    ) -> "Context":
        """Derive the context handed to a layout.

        Layout metadata only fills keys the page did not already resolve.

        Args:
            content: Already-rendered body of the wrapped template
            layout_metadata: The layout's own declared metadata

        Returns:
            New Context with the same collections
        """
        return Context(
            metadata={**(layout_metadata or {}), **self.metadata},
            collections=self.collections,
            content=Markup(content),
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a metadata value."""
        return self.metadata.get(key, default)

    @property
    def title(self) -> str | None:
        """Page title, if declared."""
        return self.metadata.get("title")

    def to_template_vars(self) -> dict[str, Any]:
        """Flatten into the variable namespace exposed to Jinja2 templates.

        Metadata keys are exposed at top level next to ``metadata``,
        ``collections`` and ``content``.
        """
        return {
            **self.metadata,
            "metadata": self.metadata,
            "collections": self.collections,
            "content": self.content,
        }
