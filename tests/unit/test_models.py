"""Unit tests for site content models."""

import pytest
from markupsafe import Markup

from trellis.exceptions import InvalidEntryError, MissingCollectionError
from trellis.models import Collections, Context, Entry


class TestEntry:
    """Tests for Entry."""

    def test_create(self) -> None:
        """Test creating a valid entry."""
        entry = Entry(url="/blog/post1/", data={"title": "Post1", "tags": ["a"]})

        assert entry.url == "/blog/post1/"
        assert entry.title == "Post1"
        assert entry.data["tags"] == ["a"]

    @pytest.mark.parametrize("url", ["", "   ", None])
    def test_empty_url_rejected(self, url: object) -> None:
        """Test an entry needs a non-empty url."""
        with pytest.raises(InvalidEntryError, match="url"):
            Entry(url=url, data={"title": "x"})  # type: ignore[arg-type]

    def test_missing_title_rejected(self) -> None:
        """Test an entry needs a title."""
        with pytest.raises(InvalidEntryError, match="title"):
            Entry(url="/a/", data={})

    def test_non_string_title_rejected(self) -> None:
        """Test the title must be a string."""
        with pytest.raises(InvalidEntryError, match="title"):
            Entry(url="/a/", data={"title": 42})

    def test_data_is_read_only(self) -> None:
        """Test entry data cannot be mutated."""
        entry = Entry(url="/a/", data={"title": "A"})

        with pytest.raises(TypeError):
            entry.data["title"] = "B"  # type: ignore[index]

    def test_data_is_copied(self) -> None:
        """Test later changes to the source mapping do not leak in."""
        raw = {"title": "A"}
        entry = Entry(url="/a/", data=raw)

        raw["title"] = "B"

        assert entry.title == "A"

    def test_from_dict(self) -> None:
        """Test building from a manifest mapping."""
        entry = Entry.from_dict({"url": "/a/", "data": {"title": "A"}})

        assert entry.to_dict() == {"url": "/a/", "data": {"title": "A"}}

    def test_from_dict_rejects_non_mapping(self) -> None:
        """Test a non-mapping entry definition is rejected."""
        with pytest.raises(InvalidEntryError):
            Entry.from_dict(["/a/", "A"])  # type: ignore[arg-type]


class TestCollections:
    """Tests for Collections."""

    def test_item_and_attribute_access(self, collections: Collections) -> None:
        """Test collections are reachable by key and by attribute."""
        assert collections["blog"] is collections.blog
        assert len(collections.blog) == 4

    def test_entries_are_tuples(self, collections: Collections) -> None:
        """Test collection contents are frozen."""
        assert isinstance(collections["blog"], tuple)

    def test_missing_key_raises(self, collections: Collections) -> None:
        """Test a missing collection raises instead of returning empty."""
        with pytest.raises(MissingCollectionError) as exc_info:
            collections["news"]

        assert exc_info.value.key == "news"
        assert exc_info.value.available == ["blog"]

    def test_missing_attribute_raises(self) -> None:
        """Test attribute access to a missing collection raises too."""
        with pytest.raises(MissingCollectionError, match="blog"):
            Collections().blog

    def test_missing_collection_is_not_a_key_error(self) -> None:
        """Test the error is not swallowed by code catching LookupError."""
        assert not issubclass(MissingCollectionError, LookupError)

    def test_contains_and_get(self, collections: Collections) -> None:
        """Test membership and get() never raise."""
        assert "blog" in collections
        assert "news" not in collections
        assert collections.get("news") is None
        assert collections.get("news", ()) == ()

    def test_mapping_protocol(self, collections: Collections) -> None:
        """Test iteration and length."""
        assert list(collections) == ["blog"]
        assert len(collections) == 1
        assert dict(collections.items())["blog"] == collections.blog

    def test_rejects_non_entries(self) -> None:
        """Test every collection member must be an Entry."""
        with pytest.raises(InvalidEntryError, match="non-Entry"):
            Collections({"blog": [{"url": "/a/", "data": {"title": "A"}}]})  # type: ignore[list-item]

    def test_require_passes(self, collections: Collections) -> None:
        """Test require() accepts present collections."""
        collections.require(["blog"])

    def test_require_reports_template(self, collections: Collections) -> None:
        """Test require() names the template and the missing key."""
        with pytest.raises(MissingCollectionError) as exc_info:
            collections.require(["blog", "news"], template="home")

        assert exc_info.value.key == "news"
        assert exc_info.value.template == "home"
        assert "home" in str(exc_info.value)

    def test_private_attributes_raise_attribute_error(self) -> None:
        """Test underscore names are not treated as collections."""
        with pytest.raises(AttributeError):
            Collections().__missing_thing__


class TestContext:
    """Tests for Context."""

    def test_for_page_merges_site_data(self, collections: Collections) -> None:
        """Test page metadata wins over ambient site data."""
        context = Context.for_page(
            {"title": "Blog"},
            collections,
            site_data={"title": "Site", "site_name": "My website"},
        )

        assert context.title == "Blog"
        assert context.get("site_name") == "My website"
        assert context.content is None

    def test_accepts_plain_mapping_collections(self, blog_posts: list) -> None:
        """Test plain mappings are converted to Collections."""
        context = Context(collections={"blog": blog_posts})

        assert isinstance(context.collections, Collections)

    def test_metadata_is_read_only(self) -> None:
        """Test context metadata cannot be mutated."""
        context = Context(metadata={"title": "A"})

        with pytest.raises(TypeError):
            context.metadata["title"] = "B"  # type: ignore[index]

    def test_with_content_page_metadata_wins(self, collections: Collections) -> None:
        """Test layout metadata only fills keys the page left unset."""
        context = Context.for_page({"title": "Blog"}, collections)

        wrapped = context.with_content(
            "<h1>Body</h1>",
            {"title": "Layout title", "lang": "en"},
        )

        assert wrapped.title == "Blog"
        assert wrapped.get("lang") == "en"
        assert wrapped.content == "<h1>Body</h1>"
        assert isinstance(wrapped.content, Markup)
        assert wrapped.collections is collections

    def test_with_content_leaves_original_untouched(self) -> None:
        """Test deriving a layout context does not change the page context."""
        context = Context(metadata={"title": "A"})

        context.with_content("body", {"lang": "en"})

        assert context.content is None
        assert "lang" not in context.metadata

    def test_content_not_escaped(self) -> None:
        """Test content keeps its markup verbatim."""
        context = Context(content="<p>x</p>")

        assert str(context.content) == "<p>x</p>"

    def test_to_template_vars(self, collections: Collections) -> None:
        """Test the Jinja2 namespace exposes metadata at top level."""
        context = Context(metadata={"title": "A"}, collections=collections)

        variables = context.to_template_vars()

        assert variables["title"] == "A"
        assert variables["metadata"]["title"] == "A"
        assert variables["collections"] is collections
        assert variables["content"] is None
