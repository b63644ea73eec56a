"""Test fixtures for Trellis.

Sample Sites:
- sample_site: A base layout wrapping a home page and a blog index, each
  listing the three most recent of four blog posts
"""

from pathlib import Path

from trellis.models import Entry

# Path to fixtures directory
FIXTURES_DIR = Path(__file__).parent

# Path to the sample site
SAMPLE_SITE_PATH = FIXTURES_DIR / "sample_site"
SAMPLE_MANIFEST = SAMPLE_SITE_PATH / "site.yaml"
SAMPLE_CONFIG = SAMPLE_SITE_PATH / "trellis.yaml"


def make_posts(*titles: str) -> list[Entry]:
    """Create blog entries in publication order (oldest first)."""
    return [
        Entry(url=f"/blog/{title.lower()}/", data={"title": title})
        for title in titles
    ]
