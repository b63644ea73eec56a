"""Site build driver.

Renders every page of a Site and writes it under the output directory. Each
page is rendered independently: a page that fails is recorded in the build
report and skipped, and the remaining pages still build.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from trellis.exceptions import TrellisError
from trellis.site import Page, Site
from trellis.templates.renderer import TemplateRenderer, atomic_write_text
from trellis.utils.logging import log_structured

logger = logging.getLogger(__name__)


def output_path_for(url: str, output_dir: Path) -> Path:
    """Map a page URL to the file it is written to.

    "/" -> index.html, "/blog/" and "/blog" -> blog/index.html,
    "/about.html" -> about.html. A last segment without an extension is
    treated as a directory.

    Args:
        url: Absolute page URL
        output_dir: Build output directory

    Returns:
        Output file path inside output_dir

    Raises:
        ValueError: If the URL is relative or escapes the output directory
    """
    if not url.startswith("/") or url.startswith("//"):
        raise ValueError(f"Page url must start with a single '/': {url!r}")

    parts = [part for part in url.split("/") if part]
    if any(part in {".", ".."} or "\\" in part for part in parts):
        raise ValueError(f"Page url may not contain '.', '..' or '\\' segments: {url!r}")

    if url.endswith("/") or not parts or "." not in parts[-1]:
        parts.append("index.html")

    path = output_dir.joinpath(*parts)
    if not path.resolve().is_relative_to(output_dir.resolve()):
        raise ValueError(f"Page url escapes the output directory: {url!r}")
    return path


def _failure_kind(error: Exception) -> str:
    """Classify a page failure for the build report."""
    if isinstance(error, TrellisError):
        return error.kind
    if isinstance(error, OSError):
        return "write_error"
    return "invalid_url"


@dataclass
class BuildOptions:
    """Options for controlling a build.

    Attributes:
        dry_run: Render pages without writing files
        fail_fast: Stop at the first failing page
    """

    dry_run: bool = False
    fail_fast: bool = False


@dataclass
class PageFailure:
    """A page that could not be rendered.

    Attributes:
        page: Template name of the page
        url: Page URL
        kind: Error kind (e.g. "unknown_layout")
        message: Error description
    """

    page: str
    url: str
    kind: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "page": self.page,
            "url": self.url,
            "kind": self.kind,
            "message": self.message,
        }


@dataclass
class BuildReport:
    """Outcome of a build.

    Attributes:
        written: Files written, in page order
        rendered: Names of pages rendered successfully
        failures: Pages that failed
    """

    written: list[Path] = field(default_factory=list)
    rendered: list[str] = field(default_factory=list)
    failures: list[PageFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if every page rendered."""
        return not self.failures

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "success": self.success,
            "written": [str(path) for path in self.written],
            "rendered": list(self.rendered),
            "failures": [failure.to_dict() for failure in self.failures],
        }


class SiteBuilder:
    """Builds every page of a site into an output directory.

    Usage:
        builder = SiteBuilder(site, site.create_renderer(), Path("_site"))
        report = builder.build()
    """

    def __init__(
        self,
        site: Site,
        renderer: TemplateRenderer,
        output_dir: Path,
    ) -> None:
        self.site = site
        self.renderer = renderer
        self.output_dir = output_dir

    def build_page(self, page: Page, dry_run: bool = False) -> tuple[str, Path]:
        """Render one page and write it unless dry_run is set.

        Returns:
            Rendered HTML and the output path it belongs at

        Raises:
            TrellisError: If the page fails to render
            ValueError: If the page url cannot be mapped to a file
            OSError: If the output file cannot be written
        """
        output_path = output_path_for(page.url, self.output_dir)
        html = self.renderer.render(page.template, self.site.context_for(page))

        if not dry_run:
            atomic_write_text(output_path, str(html))
            logger.debug("Wrote %s -> %s", page.url, output_path)

        return str(html), output_path

    def build(self, options: BuildOptions | None = None) -> BuildReport:
        """Render every page in declaration order.

        Args:
            options: Build options

        Returns:
            Build report listing written files and failed pages
        """
        options = options or BuildOptions()
        report = BuildReport()

        logger.info("Building %d page(s) into %s", len(self.site.pages), self.output_dir)

        for page in self.site.pages:
            try:
                _, output_path = self.build_page(page, dry_run=options.dry_run)
            except (TrellisError, ValueError, OSError) as e:
                kind = _failure_kind(e)
                failure = PageFailure(page=page.name, url=page.url, kind=kind, message=str(e))
                report.failures.append(failure)
                log_structured(
                    logger,
                    logging.ERROR,
                    f"Page {page.url} ({page.name}) failed [{kind}]: {e}",
                    **failure.to_dict(),
                )
                if options.fail_fast:
                    logger.warning("Stopping build after first failure (fail-fast)")
                    break
                continue

            report.rendered.append(page.name)
            if not options.dry_run:
                report.written.append(output_path)

        logger.info(
            "Build finished: %d rendered, %d failed",
            len(report.rendered),
            len(report.failures),
        )
        return report
