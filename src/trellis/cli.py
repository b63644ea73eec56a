"""Trellis CLI interface.

Commands:
- build: Render every page of the site into the output directory
- render: Render a single page to stdout
- validate: Check templates, layout chains and collections without writing
- init: Initialize Trellis configuration

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log output
- --version: Show version and exit
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from trellis import __version__
from trellis.config import TrellisConfig, create_default_config, load_config
from trellis.exceptions import TrellisError
from trellis.site import Site, load_site
from trellis.utils.logging import configure_from_cli, get_logger

app = typer.Typer(
    name="trellis",
    help="Layout-composing template renderer for static sites",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: TrellisConfig | None = None
_logger = get_logger()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"trellis {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Trellis - compose page templates with layouts into finished HTML."""
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (ValueError, OSError) as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)

    if _config.config_path:
        _logger.debug(f"Loaded config from: {_config.config_path}")

    if _config.ci.json_output and not ci:
        configure_from_cli(verbose=verbose, quiet=quiet, ci=True)


def _current_config() -> TrellisConfig:
    return _config if _config is not None else TrellisConfig()


def _load_site(manifest: Path | None) -> Site:
    """Load the site manifest or exit with status 1."""
    config = _current_config()
    manifest_path = manifest or config.manifest_path

    try:
        return load_site(manifest_path, site_data=config.site.data)
    except TrellisError as e:
        _logger.error(f"Failed to load site: {e}")
        raise typer.Exit(1)


# =============================================================================
# build command
# =============================================================================


@app.command()
def build(
    manifest: Annotated[
        Path | None,
        typer.Option(
            "--manifest",
            "-m",
            help="Site manifest (overrides config)",
            dir_okay=False,
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output directory (overrides config)",
            file_okay=False,
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Render pages without writing files",
        ),
    ] = False,
    fail_fast: Annotated[
        bool,
        typer.Option(
            "--fail-fast",
            help="Stop at the first page that fails",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print the build report as JSON",
        ),
    ] = False,
) -> None:
    """Render every page of the site.

    Exit codes:
        0: All pages rendered
        1: Fatal error (config, manifest), or page failures with ci.fail_on_warning
        2: Some pages failed; the rest were written
    """
    from trellis.build import BuildOptions, SiteBuilder

    config = _current_config()
    site = _load_site(manifest)
    output_dir = output or config.output_path

    try:
        renderer = site.create_renderer(max_depth=config.render.max_layout_depth)
    except ValueError as e:
        _logger.error(f"Invalid renderer settings: {e}")
        raise typer.Exit(1)

    builder = SiteBuilder(site, renderer, output_dir)
    report = builder.build(BuildOptions(dry_run=dry_run, fail_fast=fail_fast))

    if json_output:
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        for path in report.written:
            typer.echo(f"  ✅ {path}")
        for failure in report.failures:
            typer.echo(f"  ❌ {failure.url} ({failure.page}): [{failure.kind}] {failure.message}")

        if dry_run:
            typer.echo(f"\nDry run: {len(report.rendered)} page(s) rendered, nothing written")
        else:
            typer.echo(f"\n📄 {len(report.written)} page(s) written to {output_dir}")

    if report.success:
        raise typer.Exit(0)
    if config.ci.fail_on_warning:
        raise typer.Exit(1)
    raise typer.Exit(2)


# =============================================================================
# render command
# =============================================================================


@app.command()
def render(
    page: Annotated[
        str,
        typer.Argument(help="Name of the page to render"),
    ],
    manifest: Annotated[
        Path | None,
        typer.Option(
            "--manifest",
            "-m",
            help="Site manifest (overrides config)",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """Render a single page and print the HTML to stdout."""
    config = _current_config()
    site = _load_site(manifest)

    try:
        target = site.get_page(page)
        renderer = site.create_renderer(max_depth=config.render.max_layout_depth)
        html = renderer.render(target.template, site.context_for(target))
    except TrellisError as e:
        _logger.error(f"[{e.kind}] {e}")
        raise typer.Exit(1)

    typer.echo(html, nl=False)


# =============================================================================
# validate command
# =============================================================================


@app.command()
def validate(
    manifest: Annotated[
        Path | None,
        typer.Option(
            "--manifest",
            "-m",
            help="Site manifest (overrides config)",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """Validate the site without rendering.

    Loading the manifest checks template syntax, collection entries and
    required collections; each page's layout chain is then resolved.
    """
    config = _current_config()
    site = _load_site(manifest)

    try:
        renderer = site.create_renderer(max_depth=config.render.max_layout_depth)
    except ValueError as e:
        _logger.error(f"Invalid renderer settings: {e}")
        raise typer.Exit(1)

    problems = 0
    for page in site.pages:
        try:
            chain = renderer.layout_chain(page.template)
        except TrellisError as e:
            problems += 1
            typer.echo(f"  ❌ {page.name}: [{e.kind}] {e}")
            continue

        names = " -> ".join([page.name, *(layout.name for layout in chain)])
        typer.echo(f"  ✅ {names}")

    if problems:
        typer.echo(f"\n❌ {problems} page(s) have problems")
        raise typer.Exit(1)

    typer.echo(f"\n✅ Site is valid: {len(site.pages)} page(s), {len(site.layouts)} layout(s)")
    raise typer.Exit(0)


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing config",
        ),
    ] = False,
) -> None:
    """Initialize Trellis configuration in the current directory."""
    trellis_dir = Path(".trellis")
    config_file = trellis_dir / "config.yaml"

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    trellis_dir.mkdir(exist_ok=True)
    config_file.write_text(create_default_config(), encoding="utf-8")
    _logger.info(f"Created config: {config_file}")

    typer.echo("\n✅ Trellis configuration initialized")
    typer.echo(f"   Config: {config_file}")
    raise typer.Exit(0)


if __name__ == "__main__":
    app()
