"""Trellis configuration system.

Configuration is YAML-based with minimal CLI overrides (--output, --ci).
Supports environment variable substitution (${VAR}) in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.trellis/config.yaml
3. ./trellis.yaml
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from trellis.templates.renderer import DEFAULT_MAX_DEPTH

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class SiteConfig:
    """Site input configuration.

    Attributes:
        manifest: Path to the site manifest listing layouts, pages and collections
        data: Ambient metadata available to every page (e.g. site title)
    """

    manifest: str = "site.yaml"
    data: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate site configuration."""
        if not isinstance(self.data, dict):
            raise ValueError(f"site.data must be a mapping (got {type(self.data).__name__})")


@dataclass
class OutputConfig:
    """Output configuration.

    Attributes:
        path: Directory rendered pages are written to
    """

    path: str = "_site"


@dataclass
class RenderConfig:
    """Rendering configuration.

    Attributes:
        max_layout_depth: Maximum number of layouts a page may be wrapped in
    """

    max_layout_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        """Validate render configuration."""
        if not isinstance(self.max_layout_depth, int) or self.max_layout_depth < 1:
            raise ValueError(
                f"render.max_layout_depth must be a positive integer (got {self.max_layout_depth!r})"
            )


@dataclass
class CIConfig:
    """CI/CD-specific configuration.

    Attributes:
        fail_on_warning: Exit with error if any page failed to render
        json_output: Use JSON log output
    """

    fail_on_warning: bool = False
    json_output: bool = False


@dataclass
class TrellisConfig:
    """Top-level Trellis configuration.

    Attributes:
        site: Site manifest location and ambient data
        output: Output settings
        render: Renderer settings
        ci: CI/CD settings
    """

    site: SiteConfig = field(default_factory=SiteConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    ci: CIConfig = field(default_factory=CIConfig)

    # Runtime overrides (set by CLI)
    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path

    @property
    def base_dir(self) -> Path:
        """Directory relative paths in the config resolve against."""
        if self._config_path is None:
            return Path.cwd()
        # .trellis/config.yaml lives one level below the project root
        if self._config_path.parent.name == ".trellis":
            return self._config_path.parent.parent
        return self._config_path.parent

    @property
    def manifest_path(self) -> Path:
        """Resolved site manifest path."""
        return self.base_dir / self.site.manifest

    @property
    def output_path(self) -> Path:
        """Resolved output directory."""
        return self.base_dir / self.output.path


# =============================================================================
# Environment Variable Substitution
# =============================================================================


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax for environment variable substitution.
    Example: ${SITE_URL} -> value of SITE_URL

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted
    """
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return pattern.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.trellis/config.yaml
    2. ./trellis.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".trellis" / "config.yaml",
        start_path / "trellis.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a config section, treating an empty section as defaults."""
    section = data[name] or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return section


def load_config_from_dict(data: dict[str, Any]) -> TrellisConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        TrellisConfig instance

    Raises:
        ValueError: If the configuration or one of its sections is not a mapping
    """
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a mapping (got {type(data).__name__})")

    data = substitute_env_vars(data)

    config = TrellisConfig()

    if "site" in data:
        site_data = _section(data, "site")
        config.site = SiteConfig(
            manifest=site_data.get("manifest", config.site.manifest),
            data=site_data.get("data") or {},
        )

    if "output" in data:
        output_data = _section(data, "output")
        config.output = OutputConfig(
            path=output_data.get("path", config.output.path),
        )

    if "render" in data:
        render_data = _section(data, "render")
        config.render = RenderConfig(
            max_layout_depth=render_data.get("max_layout_depth", DEFAULT_MAX_DEPTH),
        )

    if "ci" in data:
        ci_data = _section(data, "ci")
        config.ci = CIConfig(
            fail_on_warning=ci_data.get("fail_on_warning", False),
            json_output=ci_data.get("json_output", False),
        )

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> TrellisConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        TrellisConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
        ValueError: If the file is not valid YAML or has invalid settings
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        try:
            with open(found_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {found_path}: {e}") from e
        config = load_config_from_dict(data)
        config._config_path = found_path.resolve()
    else:
        config = TrellisConfig()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return f'''# Trellis Configuration

# Site input
site:
  manifest: "site.yaml"   # Layouts, pages and collections
  data:                   # Ambient metadata merged under every page
    site_name: "My website"

# Output settings
output:
  path: "_site"

# Renderer settings
render:
  max_layout_depth: {DEFAULT_MAX_DEPTH}   # Longer layout chains are rejected

# CI/CD settings
ci:
  fail_on_warning: false  # Exit 1 instead of 2 when some pages fail
  json_output: false
'''
