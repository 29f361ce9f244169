"""Configuration management for titlescope."""

from __future__ import annotations

import configparser
import os
import re
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from titlescope.titles.flatten import GROUP_ROW_HEIGHT, LEAF_ROW_HEIGHT, SUBGROUP_ROW_HEIGHT
from titlescope.titles.ranking import UPGRADE_TOLERANCE

CONFIG_FILENAME = "titlescope.ini"


class QuiConfig(BaseModel):
    """Torrent manager connection."""

    url: str | None = None
    instance_id: int | None = None
    timeout: float = 30.0


class ScoringConfig(BaseModel):
    """Ranking options."""

    upgrade_tolerance: int = UPGRADE_TOLERANCE
    explained_upgrades_only: bool = True


class DisplayConfig(BaseModel):
    """Row height hints for the titles tree."""

    group_row_height: int = GROUP_ROW_HEIGHT
    subgroup_row_height: int = SUBGROUP_ROW_HEIGHT
    item_row_height: int = LEAF_ROW_HEIGHT

    @property
    def row_heights(self) -> dict[tuple[str, int], int]:
        """Row height hints keyed by (kind, depth)."""
        return {
            ("group", 0): self.group_row_height,
            ("subgroup", 1): self.subgroup_row_height,
            ("leaf", 2): self.item_row_height,
        }


class ExclusionsConfig(BaseModel):
    """Content exclusion configuration."""

    series: list[str] = Field(default_factory=list)


class AppConfig(BaseModel):
    """Application configuration."""

    qui: QuiConfig = Field(default_factory=QuiConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    filters: dict[str, str] = Field(default_factory=dict)
    exclusions: ExclusionsConfig = Field(default_factory=ExclusionsConfig)


# Loaded configuration, cached until reset_config()
_config: AppConfig | None = None
_config_path: Path | None = None

# Environment variable naming an explicit config file
CONFIG_ENV_VAR = "TITLESCOPE_CONFIG"

YAML_FILENAME = "titlescope.yaml"

_ENV_REF = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def get_exe_directory() -> Path:
    """Folder of a frozen executable, otherwise the working directory."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).parent
    return Path.cwd()


def get_config_paths() -> list[Path]:
    """Candidate config files, highest priority first.

    ``$TITLESCOPE_CONFIG`` wins when set. Then ``titlescope.ini`` next to the
    executable, in the working directory and in ``~/.titlescope/``, followed
    by ``titlescope.yaml`` in the working directory and in ``~/.titlescope/``.
    Duplicates are dropped.
    """
    cwd = Path.cwd()
    home_dir = Path.home() / ".titlescope"

    candidates: list[Path] = []
    override = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if override:
        candidates.append(Path(override).expanduser())

    candidates += [
        get_exe_directory() / CONFIG_FILENAME,
        cwd / CONFIG_FILENAME,
        home_dir / CONFIG_FILENAME,
        cwd / YAML_FILENAME,
        home_dir / YAML_FILENAME,
    ]

    paths: list[Path] = []
    for candidate in candidates:
        if candidate not in paths:
            paths.append(candidate)
    return paths


def find_config_file() -> Path | None:
    """First candidate config file that exists, if any."""
    return next((path for path in get_config_paths() if path.is_file()), None)


def _expand_env_vars(value: Any) -> Any:
    """Substitute ``${VAR}``/``$VAR`` references in strings, lists and dicts.

    Unset variables become "".
    """
    if isinstance(value, dict):
        return {key: _expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    if not isinstance(value, str):
        return value
    return _ENV_REF.sub(lambda m: os.environ.get(m.group(1) or m.group(2), ""), value)


def _parse_bool(value: str) -> bool:
    """Interpret true/yes/on/1 (any case) as True."""
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_list(value: str) -> list[str]:
    """Split a comma-separated value, dropping blank entries."""
    items = (part.strip() for part in (value or "").split(","))
    return [item for item in items if item]


def _parse_int_options(
    parser: configparser.ConfigParser, section: str, keys: list[str]
) -> dict[str, int]:
    """Read integer options from a section, skipping invalid values."""
    values: dict[str, int] = {}
    for key in keys:
        if parser.has_option(section, key):
            try:
                values[key] = int(parser.get(section, key))
            except ValueError:
                pass  # Keep default
    return values


def _load_ini_config(path: Path) -> dict[str, Any]:
    """Load configuration from an INI file.

    Returns:
        Dictionary structure matching the AppConfig schema.
    """
    parser = configparser.ConfigParser()
    parser.read(path, encoding="utf-8")

    config: dict[str, Any] = {}

    if parser.has_section("qui"):
        qui: dict[str, Any] = {}
        url = parser.get("qui", "url", fallback="").strip()
        if url:
            qui["url"] = url
        qui.update(_parse_int_options(parser, "qui", ["instance_id"]))
        if parser.has_option("qui", "timeout"):
            try:
                qui["timeout"] = float(parser.get("qui", "timeout"))
            except ValueError:
                pass
        if qui:
            config["qui"] = qui

    if parser.has_section("scoring"):
        scoring: dict[str, Any] = _parse_int_options(parser, "scoring", ["upgrade_tolerance"])
        if parser.has_option("scoring", "explained_upgrades_only"):
            scoring["explained_upgrades_only"] = _parse_bool(
                parser.get("scoring", "explained_upgrades_only")
            )
        if scoring:
            config["scoring"] = scoring

    if parser.has_section("display"):
        display = _parse_int_options(
            parser,
            "display",
            [
                "group_row_height",
                "subgroup_row_height",
                "item_row_height",
            ],
        )
        if display:
            config["display"] = display

    if parser.has_section("filters"):
        filters = {
            key: value.strip()
            for key, value in parser.items("filters")
            if value and value.strip()
        }
        if filters:
            config["filters"] = filters

    if parser.has_section("exclusions") and parser.has_option("exclusions", "series"):
        config["exclusions"] = {"series": _parse_list(parser.get("exclusions", "series"))}

    return config


def _load_yaml_config(path: Path) -> dict[str, Any]:
    """Read a YAML config file. An empty file gives an empty mapping."""
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    return data if isinstance(data, dict) else {}


_LOADERS = {
    ".ini": _load_ini_config,
    ".cfg": _load_ini_config,
    ".yaml": _load_yaml_config,
    ".yml": _load_yaml_config,
}


def load_config(path: Path | None = None) -> AppConfig:
    """Load and cache the configuration.

    INI (.ini/.cfg) and YAML (.yaml/.yml) files are accepted; any other
    suffix is read as YAML. ``${VAR}`` references are expanded before
    validation.

    Args:
        path: Config file to read. Searches :func:`get_config_paths` if None.

    Returns:
        The loaded configuration, or defaults when there is no file.
    """
    global _config, _config_path

    source = path if path is not None else find_config_file()
    if source is None or not source.is_file():
        _config, _config_path = AppConfig(), None
        return _config

    loader = _LOADERS.get(source.suffix.lower(), _load_yaml_config)
    _config = AppConfig.model_validate(_expand_env_vars(loader(source)))
    _config_path = source
    return _config


def get_config_path() -> Path | None:
    """File the cached configuration came from (None for defaults)."""
    return _config_path


def get_config() -> AppConfig:
    """Cached configuration, loaded on first use."""
    return _config if _config is not None else load_config()


def reset_config() -> None:
    """Forget the cached configuration so the next access reloads it."""
    global _config, _config_path
    _config, _config_path = None, None


def get_config_dir() -> Path:
    """``~/.titlescope``, created on demand."""
    config_dir = Path.home() / ".titlescope"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def save_default_config(path: Path | None = None, qui_url: str = "") -> Path:
    """Write a commented INI template.

    Args:
        path: Target file. Defaults to ./titlescope.ini.
        qui_url: Server URL. Left as a ${QUI_URL} reference when empty.

    Returns:
        The written path.
    """
    target = path if path is not None else Path.cwd() / CONFIG_FILENAME
    url_value = qui_url or "${QUI_URL}"

    template = f"""\
# titlescope configuration
# You can use environment variables with ${{VAR}} syntax

[qui]
# Torrent manager URL (e.g., http://localhost:7476)
url = {url_value}
# Instance to read releases from
instance_id = 1
# Request timeout in seconds
timeout = 30

[scoring]
# Releases within this many points of the best one are upgrade candidates
upgrade_tolerance = {UPGRADE_TOLERANCE}
# Only list upgrades that come with a concrete improvement
explained_upgrades_only = true

[display]
group_row_height = {GROUP_ROW_HEIGHT}
subgroup_row_height = {SUBGROUP_ROW_HEIGHT}
item_row_height = {LEAF_ROW_HEIGHT}

[filters]
# Default filters (type, source, resolution, codec, audio, group, category, year, search)
# type = movie

[exclusions]
# Series titles to leave out of gap detection (comma-separated)
series =
"""

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(template, encoding="utf-8")
    return target
