# -*- coding: utf-8 -*-
"""
Configuration for docs-toc.

User settings come from an optional ``toc.config.yaml`` next to the working
directory (or an explicit path), validated with pydantic, then merged with
CLI overrides into a resolved TocConfig dataclass.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import (
    CONFIG_FILE_NAMES,
    DEFAULT_BASE_DIR,
    DEFAULT_MAX_DEPTH,
    DEFAULT_OUT_FILE,
)
from .mapping import MappingConfigError, MappingValue, parse_mapping_config

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the configuration file is missing, unreadable or invalid."""
    pass


class UserConfig(BaseModel):
    """Settings accepted in toc.config.yaml."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    base_dir: str = Field(DEFAULT_BASE_DIR, alias="baseDir", description="Directory to scan, relative to cwd")
    out_file: str = Field(DEFAULT_OUT_FILE, alias="outFile", description="Target document, relative to cwd")
    ignore: list[str] = Field(default_factory=list, description="Extra glob patterns to exclude")
    max_depth: Optional[int] = Field(DEFAULT_MAX_DEPTH, alias="maxDepth", ge=1, description="Max scan depth")
    mapping: dict[str, Any] = Field(default_factory=dict, description="Rename, order and hide rules")


@dataclass
class TocConfig:
    """
    Resolved configuration for one run.

    Attributes:
        cwd: Working directory all relative settings resolve against.
        scan_path: Absolute directory scanned for markdown files.
        readme_path: Absolute path of the document receiving the TOC.
        ignore: Extra ignore patterns (DEFAULT_IGNORE is always applied).
        max_depth: Maximum scan depth, None for unlimited.
        mapping: Parsed mapping values keyed by config key.
    """
    cwd: Path
    scan_path: Path
    readme_path: Path
    ignore: list[str] = field(default_factory=list)
    max_depth: Optional[int] = DEFAULT_MAX_DEPTH
    mapping: dict[str, MappingValue] = field(default_factory=dict)

    @property
    def link_prefix(self) -> str:
        """Scan directory as seen from the target document's directory."""
        rel = os.path.relpath(self.scan_path, self.readme_path.parent)
        rel = Path(rel).as_posix()
        return "" if rel == "." else rel

    @property
    def readme_scan_path(self) -> Optional[str]:
        """Target document relative to the scan directory, if it lies inside it."""
        try:
            return self.readme_path.relative_to(self.scan_path).as_posix()
        except ValueError:
            return None


def find_config_file(cwd: Path) -> Optional[Path]:
    """Return the first default config file present in cwd."""
    for name in CONFIG_FILE_NAMES:
        candidate = cwd / name
        if candidate.is_file():
            return candidate
    return None


def load_user_config(path: Union[str, Path]) -> UserConfig:
    """
    Load and validate a YAML config file.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    path = Path(path)
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")

    try:
        return UserConfig.model_validate(loaded)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {path}: {e}")


def resolve_config(
    cwd: Union[str, Path],
    config_path: Optional[Union[str, Path]] = None,
    base_dir: Optional[str] = None,
    out_file: Optional[str] = None,
    ignore: Optional[list[str]] = None,
    max_depth: Optional[int] = None,
) -> TocConfig:
    """
    Build the resolved configuration.

    File values are used unless a CLI override is given. Extra ignore
    patterns from the CLI are added to the file's list.

    Raises:
        ConfigError: If the config file or its mapping section is invalid.
    """
    cwd_path = Path(cwd).resolve()

    if config_path is not None:
        user = load_user_config(cwd_path / config_path)
    else:
        found = find_config_file(cwd_path)
        user = load_user_config(found) if found else UserConfig()
        if found:
            logger.info(f"Loaded config from {found}")

    try:
        mapping = parse_mapping_config(user.mapping)
    except MappingConfigError as e:
        raise ConfigError(f"Invalid mapping: {e}")

    return TocConfig(
        cwd=cwd_path,
        scan_path=(cwd_path / (base_dir or user.base_dir)).resolve(),
        readme_path=(cwd_path / (out_file or user.out_file)).resolve(),
        ignore=[*user.ignore, *(ignore or [])],
        max_depth=max_depth if max_depth is not None else user.max_depth,
        mapping=mapping,
    )
