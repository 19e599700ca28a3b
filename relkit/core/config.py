"""Typed configuration loading and access.

This module provides dataclasses for the optional release.toml file at the
repository root. Every key has a default, so a repository without the file
releases with sbt-style conventions (version.sbt, v-prefixed tags).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_FILE_NAME",
    "CommitConfig",
    "Config",
    "ConfigError",
    "DependenciesConfig",
    "TagConfig",
    "TestsConfig",
    "VersionConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = "release.toml"

DEFAULT_VERSION_FILE = "version.sbt"
DEFAULT_DECLARATION = "version in ThisBuild"
DEFAULT_QUALIFIER = "-SNAPSHOT"
DEFAULT_TAG_FORMAT = "v{version}"
DEFAULT_RELEASE_MESSAGE = "Releasing {version}"
DEFAULT_NEXT_MESSAGE = "Bump to {version}"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None

    @property
    def hint(self) -> str | None:
        return str(self.path) if self.path is not None else None


@dataclass(frozen=True, slots=True)
class VersionConfig:
    """Where the version lives and how snapshots are marked."""

    file: str = DEFAULT_VERSION_FILE
    declaration: str = DEFAULT_DECLARATION
    qualifier: str = DEFAULT_QUALIFIER


@dataclass(frozen=True, slots=True)
class TagConfig:
    """Tag naming.

    max_attempts caps how many new tag names the operator may try when the
    proposed tag already exists. None means no cap.
    """

    format: str = DEFAULT_TAG_FORMAT
    max_attempts: int | None = None

    def name_for(self, version: str) -> str:
        return self.format.format(version=version)


@dataclass(frozen=True, slots=True)
class CommitConfig:
    release_message: str = DEFAULT_RELEASE_MESSAGE
    next_message: str = DEFAULT_NEXT_MESSAGE


@dataclass(frozen=True, slots=True)
class TestsConfig:
    """Test command; an empty command means there is nothing to run."""

    command: tuple[str, ...] = ("pytest",)


@dataclass(frozen=True, slots=True)
class DependenciesConfig:
    """Dependency manifests scanned for snapshot pins (relative to root)."""

    files: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    version: VersionConfig = field(default_factory=VersionConfig)
    tag: TagConfig = field(default_factory=TagConfig)
    commit: CommitConfig = field(default_factory=CommitConfig)
    tests: TestsConfig = field(default_factory=TestsConfig)
    dependencies: DependenciesConfig = field(default_factory=DependenciesConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        version: StrDict = get_table(data, "version") or {}
        tag: StrDict = get_table(data, "tag") or {}
        commit: StrDict = get_table(data, "commit") or {}
        tests: StrDict = get_table(data, "tests") or {}
        deps: StrDict = get_table(data, "dependencies") or {}

        if "{version}" not in (get_str(tag, "format") or DEFAULT_TAG_FORMAT):
            raise ValueError("tag.format must contain '{version}'")

        max_attempts = get_int(tag, "max_attempts")
        if max_attempts is not None and max_attempts < 0:
            raise ValueError("tag.max_attempts must be >= 0")

        command = get_str_list(tests, "command")

        return cls(
            version=VersionConfig(
                file=get_str(version, "file") or DEFAULT_VERSION_FILE,
                declaration=get_str(version, "declaration") or DEFAULT_DECLARATION,
                qualifier=get_str(version, "qualifier") or DEFAULT_QUALIFIER,
            ),
            tag=TagConfig(
                format=get_str(tag, "format") or DEFAULT_TAG_FORMAT,
                max_attempts=max_attempts or None,
            ),
            commit=CommitConfig(
                release_message=get_str(commit, "release_message") or DEFAULT_RELEASE_MESSAGE,
                next_message=get_str(commit, "next_message") or DEFAULT_NEXT_MESSAGE,
            ),
            tests=TestsConfig(
                command=tuple(command) if command is not None else ("pytest",),
            ),
            dependencies=DependenciesConfig(
                files=tuple(get_str_list(deps, "files") or ()),
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to release.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        config = Config.from_dict(result.value)
        return Ok(config)
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config if the file exists, else return the defaults.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
