"""
settings.py

Responsibility: Load a YAML settings file into a deterministic, typed model.

A settings file plays the role of a build tool's plugin configuration block:

    source_files: [src/main.js]
    directory_roots: [src/lib]
    output_directory: build/jsdoc
    temp_directory: build/jsdoc-tmp
    recursive: true

Relative paths are resolved against the directory holding the settings file.
The CLI layers its own overrides on top of the resulting builder.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from jsdoc_runner.context import ConfigurationBuilder


class SettingsError(ValueError):
    pass


_PATH_KEYS = (
    "output_directory",
    "tool_directory",
    "config_file",
    "temp_directory",
    "template_directory",
    "tutorials_directory",
)
_LIST_KEYS = ("source_files", "directory_roots")
_FLAG_KEYS = ("debug", "recursive", "include_private", "lenient")


@dataclass(frozen=True)
class Settings:
    """Values read from a settings file. Every field is optional."""

    source_files: tuple[Path, ...] = ()
    directory_roots: tuple[Path, ...] = ()
    output_directory: Path | None = None
    tool_directory: Path | None = None
    config_file: Path | None = None
    temp_directory: Path | None = None
    template_directory: Path | None = None
    tutorials_directory: Path | None = None
    jsdoc_version: str | None = None
    debug: bool = False
    recursive: bool = False
    include_private: bool = False
    lenient: bool = False

    def to_builder(self, logger: logging.Logger | None = None) -> ConfigurationBuilder:
        builder = (
            ConfigurationBuilder()
            .with_source_files(self.source_files)
            .with_directory_roots(self.directory_roots)
            .with_output_directory(self.output_directory)
            .with_tool_directory(self.tool_directory)
            .with_config_file(self.config_file)
            .with_scratch_directory(self.temp_directory)
            .with_template_directory(self.template_directory)
            .with_tutorials_directory(self.tutorials_directory)
            .with_debug(self.debug)
            .with_recursive(self.recursive)
            .with_include_private(self.include_private)
            .with_leniency(self.lenient)
        )
        return builder.with_logger(logger)


def _resolve(base_dir: Path, raw: Any, key: str) -> Path:
    if not isinstance(raw, str) or not raw.strip():
        raise SettingsError(f"`{key}` must be a non-empty path string.")
    path = Path(raw.strip()).expanduser()
    return path if path.is_absolute() else base_dir / path


def _parse_flag(raw: Any, key: str) -> bool:
    # YAML already turns true/false/yes/no into bools; anything else is a typo.
    if not isinstance(raw, bool):
        raise SettingsError(f"`{key}` must be a boolean, got {raw!r}.")
    return raw


def parse_settings(data: dict[str, Any], base_dir: str | Path) -> Settings:
    """
    Build `Settings` from an already-loaded mapping.

    Unknown keys are ignored so settings files can carry comments-as-keys or
    values for other tools.
    """
    base = Path(base_dir)

    lists: dict[str, tuple[Path, ...]] = {}
    for key in _LIST_KEYS:
        raw = data.get(key) or []
        if isinstance(raw, str):
            raw = [raw]
        if not isinstance(raw, list):
            raise SettingsError(f"`{key}` must be a list of paths when provided.")
        lists[key] = tuple(_resolve(base, item, key) for item in raw)

    paths = {key: _resolve(base, data[key], key) for key in _PATH_KEYS if data.get(key) is not None}
    flags = {key: _parse_flag(data[key], key) for key in _FLAG_KEYS if data.get(key) is not None}

    version = data.get("jsdoc_version")
    if version is not None:
        version = str(version).strip() or None

    return Settings(
        source_files=lists["source_files"],
        directory_roots=lists["directory_roots"],
        jsdoc_version=version,
        **flags,
        **paths,
    )


def load_settings(settings_path: str | Path) -> Settings:
    """Parse a YAML settings file into `Settings`."""
    path = Path(settings_path)
    if not path.exists():
        raise SettingsError(f"Settings file does not exist: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise SettingsError(f"Settings file is not valid YAML: {path}") from e
    if not isinstance(data, dict):
        raise SettingsError("Settings must be a mapping/object at the top level.")

    return parse_settings(data, base_dir=path.resolve().parent)
