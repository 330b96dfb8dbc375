"""
context.py

Responsibility: Describe a single generator run as an immutable value.

A `ConfigurationBuilder` accumulates settings (setters never fail and return the
builder for chaining); `build()` validates everything at once and freezes the
result into a `RunConfiguration`.

This module intentionally does NOT run anything, touch the network, or log.
The only filesystem access is read-only existence checks.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Union

PathArg = Union[str, "os.PathLike[str]"]


class ConfigurationError(Exception):
    pass


class MissingSourcesError(ConfigurationError, ValueError):
    pass


class InvalidStateError(ConfigurationError, RuntimeError):
    pass


@dataclass(frozen=True)
class RunConfiguration:
    """Everything the generator needs for one invocation."""

    source_roots: tuple[Path, ...]
    output_dir: Path
    tool_dir: Path
    scratch_dir: Path
    tutorials_dir: Path | None = None
    template_dir: Path | None = None
    config_file: Path | None = None
    debug: bool = False
    recursive: bool = False
    include_private: bool = False
    lenient: bool = False
    logger: logging.Logger | None = field(default=None, compare=False, repr=False)


def _as_path(value: PathArg | None) -> Path | None:
    return None if value is None else Path(value)


def _iter_paths(paths: PathArg | Iterable[PathArg] | None) -> list[Path]:
    if paths is None:
        return []
    # A bare string is one path, not a sequence of characters.
    if isinstance(paths, (str, os.PathLike)):
        return [Path(paths)]
    return [Path(p) for p in paths if p is not None]


class ConfigurationBuilder:
    """
    Accumulate settings for a `RunConfiguration`.

    Pass another builder to copy its accumulated values (the logger is not
    copied). The copy owns its own source sets.
    """

    def __init__(self, other: ConfigurationBuilder | None = None) -> None:
        # dicts keep first-seen order and drop duplicates
        self._source_files: dict[Path, None] = {}
        self._directory_roots: dict[Path, None] = {}
        self._output_directory: Path | None = None
        self._tool_directory: Path | None = None
        self._config_file: Path | None = None
        self._scratch_directory: Path | None = None
        self._template_directory: Path | None = None
        self._tutorials_directory: Path | None = None
        self._debug = False
        self._recursive = False
        self._include_private = False
        self._lenient = False
        self._logger: logging.Logger | None = None

        if other is not None:
            self._source_files.update(other._source_files)
            self._directory_roots.update(other._directory_roots)
            self._output_directory = other._output_directory
            self._tool_directory = other._tool_directory
            self._config_file = other._config_file
            self._scratch_directory = other._scratch_directory
            self._template_directory = other._template_directory
            self._tutorials_directory = other._tutorials_directory
            self._debug = other._debug
            self._recursive = other._recursive
            self._include_private = other._include_private
            self._lenient = other._lenient

    def copy(self) -> ConfigurationBuilder:
        return ConfigurationBuilder(self)

    def with_source_files(self, paths: PathArg | Iterable[PathArg] | None) -> ConfigurationBuilder:
        for path in _iter_paths(paths):
            self._source_files[path] = None
        return self

    def with_directory_roots(self, paths: PathArg | Iterable[PathArg] | None) -> ConfigurationBuilder:
        for path in _iter_paths(paths):
            self._directory_roots[path] = None
        return self

    def with_output_directory(self, path: PathArg | None) -> ConfigurationBuilder:
        self._output_directory = _as_path(path)
        return self

    def with_tool_directory(self, path: PathArg | None) -> ConfigurationBuilder:
        self._tool_directory = _as_path(path)
        return self

    def with_config_file(self, path: PathArg | None) -> ConfigurationBuilder:
        self._config_file = _as_path(path)
        return self

    def with_scratch_directory(self, path: PathArg | None) -> ConfigurationBuilder:
        self._scratch_directory = _as_path(path)
        return self

    def with_template_directory(self, path: PathArg | None) -> ConfigurationBuilder:
        self._template_directory = _as_path(path)
        return self

    def with_tutorials_directory(self, path: PathArg | None) -> ConfigurationBuilder:
        """
        Accept the tutorials directory only if it exists and is a directory.

        Anything else leaves the field unset without complaint, so callers may
        pass a conventional location whether or not the project has one.
        """
        candidate = _as_path(path)
        if candidate is not None and candidate.is_dir():
            self._tutorials_directory = candidate
        return self

    def with_logger(self, logger: logging.Logger | None) -> ConfigurationBuilder:
        self._logger = logger
        return self

    def with_debug(self, debug: bool) -> ConfigurationBuilder:
        self._debug = bool(debug)
        return self

    def with_recursive(self, recursive: bool) -> ConfigurationBuilder:
        self._recursive = bool(recursive)
        return self

    def with_include_private(self, include_private: bool) -> ConfigurationBuilder:
        self._include_private = bool(include_private)
        return self

    def with_leniency(self, lenient: bool) -> ConfigurationBuilder:
        self._lenient = bool(lenient)
        return self

    @property
    def source_files(self) -> tuple[Path, ...]:
        return tuple(self._source_files)

    @property
    def directory_roots(self) -> tuple[Path, ...]:
        return tuple(self._directory_roots)

    @property
    def tool_directory(self) -> Path | None:
        return self._tool_directory

    @property
    def scratch_directory(self) -> Path | None:
        return self._scratch_directory

    def build(self) -> RunConfiguration:
        source_roots = tuple(dict.fromkeys([*self._source_files, *self._directory_roots]))
        if not source_roots:
            raise MissingSourcesError("Source files and/or directory roots are required.")

        if self._output_directory is None or not self._output_directory.exists():
            raise InvalidStateError(f"Output directory must exist: {self._output_directory}")

        if self._tool_directory is None:
            raise InvalidStateError("Generator tool directory must not be None.")

        if self._scratch_directory is None:
            raise InvalidStateError("Scratch directory must not be None.")

        return RunConfiguration(
            source_roots=source_roots,
            output_dir=self._output_directory,
            tool_dir=self._tool_directory,
            scratch_dir=self._scratch_directory,
            tutorials_dir=self._tutorials_directory,
            template_dir=self._template_directory,
            config_file=self._config_file,
            debug=self._debug,
            recursive=self._recursive,
            include_private=self._include_private,
            lenient=self._lenient,
            logger=self._logger,
        )
