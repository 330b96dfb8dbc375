"""
cli.py

Responsibility: CLI entrypoint for jsdoc-runner.

High-level flow (single command `run`):
1) Load settings YAML (optional) -> `Settings` -> `ConfigurationBuilder`
2) Apply CLI overrides to the builder
3) (Optional) Install a JSDoc release when no tool directory is configured
4) Build the `RunConfiguration` and invoke the generator

This module should orchestrate behavior but keep concerns isolated:
- Settings parsing: `settings.py`
- Validation: `context.py`
- Registry access: `distribution.py`
- Subprocess: `invoker.py`
"""

from __future__ import annotations

import argparse
import logging
import os
import tempfile
from pathlib import Path

from jsdoc_runner.context import ConfigurationBuilder
from jsdoc_runner.distribution import RegistryClient
from jsdoc_runner.invoker import run_generator
from jsdoc_runner.settings import Settings, load_settings

logger = logging.getLogger("jsdoc_runner")

GENERATOR_PACKAGE = "jsdoc"


class CLIError(RuntimeError):
    pass


def _apply_overrides(builder: ConfigurationBuilder, args: argparse.Namespace) -> ConfigurationBuilder:
    builder.with_source_files(args.sources or None)
    builder.with_directory_roots(args.directory_roots)

    # Only explicitly passed options replace settings values.
    if args.output_dir is not None:
        builder.with_output_directory(args.output_dir)
    if args.tool_dir is not None:
        builder.with_tool_directory(args.tool_dir)
    if args.config_file is not None:
        builder.with_config_file(args.config_file)
    if args.temp_dir is not None:
        builder.with_scratch_directory(args.temp_dir)
    if args.template_dir is not None:
        builder.with_template_directory(args.template_dir)
    if args.tutorials_dir is not None:
        builder.with_tutorials_directory(args.tutorials_dir)

    if args.debug is not None:
        builder.with_debug(args.debug)
    if args.recursive is not None:
        builder.with_recursive(args.recursive)
    if args.include_private is not None:
        builder.with_include_private(args.include_private)
    if args.lenient is not None:
        builder.with_leniency(args.lenient)
    return builder


def _install_generator(version: str, destination: Path) -> Path:
    client = RegistryClient()
    release = client.get_release(GENERATOR_PACKAGE, version)
    return client.install(release, destination)


def run_cmd(args: argparse.Namespace) -> int:
    settings = load_settings(args.settings) if args.settings else Settings()
    builder = _apply_overrides(settings.to_builder(logger=logger), args)

    if builder.scratch_directory is None:
        builder.with_scratch_directory(Path(tempfile.gettempdir()) / "jsdoc-runner")

    output_dir = Path(args.output_dir) if args.output_dir is not None else settings.output_directory
    if args.create_output:
        if output_dir is None:
            raise CLIError("--output-dir is required unless the settings file sets output_directory")
        output_dir.mkdir(parents=True, exist_ok=True)

    if builder.tool_directory is None:
        # Validate everything else before touching the network.
        builder.copy().with_tool_directory(Path(".")).build()
        version = args.jsdoc_version or settings.jsdoc_version or "latest"
        builder.with_tool_directory(_install_generator(version, builder.scratch_directory / "dist"))

    config = builder.build()
    result = run_generator(config, node=args.node)
    return result.returncode


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="jsdoc-runner", description="Run JSDoc 3 with validated settings")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("run", help="Validate settings and run the documentation generator")
    r.add_argument("sources", nargs="*", help="Source files to document")
    r.add_argument("--settings", default=None, help="Path to a YAML settings file")
    r.add_argument(
        "--directory-root",
        dest="directory_roots",
        action="append",
        default=[],
        help="Directory root to document (repeatable)",
    )
    r.add_argument("--output-dir", default=None, help="Where documentation is written")
    r.add_argument("--tool-dir", default=None, help="JSDoc installation directory (downloaded when omitted)")
    r.add_argument("--config-file", default=None, help="JSDoc conf.json (may be a Jinja2 template)")
    r.add_argument("--temp-dir", default=None, help="Scratch directory for temporary files")
    r.add_argument("--template-dir", default=None, help="JSDoc template directory")
    r.add_argument("--tutorials-dir", default=None, help="Tutorials directory (ignored if missing)")
    r.add_argument("--jsdoc-version", default=None, help="JSDoc version to download (default: latest)")
    r.add_argument(
        "--node",
        default=os.environ.get("JSDOC_RUNNER_NODE", "node"),
        help="Node.js executable (or set env JSDOC_RUNNER_NODE)",
    )
    r.add_argument(
        "--no-create-output",
        dest="create_output",
        action="store_false",
        help="Do not create the output directory if it is missing",
    )

    for flag, help_text in (
        ("debug", "Run JSDoc in debug mode"),
        ("recursive", "Recurse into source directories"),
        ("include-private", "Include private symbols"),
        ("lenient", "Tolerate generator errors"),
    ):
        dest = flag.replace("-", "_")
        r.add_argument(f"--{flag}", dest=dest, action="store_true", default=None, help=help_text)
        r.add_argument(f"--no-{flag}", dest=dest, action="store_false", default=None, help=argparse.SUPPRESS)

    r.set_defaults(func=run_cmd)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
