"""
renderer.py

Responsibility: Render a templated generator configuration file (e.g. `conf.json.j2`).

Rules:
- No config file configured: nothing to do.
- A UTF-8 config file containing Jinja2 markers is rendered into the scratch
  directory, with a trailing `.j2` suffix dropped from the name.
- Any other config file is used in place, unchanged.

This module intentionally does NOT know about subprocesses or CLI parsing.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jinja2 import Environment, StrictUndefined

from jsdoc_runner.context import RunConfiguration


class RenderError(RuntimeError):
    pass


_MARKERS = ("{{", "{%", "{#")


def _template_context(config: RunConfiguration, extra: dict[str, Any] | None) -> dict[str, Any]:
    ctx: dict[str, Any] = {
        "source_roots": [str(p) for p in config.source_roots],
        "output_dir": str(config.output_dir),
        "template_dir": str(config.template_dir) if config.template_dir else None,
        "tutorials_dir": str(config.tutorials_dir) if config.tutorials_dir else None,
        "debug": config.debug,
        "recursive": config.recursive,
        "include_private": config.include_private,
        "lenient": config.lenient,
    }
    if extra:
        ctx.update(extra)
    return ctx


def render_config_file(config: RunConfiguration, context: dict[str, Any] | None = None) -> Path | None:
    """
    Return the config file path the generator should be given.

    Templated files are rendered with a `tojson` filter available, so values
    can be dropped straight into JSON: `"include": {{ source_roots | tojson }}`.
    """
    src = config.config_file
    if src is None:
        return None
    if not src.is_file():
        raise RenderError(f"Config file not found: {src}")

    try:
        text = src.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return src
    if not any(marker in text for marker in _MARKERS):
        return src

    env = Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    env.filters["tojson"] = json.dumps

    try:
        out = env.from_string(text).render(**_template_context(config, context))
    except Exception as e:  # noqa: BLE001 - surface as RenderError
        raise RenderError(f"Failed rendering config file: {src}") from e

    name = src.name[: -len(".j2")] if src.name.endswith(".j2") else src.name
    dst = config.scratch_dir / name
    # Never overwrite the template with its own rendering.
    if dst.resolve() == src.resolve():
        dst = config.scratch_dir / f"rendered-{name}"
    dst.parent.mkdir(parents=True, exist_ok=True)
    dst.write_text(out, encoding="utf-8", newline="\n")
    return dst
