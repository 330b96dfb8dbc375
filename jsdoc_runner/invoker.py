"""
invoker.py

Responsibility: Turn a `RunConfiguration` into a generator command line and run it.

The generator runs as `node <tool_dir>/jsdoc.js ...` with the scratch directory as
its working directory and TMPDIR. Output goes to the configuration's logger.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jsdoc_runner.context import RunConfiguration
from jsdoc_runner.renderer import render_config_file

logger = logging.getLogger(__name__)

ENTRY_SCRIPT = "jsdoc.js"


class GeneratorError(RuntimeError):
    pass


@dataclass(frozen=True)
class GeneratorResult:
    command: tuple[str, ...]
    returncode: int
    output: str


def build_command(
    config: RunConfiguration,
    *,
    node: str = "node",
    config_file: Path | None = None,
) -> list[str]:
    """
    `config_file` overrides `config.config_file` (used for rendered configs).
    """
    cmd = [node, str(config.tool_dir / ENTRY_SCRIPT), "-d", str(config.output_dir)]

    conf = config_file if config_file is not None else config.config_file
    if conf is not None:
        cmd += ["-c", str(conf)]
    if config.template_dir is not None:
        cmd += ["-t", str(config.template_dir)]
    if config.tutorials_dir is not None:
        cmd += ["-u", str(config.tutorials_dir)]
    if config.recursive:
        cmd.append("-r")
    if config.include_private:
        cmd.append("-p")
    if config.lenient:
        cmd.append("-l")
    if config.debug:
        cmd.append("--debug")

    cmd.extend(str(p) for p in config.source_roots)
    return cmd


def run_generator(
    config: RunConfiguration,
    *,
    node: str = "node",
    extra_context: dict[str, Any] | None = None,
) -> GeneratorResult:
    """
    Run the generator once, raising GeneratorError on failure.

    A lenient run tolerates a non-zero exit: it is logged as a warning and the
    result is returned for the caller to inspect.
    """
    log = config.logger or logger

    config.scratch_dir.mkdir(parents=True, exist_ok=True)
    conf = render_config_file(config, extra_context)
    cmd = build_command(config, node=node, config_file=conf)

    env = os.environ.copy()
    env["TMPDIR"] = str(config.scratch_dir)

    log.info("Running: %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(config.scratch_dir),
            env=env,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as e:
        raise GeneratorError(f"Could not start generator: {cmd[0]}") from e

    output = proc.stdout or ""
    for line in output.splitlines():
        log.info("%s", line)

    if proc.returncode != 0:
        if not config.lenient:
            raise GeneratorError(f"Generator failed with exit code {proc.returncode}: {' '.join(cmd)}\n\n{output}")
        log.warning("Generator exited with code %d; continuing because the run is lenient.", proc.returncode)

    return GeneratorResult(command=tuple(cmd), returncode=proc.returncode, output=output)
