from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Any

import pytest

from jsdoc_runner import invoker
from jsdoc_runner.context import ConfigurationBuilder
from jsdoc_runner.invoker import GeneratorError, build_command, run_generator


@pytest.fixture()
def builder(tmp_path: Path) -> ConfigurationBuilder:
    out = tmp_path / "out"
    out.mkdir()
    return (
        ConfigurationBuilder()
        .with_source_files(["a.js"])
        .with_directory_roots(["lib"])
        .with_output_directory(out)
        .with_tool_directory(tmp_path / "jsdoc")
        .with_scratch_directory(tmp_path / "tmp")
    )


class _FakeRun:
    def __init__(self, returncode: int = 0, stdout: str = "") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.calls: list[tuple[list[str], dict[str, Any]]] = []

    def __call__(self, cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess:
        self.calls.append((cmd, kwargs))
        return subprocess.CompletedProcess(cmd, self.returncode, stdout=self.stdout)


def test_minimal_command(builder: ConfigurationBuilder, tmp_path: Path) -> None:
    cmd = build_command(builder.build())
    assert cmd == [
        "node",
        str(tmp_path / "jsdoc" / "jsdoc.js"),
        "-d",
        str(tmp_path / "out"),
        "a.js",
        "lib",
    ]


def test_command_carries_enabled_options(builder: ConfigurationBuilder, tmp_path: Path) -> None:
    tutorials = tmp_path / "tutorials"
    tutorials.mkdir()
    config = (
        builder.with_config_file("conf.json")
        .with_template_directory("tpl")
        .with_tutorials_directory(tutorials)
        .with_recursive(True)
        .with_include_private(True)
        .with_leniency(True)
        .with_debug(True)
        .build()
    )
    cmd = build_command(config, node="/usr/bin/node")
    assert cmd[0] == "/usr/bin/node"
    assert cmd[4:] == [
        "-c", "conf.json",
        "-t", "tpl",
        "-u", str(tutorials),
        "-r", "-p", "-l", "--debug",
        "a.js", "lib",
    ]


def test_rendered_config_overrides_configured_one(builder: ConfigurationBuilder) -> None:
    cmd = build_command(builder.with_config_file("conf.json.j2").build(), config_file=Path("/tmp/x/conf.json"))
    assert cmd[cmd.index("-c") + 1] == str(Path("/tmp/x/conf.json"))


def test_run_uses_scratch_dir_and_logs_output(
    builder: ConfigurationBuilder, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    fake = _FakeRun(stdout="Parsing a.js\nDone\n")
    monkeypatch.setattr(invoker.subprocess, "run", fake)
    log = logging.getLogger("test.invoker")

    with caplog.at_level(logging.INFO, logger="test.invoker"):
        result = run_generator(builder.with_logger(log).build())

    assert result.returncode == 0
    assert result.output == "Parsing a.js\nDone\n"
    cmd, kwargs = fake.calls[0]
    assert tuple(cmd) == result.command
    assert kwargs["cwd"] == str(tmp_path / "tmp")
    assert kwargs["env"]["TMPDIR"] == str(tmp_path / "tmp")
    assert (tmp_path / "tmp").is_dir()
    messages = [r.getMessage() for r in caplog.records if r.name == "test.invoker"]
    assert "Parsing a.js" in messages and "Done" in messages


def test_failure_raises_when_strict(builder: ConfigurationBuilder, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(invoker.subprocess, "run", _FakeRun(returncode=1, stdout="ERROR: bad tag"))
    with pytest.raises(GeneratorError, match="bad tag"):
        run_generator(builder.build())


def test_failure_tolerated_when_lenient(
    builder: ConfigurationBuilder, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(invoker.subprocess, "run", _FakeRun(returncode=1))
    with caplog.at_level(logging.WARNING):
        result = run_generator(builder.with_leniency(True).build())
    assert result.returncode == 1
    assert any("lenient" in r.getMessage() for r in caplog.records)


def test_missing_node_raises(builder: ConfigurationBuilder, monkeypatch: pytest.MonkeyPatch) -> None:
    def boom(cmd: list[str], **kwargs: Any) -> None:
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(invoker.subprocess, "run", boom)
    with pytest.raises(GeneratorError, match="Could not start"):
        run_generator(builder.build(), node="no-such-node")


def test_templated_config_is_rendered_before_run(
    builder: ConfigurationBuilder, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    conf = tmp_path / "conf.json.j2"
    conf.write_text('{"include": {{ source_roots | tojson }}}', encoding="utf-8")
    fake = _FakeRun()
    monkeypatch.setattr(invoker.subprocess, "run", fake)

    run_generator(builder.with_config_file(conf).build())

    cmd, _ = fake.calls[0]
    rendered = Path(cmd[cmd.index("-c") + 1])
    assert rendered == tmp_path / "tmp" / "conf.json"
    assert rendered.read_text(encoding="utf-8") == '{"include": ["a.js", "lib"]}'
