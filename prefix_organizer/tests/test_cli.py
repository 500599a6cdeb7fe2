from __future__ import annotations

import json
from pathlib import Path

import pytest

from prefix_organizer import cli
from prefix_organizer.watcher.loop import WatchLoop


def write_config(tmp_path: Path) -> tuple[Path, Path, Path]:
    dump = tmp_path / "dump"
    dump.mkdir()
    reports = tmp_path / "reports"
    config_path = tmp_path / "prefix.yaml"
    config_path.write_text(
        f"dump_directory: {dump}\ndestinations:\n  - path: {reports}\n    prefix: report_\n",
        encoding="utf-8",
    )
    return config_path, dump, reports


def test_no_command_prints_help(capsys) -> None:
    assert cli.main([]) == 1
    assert "prefix-organizer" in capsys.readouterr().out


def test_organize_command_moves_files(tmp_path: Path, capsys) -> None:
    config_path, dump, reports = write_config(tmp_path)
    (dump / "report_q1.pdf").write_text("q1", encoding="utf-8")
    (dump / "misc.txt").write_text("misc", encoding="utf-8")

    exit_code = cli.main(["organize", "--config", str(config_path), "--log-file", str(tmp_path / "run.log")])

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == "1 files moved, 1 files skipped"
    assert (reports / "report_q1.pdf").exists()


def test_organize_dry_run_writes_plan(tmp_path: Path, capsys) -> None:
    config_path, dump, reports = write_config(tmp_path)
    (dump / "report_q1.pdf").write_text("q1", encoding="utf-8")
    output = tmp_path / "plan" / "plan.json"

    exit_code = cli.main(["organize", "--config", str(config_path), "--dry-run", "--output", str(output)])

    assert exit_code == 0
    assert "Plan written" in capsys.readouterr().out
    plan = json.loads(output.read_text(encoding="utf-8"))
    assert plan == [
        {"source": str(dump / "report_q1.pdf"), "destination": str(reports / "report_q1.pdf"), "conflict": False}
    ]
    assert (dump / "report_q1.pdf").exists()


def test_config_init_and_validate(tmp_path: Path, capsys) -> None:
    config_path = tmp_path / "conf" / "prefix.yaml"

    assert cli.main(["config", "init", "--config", str(config_path)]) == 0
    assert config_path.exists()
    assert cli.main(["config", "init", "--config", str(config_path)]) == 1

    assert cli.main(["config", "validate", "--config", str(config_path)]) == 1
    assert "dump_directory is empty" in capsys.readouterr().err

    valid_path, _, _ = write_config(tmp_path)
    assert cli.main(["config", "validate", "--config", str(valid_path)]) == 0
    assert "1 destination rules" in capsys.readouterr().out


def test_watch_fails_when_dump_directory_missing(tmp_path: Path, capsys) -> None:
    config_path = tmp_path / "prefix.yaml"
    config_path.write_text(
        f"dump_directory: {tmp_path / 'missing'}\ndestinations:\n  - path: {tmp_path}\n    suffix: .pdf\n",
        encoding="utf-8",
    )

    exit_code = cli.main(["watch", "--config", str(config_path), "--log-file", str(tmp_path / "app.log")])

    assert exit_code == 1
    assert "Dump directory does not exist" in capsys.readouterr().err


def test_watch_creates_default_config_on_first_run(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    assert cli.main(["watch", "--stderr"]) == 1
    assert (tmp_path / ".config" / "prefix" / "prefix.yaml").exists()


def test_watch_runs_loop_with_debounce(tmp_path: Path, monkeypatch) -> None:
    config_path, _, _ = write_config(tmp_path)
    captured: dict[str, object] = {}

    def fake_run(self: WatchLoop, signals=None) -> int:  # noqa: ARG001
        captured["window"] = self.debouncer.window
        captured["dump"] = self.config.dump_directory
        return 0

    monkeypatch.setattr(WatchLoop, "run_until_signal", fake_run)

    exit_code = cli.main(
        ["watch", "--config", str(config_path), "--debounce", "0.5", "--log-file", str(tmp_path / "app.log")]
    )

    assert exit_code == 0
    assert captured == {"window": 0.5, "dump": tmp_path / "dump"}
    assert "Processing 1 destination rules" in (tmp_path / "app.log").read_text(encoding="utf-8")


@pytest.mark.parametrize("argv", [["organize"], ["config", "validate"]])
def test_commands_report_missing_default_config(tmp_path: Path, monkeypatch, argv: list[str]) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    assert cli.main(argv) == 1
    assert not (tmp_path / ".config" / "prefix" / "prefix.yaml").exists()


@pytest.mark.parametrize("value", ["-1", "soon"])
def test_watch_rejects_invalid_debounce(value: str, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["watch", "--debounce", value])
    assert excinfo.value.code == 2
    assert "--debounce" in capsys.readouterr().err
