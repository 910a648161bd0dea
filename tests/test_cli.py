"""CLI commands through typer's test runner."""
from __future__ import annotations

import asyncio
import json

from typer.testing import CliRunner

from wyrmhole.adapters.cli.app import app
from wyrmhole.adapters.cli.replay import replay_events
from wyrmhole.domain.transfer import OrchestratorConfig

# Wide enough that table cells are never wrapped
runner = CliRunner(env={"COLUMNS": "200"})


def _write_script(path, steps) -> None:
    path.write_text("\n".join(json.dumps(step) for step in steps) + "\n", encoding="utf-8")


def test_replay_shows_final_sessions(tmp_path) -> None:
    script = tmp_path / "events.jsonl"
    _write_script(script, [
        {"channel": "send-progress", "payload": {
            "id": "abc12345", "file_name": "report.pdf", "sent": 0, "total": 0,
            "percentage": 0, "status": "preparing"}},
        {"channel": "connection-code", "payload": {"status": "success", "code": "7-wizard-castle", "send_id": "abc12345"}},
        {"channel": "send-progress", "payload": {
            "id": "abc12345", "file_name": "report.pdf", "sent": 400, "total": 1000, "percentage": 40}},
        {"channel": "receive-error", "payload": {"id": "def67890", "file_name": "photo.png", "error": "disk full"}},
    ])

    result = runner.invoke(app, ["--history-dir", str(tmp_path / "h"), "replay", "--delay-scale", "0", str(script)])

    assert result.exit_code == 0, result.output
    assert "report.pdf" in result.output
    assert "disk full" in result.output
    assert "7-wizard-castle" in result.output
    assert "Replayed 4 event(s)" in result.output


def test_replay_rejects_bad_script(tmp_path) -> None:
    script = tmp_path / "events.jsonl"
    script.write_text("{not json}\n", encoding="utf-8")

    result = runner.invoke(app, ["replay", str(script)])

    assert result.exit_code == 1


def test_replay_records_history_and_history_lists_it(tmp_path) -> None:
    history_dir = tmp_path / "history"
    script = tmp_path / "events.jsonl"
    _write_script(script, [
        {"channel": "receive-progress", "payload": {
            "id": "r1", "file_name": "photo.png", "transferred": 204800, "total": 204800, "percentage": 100}},
    ])

    replay = runner.invoke(app, ["--history-dir", str(history_dir), "replay", "--delay-scale", "0", str(script)])
    listing = runner.invoke(app, ["--history-dir", str(history_dir), "history", "--direction", "receive"])
    exported = tmp_path / "received.json"
    export = runner.invoke(app, ["--history-dir", str(history_dir), "history", "-d", "receive", "--export", str(exported)])

    assert replay.exit_code == 0, replay.output
    assert listing.exit_code == 0, listing.output
    assert "photo.png" in listing.output
    assert export.exit_code == 0
    assert json.loads(exported.read_text(encoding="utf-8"))[0]["file_name"] == "photo.png"


def test_history_empty(tmp_path) -> None:
    result = runner.invoke(app, ["--history-dir", str(tmp_path), "history", "--direction", "send"])

    assert result.exit_code == 0
    assert "No transfers recorded" in result.output


def test_invalid_config_exits(tmp_path) -> None:
    config = tmp_path / "bad.toml"
    config.write_text("completion_delay = -2\n", encoding="utf-8")

    result = runner.invoke(app, ["--config", str(config), "history"])

    assert result.exit_code == 1


def test_replay_without_history_dir_records_nothing() -> None:
    steps = [{"channel": "send-progress", "payload": {
        "id": "a1", "file_name": "notes.txt", "sent": 10, "total": 10, "percentage": 100}}]
    config = OrchestratorConfig(completion_delay=0)

    orchestrator = asyncio.run(replay_events(steps, config, delay_scale=0))

    assert config.history_dir is None
    assert orchestrator.history_store is None
