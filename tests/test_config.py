import argparse

import pytest

from src.agent.config import read_bootstrap, resolve_config, resolve_coordinator
from src.agent.drivers import SimulatedDriver


def _no_prompt(question: str) -> str:
    raise AssertionError(f"unexpected prompt: {question}")


def test_flag_wins_over_everything(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("AGENT_COORDINATOR", "10.0.0.2")
    (tmp_path / "ip").write_text("10.0.0.3")
    assert resolve_coordinator("10.0.0.1", tmp_path, _no_prompt) == "10.0.0.1"


def test_env_then_disk_then_prompt(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("AGENT_COORDINATOR", "10.0.0.2")
    assert resolve_coordinator(None, tmp_path, _no_prompt) == "10.0.0.2"

    monkeypatch.delenv("AGENT_COORDINATOR")
    (tmp_path / "ip").write_text("10.0.0.3\n")
    assert resolve_coordinator(None, tmp_path, _no_prompt) == "10.0.0.3"

    (tmp_path / "ip").unlink()
    assert resolve_coordinator(None, tmp_path, lambda q: " 10.0.0.4 ") == "10.0.0.4"


def test_empty_prompt_answer_is_fatal(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("AGENT_COORDINATOR", raising=False)
    with pytest.raises(SystemExit):
        resolve_coordinator(None, tmp_path, lambda q: "")


def test_bootstrap_from_pos_file(tmp_path) -> None:
    (tmp_path / "pos").write_text("north\n10\n64\n-3\n")
    info = read_bootstrap(SimulatedDriver(fuel=7, limit=100), tmp_path, _no_prompt)
    assert info.to_wire() == {"fuel": 7, "fuellimit": 100, "position": [10, 64, -3], "facing": "North"}


def test_bootstrap_interactive_order(tmp_path) -> None:
    answers = iter(["East", "1", "2", "3"])
    asked = []

    def prompt(question: str) -> str:
        asked.append(question)
        return next(answers)

    info = read_bootstrap(SimulatedDriver(), tmp_path, prompt)
    assert asked == ["Direction (North, South, East, West):", "X:", "Y:", "Z:"]
    assert info.position == (1, 2, 3)
    assert info.facing == "East"


def test_bootstrap_rejects_bad_direction(tmp_path) -> None:
    (tmp_path / "pos").write_text("up\n0\n0\n0\n")
    with pytest.raises(SystemExit):
        read_bootstrap(SimulatedDriver(), tmp_path, _no_prompt)


def test_resolve_config_paths(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("AGENT_DISK_DIR", str(tmp_path / "disk"))
    monkeypatch.delenv("AGENT_PORT", raising=False)
    args = argparse.Namespace(
        coordinator="c.local", port=None, state_dir=str(tmp_path / "state"),
        identity_backend="file", max_backoff=30.0, simulate=True, verbose=False,
    )
    config = resolve_config(args, _no_prompt)
    assert config.port == 48228
    assert config.entry_point == tmp_path / "state" / "startup.py"
    assert config.backup == tmp_path / "state" / "startup-backup.py"
    assert config.journal.name == "journal.jsonl"
    assert config.max_backoff == 30.0
