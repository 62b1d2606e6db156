"""Tests for the command-line entry point."""

from __future__ import annotations

import json

import pytest

from suggestion_eval.cli import run_cli


def test_cli_prints_statistics_table(capsys) -> None:
    """Flags should run the simulation and print the report."""

    code = run_cli(
        [
            "--agent",
            "scaled",
            "--tau",
            "2",
            "--num-steps",
            "6",
            "--num-sims",
            "3",
            "--mix-ratio",
            "0.5",
            "--seed",
            "3",
            "--workers",
            "1",
        ]
    )
    captured = capsys.readouterr()

    assert code == 0
    assert captured.out.splitlines()[0] == "Agent: scaled, τ = 2.00"
    assert "# Sugg / Step" in captured.out


def test_cli_reads_config_file(tmp_path, capsys) -> None:
    """``--config`` should load a JSON run config."""

    config = {
        "problem": {"component_id": "tiger"},
        "agent": {"kind": "naive", "nu": 0.5},
        "simulation": {"num_steps": 4, "num_sims": 2, "seed": 0},
    }
    path = tmp_path / "run.json"
    path.write_text(json.dumps(config), encoding="utf-8")

    code = run_cli(["--config", str(path)])

    assert code == 0
    assert "Agent: naive, ν = 0.50" in capsys.readouterr().out


def test_cli_rejects_unknown_agent() -> None:
    """argparse should reject agent kinds outside the supported set."""

    with pytest.raises(SystemExit):
        run_cli(["--agent", "oracle"])


def test_cli_lists_registered_problems(capsys) -> None:
    """``--list-problems`` prints every problem ID without running."""

    code = run_cli(["--list-problems"])
    lines = capsys.readouterr().out.splitlines()

    assert code == 0
    assert [line.split()[0] for line in lines] == ["rock_sample", "tiger"]
