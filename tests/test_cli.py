"""
Tests for the command line front end, run against a seeded memory store.
"""

import pytest
from typer.testing import CliRunner

from therapyslots.cli.app import app

SEED = """
timeslots:
  - date: "2025-06-10"
    slots:
      - {from: "09:00", to: "10:00"}
      - {from: "10:00", to: "11:00"}
therapists:
  - _id: "x"
    name: "Therapist X"
    expertise: ["Speech Therapy"]
    supportedModes: ["ONLINE"]
    availability:
      - date: "2025-06-10"
        slots: [{from: "09:00", to: "11:00"}]
"""

runner = CliRunner()


@pytest.fixture
def config_path(tmp_path):
    (tmp_path / "seed.yaml").write_text(SEED, encoding="utf-8")
    path = tmp_path / "config.yaml"
    path.write_text(
        "store:\n  backend: memory\n  seed_file: seed.yaml\nlogging:\n  level: WARNING\n",
        encoding="utf-8",
    )
    return str(path)


def test_timeslots_with_filters(config_path):
    result = runner.invoke(
        app,
        ["timeslots", "2025-06-10", "--mode", "online", "--therapy", "Speech Therapy", "-c", config_path],
    )

    assert result.exit_code == 0
    assert result.output.count("yes") == 2


def test_timeslots_for_empty_date(config_path):
    result = runner.invoke(app, ["timeslots", "2025-06-11", "-c", config_path])

    assert result.exit_code == 0
    assert "No timeslots configured" in result.output


def test_experts_lists_candidates(config_path):
    result = runner.invoke(
        app,
        ["experts", "2025-06-10", "09:00-10:00", "--therapy", "Speech Therapy", "-c", config_path],
    )

    assert result.exit_code == 0
    assert "Therapist X" in result.output


def test_book_without_candidates_fails(config_path):
    result = runner.invoke(
        app,
        [
            "book", "2025-06-10", "09:00-10:00",
            "--therapy", "Speech Therapy",
            "--mode", "offline",
            "--user", "u1", "--profile", "p1",
            "-c", config_path,
        ],
    )

    assert result.exit_code == 1
    assert "No experts available" in result.output


def test_book_assigns_therapist(config_path):
    result = runner.invoke(
        app,
        [
            "book", "2025-06-10", "09:00-10:00",
            "--therapy", "Speech Therapy",
            "--user", "u1", "--profile", "p1",
            "-c", config_path,
        ],
    )

    assert result.exit_code == 0
    assert "Therapist X" in result.output


def test_recurring_rejects_unknown_day(config_path):
    result = runner.invoke(app, ["recurring", "2025-06-10", "--day", "Someday", "-c", config_path])

    assert result.exit_code == 1
    assert "Unknown weekday" in result.output


def test_invalid_date(config_path):
    result = runner.invoke(app, ["timeslots", "10/06/2025", "-c", config_path])

    assert result.exit_code == 1
    assert "YYYY-MM-DD" in result.output


def test_book_chosen_therapist(config_path):
    result = runner.invoke(
        app,
        [
            "book", "2025-06-10", "09:00-10:00",
            "--therapy", "Speech Therapy",
            "--user", "u1", "--profile", "p1",
            "--therapist", "x",
            "-c", config_path,
        ],
    )

    assert result.exit_code == 0
    assert "PAID" in result.output
    assert "Therapist X" in result.output


def test_add_therapist(config_path):
    result = runner.invoke(
        app,
        [
            "add-therapist", "--name", "Asha", "--id", "t-asha",
            "--expertise", "Speech Therapy", "--mode", "online", "--mode", "offline",
            "-c", config_path,
        ],
    )

    assert result.exit_code == 0
    assert "t-asha created" in result.output


def test_add_therapist_with_taken_id(config_path):
    result = runner.invoke(app, ["add-therapist", "--name", "Asha", "--id", "x", "-c", config_path])

    assert result.exit_code == 1
    assert "already exists" in result.output


def test_update_therapist_modes(config_path):
    result = runner.invoke(app, ["update-therapist", "x", "--mode", "offline", "-c", config_path])

    assert result.exit_code == 0
    assert "Modes: OFFLINE" in result.output
    assert "Speech Therapy" in result.output


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "therapyslots" in result.output
