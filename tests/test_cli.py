"""Tests for the command-line interface."""

import json
from datetime import date
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from homecal.cli import main
from homecal.config import Config


@pytest.fixture
def config(tmp_path):
    return Config(data_file=tmp_path / "events.json")


@pytest.fixture
def run(config):
    runner = CliRunner()

    def _run(*args):
        with patch("homecal.cli.load_config", return_value=config):
            return runner.invoke(main, list(args))
    return _run


def _stored(config):
    return json.loads(config.data_file.read_text())


class TestAdd:
    def test_add_weekly(self, run, config):
        result = run("add", "Standup", "--date", "2024-01-01", "--time", "09:00", "--recurrence", "weekly")
        assert result.exit_code == 0, result.output
        assert "Created" in result.output
        [record] = _stored(config)
        assert record["title"] == "Standup"
        assert record["recurrence"] == "weekly"
        assert record["time"] == "09:00"

    def test_add_bad_time(self, run):
        result = run("add", "Standup", "--date", "2024-01-01", "--time", "9am")
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestAgenda:
    def test_json_agenda(self, run):
        run("add", "Standup", "--date", "2024-01-01", "--recurrence", "weekly")
        result = run("agenda", "--start", "2024-01-01", "--end", "2024-01-22", "--json")
        assert result.exit_code == 0, result.output
        dates = [o["date"] for o in json.loads(result.output)]
        assert dates == ["2024-01-01", "2024-01-08", "2024-01-15", "2024-01-22"]

    def test_text_agenda_groups_by_day(self, run):
        run("add", "Rent", "--date", "2024-01-05", "--type", "task")
        result = run("agenda", "--start", "2024-01-01", "--end", "2024-01-31")
        assert "### Friday, January 05" in result.output
        assert "[ ] Rent" in result.output

    def test_reversed_range(self, run):
        result = run("agenda", "--start", "2024-02-01", "--end", "2024-01-01")
        assert result.exit_code == 1

    def test_empty(self, run):
        result = run("agenda", "--start", "2024-01-01", "--end", "2024-01-31")
        assert "No events." in result.output


class TestEditDelete:
    def _add_today(self, run, config, recurrence="daily"):
        today = date.today().isoformat()
        run("add", "Walk", "--date", today, "--recurrence", recurrence)
        return _stored(config)[0]["id"]

    def test_edit(self, run, config):
        event_id = self._add_today(run, config)
        result = run("edit", event_id, "--recurrence", "none", "--title", "Walk once")
        assert result.exit_code == 0, result.output
        [record] = _stored(config)
        assert record["recurrence"] is None
        assert record["title"] == "Walk once"

    def test_edit_nothing(self, run, config):
        event_id = self._add_today(run, config)
        assert "Nothing to change." in run("edit", event_id).output

    def test_edit_unknown(self, run):
        result = run("edit", "missing", "--title", "x")
        assert result.exit_code == 1
        assert "Event not found: missing" in result.output

    def test_edit_event_anchored_long_ago(self, run, config):
        config.data_file.write_text(
            json.dumps([{"id": "old", "title": "Book club", "date": "2020-01-06", "recurrence": "weekly"}])
        )
        result = run("edit", "old", "--title", "Renamed")
        assert result.exit_code == 0, result.output
        [record] = _stored(config)
        assert record["title"] == "Renamed"
        assert record["date"] == "2020-01-06"
        assert record["recurrence"] == "weekly"

    def test_delete(self, run, config):
        event_id = self._add_today(run, config)
        result = run("delete", event_id)
        assert result.exit_code == 0
        assert _stored(config) == []

    def test_delete_unknown(self, run):
        result = run("delete", "missing")
        assert result.exit_code == 1


class TestViews:
    def test_weeks_grid(self, run):
        run("add", "Standup", "--date", "2024-01-01", "--time", "09:00", "--recurrence", "weekly")
        result = run("weeks", "--date", "2024-01-17")
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert "== February 2024 ==" in lines
        monday_lines = [l for l in lines if "Mon " in l]
        assert len(monday_lines) == 4
        assert all("09:00 Standup" in l for l in monday_lines)

    def test_weeks_offset(self, run):
        result = run("weeks", "--date", "2024-01-17", "--offset", "-2")
        assert "Mon 12/25" in result.output

    def test_day(self, run):
        run("add", "Dentist", "--date", "2024-03-05", "--time", "15:30")
        result = run("day", "2024-03-05")
        assert "15:30" in result.output
        assert "Dentist" in result.output
