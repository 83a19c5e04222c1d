"""Smoke tests for the end-to-end scheduling flow and CLI."""

import json

import pytest

from authscheduler.cli import create_sample_schedule, evaluate, main, parse_hours
from authscheduler.config import SchedulerConfig
from authscheduler.domain.exceptions import SchedulerError
from authscheduler.domain.models import Day
from authscheduler.scheduling.store import ScheduleStore


class TestSmoke:
    """End-to-end smoke tests for the scheduling system."""

    @pytest.fixture
    def config(self):
        """Default configuration."""
        return SchedulerConfig()

    def _write_schedule(self, path, store):
        path.write_text(json.dumps(store.to_dict()))
        return str(path)

    def test_sample_schedule_is_compliant(self, config):
        """Sample week: 15h technician, 2h analyst, 1h family training."""
        store = create_sample_schedule(config)
        summary, result = evaluate(store, config)

        assert summary.hours_by_category["97153"] == 15.0
        assert summary.hours_by_category["97155"] == 2.0
        assert summary.hours_by_category["97156"] == 1.0
        assert summary.units_by_category["97153"] == 60
        assert summary.location_breakdown["97153"]["Community"] == 3.0
        assert result.is_all_clear

    def test_demo_command(self, capsys):
        """Demo should print the grid, summary and an all-clear."""
        assert main(["demo"]) == 0
        out = capsys.readouterr().out
        assert "Day\t97153" in out
        assert "WEEKLY SUMMARY BY SERVICE CATEGORY" in out
        assert "Service mix looks appropriate" in out

    def test_demo_writes_pdf(self, tmp_path):
        """Demo with --output should write a PDF."""
        path = tmp_path / "demo.pdf"
        assert main(["demo", "--output", str(path)]) == 0
        assert path.read_bytes().startswith(b"%PDF")

    def test_summary_exit_code_reflects_errors(self, tmp_path, config, capsys):
        """An over-ceiling week should exit 1 and report the excess."""
        store = ScheduleStore(config.catalog)
        for day in (Day.MONDAY, Day.TUESDAY, Day.WEDNESDAY, Day.THURSDAY, Day.FRIDAY):
            store.add_slot(day, "97153", "08:00", "16:30", "Home")
        path = self._write_schedule(tmp_path / "week.json", store)

        assert main(["summary", path]) == 1
        assert "exceed 40 by 2.5" in capsys.readouterr().out

    def test_summary_of_compliant_schedule(self, tmp_path, config):
        """A compliant saved week should exit 0."""
        path = self._write_schedule(tmp_path / "week.json", create_sample_schedule(config))
        assert main(["summary", path, "--weeks", "12"]) == 0

    def test_export_text_and_pdf(self, tmp_path, config):
        """Export should write text with notes and a PDF beside the input."""
        path = self._write_schedule(tmp_path / "week.json", create_sample_schedule(config))
        text_path = tmp_path / "week.txt"

        assert main(["export", path, "--output", str(text_path), "--notes", "Hi"]) == 0
        assert "SCHEDULE NOTES" in text_path.read_text()

        assert main(["export", path, "--format", "pdf"]) == 0
        assert (tmp_path / "week.pdf").read_bytes().startswith(b"%PDF")

    def test_suggest_writes_loadable_schedule(self, tmp_path, config):
        """A suggested schedule should reload with the requested hours."""
        out = tmp_path / "suggested.json"
        code = main(
            ["suggest", "--hours", "97153=6", "--hours", "97156=1", "--time-limit", "5",
             "--output", str(out)]
        )

        assert code == 0
        store = ScheduleStore.from_dict(json.loads(out.read_text()), config.catalog)
        summary, _ = evaluate(store, config)
        assert summary.hours_by_category["97153"] == 6.0
        assert summary.hours_by_category["97156"] == 1.0

    def test_custom_config_file(self, tmp_path, capsys):
        """Values from --config should reach the summary."""
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"weeks_in_period": 10}))

        assert main(["--config", str(config_path), "demo"]) == 0
        assert "period of 10 weeks" in capsys.readouterr().out

    def test_errors_return_exit_code_2(self, tmp_path, capsys):
        """Domain errors should print to stderr and exit 2."""
        assert main(["summary", str(tmp_path / "missing.json")]) == 2
        assert "Error:" in capsys.readouterr().err

        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"Monday": {"97153": [
            {"start": "09:00", "end": "08:00", "location": "Home"}
        ]}}))
        assert main(["summary", str(bad)]) == 2

        missing_end = tmp_path / "missing_end.json"
        missing_end.write_text(json.dumps({"Monday": {"97153": [
            {"start": "09:00", "location": "Home"}
        ]}}))
        capsys.readouterr()
        assert main(["summary", str(missing_end)]) == 2
        assert "Monday/97153[0]: missing end" in capsys.readouterr().err

        listed = tmp_path / "listed.json"
        listed.write_text(json.dumps(["Monday"]))
        assert main(["summary", str(listed)]) == 2
        assert main(["export", str(listed)]) == 2

        assert main(["suggest", "--hours", "97153"]) == 2

    def test_no_command_prints_help(self, capsys):
        """No subcommand should print help and exit 1."""
        assert main([]) == 1

    def test_parse_hours(self):
        """CODE=HOURS pairs should parse and bad hours should raise."""
        assert parse_hours(["97153=20", " 97155 = 2.5"]) == {"97153": 20.0, "97155": 2.5}
        with pytest.raises(SchedulerError):
            parse_hours(["97153=lots"])

    @pytest.mark.parametrize(
        "data",
        [
            {"compliance": None},
            {"compliance": {"max_weekly_hours": "forty"}},
            {"locations": ["Home", "home"]},
        ],
    )
    def test_invalid_config_returns_exit_code_2(self, tmp_path, capsys, data):
        """A config file with bad values should exit 2 with a message."""
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps(data))

        assert main(["--config", str(config_path), "demo"]) == 2
        assert "Error:" in capsys.readouterr().err

    def test_zero_weeks_is_honoured(self, capsys):
        """An explicit zero-week period should not fall back to the default."""
        assert main(["demo", "--weeks", "0"]) == 0
        assert "period of 0 weeks" in capsys.readouterr().out

    def test_negative_weeks_returns_exit_code_2(self, tmp_path, config, capsys):
        """A negative period should be reported as an error."""
        assert main(["demo", "--weeks", "-1"]) == 2
        assert "weeks_in_period" in capsys.readouterr().err

        path = self._write_schedule(tmp_path / "week.json", create_sample_schedule(config))
        assert main(["summary", path, "--weeks", "-1"]) == 2

    def test_zero_weeks_in_evaluate(self, config):
        """evaluate should project zero period units for zero weeks."""
        summary, _ = evaluate(create_sample_schedule(config), config, weeks=0)
        assert summary.weeks_in_period == 0
        assert summary.total_period_units == 0

    def test_export_pdf_with_notes(self, tmp_path, config):
        """PDF export should accept notes."""
        path = self._write_schedule(tmp_path / "week.json", create_sample_schedule(config))
        pdf_path = tmp_path / "notes.pdf"

        assert main(
            ["export", path, "--format", "pdf", "--output", str(pdf_path),
             "--notes", "Client prefers mornings"]
        ) == 0
        assert pdf_path.read_bytes().startswith(b"%PDF")
