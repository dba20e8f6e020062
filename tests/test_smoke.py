"""Smoke tests for end-to-end scheduling flow."""

import argparse
import json
from datetime import date

import pytest

from guardroster.cli import SAMPLE_CONFIGS, create_sample_staff, main, parse_month
from guardroster.domain.models import HospitalShiftConfig, StaffMember
from guardroster.output.pdf_generator import PDFGenerator
from guardroster.output.report_generator import RosterReportGenerator, summarize_by_staff
from guardroster.scheduling.quota import calculate_fair_quotas
from guardroster.scheduling.scheduler import ShiftScheduler
from guardroster.validation.validator import ScheduleValidator

NIGHTLY_CONFIG = {
    "hospitalId": "test",
    "shiftPattern": "custom",
    "shiftTypes": {
        "NOAPTE": {"name": "Gardă Noapte", "start": "20:00", "end": "08:00",
                   "duration": 12, "color": "#7C3AED"},
    },
    "weekdayShifts": ["NOAPTE"],
    "weekendShifts": ["NOAPTE"],
    "maxShiftsPerMonth": 10,
    "maxConsecutiveNights": 31,
}

STAFF = [
    {"id": 1, "name": "Dr. Popescu", "maxGuardsPerMonth": 10},
    {"id": 2, "name": "Dr. Ionescu", "maxGuardsPerMonth": 10, "unavailable": ["2025-01-11"]},
    {"id": 3, "name": "Dr. Popa", "maxGuardsPerMonth": 10},
]


class TestSmoke:
    """End-to-end smoke tests for the scheduling system."""

    @pytest.fixture
    def scheduler(self):
        return ShiftScheduler()

    @pytest.mark.parametrize("pattern", sorted(SAMPLE_CONFIGS))
    def test_sample_hospitals(self, scheduler, pattern):
        """Every demo hospital produces a covered, rule-abiding month."""
        config = HospitalShiftConfig.from_dict(SAMPLE_CONFIGS[pattern])
        days = scheduler.generate_days_for_month(date(2025, 1, 1), config)
        staff = create_sample_staff(8, days)

        schedule, stats = scheduler.generate_schedule_with_stats(staff, days, config)

        required = sum(len(d.required_shifts) for d in days)
        assert stats["total_shifts"] == required
        assert len(schedule) == 31

        ceiling = max(m.max_guards_per_month or config.max_shifts_per_month for m in staff)
        assert stats["max_per_staff"] <= ceiling + config.rules.emergency_quota_overflow

        result = ScheduleValidator(check_constraints=True).validate(schedule, staff, config)
        assert result.is_valid == (stats["unfilled_shifts"] == 0)
        assert not [
            w for w in result.warnings
            if w.error_type.value == "unavailable_assignment"
        ]

    def test_create_sample_staff(self):
        config = HospitalShiftConfig.from_dict(SAMPLE_CONFIGS["standard_12_24"])
        days = ShiftScheduler().generate_days_for_month(date(2025, 1, 1), config)
        staff = create_sample_staff(20, days)

        assert len(staff) == 20
        assert len({m.id for m in staff}) == 20
        assert len({m.name for m in staff}) == 20

    def test_text_report(self, scheduler):
        config = HospitalShiftConfig.from_dict(NIGHTLY_CONFIG)
        days = scheduler.generate_days_for_month(date(2025, 1, 1), config)
        staff = [StaffMember.from_dict(s) for s in STAFF]
        schedule = scheduler.generate_schedule(staff, days, config)

        report = RosterReportGenerator().generate_to_string(schedule, staff)

        assert report.startswith("GUARD ROSTER 2025-01-01 - 2025-01-31")
        assert "STAFF WORKLOAD" in report
        assert "UNFILLED SLOTS (0)" in report
        assert "(!)" in report

        summaries = summarize_by_staff(schedule, staff)
        assert sum(s.total for s in summaries) == 31
        assert sum(s.nights for s in summaries) == 31
        assert sum(s.emergency for s in summaries) == 1

    def test_quotas_match_slots(self, scheduler):
        config = HospitalShiftConfig.from_dict(SAMPLE_CONFIGS["only_24"])
        days = scheduler.generate_days_for_month(date(2025, 2, 1), config)
        staff = create_sample_staff(4, days)

        quotas = calculate_fair_quotas(staff, days, config)
        assert sum(q.quota.total for q in quotas) == 28

    def test_pdf_output(self, scheduler, tmp_path):
        pytest.importorskip("reportlab")

        config = HospitalShiftConfig.from_dict(SAMPLE_CONFIGS["standard_12_24"])
        days = scheduler.generate_days_for_month(date(2025, 1, 1), config)
        staff = create_sample_staff(3, days)
        schedule = scheduler.generate_schedule(staff, days, config)

        output = tmp_path / "roster.pdf"
        PDFGenerator().generate(schedule, staff, config, output)

        assert output.read_bytes().startswith(b"%PDF")
        buffer = PDFGenerator().generate_to_buffer(schedule, staff, config)
        assert buffer.getvalue().startswith(b"%PDF")


class TestCli:
    """Tests for the command-line entry point."""

    @pytest.fixture
    def inputs(self, tmp_path):
        config_path = tmp_path / "hospital.json"
        staff_path = tmp_path / "staff.json"
        config_path.write_text(json.dumps(NIGHTLY_CONFIG), encoding="utf-8")
        staff_path.write_text(json.dumps(STAFF), encoding="utf-8")
        return config_path, staff_path

    def test_days(self, inputs, capsys):
        config_path, _ = inputs
        assert main(["days", "-c", str(config_path), "-m", "2025-01"]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 31
        assert lines[0].startswith("2025-01-01 Miercuri")
        assert lines[0].endswith("NOAPTE")

    def test_generate_writes_outputs(self, inputs, tmp_path, capsys):
        config_path, staff_path = inputs
        json_path = tmp_path / "schedule.json"
        report_path = tmp_path / "report.txt"

        code = main([
            "generate", "-c", str(config_path), "-s", str(staff_path),
            "-m", "2025-01", "--json", str(json_path), "--report", str(report_path),
        ])

        assert code == 0
        schedule = json.loads(json_path.read_text(encoding="utf-8"))
        assert len(schedule) == 31
        assert schedule[10]["date"] == "2025-01-11"
        assert schedule[10]["shifts"][0]["assigneeId"] != "2"
        assert "STAFF WORKLOAD" in report_path.read_text(encoding="utf-8")
        assert "Validation: PASSED" in capsys.readouterr().out

    def test_generate_keeps_existing(self, inputs, tmp_path):
        config_path, staff_path = inputs
        existing_path = tmp_path / "existing.json"
        existing_path.write_text(json.dumps({
            "2025-01-05": [{"id": "kept", "type": "NOAPTE", "staffIds": [3],
                            "status": "confirmed"}],
        }), encoding="utf-8")
        json_path = tmp_path / "schedule.json"

        main([
            "generate", "-c", str(config_path), "-s", str(staff_path),
            "-e", str(existing_path), "-m", "2025-01", "--json", str(json_path),
        ])

        shift = json.loads(json_path.read_text(encoding="utf-8"))[4]["shifts"][0]
        assert shift["shiftId"] == "kept"
        assert shift["assigneeId"] == "3"
        assert shift["status"] == "confirmed"
        assert shift["carriedOver"] is True

    def test_generate_unfilled_exit_code(self, tmp_path, inputs):
        config_path, _ = inputs
        staff_path = tmp_path / "one.json"
        staff_path.write_text(
            json.dumps([{"id": 1, "name": "Solo", "unavailable": ["2025-01-02"]}]),
            encoding="utf-8",
        )

        code = main([
            "generate", "-c", str(config_path), "-s", str(staff_path), "-m", "2025-01",
        ])
        assert code == 2

    def test_quotas(self, inputs, capsys):
        config_path, staff_path = inputs
        assert main(["quotas", "-c", str(config_path), "-s", str(staff_path),
                     "-m", "2025-01"]) == 0

        out = capsys.readouterr().out
        assert "Dr. Popescu" in out
        assert "total  11" in out

    def test_bad_config(self, tmp_path, inputs, capsys):
        _, staff_path = inputs
        config_path = tmp_path / "bad.json"
        config_path.write_text(json.dumps({"shiftPattern": "rotating"}), encoding="utf-8")

        code = main(["generate", "-c", str(config_path), "-s", str(staff_path),
                     "-m", "2025-01"])

        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        code = main(["days", "-c", str(tmp_path / "nope.json"), "-m", "2025-01"])
        assert code == 1

    def test_bad_month(self, inputs):
        config_path, _ = inputs
        with pytest.raises(SystemExit):
            main(["days", "-c", str(config_path), "-m", "January"])

    def test_parse_month_error_hides_parse_traceback(self):
        with pytest.raises(argparse.ArgumentTypeError) as excinfo:
            parse_month("January")

        assert "expected YYYY-MM" in str(excinfo.value)
        assert excinfo.value.__cause__ is None
        assert excinfo.value.__suppress_context__ is True

    def test_parse_month(self):
        assert parse_month("2025-02") == date(2025, 2, 1)
        assert parse_month("2025-02-14") == date(2025, 2, 14)

    def test_demo(self, capsys):
        assert main(["demo", "--pattern", "only_24", "--count", "4", "--month", "2025-02"]) == 0
        assert "Guard Schedule: 2025-02-01 to 2025-02-28" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
