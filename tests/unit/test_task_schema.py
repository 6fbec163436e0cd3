"""Unit tests for task form validation."""

import pytest

from src.core.errors import ErrorCategory
from src.domain.task_config import DateOnlyTaskConfig, DateOrDepthTaskConfig, SchemaProfile
from src.services.task_schema import validate


def _paths(result):
    return [error.path for error in result.errors]


@pytest.mark.unit
class TestDateOrDepthProfile:
    """Tests for the profile with an optional date and a depth trigger."""

    def test_valid_form(self, valid_form):
        result = validate(valid_form)

        assert result.success
        assert result.errors == []
        assert isinstance(result.config, DateOrDepthTaskConfig)
        assert result.config.pumps.valves == (1, 3, 4, 5, 6, 7, 8, 21)
        assert result.config.pumps.format() == "1,3-8,21"
        assert result.config.time_between_pumps == 10

    def test_snake_case_keys_accepted(self, valid_form):
        form = {
            "name": valid_form["name"],
            "schedule_date": valid_form["scheduleDate"],
            "schedule_time": valid_form["scheduleTime"],
            "depth": 2.5,
            "pumps": "4",
            "time_between_pumps": 0,
            "sample_time": 0,
            "preserve_draw_time": 0,
            "preserve_time": 0,
        }

        result = validate(form, SchemaProfile.DATE_OR_DEPTH)

        assert result.success
        assert result.config.notes is None

    def test_missing_trigger_reported_on_depth(self, valid_form):
        valid_form.update(scheduleDate="", depth=0)

        result = validate(valid_form)

        assert not result.success
        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.path == "depth"
        assert error.message == "needs to either be executed by time or depth"
        assert error.category == ErrorCategory.SCHEMA_CROSS_FIELD

    def test_date_alone_satisfies_trigger(self, valid_form):
        valid_form.update(scheduleDate="2026-11-01", depth=0)

        assert validate(valid_form).success

    def test_depth_alone_satisfies_trigger(self, valid_form):
        valid_form.update(scheduleDate="", depth=12.5)

        result = validate(valid_form)

        assert result.success
        assert result.config.schedule_date == ""

    def test_trigger_independent_of_other_fields(self, valid_form):
        """Other field values do not change the outcome of the trigger check."""
        for overrides in ({"pumps": "0-23"}, {"name": ""}, {"sampleTime": 9999}, {"notes": None}):
            form = {**valid_form, **overrides, "scheduleDate": "", "depth": 0}
            assert _paths(validate(form)) == ["depth"]

            form["depth"] = 1
            assert validate(form).success

    def test_trigger_check_skipped_while_fields_invalid(self, valid_form):
        valid_form.update(scheduleDate="", depth=0, pumps="8-3")

        result = validate(valid_form)

        assert _paths(result) == ["pumps"]

    def test_all_field_errors_accumulated_in_form_order(self, valid_form):
        valid_form.update(
            name="x" * 25,
            scheduleDate="18/10/2026",
            scheduleTime="noon",
            pumps="24",
            timeBetweenPumps=-1,
            depth=-3,
        )

        result = validate(valid_form)

        assert _paths(result) == ["name", "scheduleDate", "scheduleTime", "pumps", "timeBetweenPumps", "depth"]

    def test_pump_grammar_errors_carry_stage(self, valid_form):
        valid_form["pumps"] = "3-"

        error = validate(valid_form).errors[0]

        assert error.path == "pumps"
        assert error.kind == "range_bounds"
        assert error.message == "Range missing bound"
        assert error.category == ErrorCategory.GRAMMAR

    def test_empty_pumps_rejected(self, valid_form):
        valid_form["pumps"] = ""

        error = validate(valid_form).errors[0]

        assert error.path == "pumps"
        assert error.kind == "empty"

    def test_name_at_limit_accepted(self, valid_form):
        valid_form["name"] = "n" * 24

        assert validate(valid_form).success

    def test_missing_fields_reported(self):
        result = validate({"name": "only a name"})

        assert "scheduleDate" in _paths(result)
        assert "pumps" in _paths(result)
        assert "depth" in _paths(result)
        assert all(error.kind == "missing" for error in result.errors)

    def test_types_are_not_coerced(self, valid_form):
        valid_form.update(sampleTime="60", name=42, pumps=[1, 2])

        result = validate(valid_form)

        assert _paths(result) == ["name", "pumps", "sampleTime"]
        assert all(error.category == ErrorCategory.SCHEMA_FIELD for error in result.errors)

    def test_non_mapping_input(self):
        result = validate("not a form")

        assert not result.success
        assert result.errors[0].path == ""

    def test_date_pattern_is_unanchored(self, valid_form):
        valid_form["scheduleDate"] = "on 2026-10-18 please"

        assert validate(valid_form).success

    @pytest.mark.parametrize("time", ["8:30", "08:30", "23:59", "99:99", "7:5"])
    def test_time_hours_not_range_checked(self, valid_form, time):
        valid_form["scheduleTime"] = time

        assert validate(valid_form).success

    @pytest.mark.parametrize("time", ["", "830", "8h30", ":30"])
    def test_time_shape_rejected(self, valid_form, time):
        valid_form["scheduleTime"] = time

        result = validate(valid_form)

        assert _paths(result) == ["scheduleTime"]
        assert result.errors[0].message == "Time doesn't match the required format: hh:mm (24hr)"

    def test_payload_for_device(self, valid_form):
        config = validate(valid_form).config

        payload = config.to_device_payload()

        assert payload == {
            "name": "Morning sample",
            "notes": "North buoy",
            "valves": [1, 3, 4, 5, 6, 7, 8, 21],
            "timeBetween": 10,
            "sampleTime": 60,
            "preserveDrawTime": 5,
            "preserveTime": 30,
            "date": "2026-10-18",
            "time": "8:30",
            "depth": 0,
        }


@pytest.mark.unit
class TestDateOnlyProfile:
    """Tests for the profile where the schedule date is mandatory and depth does not exist."""

    def test_valid_form(self, valid_form):
        valid_form.pop("depth")

        result = validate(valid_form, "date_only")

        assert isinstance(result.config, DateOnlyTaskConfig)
        assert result.config.to_device_payload()["depth"] == 0

    def test_empty_date_rejected(self, valid_form):
        valid_form["scheduleDate"] = ""

        result = validate(valid_form, SchemaProfile.DATE_ONLY)

        assert _paths(result) == ["scheduleDate"]
        assert result.errors[0].message == "Date doesn't match the required form at: yyyy-mm-dd"

    def test_depth_ignored(self, valid_form):
        valid_form["depth"] = -5

        result = validate(valid_form, SchemaProfile.DATE_ONLY)

        assert result.success
        assert not hasattr(result.config, "depth")

    def test_no_trigger_check(self, valid_form):
        """Without depth there is no cross-field error to raise."""
        valid_form.update(depth=0)

        result = validate(valid_form, SchemaProfile.DATE_ONLY)

        assert result.success

    def test_unknown_profile_rejected(self, valid_form):
        with pytest.raises(ValueError):
            validate(valid_form, "depth_only")
