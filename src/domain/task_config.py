"""Task configuration models submitted to the sampler.

Two validation profiles exist for the same task form:

* ``date_or_depth``: the date may be left empty, and a depth trigger is available.
  At least one of the two must be set.
* ``date_only``: no depth field; the schedule date is mandatory.
"""

import re
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from src.core.config import constants
from src.core.pump_range import PumpSpec, parse_pump_spec


DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
# Hours are not range-checked ("99:99" passes).
TIME_PATTERN = re.compile(r"\d{1,2}:\d{1,2}")

DATE_MESSAGE = "Date doesn't match the required form at: yyyy-mm-dd"
TIME_MESSAGE = "Time doesn't match the required format: hh:mm (24hr)"
TRIGGER_MESSAGE = "needs to either be executed by time or depth"


class SchemaProfile(StrEnum):
    """Named validation profile for the task form."""

    DATE_OR_DEPTH = "date_or_depth"
    DATE_ONLY = "date_only"


def _check_date(value: str, *, allow_empty: bool) -> str:
    if allow_empty and value == "":
        return value
    if not DATE_PATTERN.search(value):
        raise PydanticCustomError("date_format", DATE_MESSAGE)
    return value


class TaskConfigBase(BaseModel):
    """Fields shared by both profiles."""

    model_config = ConfigDict(
        strict=True,
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    name: str = Field(..., max_length=constants.MAX_TASK_NAME_LENGTH)
    schedule_date: str
    schedule_time: str
    pumps: PumpSpec
    time_between_pumps: float = Field(..., ge=0)
    sample_time: float = Field(..., ge=0)
    preserve_draw_time: float = Field(..., ge=0)
    preserve_time: float = Field(..., ge=0)
    notes: str | None = None

    @field_validator("schedule_time")
    @classmethod
    def validate_schedule_time(cls, v: str) -> str:
        if not TIME_PATTERN.search(v):
            raise PydanticCustomError("time_format", TIME_MESSAGE)
        return v

    @field_validator("pumps", mode="before")
    @classmethod
    def parse_pumps(cls, v: Any) -> PumpSpec:  # noqa: ANN401
        """Run the pump range grammar and expand the string into valves."""
        if isinstance(v, PumpSpec):
            return v
        if not isinstance(v, str):
            raise PydanticCustomError("string_type", "Input should be a valid string")
        result = parse_pump_spec(v)
        if result.error is not None:
            raise PydanticCustomError(result.error.stage.value, result.error.message)
        return result.spec

    def _payload(self, *, depth: float) -> dict[str, Any]:
        return {
            "name": self.name,
            "notes": self.notes,
            "valves": list(self.pumps.valves),
            "timeBetween": self.time_between_pumps,
            "sampleTime": self.sample_time,
            "preserveDrawTime": self.preserve_draw_time,
            "preserveTime": self.preserve_time,
            "date": self.schedule_date,
            "time": self.schedule_time,
            "depth": depth,
        }


class DateOrDepthTaskConfig(TaskConfigBase):
    """Task triggered by date, by depth, or both."""

    depth: float = Field(..., ge=0)

    @field_validator("schedule_date")
    @classmethod
    def validate_schedule_date(cls, v: str) -> str:
        return _check_date(v, allow_empty=True)

    @model_validator(mode="after")
    def check_trigger(self) -> "DateOrDepthTaskConfig":
        """A task needs a date or a depth to start on."""
        if self.schedule_date == "" and self.depth == 0:
            raise PydanticCustomError("missing_trigger", TRIGGER_MESSAGE)
        return self

    def to_device_payload(self) -> dict[str, Any]:
        return self._payload(depth=self.depth)


class DateOnlyTaskConfig(TaskConfigBase):
    """Task triggered by date only."""

    @field_validator("schedule_date")
    @classmethod
    def validate_schedule_date(cls, v: str) -> str:
        return _check_date(v, allow_empty=False)

    def to_device_payload(self) -> dict[str, Any]:
        return self._payload(depth=0)


TaskConfig = DateOrDepthTaskConfig | DateOnlyTaskConfig

PROFILE_MODELS: dict[SchemaProfile, type[DateOrDepthTaskConfig] | type[DateOnlyTaskConfig]] = {
    SchemaProfile.DATE_OR_DEPTH: DateOrDepthTaskConfig,
    SchemaProfile.DATE_ONLY: DateOnlyTaskConfig,
}

# Field that carries the cross-field trigger error, per profile.
TRIGGER_FIELDS: dict[SchemaProfile, str | None] = {
    SchemaProfile.DATE_OR_DEPTH: "depth",
    SchemaProfile.DATE_ONLY: None,
}
