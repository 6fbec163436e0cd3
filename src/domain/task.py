"""Task domain models and enums as confirmed by the sampler."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.core.pump_range import format_valves


class TaskOperation(StrEnum):
    """Device operation that returned a single task."""

    CREATE = "create"
    GET = "get"
    UPDATE = "update"
    SCHEDULE = "schedule"
    UNSCHEDULE = "unschedule"


class LoadingScreen(StrEnum):
    """Whether the blocking loading screen is shown."""

    SHOWING = "showing"
    HIDING = "hiding"


class Task(BaseModel):
    """Task entity as returned by the sampler.

    Always replaced whole; no field is ever patched in place.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="allow",
    )

    id: str = Field(..., description="Task ID assigned by the sampler")
    created_at: int = Field(..., description="Creation time (epoch seconds)")
    name: str = Field(..., description="Task name")
    status: int = Field(..., description="Device-defined status code")
    schedule: int = Field(..., description="Resolved execution time (epoch seconds)")
    schedule_on_received: bool = Field(default=False, description="Schedule as soon as the sampler receives it")
    valves: tuple[int, ...] = Field(default=(), description="Resolved valve indices")
    time_between: float = Field(default=0, description="Seconds between pumps")
    sample_time: float = Field(default=0, description="Sample time (seconds)")
    preserve_draw_time: float = Field(default=0, description="Preserve draw time (seconds)")
    preserve_time: float = Field(default=0, description="Preserve time (seconds)")
    depth: float = Field(default=0, description="Depth trigger (meters), 0 when not depth-triggered")
    notes: str | None = Field(default=None, description="Operator notes")

    @property
    def pumps(self) -> str:
        """Valves rendered back into range form for the editor."""
        return format_valves(self.valves)


class StatusSnapshot(BaseModel):
    """Device health payload plus the count of consecutive failed polls."""

    model_config = ConfigDict(frozen=True, extra="allow")

    rejects: int = Field(default=0, description="Consecutive failed status polls")
