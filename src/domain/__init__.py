"""Domain models and DTOs."""

from src.domain.task import LoadingScreen, StatusSnapshot, Task, TaskOperation
from src.domain.task_config import (
    DateOnlyTaskConfig,
    DateOrDepthTaskConfig,
    SchemaProfile,
    TaskConfig,
)


__all__ = [
    "DateOnlyTaskConfig",
    "DateOrDepthTaskConfig",
    "LoadingScreen",
    "SchemaProfile",
    "StatusSnapshot",
    "Task",
    "TaskConfig",
    "TaskOperation",
]
