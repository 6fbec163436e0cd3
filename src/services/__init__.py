from src.services import (
    task_actions,
    task_schema,
    task_store,
)


__all__ = [
    "task_actions",
    "task_schema",
    "task_store",
]
