"""Device round-trips that feed their outcome into the task store."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any

from pydantic import BaseModel, Field

from src.core.config import settings
from src.core.errors import DeviceError, ErrorResponse, classify_transport_error
from src.core.logging import span
from src.domain.task import LoadingScreen, Task, TaskOperation
from src.domain.task_config import SchemaProfile, TaskConfig
from src.interface.device_client import DeviceClient
from src.services.task_schema import FieldError, validate
from src.services.task_store import (
    LoadingScreenSet,
    StatusPollFailed,
    StatusPollSucceeded,
    TaskCollectionFetched,
    TaskOperationFailed,
    TaskReceived,
    TaskStore,
)


logger = logging.getLogger(__name__)


class ActionResult(BaseModel):
    """Outcome of one action, for the caller to surface."""

    success: bool = Field(..., description="Whether the round-trip succeeded")
    task: Task | None = Field(None, description="Task returned by a single-task operation")
    tasks: dict[str, Task] | None = Field(None, description="Collection returned by a fetch")
    errors: list[FieldError] = Field(default_factory=list, description="Form errors when validation failed")
    error: ErrorResponse | None = Field(None, description="Transport failure, if any")


async def poll_status(store: TaskStore, client: DeviceClient) -> ActionResult:
    with span("task_actions.poll_status"):
        try:
            payload = await client.get_status()
        except DeviceError as e:
            store.dispatch(StatusPollFailed(error=str(e)))
            return ActionResult(success=False, error=classify_transport_error(e))
        store.dispatch(StatusPollSucceeded(payload=payload))
        return ActionResult(success=True)


async def fetch_task_collection(store: TaskStore, client: DeviceClient) -> ActionResult:
    with span("task_actions.fetch_task_collection"):
        try:
            tasks = await client.get_task_collection()
        except DeviceError as e:
            store.dispatch(TaskOperationFailed(error=str(e)))
            return ActionResult(success=False, error=classify_transport_error(e))
        store.dispatch(TaskCollectionFetched(tasks=tasks))
        logger.info("Fetched %d tasks", len(tasks))
        return ActionResult(success=True, tasks=tasks)


async def _run_task_operation(
    store: TaskStore,
    operation: TaskOperation,
    request: Awaitable[Task],
) -> ActionResult:
    with span(f"task_actions.{operation.value}_task"):
        try:
            task = await request
        except DeviceError as e:
            store.dispatch(TaskOperationFailed(operation=operation, error=str(e)))
            return ActionResult(success=False, error=classify_transport_error(e))
        store.dispatch(TaskReceived(operation=operation, task=task))
        return ActionResult(success=True, task=task)


async def fetch_task(store: TaskStore, client: DeviceClient, task_id: str) -> ActionResult:
    return await _run_task_operation(store, TaskOperation.GET, client.get_task(task_id))


async def create_task(store: TaskStore, client: DeviceClient, config: TaskConfig) -> ActionResult:
    return await _run_task_operation(store, TaskOperation.CREATE, client.create_task(config.to_device_payload()))


async def update_task(store: TaskStore, client: DeviceClient, task_id: str, config: TaskConfig) -> ActionResult:
    return await _run_task_operation(
        store, TaskOperation.UPDATE, client.update_task(task_id, config.to_device_payload())
    )


async def schedule_task(store: TaskStore, client: DeviceClient, task_id: str) -> ActionResult:
    return await _run_task_operation(store, TaskOperation.SCHEDULE, client.schedule_task(task_id))


async def unschedule_task(store: TaskStore, client: DeviceClient, task_id: str) -> ActionResult:
    return await _run_task_operation(store, TaskOperation.UNSCHEDULE, client.unschedule_task(task_id))


async def submit_task(
    store: TaskStore,
    client: DeviceClient,
    raw: Any,  # noqa: ANN401
    profile: SchemaProfile | str | None = None,
) -> ActionResult:
    """Validate a task form and create it on the sampler.

    Nothing is sent when validation fails. The loading screen is shown while
    the request is in flight and hidden afterwards, whatever the outcome.
    """
    result = validate(raw, profile or settings.schema_profile)
    if result.config is None:
        return ActionResult(success=False, errors=result.errors)

    store.dispatch(LoadingScreenSet(value=LoadingScreen.SHOWING))
    try:
        return await create_task(store, client, result.config)
    finally:
        store.dispatch(LoadingScreenSet(value=LoadingScreen.HIDING))


async def run_status_poller(
    store: TaskStore,
    client: DeviceClient,
    *,
    stop_event: asyncio.Event,
    interval: float | None = None,
) -> None:
    """Poll device status until ``stop_event`` is set."""
    interval = interval if interval is not None else settings.status_poll_interval_seconds
    logger.info("Status poller started (every %.1fs)", interval)
    while not stop_event.is_set():
        await poll_status(store, client)
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval)
        except TimeoutError:
            continue
    logger.info("Status poller stopped")
