"""In-memory task store driven by completed device operations.

``apply`` is a pure transition function. ``TaskStore`` owns the current state for
one session, applies events strictly in dispatch order, and notifies subscribers.

Events are applied in the order they *resolve*, not the order requests were
sent: a slow collection fetch that lands after a quick single-task update
replaces the collection and the update is lost.
"""

import logging
import random
import time
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.core.config import constants, settings
from src.core.logging import log_with_context
from src.domain.task import LoadingScreen, StatusSnapshot, Task, TaskOperation


logger = logging.getLogger(__name__)

DEMO_NOTES = "Lorem ipsum dolor sit amet consectetur adipisicing elit. Veniam, debitis"


class StatusPollSucceeded(BaseModel):
    """The device answered a status poll."""

    payload: dict[str, Any]


class StatusPollFailed(BaseModel):
    """A status poll did not succeed."""

    error: str | None = None


class TaskCollectionFetched(BaseModel):
    """The full task collection was fetched."""

    tasks: dict[str, Task]


class TaskReceived(BaseModel):
    """A single-task operation succeeded and returned the task."""

    operation: TaskOperation
    task: Task


class TaskOperationFailed(BaseModel):
    """A task operation (or collection fetch) did not succeed. Leaves the collection untouched."""

    operation: TaskOperation | None = Field(None, description="None for a collection fetch")
    error: str | None = None


class LoadingScreenSet(BaseModel):
    value: LoadingScreen


StoreEvent = (
    StatusPollSucceeded | StatusPollFailed | TaskCollectionFetched | TaskReceived | TaskOperationFailed | LoadingScreenSet
)


class StoreState(BaseModel):
    """Snapshot of everything the store holds."""

    model_config = ConfigDict(frozen=True)

    status: StatusSnapshot = Field(default_factory=StatusSnapshot)
    task_collection: dict[str, Task] = Field(default_factory=dict)
    loading_screen: LoadingScreen = LoadingScreen.HIDING


def apply(state: StoreState, event: StoreEvent) -> StoreState:
    """Return the state that results from applying one event.

    Every task write replaces the whole entity at its id.
    """
    if isinstance(event, StatusPollSucceeded):
        status = StatusSnapshot.model_validate({**event.payload, "rejects": 0})
        return state.model_copy(update={"status": status})

    if isinstance(event, StatusPollFailed):
        status = state.status.model_copy(update={"rejects": state.status.rejects + 1})
        return state.model_copy(update={"status": status})

    if isinstance(event, TaskCollectionFetched):
        return state.model_copy(update={"task_collection": dict(event.tasks)})

    if isinstance(event, TaskReceived):
        # Unschedule upserts too: the returned task is authoritative.
        collection = {**state.task_collection, event.task.id: event.task}
        return state.model_copy(update={"task_collection": collection})

    if isinstance(event, LoadingScreenSet):
        return state.model_copy(update={"loading_screen": event.value})

    if isinstance(event, TaskOperationFailed):
        return state

    msg = f"Unknown store event: {type(event).__name__}"
    raise TypeError(msg)


Listener = Callable[[StoreState], None]


class TaskStore:
    """Owns the session's task state. Construct once and pass it to collaborators."""

    def __init__(self, initial: StoreState | None = None) -> None:
        self._state = initial if initial is not None else StoreState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def status(self) -> StatusSnapshot:
        return self._state.status

    @property
    def task_collection(self) -> dict[str, Task]:
        """Copy of the collection; tasks themselves are immutable."""
        return dict(self._state.task_collection)

    @property
    def loading_screen(self) -> LoadingScreen:
        return self._state.loading_screen

    def dispatch(self, event: StoreEvent) -> StoreState:
        """Apply an event and notify subscribers if the state changed."""
        previous = self._state
        self._state = apply(previous, event)

        if isinstance(event, StatusPollFailed):
            log_with_context(
                logger, "warning", "Status poll failed", rejects=self._state.status.rejects, error=event.error
            )
        elif isinstance(event, TaskOperationFailed):
            log_with_context(
                logger, "warning", "Task operation failed", operation=event.operation, error=event.error
            )
        else:
            logger.debug("Applied %s", type(event).__name__)

        if self._state is not previous:
            for listener in list(self._listeners):
                listener(self._state)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


def make_demo_collection(count: int = constants.DEMO_TASK_COUNT, *, now: int | None = None) -> dict[str, Task]:
    """Build placeholder tasks for development sessions without a sampler."""
    timestamp = int(time.time()) if now is None else now
    collection: dict[str, Task] = {}
    for _ in range(count):
        task_id = random.randint(0, constants.DEMO_TASK_ID_MAX)  # noqa: S311
        collection[str(task_id)] = Task(
            id=str(task_id),
            created_at=timestamp,
            name="DEMO",
            notes=DEMO_NOTES,
            status=task_id % 2,
            valves=(),
            sample_time=0,
            preserve_draw_time=0,
            preserve_time=0,
            schedule=timestamp,
            schedule_on_received=True,
            time_between=10,
        )
    return collection


def create_store(environment: str | None = None) -> TaskStore:
    """Create the session store, seeded with demo tasks in development."""
    environment = environment or settings.environment
    if environment == "development":
        logger.info("Seeding store with %d demo tasks", constants.DEMO_TASK_COUNT)
        return TaskStore(StoreState(task_collection=make_demo_collection()))
    return TaskStore()
