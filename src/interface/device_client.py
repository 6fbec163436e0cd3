"""HTTP client for the sampler device API using httpx."""

import logging
from collections.abc import Iterable
from datetime import datetime
from types import TracebackType
from typing import Any, Self

import httpx
from pydantic import ValidationError

from src.core.config import constants, settings
from src.core.errors import DeviceRequestError, DeviceResponseError
from src.domain.task import Task


logger = logging.getLogger(__name__)


def _parse_task(data: Any) -> Task:  # noqa: ANN401
    try:
        return Task.model_validate(data)
    except ValidationError as e:
        raise DeviceResponseError(f"Invalid task payload: {e}") from e


def _parse_collection(data: Any) -> dict[str, Task]:  # noqa: ANN401
    """Normalize a collection response (object keyed by id, or a list) into a mapping by id."""
    records: Iterable[Any]
    if isinstance(data, dict):
        records = data.values()
    elif isinstance(data, list):
        records = data
    else:
        msg = f"Invalid task collection payload: expected object or list, got {type(data).__name__}"
        raise DeviceResponseError(msg)
    tasks = (_parse_task(record) for record in records)
    return {task.id: task for task in tasks}


def timezone_offset_minutes(now: datetime) -> int:
    """Minutes to add to local time to get UTC (positive west of Greenwich)."""
    aware = now if now.tzinfo is not None else now.astimezone()
    offset = aware.utcoffset()
    return -int(offset.total_seconds() // 60) if offset is not None else 0


class DeviceClient:
    """Async client for one sampler.

    Every method performs exactly one request; failures raise and are never retried here.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.device_base_url,
            timeout=timeout if timeout is not None else settings.device_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:  # noqa: ANN401
        """Send one request and return the decoded JSON body (None when empty)."""
        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.HTTPError as e:
            logger.warning("Device request %s %s failed: %s", method, path, e)
            raise DeviceRequestError(f"{method} {path} failed: {e}") from e

        if not response.is_success:
            logger.warning("Device request %s %s returned %d", method, path, response.status_code)
            raise DeviceRequestError(
                f"{method} {path} returned HTTP {response.status_code}", status_code=response.status_code
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise DeviceResponseError(f"{method} {path} returned invalid JSON") from e

    async def get_status(self) -> dict[str, Any]:
        data = await self._request("GET", "/api/status")
        if not isinstance(data, dict):
            raise DeviceResponseError("Invalid status payload: expected object")
        return data

    async def get_task_collection(self) -> dict[str, Task]:
        return _parse_collection(await self._request("GET", "/api/tasks"))

    async def get_task(self, task_id: str) -> Task:
        return _parse_task(await self._request("GET", f"/api/tasks/{task_id}"))

    async def create_task(self, payload: dict[str, Any]) -> Task:
        return _parse_task(await self._request("POST", "/api/tasks", json=payload))

    async def update_task(self, task_id: str, payload: dict[str, Any]) -> Task:
        return _parse_task(await self._request("PUT", f"/api/tasks/{task_id}", json=payload))

    async def schedule_task(self, task_id: str) -> Task:
        return _parse_task(await self._request("POST", f"/api/tasks/{task_id}/schedule"))

    async def unschedule_task(self, task_id: str) -> Task:
        return _parse_task(await self._request("POST", f"/api/tasks/{task_id}/unschedule"))

    # Utilities

    async def start_hyperflush(self) -> None:
        """Start the flush, preload, stop, idle sequence."""
        await self._request("GET", "/api/preload", timeout=constants.PRELOAD_TIMEOUT_SECONDS)
        logger.info("HyperFlush started")

    async def update_rtc(self, now: datetime | None = None) -> None:
        """Set the sampler's real-time clock from this machine's clock."""
        now = now or datetime.now().astimezone()
        payload = {"utc": int(now.timestamp()), "timezoneOffset": timezone_offset_minutes(now)}
        await self._request("POST", "/api/rtc/update", json=payload)
        logger.info("RTC updated", extra=payload)

    async def reset_valves(self) -> None:
        """Restore every valve to the default configuration stored on the sampler."""
        await self._request("GET", "/api/valves/reset")
        logger.info("Valves reset to defaults")
