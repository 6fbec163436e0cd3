"""Pure Python in-memory sampler for unit testing."""

import copy
import json
from typing import Any

import httpx

from src.domain.task import Task
from src.interface.device_client import DeviceClient


BASE_URL = "http://sampler.test"


def make_task(task_id: str, **overrides: Any) -> Task:
    """Build a confirmed task with sensible defaults."""
    data: dict[str, Any] = {
        "id": task_id,
        "createdAt": 1_700_000_000,
        "name": f"task-{task_id}",
        "status": 0,
        "schedule": 1_700_003_600,
        "scheduleOnReceived": False,
        "valves": [1, 2, 3],
        "timeBetween": 10,
        "sampleTime": 60,
        "preserveDrawTime": 5,
        "preserveTime": 30,
        "notes": None,
    }
    data.update(overrides)
    return Task.model_validate(data)


class InMemorySampler:
    """In-memory stand-in for the sampler's HTTP API.

    Serves requests through ``httpx.MockTransport`` so the real DeviceClient
    code path is exercised without a device on the network.
    """

    def __init__(self) -> None:
        self.tasks: dict[str, dict[str, Any]] = {}
        self.status: dict[str, Any] = {"battery": 98, "pressure": 1.2}
        self.requests: list[httpx.Request] = []
        self.failures: dict[tuple[str, str], int] = {}
        self.unreachable = False
        self._id_counter = 1000
        self._clock = 1_700_000_000

    def add_task(self, task: Task) -> None:
        self.tasks[task.id] = task.model_dump(by_alias=True, mode="json")

    def fail(self, method: str, path: str, status_code: int = 500) -> None:
        """Make every request to ``method path`` answer with ``status_code``."""
        self.failures[(method, path)] = status_code

    def client(self) -> DeviceClient:
        return DeviceClient(base_url=BASE_URL, transport=httpx.MockTransport(self.handle))

    def handle(self, request: httpx.Request) -> httpx.Response:  # noqa: C901, PLR0911
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("Connection refused", request=request)

        method, path = request.method, request.url.path
        if (method, path) in self.failures:
            return httpx.Response(self.failures[(method, path)], json={"error": "failed"})

        parts = path.strip("/").split("/")
        if path == "/api/status" and method == "GET":
            return httpx.Response(200, json=self.status)
        if path == "/api/tasks" and method == "GET":
            return httpx.Response(200, json=copy.deepcopy(self.tasks))
        if path == "/api/tasks" and method == "POST":
            return httpx.Response(200, json=self._create(json.loads(request.content)))
        if path in ("/api/preload", "/api/valves/reset") and method == "GET":
            return httpx.Response(200)
        if path == "/api/rtc/update" and method == "POST":
            return httpx.Response(200)

        if len(parts) >= 3 and parts[:2] == ["api", "tasks"]:  # noqa: PLR2004
            task = self.tasks.get(parts[2])
            if task is None:
                return httpx.Response(404, json={"error": "not found"})
            if len(parts) == 3 and method == "GET":  # noqa: PLR2004
                return httpx.Response(200, json=task)
            if len(parts) == 3 and method == "PUT":  # noqa: PLR2004
                task.update(self._to_task_fields(json.loads(request.content)))
                return httpx.Response(200, json=task)
            if len(parts) == 4 and method == "POST" and parts[3] in ("schedule", "unschedule"):  # noqa: PLR2004
                task["status"] = 1 if parts[3] == "schedule" else 0
                return httpx.Response(200, json=task)

        return httpx.Response(404, json={"error": "no route"})

    def _to_task_fields(self, payload: dict[str, Any]) -> dict[str, Any]:
        fields = {key: payload[key] for key in payload if key not in ("date", "time")}
        fields["scheduleOnReceived"] = payload.get("date", "") == "" and payload.get("depth", 0) == 0
        return fields

    def _create(self, payload: dict[str, Any]) -> dict[str, Any]:
        self._id_counter += 1
        task_id = str(self._id_counter)
        self.tasks[task_id] = {
            "id": task_id,
            "createdAt": self._clock,
            "status": 0,
            "schedule": self._clock,
            **self._to_task_fields(payload),
        }
        return self.tasks[task_id]
