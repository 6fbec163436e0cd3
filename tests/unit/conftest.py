"""Pytest configuration and fixtures for unit tests."""

from collections.abc import AsyncIterator
from typing import Any

import pytest

from src.interface.device_client import DeviceClient
from src.services.task_store import TaskStore
from tests.unit.mocks import InMemorySampler


@pytest.fixture
def sampler() -> InMemorySampler:
    """Provides a fresh in-memory sampler for each test."""
    return InMemorySampler()


@pytest.fixture
async def device_client(sampler: InMemorySampler) -> AsyncIterator[DeviceClient]:
    """DeviceClient wired to the in-memory sampler."""
    async with sampler.client() as client:
        yield client


@pytest.fixture
def store() -> TaskStore:
    return TaskStore()


@pytest.fixture
def valid_form() -> dict[str, Any]:
    """A task form that passes the date_or_depth profile."""
    return {
        "name": "Morning sample",
        "scheduleDate": "2026-10-18",
        "scheduleTime": "8:30",
        "depth": 0,
        "pumps": "1,3-8,21",
        "timeBetweenPumps": 10,
        "sampleTime": 60,
        "preserveDrawTime": 5,
        "preserveTime": 30,
        "notes": "North buoy",
    }
