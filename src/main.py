"""sampler-tasks - task console session for a remote sampling device."""

import asyncio
import logging
import sys

from src.core.config import settings
from src.core.errors import DeviceError
from src.core.logging import configure_logfire
from src.interface.device_client import DeviceClient
from src.services.task_actions import fetch_task_collection, run_status_poller
from src.services.task_store import TaskStore, create_store


logger = logging.getLogger(__name__)


async def check_device_connectivity(client: DeviceClient) -> None:
    """Verify the sampler answers a status request.

    Raises:
        ConnectionError: If the sampler cannot be reached
    """
    try:
        await client.get_status()
    except DeviceError as e:
        logger.error("startup_validation", extra={"service": "device", "status": "failed", "error": str(e)})
        raise ConnectionError(f"Sampler connectivity check failed: {e}") from e
    logger.info("startup_validation", extra={"service": "device", "status": "ok", "url": settings.device_base_url})


async def run_session(
    client: DeviceClient,
    *,
    store: TaskStore | None = None,
    stop_event: asyncio.Event | None = None,
) -> TaskStore:
    """Load the task collection and keep polling status until stopped."""
    store = store if store is not None else create_store()
    await check_device_connectivity(client)
    await fetch_task_collection(store, client)
    await run_status_poller(store, client, stop_event=stop_event or asyncio.Event())
    return store


async def _run() -> None:
    async with DeviceClient() as client:
        await run_session(client)


def main() -> None:
    """Console entry point."""
    configure_logfire()
    try:
        asyncio.run(_run())
    except ConnectionError as e:
        logger.error("startup_validation_failed", extra={"error": str(e)})
        print(f"\n❌ Startup validation failed: {e}\n", file=sys.stderr)  # noqa: T201
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Session stopped")


if __name__ == "__main__":
    main()
