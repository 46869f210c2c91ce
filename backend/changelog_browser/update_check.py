"""Polls the deployed version marker and announces newer deploys."""

import asyncio

import httpx

from changelog_browser.configs.app_configs import UPDATE_CHECK_INTERVAL_SECONDS
from changelog_browser.filtering.interfaces import PageControls
from changelog_browser.filtering.scheduler import Scheduler
from changelog_browser.filtering.scheduler import TaskSlot
from changelog_browser.utils.logger import setup_logger

logger = setup_logger()

PROBE_TIMEOUT = 10.0


class UpdateChecker:
    def __init__(
        self,
        probe_url: str,
        loaded_build_timestamp: int,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.probe_url = probe_url
        self.loaded_build_timestamp = loaded_build_timestamp
        self._client = client

    async def check_for_update(self) -> bool:
        """True when the server reports a newer build than the one loaded.

        Not critical: any failure counts as "no update".
        """
        try:
            if self._client is not None:
                response = await self._client.get(
                    self.probe_url, headers={"Cache-Control": "no-store"}
                )
            else:
                async with httpx.AsyncClient(timeout=PROBE_TIMEOUT) as client:
                    response = await client.get(
                        self.probe_url, headers={"Cache-Control": "no-store"}
                    )
            if not response.is_success:
                return False
            served = int(response.json()["buildTimestamp"])
        except Exception as e:
            logger.debug(f"Update check failed: {e}")
            return False

        return served > self.loaded_build_timestamp


class UpdatePoller:
    """Re-checks for a newer deploy on a fixed interval.

    Once the toast is shown it stays until dismissed. Needs a running event
    loop when a tick fires, since the check itself is async.
    """

    def __init__(
        self,
        checker: UpdateChecker,
        controls: PageControls,
        scheduler: Scheduler,
        interval_seconds: int = UPDATE_CHECK_INTERVAL_SECONDS,
    ) -> None:
        self._checker = checker
        self._controls = controls
        self._slot = TaskSlot(scheduler, "update-poll")
        self._interval_ms = interval_seconds * 1000
        self._in_flight: asyncio.Task[bool] | None = None
        self.update_available = False

    def start(self) -> None:
        self._slot.schedule(self._interval_ms, self._tick)

    def stop(self) -> None:
        self._slot.cancel()
        if self._in_flight is not None:
            self._in_flight.cancel()
            self._in_flight = None

    def dismiss(self) -> None:
        self._controls.hide_update_toast()

    def _tick(self) -> None:
        task = asyncio.get_running_loop().create_task(self.poll_once())
        task.add_done_callback(_log_poll_failure)
        self._in_flight = task
        self.start()

    async def poll_once(self) -> bool:
        if await self._checker.check_for_update():
            self.update_available = True
            self._controls.show_update_toast()
        return self.update_available


def _log_poll_failure(task: asyncio.Task[bool]) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.warning(f"Update poll failed: {error}")
