import asyncio
from unittest.mock import AsyncMock
from unittest.mock import MagicMock
from unittest.mock import patch

import httpx
import pytest

from changelog_browser.filtering.scheduler import ManualScheduler
from changelog_browser.filtering.soup_dom import load_page
from changelog_browser.releases.models import Release
from changelog_browser.rendering.page import render_page
from changelog_browser.update_check import UpdateChecker
from changelog_browser.update_check import UpdatePoller

PROBE_URL = "https://changelog.example.com/version.json"


def _client_returning(response: httpx.Response) -> MagicMock:
    client = MagicMock(spec=httpx.AsyncClient)
    client.get = AsyncMock(return_value=response)
    return client


def _probe_response(status_code: int, payload: dict | None = None) -> httpx.Response:
    return httpx.Response(
        status_code,
        json=payload,
        request=httpx.Request("GET", PROBE_URL),
    )


class TestUpdateChecker:
    @pytest.mark.asyncio
    async def test_newer_build(self) -> None:
        client = _client_returning(_probe_response(200, {"buildTimestamp": 2000}))
        checker = UpdateChecker(PROBE_URL, loaded_build_timestamp=1000, client=client)

        assert await checker.check_for_update()
        client.get.assert_awaited_once_with(
            PROBE_URL, headers={"Cache-Control": "no-store"}
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("served", [1000, 999])
    async def test_same_or_older_build(self, served: int) -> None:
        client = _client_returning(_probe_response(200, {"buildTimestamp": served}))
        checker = UpdateChecker(PROBE_URL, loaded_build_timestamp=1000, client=client)

        assert not await checker.check_for_update()

    @pytest.mark.asyncio
    async def test_error_status(self) -> None:
        client = _client_returning(_probe_response(503))
        checker = UpdateChecker(PROBE_URL, loaded_build_timestamp=1000, client=client)

        assert not await checker.check_for_update()

    @pytest.mark.asyncio
    async def test_malformed_payload(self) -> None:
        client = _client_returning(_probe_response(200, {"version": "v2.1.0"}))
        checker = UpdateChecker(PROBE_URL, loaded_build_timestamp=1000, client=client)

        assert not await checker.check_for_update()

    @pytest.mark.asyncio
    async def test_network_failure(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        client.get = AsyncMock(side_effect=httpx.ConnectError("offline"))
        checker = UpdateChecker(PROBE_URL, loaded_build_timestamp=1000, client=client)

        assert not await checker.check_for_update()


class TestUpdatePoller:
    @pytest.mark.asyncio
    async def test_poll_shows_toast(self, sample_releases: list[Release]) -> None:
        page = load_page(render_page(sample_releases))
        checker = MagicMock(spec=UpdateChecker)
        checker.check_for_update = AsyncMock(return_value=True)
        poller = UpdatePoller(checker, page.controls, ManualScheduler())

        assert page.soup.find(id="toast").has_attr("hidden")
        assert await poller.poll_once()
        assert not page.soup.find(id="toast").has_attr("hidden")

        poller.dismiss()
        assert page.soup.find(id="toast").has_attr("hidden")

    @pytest.mark.asyncio
    async def test_no_update_keeps_toast_hidden(self, sample_releases: list[Release]) -> None:
        page = load_page(render_page(sample_releases))
        checker = MagicMock(spec=UpdateChecker)
        checker.check_for_update = AsyncMock(return_value=False)
        poller = UpdatePoller(checker, page.controls, ManualScheduler())

        assert not await poller.poll_once()
        assert page.soup.find(id="toast").has_attr("hidden")

    @pytest.mark.asyncio
    async def test_ticks_on_interval(self, sample_releases: list[Release]) -> None:
        page = load_page(render_page(sample_releases))
        checker = MagicMock(spec=UpdateChecker)
        checker.check_for_update = AsyncMock(return_value=False)
        scheduler = ManualScheduler()
        poller = UpdatePoller(checker, page.controls, scheduler, interval_seconds=120)

        poller.start()
        scheduler.advance(119_999)
        assert scheduler.pending_count == 1

        scheduler.advance(1)
        # the check runs as a task on the current loop; let it finish
        await poller._in_flight
        checker.check_for_update.assert_awaited_once()
        assert scheduler.pending_count == 1

        poller.stop()
        assert scheduler.pending_count == 0

    @pytest.mark.asyncio
    async def test_failed_tick_is_logged(self) -> None:
        controls = MagicMock()
        controls.show_update_toast.side_effect = RuntimeError("toast missing")
        checker = MagicMock(spec=UpdateChecker)
        checker.check_for_update = AsyncMock(return_value=True)
        scheduler = ManualScheduler()
        poller = UpdatePoller(checker, controls, scheduler, interval_seconds=1)

        with patch("changelog_browser.update_check.logger") as mock_logger:
            poller.start()
            scheduler.advance(1000)
            task = poller._in_flight
            assert task is not None
            await asyncio.wait([task])
            # done callbacks are scheduled with call_soon
            await asyncio.sleep(0)

        mock_logger.warning.assert_called_once()
        assert "toast missing" in mock_logger.warning.call_args.args[0]
        poller.stop()
