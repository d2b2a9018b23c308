"""Tests for the snapshot polling client."""

import httpx
import pytest

from pipeline_dashboard.domain.enums import CachePolicy
from pipeline_dashboard.services.polling import (
    ACTIVE_PIPELINE_PATH,
    PollingConfig,
    PollState,
    SnapshotPoller,
    StaleRead,
)

SNAPSHOT = {"active": [{"id": "1", "stage": "video_creation"}], "scheduled": [], "is_running": True}


def _poller(handler) -> SnapshotPoller:
    client = httpx.AsyncClient(base_url="http://dashboard.test", transport=httpx.MockTransport(handler))
    return SnapshotPoller("http://dashboard.test", client=client)


def test_polling_config_defaults() -> None:
    assert PollingConfig.summary().poll_interval_ms == 1000
    assert PollingConfig.detail().poll_interval_ms == 5000
    assert PollingConfig.summary().cache_policy is CachePolicy.NO_STORE
    assert PollingConfig(poll_interval_ms=250).interval_seconds == 0.25


@pytest.mark.parametrize("interval", [0, -5])
def test_polling_config_rejects_bad_interval(interval: int) -> None:
    with pytest.raises(ValueError):
        PollingConfig(poll_interval_ms=interval)


def test_polling_config_rejects_caching() -> None:
    with pytest.raises(ValueError):
        PollingConfig(poll_interval_ms=1000, cache_policy="max-age=60")


@pytest.mark.asyncio
async def test_poll_once_sends_no_store() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=SNAPSHOT)

    async with _poller(handler) as poller:
        snapshot = await poller.poll_once(PollingConfig.summary())

    assert snapshot == SNAPSHOT
    assert seen[0].url.path == ACTIVE_PIPELINE_PATH
    assert seen[0].headers["Cache-Control"] == "no-store"
    assert not poller.state.is_stale


@pytest.mark.asyncio
async def test_failed_poll_keeps_last_good_snapshot() -> None:
    responses = iter(
        [
            httpx.Response(200, json=SNAPSHOT),
            httpx.Response(503, json={"detail": "unavailable"}),
            httpx.Response(200, json={"active": [], "scheduled": [], "is_running": False}),
        ]
    )

    async with _poller(lambda request: next(responses)) as poller:
        config = PollingConfig.summary()
        await poller.poll_once(config)

        with pytest.raises(StaleRead) as exc_info:
            await poller.poll_once(config)
        assert exc_info.value.last_snapshot == SNAPSHOT
        assert poller.state.snapshot == SNAPSHOT
        assert poller.state.is_stale
        assert poller.state.consecutive_failures == 1

        recovered = await poller.poll_once(config)

    assert recovered["is_running"] is False
    assert not poller.state.is_stale
    assert poller.state.consecutive_failures == 0


@pytest.mark.asyncio
async def test_malformed_body_is_a_stale_read() -> None:
    async with _poller(lambda request: httpx.Response(200, json={"active": []})) as poller:
        with pytest.raises(StaleRead):
            await poller.poll_once(PollingConfig.summary())

    assert poller.state.snapshot is None


@pytest.mark.asyncio
async def test_connection_error_is_a_stale_read() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with _poller(handler) as poller:
        with pytest.raises(StaleRead):
            await poller.poll_once(PollingConfig.summary())


@pytest.mark.asyncio
async def test_run_retries_each_interval_without_backoff() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls % 2:
            return httpx.Response(500)
        return httpx.Response(200, json=SNAPSHOT)

    updates: list[bool] = []

    async def on_update(state: PollState) -> None:
        updates.append(state.is_stale)

    async with _poller(handler) as poller:
        state = await poller.run(PollingConfig(poll_interval_ms=1), on_update=on_update, max_polls=4)

    assert calls == 4
    assert updates == [True, False, True, False]
    assert state.polls == 4
    assert state.snapshot == SNAPSHOT
