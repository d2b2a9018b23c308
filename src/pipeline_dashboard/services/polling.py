"""Polling client for the dashboard snapshot endpoints.

Views poll on a fixed interval with no client-side caching: each poll asks
for a fresh snapshot and a failed poll keeps showing the last good one,
flagged as stale, until the next interval succeeds.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import httpx

from pipeline_dashboard.config import settings
from pipeline_dashboard.domain.enums import CachePolicy
from pipeline_dashboard.logging import get_logger

logger = get_logger(__name__)

ACTIVE_PIPELINE_PATH = "/api/v1/dashboard/active-pipeline"
SNAPSHOT_KEYS = ("active", "scheduled", "is_running")


@dataclass(frozen=True)
class PollingConfig:
    """Per-view polling parameters."""

    poll_interval_ms: int
    cache_policy: CachePolicy = CachePolicy.NO_STORE

    def __post_init__(self) -> None:
        if self.poll_interval_ms <= 0:
            raise ValueError(f"poll_interval_ms must be positive, got {self.poll_interval_ms}")
        policy = CachePolicy(self.cache_policy)
        if policy is not CachePolicy.NO_STORE:
            raise ValueError(f"Unsupported cache policy: {self.cache_policy}")
        object.__setattr__(self, "cache_policy", policy)

    @classmethod
    def summary(cls) -> "PollingConfig":
        """Interval for the compact pipeline summary."""
        return cls(poll_interval_ms=settings.summary_poll_interval_ms)

    @classmethod
    def detail(cls) -> "PollingConfig":
        """Interval for the full pipeline detail view."""
        return cls(poll_interval_ms=settings.detail_poll_interval_ms)

    @property
    def interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000

    def headers(self) -> dict[str, str]:
        return {"Cache-Control": self.cache_policy.value, "Pragma": "no-cache"}

    def to_dict(self) -> dict[str, Any]:
        return {"poll_interval_ms": self.poll_interval_ms, "cache_policy": self.cache_policy.value}


class StaleRead(Exception):
    """A poll failed; the view keeps its last good snapshot."""

    def __init__(self, message: str, last_snapshot: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.last_snapshot = last_snapshot


@dataclass
class PollState:
    """What a view currently shows."""

    snapshot: dict[str, Any] | None = None
    last_success_at: datetime | None = None
    error: str | None = None
    consecutive_failures: int = 0
    polls: int = field(default=0)

    @property
    def is_stale(self) -> bool:
        return self.error is not None


class SnapshotPoller:
    """Fetches the pipeline snapshot over HTTP on a fixed interval."""

    def __init__(
        self,
        base_url: str,
        path: str = ACTIVE_PIPELINE_PATH,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.path = path
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self.state = PollState()

    async def __aenter__(self) -> "SnapshotPoller":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def poll_once(self, config: PollingConfig) -> dict[str, Any]:
        """Fetch one fresh snapshot.

        Raises:
            StaleRead: If the fetch failed or returned a malformed body. The
                previous snapshot stays in ``state`` and on the exception.
        """
        self.state.polls += 1
        try:
            response = await self.client.get(self.path, headers=config.headers())
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, dict) or any(key not in payload for key in SNAPSHOT_KEYS):
                raise ValueError("Snapshot response is missing required fields")
        except (httpx.HTTPError, ValueError) as e:
            self.state.error = str(e) or type(e).__name__
            self.state.consecutive_failures += 1
            logger.warning(
                "snapshot_poll_failed",
                path=self.path,
                error=self.state.error,
                consecutive_failures=self.state.consecutive_failures,
                has_snapshot=self.state.snapshot is not None,
            )
            raise StaleRead(self.state.error, self.state.snapshot) from e

        self.state.snapshot = payload
        self.state.last_success_at = datetime.now(UTC)
        self.state.error = None
        self.state.consecutive_failures = 0
        return payload

    async def run(
        self,
        config: PollingConfig,
        on_update: Callable[[PollState], Awaitable[None] | None] | None = None,
        max_polls: int | None = None,
    ) -> PollState:
        """Poll until cancelled (or ``max_polls`` is reached).

        Failures are retried at the next interval with no backoff.
        """
        logger.info("snapshot_polling_started", path=self.path, **config.to_dict())
        count = 0
        while max_polls is None or count < max_polls:
            try:
                await self.poll_once(config)
            except StaleRead:
                # Already recorded on self.state for on_update.
                pass
            count += 1

            if on_update is not None:
                result = on_update(self.state)
                if asyncio.iscoroutine(result):
                    await result

            if max_polls is not None and count >= max_polls:
                break
            await asyncio.sleep(config.interval_seconds)

        return self.state
