"""Activity completion polling.

State machine:
    PENDING -> COMPLETED   (service reports ACTIVITY_STATUS_COMPLETED)
    PENDING -> FAILED      (service reports ACTIVITY_STATUS_FAILED)
    PENDING -> TIMED_OUT   (timeout elapsed before a terminal status)

HTTP-level query failures are retried until the timeout; only an explicit
FAILED status ends the wait early with an error. Each status query is bounded
by the time left, so a stalled query cannot hold the wait past its deadline.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import httpx

from turnkey_signer.activity.models import Activity, ActivityStatus
from turnkey_signer.config import Settings, get_settings
from turnkey_signer.errors import ActivityFailedError, ApiError

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_TIMEOUT = 30.0

ActivityFetcher = Callable[[str], Awaitable[Activity]]


@dataclass(frozen=True)
class PollConfig:
    """Polling cadence in seconds."""
    interval: float = DEFAULT_POLL_INTERVAL
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        if self.interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {self.interval}")
        if self.timeout <= 0:
            raise ValueError(f"Poll timeout must be positive, got {self.timeout}")

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PollConfig":
        settings = settings or get_settings()
        return cls(
            interval=settings.activity_poll_interval,
            timeout=settings.activity_timeout,
        )


class ActivityPoller:
    """Resolves an activity ID to a terminal activity within a time budget."""

    def __init__(self, fetch: ActivityFetcher, config: Optional[PollConfig] = None):
        """Initialize poller.

        Args:
            fetch: Coroutine function returning the current state of an activity
            config: Poll interval and timeout (defaults to production values)
        """
        self._fetch = fetch
        self.config = config or PollConfig()

    async def wait(
        self,
        activity_id: str,
        initial: ActivityStatus = ActivityStatus.CREATED,
    ) -> Activity:
        """Poll until the activity completes.

        Args:
            activity_id: Activity to wait for
            initial: Status already observed (e.g. at submission); polled
                statuses earlier in the lifecycle are ignored

        Returns:
            The completed activity

        Raises:
            ActivityFailedError: If the service reports the activity as failed
            ApiError: With code TIMEOUT if no terminal status arrives in time
        """
        deadline = time.monotonic() + self.config.timeout
        seen = initial
        attempts = 0

        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise self._timed_out(activity_id, attempts)

            attempts += 1
            try:
                activity = await asyncio.wait_for(self._query(activity_id), remaining)
            except asyncio.TimeoutError:
                raise self._timed_out(activity_id, attempts) from None

            if activity is not None:
                state = activity.state
                if state.rank < seen.rank:
                    logger.warning(
                        f"Activity {activity_id} reported {activity.status} after {seen.value}, ignoring"
                    )
                else:
                    seen = state
                    logger.debug(f"Activity {activity_id} status: {activity.status}")

                    if state == ActivityStatus.COMPLETED:
                        logger.info(f"Activity {activity_id} completed after {attempts} polls")
                        return activity

                    if state == ActivityStatus.FAILED:
                        error = activity.result.error if activity.result else None
                        error = error or "Unknown error"
                        logger.error(f"Activity {activity_id} failed: {error}")
                        raise ActivityFailedError(error)

            await asyncio.sleep(min(self.config.interval, max(deadline - time.monotonic(), 0)))

    async def _query(self, activity_id: str) -> Optional[Activity]:
        """Fetch the activity, or None if the query failed at the HTTP layer."""
        try:
            return await self._fetch(activity_id)
        except ApiError as e:
            if e.code != ApiError.HTTP_ERROR:
                raise
            logger.warning(f"Status query for activity {activity_id} failed, retrying: {e}")
        except httpx.TransportError as e:
            logger.warning(f"Status query for activity {activity_id} failed, retrying: {e!r}")
        return None

    def _timed_out(self, activity_id: str, attempts: int) -> ApiError:
        logger.warning(f"Activity {activity_id} timed out after {attempts} polls")
        return ApiError(ApiError.TIMEOUT, f"Activity {activity_id} timed out")
