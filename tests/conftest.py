"""Pytest configuration and fixtures."""

import os
from typing import Optional

import httpx
import pytest
import pytest_asyncio

# Set test environment
os.environ["TURNKEY_ORGANIZATION_ID"] = "test-org"
os.environ["TURNKEY_BASE_URL"] = "https://api.turnkey.test"
os.environ["DEBUG"] = "true"

from turnkey_signer.activity.client import ActivityClient
from turnkey_signer.activity.poller import PollConfig

ORGANIZATION_ID = "test-org"
BASE_URL = "https://api.turnkey.test"

# P-256 API key used to stamp test requests
API_PRIVATE_KEY = "c9afa9d845ba75166b5c215767b1d6934e50c3db36e89b127b8a622b120f6721"

# Fast polling for tests; production defaults are 1s / 30s
TEST_POLL_CONFIG = PollConfig(interval=0.01, timeout=0.5)


class RecordingStamper:
    """Stamper that records every body it is asked to stamp."""

    def __init__(self):
        self.bodies: list[bytes] = []

    def stamp(self, body: bytes) -> str:
        self.bodies.append(body)
        return f"stamp-{len(self.bodies)}"


def activity_json(
    activity_id: str = "act-1",
    status: str = "ACTIVITY_STATUS_PENDING",
    result: Optional[dict] = None,
) -> dict:
    """Build a service activity envelope."""
    activity = {
        "id": activity_id,
        "organizationId": ORGANIZATION_ID,
        "status": status,
        "type": "ACTIVITY_TYPE_SIGN_RAW_PAYLOAD",
    }
    if result is not None:
        activity["result"] = result
    return {"activity": activity}


@pytest.fixture
def stamper() -> RecordingStamper:
    return RecordingStamper()


@pytest_asyncio.fixture
async def make_client(stamper):
    """Factory for clients whose HTTP traffic goes to ``handler``."""
    clients = []

    def _make(handler, poll_config: PollConfig = TEST_POLL_CONFIG) -> ActivityClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(http_client)
        return ActivityClient(
            ORGANIZATION_ID,
            stamper,
            BASE_URL,
            poll_config=poll_config,
            http_client=http_client,
        )

    yield _make

    for client in clients:
        await client.aclose()
