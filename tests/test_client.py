"""Tests for activity submission and the end-to-end signing calls."""

import json

import httpx
import pytest

from conftest import API_PRIVATE_KEY, BASE_URL, ORGANIZATION_ID, activity_json
from turnkey_signer.activity.client import ActivityClient
from turnkey_signer.activity.models import ActivityStatus
from turnkey_signer.activity.requests import (
    build_sign_raw_payload_request,
    build_sign_transaction_request,
)
from turnkey_signer.config import Settings
from turnkey_signer.errors import (
    ActivityFailedError,
    ApiError,
    ConfigurationError,
    DecodeError,
    MissingParameterError,
)

SIGNED_TX = "0x02f86c0180843b9aca00"
RAW_RESULT = {"r": "aa" * 32, "s": "bb" * 32, "v": "28"}


class TestSubmitActivity:
    """Tests for stamped submission."""

    @pytest.mark.asyncio
    async def test_stamp_covers_exact_body(self, make_client, stamper):
        """The stamped bytes are the bytes on the wire."""
        sent = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return httpx.Response(200, json=activity_json(status="ACTIVITY_STATUS_CREATED"))

        client = make_client(handler)
        request = build_sign_transaction_request(ORGANIZATION_ID, "0x02", private_key_id="pk-1")

        activity = await client.submit_activity(request)

        assert activity.id == "act-1"
        assert activity.state == ActivityStatus.CREATED
        assert len(sent) == 1
        assert stamper.bodies == [sent[0].content]
        assert sent[0].content == request.to_json_bytes()

    @pytest.mark.asyncio
    async def test_headers_and_path(self, make_client):
        sent = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return httpx.Response(200, json=activity_json())

        client = make_client(handler)
        await client.submit_activity(
            build_sign_transaction_request(ORGANIZATION_ID, "0x02", wallet_id="w-1")
        )

        request = sent[0]
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/public/v1/submit/sign_transaction"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["Accept"] == "application/json"
        assert request.headers["X-Stamp"] == "stamp-1"

    @pytest.mark.asyncio
    async def test_raw_payload_uses_its_own_path(self, make_client):
        sent = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return httpx.Response(200, json=activity_json())

        client = make_client(handler)
        await client.submit_activity(
            build_sign_raw_payload_request(ORGANIZATION_ID, "0xabc", "00" * 32)
        )

        assert sent[0].url.path == "/public/v1/submit/sign_raw_payload"

    @pytest.mark.asyncio
    async def test_http_error_carries_raw_body(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text='{"message":"bad stamp"}')

        client = make_client(handler)

        with pytest.raises(ApiError) as exc_info:
            await client.submit_activity(
                build_sign_transaction_request(ORGANIZATION_ID, "0x02", private_key_id="pk")
            )

        assert exc_info.value.code == "HTTP_ERROR"
        assert exc_info.value.status_code == 401
        assert '{"message":"bad stamp"}' in exc_info.value.message
        assert str(exc_info.value).startswith("API error [HTTP_ERROR]: ")

    @pytest.mark.asyncio
    async def test_invalid_utf8_response(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"\xff\xfe{}")

        client = make_client(handler)

        with pytest.raises(DecodeError, match="UTF-8"):
            await client.submit_activity(
                build_sign_transaction_request(ORGANIZATION_ID, "0x02", private_key_id="pk")
            )

    @pytest.mark.asyncio
    async def test_invalid_json_response(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"not json")

        client = make_client(handler)

        with pytest.raises(DecodeError, match="JSON"):
            await client.submit_activity(
                build_sign_transaction_request(ORGANIZATION_ID, "0x02", private_key_id="pk")
            )

    @pytest.mark.asyncio
    async def test_unexpected_shape(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"activity": {"status": "ACTIVITY_STATUS_CREATED"}})

        client = make_client(handler)

        with pytest.raises(DecodeError):
            await client.submit_activity(
                build_sign_transaction_request(ORGANIZATION_ID, "0x02", private_key_id="pk")
            )

    @pytest.mark.asyncio
    async def test_accepts_snake_case_organization(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"activity": {
                "id": "act-2",
                "organization_id": ORGANIZATION_ID,
                "status": "ACTIVITY_STATUS_PENDING",
            }})

        client = make_client(handler)
        activity = await client.submit_activity(
            build_sign_transaction_request(ORGANIZATION_ID, "0x02", private_key_id="pk")
        )

        assert activity.organization_id == ORGANIZATION_ID


class TestSigningCalls:
    """Tests for submit -> poll -> decode."""

    @pytest.mark.asyncio
    async def test_sign_transaction(self, make_client):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append((request.method, request.url.path))
            if request.method == "POST":
                return httpx.Response(200, json=activity_json(status="ACTIVITY_STATUS_PENDING"))
            assert request.url.params["activityId"] == "act-1"
            assert request.url.params["organizationId"] == ORGANIZATION_ID
            return httpx.Response(200, json=activity_json(
                status="ACTIVITY_STATUS_COMPLETED",
                result={"signTransactionResult": {"signedTransaction": SIGNED_TX}},
            ))

        client = make_client(handler)
        result = await client.sign_transaction("0x02", private_key_id="pk-1")

        assert result.signed_transaction == SIGNED_TX
        assert calls == [
            ("POST", "/public/v1/submit/sign_transaction"),
            ("GET", "/public/v1/query/get_activity"),
        ]

    @pytest.mark.asyncio
    async def test_missing_signer_never_hits_network(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("network must not be used")

        client = make_client(handler)

        with pytest.raises(MissingParameterError):
            await client.sign_transaction("0x02")

    @pytest.mark.asyncio
    async def test_sign_raw_payload(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                body = json.loads(request.content)
                assert body["parameters"]["signWith"] == "0xabc"
                return httpx.Response(200, json=activity_json())
            return httpx.Response(200, json=activity_json(
                status="ACTIVITY_STATUS_COMPLETED",
                result={"signRawPayloadResult": RAW_RESULT},
            ))

        client = make_client(handler)
        result = await client.sign_raw_payload("0xabc", "00" * 32)

        assert (result.r, result.s, result.v) == ("aa" * 32, "bb" * 32, "28")

    @pytest.mark.asyncio
    async def test_completed_on_submission_skips_polling(self, make_client):
        methods = []

        def handler(request: httpx.Request) -> httpx.Response:
            methods.append(request.method)
            return httpx.Response(200, json=activity_json(
                status="ACTIVITY_STATUS_COMPLETED",
                result={"signRawPayloadResult": RAW_RESULT},
            ))

        client = make_client(handler)
        await client.sign_raw_payload("0xabc", "00" * 32)

        assert methods == ["POST"]

    @pytest.mark.asyncio
    async def test_failed_on_submission(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=activity_json(
                status="ACTIVITY_STATUS_FAILED", result={"error": "policy denied"},
            ))

        client = make_client(handler)

        with pytest.raises(ActivityFailedError) as exc_info:
            await client.sign_transaction("0x02", wallet_id="w-1")

        assert exc_info.value.message == "policy denied"

    @pytest.mark.asyncio
    async def test_missing_result_key(self, make_client):
        """A completed activity without the expected payload is an API error."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(200, json=activity_json())
            return httpx.Response(200, json=activity_json(
                status="ACTIVITY_STATUS_COMPLETED",
                result={"signRawPayloadResult": RAW_RESULT},
            ))

        client = make_client(handler)

        with pytest.raises(ApiError) as exc_info:
            await client.sign_transaction("0x02", private_key_id="pk-1")

        assert exc_info.value.code == "MISSING_RESULT"


class TestClientSetup:
    """Tests for client construction."""

    def test_requires_organization(self, stamper):
        with pytest.raises(ConfigurationError):
            ActivityClient("", stamper)

    def test_from_settings_requires_api_key(self):
        settings = Settings(turnkey_organization_id="org", turnkey_api_private_key=None)

        with pytest.raises(ConfigurationError, match="TURNKEY_API_PRIVATE_KEY"):
            ActivityClient.from_settings(settings)

    @pytest.mark.asyncio
    async def test_from_settings(self):
        settings = Settings(
            turnkey_organization_id="org",
            turnkey_api_private_key=API_PRIVATE_KEY,
            turnkey_base_url="https://example.test/",
            activity_poll_interval=0.25,
            activity_timeout=5,
            stamp_header="X-Custom-Stamp",
        )

        async with ActivityClient.from_settings(settings) as client:
            assert client.base_url == "https://example.test"
            assert client.poll_config.interval == 0.25
            assert client.poll_config.timeout == 5
            assert client.stamp_header == "X-Custom-Stamp"
