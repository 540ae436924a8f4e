"""HTTP client for the signing activity API.

Flow for every signing call:
1. Build a typed request (see requests.py)
2. Serialize it once, stamp the exact bytes, POST them
3. Poll the activity until it reaches a terminal status
4. Decode the payload for the requested operation
"""

import json
import logging
from typing import Optional, Union

import httpx
from pydantic import ValidationError

from turnkey_signer.activity.decoder import decode_result
from turnkey_signer.activity.models import (
    GET_ACTIVITY_PATH,
    Activity,
    ActivityResponse,
    ActivityStatus,
    HashFunction,
    PayloadEncoding,
    SigningRequest,
    SignRawPayloadResult,
    SignTransactionResult,
)
from turnkey_signer.activity.poller import ActivityPoller, PollConfig
from turnkey_signer.activity.requests import (
    build_sign_raw_payload_request,
    build_sign_transaction_request,
)
from turnkey_signer.activity.stamper import ApiKeyStamper, Stamper
from turnkey_signer.config import TURNKEY_API_BASE_URL, Settings, get_settings
from turnkey_signer.errors import ActivityFailedError, ApiError, ConfigurationError, DecodeError

logger = logging.getLogger(__name__)


class ActivityClient:
    """Submits signing activities and waits for their results.

    One instance holds one httpx connection pool and may serve many
    concurrent signing calls.
    """

    def __init__(
        self,
        organization_id: str,
        stamper: Stamper,
        base_url: str = TURNKEY_API_BASE_URL,
        *,
        poll_config: Optional[PollConfig] = None,
        stamp_header: str = "X-Stamp",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize client.

        Args:
            organization_id: Organization that owns the signing keys
            stamper: Produces the authentication stamp for request bodies
            base_url: Service base URL
            poll_config: Poll interval/timeout (defaults to production values)
            stamp_header: Header name carrying the stamp
            timeout: Per-request HTTP timeout in seconds
            http_client: Externally owned client (not closed by aclose)
        """
        if not organization_id:
            raise ConfigurationError("organization_id must be provided")

        self.organization_id = organization_id
        self.base_url = base_url.rstrip("/")
        self.poll_config = poll_config or PollConfig()
        self.stamp_header = stamp_header
        self._stamper = stamper
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **kwargs) -> "ActivityClient":
        """Build a client from environment configuration."""
        settings = settings or get_settings()
        if not settings.turnkey_api_private_key:
            raise ConfigurationError("TURNKEY_API_PRIVATE_KEY environment variable not set")

        stamper = ApiKeyStamper(
            settings.turnkey_api_private_key,
            settings.turnkey_api_public_key,
        )
        return cls(
            settings.turnkey_organization_id,
            stamper,
            settings.turnkey_base_url,
            poll_config=PollConfig.from_settings(settings),
            stamp_header=settings.stamp_header,
            timeout=settings.http_timeout,
            **kwargs,
        )

    async def __aenter__(self) -> "ActivityClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ======================
    # Signing operations
    # ======================

    async def sign_transaction(
        self,
        unsigned_transaction: str,
        *,
        private_key_id: Optional[str] = None,
        wallet_id: Optional[str] = None,
    ) -> SignTransactionResult:
        """Sign a transaction with a private key or a wallet.

        Args:
            unsigned_transaction: Unsigned transaction as hex
            private_key_id: Private key to sign with
            wallet_id: Wallet to sign with

        Returns:
            SignTransactionResult with the signed transaction hex

        Raises:
            MissingParameterError: If neither (or both) identifiers are given
        """
        request = build_sign_transaction_request(
            self.organization_id,
            unsigned_transaction,
            private_key_id=private_key_id,
            wallet_id=wallet_id,
        )
        return await self.execute(request)

    async def sign_raw_payload(
        self,
        sign_with: str,
        payload: str,
        *,
        encoding: Union[PayloadEncoding, str] = PayloadEncoding.HEXADECIMAL,
        hash_function: Union[HashFunction, str] = HashFunction.NO_OP,
    ) -> SignRawPayloadResult:
        """Sign a raw payload (message or pre-hashed digest).

        Returns:
            SignRawPayloadResult with the raw r/s/v strings
        """
        request = build_sign_raw_payload_request(
            self.organization_id,
            sign_with,
            payload,
            encoding=encoding,
            hash_function=hash_function,
        )
        return await self.execute(request)

    async def execute(self, request: SigningRequest):
        """Submit a request, wait for completion and decode its result."""
        activity = await self.submit_activity(request)

        if activity.state == ActivityStatus.FAILED:
            error = (activity.result.error if activity.result else None) or "Unknown error"
            raise ActivityFailedError(error)
        if not activity.state.is_terminal:
            activity = await self.wait_for_activity(activity.id, initial=activity.state)

        return decode_result(activity, request.result_kind)

    # ======================
    # Activity API
    # ======================

    async def submit_activity(self, request: SigningRequest) -> Activity:
        """Stamp and submit a request.

        Raises:
            ApiError: With code HTTP_ERROR for non-2xx responses
            DecodeError: If the response body cannot be parsed
        """
        body = request.to_json_bytes()
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            self.stamp_header: self._stamper.stamp(body),
        }

        response = await self._client.post(
            f"{self.base_url}{request.submit_path}",
            content=body,
            headers=headers,
        )
        activity = self._parse_activity(response)

        logger.info(
            f"Submitted {request.activity_type} as activity {activity.id} ({activity.status})"
        )
        return activity

    async def get_activity(self, activity_id: str) -> Activity:
        """Query the current state of an activity."""
        headers = {
            "Content-Type": "application/json",
            self.stamp_header: self._stamper.stamp(b""),
        }
        response = await self._client.get(
            f"{self.base_url}{GET_ACTIVITY_PATH}",
            params={"activityId": activity_id, "organizationId": self.organization_id},
            headers=headers,
        )
        return self._parse_activity(response)

    async def wait_for_activity(
        self,
        activity_id: str,
        initial: ActivityStatus = ActivityStatus.CREATED,
    ) -> Activity:
        """Poll an activity until it completes (see ActivityPoller)."""
        poller = ActivityPoller(self.get_activity, self.poll_config)
        return await poller.wait(activity_id, initial=initial)

    def _parse_activity(self, response: httpx.Response) -> Activity:
        """Parse an activity envelope, raising ApiError for non-2xx responses."""
        if not response.is_success:
            raise ApiError(
                ApiError.HTTP_ERROR,
                f"HTTP error: {response.text}",
                status_code=response.status_code,
            )

        try:
            data = json.loads(response.content.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise DecodeError(f"Response is not valid UTF-8: {e}") from e
        except json.JSONDecodeError as e:
            raise DecodeError(f"Response is not valid JSON: {e}") from e

        try:
            return ActivityResponse.model_validate(data).activity
        except ValidationError as e:
            raise DecodeError(f"Unexpected activity response: {e}") from e
