"""Wire models for signing activities.

Field aliases are the service's JSON field names and are part of the wire
contract. Requests are serialized with ``by_alias=True, exclude_none=True`` so
unset optional identifiers are omitted instead of being sent as null.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

ACTIVITY_TYPE_SIGN_TRANSACTION = "ACTIVITY_TYPE_SIGN_TRANSACTION"
ACTIVITY_TYPE_SIGN_RAW_PAYLOAD = "ACTIVITY_TYPE_SIGN_RAW_PAYLOAD"

SUBMIT_SIGN_TRANSACTION_PATH = "/public/v1/submit/sign_transaction"
SUBMIT_SIGN_RAW_PAYLOAD_PATH = "/public/v1/submit/sign_raw_payload"
GET_ACTIVITY_PATH = "/public/v1/query/get_activity"


class ActivityStatus(str, Enum):
    """Activity status as seen by the client."""
    CREATED = "ACTIVITY_STATUS_CREATED"
    PENDING = "ACTIVITY_STATUS_PENDING"
    COMPLETED = "ACTIVITY_STATUS_COMPLETED"
    FAILED = "ACTIVITY_STATUS_FAILED"

    @classmethod
    def from_wire(cls, value: str) -> "ActivityStatus":
        """Map a wire status string onto a client status.

        Only COMPLETED and FAILED are terminal. Unknown values (consensus
        needed, rejected, anything added later) are treated as pending.
        """
        for status in cls:
            if status.value == value:
                return status
        return cls.PENDING

    @property
    def is_terminal(self) -> bool:
        return self in (ActivityStatus.COMPLETED, ActivityStatus.FAILED)

    @property
    def rank(self) -> int:
        """Position in the forward-only lifecycle."""
        if self is ActivityStatus.CREATED:
            return 0
        if self is ActivityStatus.PENDING:
            return 1
        return 2


class ResultKind(str, Enum):
    """Supported operations, valued by the key of their result payload."""
    SIGN_TRANSACTION = "signTransactionResult"
    SIGN_RAW_PAYLOAD = "signRawPayloadResult"


class PayloadEncoding(str, Enum):
    """How the service should interpret a raw payload."""
    HEXADECIMAL = "PAYLOAD_ENCODING_HEXADECIMAL"
    TEXT_UTF8 = "PAYLOAD_ENCODING_TEXT_UTF8"


class HashFunction(str, Enum):
    """Hash the service applies to a raw payload before signing."""
    NO_OP = "HASH_FUNCTION_NO_OP"
    SHA256 = "HASH_FUNCTION_SHA256"
    KECCAK256 = "HASH_FUNCTION_KECCAK256"
    NOT_APPLICABLE = "HASH_FUNCTION_NOT_APPLICABLE"


# ======================
# Signer references
# ======================

@dataclass(frozen=True)
class ByPrivateKey:
    """Sign with a specific private key."""
    private_key_id: str


@dataclass(frozen=True)
class ByWallet:
    """Sign with a wallet."""
    wallet_id: str


SignerReference = Union[ByPrivateKey, ByWallet]


# ======================
# Requests
# ======================

class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SignTransactionParameters(_WireModel):
    """Parameters of a transaction signing activity."""

    private_key_id: Optional[str] = Field(default=None, alias="privateKeyId")
    wallet_id: Optional[str] = Field(default=None, alias="walletId")
    unsigned_transaction: str = Field(..., alias="unsignedTransaction")

    @model_validator(mode="after")
    def check_exactly_one_signer(self) -> "SignTransactionParameters":
        if bool(self.private_key_id) == bool(self.wallet_id):
            raise ValueError("exactly one of privateKeyId or walletId must be set")
        return self

    @property
    def signer(self) -> SignerReference:
        if self.private_key_id:
            return ByPrivateKey(self.private_key_id)
        return ByWallet(self.wallet_id)


class SignRawPayloadParameters(_WireModel):
    """Parameters of a raw payload signing activity."""

    sign_with: str = Field(..., alias="signWith")
    payload: str
    encoding: PayloadEncoding
    hash_function: HashFunction = Field(..., alias="hashFunction")


class SigningRequest(_WireModel):
    """Common envelope of every signing activity request."""

    submit_path: ClassVar[str]
    result_kind: ClassVar[ResultKind]

    activity_type: str = Field(..., alias="type")
    organization_id: str = Field(..., alias="organizationId")
    timestamp_ms: str = Field(..., alias="timestampMs")

    def to_json_bytes(self) -> bytes:
        """Serialize to the exact bytes sent (and stamped)."""
        return self.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")


class SignTransactionRequest(SigningRequest):
    submit_path: ClassVar[str] = SUBMIT_SIGN_TRANSACTION_PATH
    result_kind: ClassVar[ResultKind] = ResultKind.SIGN_TRANSACTION

    parameters: SignTransactionParameters


class SignRawPayloadRequest(SigningRequest):
    submit_path: ClassVar[str] = SUBMIT_SIGN_RAW_PAYLOAD_PATH
    result_kind: ClassVar[ResultKind] = ResultKind.SIGN_RAW_PAYLOAD

    parameters: SignRawPayloadParameters


# ======================
# Results
# ======================

class SignTransactionResult(_WireModel):
    """Result payload of a transaction signing activity."""

    signed_transaction: str = Field(..., alias="signedTransaction")


class SignRawPayloadResult(_WireModel):
    """Result payload of a raw payload signing activity.

    Untrusted wire strings: r and s are hex, v is decimal.
    """

    r: str
    s: str
    v: str


RawSignatureFields = SignRawPayloadResult


class ActivityResult(BaseModel):
    """Keyed result payload of an activity plus an optional error string.

    Operation payloads are kept as raw JSON under their wire keys and are
    only validated by the result decoder for the kind that was requested.
    """

    model_config = ConfigDict(extra="allow")

    error: Optional[str] = None

    @property
    def payloads(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class Activity(BaseModel):
    """The service's view of one signing activity."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    organization_id: str = Field(
        ...,
        validation_alias=AliasChoices("organizationId", "organization_id"),
    )
    status: str
    result: Optional[ActivityResult] = None

    @property
    def state(self) -> ActivityStatus:
        return ActivityStatus.from_wire(self.status)


class ActivityResponse(BaseModel):
    """Envelope returned by the submit and get_activity endpoints."""

    model_config = ConfigDict(extra="ignore")

    activity: Activity
