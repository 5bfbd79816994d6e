"""All shared types, enums, and constants. Everything imports from here."""

import base64
import binascii
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


# ── Constants ──────────────────────────────────────────────────────────

# Execute method that creates a program instead of calling one. The
# dispatcher and validator branch on it explicitly.
PROGRAM_CREATE = "program_create"

PROGRAM_ID_LEN = 32
ADDRESS_LEN = 33
MAX_UINT64 = 2**64 - 1
UNLIMITED_UNITS = MAX_UINT64  # read-only calls are never charged

STEP_REF_PREFIX = "step_"


# ── Enums ──────────────────────────────────────────────────────────────

class Endpoint(str, Enum):
    KEY = "key"             # named key management
    EXECUTE = "execute"     # state changing program create / call
    READONLY = "readonly"   # program call, not charged


class ParamType(str, Enum):
    STRING = "string"
    ID = "id"
    KEY_ED25519 = "ed25519"
    KEY_SECP256K1 = "secp256k1"
    UINT64 = "u64"
    BOOL = "bool"


# ── Program IDs ────────────────────────────────────────────────────────

def program_id_to_str(program_id: bytes) -> str:
    """Text form of a program or call ID (lowercase hex)."""
    return program_id.hex()


def parse_program_id(value: bytes) -> Optional[bytes]:
    """Return the 32 ID bytes if ``value`` is a well-formed ID, else None.

    Accepts the raw 32 bytes or their 64 character hex text form.
    """
    if len(value) == PROGRAM_ID_LEN:
        return bytes(value)
    if len(value) == PROGRAM_ID_LEN * 2:
        try:
            return bytes.fromhex(value.decode("ascii"))
        except (UnicodeDecodeError, ValueError):
            return None
    return None


def _decode_b64(v):
    if isinstance(v, str):
        try:
            return base64.b64decode(v, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"value is not valid base64: {exc}") from exc
    return v


# ── Core Data Shapes ───────────────────────────────────────────────────

class Parameter(BaseModel):
    """One typed step parameter. ``value`` travels as base64 on the wire."""
    type: ParamType
    value: bytes = b""

    @field_validator("value", mode="before")
    @classmethod
    def decode_value(cls, v):
        return _decode_b64(v)

    @field_serializer("value")
    def encode_value(self, v: bytes) -> str:
        return base64.b64encode(v).decode()

    @property
    def text(self) -> str:
        """Value as UTF-8 text (names, paths). Raises UnicodeDecodeError on invalid bytes."""
        return self.value.decode("utf-8")


class Step(BaseModel):
    """One declarative operation in a plan."""
    model_config = ConfigDict(populate_by_name=True)

    endpoint: Endpoint
    method: str = ""
    max_units: int = Field(default=0, ge=0, le=MAX_UINT64, alias="maxUnits")
    params: list[Parameter] = Field(default_factory=list)
    caller_key: Optional[str] = Field(default=None, alias="callerKey")

    @classmethod
    def create_key(cls, name: str) -> "Step":
        """Step that creates the named Ed25519 key."""
        return cls(
            endpoint=Endpoint.KEY,
            method="key_create",
            max_units=0,
            params=[Parameter(type=ParamType.KEY_ED25519, value=name.encode())],
        )

    @classmethod
    def create_program(cls, path: str) -> "Step":
        """Step that loads the program module at ``path``."""
        return cls(
            endpoint=Endpoint.EXECUTE,
            method=PROGRAM_CREATE,
            max_units=0,
            params=[Parameter(type=ParamType.STRING, value=str(path).encode())],
        )


class StepResult(BaseModel):
    """Success payload of a Response. Empty when the step failed."""
    id: Optional[str] = None                # generated program / call ID
    msg: Optional[str] = None
    timestamp: int = 0                      # unix seconds at completion
    response: Optional[bytes] = None        # single interpreter result
    balance: Optional[int] = None

    @field_validator("response", mode="before")
    @classmethod
    def decode_response(cls, v):
        return _decode_b64(v)

    @field_serializer("response")
    def encode_response(self, v: Optional[bytes]) -> Optional[str]:
        if v is None:
            return None
        return base64.b64encode(v).decode()


class Response(BaseModel):
    """Per-step result. Exactly one Response is produced for every dispatched step."""
    id: int                                 # step index
    endpoint: Optional[Endpoint] = None
    method: str = ""
    error: Optional[str] = None
    error_kind: Optional[str] = None
    result: StepResult = Field(default_factory=StepResult)

    @property
    def ok(self) -> bool:
        return self.error is None

    def set_msg(self, msg: str) -> None:
        self.result.msg = msg

    def set_tx_id(self, tx_id: str) -> None:
        self.result.id = tx_id

    def get_tx_id(self) -> Optional[str]:
        return self.result.id

    def set_response(self, payload: bytes) -> None:
        self.result.response = payload

    def set_balance(self, balance: int) -> None:
        self.result.balance = balance

    def set_timestamp(self, timestamp: int) -> None:
        self.result.timestamp = timestamp

    def set_error(self, error: Exception) -> None:
        """Record a failure and drop any partially populated success fields."""
        self.error = str(error)
        kind = getattr(error, "kind", None)
        self.error_kind = kind.value if kind is not None else type(error).__name__
        self.result = StepResult(timestamp=self.result.timestamp)


class CallResult(BaseModel):
    """What the program interpreter returns for one invocation."""
    call_id: bytes
    results: list[Optional[bytes]] = Field(default_factory=list)
    balance: int = 0
