"""
flightsurety/core/models.py

FlightSurety Data Model

Two groups of types live here:

LEDGER RECORDS
    Airline, Passenger, FlightInsurance and LedgerState, the single explicit
    store object that every component receives. Records are mutated only
    through a store transaction (see flightsurety/ledger/store.py).

AUDIT EVENTS
    AuditEvent is the only entry type of the append-only audit stream.

    Signing:  bytes_signed = canonicalize(event.to_signing_dict()), Ed25519,
              base64url without padding
    Chain:    causal_hash  = SHA-256(canonicalize(prev.to_signing_dict()))
              first event  = GENESIS_HASH ("0" * 64)
    Vocabulary: event_type must be an EventType constant.

Amounts are non-negative integers in the smallest currency unit. In audit
payloads they travel as decimal strings so that JCS never sees a number
wider than an IEEE double.
"""

import re
import uuid
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, NamedTuple, Optional, Set

from flightsurety.core.canonical import canonical_hash, canonicalize
from flightsurety.core.exceptions import ValidationError
from flightsurety.core.identity import Identity
from flightsurety.core.time import audit_timestamp


AUDIT_VERSION = "1.0"
GENESIS_HASH  = "0" * 64

# Fixed by the consortium charter; overridable only at initialization.
FOUNDING_THRESHOLD = 4
MEMBERSHIP_FEE     = 10 * 10 ** 18

# Claim payout multiplier, expressed as a fraction for integer arithmetic.
CREDIT_MULTIPLIER_NUM = 15
CREDIT_MULTIPLIER_DEN = 10

_PUBLIC_KEY_HEX_LENGTH = 64

_TIMESTAMP_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$"
)


def require_amount(amount: Any, name: str = "amount") -> int:
    """Return amount if it is a non-negative int, else raise ValidationError."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise ValidationError(
            f"{name} must be a non-negative integer",
            {name: amount},
        )
    return amount


# ─────────────────────────────────────────────────────────────
# Ledger records
# ─────────────────────────────────────────────────────────────

class AirlineState(IntEnum):
    PENDING_APPROVAL = 0
    REGISTERED       = 1


@dataclass
class Airline:
    name:                    str          = ""
    state:                   AirlineState = AirlineState.PENDING_APPROVAL
    is_funded:               bool         = False
    min_required_votes:      int          = 0
    positive_received_votes: int          = 0
    balance:                 int          = 0

    @property
    def is_active(self) -> bool:
        """Registered and funded."""
        return self.state == AirlineState.REGISTERED and self.is_funded


@dataclass
class Passenger:
    balance:              int = 0
    withdrawable_balance: int = 0


@dataclass
class FlightInsurance:
    """
    Premium bookkeeping for one flight.

    participants holds one slot per purchase in insertion order. Only the
    first participant_count slots are live; slots beyond it are left over
    from before the last credit and get overwritten by later purchases.
    """
    participants:      List[Identity]      = field(default_factory=list)
    paid_amounts:      Dict[Identity, int] = field(default_factory=dict)
    participant_count: int                 = 0

    def live_participants(self) -> List[Identity]:
        return self.participants[:self.participant_count]


class AirlineStatus(NamedTuple):
    name:                    str
    state:                   AirlineState
    is_funded:               bool
    min_required_votes:      int
    positive_received_votes: int
    balance:                 int

    @classmethod
    def of(cls, airline: Airline) -> "AirlineStatus":
        return cls(
            airline.name,
            airline.state,
            airline.is_funded,
            airline.min_required_votes,
            airline.positive_received_votes,
            airline.balance,
        )

    @classmethod
    def empty(cls) -> "AirlineStatus":
        return cls.of(Airline())


class PassengerStatus(NamedTuple):
    balance:              int
    withdrawable_balance: int


class FlightStatus(NamedTuple):
    participants:      List[Identity]
    paid_amounts:      Dict[Identity, int]
    participant_count: int


@dataclass
class LedgerState:
    """Everything the ledger knows. One instance per deployment."""

    owner:                     Identity
    founding_threshold:        int  = FOUNDING_THRESHOLD
    membership_fee:            int  = MEMBERSHIP_FEE
    operational:               bool = True
    testing_mode:              bool = False
    total_registered_airlines: int  = 0
    contract_balance:          int  = 0
    airlines:   Dict[Identity, Airline]         = field(default_factory=dict)
    passengers: Dict[Identity, Passenger]       = field(default_factory=dict)
    flights:    Dict[str, FlightInsurance]      = field(default_factory=dict)

    def required_votes(self) -> int:
        """Votes a newly registered airline needs, given the current counter."""
        if self.total_registered_airlines < self.founding_threshold:
            return 0
        return self.total_registered_airlines // 2


# ─────────────────────────────────────────────────────────────
# Audit vocabulary
# ─────────────────────────────────────────────────────────────

class EventType:
    """The only valid values for AuditEvent.event_type."""
    OPERATING_STATUS_CHANGED = "operating_status_changed"
    TESTING_MODE_CHANGED     = "testing_mode_changed"
    AIRLINE_REGISTERED       = "airline_registered"
    AIRLINE_FUNDED           = "airline_funded"
    AIRLINE_VOTED            = "airline_voted"
    INSURANCE_PURCHASED      = "insurance_purchased"
    INSUREE_CREDITED         = "insuree_credited"
    INSUREE_PAID             = "insuree_paid"


_VALID_EVENT_TYPES: Set[str] = {
    EventType.OPERATING_STATUS_CHANGED,
    EventType.TESTING_MODE_CHANGED,
    EventType.AIRLINE_REGISTERED,
    EventType.AIRLINE_FUNDED,
    EventType.AIRLINE_VOTED,
    EventType.INSURANCE_PURCHASED,
    EventType.INSUREE_CREDITED,
    EventType.INSUREE_PAID,
}


@dataclass
class SchemaValidationResult:
    """bool(result) is True iff valid."""
    valid:  bool
    errors: List[str]

    def __bool__(self) -> bool:
        return self.valid


# ─────────────────────────────────────────────────────────────
# AuditEvent
# ─────────────────────────────────────────────────────────────

@dataclass
class AuditEvent:
    """One signed, hash-chained entry of the audit stream."""

    audit_version:     str
    event_id:          str
    event_type:        str
    source_id:         str
    signer_public_key: str
    sequence:          int
    timestamp:         str
    causal_hash:       str
    payload:           Dict[str, Any]
    signature:         Optional[str] = None

    @classmethod
    def create(
        cls,
        event_type:        str,
        source_id:         str,
        signer_public_key: str,
        sequence:          int,
        payload:           Dict[str, Any],
        prev:              Optional["AuditEvent"] = None,
    ) -> "AuditEvent":
        """
        Create an unsigned event with the correct causal_hash.

        Call .sign(key_manager) immediately after.
        """
        if event_type not in _VALID_EVENT_TYPES:
            raise ValueError(
                f"Invalid event_type '{event_type}'. "
                f"Valid: {sorted(_VALID_EVENT_TYPES)}"
            )
        if not isinstance(payload, dict):
            raise TypeError(
                f"payload must be dict, got {type(payload).__name__}"
            )
        if not isinstance(sequence, int) or sequence < 0:
            raise ValueError(
                f"sequence must be non-negative int, got {sequence!r}"
            )

        return cls(
            audit_version=     AUDIT_VERSION,
            event_id=          f"evt-{uuid.uuid4()}",
            event_type=        event_type,
            source_id=         source_id,
            signer_public_key= signer_public_key,
            sequence=          sequence,
            timestamp=         audit_timestamp(),
            causal_hash=       cls.causal_hash_of(prev),
            payload=           payload,
            signature=         None,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditEvent":
        """
        Deserialize from a JSONL line dict.
        Trusts persisted data; callers must call validate_schema().
        """
        return cls(
            audit_version=     data["audit_version"],
            event_id=          data["event_id"],
            event_type=        data["event_type"],
            source_id=         data["source_id"],
            signer_public_key= data["signer_public_key"],
            sequence=          data["sequence"],
            timestamp=         data["timestamp"],
            causal_hash=       data["causal_hash"],
            payload=           data.get("payload", {}),
            signature=         data.get("signature"),
        )

    def validate_schema(self) -> SchemaValidationResult:
        errors: List[str] = []

        if self.audit_version != AUDIT_VERSION:
            errors.append(
                f"audit_version: expected '{AUDIT_VERSION}', got '{self.audit_version}'"
            )
        if self.event_type not in _VALID_EVENT_TYPES:
            errors.append(f"event_type '{self.event_type}' is not a known event type")
        if not isinstance(self.event_id, str) or not self.event_id.startswith("evt-"):
            errors.append(f"event_id must start with 'evt-', got {self.event_id!r}")
        if not isinstance(self.source_id, str) or not self.source_id:
            errors.append("source_id must be a non-empty string")
        if (
            not isinstance(self.signer_public_key, str)
            or len(self.signer_public_key) != _PUBLIC_KEY_HEX_LENGTH
        ):
            errors.append(
                f"signer_public_key must be {_PUBLIC_KEY_HEX_LENGTH} hex chars"
            )
        if not isinstance(self.sequence, int) or self.sequence < 0:
            errors.append(f"sequence must be non-negative int, got {self.sequence!r}")
        if not isinstance(self.timestamp, str) or not _TIMESTAMP_RE.match(self.timestamp):
            errors.append(f"timestamp {self.timestamp!r} is not YYYY-MM-DDTHH:MM:SS.mmmZ")
        if not isinstance(self.causal_hash, str) or len(self.causal_hash) != 64:
            errors.append("causal_hash must be 64 hex chars")
        if not isinstance(self.payload, dict):
            errors.append(f"payload must be dict, got {type(self.payload).__name__}")

        return SchemaValidationResult(valid=len(errors) == 0, errors=errors)

    def to_signing_dict(self) -> Dict[str, Any]:
        """All fields except the signature. Also the chain dict."""
        return {
            "audit_version":     self.audit_version,
            "causal_hash":       self.causal_hash,
            "event_id":          self.event_id,
            "event_type":        self.event_type,
            "payload":           self.payload,
            "sequence":          self.sequence,
            "signer_public_key": self.signer_public_key,
            "source_id":         self.source_id,
            "timestamp":         self.timestamp,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Full serialization including signature. JSONL persistence only."""
        d = self.to_signing_dict()
        d["signature"] = self.signature
        return d

    @staticmethod
    def causal_hash_of(prev: Optional["AuditEvent"]) -> str:
        if prev is None:
            return GENESIS_HASH
        return canonical_hash(prev.to_signing_dict())

    def sign(self, key_manager) -> "AuditEvent":
        """Sign in place. Returns self for chaining."""
        self.signature = key_manager.sign(canonicalize(self.to_signing_dict()))
        return self

    def verify_signature(self) -> bool:
        if not self.signature:
            return False

        from flightsurety.core.crypto import Ed25519KeyManager

        return Ed25519KeyManager.verify_detached(
            canonicalize(self.to_signing_dict()),
            self.signature,
            self.signer_public_key,
        )

    def verify_chain(self, prev: Optional["AuditEvent"]) -> bool:
        return self.causal_hash == self.causal_hash_of(prev)
