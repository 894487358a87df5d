"""
flightsurety/__init__.py

FlightSurety: airline consortium registry and passenger insurance escrow.

Airlines join a consortium (founding members automatically, later members by
peer vote), fund their membership, and passengers buy per-flight cover that
is credited and paid out on claims. Every call is all-or-nothing and every
committed call is recorded in a signed, hash-chained audit stream.
"""

__version__ = "0.1.0"

from flightsurety.core.exceptions import (
    AccessError,
    AuditError,
    BalanceUnderflow,
    ConfigError,
    FlightSuretyError,
    FundingError,
    InsufficientFee,
    NotActiveMember,
    NotOperational,
    NotOwner,
    SelfVote,
    SettlementError,
    TransferFailed,
    ValidationError,
)
from flightsurety.core.identity import Identity
from flightsurety.core.models import (
    AirlineState,
    AirlineStatus,
    EventType,
    FlightStatus,
    PassengerStatus,
)
from flightsurety.core.crypto import Ed25519KeyManager
from flightsurety.core.replay import AuditReplay, AuditSummary, AuditViolation
from flightsurety.runtime import FirstAirline, FlightSuretyService, LedgerConfig
from flightsurety.settlement.gateway import PayoutGateway, RecordingPayoutGateway

__all__ = [
    # Service
    "FlightSuretyService",
    "LedgerConfig",
    "FirstAirline",
    "PayoutGateway",
    "RecordingPayoutGateway",
    "Ed25519KeyManager",
    "AuditReplay",
    "AuditSummary",
    "AuditViolation",
    # Types
    "Identity",
    "AirlineState",
    "AirlineStatus",
    "PassengerStatus",
    "FlightStatus",
    "EventType",
    # Errors
    "FlightSuretyError",
    "AccessError",
    "NotOwner",
    "NotOperational",
    "NotActiveMember",
    "SelfVote",
    "FundingError",
    "InsufficientFee",
    "SettlementError",
    "TransferFailed",
    "BalanceUnderflow",
    "ValidationError",
    "ConfigError",
    "AuditError",
]
