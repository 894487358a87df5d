"""
FlightSurety service facade.

Composes the store, the audit stream and the four components, and exposes
every ledger entry point in one place. Construct it with from_config(); the
store object is created here and passed to each component, there is no
process-wide instance.
"""

import logging
from typing import Optional

from flightsurety.core.crypto import Ed25519KeyManager
from flightsurety.core.emitter import AuditStream
from flightsurety.core.identity import IdentityLike
from flightsurety.core.models import (
    AirlineStatus,
    FlightStatus,
    LedgerState,
    PassengerStatus,
)
from flightsurety.escrow.insurance import InsuranceEscrow
from flightsurety.ledger.store import LedgerStore
from flightsurety.policy.access import AccessGuard
from flightsurety.registry.airlines import AirlineRegistry
from flightsurety.runtime.config import LedgerConfig
from flightsurety.settlement.engine import ClaimsSettlement
from flightsurety.settlement.gateway import PayoutGateway, RecordingPayoutGateway

logger = logging.getLogger(__name__)


class FlightSuretyService:
    """Airline consortium registry and insurance escrow."""

    def __init__(
        self,
        store: LedgerStore,
        gateway: PayoutGateway,
    ):
        self.store = store
        self.gateway = gateway
        self.guard = AccessGuard(store)
        self.registry = AirlineRegistry(store, self.guard)
        self.escrow = InsuranceEscrow(store, self.guard)
        self.settlement = ClaimsSettlement(store, self.guard, gateway)

    @classmethod
    def from_config(
        cls,
        config: LedgerConfig,
        gateway: Optional[PayoutGateway] = None,
        key_manager: Optional[Ed25519KeyManager] = None,
    ) -> "FlightSuretyService":
        """
        Deploy a ledger.

        The audit key is taken from key_manager, else loaded from (or created
        at) config.audit_key_path, else generated in memory. If the config
        names a first airline it is registered with the owner as requestor,
        before a disabled config switches the ledger off.
        """
        if key_manager is None:
            if config.audit_key_path is not None:
                key_manager = Ed25519KeyManager.load_or_generate(config.audit_key_path)
            else:
                key_manager = Ed25519KeyManager.generate()

        audit = AuditStream(
            key_manager=key_manager,
            source_id=config.source_id,
            ledger_path=str(config.audit_path) if config.audit_path else None,
        )
        state = LedgerState(
            owner=config.owner,
            founding_threshold=config.founding_threshold,
            membership_fee=config.membership_fee,
        )
        service = cls(LedgerStore(state, audit), gateway or RecordingPayoutGateway())

        if config.first_airline is not None:
            service.register_airline(
                config.first_airline.name,
                config.first_airline.identity,
                config.owner,
            )
        if not config.operational:
            service.set_operating_status(False, config.owner)

        logger.info(
            "Ledger deployed: owner=%s founding_threshold=%d membership_fee=%d",
            config.owner, config.founding_threshold, config.membership_fee,
        )
        return service

    @property
    def audit(self) -> AuditStream:
        return self.store.audit

    # ── AccessGuard ──────────────────────────────────────────

    def is_operational(self) -> bool:
        return self.guard.is_operational()

    def set_operating_status(self, mode: bool, caller: IdentityLike) -> None:
        self.guard.set_operating_status(mode, caller)

    def is_active(self, identity: IdentityLike) -> bool:
        return self.guard.is_active(identity)

    def is_testing_mode(self) -> bool:
        return self.guard.is_testing_mode()

    def set_testing_mode(self, mode: bool) -> None:
        self.guard.set_testing_mode(mode)

    # ── AirlineRegistry ──────────────────────────────────────

    def register_airline(
        self, name: str, identity: IdentityLike, requestor: IdentityLike
    ) -> AirlineStatus:
        return self.registry.register_airline(name, identity, requestor)

    def fetch_airline_status(self, identity: IdentityLike) -> AirlineStatus:
        return self.registry.fetch_airline_status(identity)

    def fund_airline(self, identity: IdentityLike, amount: int) -> AirlineStatus:
        return self.registry.fund_airline(identity, amount)

    def approve_airline(
        self, candidate: IdentityLike, requestor: IdentityLike
    ) -> AirlineStatus:
        return self.registry.approve_airline(candidate, requestor)

    def get_required_votes(self) -> int:
        return self.registry.get_required_votes()

    def get_total_registered_airlines(self) -> int:
        return self.registry.get_total_registered_airlines()

    # ── InsuranceEscrow ──────────────────────────────────────

    def buy(self, passenger: IdentityLike, flight_id: str, amount: int) -> int:
        return self.escrow.buy(passenger, flight_id, amount)

    def fetch_passenger_status(self, passenger: IdentityLike) -> PassengerStatus:
        return self.escrow.fetch_passenger_status(passenger)

    def fetch_flight_status(self, flight_id: str) -> FlightStatus:
        return self.escrow.fetch_flight_status(flight_id)

    # ── ClaimsSettlement ─────────────────────────────────────

    def credit_insurees(self, flight_id: str) -> int:
        return self.settlement.credit_insurees(flight_id)

    def pay(self, identity: IdentityLike) -> int:
        return self.settlement.pay(identity)

    def get_contract_balance(self) -> int:
        return self.settlement.get_contract_balance()
