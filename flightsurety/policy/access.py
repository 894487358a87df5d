"""
Access guard for FlightSurety.

Check order inside every entry point:
    Operational → Owner / Active member → entry-point specific checks

The require_* helpers take the transaction's working state and raise; they
never mutate. The two admin entry points, set_operating_status and
set_testing_mode, open their own transactions.
"""

import logging

from flightsurety.core.exceptions import NotActiveMember, NotOperational, NotOwner
from flightsurety.core.identity import Identity, IdentityLike
from flightsurety.core.models import EventType, LedgerState
from flightsurety.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


class AccessGuard:

    def __init__(self, store: LedgerStore):
        self.store = store

    # ── Checks ───────────────────────────────────────────────

    @staticmethod
    def require_operational(state: LedgerState) -> None:
        if not state.operational:
            raise NotOperational("Contract is currently not operational")

    @staticmethod
    def require_owner(state: LedgerState, caller: Identity) -> None:
        if caller != state.owner:
            raise NotOwner(
                "Caller is not contract owner",
                {"caller": caller},
            )

    @staticmethod
    def is_active_in(state: LedgerState, identity: Identity) -> bool:
        airline = state.airlines.get(identity)
        return airline is not None and airline.is_active

    @classmethod
    def require_active(cls, state: LedgerState, identity: Identity) -> None:
        """
        Fail unless identity is an active airline.

        Waived while no airline has been registered yet, so the very first
        airline can be admitted without a sponsor.
        """
        if state.total_registered_airlines == 0:
            return
        if not cls.is_active_in(state, identity):
            raise NotActiveMember(
                "Caller is not an active airline",
                {"caller": identity},
            )

    # ── Entry points ─────────────────────────────────────────

    def is_operational(self) -> bool:
        return self.store.read(lambda s: s.operational)

    def is_active(self, identity: IdentityLike) -> bool:
        identity = Identity.parse(identity)
        return self.store.read(lambda s: self.is_active_in(s, identity))

    def set_operating_status(self, mode: bool, caller: IdentityLike) -> None:
        """
        Owner only. Deliberately skips the operational check so a disabled
        ledger can be switched back on.
        """
        caller = Identity.parse(caller)
        with self.store.transaction("set_operating_status") as tx:
            self.require_owner(tx.state, caller)
            tx.state.operational = bool(mode)
            tx.emit(EventType.OPERATING_STATUS_CHANGED, {
                "operational": tx.state.operational,
                "caller":      str(caller),
            })
        logger.info("Operating status set to %s by %s", bool(mode), caller)

    def is_testing_mode(self) -> bool:
        """
        Testing mode is a stored flag only. No operation reads it or behaves
        differently when it is set; it exists so external test tooling can
        toggle and observe it.
        """
        return self.store.read(lambda s: s.testing_mode)

    def set_testing_mode(self, mode: bool) -> None:
        """Set the inert testing-mode flag. Requires operational."""
        with self.store.transaction("set_testing_mode") as tx:
            self.require_operational(tx.state)
            tx.state.testing_mode = bool(mode)
            tx.emit(EventType.TESTING_MODE_CHANGED, {
                "testing_mode": tx.state.testing_mode,
            })
