"""
Airline registry for FlightSurety.

Admission rules:
    - While fewer than founding_threshold airlines are registered, a new
      airline is Registered immediately and counted.
    - After that, a new airline starts PendingApproval and needs
      floor(total_registered_airlines / 2) votes from active airlines,
      fixed at registration time.
    - An airline is active once it is Registered AND funded.

Approval by vote does not increase total_registered_airlines; only founding
registrations are counted.
"""

import logging

from flightsurety.core.exceptions import InsufficientFee, SelfVote
from flightsurety.core.identity import Identity, IdentityLike
from flightsurety.core.models import (
    Airline,
    AirlineState,
    AirlineStatus,
    EventType,
    require_amount,
)
from flightsurety.ledger.store import LedgerStore
from flightsurety.policy.access import AccessGuard

logger = logging.getLogger(__name__)


class AirlineRegistry:
    """Consortium membership: registration, funding and peer approval."""

    def __init__(self, store: LedgerStore, guard: AccessGuard):
        self.store = store
        self.guard = guard

    def register_airline(
        self,
        name: str,
        identity: IdentityLike,
        requestor: IdentityLike,
    ) -> AirlineStatus:
        """
        Register (or re-register) an airline on behalf of an active member.

        Any existing record for identity is replaced, not merged.
        """
        identity = Identity.parse(identity)
        requestor = Identity.parse(requestor)

        with self.store.transaction("register_airline") as tx:
            state = tx.state
            self.guard.require_operational(state)
            self.guard.require_active(state, requestor)

            if state.total_registered_airlines < state.founding_threshold:
                airline = Airline(name=str(name), state=AirlineState.REGISTERED)
                state.total_registered_airlines += 1
            else:
                airline = Airline(
                    name=str(name),
                    state=AirlineState.PENDING_APPROVAL,
                    min_required_votes=state.required_votes(),
                )
            state.airlines[identity] = airline

            tx.emit(EventType.AIRLINE_REGISTERED, {
                "airline":            str(identity),
                "name":               airline.name,
                "state":              airline.state.name,
                "min_required_votes": airline.min_required_votes,
                "requestor":          str(requestor),
            })
            return AirlineStatus.of(airline)

    def fund_airline(self, identity: IdentityLike, amount: int) -> AirlineStatus:
        """
        Record a membership payment.

        The first payment must cover the membership fee. Once funded, any
        further payment only grows the balance.
        """
        identity = Identity.parse(identity)
        amount = require_amount(amount)

        with self.store.transaction("fund_airline") as tx:
            state = tx.state
            self.guard.require_operational(state)
            airline = state.airlines.setdefault(identity, Airline())
            if not airline.is_funded and amount < state.membership_fee:
                raise InsufficientFee(
                    "Funding is below the membership fee",
                    {"amount": amount, "membership_fee": state.membership_fee},
                )

            old_balance = airline.balance
            airline.balance += amount
            airline.is_funded = True
            state.contract_balance += amount

            tx.emit(EventType.AIRLINE_FUNDED, {
                "airline":     str(identity),
                "old_balance": str(old_balance),
                "new_balance": str(airline.balance),
            })
            return AirlineStatus.of(airline)

    def approve_airline(
        self,
        candidate: IdentityLike,
        requestor: IdentityLike,
    ) -> AirlineStatus:
        """Cast one approval vote from an active airline for a candidate."""
        candidate = Identity.parse(candidate)
        requestor = Identity.parse(requestor)

        with self.store.transaction("approve_airline") as tx:
            state = tx.state
            self.guard.require_operational(state)
            self.guard.require_active(state, requestor)
            if candidate == requestor:
                raise SelfVote(
                    "Airline cannot vote for itself",
                    {"airline": candidate},
                )

            airline = state.airlines.setdefault(candidate, Airline())
            airline.positive_received_votes += 1
            if airline.positive_received_votes >= airline.min_required_votes:
                airline.state = AirlineState.REGISTERED

            tx.emit(EventType.AIRLINE_VOTED, {
                "airline":                 str(candidate),
                "voter":                   str(requestor),
                "positive_received_votes": airline.positive_received_votes,
                "min_required_votes":      airline.min_required_votes,
                "state":                   airline.state.name,
            })

        if airline.state == AirlineState.REGISTERED:
            logger.debug("Airline %s is registered after %d vote(s)",
                         candidate, airline.positive_received_votes)
        return AirlineStatus.of(airline)

    def fetch_airline_status(self, identity: IdentityLike) -> AirlineStatus:
        identity = Identity.parse(identity)

        def project(state):
            airline = state.airlines.get(identity)
            if airline is None:
                return AirlineStatus.empty()
            return AirlineStatus.of(airline)

        return self.store.read(project)

    def get_required_votes(self) -> int:
        return self.store.read(lambda s: s.required_votes())

    def get_total_registered_airlines(self) -> int:
        return self.store.read(lambda s: s.total_registered_airlines)
