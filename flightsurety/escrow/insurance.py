"""
Insurance escrow for FlightSurety.

Collects passenger premiums per flight. Each purchase takes one participant
slot, even for a passenger who already bought cover on the same flight; the
paid amount is aggregated per passenger.
"""

from typing import Dict

from flightsurety.core.identity import Identity, IdentityLike
from flightsurety.core.models import (
    EventType,
    FlightInsurance,
    FlightStatus,
    Passenger,
    PassengerStatus,
    require_amount,
)
from flightsurety.ledger.store import LedgerStore
from flightsurety.policy.access import AccessGuard


class InsuranceEscrow:

    def __init__(self, store: LedgerStore, guard: AccessGuard):
        self.store = store
        self.guard = guard

    def buy(self, passenger: IdentityLike, flight_id: str, amount: int) -> int:
        """
        Record a premium of amount for passenger on flight_id.

        Returns the flight's participant count after the purchase.
        """
        passenger = Identity.parse(passenger)
        amount = require_amount(amount)
        flight_id = str(flight_id)

        with self.store.transaction("buy") as tx:
            state = tx.state
            self.guard.require_operational(state)

            insuree = state.passengers.setdefault(passenger, Passenger())
            old_balance = insuree.balance
            insuree.balance += amount
            state.contract_balance += amount

            flight = state.flights.setdefault(flight_id, FlightInsurance())
            if flight.participant_count < len(flight.participants):
                flight.participants[flight.participant_count] = passenger
            else:
                flight.participants.append(passenger)
            flight.paid_amounts[passenger] = flight.paid_amounts.get(passenger, 0) + amount
            flight.participant_count += 1

            tx.emit(EventType.INSURANCE_PURCHASED, {
                "passenger":         str(passenger),
                "flight_id":         flight_id,
                "amount":            str(amount),
                "old_balance":       str(old_balance),
                "new_balance":       str(insuree.balance),
                "participant_count": flight.participant_count,
            })
            return flight.participant_count

    def fetch_passenger_status(self, passenger: IdentityLike) -> PassengerStatus:
        passenger = Identity.parse(passenger)

        def project(state):
            insuree = state.passengers.get(passenger) or Passenger()
            return PassengerStatus(insuree.balance, insuree.withdrawable_balance)

        return self.store.read(project)

    def fetch_flight_status(self, flight_id: str) -> FlightStatus:
        flight_id = str(flight_id)

        def project(state):
            flight = state.flights.get(flight_id) or FlightInsurance()
            paid: Dict[Identity, int] = dict(flight.paid_amounts)
            return FlightStatus(
                flight.live_participants(),
                paid,
                flight.participant_count,
            )

        return self.store.read(project)
