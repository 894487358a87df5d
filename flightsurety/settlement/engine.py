"""
Claims settlement for FlightSurety.

credit_insurees() walks a flight's live participant slots in insertion order.
For each slot it:
    1. takes the passenger's paid amount for the flight and zeroes it
    2. subtracts that amount from the passenger's balance
    3. multiplies the passenger's existing withdrawable balance by 1.5

The multiplier applies to withdrawable_balance, not to the premium just
taken off balance, and pay() draws from balance rather than
withdrawable_balance. Both are kept as-is until the intended semantics are
confirmed.
"""

import logging

from flightsurety.core.exceptions import BalanceUnderflow, TransferFailed
from flightsurety.core.identity import Identity, IdentityLike
from flightsurety.core.models import (
    CREDIT_MULTIPLIER_DEN,
    CREDIT_MULTIPLIER_NUM,
    EventType,
    Passenger,
)
from flightsurety.ledger.store import LedgerStore
from flightsurety.policy.access import AccessGuard
from flightsurety.settlement.gateway import PayoutGateway

logger = logging.getLogger(__name__)


class ClaimsSettlement:

    def __init__(
        self,
        store: LedgerStore,
        guard: AccessGuard,
        gateway: PayoutGateway,
    ):
        """
        Args:
            store:   Ledger store holding passenger and flight records
            guard:   Access guard for the operational check
            gateway: Where pay() sends money
        """
        self.store = store
        self.guard = guard
        self.gateway = gateway

    def credit_insurees(self, flight_id: str) -> int:
        """
        Credit every insuree of flight_id and reset its participant count.

        Returns the number of participant slots processed.
        """
        flight_id = str(flight_id)

        with self.store.transaction("credit_insurees") as tx:
            state = tx.state
            self.guard.require_operational(state)

            flight = state.flights.get(flight_id)
            if flight is None:
                return 0

            batch_count = flight.participant_count
            for passenger_id in flight.live_participants():
                amount = flight.paid_amounts.get(passenger_id, 0)
                flight.paid_amounts[passenger_id] = 0

                insuree = state.passengers.setdefault(passenger_id, Passenger())
                if amount > insuree.balance:
                    raise BalanceUnderflow(
                        "Credit exceeds passenger balance",
                        {
                            "passenger": passenger_id,
                            "amount":    amount,
                            "balance":   insuree.balance,
                        },
                    )
                insuree.balance -= amount
                insuree.withdrawable_balance = (
                    insuree.withdrawable_balance
                    * CREDIT_MULTIPLIER_NUM
                    // CREDIT_MULTIPLIER_DEN
                )

                tx.emit(EventType.INSUREE_CREDITED, {
                    "passenger":            str(passenger_id),
                    "flight_id":            flight_id,
                    "withdrawable_balance": str(insuree.withdrawable_balance),
                    "balance":              str(insuree.balance),
                    "batch_count":          batch_count,
                })

            flight.participant_count = 0
            return batch_count

    def pay(self, identity: IdentityLike) -> int:
        """
        Pay out the passenger's balance and zero it.

        The committed balance is only zeroed after the gateway confirms the
        transfer. Once it has, the zeroed balance commits even if the audit
        write then fails, so a retry cannot pay twice. Returns the amount paid.
        """
        identity = Identity.parse(identity)

        with self.store.transaction("pay") as tx:
            state = tx.state
            self.guard.require_operational(state)

            insuree = state.passengers.get(identity) or Passenger()
            amount = insuree.balance
            insuree.balance = 0
            state.contract_balance -= amount

            try:
                ok = self.gateway.transfer(identity, amount)
            except Exception as exc:
                raise TransferFailed(
                    "Payout transfer failed",
                    {"recipient": identity, "amount": amount, "error": exc},
                ) from exc
            if not ok:
                raise TransferFailed(
                    "Payout transfer was rejected",
                    {"recipient": identity, "amount": amount},
                )
            tx.confirm()

            tx.emit(EventType.INSUREE_PAID, {
                "passenger":   str(identity),
                "amount":      str(amount),
                "new_balance": str(insuree.balance),
            })

        logger.info("Paid %d to %s", amount, identity)
        return amount

    def get_contract_balance(self) -> int:
        return self.store.read(lambda s: s.contract_balance)
