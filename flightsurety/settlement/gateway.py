"""
Payout gateway: the outward side of pay().

The ledger hands a (recipient, amount) pair to the gateway while the pay()
transaction is still open. A gateway signals failure by returning False or by
raising; either way the ledger aborts the call and the passenger balance
stays untouched.
"""

from dataclasses import dataclass
from typing import List, Protocol

from flightsurety.core.identity import Identity


class PayoutGateway(Protocol):

    def transfer(self, recipient: Identity, amount: int) -> bool:
        ...


@dataclass
class Payout:
    recipient: Identity
    amount:    int


class RecordingPayoutGateway:
    """
    In-memory gateway that records every successful payout.

    Set fail_transfers to simulate a rejected transfer.
    """

    def __init__(self, fail_transfers: bool = False):
        self.fail_transfers = fail_transfers
        self.payouts: List[Payout] = []

    def transfer(self, recipient: Identity, amount: int) -> bool:
        if self.fail_transfers:
            return False
        self.payouts.append(Payout(recipient, amount))
        return True

    def total_paid_to(self, recipient: Identity) -> int:
        return sum(p.amount for p in self.payouts if p.recipient == recipient)
