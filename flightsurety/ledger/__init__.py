"""
FlightSurety Ledger - transactional state store

All ledger mutations go through LedgerStore.transaction().
"""

from flightsurety.ledger.store import LedgerStore, Transaction

__all__ = ["LedgerStore", "Transaction"]
