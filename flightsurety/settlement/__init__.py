"""
FlightSurety Settlement

Credits insurees of a flight and pays out passenger balances through a
PayoutGateway.
"""

from flightsurety.settlement.engine import ClaimsSettlement
from flightsurety.settlement.gateway import Payout, PayoutGateway, RecordingPayoutGateway

__all__ = ["ClaimsSettlement", "Payout", "PayoutGateway", "RecordingPayoutGateway"]
