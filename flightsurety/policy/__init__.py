"""
FlightSurety Policy - access control

Operational flag, owner check and the active-member gate.
"""

from flightsurety.policy.access import AccessGuard

__all__ = ["AccessGuard"]
