"""
FlightSurety Runtime - configuration and the service facade.
"""

from flightsurety.runtime.config import FirstAirline, LedgerConfig
from flightsurety.runtime.service import FlightSuretyService

__all__ = [
    "FirstAirline",
    "FlightSuretyService",
    "LedgerConfig",
]
