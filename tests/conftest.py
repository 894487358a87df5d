"""
Shared fixtures for the FlightSurety test suite.

Every test gets a freshly deployed ledger with membership_fee=10, a recording
payout gateway and a generated audit key.
"""

import pytest

from flightsurety import (
    Ed25519KeyManager,
    FirstAirline,
    FlightSuretyService,
    Identity,
    LedgerConfig,
    RecordingPayoutGateway,
)


FEE = 10


def ident(n: int) -> Identity:
    """Deterministic test identity number n."""
    return Identity.parse(f"{n:040x}")


OWNER         = ident(0xA0)
FIRST_AIRLINE = ident(0xA1)
PASSENGER     = ident(0xB1)
PASSENGER_2   = ident(0xB2)


@pytest.fixture
def key():
    return Ed25519KeyManager.generate()


@pytest.fixture
def gateway():
    return RecordingPayoutGateway()


@pytest.fixture
def bare_service(key, gateway):
    """Deployed ledger with no airline registered yet."""
    config = LedgerConfig(owner=OWNER, membership_fee=FEE)
    return FlightSuretyService.from_config(config, gateway=gateway, key_manager=key)


@pytest.fixture
def service(key, gateway):
    """Deployed ledger whose first airline was registered at deployment."""
    config = LedgerConfig(
        owner=OWNER,
        membership_fee=FEE,
        first_airline=FirstAirline("Udacity Air", FIRST_AIRLINE),
    )
    return FlightSuretyService.from_config(config, gateway=gateway, key_manager=key)


@pytest.fixture
def founded(service):
    """
    Ledger with four funded founding airlines: FIRST_AIRLINE and ident(0xA2..0xA4).
    """
    service.fund_airline(FIRST_AIRLINE, FEE)
    for n in (0xA2, 0xA3, 0xA4):
        service.register_airline(f"Founder {n:x}", ident(n), FIRST_AIRLINE)
        service.fund_airline(ident(n), FEE)
    return service
