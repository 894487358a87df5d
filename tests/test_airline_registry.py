"""
tests/test_airline_registry.py

Consortium admission: founding registrations, funding, peer approval and
the status projection.
"""

import pytest

from flightsurety import (
    AirlineState,
    AirlineStatus,
    EventType,
    InsufficientFee,
    NotActiveMember,
    SelfVote,
    ValidationError,
)
from flightsurety.core.models import LedgerState

from conftest import FEE, FIRST_AIRLINE, OWNER, PASSENGER, ident


class TestFirstAirline:

    def test_first_airline_registered_at_deployment(self, service):
        status = service.fetch_airline_status(FIRST_AIRLINE)
        assert status == AirlineStatus("Udacity Air", AirlineState.REGISTERED, False, 0, 0, 0)
        assert service.get_total_registered_airlines() == 1

    def test_bootstrap_registration_needs_no_active_sponsor(self, bare_service):
        bare_service.register_airline("Solo", ident(1), PASSENGER)
        assert bare_service.fetch_airline_status(ident(1)).state == AirlineState.REGISTERED
        assert bare_service.get_total_registered_airlines() == 1

    def test_unfunded_airline_cannot_register_another(self, service):
        with pytest.raises(NotActiveMember):
            service.register_airline("Udacity #2", ident(2), FIRST_AIRLINE)
        assert service.fetch_airline_status(ident(2)).name == ""

    def test_funded_airline_can_register_another(self, service):
        service.fund_airline(FIRST_AIRLINE, FEE)
        status = service.register_airline("Udacity #3", ident(3), FIRST_AIRLINE)
        assert status.name == "Udacity #3"
        assert status.state == AirlineState.REGISTERED
        assert status.is_funded is False
        assert status.balance == 0


class TestFunding:

    def test_fund_then_fund_again(self, service):
        status = service.fund_airline(FIRST_AIRLINE, 10)
        assert status.is_funded is True
        assert status.balance == 10

        status = service.fund_airline(FIRST_AIRLINE, 5)
        assert status.is_funded is True
        assert status.balance == 15

    def test_funding_below_fee_rejected(self, service):
        with pytest.raises(InsufficientFee):
            service.fund_airline(FIRST_AIRLINE, FEE - 1)
        status = service.fetch_airline_status(FIRST_AIRLINE)
        assert status.is_funded is False
        assert status.balance == 0

    def test_top_up_below_fee_once_funded(self, service):
        service.fund_airline(FIRST_AIRLINE, FEE)
        status = service.fund_airline(FIRST_AIRLINE, 1)
        assert status.is_funded is True
        assert status.balance == FEE + 1
        assert service.get_contract_balance() == FEE + 1

    def test_rejected_first_payment_leaves_no_record(self, bare_service):
        with pytest.raises(InsufficientFee):
            bare_service.fund_airline(ident(7), FEE - 1)
        assert bare_service.fetch_airline_status(ident(7)).is_funded is False
        with pytest.raises(InsufficientFee):
            bare_service.fund_airline(ident(7), 1)

    def test_funding_increases_contract_balance(self, service):
        before = service.get_contract_balance()
        service.fund_airline(FIRST_AIRLINE, FEE)
        assert service.get_contract_balance() == before + FEE

    def test_funded_event_carries_old_and_new_balance(self, service):
        service.fund_airline(FIRST_AIRLINE, 10)
        service.fund_airline(FIRST_AIRLINE, 12)
        events = service.audit.events(EventType.AIRLINE_FUNDED)
        assert [(e.payload["old_balance"], e.payload["new_balance"]) for e in events] == [
            ("0", "10"),
            ("10", "22"),
        ]

    @pytest.mark.parametrize("amount", [-1, 1.5, "10", True])
    def test_invalid_amount_rejected(self, service, amount):
        with pytest.raises(ValidationError):
            service.fund_airline(FIRST_AIRLINE, amount)


class TestActivation:

    def test_registered_and_funded_is_active(self, service):
        assert service.is_active(FIRST_AIRLINE) is False
        service.fund_airline(FIRST_AIRLINE, FEE)
        assert service.is_active(FIRST_AIRLINE) is True

    def test_pending_and_funded_is_not_active(self, founded):
        founded.register_airline("Late", ident(5), FIRST_AIRLINE)
        founded.fund_airline(ident(5), FEE)
        status = founded.fetch_airline_status(ident(5))
        assert status.state == AirlineState.PENDING_APPROVAL
        assert status.is_funded is True
        assert founded.is_active(ident(5)) is False

    def test_unknown_identity_is_not_active(self, service):
        assert service.is_active(ident(999)) is False


class TestReRegistration:

    def test_re_registration_overwrites_record(self, service):
        service.fund_airline(FIRST_AIRLINE, FEE)
        service.register_airline("First name", ident(7), FIRST_AIRLINE)
        service.fund_airline(ident(7), FEE * 3)

        service.register_airline("Second name", ident(7), FIRST_AIRLINE)

        status = service.fetch_airline_status(ident(7))
        assert status == AirlineStatus("Second name", AirlineState.REGISTERED, False, 0, 0, 0)


class TestConsensus:

    def test_founders_fill_threshold(self, founded):
        assert founded.get_total_registered_airlines() == 4
        assert founded.get_required_votes() == 2

    def test_fifth_airline_needs_two_votes(self, founded):
        status = founded.register_airline("Udacity #5", ident(5), FIRST_AIRLINE)
        assert status == AirlineStatus("Udacity #5", AirlineState.PENDING_APPROVAL, False, 2, 0, 0)

        status = founded.approve_airline(ident(5), FIRST_AIRLINE)
        assert status.positive_received_votes == 1
        assert status.state == AirlineState.PENDING_APPROVAL

        status = founded.approve_airline(ident(5), ident(0xA2))
        assert status.positive_received_votes == 2
        assert status.state == AirlineState.REGISTERED

    def test_vote_approval_does_not_touch_counter(self, founded):
        founded.register_airline("Udacity #5", ident(5), FIRST_AIRLINE)
        founded.approve_airline(ident(5), FIRST_AIRLINE)
        founded.approve_airline(ident(5), ident(0xA2))
        assert founded.get_total_registered_airlines() == 4

    def test_votes_keep_counting_after_registration(self, founded):
        founded.register_airline("Udacity #5", ident(5), FIRST_AIRLINE)
        for voter in (FIRST_AIRLINE, ident(0xA2), ident(0xA3)):
            founded.approve_airline(ident(5), voter)
        status = founded.fetch_airline_status(ident(5))
        assert status.positive_received_votes == 3
        assert status.state == AirlineState.REGISTERED

    def test_self_vote_rejected(self, founded):
        with pytest.raises(SelfVote):
            founded.approve_airline(FIRST_AIRLINE, FIRST_AIRLINE)

    def test_self_vote_rejected_for_pending_candidate(self, founded):
        founded.register_airline("Udacity #5", ident(5), FIRST_AIRLINE)
        founded.fund_airline(ident(5), FEE)
        founded.approve_airline(ident(5), FIRST_AIRLINE)
        founded.approve_airline(ident(5), ident(0xA2))
        with pytest.raises(SelfVote):
            founded.approve_airline(ident(5), ident(5))
        assert founded.fetch_airline_status(ident(5)).positive_received_votes == 2

    def test_inactive_voter_rejected(self, founded):
        founded.register_airline("Udacity #5", ident(5), FIRST_AIRLINE)
        with pytest.raises(NotActiveMember):
            founded.approve_airline(ident(5), PASSENGER)
        assert founded.fetch_airline_status(ident(5)).positive_received_votes == 0

    def test_voted_event_recorded(self, founded):
        founded.register_airline("Udacity #5", ident(5), FIRST_AIRLINE)
        founded.approve_airline(ident(5), FIRST_AIRLINE)
        event = founded.audit.events(EventType.AIRLINE_VOTED)[-1]
        assert event.payload["airline"] == str(ident(5))
        assert event.payload["voter"] == str(FIRST_AIRLINE)
        assert event.payload["positive_received_votes"] == 1
        assert event.payload["state"] == "PENDING_APPROVAL"


class TestRequiredVotes:

    @pytest.mark.parametrize("registered", range(0, 12))
    def test_required_votes_formula(self, registered):
        state = LedgerState(owner=OWNER, total_registered_airlines=registered)
        expected = 0 if registered < 4 else registered // 2
        assert state.required_votes() == expected

    def test_threshold_is_configurable(self):
        state = LedgerState(owner=OWNER, founding_threshold=2, total_registered_airlines=2)
        assert state.required_votes() == 1


class TestStatusProjection:

    def test_unknown_airline_returns_zero_defaults(self, service):
        assert service.fetch_airline_status(ident(404)) == AirlineStatus.empty()
        assert AirlineStatus.empty() == ("", AirlineState.PENDING_APPROVAL, False, 0, 0, 0)

    def test_projection_accepts_hex_strings(self, service):
        status = service.fetch_airline_status("0x" + FIRST_AIRLINE.value.upper())
        assert status.name == "Udacity Air"
