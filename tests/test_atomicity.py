"""
tests/test_atomicity.py

All-or-nothing calls and serialisation.

Every failing call must leave both the ledger state and the audit stream
exactly as they were. Concurrent callers must never lose an update.
"""

import threading

import pytest

from flightsurety import (
    AuditError,
    FirstAirline,
    FlightSuretyService,
    InsufficientFee,
    LedgerConfig,
    SelfVote,
)

from conftest import FEE, FIRST_AIRLINE, OWNER, PASSENGER, ident


class TestRollback:

    def test_failed_call_emits_nothing(self, founded):
        before = founded.audit.events()
        with pytest.raises(InsufficientFee):
            founded.fund_airline(FIRST_AIRLINE, FEE - 1)
        with pytest.raises(SelfVote):
            founded.approve_airline(FIRST_AIRLINE, FIRST_AIRLINE)
        assert founded.audit.events() == before

    def test_exception_inside_transaction_discards_writes(self, service):
        with pytest.raises(RuntimeError):
            with service.store.transaction("doomed") as tx:
                tx.state.total_registered_airlines = 99
                tx.state.operational = False
                tx.emit("airline_registered", {"airline": "x"})
                raise RuntimeError("abort")

        assert service.get_total_registered_airlines() == 1
        assert service.is_operational() is True

    def test_unknown_event_type_aborts_call(self, service):
        with pytest.raises(AuditError):
            with service.store.transaction("bad-event") as tx:
                tx.state.contract_balance = 1000
                tx.emit("not_an_event", {})
        assert service.get_contract_balance() == 0

    def test_audit_write_failure_rolls_back(self, tmp_path, key, gateway):
        audit_path = tmp_path / "audit.jsonl"
        config = LedgerConfig(
            owner=OWNER,
            membership_fee=FEE,
            first_airline=FirstAirline("Udacity Air", FIRST_AIRLINE),
            audit_path=audit_path,
        )
        service = FlightSuretyService.from_config(config, gateway=gateway, key_manager=key)
        events_before = len(service.audit.events())

        # Make the audit file unwritable by replacing it with a directory.
        audit_path.unlink()
        audit_path.mkdir()

        with pytest.raises(AuditError):
            service.fund_airline(FIRST_AIRLINE, FEE)

        status = service.fetch_airline_status(FIRST_AIRLINE)
        assert status.is_funded is False
        assert status.balance == 0
        assert service.get_contract_balance() == 0
        assert len(service.audit.events()) == events_before

    def test_audit_failure_after_payout_keeps_balance_zeroed(self, tmp_path, key, gateway):
        audit_path = tmp_path / "audit.jsonl"
        config = LedgerConfig(owner=OWNER, membership_fee=FEE, audit_path=audit_path)
        service = FlightSuretyService.from_config(config, gateway=gateway, key_manager=key)
        service.buy(PASSENGER, "FL1", 9)
        events_before = len(service.audit.events())

        audit_path.unlink()
        audit_path.mkdir()

        with pytest.raises(AuditError):
            service.pay(PASSENGER)

        assert gateway.total_paid_to(PASSENGER) == 9
        assert service.fetch_passenger_status(PASSENGER).balance == 0
        assert service.get_contract_balance() == 0
        assert len(service.audit.events()) == events_before

        # A retry finds nothing left to pay.
        with pytest.raises(AuditError):
            service.pay(PASSENGER)
        assert gateway.total_paid_to(PASSENGER) == 9

    def test_confirmed_transaction_commits_despite_later_error(self, service):
        with pytest.raises(RuntimeError):
            with service.store.transaction("confirmed") as tx:
                tx.state.contract_balance = 42
                tx.confirm()
                raise RuntimeError("after the effect")

        assert service.get_contract_balance() == 42


class TestSerialisation:

    def test_concurrent_purchases_are_not_lost(self, service):
        errors = []

        def buy_many(passenger):
            try:
                for _ in range(50):
                    service.buy(passenger, "FL-RACE", 1)
            except Exception as e:
                errors.append(e)

        threads = [
            threading.Thread(target=buy_many, args=(ident(0xC0 + i),))
            for i in range(4)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        flight = service.fetch_flight_status("FL-RACE")
        assert flight.participant_count == 200
        assert sum(flight.paid_amounts.values()) == 200
        assert service.get_contract_balance() == 200
        assert service.audit.verify_chain() is True

    def test_concurrent_votes_each_count_once(self, founded):
        founded.register_airline("Candidate", ident(5), FIRST_AIRLINE)
        voters = [FIRST_AIRLINE, ident(0xA2), ident(0xA3), ident(0xA4)]
        barrier = threading.Barrier(len(voters))

        def vote(voter):
            barrier.wait()
            founded.approve_airline(ident(5), voter)

        threads = [threading.Thread(target=vote, args=(v,)) for v in voters]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert founded.fetch_airline_status(ident(5)).positive_received_votes == 4
