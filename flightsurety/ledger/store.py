"""
Transactional ledger store for FlightSurety.

Every entry point runs inside exactly one transaction:

    with store.transaction() as tx:
        guard.require_operational(tx.state)
        ...mutate tx.state...
        tx.emit(EventType.X, {...})

The transaction works on a deep copy of the committed state. On normal exit
the pending audit events are written as one batch and the copy becomes the
committed state. On any exception both are discarded, so a failed call
leaves nothing behind.

A call that performs an outward effect (a payout transfer) marks the
transaction confirmed once the effect succeeds. From then on the working
state commits even if a later step, such as the audit write, fails; the
error is still raised to the caller.
"""

import copy
import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Tuple, TypeVar

from flightsurety.core.emitter import AuditStream
from flightsurety.core.models import LedgerState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Transaction:
    """Working state and pending events of one call."""

    def __init__(self, name: str, state: LedgerState) -> None:
        self.name = name
        self.state = state
        self.events: List[Tuple[str, Dict[str, Any]]] = []
        self.confirmed = False

    def emit(self, event_type: str, payload: Dict[str, Any]) -> None:
        """Queue an audit event; it is written only if the call commits."""
        self.events.append((event_type, payload))

    def confirm(self) -> None:
        """Mark an outward effect as done; the working state can no longer roll back."""
        self.confirmed = True


class LedgerStore:
    """
    Owner of the committed LedgerState.

    A single lock serialises all calls, reads included, so every call
    observes a fully committed state.
    """

    def __init__(self, state: LedgerState, audit: AuditStream) -> None:
        self._state = state
        self._audit = audit
        self._lock = threading.Lock()

    @property
    def audit(self) -> AuditStream:
        return self._audit

    @contextmanager
    def transaction(self, name: str = "call") -> Iterator[Transaction]:
        with self._lock:
            tx = Transaction(name, copy.deepcopy(self._state))
            try:
                yield tx
                self._audit.emit_batch(tx.events)
            except Exception as exc:
                if not tx.confirmed:
                    logger.info("%s rolled back: %s", name, exc)
                    raise
                self._state = tx.state
                logger.error("%s committed after its outward effect, then failed: %s", name, exc)
                raise
            self._state = tx.state
            logger.debug("%s committed with %d event(s)", name, len(tx.events))

    def read(self, fn: Callable[[LedgerState], T]) -> T:
        """Run a pure projection against the committed state."""
        with self._lock:
            return fn(self._state)
