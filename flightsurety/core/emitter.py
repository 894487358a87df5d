"""
flightsurety/core/emitter.py

Audit Stream

emit_batch() MUST, in this exact order:
  1. Acquire lock
  2. Create every event via AuditEvent.create(), chaining each to the last
  3. Sign each event
  4. Append all lines to the JSONL file in ONE write (when persisted)
  5. Advance internal state  : only after confirmed write
  6. Return the signed events

The store calls emit_batch() once per committed call, so a call's events are
either all recorded or none are. The ledger never reads these events back to
make decisions; they exist for external observers.
"""

import json
import threading
import warnings
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from flightsurety.core.crypto import Ed25519KeyManager
from flightsurety.core.exceptions import AuditError
from flightsurety.core.models import AUDIT_VERSION, GENESIS_HASH, AuditEvent


class AuditStream:
    """
    Append-only, hash-chained, signed audit log.

    Maintains per-stream chain state:
        _sequence  : monotonically increasing integer (0, 1, 2, ...)
        _events    : in-memory history, oldest first

    Thread-safe via internal lock (single-process only).
    When ledger_path is given, events are also persisted as JSONL and the
    chain state is restored from that file on construction.
    """

    def __init__(
        self,
        key_manager: Ed25519KeyManager,
        source_id:   str = "flightsurety",
        ledger_path: Optional[str] = None,
    ) -> None:
        self.key_manager = key_manager
        self.source_id   = source_id

        self._lock:     threading.Lock    = threading.Lock()
        self._sequence: int               = 0
        self._events:   List[AuditEvent]  = []

        self._ledger_file: Optional[Path] = None
        if ledger_path is not None:
            self._ledger_file = Path(ledger_path)
            self._ledger_file.parent.mkdir(parents=True, exist_ok=True)
            self._restore_state()

    # ── Public API ────────────────────────────────────────────

    def emit(self, event_type: str, payload: Dict[str, Any]) -> AuditEvent:
        """Emit a single event. See emit_batch()."""
        return self.emit_batch([(event_type, payload)])[0]

    def emit_batch(
        self,
        records: Iterable[Tuple[str, Dict[str, Any]]],
    ) -> List[AuditEvent]:
        """
        Sign and append a batch of (event_type, payload) records.

        Raises AuditError if the batch cannot be written. In that case no
        event of the batch is recorded and the chain state is unchanged.
        """
        records = list(records)
        if not records:
            return []

        with self._lock:
            prev     = self._events[-1] if self._events else None
            sequence = self._sequence
            batch: List[AuditEvent] = []

            try:
                for event_type, payload in records:
                    event = AuditEvent.create(
                        event_type=        event_type,
                        source_id=         self.source_id,
                        signer_public_key= self.key_manager.public_key_hex,
                        sequence=          sequence,
                        payload=           payload,
                        prev=              prev,
                    ).sign(self.key_manager)
                    batch.append(event)
                    prev      = event
                    sequence += 1
            except (TypeError, ValueError) as exc:
                raise AuditError(f"Invalid audit event: {exc}") from exc

            if self._ledger_file is not None:
                self._append_to_file(batch)

            self._events.extend(batch)
            self._sequence = sequence

            return batch

    def events(self, event_type: Optional[str] = None) -> List[AuditEvent]:
        """Return a copy of the recorded history, optionally filtered by type."""
        with self._lock:
            if event_type is None:
                return list(self._events)
            return [e for e in self._events if e.event_type == event_type]

    def verify_chain(self) -> bool:
        """
        Verify the in-memory history: sequence, causal_hash and signature
        of every event. Returns True if intact.
        """
        with self._lock:
            events = list(self._events)

        prev = None
        for i, event in enumerate(events):
            if event.sequence != i:
                return False
            if not event.verify_chain(prev):
                return False
            if not event.verify_signature():
                return False
            prev = event
        return True

    def get_stats(self) -> Dict[str, Any]:
        """Return current stream state snapshot."""
        with self._lock:
            last = self._events[-1] if self._events else None
            return {
                "source_id":        self.source_id,
                "next_sequence":    self._sequence,
                "last_event_id":    last.event_id if last else None,
                "last_causal_hash": last.causal_hash if last else GENESIS_HASH,
                "ledger_file":      str(self._ledger_file) if self._ledger_file else None,
                "audit_version":    AUDIT_VERSION,
            }

    # ── Internal ──────────────────────────────────────────────

    def _restore_state(self) -> None:
        """
        Reload history from an existing JSONL file.
        If the file is unreadable it is moved aside, state stays at genesis
        and a RuntimeWarning is issued. New events then start a fresh file.
        """
        if not self._ledger_file.exists():
            return

        events: List[AuditEvent] = []
        try:
            with open(self._ledger_file, "r", encoding="utf-8") as f:
                for line in f:
                    stripped = line.strip()
                    if not stripped:
                        continue
                    event = AuditEvent.from_dict(json.loads(stripped))
                    schema = event.validate_schema()
                    if not schema:
                        raise ValueError(f"schema violation: {schema.errors}")
                    events.append(event)
        except Exception as exc:
            rotated = self._rotate_corrupt_file()
            warnings.warn(
                f"AuditStream: could not restore state from {self._ledger_file}: {exc}. "
                f"Moved it to {rotated} and continuing from genesis.",
                RuntimeWarning,
                stacklevel=3,
            )
            return

        self._events   = events
        self._sequence = events[-1].sequence + 1 if events else 0

    def _rotate_corrupt_file(self) -> Path:
        """Rename the unreadable ledger file to the first free .corrupt-N name."""
        n = 1
        while True:
            target = self._ledger_file.with_name(f"{self._ledger_file.name}.corrupt-{n}")
            if not target.exists():
                break
            n += 1
        try:
            self._ledger_file.rename(target)
        except OSError as exc:
            raise AuditError(
                "Unreadable audit file could not be moved aside",
                {"path": str(self._ledger_file), "error": str(exc)},
            ) from exc
        return target

    def _append_to_file(self, batch: List[AuditEvent]) -> None:
        """
        Append the whole batch as newline-terminated JSON lines in one write.
        Raises AuditError on any I/O failure. State MUST NOT advance if this raises.
        """
        data = "".join(json.dumps(e.to_dict()) + "\n" for e in batch)
        try:
            with open(self._ledger_file, "a", encoding="utf-8") as f:
                f.write(data)
        except OSError as exc:
            raise AuditError(
                "Audit write failed",
                {"path": str(self._ledger_file), "error": str(exc)},
            ) from exc
