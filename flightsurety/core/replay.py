"""
flightsurety/core/replay.py

Audit Replay

Offline verification of a persisted audit stream, for external observers.

    1. Load    → AuditEvent.from_dict(line)
    2. Schema  → event.validate_schema()  : fail fast, no silent pass
    3. Chain   → event.verify_chain(prev) : sequential
    4. Sig     → event.verify_signature()
    5. Version → all events must share audit_version

All verification delegates to AuditEvent methods.
"""

import json
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from flightsurety.core.exceptions import AuditError
from flightsurety.core.models import AuditEvent


@dataclass
class AuditViolation:
    """A single detected violation in the audit file."""
    at_sequence:    int
    event_id:       str
    violation_type: str   # "chain_break" | "invalid_signature" | "sequence_gap"
    detail:         str


@dataclass
class AuditSummary:
    total_events:      int
    chain_valid:       bool
    violations:        List[AuditViolation]
    valid_signatures:  int
    event_type_counts: Dict[str, int]
    first_timestamp:   Optional[str]
    last_timestamp:    Optional[str]


class AuditReplay:
    """
    Usage:
        replay = AuditReplay()
        replay.load(Path("audit.jsonl"))
        summary = replay.verify()
    """

    def __init__(self) -> None:
        self.events:     List[AuditEvent]     = []
        self.violations: List[AuditViolation] = []

    def load(self, path: Path) -> None:
        """
        Load an audit JSONL file.

        Raises:
            FileNotFoundError: file does not exist
            AuditError       : malformed JSON, missing field, schema violation
                                or mixed audit_version values
        """
        path = Path(path)
        self.events     = []
        self.violations = []

        if not path.exists():
            raise FileNotFoundError(f"Audit file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            for line_num, raw in enumerate(f, 1):
                raw = raw.strip()
                if not raw:
                    continue

                try:
                    event = AuditEvent.from_dict(json.loads(raw))
                except json.JSONDecodeError as exc:
                    raise AuditError(
                        "Malformed JSON in audit file", {"line": line_num}
                    ) from exc
                except KeyError as exc:
                    raise AuditError(
                        "Missing audit field", {"line": line_num, "field": str(exc)}
                    ) from exc

                schema = event.validate_schema()
                if not schema:
                    raise AuditError(
                        "Audit schema violation",
                        {"line": line_num, "errors": "; ".join(schema.errors)},
                    )

                self.events.append(event)

        versions = {e.audit_version for e in self.events}
        if len(versions) > 1:
            raise AuditError(
                "Audit file mixes audit_version values",
                {"versions": sorted(versions)},
            )

    def verify(self) -> AuditSummary:
        """Full verification pass over all loaded events."""
        violations: List[AuditViolation] = []
        valid_sigs = 0
        counts: Dict[str, int] = defaultdict(int)

        for i, event in enumerate(self.events):
            prev = self.events[i - 1] if i > 0 else None
            counts[event.event_type] += 1

            if event.sequence != i:
                violations.append(AuditViolation(
                    at_sequence=    i,
                    event_id=       event.event_id,
                    violation_type= "sequence_gap",
                    detail=         f"Expected sequence {i}, got {event.sequence}",
                ))

            if not event.verify_chain(prev):
                violations.append(AuditViolation(
                    at_sequence=    event.sequence,
                    event_id=       event.event_id,
                    violation_type= "chain_break",
                    detail=         f"causal_hash mismatch: got ...{event.causal_hash[-12:]}",
                ))

            if event.verify_signature():
                valid_sigs += 1
            else:
                violations.append(AuditViolation(
                    at_sequence=    event.sequence,
                    event_id=       event.event_id,
                    violation_type= "invalid_signature",
                    detail=         f"Signature invalid (signer: {event.signer_public_key[:16]}...)",
                ))

        self.violations = violations

        return AuditSummary(
            total_events=      len(self.events),
            chain_valid=       not violations,
            violations=        list(violations),
            valid_signatures=  valid_sigs,
            event_type_counts= dict(counts),
            first_timestamp=   self.events[0].timestamp if self.events else None,
            last_timestamp=    self.events[-1].timestamp if self.events else None,
        )
