"""
Ledger configuration.

Example YAML:

    owner: "0x627306090abab3a6e1400e9345bc60c78a8bef57"
    founding_threshold: 4
    membership_fee: 10000000000000000000
    first_airline:
      name: "Udacity Air"
      identity: "0xf17f52151ebef6c7334fad080c5704d77216b732"
    audit_path: ".flightsurety/audit.jsonl"
    audit_key_path: ".flightsurety/audit_key.pem"
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from flightsurety.core.exceptions import ConfigError, ValidationError
from flightsurety.core.identity import Identity
from flightsurety.core.models import FOUNDING_THRESHOLD, MEMBERSHIP_FEE


@dataclass(frozen=True)
class FirstAirline:
    name:     str
    identity: Identity


@dataclass(frozen=True)
class LedgerConfig:
    owner:              Identity
    founding_threshold: int                    = FOUNDING_THRESHOLD
    membership_fee:     int                    = MEMBERSHIP_FEE
    operational:        bool                   = True
    first_airline:      Optional[FirstAirline] = None
    audit_path:         Optional[Path]         = None
    audit_key_path:     Optional[Path]         = None
    source_id:          str                    = "flightsurety"

    @classmethod
    def from_yaml(cls, path: Path) -> "LedgerConfig":
        """Load configuration from a YAML file."""
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(
                "Cannot read ledger config", {"path": path, "error": exc}
            ) from exc
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerConfig":
        if not isinstance(data, dict):
            raise ConfigError("Ledger config must be a mapping")
        if "owner" not in data:
            raise ConfigError("Ledger config requires an owner")

        try:
            owner = Identity.parse(data["owner"])
            first_airline = None
            if data.get("first_airline"):
                entry = data["first_airline"]
                first_airline = FirstAirline(
                    name=str(entry["name"]),
                    identity=Identity.parse(entry["identity"]),
                )
        except (ValidationError, KeyError, TypeError) as exc:
            raise ConfigError("Invalid identity in ledger config", {"error": exc}) from exc

        threshold = data.get("founding_threshold", FOUNDING_THRESHOLD)
        if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 1:
            raise ConfigError(
                "founding_threshold must be a positive integer",
                {"founding_threshold": threshold},
            )

        fee = data.get("membership_fee", MEMBERSHIP_FEE)
        if isinstance(fee, bool) or not isinstance(fee, int) or fee < 0:
            raise ConfigError(
                "membership_fee must be a non-negative integer",
                {"membership_fee": fee},
            )

        audit_path = data.get("audit_path")
        audit_key_path = data.get("audit_key_path")

        return cls(
            owner=owner,
            founding_threshold=threshold,
            membership_fee=fee,
            operational=bool(data.get("operational", True)),
            first_airline=first_airline,
            audit_path=Path(audit_path) if audit_path else None,
            audit_key_path=Path(audit_key_path) if audit_key_path else None,
            source_id=str(data.get("source_id", "flightsurety")),
        )
