"""Result types for the translator engine."""
from dataclasses import dataclass, field
from typing import Optional

from ..model import ImportedVlan, Vlan


# --- Validation Results ---

@dataclass
class ValidationResult:
    """Result of record validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# --- Import Results ---

@dataclass
class ImportResult:
    """Outcome of importing vendor text into a device."""
    device_id: str
    vendor: str
    recognised: list[ImportedVlan] = field(default_factory=list)
    created: list[Vlan] = field(default_factory=list)
    synced_at: Optional[str] = None

    @property
    def created_count(self) -> int:
        return len(self.created)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "device_id": self.device_id,
            "vendor": self.vendor,
            "recognised": [v.to_dict() for v in self.recognised],
            "created": [v.to_dict() for v in self.created],
            "synced_at": self.synced_at,
        }
