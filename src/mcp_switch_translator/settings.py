"""Runtime settings read from the environment.

Environment Variables:
    TRANSLATOR_STORE: "memory" or "yaml" (default: memory)
    TRANSLATOR_DATA_DIR: Directory for the YAML store (default: ~/.switch-translator/data)
    TRANSLATOR_SEED_SAMPLE: Seed sample devices on startup when true/1/yes
    TRANSLATOR_LOG_DIR: Directory for the audit log (default: ~/.switch-translator)
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .store import DeviceRepository, MemoryStore, YamlStore, DEFAULT_DATA_DIR

STORE_BACKENDS = ("memory", "yaml")

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Translator service settings."""
    store: str = "memory"
    data_dir: Path = DEFAULT_DATA_DIR
    seed_sample: bool = False
    log_dir: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        store = os.environ.get("TRANSLATOR_STORE", "memory").lower()
        if store not in STORE_BACKENDS:
            raise ValueError(
                f"Invalid TRANSLATOR_STORE: {store}. "
                f"Must be one of: {', '.join(STORE_BACKENDS)}"
            )

        data_dir = os.environ.get("TRANSLATOR_DATA_DIR")
        return cls(
            store=store,
            data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
            seed_sample=os.environ.get("TRANSLATOR_SEED_SAMPLE", "").lower() in _TRUTHY,
            log_dir=os.environ.get("TRANSLATOR_LOG_DIR"),
        )


def create_store(settings: Settings) -> DeviceRepository:
    """Build the record store selected by the settings."""
    if settings.store == "yaml":
        return YamlStore(settings.data_dir)
    return MemoryStore()
