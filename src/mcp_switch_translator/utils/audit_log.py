"""Audit journal of record changes.

Every import and every CRUD change made through the server is written as
one JSON line to ``audit.log``. Imports are not atomic, so a failed import
entry states how many VLANs were committed before the failure.
"""
import json
import logging
import os
from collections import deque
from dataclasses import dataclass, asdict, fields
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("translator.audit")

DEFAULT_AUDIT_DIR = "~/.switch-translator"
AUDIT_FILENAME = "audit.log"
MAX_OUTPUT = 1000


def get_audit_file(log_dir: Optional[str] = None) -> str:
    """Audit log path under ``log_dir``, TRANSLATOR_LOG_DIR or the default."""
    if log_dir is None:
        log_dir = os.environ.get("TRANSLATOR_LOG_DIR", DEFAULT_AUDIT_DIR)
    return os.path.join(os.path.expanduser(log_dir), AUDIT_FILENAME)


def setup_audit_logging(log_dir: Optional[str] = None) -> None:
    """Send audit entries to a rotating JSON-lines file.

    Replaces any previous audit handler, so calling it again moves the
    journal to the new directory.
    """
    audit_file = Path(get_audit_file(log_dir))
    audit_file.parent.mkdir(parents=True, exist_ok=True)

    for handler in list(audit_logger.handlers):
        audit_logger.removeHandler(handler)
        handler.close()

    handler = RotatingFileHandler(audit_file, maxBytes=10 * 1024 * 1024, backupCount=10)
    handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(handler)
    audit_logger.setLevel(logging.INFO)
    audit_logger.propagate = False


@dataclass
class ChangeRecord:
    """One journal entry."""
    timestamp: str
    device_id: str
    operation: str  # import_config, create_vlan, update_interface, ...
    success: bool
    parameters: dict
    output: str = ""
    error: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, line: str) -> "ChangeRecord":
        data = json.loads(line)
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


class ChangeTracker:
    """Writes journal entries for one device."""

    def __init__(self, device_id: str):
        self.device_id = device_id

    def log_change(
        self,
        operation: str,
        parameters: dict,
        success: bool,
        output: str = "",
        error: Optional[str] = None,
    ) -> ChangeRecord:
        """Append an entry and return it.

        Args:
            operation: Tool or engine operation, e.g. "import_config"
            parameters: JSON-serializable arguments of the change
            success: Whether the change completed
            output: Short result summary, truncated to 1000 characters
            error: Error message when the change failed
        """
        record = ChangeRecord(
            timestamp=datetime.now(timezone.utc).isoformat(),
            device_id=self.device_id,
            operation=operation,
            success=success,
            parameters=parameters,
            output=(output or "")[:MAX_OUTPUT],
            error=error,
        )
        audit_logger.info(record.to_json())
        return record


def _read_records(path: Path) -> Iterator[ChangeRecord]:
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                yield ChangeRecord.from_json(line)
            except (json.JSONDecodeError, TypeError):
                logger.debug(f"Skipping malformed audit line in {path}")


def get_recent_changes(
    log_file: Optional[str] = None,
    device_id: Optional[str] = None,
    operation: Optional[str] = None,
    limit: int = 100,
) -> list[ChangeRecord]:
    """Read the newest journal entries, most recent first.

    Args:
        log_file: Audit file path (default: the configured audit file)
        device_id: Only entries for this device
        operation: Only entries for this operation
        limit: Maximum number of entries
    """
    path = Path(log_file or get_audit_file())
    if not path.exists():
        return []

    newest: deque[ChangeRecord] = deque(maxlen=limit)
    for record in _read_records(path):
        if device_id and record.device_id != device_id:
            continue
        if operation and record.operation != operation:
            continue
        newest.append(record)

    return list(reversed(newest))

