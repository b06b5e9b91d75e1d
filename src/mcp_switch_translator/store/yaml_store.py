"""Record store persisted as YAML files.

Directory structure managed:
    <data_dir>/
    ├── devices.yaml
    ├── interfaces.yaml
    ├── vlans.yaml
    └── lacp_groups.yaml

Each file holds a list of records. A collection file is rewritten after
every mutation of that collection; a mutation whose files cannot be
written is rolled back in memory.
"""
import logging
from pathlib import Path
from typing import Optional

import yaml

from ..model import Device, Interface, LacpGroup, Vlan
from .base import StoreError
from .memory import MemoryStore

logger = logging.getLogger(__name__)

# Default data directory
DEFAULT_DATA_DIR = Path.home() / ".switch-translator" / "data"

COLLECTIONS = {
    "devices": Device,
    "interfaces": Interface,
    "vlans": Vlan,
    "lacp_groups": LacpGroup,
}


class YamlStore(MemoryStore):
    """
    MemoryStore that mirrors every collection to a YAML file.

    Usage:
        store = YamlStore(Path("/var/lib/switch-translator"))
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize the store and load existing records.

        Args:
            data_dir: Directory holding the collection files
                (default: ~/.switch-translator/data)
        """
        super().__init__()
        self.data_dir = Path(data_dir) if data_dir else DEFAULT_DATA_DIR
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._load()

    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.yaml"

    def _load(self) -> None:
        """Read every collection file that exists."""
        for collection, record_cls in COLLECTIONS.items():
            path = self._path(collection)
            if not path.exists():
                continue

            try:
                rows = yaml.safe_load(path.read_text()) or []
                records = [record_cls.from_dict(row) for row in rows]
            except (yaml.YAMLError, TypeError, ValueError) as e:
                raise StoreError(f"Failed to load {path}: {e}") from e

            target = getattr(self, collection)
            for record in records:
                target[record.id] = record

        logger.debug(
            f"Record store loaded from {self.data_dir}: "
            f"{len(self.devices)} devices, {len(self.interfaces)} interfaces, "
            f"{len(self.vlans)} VLANs, {len(self.lacp_groups)} LACP groups"
        )

    def _changed(self, *collections: str) -> None:
        """Write every named collection, or none of them.

        Each collection is dumped to a ``.tmp`` sibling first; the files are
        only moved into place once all of them were written.
        """
        staged = []
        try:
            for collection in collections:
                rows = [r.to_dict() for r in getattr(self, collection).values()]
                path = self._path(collection)
                tmp = path.with_suffix(".yaml.tmp")
                tmp.write_text(
                    yaml.dump(rows, default_flow_style=False, sort_keys=False)
                )
                staged.append((tmp, path))
            for tmp, path in staged:
                tmp.replace(path)
        except OSError as e:
            for tmp, _ in staged:
                tmp.unlink(missing_ok=True)
            raise StoreError(f"Failed to write {', '.join(collections)}: {e}") from e
