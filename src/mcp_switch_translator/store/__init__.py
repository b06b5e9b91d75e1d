"""Record store for devices, interfaces, VLANs and LACP groups.

This package provides:
- DeviceRepository: the async interface the translator engine talks to
- MemoryStore: in-process backend
- YamlStore: backend persisted as YAML files
- seed_sample_data: explicit sample-data setup routine
"""

from .base import DeviceRepository, RecordNotFound, StoreError
from .memory import MemoryStore
from .yaml_store import YamlStore, DEFAULT_DATA_DIR
from .seed import seed_sample_data

__all__ = [
    "DeviceRepository",
    "RecordNotFound",
    "StoreError",
    "MemoryStore",
    "YamlStore",
    "DEFAULT_DATA_DIR",
    "seed_sample_data",
]
