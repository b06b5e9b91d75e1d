"""Field-level update patches for model records.

Each patch enumerates the fields a caller may change. Unknown keys and
invalid values are rejected when the patch is built, before it reaches the
store.
"""
from dataclasses import dataclass, fields, replace
from typing import Any, ClassVar

from .schema import (
    Device,
    DeviceStatus,
    Duplex,
    Interface,
    LacpMode,
    LoadBalancing,
    PortMode,
    PortSpeed,
    PortStatus,
    normalize_keys,
)


class UpdateError(ValueError):
    """Invalid field-level update."""
    pass


class _Unset:
    """Marker for fields not present in a patch."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class _Update:
    _enums: ClassVar[dict[str, type]] = {}
    _ints: ClassVar[tuple[str, ...]] = ()
    _label: ClassVar[str] = "record"

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        """Build a patch, rejecting keys outside the whitelist."""
        if not isinstance(data, dict):
            raise UpdateError("Updates must be an object")

        data = normalize_keys(data)
        allowed = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise UpdateError(
                f"Unknown {cls._label} field(s): {', '.join(unknown)}"
            )

        kwargs = {}
        for key, value in data.items():
            if key in cls._enums:
                try:
                    value = cls._enums[key](value)
                except ValueError:
                    raise UpdateError(f"Invalid {key} value: {value}")
            elif key in cls._ints and value is not None:
                if isinstance(value, bool) or not isinstance(value, int):
                    raise UpdateError(f"Invalid {key} value: {value}")
            kwargs[key] = value

        return cls(**kwargs)

    def changes(self) -> dict[str, Any]:
        """Fields explicitly set on this patch."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def apply(self, record):
        """Return a copy of ``record`` with the changed keys replaced."""
        return replace(record, **self.changes())


@dataclass
class DeviceUpdate(_Update):
    """Mutable device fields. ``vendor`` is immutable and has no slot here."""
    hostname: Any = UNSET
    ip_address: Any = UNSET
    model: Any = UNSET
    status: Any = UNSET
    last_synced_at: Any = UNSET

    _enums: ClassVar[dict[str, type]] = {"status": DeviceStatus}
    _label: ClassVar[str] = "device"

    def apply(self, record: Device) -> Device:
        if self.hostname is not UNSET and not self.hostname:
            raise UpdateError("Hostname cannot be empty")
        return super().apply(record)


@dataclass
class InterfaceUpdate(_Update):
    speed: Any = UNSET
    duplex: Any = UNSET
    mode: Any = UNSET
    status: Any = UNSET
    access_vlan: Any = UNSET
    trunk_allowed_vlans: Any = UNSET
    native_vlan: Any = UNSET
    lacp_group_id: Any = UNSET
    description: Any = UNSET

    _enums: ClassVar[dict[str, type]] = {
        "speed": PortSpeed,
        "duplex": Duplex,
        "mode": PortMode,
        "status": PortStatus,
    }
    _ints: ClassVar[tuple[str, ...]] = ("access_vlan", "native_vlan")
    _label: ClassVar[str] = "interface"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InterfaceUpdate":
        update = super().from_dict(data)
        vlans = update.trunk_allowed_vlans
        if vlans is not UNSET:
            if not isinstance(vlans, list) or not all(
                isinstance(v, int) and not isinstance(v, bool) for v in vlans
            ):
                raise UpdateError(f"Invalid trunk_allowed_vlans value: {vlans}")
        return update

    def apply(self, record: Interface) -> Interface:
        updated = super().apply(record)
        if self.trunk_allowed_vlans is not UNSET:
            updated.trunk_allowed_vlans = list(self.trunk_allowed_vlans)
        return updated


@dataclass
class VlanUpdate(_Update):
    vlan_id: Any = UNSET
    name: Any = UNSET
    description: Any = UNSET

    _ints: ClassVar[tuple[str, ...]] = ("vlan_id",)
    _label: ClassVar[str] = "VLAN"


@dataclass
class LacpGroupUpdate(_Update):
    group_number: Any = UNSET
    name: Any = UNSET
    mode: Any = UNSET
    load_balancing: Any = UNSET
    min_links: Any = UNSET
    max_links: Any = UNSET

    _enums: ClassVar[dict[str, type]] = {
        "mode": LacpMode,
        "load_balancing": LoadBalancing,
    }
    _ints: ClassVar[tuple[str, ...]] = ("group_number", "min_links", "max_links")
    _label: ClassVar[str] = "LACP group"

