"""Vendor-neutral network device model.

Records are plain dataclasses owned by the record store. The translator only
reads them (generation) or produces new values (import).
"""
from dataclasses import dataclass, field, asdict, fields
from enum import Enum
from typing import Any, ClassVar, Optional


class Vendor(str, Enum):
    """Configuration dialect of a device."""
    CISCO = "cisco"
    JUNIPER = "juniper"


class DeviceStatus(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    SYNCING = "syncing"


class PortStatus(str, Enum):
    UP = "up"
    DOWN = "down"
    DISABLED = "disabled"


class PortSpeed(str, Enum):
    AUTO = "auto"
    SPEED_10M = "10M"
    SPEED_100M = "100M"
    SPEED_1G = "1G"
    SPEED_10G = "10G"
    SPEED_25G = "25G"
    SPEED_40G = "40G"
    SPEED_100G = "100G"


class Duplex(str, Enum):
    AUTO = "auto"
    FULL = "full"
    HALF = "half"


class PortMode(str, Enum):
    ACCESS = "access"
    TRUNK = "trunk"


class LacpMode(str, Enum):
    ACTIVE = "active"
    PASSIVE = "passive"


class LoadBalancing(str, Enum):
    SRC_MAC = "src-mac"
    DST_MAC = "dst-mac"
    SRC_DST_MAC = "src-dst-mac"
    SRC_IP = "src-ip"
    DST_IP = "dst-ip"
    SRC_DST_IP = "src-dst-ip"


# JSON clients send camelCase keys
_CAMEL_KEYS = {
    "ipAddress": "ip_address",
    "lastSyncedAt": "last_synced_at",
    "deviceId": "device_id",
    "accessVlan": "access_vlan",
    "trunkAllowedVlans": "trunk_allowed_vlans",
    "nativeVlan": "native_vlan",
    "lacpGroupId": "lacp_group_id",
    "vlanId": "vlan_id",
    "groupNumber": "group_number",
    "loadBalancing": "load_balancing",
    "minLinks": "min_links",
    "maxLinks": "max_links",
}


def normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Map camelCase keys to their snake_case field names."""
    return {_CAMEL_KEYS.get(k, k): v for k, v in data.items()}


def _value(v: Any) -> Any:
    return v.value if isinstance(v, Enum) else v


class _Record:
    """Shared dict conversion for model records."""

    _enums: ClassVar[dict[str, type]] = {}

    def to_dict(self) -> dict:
        return {k: _value(v) for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        data = normalize_keys(data)
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        for name, enum_cls in cls._enums.items():
            if kwargs.get(name) is not None:
                kwargs[name] = enum_cls(kwargs[name])
        return cls(**kwargs)


@dataclass
class Device(_Record):
    """A managed switch. ``vendor`` selects the dialect and never changes."""
    id: str
    hostname: str
    ip_address: str
    vendor: Vendor
    model: str
    status: DeviceStatus = DeviceStatus.OFFLINE
    last_synced_at: Optional[str] = None

    _enums: ClassVar[dict[str, type]] = {"vendor": Vendor, "status": DeviceStatus}


@dataclass
class Interface(_Record):
    """A physical port.

    In access mode only ``access_vlan`` is operative; in trunk mode only
    ``trunk_allowed_vlans`` and ``native_vlan`` are.
    """
    id: str
    device_id: str
    name: str
    description: str = ""
    status: PortStatus = PortStatus.DOWN
    speed: PortSpeed = PortSpeed.AUTO
    duplex: Duplex = Duplex.AUTO
    mode: PortMode = PortMode.ACCESS
    access_vlan: Optional[int] = None
    trunk_allowed_vlans: list[int] = field(default_factory=list)
    native_vlan: Optional[int] = None
    lacp_group_id: Optional[str] = None

    _enums: ClassVar[dict[str, type]] = {
        "status": PortStatus,
        "speed": PortSpeed,
        "duplex": Duplex,
        "mode": PortMode,
    }


@dataclass
class Vlan(_Record):
    id: str
    device_id: str
    vlan_id: int
    name: str
    description: str = ""


@dataclass
class LacpGroup(_Record):
    """A link aggregation bundle (Port-channel / ae)."""
    id: str
    device_id: str
    group_number: int
    name: str = ""
    mode: LacpMode = LacpMode.ACTIVE
    load_balancing: LoadBalancing = LoadBalancing.SRC_DST_IP
    min_links: int = 1
    max_links: int = 8

    _enums: ClassVar[dict[str, type]] = {
        "mode": LacpMode,
        "load_balancing": LoadBalancing,
    }


@dataclass
class ImportedVlan:
    """A VLAN recognised in vendor text, not yet persisted."""
    vlan_id: int
    name: str
    # 1-based source line of the stanza
    line: Optional[int] = field(default=None, compare=False)

    def to_dict(self) -> dict:
        return {"vlan_id": self.vlan_id, "name": self.name, "line": self.line}
