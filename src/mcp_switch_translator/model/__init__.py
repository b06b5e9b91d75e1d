"""Vendor-neutral device model and field-level update patches."""
from .schema import (
    Device,
    DeviceStatus,
    Duplex,
    ImportedVlan,
    Interface,
    LacpGroup,
    LacpMode,
    LoadBalancing,
    PortMode,
    PortSpeed,
    PortStatus,
    Vendor,
    Vlan,
)
from .updates import (
    UNSET,
    DeviceUpdate,
    InterfaceUpdate,
    LacpGroupUpdate,
    UpdateError,
    VlanUpdate,
)

__all__ = [
    # Records
    "Device",
    "Interface",
    "Vlan",
    "LacpGroup",
    "ImportedVlan",
    # Option sets
    "Vendor",
    "DeviceStatus",
    "PortStatus",
    "PortSpeed",
    "Duplex",
    "PortMode",
    "LacpMode",
    "LoadBalancing",
    # Patches
    "DeviceUpdate",
    "InterfaceUpdate",
    "VlanUpdate",
    "LacpGroupUpdate",
    "UpdateError",
    "UNSET",
]
