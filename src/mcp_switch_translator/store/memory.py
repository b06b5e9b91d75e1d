"""In-process record store backed by dicts."""
import logging
import uuid
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Optional

from ..model import (
    Device,
    DeviceStatus,
    DeviceUpdate,
    Interface,
    InterfaceUpdate,
    LacpGroup,
    LacpGroupUpdate,
    LacpMode,
    LoadBalancing,
    PortMode,
    PortStatus,
    Vendor,
    Vlan,
    VlanUpdate,
)
from .base import DeviceRepository, RecordNotFound

logger = logging.getLogger(__name__)

DEFAULT_PORT_COUNT = 24

DEFAULT_PORT_PREFIX = {
    Vendor.CISCO: "GigabitEthernet0/",
    Vendor.JUNIPER: "ge-0/0/",
}


def new_id() -> str:
    return str(uuid.uuid4())


class MemoryStore(DeviceRepository):
    """Dict-backed store. Records are copied on the way out.

    Every mutation runs inside ``_transaction``: if persisting the touched
    collections fails, they are restored to their previous contents and the
    error propagates, so a rejected write is never visible afterwards.
    """

    def __init__(self):
        self.devices: dict[str, Device] = {}
        self.interfaces: dict[str, Interface] = {}
        self.vlans: dict[str, Vlan] = {}
        self.lacp_groups: dict[str, LacpGroup] = {}

    def _changed(self, *collections: str) -> None:
        """Persist the named collections. No-op in memory."""
        pass

    @contextmanager
    def _transaction(self, *collections: str):
        saved = {name: dict(getattr(self, name)) for name in collections}
        try:
            yield
            self._changed(*collections)
        except Exception:
            for name, records in saved.items():
                setattr(self, name, records)
            raise

    def _drop_by_device(self, collection: str, device_id: str) -> int:
        records = getattr(self, collection)
        doomed = [k for k, r in records.items() if r.device_id == device_id]
        for key in doomed:
            del records[key]
        return len(doomed)

    # === Devices ===

    async def list_devices(self) -> list[Device]:
        return [replace(d) for d in self.devices.values()]

    async def get_device(self, device_id: str) -> Optional[Device]:
        device = self.devices.get(device_id)
        return replace(device) if device else None

    async def create_device(
        self,
        hostname: str,
        ip_address: str,
        vendor: Vendor,
        model: str,
        default_ports: bool = True,
    ) -> Device:
        vendor = Vendor(vendor)
        device = Device(
            id=new_id(),
            hostname=hostname,
            ip_address=ip_address,
            vendor=vendor,
            model=model,
            status=DeviceStatus.OFFLINE,
            last_synced_at=None,
        )

        touched = ("devices", "interfaces", "vlans") if default_ports else ("devices",)
        with self._transaction(*touched):
            self.devices[device.id] = device
            if default_ports:
                prefix = DEFAULT_PORT_PREFIX[vendor]
                for n in range(1, DEFAULT_PORT_COUNT + 1):
                    iface = Interface(
                        id=new_id(),
                        device_id=device.id,
                        name=f"{prefix}{n}",
                        status=PortStatus.DOWN,
                        mode=PortMode.ACCESS,
                        access_vlan=1,
                    )
                    self.interfaces[iface.id] = iface

                default_vlan = Vlan(
                    id=new_id(),
                    device_id=device.id,
                    vlan_id=1,
                    name="default",
                    description="Default VLAN",
                )
                self.vlans[default_vlan.id] = default_vlan

        logger.info(f"Created device {hostname} ({vendor.value}) as {device.id}")
        return replace(device)

    async def update_device(self, device_id: str, update: DeviceUpdate) -> Device:
        device = self.devices.get(device_id)
        if device is None:
            raise RecordNotFound("Device", device_id)
        updated = update.apply(device)
        with self._transaction("devices"):
            self.devices[device_id] = updated
        return replace(updated)

    async def delete_device(self, device_id: str) -> bool:
        """Delete a device and everything it owns in one write."""
        if device_id not in self.devices:
            return False
        with self._transaction("devices", "interfaces", "vlans", "lacp_groups"):
            for collection in ("interfaces", "vlans", "lacp_groups"):
                self._drop_by_device(collection, device_id)
            del self.devices[device_id]
        logger.info(f"Deleted device {device_id}")
        return True

    # === Interfaces ===

    async def list_interfaces(self, device_id: str) -> list[Interface]:
        return [
            replace(i, trunk_allowed_vlans=list(i.trunk_allowed_vlans))
            for i in self.interfaces.values()
            if i.device_id == device_id
        ]

    async def get_interface(self, interface_id: str) -> Optional[Interface]:
        iface = self.interfaces.get(interface_id)
        if iface is None:
            return None
        return replace(iface, trunk_allowed_vlans=list(iface.trunk_allowed_vlans))

    async def create_interface(self, device_id: str, name: str, **attrs: Any) -> Interface:
        iface = Interface.from_dict({
            **attrs,
            "id": new_id(),
            "device_id": device_id,
            "name": name,
        })
        with self._transaction("interfaces"):
            self.interfaces[iface.id] = iface
        return replace(iface, trunk_allowed_vlans=list(iface.trunk_allowed_vlans))

    def _patch_interface(self, interface_id: str, update: InterfaceUpdate) -> Interface:
        iface = self.interfaces.get(interface_id)
        if iface is None:
            raise RecordNotFound("Interface", interface_id)
        updated = update.apply(iface)
        self.interfaces[interface_id] = updated
        return replace(updated, trunk_allowed_vlans=list(updated.trunk_allowed_vlans))

    async def update_interface(
        self,
        interface_id: str,
        update: InterfaceUpdate,
    ) -> Interface:
        with self._transaction("interfaces"):
            return self._patch_interface(interface_id, update)

    async def bulk_update_interfaces(
        self,
        interface_ids: list[str],
        update: InterfaceUpdate,
    ) -> list[Interface]:
        result = []
        with self._transaction("interfaces"):
            for interface_id in interface_ids:
                try:
                    result.append(self._patch_interface(interface_id, update))
                except RecordNotFound:
                    logger.warning(f"Bulk update skipped unknown interface {interface_id}")
        return result

    async def delete_interfaces_by_device(self, device_id: str) -> None:
        with self._transaction("interfaces"):
            self._drop_by_device("interfaces", device_id)

    # === VLANs ===

    async def list_vlans(self, device_id: str) -> list[Vlan]:
        return [replace(v) for v in self.vlans.values() if v.device_id == device_id]

    async def list_all_vlans(self) -> list[Vlan]:
        return [replace(v) for v in self.vlans.values()]

    async def get_vlan(self, vlan_record_id: str) -> Optional[Vlan]:
        vlan = self.vlans.get(vlan_record_id)
        return replace(vlan) if vlan else None

    async def create_vlan(
        self,
        device_id: str,
        vlan_id: int,
        name: str,
        description: str = "",
    ) -> Vlan:
        vlan = Vlan(
            id=new_id(),
            device_id=device_id,
            vlan_id=vlan_id,
            name=name,
            description=description,
        )
        with self._transaction("vlans"):
            self.vlans[vlan.id] = vlan
        return replace(vlan)

    async def update_vlan(self, vlan_record_id: str, update: VlanUpdate) -> Vlan:
        vlan = self.vlans.get(vlan_record_id)
        if vlan is None:
            raise RecordNotFound("VLAN", vlan_record_id)
        updated = update.apply(vlan)
        with self._transaction("vlans"):
            self.vlans[vlan_record_id] = updated
        return replace(updated)

    async def delete_vlan(self, vlan_record_id: str) -> bool:
        if vlan_record_id not in self.vlans:
            return False
        with self._transaction("vlans"):
            del self.vlans[vlan_record_id]
        return True

    async def delete_vlans_by_device(self, device_id: str) -> None:
        with self._transaction("vlans"):
            self._drop_by_device("vlans", device_id)

    # === LACP groups ===

    async def list_lacp_groups(self, device_id: str) -> list[LacpGroup]:
        return [
            replace(g) for g in self.lacp_groups.values()
            if g.device_id == device_id
        ]

    async def list_all_lacp_groups(self) -> list[LacpGroup]:
        return [replace(g) for g in self.lacp_groups.values()]

    async def get_lacp_group(self, group_id: str) -> Optional[LacpGroup]:
        group = self.lacp_groups.get(group_id)
        return replace(group) if group else None

    async def create_lacp_group(
        self,
        device_id: str,
        group_number: int,
        name: str = "",
        mode: LacpMode = LacpMode.ACTIVE,
        load_balancing: LoadBalancing = LoadBalancing.SRC_DST_IP,
        min_links: int = 1,
        max_links: int = 8,
    ) -> LacpGroup:
        group = LacpGroup(
            id=new_id(),
            device_id=device_id,
            group_number=group_number,
            name=name,
            mode=LacpMode(mode),
            load_balancing=LoadBalancing(load_balancing),
            min_links=min_links,
            max_links=max_links,
        )
        with self._transaction("lacp_groups"):
            self.lacp_groups[group.id] = group
        return replace(group)

    async def update_lacp_group(
        self,
        group_id: str,
        update: LacpGroupUpdate,
    ) -> LacpGroup:
        group = self.lacp_groups.get(group_id)
        if group is None:
            raise RecordNotFound("LACP group", group_id)
        updated = update.apply(group)
        with self._transaction("lacp_groups"):
            self.lacp_groups[group_id] = updated
        return replace(updated)

    async def delete_lacp_group(self, group_id: str) -> bool:
        if group_id not in self.lacp_groups:
            return False
        with self._transaction("interfaces", "lacp_groups"):
            for iface in list(self.interfaces.values()):
                if iface.lacp_group_id == group_id:
                    self.interfaces[iface.id] = replace(iface, lacp_group_id=None)
            del self.lacp_groups[group_id]
        return True

    async def delete_lacp_groups_by_device(self, device_id: str) -> None:
        with self._transaction("lacp_groups"):
            self._drop_by_device("lacp_groups", device_id)

    # === Stats ===

    async def get_stats(self) -> dict[str, int]:
        return {
            "total_devices": len(self.devices),
            "online_devices": sum(
                1 for d in self.devices.values()
                if d.status == DeviceStatus.ONLINE
            ),
            "total_vlans": len(self.vlans),
            "total_lacp_groups": len(self.lacp_groups),
        }
