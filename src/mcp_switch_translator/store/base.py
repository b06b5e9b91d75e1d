"""Repository interface for device records."""
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..model import (
    Device,
    DeviceUpdate,
    Interface,
    InterfaceUpdate,
    LacpGroup,
    LacpGroupUpdate,
    LacpMode,
    LoadBalancing,
    Vendor,
    Vlan,
    VlanUpdate,
)


class StoreError(Exception):
    """The record store rejected an operation."""
    pass


class RecordNotFound(StoreError):
    """No record with the requested id."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class DeviceRepository(ABC):
    """Abstract store of devices, interfaces, VLANs and LACP groups.

    Deleting a device cascades to everything it owns. Deleting a LACP group
    only detaches its member interfaces.
    """

    # Devices
    @abstractmethod
    async def list_devices(self) -> list[Device]:
        pass

    @abstractmethod
    async def get_device(self, device_id: str) -> Optional[Device]:
        pass

    @abstractmethod
    async def create_device(
        self,
        hostname: str,
        ip_address: str,
        vendor: Vendor,
        model: str,
        default_ports: bool = True,
    ) -> Device:
        """Create a device, by default with 24 access ports and VLAN 1."""
        pass

    @abstractmethod
    async def update_device(self, device_id: str, update: DeviceUpdate) -> Device:
        pass

    @abstractmethod
    async def delete_device(self, device_id: str) -> bool:
        pass

    # Interfaces
    @abstractmethod
    async def list_interfaces(self, device_id: str) -> list[Interface]:
        pass

    @abstractmethod
    async def get_interface(self, interface_id: str) -> Optional[Interface]:
        pass

    @abstractmethod
    async def create_interface(self, device_id: str, name: str, **attrs: Any) -> Interface:
        pass

    @abstractmethod
    async def update_interface(
        self,
        interface_id: str,
        update: InterfaceUpdate,
    ) -> Interface:
        pass

    @abstractmethod
    async def bulk_update_interfaces(
        self,
        interface_ids: list[str],
        update: InterfaceUpdate,
    ) -> list[Interface]:
        """Apply one patch to many interfaces, skipping unknown ids."""
        pass

    @abstractmethod
    async def delete_interfaces_by_device(self, device_id: str) -> None:
        pass

    # VLANs
    @abstractmethod
    async def list_vlans(self, device_id: str) -> list[Vlan]:
        pass

    @abstractmethod
    async def list_all_vlans(self) -> list[Vlan]:
        pass

    @abstractmethod
    async def get_vlan(self, vlan_record_id: str) -> Optional[Vlan]:
        pass

    @abstractmethod
    async def create_vlan(
        self,
        device_id: str,
        vlan_id: int,
        name: str,
        description: str = "",
    ) -> Vlan:
        pass

    @abstractmethod
    async def update_vlan(self, vlan_record_id: str, update: VlanUpdate) -> Vlan:
        pass

    @abstractmethod
    async def delete_vlan(self, vlan_record_id: str) -> bool:
        pass

    @abstractmethod
    async def delete_vlans_by_device(self, device_id: str) -> None:
        pass

    # LACP groups
    @abstractmethod
    async def list_lacp_groups(self, device_id: str) -> list[LacpGroup]:
        pass

    @abstractmethod
    async def list_all_lacp_groups(self) -> list[LacpGroup]:
        pass

    @abstractmethod
    async def get_lacp_group(self, group_id: str) -> Optional[LacpGroup]:
        pass

    @abstractmethod
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
        pass

    @abstractmethod
    async def update_lacp_group(
        self,
        group_id: str,
        update: LacpGroupUpdate,
    ) -> LacpGroup:
        pass

    @abstractmethod
    async def delete_lacp_group(self, group_id: str) -> bool:
        """Delete a group and clear ``lacp_group_id`` on its members."""
        pass

    @abstractmethod
    async def delete_lacp_groups_by_device(self, device_id: str) -> None:
        pass

    # Stats
    @abstractmethod
    async def get_stats(self) -> dict[str, int]:
        pass

    # Convenience
    async def load_device_records(
        self,
        device_id: str,
    ) -> tuple[Device, list[Interface], list[Vlan], list[LacpGroup]]:
        """Fetch a device and its three record collections.

        Raises:
            RecordNotFound: If the device does not exist
        """
        device = await self.get_device(device_id)
        if device is None:
            raise RecordNotFound("Device", device_id)

        interfaces = await self.list_interfaces(device_id)
        vlans = await self.list_vlans(device_id)
        lacp_groups = await self.list_lacp_groups(device_id)
        return device, interfaces, vlans, lacp_groups
