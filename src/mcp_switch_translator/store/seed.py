"""Sample data for demos and local testing."""
import logging
from datetime import datetime, timedelta, timezone

from ..model import DeviceStatus, DeviceUpdate, InterfaceUpdate
from .base import DeviceRepository

logger = logging.getLogger(__name__)

CORE_PORTS = [
    "GigabitEthernet0/1",
    "GigabitEthernet0/2",
    "GigabitEthernet0/3",
    "GigabitEthernet0/4",
    "GigabitEthernet0/5",
    "GigabitEthernet0/6",
    "GigabitEthernet0/7",
    "GigabitEthernet0/8",
    "TenGigabitEthernet0/1",
    "TenGigabitEthernet0/2",
]


async def seed_sample_data(store: DeviceRepository) -> dict[str, str]:
    """
    Populate a store with three switches and a small core configuration.

    The core switch gets ten ports (six access in VLAN 10, four trunks
    carrying 10/20/30), three VLANs and one LACP group bundling the
    TenGigabit ports.

    Returns:
        Mapping of hostname to device id
    """
    now = datetime.now(timezone.utc)

    core = await store.create_device(
        "switch-core-01", "192.168.1.1", "cisco", "Catalyst 9300",
        default_ports=False,
    )
    await store.update_device(core.id, DeviceUpdate(
        status=DeviceStatus.ONLINE,
        last_synced_at=now.isoformat(),
    ))

    dist = await store.create_device(
        "switch-dist-02", "192.168.1.2", "juniper", "EX4300",
        default_ports=False,
    )
    await store.update_device(dist.id, DeviceUpdate(
        status=DeviceStatus.ONLINE,
        last_synced_at=(now - timedelta(minutes=30)).isoformat(),
    ))

    access = await store.create_device(
        "switch-access-05", "192.168.1.5", "cisco", "Catalyst 2960X",
        default_ports=False,
    )

    ten_gig_ids = []
    for index, name in enumerate(CORE_PORTS):
        is_access = index < 6
        iface = await store.create_interface(
            core.id,
            name,
            description="Server port" if index < 4 else "",
            status="up" if index < 8 else "down",
            speed="10G" if name.startswith("Ten") else "1G",
            duplex="full",
            mode="access" if is_access else "trunk",
            access_vlan=10 if is_access else None,
            trunk_allowed_vlans=[] if is_access else [10, 20, 30],
            native_vlan=None if is_access else 1,
        )
        if name.startswith("TenGigabitEthernet"):
            ten_gig_ids.append(iface.id)

    await store.create_vlan(core.id, 10, "Production", "Production network")
    await store.create_vlan(core.id, 20, "Development", "Development network")
    await store.create_vlan(core.id, 30, "Management", "Management network")

    group = await store.create_lacp_group(
        core.id,
        group_number=1,
        name="Uplink-Bundle",
        mode="active",
        load_balancing="src-dst-ip",
        min_links=1,
        max_links=4,
    )
    await store.bulk_update_interfaces(
        ten_gig_ids,
        InterfaceUpdate(lacp_group_id=group.id),
    )

    logger.info("Seeded sample data: 3 devices")
    return {
        core.hostname: core.id,
        dist.hostname: dist.id,
        access.hostname: access.id,
    }
