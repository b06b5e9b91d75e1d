"""Tests for the record stores."""
from pathlib import Path

import pytest
import yaml
from mcp_switch_translator.model import (
    DeviceStatus,
    DeviceUpdate,
    InterfaceUpdate,
    LacpGroupUpdate,
    LacpMode,
    PortMode,
    Vendor,
    VlanUpdate,
)
from mcp_switch_translator.store import (
    RecordNotFound,
    StoreError,
    YamlStore,
    seed_sample_data,
)
from mcp_switch_translator.translator import TranslatorEngine


class TestMemoryStoreDevices:
    """Tests for device CRUD."""

    @pytest.mark.asyncio
    async def test_create_device_defaults(self, store):
        """New devices are offline with 24 access ports in VLAN 1."""
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")

        assert device.vendor == Vendor.CISCO
        assert device.status == DeviceStatus.OFFLINE
        assert device.last_synced_at is None

        interfaces = await store.list_interfaces(device.id)
        assert len(interfaces) == 24
        assert interfaces[0].name == "GigabitEthernet0/1"
        assert all(i.mode == PortMode.ACCESS and i.access_vlan == 1 for i in interfaces)

        vlans = await store.list_vlans(device.id)
        assert [(v.vlan_id, v.name) for v in vlans] == [(1, "default")]

    @pytest.mark.asyncio
    async def test_juniper_port_names(self, store):
        device = await store.create_device("sw2", "10.0.0.2", "juniper", "EX4300")

        interfaces = await store.list_interfaces(device.id)

        assert interfaces[-1].name == "ge-0/0/24"

    @pytest.mark.asyncio
    async def test_without_default_ports(self, store):
        device = await store.create_device(
            "sw1", "10.0.0.1", "cisco", "C9300", default_ports=False
        )

        assert await store.list_interfaces(device.id) == []
        assert await store.list_vlans(device.id) == []

    @pytest.mark.asyncio
    async def test_update_device(self, store):
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")

        updated = await store.update_device(
            device.id, DeviceUpdate(status=DeviceStatus.ONLINE)
        )

        assert updated.status == DeviceStatus.ONLINE
        assert updated.hostname == "sw1"

    @pytest.mark.asyncio
    async def test_update_unknown_device(self, store):
        with pytest.raises(RecordNotFound, match="Device not found: nope"):
            await store.update_device("nope", DeviceUpdate(model="x"))

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, store):
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")
        iface = (await store.list_interfaces(device.id))[0]

        iface.trunk_allowed_vlans.append(10)
        device.hostname = "changed"

        assert (await store.get_interface(iface.id)).trunk_allowed_vlans == []
        assert (await store.get_device(device.id)).hostname == "sw1"

    @pytest.mark.asyncio
    async def test_delete_device_cascades(self, store):
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")
        other = await store.create_device("sw2", "10.0.0.2", "cisco", "C9300")
        await store.create_lacp_group(device.id, group_number=1)

        assert await store.delete_device(device.id) is True

        assert await store.get_device(device.id) is None
        assert await store.list_interfaces(device.id) == []
        assert await store.list_vlans(device.id) == []
        assert await store.list_lacp_groups(device.id) == []
        assert len(await store.list_interfaces(other.id)) == 24

    @pytest.mark.asyncio
    async def test_delete_unknown_device(self, store):
        assert await store.delete_device("nope") is False


class TestMemoryStoreRecords:
    """Tests for interfaces, VLANs and LACP groups."""

    @pytest.mark.asyncio
    async def test_update_interface(self, store):
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")
        iface = (await store.list_interfaces(device.id))[0]

        updated = await store.update_interface(iface.id, InterfaceUpdate(
            mode=PortMode.TRUNK, trunk_allowed_vlans=[10, 20],
        ))

        assert updated.mode == PortMode.TRUNK
        assert updated.trunk_allowed_vlans == [10, 20]
        assert updated.name == iface.name

    @pytest.mark.asyncio
    async def test_bulk_update_skips_unknown(self, store):
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")
        ids = [i.id for i in (await store.list_interfaces(device.id))[:2]]

        updated = await store.bulk_update_interfaces(
            ids + ["missing"], InterfaceUpdate(description="uplink")
        )

        assert len(updated) == 2
        assert all(i.description == "uplink" for i in updated)

    @pytest.mark.asyncio
    async def test_vlan_crud(self, store):
        device = await store.create_device(
            "sw1", "10.0.0.1", "cisco", "C9300", default_ports=False
        )

        vlan = await store.create_vlan(device.id, 10, "Production")
        renamed = await store.update_vlan(vlan.id, VlanUpdate(name="Prod"))

        assert renamed.name == "Prod"
        assert (await store.get_vlan(vlan.id)).name == "Prod"
        assert await store.delete_vlan(vlan.id) is True
        assert await store.get_vlan(vlan.id) is None

    @pytest.mark.asyncio
    async def test_duplicate_vlan_ids_allowed(self, store):
        device = await store.create_device(
            "sw1", "10.0.0.1", "cisco", "C9300", default_ports=False
        )

        await store.create_vlan(device.id, 10, "a")
        await store.create_vlan(device.id, 10, "b")

        assert len(await store.list_vlans(device.id)) == 2

    @pytest.mark.asyncio
    async def test_delete_lacp_group_detaches_members(self, store):
        """Members keep existing with their group reference cleared."""
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")
        group = await store.create_lacp_group(device.id, 1, mode="passive")
        ids = [i.id for i in (await store.list_interfaces(device.id))[:2]]
        await store.bulk_update_interfaces(ids, InterfaceUpdate(lacp_group_id=group.id))

        assert group.mode == LacpMode.PASSIVE
        assert await store.delete_lacp_group(group.id) is True

        for interface_id in ids:
            assert (await store.get_interface(interface_id)).lacp_group_id is None
        assert await store.list_lacp_groups(device.id) == []

    @pytest.mark.asyncio
    async def test_update_lacp_group(self, store):
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")
        group = await store.create_lacp_group(device.id, 1, name="Uplink")

        updated = await store.update_lacp_group(
            group.id, LacpGroupUpdate(name="Core", max_links=4)
        )

        assert (updated.name, updated.max_links, updated.min_links) == ("Core", 4, 1)
        assert (await store.get_lacp_group(group.id)).name == "Core"

    @pytest.mark.asyncio
    async def test_update_unknown_lacp_group(self, store):
        with pytest.raises(RecordNotFound, match="LACP group not found: nope"):
            await store.update_lacp_group("nope", LacpGroupUpdate(name="x"))

    @pytest.mark.asyncio
    async def test_list_all_lacp_groups(self, store):
        first = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")
        second = await store.create_device("sw2", "10.0.0.2", "juniper", "EX4300")
        await store.create_lacp_group(first.id, 1)
        await store.create_lacp_group(second.id, 2)

        groups = await store.list_all_lacp_groups()

        assert sorted((g.device_id, g.group_number) for g in groups) == sorted(
            [(first.id, 1), (second.id, 2)]
        )

    @pytest.mark.asyncio
    async def test_stats(self, store):
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")
        await store.create_device("sw2", "10.0.0.2", "juniper", "EX4300")
        await store.update_device(device.id, DeviceUpdate(status=DeviceStatus.ONLINE))
        await store.create_lacp_group(device.id, 1)

        assert await store.get_stats() == {
            "total_devices": 2,
            "online_devices": 1,
            "total_vlans": 2,
            "total_lacp_groups": 1,
        }

    @pytest.mark.asyncio
    async def test_load_device_records(self, store):
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")

        loaded, interfaces, vlans, groups = await store.load_device_records(device.id)

        assert loaded.id == device.id
        assert len(interfaces) == 24
        assert len(vlans) == 1
        assert groups == []

    @pytest.mark.asyncio
    async def test_load_unknown_device(self, store):
        with pytest.raises(RecordNotFound):
            await store.load_device_records("missing")


class TestYamlStore:
    """Tests for the YAML-backed store."""

    @pytest.mark.asyncio
    async def test_records_survive_reload(self, tmp_path):
        first = YamlStore(tmp_path)
        device = await first.create_device("sw1", "10.0.0.1", "juniper", "EX4300")
        await first.create_vlan(device.id, 10, "prod", "Production")
        group = await first.create_lacp_group(device.id, 2, name="ae-up")

        second = YamlStore(tmp_path)

        reloaded = await second.get_device(device.id)
        assert reloaded.vendor == Vendor.JUNIPER
        assert len(await second.list_interfaces(device.id)) == 24
        vlans = await second.list_vlans(device.id)
        assert [(v.vlan_id, v.name) for v in vlans] == [(1, "default"), (10, "prod")]
        assert (await second.get_lacp_group(group.id)).name == "ae-up"

    @pytest.mark.asyncio
    async def test_files_hold_plain_values(self, tmp_path):
        store = YamlStore(tmp_path)
        await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")

        rows = yaml.safe_load((tmp_path / "devices.yaml").read_text())

        assert rows[0]["vendor"] == "cisco"
        assert rows[0]["status"] == "offline"

    @pytest.mark.asyncio
    async def test_delete_rewrites_files(self, tmp_path):
        store = YamlStore(tmp_path)
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")
        await store.delete_device(device.id)

        reloaded = YamlStore(tmp_path)

        assert await reloaded.list_devices() == []
        assert await reloaded.list_all_vlans() == []

    @pytest.mark.asyncio
    async def test_failed_write_is_rolled_back(self, tmp_path, monkeypatch):
        """A mutation whose file cannot be written leaves no trace."""
        store = YamlStore(tmp_path)
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")
        write_text = Path.write_text

        def failing_write(self, data, *args, **kwargs):
            if self.name.startswith("vlans"):
                raise OSError("disk full")
            return write_text(self, data, *args, **kwargs)

        monkeypatch.setattr(Path, "write_text", failing_write)
        with pytest.raises(StoreError, match="Failed to write vlans: disk full"):
            await store.create_vlan(device.id, 10, "lost")

        assert [v.vlan_id for v in await store.list_vlans(device.id)] == [1]

        monkeypatch.undo()
        await store.create_vlan(device.id, 20, "kept")

        reloaded = YamlStore(tmp_path)
        vlans = await reloaded.list_vlans(device.id)
        assert [(v.vlan_id, v.name) for v in vlans] == [(1, "default"), (20, "kept")]
        assert not list(tmp_path.glob("*.tmp"))

    @pytest.mark.asyncio
    async def test_failed_cascade_keeps_device(self, tmp_path, monkeypatch):
        """Deleting a device writes all four collections or none."""
        store = YamlStore(tmp_path)
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")
        write_text = Path.write_text

        def failing_write(self, data, *args, **kwargs):
            if self.name.startswith("lacp_groups"):
                raise OSError("read-only file system")
            return write_text(self, data, *args, **kwargs)

        monkeypatch.setattr(Path, "write_text", failing_write)
        with pytest.raises(StoreError):
            await store.delete_device(device.id)
        monkeypatch.undo()

        assert await store.get_device(device.id) is not None
        assert len(await store.list_interfaces(device.id)) == 24
        reloaded = YamlStore(tmp_path)
        assert len(await reloaded.list_interfaces(device.id)) == 24

    def test_corrupt_file(self, tmp_path):
        (tmp_path / "devices.yaml").write_text("- id: d1\n  hostname: [unclosed\n")

        with pytest.raises(StoreError, match="Failed to load"):
            YamlStore(tmp_path)


class TestSeed:
    """Tests for the sample data routine."""

    @pytest.mark.asyncio
    async def test_seed_sample_data(self, store):
        ids = await seed_sample_data(store)

        assert set(ids) == {"switch-core-01", "switch-dist-02", "switch-access-05"}
        core = ids["switch-core-01"]

        interfaces = await store.list_interfaces(core)
        assert len(interfaces) == 10
        bundled = [i.name for i in interfaces if i.lacp_group_id]
        assert bundled == ["TenGigabitEthernet0/1", "TenGigabitEthernet0/2"]

        vlans = await store.list_vlans(core)
        assert [v.name for v in vlans] == ["Production", "Development", "Management"]

        stats = await store.get_stats()
        assert stats["total_devices"] == 3
        assert stats["online_devices"] == 2

    @pytest.mark.asyncio
    async def test_seeded_core_generates_port_channel(self, store):
        ids = await seed_sample_data(store)

        config = await TranslatorEngine(store).generate_config(ids["switch-core-01"])

        assert "interface Port-channel1\n description Uplink-Bundle" in config
        assert " switchport trunk allowed vlan 10,20,30" in config
        assert " channel-group 1 mode active" in config
        assert " speed 10000" in config
