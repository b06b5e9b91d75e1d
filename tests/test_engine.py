"""Tests for the translator engine."""
import pytest
from mcp_switch_translator.model import DeviceStatus, ImportedVlan, Vendor
from mcp_switch_translator.store import MemoryStore, RecordNotFound, StoreError
from mcp_switch_translator.translator import ConfigImportError, TranslatorEngine
from mcp_switch_translator.utils.audit_log import get_recent_changes


class FailingStore(MemoryStore):
    """Store that rejects VLAN creates after a number of successes."""

    def __init__(self, succeed: int):
        super().__init__()
        self.succeed = succeed

    async def create_vlan(self, device_id, vlan_id, name, description=""):
        if self.succeed <= 0:
            raise StoreError("disk full")
        self.succeed -= 1
        return await super().create_vlan(device_id, vlan_id, name, description)


class TestGenerateConfig:
    """Tests for generate_config."""

    @pytest.mark.asyncio
    async def test_cisco_default_device(self, store):
        """A new device renders VLAN 1 and its 24 default ports."""
        device = await store.create_device("sw1", "10.0.0.1", Vendor.CISCO, "C9300")

        config = await TranslatorEngine(store).generate_config(device.id)

        assert config.startswith("!\nhostname sw1\n!")
        assert "vlan 1\n name default" in config
        assert "interface GigabitEthernet0/24" in config
        assert config.endswith("!\nend")

    @pytest.mark.asyncio
    async def test_juniper_default_device(self, store):
        device = await store.create_device("sw2", "10.0.0.2", Vendor.JUNIPER, "EX4300")

        config = await TranslatorEngine(store).generate_config(device.id)

        assert "host-name sw2;" in config
        assert "    ge-0/0/1 {" in config
        assert "members default;" in config

    @pytest.mark.asyncio
    async def test_unknown_device(self, store):
        with pytest.raises(RecordNotFound):
            await TranslatorEngine(store).generate_config("missing")


class TestImportConfig:
    """Tests for import_config."""

    @pytest.mark.asyncio
    async def test_import_creates_vlans(self, store, audit_file):
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")
        engine = TranslatorEngine(store)

        result = await engine.import_config(
            device.id, "vlan 10\n name Production\n!\nvlan 20\n!"
        )

        assert result.created_count == 2
        vlans = await store.list_vlans(device.id)
        assert [(v.vlan_id, v.name) for v in vlans] == [
            (1, "default"),
            (10, "Production"),
            (20, "VLAN20"),
        ]
        assert all(v.description == "" for v in vlans if v.vlan_id != 1)

    @pytest.mark.asyncio
    async def test_import_marks_device_online(self, store, audit_file):
        device = await store.create_device("sw1", "10.0.0.1", "juniper", "EX4300")

        result = await TranslatorEngine(store).import_config(
            device.id, "prod { vlan-id 10; }"
        )

        updated = await store.get_device(device.id)
        assert updated.status == DeviceStatus.ONLINE
        assert updated.last_synced_at == result.synced_at
        assert result.synced_at is not None

    @pytest.mark.asyncio
    async def test_reimport_duplicates(self, store, audit_file):
        """Importing the same text twice creates the VLANs twice."""
        device = await store.create_device(
            "sw1", "10.0.0.1", "cisco", "C9300", default_ports=False
        )
        engine = TranslatorEngine(store)
        text = "vlan 10\n name Production\n!"

        await engine.import_config(device.id, text)
        await engine.import_config(device.id, text)

        vlans = await store.list_vlans(device.id)
        assert [(v.vlan_id, v.name) for v in vlans] == [
            (10, "Production"),
            (10, "Production"),
        ]

    @pytest.mark.asyncio
    async def test_unrecognised_text_still_syncs(self, store, audit_file):
        """Text with no VLANs is not an error."""
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")

        result = await TranslatorEngine(store).import_config(device.id, "hostname x\n!")

        assert result.created_count == 0
        assert (await store.get_device(device.id)).status == DeviceStatus.ONLINE

    @pytest.mark.asyncio
    async def test_unknown_device(self, store, audit_file):
        with pytest.raises(RecordNotFound):
            await TranslatorEngine(store).import_config("missing", "vlan 10\n!")

    @pytest.mark.asyncio
    async def test_empty_text_rejected(self, store, audit_file):
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")

        with pytest.raises(ConfigImportError, match="required"):
            await TranslatorEngine(store).import_config(device.id, "")

        assert (await store.get_device(device.id)).status == DeviceStatus.OFFLINE

    @pytest.mark.asyncio
    async def test_device_checked_before_text(self, store, audit_file):
        with pytest.raises(RecordNotFound):
            await TranslatorEngine(store).import_config("missing", "")

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_created(self, audit_file):
        """VLANs created before a store failure stay committed."""
        store = FailingStore(succeed=1)
        device = await store.create_device(
            "sw1", "10.0.0.1", "cisco", "C9300", default_ports=False
        )
        text = "vlan 10\n!\nvlan 20\n!\nvlan 30\n!"

        with pytest.raises(StoreError, match="disk full"):
            await TranslatorEngine(store).import_config(device.id, text)

        vlans = await store.list_vlans(device.id)
        assert [v.vlan_id for v in vlans] == [10]
        # Status is only updated after every VLAN is created
        assert (await store.get_device(device.id)).status == DeviceStatus.OFFLINE

    @pytest.mark.asyncio
    async def test_import_is_audited(self, store, audit_file):
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")

        await TranslatorEngine(store).import_config(device.id, "vlan 10\n name A\n!")

        changes = get_recent_changes(audit_file, device_id=device.id)
        assert len(changes) == 1
        assert changes[0].operation == "import_config"
        assert changes[0].success is True
        assert changes[0].output == "10:A"

    @pytest.mark.asyncio
    async def test_failed_import_is_audited(self, audit_file):
        store = FailingStore(succeed=0)
        device = await store.create_device("sw1", "10.0.0.1", "cisco", "C9300")

        with pytest.raises(StoreError):
            await TranslatorEngine(store).import_config(device.id, "vlan 10\n!")

        changes = get_recent_changes(audit_file, operation="import_config")
        assert len(changes) == 1
        assert changes[0].success is False
        assert changes[0].error == "disk full"


class TestPreviewAndDiff:
    """Tests for preview_import and diff_config."""

    @pytest.mark.asyncio
    async def test_preview_does_not_persist(self, store):
        device = await store.create_device(
            "sw1", "10.0.0.1", "cisco", "C9300", default_ports=False
        )

        vlans = await TranslatorEngine(store).preview_import(
            device.id, "vlan 10\n name Production\n!"
        )

        assert vlans == [ImportedVlan(10, "Production")]
        assert await store.list_vlans(device.id) == []
        assert (await store.get_device(device.id)).status == DeviceStatus.OFFLINE

    @pytest.mark.asyncio
    async def test_diff_identical_is_empty(self, store):
        device = await store.create_device("sw1", "10.0.0.1", "juniper", "EX4300")
        engine = TranslatorEngine(store)
        config = await engine.generate_config(device.id)

        assert await engine.diff_config(device.id, config) == ""

    @pytest.mark.asyncio
    async def test_diff_shows_changes(self, store):
        device = await store.create_device(
            "sw1", "10.0.0.1", "cisco", "C9300", default_ports=False
        )
        engine = TranslatorEngine(store)
        candidate = (await engine.generate_config(device.id)).replace(
            "hostname sw1", "hostname sw9"
        )

        diff = await engine.diff_config(device.id, candidate)

        assert "--- generated" in diff
        assert "+++ candidate" in diff
        assert "-hostname sw1" in diff
        assert "+hostname sw9" in diff
