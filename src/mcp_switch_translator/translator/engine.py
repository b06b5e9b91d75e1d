"""Translator engine - connects the record store to the dialect translators.

Provides a single entry point for:
1. Generating a device's configuration in its vendor dialect
2. Importing vendor text into the store (VLANs only)
3. Previewing an import without persisting
4. Diffing generated configuration against other text
"""
import difflib
import logging
from datetime import datetime, timezone
from typing import Optional

from ..model import DeviceStatus, DeviceUpdate, ImportedVlan
from ..store import DeviceRepository, RecordNotFound
from ..utils.audit_log import ChangeTracker
from ..utils.logging_config import timed
from .generator import ConfigGenerator
from .parser import ConfigImporter
from .schema import ImportResult

logger = logging.getLogger(__name__)


class ConfigImportError(ValueError):
    """Import request rejected before parsing."""
    pass


class TranslatorEngine:
    """
    Generate and import vendor configuration for stored devices.

    Usage:
        engine = TranslatorEngine(store)
        text = await engine.generate_config(device_id)
        result = await engine.import_config(device_id, text)
    """

    def __init__(
        self,
        store: DeviceRepository,
        generator: Optional[ConfigGenerator] = None,
        importer: Optional[ConfigImporter] = None,
    ):
        self.store = store
        self.generator = generator or ConfigGenerator()
        self.importer = importer or ConfigImporter()

    @timed("generate_config")
    async def generate_config(self, device_id: str) -> str:
        """
        Render a device's records in its vendor dialect.

        Raises:
            RecordNotFound: If the device does not exist
        """
        device, interfaces, vlans, lacp_groups = (
            await self.store.load_device_records(device_id)
        )
        logger.debug(
            f"Generating {device.vendor.value} config for {device.hostname}: "
            f"{len(interfaces)} interfaces, {len(vlans)} VLANs, "
            f"{len(lacp_groups)} LACP groups"
        )
        return self.generator.generate(device, interfaces, vlans, lacp_groups)

    async def preview_import(self, device_id: str, text: str) -> list[ImportedVlan]:
        """Parse text in the device's dialect without persisting anything."""
        device = await self._get_device(device_id)
        self._check_text(text)
        return self.importer.parse(device.vendor, text)

    @timed("import_config")
    async def import_config(self, device_id: str, text: str) -> ImportResult:
        """
        Import vendor text into the store.

        Each recognised VLAN becomes a new record, one store call at a time.
        Existing VLANs are not merged, so importing the same text twice
        creates duplicates. On success the device is marked online with a
        fresh sync timestamp.

        The import is not atomic: if the store rejects a create, the error
        propagates and VLANs created before it stay committed.

        Args:
            device_id: Target device
            text: Raw configuration text

        Returns:
            ImportResult with recognised and created VLANs

        Raises:
            RecordNotFound: If the device does not exist
            ConfigImportError: If the text is empty
        """
        device = await self._get_device(device_id)
        self._check_text(text)

        recognised = self.importer.parse(device.vendor, text)
        result = ImportResult(
            device_id=device_id,
            vendor=device.vendor.value,
            recognised=recognised,
        )
        tracker = ChangeTracker(device_id)
        parameters = {"vendor": result.vendor, "text_length": len(text)}

        logger.info(
            f"Importing {len(recognised)} VLAN(s) into {device.hostname} "
            f"({result.vendor})"
        )

        try:
            for item in recognised:
                vlan = await self.store.create_vlan(
                    device_id,
                    vlan_id=item.vlan_id,
                    name=item.name,
                    description="",
                )
                result.created.append(vlan)

            result.synced_at = datetime.now(timezone.utc).isoformat()
            await self.store.update_device(device_id, DeviceUpdate(
                status=DeviceStatus.ONLINE,
                last_synced_at=result.synced_at,
            ))
        except Exception as e:
            logger.error(
                f"Import into {device_id} failed after "
                f"{result.created_count}/{len(recognised)} VLAN(s): {e}"
            )
            tracker.log_change(
                operation="import_config",
                parameters=parameters,
                success=False,
                output=f"{result.created_count} VLAN(s) committed before failure",
                error=str(e),
            )
            raise

        tracker.log_change(
            operation="import_config",
            parameters=parameters,
            success=True,
            output=", ".join(f"{v.vlan_id}:{v.name}" for v in result.created),
        )
        return result

    async def diff_config(self, device_id: str, text: str) -> str:
        """
        Unified diff from the generated configuration to ``text``.

        Returns an empty string when both are identical.
        """
        generated = await self.generate_config(device_id)
        diff = difflib.unified_diff(
            generated.split("\n"),
            text.split("\n"),
            fromfile="generated",
            tofile="candidate",
            lineterm="",
        )
        return "\n".join(diff)

    async def _get_device(self, device_id: str):
        device = await self.store.get_device(device_id)
        if device is None:
            raise RecordNotFound("Device", device_id)
        return device

    def _check_text(self, text: str) -> None:
        if not text or not isinstance(text, str):
            raise ConfigImportError("Configuration text is required")
