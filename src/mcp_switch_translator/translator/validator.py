"""Boundary validation for device records.

Catches out-of-range values before records reach the store. The generators
and importers never call this: they accept whatever the store holds.
"""
import ipaddress
from typing import Iterable, Optional

from ..model import Device, Interface, LacpGroup, Vlan
from .schema import ValidationResult

VLAN_ID_MIN = 1
VLAN_ID_MAX = 4094
GROUP_NUMBER_MIN = 1
GROUP_NUMBER_MAX = 128
LINKS_MIN = 1
LINKS_MAX = 16


class RecordValidator:
    """Validate records for range and reference errors."""

    def validate_device(self, device: Device) -> ValidationResult:
        errors: list[str] = []

        if not device.hostname:
            errors.append("Hostname is required")
        if not device.model:
            errors.append("Model is required")
        try:
            ipaddress.ip_address(device.ip_address)
        except ValueError:
            errors.append(f"Invalid IP address: {device.ip_address}")

        return ValidationResult(valid=not errors, errors=errors)

    def validate_vlan(
        self,
        vlan: Vlan,
        existing: Iterable[Vlan] = (),
    ) -> ValidationResult:
        """
        Validate a VLAN record.

        Args:
            vlan: VLAN to check
            existing: VLANs already stored for the device

        Returns:
            ValidationResult; a repeated VLAN id is only a warning
        """
        errors: list[str] = []
        warnings: list[str] = []

        self._check_vlan_id(vlan.vlan_id, "VLAN ID", errors)
        if not vlan.name:
            errors.append("VLAN name is required")

        for other in existing:
            if (other.id != vlan.id and
                    other.device_id == vlan.device_id and
                    other.vlan_id == vlan.vlan_id):
                warnings.append(
                    f"VLAN {vlan.vlan_id} already exists on device {vlan.device_id}"
                )
                break

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    def validate_lacp_group(self, group: LacpGroup) -> ValidationResult:
        errors: list[str] = []
        warnings: list[str] = []

        if not GROUP_NUMBER_MIN <= group.group_number <= GROUP_NUMBER_MAX:
            errors.append(
                f"Invalid group number {group.group_number}: "
                f"must be between {GROUP_NUMBER_MIN} and {GROUP_NUMBER_MAX}"
            )
        for label, value in (("min_links", group.min_links),
                             ("max_links", group.max_links)):
            if not LINKS_MIN <= value <= LINKS_MAX:
                errors.append(
                    f"Invalid {label} {value}: "
                    f"must be between {LINKS_MIN} and {LINKS_MAX}"
                )
        if group.min_links > group.max_links:
            warnings.append(
                f"min_links ({group.min_links}) exceeds max_links ({group.max_links})"
            )

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    def validate_interface(
        self,
        iface: Interface,
        lacp_groups: Iterable[LacpGroup] = (),
    ) -> ValidationResult:
        """
        Validate an interface record.

        Args:
            iface: Interface to check
            lacp_groups: Known LACP groups (any device)

        Returns:
            ValidationResult with reference and range errors
        """
        errors: list[str] = []
        warnings: list[str] = []

        if iface.access_vlan is not None:
            self._check_vlan_id(iface.access_vlan, "access VLAN", errors)
        if iface.native_vlan is not None:
            self._check_vlan_id(iface.native_vlan, "native VLAN", errors)
        for vid in iface.trunk_allowed_vlans:
            self._check_vlan_id(vid, "trunk VLAN", errors)
        if len(set(iface.trunk_allowed_vlans)) != len(iface.trunk_allowed_vlans):
            warnings.append(f"Interface {iface.name} lists a trunk VLAN twice")

        if iface.lacp_group_id:
            group = self._find_group(iface.lacp_group_id, lacp_groups)
            if group is None:
                errors.append(f"Unknown LACP group: {iface.lacp_group_id}")
            elif group.device_id != iface.device_id:
                errors.append(
                    f"LACP group {group.group_number} belongs to another device"
                )

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    def _check_vlan_id(self, vlan_id: int, label: str, errors: list[str]) -> None:
        if not VLAN_ID_MIN <= vlan_id <= VLAN_ID_MAX:
            errors.append(
                f"Invalid {label} {vlan_id}: "
                f"must be between {VLAN_ID_MIN} and {VLAN_ID_MAX}"
            )

    def _find_group(
        self,
        group_id: str,
        lacp_groups: Iterable[LacpGroup],
    ) -> Optional[LacpGroup]:
        for group in lacp_groups:
            if group.id == group_id:
                return group
        return None
