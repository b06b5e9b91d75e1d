"""Configuration generators for the supported vendor dialects.

Renders the neutral model of one device into Cisco IOS-style or Juniper
JunOS-style configuration text. Generation is pure and total: unresolved
cross-references are left out of the output instead of raising.
"""
from enum import Enum
from typing import Any, Iterable

from ..model import Device, Interface, LacpGroup, Vlan


def _v(value: Any) -> Any:
    """Plain value of an option-set member (strings pass through)."""
    return value.value if isinstance(value, Enum) else value


def _first_by(items: Iterable, key: str) -> dict:
    """Index items by attribute, keeping the first item for repeated keys."""
    index: dict = {}
    for item in items:
        index.setdefault(getattr(item, key), item)
    return index


def cisco_speed(speed: Any) -> str:
    """
    Convert a speed option to the IOS numeral.

    Examples:
        "10G" -> "10000"
        "100M" -> "100"
    """
    return str(_v(speed)).replace("G", "000", 1).replace("M", "", 1)


class ConfigGenerator:
    """Render a device's records into its vendor dialect."""

    def generate(
        self,
        device: Device,
        interfaces: list[Interface],
        vlans: list[Vlan],
        lacp_groups: list[LacpGroup],
    ) -> str:
        """
        Generate configuration text for a device.

        Args:
            device: Device whose vendor selects the dialect
            interfaces: Physical ports of the device
            vlans: VLANs of the device
            lacp_groups: LACP groups of the device

        Returns:
            Configuration text, lines joined with newlines
        """
        if _v(device.vendor) == "cisco":
            return self._generate_cisco(device, interfaces, vlans, lacp_groups)
        return self._generate_juniper(device, interfaces, vlans, lacp_groups)

    # === Cisco IOS ===

    def _generate_cisco(
        self,
        device: Device,
        interfaces: list[Interface],
        vlans: list[Vlan],
        lacp_groups: list[LacpGroup],
    ) -> str:
        lines = ["!", f"hostname {device.hostname}", "!"]

        if vlans:
            lines.append("!")
            for vlan in vlans:
                lines.append(f"vlan {vlan.vlan_id}")
                lines.append(f" name {vlan.name}")

        for group in lacp_groups:
            lines.extend(self._cisco_port_channel(group, interfaces))

        groups = _first_by(lacp_groups, "id")
        for iface in interfaces:
            lines.extend(self._cisco_interface(iface, groups))

        lines.append("!")
        lines.append("end")

        return "\n".join(lines)

    def _cisco_port_channel(
        self,
        group: LacpGroup,
        interfaces: list[Interface],
    ) -> list[str]:
        """Port-channel stanza; trunk VLANs are the union over member ports."""
        lines = ["!", f"interface Port-channel{group.group_number}"]
        if group.name:
            lines.append(f" description {group.name}")

        members = [i for i in interfaces if i.lacp_group_id == group.id]
        if any(_v(m.mode) == "trunk" for m in members):
            lines.append(" switchport mode trunk")
            # First-seen order
            trunk_vlans = list(dict.fromkeys(
                vid for m in members for vid in m.trunk_allowed_vlans
            ))
            if trunk_vlans:
                lines.append(
                    f" switchport trunk allowed vlan {_join(trunk_vlans, ',')}"
                )

        return lines

    def _cisco_interface(
        self,
        iface: Interface,
        groups: dict[str, LacpGroup],
    ) -> list[str]:
        lines = ["!", f"interface {iface.name}"]
        if iface.description:
            lines.append(f" description {iface.description}")

        if _v(iface.status) == "disabled":
            lines.append(" shutdown")
        else:
            lines.append(" no shutdown")

        if _v(iface.speed) != "auto":
            lines.append(f" speed {cisco_speed(iface.speed)}")
        if _v(iface.duplex) != "auto":
            lines.append(f" duplex {_v(iface.duplex)}")

        if _v(iface.mode) == "access":
            lines.append(" switchport mode access")
            if iface.access_vlan:
                lines.append(f" switchport access vlan {iface.access_vlan}")
        else:
            lines.append(" switchport mode trunk")
            if iface.trunk_allowed_vlans:
                lines.append(
                    " switchport trunk allowed vlan "
                    f"{_join(iface.trunk_allowed_vlans, ',')}"
                )
            if iface.native_vlan:
                lines.append(f" switchport trunk native vlan {iface.native_vlan}")

        if iface.lacp_group_id:
            group = groups.get(iface.lacp_group_id)
            if group:
                lines.append(
                    f" channel-group {group.group_number} mode {_v(group.mode)}"
                )

        return lines

    # === Juniper JunOS ===

    def _generate_juniper(
        self,
        device: Device,
        interfaces: list[Interface],
        vlans: list[Vlan],
        lacp_groups: list[LacpGroup],
    ) -> str:
        lines = [
            "system {",
            f"    host-name {device.hostname};",
            "}",
            "",
        ]

        if vlans:
            lines.append("vlans {")
            for vlan in vlans:
                lines.append(f"    {vlan.name} {{")
                lines.append(f"        vlan-id {vlan.vlan_id};")
                if vlan.description:
                    # Quoted verbatim, embedded quotes are the caller's problem
                    lines.append(f'        description "{vlan.description}";')
                lines.append("    }")
            lines.append("}")
            lines.append("")

        vlans_by_id = _first_by(vlans, "vlan_id")
        groups = _first_by(lacp_groups, "id")

        lines.append("interfaces {")
        for iface in interfaces:
            lines.extend(self._juniper_interface(iface, vlans_by_id, groups))
        for group in lacp_groups:
            lines.extend(self._juniper_aggregate(group))
        lines.append("}")

        return "\n".join(lines)

    def _juniper_interface(
        self,
        iface: Interface,
        vlans_by_id: dict[int, Vlan],
        groups: dict[str, LacpGroup],
    ) -> list[str]:
        lines = [f"    {iface.name} {{"]
        if iface.description:
            lines.append(f'        description "{iface.description}";')
        if _v(iface.status) == "disabled":
            lines.append("        disable;")
        if _v(iface.speed) != "auto":
            lines.append(f"        speed {str(_v(iface.speed)).lower()};")

        lines.append("        unit 0 {")
        lines.append("            family ethernet-switching {")
        if _v(iface.mode) == "access":
            lines.append("                interface-mode access;")
            vlan = vlans_by_id.get(iface.access_vlan) if iface.access_vlan else None
            if vlan:
                lines.append("                vlan {")
                lines.append(f"                    members {vlan.name};")
                lines.append("                }")
        else:
            lines.append("                interface-mode trunk;")
            names = [
                vlans_by_id[vid].name
                for vid in iface.trunk_allowed_vlans
                if vid in vlans_by_id
            ]
            if names:
                lines.append("                vlan {")
                lines.append(f"                    members [ {' '.join(names)} ];")
                lines.append("                }")
            if iface.native_vlan and iface.native_vlan in vlans_by_id:
                lines.append(f"                native-vlan-id {iface.native_vlan};")
        lines.append("            }")
        lines.append("        }")

        group = groups.get(iface.lacp_group_id) if iface.lacp_group_id else None
        if group:
            lines.append("        ether-options {")
            lines.append(f"            802.3ad ae{group.group_number};")
            lines.append("        }")

        lines.append("    }")
        return lines

    def _juniper_aggregate(self, group: LacpGroup) -> list[str]:
        lines = [f"    ae{group.group_number} {{"]
        if group.name:
            lines.append(f'        description "{group.name}";')
        lines.extend([
            "        aggregated-ether-options {",
            f"            minimum-links {group.min_links};",
            "            lacp {",
            f"                {_v(group.mode)};",
            "            }",
            "        }",
            "    }",
        ])
        return lines


def _join(values: Iterable, sep: str) -> str:
    return sep.join(str(v) for v in values)


_generator = ConfigGenerator()


def generate_cisco_config(
    device: Device,
    interfaces: list[Interface],
    vlans: list[Vlan],
    lacp_groups: list[LacpGroup],
) -> str:
    """Render IOS-style configuration regardless of ``device.vendor``."""
    return _generator._generate_cisco(device, interfaces, vlans, lacp_groups)


def generate_juniper_config(
    device: Device,
    interfaces: list[Interface],
    vlans: list[Vlan],
    lacp_groups: list[LacpGroup],
) -> str:
    """Render JunOS-style configuration regardless of ``device.vendor``."""
    return _generator._generate_juniper(device, interfaces, vlans, lacp_groups)


def generate_config(
    device: Device,
    interfaces: list[Interface],
    vlans: list[Vlan],
    lacp_groups: list[LacpGroup],
) -> str:
    """Render configuration in the dialect selected by ``device.vendor``."""
    return _generator.generate(device, interfaces, vlans, lacp_groups)
