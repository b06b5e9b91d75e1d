"""Importers for vendor configuration text.

Reads Cisco IOS-style or Juniper JunOS-style text and extracts the VLANs it
declares. Parsing is best-effort: text that matches no known stanza yields
nothing and is never reported as an error.

Only VLANs are extracted. Interfaces and LACP groups are left for a future
grammar extension.
"""
import logging
import re
from enum import Enum
from typing import Any, Optional

from ..model import ImportedVlan

logger = logging.getLogger(__name__)


# Cisco: "vlan 10" at line start, "name Production" inside the stanza
CISCO_VLAN_RE = re.compile(r"^vlan ([0-9]+)")
CISCO_NAME_RE = re.compile(r"^\s*name (.+)")

# Juniper: "<name> { vlan-id <n>" anywhere in the text. Not brace aware, so an
# unrelated stanza shaped like "x { vlan-id 5" also matches.
JUNIPER_VLAN_RE = re.compile(r"(\w+)\s*\{\s*vlan-id\s+([0-9]+)", re.ASCII)

# Characters stripped from both ends of a Cisco line: Unicode whitespace
# (all of it lies below U+3001) plus the byte order mark
TRIM_CHARS = "".join(chr(c) for c in range(0x3001) if chr(c).isspace()) + "\ufeff"


def _vlan_number(digits: str) -> Optional[int]:
    """Integer value of a VLAN id, or None when it has too many digits to convert."""
    try:
        return int(digits)
    except ValueError:
        logger.warning(f"Skipping VLAN id with {len(digits)} digits")
        return None


class _State(Enum):
    IDLE = "idle"
    IN_VLAN = "in_vlan"


class _PendingVlan:
    """VLAN stanza being read by the Cisco state machine."""

    def __init__(self, vlan_id: int, line: int):
        self.vlan_id = vlan_id
        self.name = ""
        self.line = line

    def flush(self) -> ImportedVlan:
        return ImportedVlan(
            vlan_id=self.vlan_id,
            name=self.name or f"VLAN{self.vlan_id}",
            line=self.line,
        )


class ConfigImporter:
    """Extract VLANs from vendor configuration text."""

    def parse(self, vendor: Any, text: str) -> list[ImportedVlan]:
        """
        Parse configuration text in the given vendor dialect.

        Args:
            vendor: "cisco" or "juniper" (or the matching Vendor member)
            text: Raw configuration text

        Returns:
            Recognised VLANs in order of appearance
        """
        vendor = getattr(vendor, "value", vendor)
        if vendor == "cisco":
            return self._parse_cisco(text)
        return self._parse_juniper(text)

    def _parse_cisco(self, text: str) -> list[ImportedVlan]:
        """
        Line-oriented state machine over IOS text.

        IDLE waits for "vlan <n>". IN_VLAN takes "name <rest>" and ends on a
        new "vlan", an "interface" line or a lone "!". A stanza still open at
        end of input is emitted too. A stanza without a name line gets
        "VLAN<n>".
        """
        result: list[ImportedVlan] = []
        state = _State.IDLE
        current: Optional[_PendingVlan] = None

        for lineno, raw in enumerate(text.split("\n"), start=1):
            line = raw.strip(TRIM_CHARS)

            vlan_match = CISCO_VLAN_RE.match(line)
            if vlan_match:
                if state == _State.IN_VLAN:
                    result.append(current.flush())
                vlan_id = _vlan_number(vlan_match.group(1))
                if vlan_id is None:
                    current = None
                    state = _State.IDLE
                else:
                    current = _PendingVlan(vlan_id, lineno)
                    state = _State.IN_VLAN
                continue

            if state != _State.IN_VLAN:
                continue

            name_match = CISCO_NAME_RE.match(line)
            if name_match:
                current.name = name_match.group(1)
            elif (line.startswith("vlan") or
                  line.startswith("interface") or
                  line == "!"):
                result.append(current.flush())
                current = None
                state = _State.IDLE

        if state == _State.IN_VLAN:
            result.append(current.flush())

        logger.debug(f"Cisco import recognised {len(result)} VLAN(s)")
        return result

    def _parse_juniper(self, text: str) -> list[ImportedVlan]:
        """Global scan for "<name> { vlan-id <n>" in order of appearance."""
        result = []
        line, counted = 1, 0
        for match in JUNIPER_VLAN_RE.finditer(text):
            line += text.count("\n", counted, match.start())
            counted = match.start()
            vlan_id = _vlan_number(match.group(2))
            if vlan_id is None:
                continue
            result.append(ImportedVlan(
                vlan_id=vlan_id,
                name=match.group(1),
                line=line,
            ))

        logger.debug(f"Juniper import recognised {len(result)} VLAN(s)")
        return result


_importer = ConfigImporter()


def parse_cisco_config(text: str) -> list[ImportedVlan]:
    """Extract VLANs from IOS-style text."""
    return _importer._parse_cisco(text)


def parse_juniper_config(text: str) -> list[ImportedVlan]:
    """Extract VLANs from JunOS-style text."""
    return _importer._parse_juniper(text)


def parse_config(vendor: Any, text: str) -> list[ImportedVlan]:
    """Extract VLANs from text in the dialect of ``vendor``."""
    return _importer.parse(vendor, text)
