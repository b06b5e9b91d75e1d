"""Vendor configuration translator.

Maps the neutral device model to and from two configuration dialects:
- Cisco IOS-style text (flat "!"-separated stanzas)
- Juniper JunOS-style text (curly-brace hierarchy)

Generation covers VLANs, physical interfaces and LACP bundles. Import
currently extracts VLANs only.

Usage:
    from mcp_switch_translator.translator import TranslatorEngine

    engine = TranslatorEngine(store)
    text = await engine.generate_config(device_id)
    result = await engine.import_config(device_id, "vlan 10\\n name Prod\\n!")
"""

from .engine import TranslatorEngine, ConfigImportError
from .schema import ValidationResult, ImportResult
from .generator import (
    ConfigGenerator,
    generate_config,
    generate_cisco_config,
    generate_juniper_config,
    cisco_speed,
)
from .parser import (
    ConfigImporter,
    parse_config,
    parse_cisco_config,
    parse_juniper_config,
)
from .validator import RecordValidator

__all__ = [
    # Main engine
    "TranslatorEngine",
    "ConfigImportError",
    # Result classes
    "ValidationResult",
    "ImportResult",
    # Generators
    "ConfigGenerator",
    "generate_config",
    "generate_cisco_config",
    "generate_juniper_config",
    "cisco_speed",
    # Importers
    "ConfigImporter",
    "parse_config",
    "parse_cisco_config",
    "parse_juniper_config",
    # Boundary validation
    "RecordValidator",
]
