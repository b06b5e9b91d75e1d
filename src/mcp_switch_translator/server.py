"""MCP Server for vendor configuration translation.

Keeps a vendor-neutral model of switches (interfaces, VLANs, LACP groups)
and translates it to and from Cisco IOS-style and Juniper JunOS-style text.

Tools exposed:
- list_devices / get_device / create_device / update_device / delete_device
- get_interfaces / update_interface / bulk_update_interfaces
- get_vlans / create_vlan / delete_vlan
- get_lacp_groups / create_lacp_group / delete_lacp_group
- generate_config: Render a device's configuration in its vendor dialect
- import_config: Import VLANs from vendor text (not atomic, not deduplicated)
- preview_import: Show what import_config would create
- diff_config: Diff generated configuration against supplied text
- get_stats: Device / VLAN / LACP counts
- get_audit_log: Recent changes
"""
import asyncio
import json
import logging
from dataclasses import asdict
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    TextContent,
    Tool,
    Resource,
)
from pydantic import AnyUrl

from .model import (
    Device,
    DeviceUpdate,
    Interface,
    InterfaceUpdate,
    LacpGroup,
    Vlan,
)
from .model.schema import normalize_keys
from .settings import Settings, create_store
from .store import DeviceRepository, RecordNotFound, seed_sample_data
from .translator import RecordValidator, TranslatorEngine, ValidationResult
from .utils.audit_log import (
    ChangeTracker,
    get_audit_file,
    get_recent_changes,
    setup_audit_logging,
)
from .utils.logging_config import setup_logging, timed_section

logger = logging.getLogger(__name__)

# Initialized on server start
settings: Optional[Settings] = None
store: Optional[DeviceRepository] = None
engine: Optional[TranslatorEngine] = None
validator = RecordValidator()


def get_settings() -> Settings:
    global settings
    if settings is None:
        settings = Settings.from_env()
    return settings


def get_store() -> DeviceRepository:
    """Get or create the record store."""
    global store
    if store is None:
        store = create_store(get_settings())
    return store


def get_engine() -> TranslatorEngine:
    """Get or create the translator engine."""
    global engine
    if engine is None:
        engine = TranslatorEngine(get_store())
    return engine


# Create MCP server
server = Server("mcp-switch-translator")


def _device_arg(description: str = "Device ID") -> dict:
    return {"type": "string", "description": description}


def _schema(properties: dict, required: list[str]) -> dict:
    return {"type": "object", "properties": properties, "required": required}


INTERFACE_FIELDS = {
    "speed": {"type": "string", "enum": ["auto", "10M", "100M", "1G", "10G", "25G", "40G", "100G"]},
    "duplex": {"type": "string", "enum": ["auto", "full", "half"]},
    "mode": {"type": "string", "enum": ["access", "trunk"]},
    "status": {"type": "string", "enum": ["up", "down", "disabled"]},
    "access_vlan": {"type": ["integer", "null"]},
    "trunk_allowed_vlans": {"type": "array", "items": {"type": "integer"}},
    "native_vlan": {"type": ["integer", "null"]},
    "lacp_group_id": {"type": ["string", "null"]},
    "description": {"type": "string"},
}


# === TOOLS ===

@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    return [
        Tool(
            name="list_devices",
            description="List all devices with vendor, status and last sync time",
            inputSchema=_schema({}, []),
        ),
        Tool(
            name="get_device",
            description="Get a single device record",
            inputSchema=_schema({"device_id": _device_arg()}, ["device_id"]),
        ),
        Tool(
            name="create_device",
            description=(
                "Create a device. It starts offline with 24 access ports "
                "and VLAN 1."
            ),
            inputSchema=_schema({
                "hostname": {"type": "string"},
                "ip_address": {"type": "string"},
                "vendor": {"type": "string", "enum": ["cisco", "juniper"]},
                "model": {"type": "string"},
            }, ["hostname", "ip_address", "vendor", "model"]),
        ),
        Tool(
            name="update_device",
            description="Update device fields (vendor cannot change)",
            inputSchema=_schema({
                "device_id": _device_arg(),
                "updates": {
                    "type": "object",
                    "description": "hostname, ip_address, model, status, last_synced_at",
                },
            }, ["device_id", "updates"]),
        ),
        Tool(
            name="delete_device",
            description="Delete a device with its interfaces, VLANs and LACP groups",
            inputSchema=_schema({"device_id": _device_arg()}, ["device_id"]),
        ),
        Tool(
            name="get_interfaces",
            description="Get the physical interfaces of a device",
            inputSchema=_schema({"device_id": _device_arg()}, ["device_id"]),
        ),
        Tool(
            name="update_interface",
            description="Update whitelisted fields of one interface",
            inputSchema=_schema({
                "interface_id": {"type": "string"},
                "updates": {"type": "object", "properties": INTERFACE_FIELDS},
            }, ["interface_id", "updates"]),
        ),
        Tool(
            name="bulk_update_interfaces",
            description="Apply one update to several interfaces of the same device",
            inputSchema=_schema({
                "interface_ids": {"type": "array", "items": {"type": "string"}},
                "updates": {"type": "object", "properties": INTERFACE_FIELDS},
            }, ["interface_ids", "updates"]),
        ),
        Tool(
            name="get_vlans",
            description="Get the VLANs of a device",
            inputSchema=_schema({"device_id": _device_arg()}, ["device_id"]),
        ),
        Tool(
            name="create_vlan",
            description="Create a VLAN on a device",
            inputSchema=_schema({
                "device_id": _device_arg(),
                "vlan_id": {"type": "integer", "description": "VLAN ID (1-4094)"},
                "name": {"type": "string"},
                "description": {"type": "string", "default": ""},
            }, ["device_id", "vlan_id", "name"]),
        ),
        Tool(
            name="delete_vlan",
            description="Delete a VLAN record",
            inputSchema=_schema({"id": {"type": "string"}}, ["id"]),
        ),
        Tool(
            name="get_lacp_groups",
            description="Get the LACP groups of a device",
            inputSchema=_schema({"device_id": _device_arg()}, ["device_id"]),
        ),
        Tool(
            name="create_lacp_group",
            description="Create an LACP group (Port-channel / ae bundle)",
            inputSchema=_schema({
                "device_id": _device_arg(),
                "group_number": {"type": "integer", "description": "1-128"},
                "name": {"type": "string", "default": ""},
                "mode": {"type": "string", "enum": ["active", "passive"]},
                "load_balancing": {
                    "type": "string",
                    "enum": ["src-mac", "dst-mac", "src-dst-mac",
                             "src-ip", "dst-ip", "src-dst-ip"],
                },
                "min_links": {"type": "integer", "default": 1},
                "max_links": {"type": "integer", "default": 8},
            }, ["device_id", "group_number"]),
        ),
        Tool(
            name="delete_lacp_group",
            description="Delete an LACP group; member interfaces are detached",
            inputSchema=_schema({"id": {"type": "string"}}, ["id"]),
        ),
        Tool(
            name="generate_config",
            description="Generate the device configuration in its vendor dialect",
            inputSchema=_schema({"device_id": _device_arg()}, ["device_id"]),
        ),
        Tool(
            name="import_config",
            description=(
                "Import VLANs from vendor configuration text. Every recognised "
                "VLAN is created as a new record (re-importing duplicates). "
                "Not atomic: on failure, VLANs created so far remain."
            ),
            inputSchema=_schema({
                "device_id": _device_arg(),
                "config_text": {"type": "string"},
            }, ["device_id", "config_text"]),
        ),
        Tool(
            name="preview_import",
            description="Show which VLANs import_config would create",
            inputSchema=_schema({
                "device_id": _device_arg(),
                "config_text": {"type": "string"},
            }, ["device_id", "config_text"]),
        ),
        Tool(
            name="diff_config",
            description="Unified diff from the generated configuration to supplied text",
            inputSchema=_schema({
                "device_id": _device_arg(),
                "config_text": {"type": "string"},
            }, ["device_id", "config_text"]),
        ),
        Tool(
            name="get_stats",
            description="Counts of devices, online devices, VLANs and LACP groups",
            inputSchema=_schema({}, []),
        ),
        Tool(
            name="get_audit_log",
            description="Recent changes from the audit log",
            inputSchema=_schema({
                "device_id": _device_arg("Filter by device ID"),
                "operation": {"type": "string"},
                "limit": {"type": "integer", "default": 20},
            }, []),
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls."""
    device_id = arguments.get("device_id")

    async with timed_section(f"tool:{name}", device_id=device_id):
        try:
            st = get_store()

            if name == "list_devices":
                return _json({"devices": [d.to_dict() for d in await st.list_devices()]})

            elif name == "get_device":
                return _json((await _require_device(st, arguments["device_id"])).to_dict())

            elif name == "create_device":
                return await handle_create_device(st, arguments)

            elif name == "update_device":
                return await handle_update_device(
                    st, arguments["device_id"], arguments["updates"]
                )

            elif name == "delete_device":
                return await handle_delete_device(st, arguments["device_id"])

            elif name == "get_interfaces":
                await _require_device(st, arguments["device_id"])
                interfaces = await st.list_interfaces(arguments["device_id"])
                return _json({"interfaces": [i.to_dict() for i in interfaces]})

            elif name == "update_interface":
                return await handle_update_interface(
                    st, arguments["interface_id"], arguments["updates"]
                )

            elif name == "bulk_update_interfaces":
                return await handle_bulk_update_interfaces(
                    st, arguments["interface_ids"], arguments["updates"]
                )

            elif name == "get_vlans":
                await _require_device(st, arguments["device_id"])
                vlans = await st.list_vlans(arguments["device_id"])
                return _json({"vlans": [v.to_dict() for v in vlans]})

            elif name == "create_vlan":
                return await handle_create_vlan(st, arguments)

            elif name == "delete_vlan":
                return await handle_delete_vlan(st, arguments["id"])

            elif name == "get_lacp_groups":
                await _require_device(st, arguments["device_id"])
                groups = await st.list_lacp_groups(arguments["device_id"])
                return _json({"lacp_groups": [g.to_dict() for g in groups]})

            elif name == "create_lacp_group":
                return await handle_create_lacp_group(st, arguments)

            elif name == "delete_lacp_group":
                return await handle_delete_lacp_group(st, arguments["id"])

            elif name == "generate_config":
                config = await get_engine().generate_config(arguments["device_id"])
                return [TextContent(type="text", text=config)]

            elif name == "import_config":
                result = await get_engine().import_config(
                    arguments["device_id"], arguments["config_text"]
                )
                response = result.to_dict()
                response["success"] = True
                response["message"] = (
                    f"Configuration imported: {result.created_count} VLAN(s) created"
                )
                return _json(response)

            elif name == "preview_import":
                vlans = await get_engine().preview_import(
                    arguments["device_id"], arguments["config_text"]
                )
                return _json({"vlans": [v.to_dict() for v in vlans]})

            elif name == "diff_config":
                diff = await get_engine().diff_config(
                    arguments["device_id"], arguments["config_text"]
                )
                return [TextContent(type="text", text=diff or "No differences")]

            elif name == "get_stats":
                return _json(await st.get_stats())

            elif name == "get_audit_log":
                records = get_recent_changes(
                    log_file=get_audit_file(get_settings().log_dir),
                    device_id=arguments.get("device_id"),
                    operation=arguments.get("operation"),
                    limit=arguments.get("limit", 20),
                )
                return _json({"changes": [asdict(r) for r in records]})

            else:
                return [TextContent(type="text", text=f"Unknown tool: {name}")]

        except Exception as e:
            logger.exception(f"Tool {name} failed")
            return [TextContent(type="text", text=f"Error: {str(e)}")]


# === TOOL HANDLERS ===

def _json(payload: Any) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2))]


def _invalid(validation: ValidationResult) -> list[TextContent]:
    return _json({
        "success": False,
        "error": f"Validation failed: {'; '.join(validation.errors)}",
        "warnings": validation.warnings,
    })


async def _require_device(st: DeviceRepository, device_id: str) -> Device:
    device = await st.get_device(device_id)
    if device is None:
        raise RecordNotFound("Device", device_id)
    return device


async def handle_create_device(st: DeviceRepository, args: dict) -> list[TextContent]:
    """Validate and create a device with default ports."""
    args = normalize_keys(args)
    candidate = Device.from_dict({**args, "id": ""})
    validation = validator.validate_device(candidate)
    if not validation.valid:
        return _invalid(validation)

    device = await st.create_device(
        hostname=candidate.hostname,
        ip_address=candidate.ip_address,
        vendor=candidate.vendor,
        model=candidate.model,
    )
    ChangeTracker(device.id).log_change(
        operation="create_device",
        parameters=device.to_dict(),
        success=True,
    )
    return _json(device.to_dict())


async def handle_update_device(
    st: DeviceRepository,
    device_id: str,
    updates: dict,
) -> list[TextContent]:
    update = DeviceUpdate.from_dict(updates)
    current = await _require_device(st, device_id)
    validation = validator.validate_device(update.apply(current))
    if not validation.valid:
        return _invalid(validation)

    device = await st.update_device(device_id, update)
    return _json(device.to_dict())


async def handle_delete_device(st: DeviceRepository, device_id: str) -> list[TextContent]:
    deleted = await st.delete_device(device_id)
    if not deleted:
        raise RecordNotFound("Device", device_id)
    ChangeTracker(device_id).log_change(
        operation="delete_device",
        parameters={},
        success=True,
    )
    return _json({"success": True, "deleted": device_id})


async def _validated_interface(
    st: DeviceRepository,
    iface: Interface,
    update: InterfaceUpdate,
) -> tuple[Interface, ValidationResult]:
    candidate = update.apply(iface)
    groups = await st.list_lacp_groups(iface.device_id)
    if candidate.lacp_group_id and not any(g.id == candidate.lacp_group_id for g in groups):
        # Might exist on another device; let the validator say so
        other = await st.get_lacp_group(candidate.lacp_group_id)
        if other is not None:
            groups.append(other)
    return candidate, validator.validate_interface(candidate, groups)


async def handle_update_interface(
    st: DeviceRepository,
    interface_id: str,
    updates: dict,
) -> list[TextContent]:
    """Validate a field-level patch, then apply it."""
    update = InterfaceUpdate.from_dict(updates)
    iface = await st.get_interface(interface_id)
    if iface is None:
        raise RecordNotFound("Interface", interface_id)

    _, validation = await _validated_interface(st, iface, update)
    if not validation.valid:
        return _invalid(validation)

    updated = await st.update_interface(interface_id, update)
    ChangeTracker(iface.device_id).log_change(
        operation="update_interface",
        parameters={"interface": iface.name, **_plain(update.changes())},
        success=True,
    )
    return _json(updated.to_dict())


async def handle_bulk_update_interfaces(
    st: DeviceRepository,
    interface_ids: list[str],
    updates: dict,
) -> list[TextContent]:
    """Apply one patch to interfaces that all belong to one device."""
    if not interface_ids:
        raise ValueError("interface_ids is required and cannot be empty")
    update = InterfaceUpdate.from_dict(updates)

    interfaces = []
    for interface_id in interface_ids:
        iface = await st.get_interface(interface_id)
        if iface is None:
            raise RecordNotFound("Interface", interface_id)
        interfaces.append(iface)

    device_id = interfaces[0].device_id
    if any(i.device_id != device_id for i in interfaces):
        raise ValueError("All interfaces must belong to the same device")

    for iface in interfaces:
        _, validation = await _validated_interface(st, iface, update)
        if not validation.valid:
            return _invalid(validation)

    updated = await st.bulk_update_interfaces(interface_ids, update)
    ChangeTracker(device_id).log_change(
        operation="bulk_update_interfaces",
        parameters={"count": len(updated), **_plain(update.changes())},
        success=True,
    )
    return _json({"interfaces": [i.to_dict() for i in updated]})


async def handle_create_vlan(st: DeviceRepository, args: dict) -> list[TextContent]:
    args = normalize_keys(args)
    device_id = args["device_id"]
    await _require_device(st, device_id)

    candidate = Vlan(
        id="",
        device_id=device_id,
        vlan_id=args["vlan_id"],
        name=args.get("name", ""),
        description=args.get("description", ""),
    )
    validation = validator.validate_vlan(candidate, await st.list_vlans(device_id))
    if not validation.valid:
        return _invalid(validation)

    vlan = await st.create_vlan(
        device_id, candidate.vlan_id, candidate.name, candidate.description
    )
    ChangeTracker(device_id).log_change(
        operation="create_vlan",
        parameters=vlan.to_dict(),
        success=True,
    )
    response = {"success": True, "vlan": vlan.to_dict()}
    if validation.warnings:
        response["warnings"] = validation.warnings
    return _json(response)


async def handle_delete_vlan(st: DeviceRepository, vlan_record_id: str) -> list[TextContent]:
    vlan = await st.get_vlan(vlan_record_id)
    if vlan is None:
        raise RecordNotFound("VLAN", vlan_record_id)
    await st.delete_vlan(vlan_record_id)
    ChangeTracker(vlan.device_id).log_change(
        operation="delete_vlan",
        parameters={"vlan_id": vlan.vlan_id, "name": vlan.name},
        success=True,
    )
    return _json({"success": True, "deleted": vlan_record_id})


async def handle_create_lacp_group(st: DeviceRepository, args: dict) -> list[TextContent]:
    args = normalize_keys(args)
    device_id = args["device_id"]
    await _require_device(st, device_id)

    candidate = LacpGroup.from_dict({**args, "id": ""})
    validation = validator.validate_lacp_group(candidate)
    if not validation.valid:
        return _invalid(validation)

    group = await st.create_lacp_group(
        device_id,
        group_number=candidate.group_number,
        name=candidate.name,
        mode=candidate.mode,
        load_balancing=candidate.load_balancing,
        min_links=candidate.min_links,
        max_links=candidate.max_links,
    )
    ChangeTracker(device_id).log_change(
        operation="create_lacp_group",
        parameters=group.to_dict(),
        success=True,
    )
    response = {"success": True, "lacp_group": group.to_dict()}
    if validation.warnings:
        response["warnings"] = validation.warnings
    return _json(response)


async def handle_delete_lacp_group(st: DeviceRepository, group_id: str) -> list[TextContent]:
    group = await st.get_lacp_group(group_id)
    if group is None:
        raise RecordNotFound("LACP group", group_id)
    await st.delete_lacp_group(group_id)
    ChangeTracker(group.device_id).log_change(
        operation="delete_lacp_group",
        parameters={"group_number": group.group_number},
        success=True,
    )
    return _json({"success": True, "deleted": group_id})


def _plain(changes: dict) -> dict:
    return {k: getattr(v, "value", v) for k, v in changes.items()}


# === RESOURCES ===

@server.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    resources = []

    for device in await get_store().list_devices():
        resources.append(Resource(
            uri=AnyUrl(f"device://{device.id}/config"),
            name=f"{device.hostname} Configuration",
            description=f"Generated {device.vendor.value} configuration for {device.hostname}",
            mimeType="text/plain",
        ))

    return resources


@server.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource."""
    # Parse URI: device://device_id/config
    uri_str = str(uri)
    if uri_str.startswith("device://"):
        parts = uri_str[len("device://"):].split("/")
        if len(parts) >= 2 and parts[1] == "config":
            return await get_engine().generate_config(parts[0])

    return json.dumps({"error": f"Unknown resource: {uri}"})


def main():
    """Run the MCP server."""
    setup_logging()
    cfg = get_settings()
    setup_audit_logging(cfg.log_dir)

    async def run():
        st = get_store()
        if cfg.seed_sample and not await st.list_devices():
            await seed_sample_data(st)

        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options()
            )

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
