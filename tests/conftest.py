"""Shared fixtures."""
import pytest
from mcp_switch_translator.store import MemoryStore
from mcp_switch_translator.utils.audit_log import get_audit_file, setup_audit_logging


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def audit_file(tmp_path):
    """Route the audit log to a temporary directory."""
    setup_audit_logging(str(tmp_path))
    return get_audit_file(str(tmp_path))
