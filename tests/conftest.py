"""
Shared test fixtures and configuration for pytest.
"""

import gzip
import io
import json
import sys
import tarfile
import zipfile
from pathlib import Path
from typing import Any, Callable, Dict, Union

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from snapdiff.config import DiffConfig  # noqa: E402

# Member name -> JSON-serializable document, or raw bytes written as-is
Members = Dict[str, Union[Any, bytes]]


# ============================================================================
# Pytest hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")


# ============================================================================
# Helpers
# ============================================================================

def encode_member(name: str, content: Union[Any, bytes]) -> bytes:
    """Serialize a member; names ending in .gz are gzip-compressed."""
    data = content if isinstance(content, bytes) else json.dumps(content).encode("utf-8")
    if name.endswith(".gz"):
        data = gzip.compress(data)
    return data


def write_tar(path: Path, members: Members) -> Path:
    """Write a .tar.gz with members in the given order."""
    with tarfile.open(path, "w:gz") as tar:
        for name, content in members.items():
            data = encode_member(name, content)
            info = tarfile.TarInfo(name=name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return path


def write_zip(path: Path, members: Members) -> Path:
    """Write a .zip with members in the given order."""
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in members.items():
            zf.writestr(name, encode_member(name, content))
    return path


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def config() -> DiffConfig:
    """Default configuration."""
    return DiffConfig()


@pytest.fixture
def make_tar(tmp_path: Path) -> Callable[[str, Members], Path]:
    """Factory fixture building .tar.gz snapshots under tmp_path."""
    def _make(name: str, members: Members) -> Path:
        return write_tar(tmp_path / name, members)
    return _make


@pytest.fixture
def make_zip(tmp_path: Path) -> Callable[[str, Members], Path]:
    """Factory fixture building .zip snapshots under tmp_path."""
    def _make(name: str, members: Members) -> Path:
        return write_zip(tmp_path / name, members)
    return _make


@pytest.fixture
def users_document() -> Dict[str, Any]:
    """A small LDAP-style export wrapped in a container field."""
    return {
        "data": [
            {
                "DistinguishedName": "CN=jdoe,OU=Users,DC=corp,DC=local",
                "memberOf": "CN=Admins,DC=corp,DC=local;CN=VPN,DC=corp,DC=local",
                "mail": "jdoe@corp.local",
                "whenChanged": "20240101000000.0Z",
                "objectClass": ["top", "person", "user"],
            },
            {
                "DistinguishedName": "CN=asmith,OU=Users,DC=corp,DC=local",
                "memberOf": ["CN=VPN,DC=corp,DC=local"],
                "title": "Engineer",
            },
            {
                "description": "no identity field, dropped",
            },
        ]
    }
