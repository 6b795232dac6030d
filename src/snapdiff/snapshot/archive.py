"""
Payload suppliers for snapshot containers.

Yields (source_label, payload_bytes) pairs in archive order from:
- tar archives (.tar, .tar.gz, .tgz, any compression tarfile understands)
- zip archives
- plain directories (files in sorted relative-path order)

Members ending in .json are read as-is, members ending in .json.gz are
gunzipped first. Everything else is skipped.
"""

import gzip
import logging
import tarfile
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import Iterator, Tuple

from ..core.exceptions import ArchiveError

logger = logging.getLogger(__name__)

JSON_SUFFIX = ".json"
GZ_JSON_SUFFIX = ".json.gz"


def is_json_member(name: str) -> bool:
    lower = name.lower()
    return lower.endswith(JSON_SUFFIX) or lower.endswith(GZ_JSON_SUFFIX)


def source_label(name: str) -> str:
    """
    Label for a member: its file name without the .json / .json.gz suffix.

    ``export/users.json.gz`` -> ``users``
    """
    base = PurePosixPath(name.replace("\\", "/")).name
    lower = base.lower()
    if lower.endswith(GZ_JSON_SUFFIX):
        return base[: -len(GZ_JSON_SUFFIX)]
    if lower.endswith(JSON_SUFFIX):
        return base[: -len(JSON_SUFFIX)]
    return base


def _decode_member(name: str, data: bytes) -> bytes:
    if name.lower().endswith(GZ_JSON_SUFFIX):
        try:
            return gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as e:
            raise ArchiveError(f"Corrupt gzip member {name}: {e}", path=name) from e
    return data


def iter_tar_payloads(path: Path) -> Iterator[Tuple[str, bytes]]:
    """Yield JSON payloads from a tar archive in member order."""
    try:
        with tarfile.open(path, mode="r:*") as tar:
            for member in tar:
                if not member.isfile() or not is_json_member(member.name):
                    continue
                handle = tar.extractfile(member)
                if handle is None:
                    continue
                with handle:
                    data = handle.read()
                logger.debug(f"Read {member.name} ({len(data)} bytes)")
                yield source_label(member.name), _decode_member(member.name, data)
    except (tarfile.TarError, OSError, EOFError) as e:
        raise ArchiveError(f"Cannot read tar archive {path}: {e}", path=str(path)) from e


def iter_zip_payloads(path: Path) -> Iterator[Tuple[str, bytes]]:
    """Yield JSON payloads from a zip archive in central-directory order."""
    try:
        with zipfile.ZipFile(path, "r") as zf:
            for info in zf.infolist():
                if info.is_dir() or not is_json_member(info.filename):
                    continue
                data = zf.read(info.filename)
                logger.debug(f"Read {info.filename} ({len(data)} bytes)")
                yield source_label(info.filename), _decode_member(info.filename, data)
    except (zipfile.BadZipFile, OSError) as e:
        raise ArchiveError(f"Cannot read zip archive {path}: {e}", path=str(path)) from e


def iter_directory_payloads(path: Path) -> Iterator[Tuple[str, bytes]]:
    """Yield JSON payloads from a directory tree, sorted by relative path."""
    files = sorted(
        (p for p in path.rglob("*") if p.is_file() and is_json_member(p.name)),
        key=lambda p: p.relative_to(path).as_posix(),
    )
    for file_path in files:
        try:
            data = file_path.read_bytes()
        except OSError as e:
            raise ArchiveError(f"Cannot read {file_path}: {e}", path=str(file_path)) from e
        yield source_label(file_path.name), _decode_member(file_path.name, data)


def iter_payloads(path: Path) -> Iterator[Tuple[str, bytes]]:
    """
    Yield (source_label, payload) pairs from any supported container.

    Args:
        path: Archive file or directory

    Raises:
        ArchiveError: If the path is missing or not a supported container
    """
    path = Path(path)

    if not path.exists():
        raise ArchiveError(f"Snapshot not found: {path}", path=str(path))

    if path.is_dir():
        return iter_directory_payloads(path)

    if zipfile.is_zipfile(path):
        return iter_zip_payloads(path)

    if _is_tarfile(path):
        return iter_tar_payloads(path)

    raise ArchiveError(f"Unsupported snapshot container: {path}", path=str(path))


def _is_tarfile(path: Path) -> bool:
    try:
        return tarfile.is_tarfile(path)
    except OSError as e:
        raise ArchiveError(f"Cannot open {path}: {e}", path=str(path)) from e
