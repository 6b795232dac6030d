"""
Unit tests for snapshot payload suppliers.
"""

import gzip
import io
import json
import tarfile

import pytest

from snapdiff.core.exceptions import ArchiveError
from snapdiff.snapshot.archive import is_json_member, iter_payloads, source_label


@pytest.mark.unit
class TestMemberNames:
    """Member filtering and labels."""

    @pytest.mark.parametrize("name, expected", [
        ("users.json", "users"),
        ("export/users.json.gz", "users"),
        ("nested/dir/Computers.JSON", "Computers"),
        ("win\\path\\groups.json", "groups"),
        ("a.b.json", "a.b"),
    ])
    def test_source_label(self, name, expected):
        assert source_label(name) == expected

    @pytest.mark.parametrize("name, expected", [
        ("users.json", True),
        ("users.JSON.GZ", True),
        ("users.gz", False),
        ("users.jsonl", False),
        ("readme.txt", False),
    ])
    def test_is_json_member(self, name, expected):
        assert is_json_member(name) is expected


@pytest.mark.unit
class TestTarSupplier:
    """tar.gz archives."""

    def test_archive_order_and_decompression(self, make_tar):
        path = make_tar("snap.tar.gz", {
            "b.json": [{"name": "x"}],
            "a.json.gz": {"data": []},
            "skip.txt": b"ignored",
        })

        payloads = list(iter_payloads(path))

        assert [label for label, _ in payloads] == ["b", "a"]
        assert json.loads(payloads[1][1]) == {"data": []}

    def test_corrupt_inner_gzip(self, tmp_path):
        path = tmp_path / "snap.tar.gz"
        data = b"definitely not gzip"
        with tarfile.open(path, "w:gz") as tar:
            info = tarfile.TarInfo("bad.json.gz")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))

        with pytest.raises(ArchiveError):
            list(iter_payloads(path))

    def test_plain_tar_and_tgz(self, tmp_path):
        data = b'[{"dn": "CN=a,DC=b"}]'
        for name, mode in (("snap.tar", "w"), ("snap.tgz", "w:gz"), ("snap.tar.bz2", "w:bz2")):
            path = tmp_path / name
            with tarfile.open(path, mode) as tar:
                info = tarfile.TarInfo("users.json")
                info.size = len(data)
                tar.addfile(info, io.BytesIO(data))
            assert list(iter_payloads(path)) == [("users", data)]


@pytest.mark.unit
class TestZipSupplier:
    """zip archives."""

    def test_zip_members(self, make_zip):
        path = make_zip("snap.zip", {"users.json": [1], "dir/groups.json.gz": [2]})
        payloads = dict(iter_payloads(path))
        assert json.loads(payloads["users"]) == [1]
        assert json.loads(payloads["groups"]) == [2]


@pytest.mark.unit
class TestDirectorySupplier:
    """Plain directories."""

    def test_sorted_relative_paths(self, tmp_path):
        root = tmp_path / "snap"
        (root / "sub").mkdir(parents=True)
        (root / "z.json").write_text("[]", encoding="utf-8")
        (root / "sub" / "a.json.gz").write_bytes(gzip.compress(b"[1]"))
        (root / "notes.md").write_text("x", encoding="utf-8")

        payloads = list(iter_payloads(root))

        assert [label for label, _ in payloads] == ["a", "z"]
        assert payloads[0][1] == b"[1]"


@pytest.mark.unit
class TestErrors:
    """Unreadable inputs."""

    def test_missing_path(self, tmp_path):
        with pytest.raises(ArchiveError) as exc_info:
            iter_payloads(tmp_path / "nope.tar.gz")
        assert exc_info.value.path.endswith("nope.tar.gz")

    def test_unsupported_file(self, tmp_path):
        path = tmp_path / "plain.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ArchiveError):
            iter_payloads(path)

    def test_unreadable_directory_file(self, tmp_path, monkeypatch):
        root = tmp_path / "snap"
        root.mkdir()
        (root / "users.json").write_text("[]", encoding="utf-8")

        def deny(self):
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr("pathlib.Path.read_bytes", deny)

        with pytest.raises(ArchiveError) as exc_info:
            list(iter_payloads(root))
        assert exc_info.value.path.endswith("users.json")
