"""
Unit tests for file system utilities.
"""

import io
import stat
import tarfile
import tempfile

import pytest

from relinstall.core.exceptions import (
    ArchiveExtractionError,
    BinaryNotFoundError,
    InsecureArchiveError,
    InstallError,
    WorkspaceError,
)
from relinstall.core.filesystem import (
    extract_archive,
    find_file,
    install_file,
    is_relative_to,
    safe_rmtree,
    workspace,
)
from tests.utils import make_tarball


def _write_archive(path, members):
    path.write_bytes(make_tarball(members))
    return path


class TestIsRelativeTo:
    """Test is_relative_to function."""

    def test_child(self, tmp_path):
        assert is_relative_to(tmp_path / "a" / "b", tmp_path) is True

    def test_outside(self, tmp_path):
        assert is_relative_to(tmp_path.parent, tmp_path) is False


class TestSafeRmtree:
    """Test safe_rmtree function."""

    def test_removes_tree(self, tmp_path):
        """Test nested directory is removed."""
        target = tmp_path / "tree"
        (target / "sub").mkdir(parents=True)
        (target / "sub" / "file").write_text("x")

        safe_rmtree(target)

        assert not target.exists()

    def test_missing_is_noop(self, tmp_path):
        """Test removing a missing path does nothing."""
        safe_rmtree(tmp_path / "missing")

    def test_refuses_outside_prefix(self, tmp_path):
        """Test path outside require_prefix is refused."""
        target = tmp_path / "tree"
        target.mkdir()

        with pytest.raises(ValueError, match="Refusing to delete"):
            safe_rmtree(target, require_prefix=tmp_path / "other")

        assert target.exists()


class TestWorkspace:
    """Test workspace context manager."""

    def test_created_and_removed(self, isolated_tempdir):
        """Test workspace exists inside the block and is gone afterwards."""
        with workspace() as ws:
            assert ws.is_dir()
            assert ws.parent == isolated_tempdir
            (ws / "nested").mkdir()
            (ws / "nested" / "file").write_bytes(b"data")

        assert not ws.exists()
        assert list(isolated_tempdir.iterdir()) == []

    def test_removed_on_exception(self, isolated_tempdir):
        """Test workspace is removed when the block raises."""
        with pytest.raises(RuntimeError):
            with workspace() as ws:
                (ws / "file").write_bytes(b"data")
                raise RuntimeError("boom")

        assert not ws.exists()

    def test_removed_on_keyboard_interrupt(self, isolated_tempdir):
        """Test workspace is removed on interruption."""
        with pytest.raises(KeyboardInterrupt):
            with workspace() as ws:
                raise KeyboardInterrupt

        assert not ws.exists()

    def test_removed_on_system_exit(self, isolated_tempdir):
        """Test workspace is removed when a signal handler exits."""
        with pytest.raises(SystemExit):
            with workspace() as ws:
                raise SystemExit(143)

        assert not ws.exists()

    def test_fresh_directory_per_run(self, isolated_tempdir):
        """Test two runs never share a workspace."""
        with workspace() as first:
            with workspace() as second:
                assert first != second

    def test_creation_failure(self, tmp_path, monkeypatch):
        """Test an unusable temp directory raises WorkspaceError."""
        monkeypatch.setattr(tempfile, "tempdir", str(tmp_path / "missing"))

        with pytest.raises(WorkspaceError, match="Cannot create temporary workspace"):
            with workspace():
                pass

    def test_cleanup_failure_keeps_original_error(self, isolated_tempdir, monkeypatch):
        """Test a failed removal does not replace the error raised in the block."""

        def failing_rmtree(path, require_prefix=None):
            raise OSError("device busy")

        monkeypatch.setattr("relinstall.core.filesystem.safe_rmtree", failing_rmtree)

        with pytest.raises(RuntimeError, match="boom"):
            with workspace():
                raise RuntimeError("boom")

    def test_uses_tempdir(self, isolated_tempdir):
        """Test workspace is created under the temp directory."""
        with workspace() as ws:
            assert str(ws).startswith(tempfile.gettempdir())


class TestExtractArchive:
    """Test extract_archive function."""

    def test_extract_tar_gz(self, tmp_path):
        """Test members are extracted."""
        archive = _write_archive(
            tmp_path / "relctl.tar.gz",
            {"relctl": b"#!/bin/sh\n", "README.md": b"readme", "docs/guide.md": b"g"},
        )

        dest = extract_archive(archive, tmp_path / "out")

        assert (dest / "relctl").read_bytes() == b"#!/bin/sh\n"
        assert (dest / "README.md").read_bytes() == b"readme"
        assert (dest / "docs" / "guide.md").read_bytes() == b"g"

    def test_missing_archive(self, tmp_path):
        """Test missing archive raises."""
        with pytest.raises(ArchiveExtractionError, match="not found"):
            extract_archive(tmp_path / "missing.tar.gz", tmp_path / "out")

    def test_unsupported_format(self, tmp_path):
        """Test non tar.gz archive is rejected."""
        archive = tmp_path / "file.zip"
        archive.write_bytes(b"PK")

        with pytest.raises(ArchiveExtractionError, match="Unsupported archive format"):
            extract_archive(archive, tmp_path / "out")

    def test_corrupt_archive(self, tmp_path):
        """Test corrupt data raises ArchiveExtractionError."""
        archive = tmp_path / "broken.tar.gz"
        archive.write_bytes(b"not a tarball")

        with pytest.raises(ArchiveExtractionError, match="Failed to extract"):
            extract_archive(archive, tmp_path / "out")

    def test_directory_traversal_blocked(self, tmp_path):
        """Test '../' members are refused before anything is written."""
        archive = _write_archive(
            tmp_path / "evil.tar.gz", {"ok": b"ok", "../../escaped": b"evil"}
        )

        with pytest.raises(InsecureArchiveError, match="directory traversal"):
            extract_archive(archive, tmp_path / "out")

        assert not (tmp_path / "out" / "ok").exists()

    def test_symlink_escape_blocked(self, tmp_path):
        """Test symlinks pointing outside the destination are refused."""
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
            link = tarfile.TarInfo("relctl")
            link.type = tarfile.SYMTYPE
            link.linkname = "/etc/passwd"
            tar.addfile(link)
        archive = tmp_path / "link.tar.gz"
        archive.write_bytes(buffer.getvalue())

        with pytest.raises(InsecureArchiveError):
            extract_archive(archive, tmp_path / "out")


class TestFindFile:
    """Test find_file function."""

    def test_top_level(self, tmp_path):
        """Test file at the top level is found."""
        (tmp_path / "relctl").write_bytes(b"bin")
        assert find_file(tmp_path, "relctl") == tmp_path / "relctl"

    def test_nested_shallowest_wins(self, tmp_path):
        """Test the shallowest nested match is preferred."""
        (tmp_path / "a" / "b").mkdir(parents=True)
        (tmp_path / "a" / "b" / "relctl").write_bytes(b"deep")
        (tmp_path / "z").mkdir()
        (tmp_path / "z" / "relctl").write_bytes(b"shallow")

        assert find_file(tmp_path, "relctl") == tmp_path / "z" / "relctl"

    def test_directory_with_name_ignored(self, tmp_path):
        """Test a directory with the binary's name does not match."""
        (tmp_path / "relctl").mkdir()

        with pytest.raises(BinaryNotFoundError, match="relctl"):
            find_file(tmp_path, "relctl")


class TestInstallFile:
    """Test install_file function."""

    def test_copies_and_marks_executable(self, tmp_path):
        """Test file is copied with mode 0755."""
        source = tmp_path / "src"
        source.write_bytes(b"binary")
        dest_dir = tmp_path / "bin"
        dest_dir.mkdir()

        result = install_file(source, dest_dir / "relctl")

        assert result == dest_dir / "relctl"
        assert result.read_bytes() == b"binary"
        assert stat.S_IMODE(result.stat().st_mode) == 0o755

    def test_replaces_existing(self, tmp_path):
        """Test an existing binary is replaced."""
        source = tmp_path / "src"
        source.write_bytes(b"new")
        dest_dir = tmp_path / "bin"
        dest_dir.mkdir()
        (dest_dir / "relctl").write_bytes(b"old")

        install_file(source, dest_dir / "relctl")

        assert (dest_dir / "relctl").read_bytes() == b"new"
        assert [p.name for p in dest_dir.iterdir()] == ["relctl"]

    def test_no_temp_file_left_on_failure(self, tmp_path):
        """Test temporary file is cleaned up when the copy fails."""
        dest_dir = tmp_path / "bin"
        dest_dir.mkdir()

        with pytest.raises(InstallError):
            install_file(tmp_path / "missing", dest_dir / "relctl")

        assert list(dest_dir.iterdir()) == []

    def test_destination_is_directory(self, tmp_path):
        """Test a directory in the way raises InstallError and is left alone."""
        source = tmp_path / "src"
        source.write_bytes(b"binary")
        dest_dir = tmp_path / "bin"
        (dest_dir / "relctl").mkdir(parents=True)

        with pytest.raises(InstallError, match="Failed to install"):
            install_file(source, dest_dir / "relctl")

        assert [p.name for p in dest_dir.iterdir()] == ["relctl"]
        assert (dest_dir / "relctl").is_dir()

    def test_missing_destination_directory(self, tmp_path):
        """Test missing destination directory raises InstallError."""
        source = tmp_path / "src"
        source.write_bytes(b"binary")

        with pytest.raises(InstallError, match="Cannot write"):
            install_file(source, tmp_path / "missing" / "relctl")
