"""
Unit tests for the on-disk toolchain layout.
"""

from pathlib import Path

import pytest

from compactup.core.exceptions import StateError
from compactup.core.platform import Target
from compactup.toolchain.layout import ARCHIVE_NAME, TOOLCHAIN_NAME, ToolchainLayout
from compactup.toolchain.version import Version


@pytest.mark.unit
class TestToolchainLayout:
    """Test path computation."""

    def test_paths(self, tmp_path):
        layout = ToolchainLayout(tmp_path)
        version = Version(0, 29, 1)
        target = Target.X86_64_LINUX_MUSL

        assert layout.bin_dir == tmp_path / "bin"
        assert layout.versions_dir == tmp_path / "versions"
        assert layout.link_path == tmp_path / "bin" / TOOLCHAIN_NAME
        assert layout.target_dir(version, target) == (
            tmp_path / "versions" / "0.29.1" / "x86_64-unknown-linux-musl"
        )
        assert layout.archive_path(version, target).name == ARCHIVE_NAME
        assert layout.entrypoint_path(version, target) == (
            tmp_path / "versions" / "0.29.1" / "x86_64-unknown-linux-musl" / "compactc"
        )

    def test_no_io(self, tmp_path):
        """Test computing paths doesn't create anything."""
        layout = ToolchainLayout(tmp_path / "missing")
        layout.entrypoint_path(Version(1, 0, 0), Target.AARCH64_DARWIN)
        assert not (tmp_path / "missing").exists()

    @pytest.mark.parametrize("target", list(Target))
    @pytest.mark.parametrize("version", ["0.0.0", "0.29.1", "12.3.45"])
    def test_decompose_inverts_entrypoint_path(self, tmp_path, version, target):
        layout = ToolchainLayout(tmp_path)
        v = Version.parse(version)

        assert layout.decompose(layout.entrypoint_path(v, target)) == (v, target)


@pytest.mark.unit
class TestDecomposeErrors:
    """Test paths that don't match the layout."""

    def test_wrong_file_name(self, tmp_path):
        path = tmp_path / "0.29.1" / "x86_64-unknown-linux-musl" / "compactc2"
        with pytest.raises(StateError, match="named"):
            ToolchainLayout(tmp_path).decompose(path)

    def test_unknown_target(self, tmp_path):
        path = tmp_path / "0.29.1" / "x86_64-pc-windows-msvc" / "compactc"
        with pytest.raises(StateError, match="target parent directory"):
            ToolchainLayout(tmp_path).decompose(path)

    def test_bad_version(self, tmp_path):
        path = tmp_path / "latest" / "x86_64-unknown-linux-musl" / "compactc"
        with pytest.raises(StateError, match="version parent directory"):
            ToolchainLayout(tmp_path).decompose(path)

    def test_too_short(self):
        with pytest.raises(StateError):
            ToolchainLayout(Path("/")).decompose(Path("/compactc"))


@pytest.mark.unit
class TestInstalledVersions:
    """Test listing of installed version directories."""

    def test_missing_versions_dir(self, layout):
        assert layout.installed_versions() == []

    def test_sorted_and_filtered(self, layout):
        for name in ["0.29.1", "0.3.0", "0.28.0", "tmp", "0.29"]:
            (layout.versions_dir / name).mkdir(parents=True)
        (layout.versions_dir / "1.0.0").write_text("not a directory")

        assert layout.installed_versions() == [
            Version(0, 3, 0),
            Version(0, 28, 0),
            Version(0, 29, 1),
        ]
