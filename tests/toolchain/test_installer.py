"""
Tests for the compiler install pipeline.

Releases come from an in-memory source, downloads and extraction are faked,
so these tests exercise the pipeline's decisions without network access.
"""

import hashlib
import sys

import pytest
from filelock import FileLock

from compactup.core.exceptions import (
    ExtractionError,
    FetchError,
    LockTimeout,
    NotFoundError,
)
from compactup.core.locking import LockManager
from compactup.toolchain.installer import InstallPipeline, InstallStatus
from compactup.toolchain.linking import CurrentToolchainLink
from compactup.toolchain.version import ExactSpec, PartialSpec, Version

from tests.fixtures.directories import LINUX, install_fake_compiler
from tests.fixtures.releases import (
    FakeDownloader,
    FakeReleaseSource,
    FakeUnpacker,
    make_release_payload,
)

pytestmark = pytest.mark.skipif(
    sys.platform == "win32", reason="Symbolic links require Unix"
)


@pytest.fixture
def pipeline(layout, release_source, fake_downloader, fake_unpacker):
    return InstallPipeline(
        layout,
        release_source,
        LINUX,
        unpacker=fake_unpacker,
        downloader=fake_downloader,
    )


def source_with_metadata(content: bytes) -> FakeReleaseSource:
    """Source with one release publishing size and digest for the Linux asset."""
    payload = make_release_payload("0.29.1")
    linux = payload["assets"][1]
    linux["size"] = len(content)
    linux["digest"] = "sha256:" + hashlib.sha256(content).hexdigest()
    return FakeReleaseSource([payload])


# ============================================================================
# Fresh Installs
# ============================================================================


@pytest.mark.unit
class TestFreshInstall:
    """Test installing a version that isn't on disk yet."""

    def test_install_partial_spec(self, pipeline, layout, fake_downloader, fake_unpacker):
        outcome = pipeline.install(PartialSpec(major=0, minor=29))

        assert outcome.version == Version(0, 29, 1)
        assert outcome.target == LINUX
        assert outcome.status is InstallStatus.INSTALLED
        assert outcome.activated is True
        assert outcome.entrypoint == layout.entrypoint_path(Version(0, 29, 1), LINUX)
        assert outcome.entrypoint.is_file()

        assert len(fake_downloader.calls) == 1
        call = fake_downloader.calls[0]
        assert call["url"].endswith("x86_64-unknown-linux-musl.zip")
        assert call["destination"] == layout.archive_path(Version(0, 29, 1), LINUX)

        assert fake_unpacker.calls == [
            {
                "archive": layout.archive_path(Version(0, 29, 1), LINUX),
                "cwd": layout.target_dir(Version(0, 29, 1), LINUX),
            }
        ]

    def test_install_creates_root_structure(self, pipeline, layout):
        assert not layout.root.exists()

        pipeline.install()

        assert layout.bin_dir.is_dir()
        assert layout.versions_dir.is_dir()

    def test_install_activates(self, pipeline, current_link):
        pipeline.install(ExactSpec(Version(0, 29, 0)))

        active = current_link.resolve()
        assert active.version == Version(0, 29, 0)
        assert active.target == LINUX

    def test_install_latest_without_spec(self, pipeline):
        assert pipeline.install().version == Version(0, 29, 1)

    def test_install_without_activation(self, pipeline, current_link, layout):
        outcome = pipeline.install(PartialSpec(0, 28), activate=False)

        assert outcome.activated is False
        assert current_link.resolve() is None
        assert layout.installed_versions() == [Version(0, 28, 0)]

    def test_install_without_activation_keeps_previous(
        self, root_with_compilers, pipeline, current_link
    ):
        pipeline.install(ExactSpec(Version(0, 29, 0)), activate=False)

        assert current_link.resolve().version == Version(0, 29, 1)

    def test_download_parameters(self, layout, fake_unpacker):
        content = b"compiler archive"
        downloader = FakeDownloader(content)
        pipeline = InstallPipeline(
            layout,
            source_with_metadata(content),
            LINUX,
            unpacker=fake_unpacker,
            downloader=downloader,
            http_timeout=7,
        )

        pipeline.install()

        call = downloader.calls[0]
        assert call["expected_size"] == len(content)
        assert call["expected_sha256"] == hashlib.sha256(content).hexdigest()
        assert call["timeout"] == 7


# ============================================================================
# Idempotence and Caching
# ============================================================================


@pytest.mark.unit
class TestReinstall:
    """Test installs of versions that are already present."""

    def test_second_install_does_no_work(
        self, pipeline, release_source, fake_downloader, fake_unpacker
    ):
        first = pipeline.install(ExactSpec(Version(0, 29, 1)))
        second = pipeline.install(ExactSpec(Version(0, 29, 1)))

        assert first.status is InstallStatus.INSTALLED
        assert second.status is InstallStatus.ALREADY_INSTALLED
        assert second.entrypoint == first.entrypoint
        assert len(fake_downloader.calls) == 1
        assert len(fake_unpacker.calls) == 1
        # The exact version was found on disk without listing releases
        assert release_source.calls == 1

    def test_partial_spec_reinstall_consults_catalogue(
        self, pipeline, release_source, fake_downloader
    ):
        pipeline.install(PartialSpec(0, 29))
        outcome = pipeline.install(PartialSpec(0, 29))

        assert outcome.status is InstallStatus.ALREADY_INSTALLED
        assert release_source.calls == 2
        assert len(fake_downloader.calls) == 1

    def test_already_installed_is_activated(self, root_with_compilers, pipeline, current_link):
        outcome = pipeline.install(ExactSpec(Version(0, 28, 0)))

        assert outcome.status is InstallStatus.ALREADY_INSTALLED
        assert outcome.activated is True
        assert current_link.resolve().version == Version(0, 28, 0)

    def test_cached_archive_is_reused(self, layout, fake_downloader, fake_unpacker):
        content = b"compiler archive"
        archive = layout.archive_path(Version(0, 29, 1), LINUX)
        archive.parent.mkdir(parents=True)
        archive.write_bytes(content)

        pipeline = InstallPipeline(
            layout,
            source_with_metadata(content),
            LINUX,
            unpacker=fake_unpacker,
            downloader=fake_downloader,
        )
        outcome = pipeline.install()

        assert outcome.status is InstallStatus.INSTALLED
        assert fake_downloader.calls == []
        assert len(fake_unpacker.calls) == 1

    def test_corrupt_cached_archive_is_downloaded_again(self, layout, fake_unpacker):
        content = b"compiler archive"
        archive = layout.archive_path(Version(0, 29, 1), LINUX)
        archive.parent.mkdir(parents=True)
        archive.write_bytes(b"truncated")

        downloader = FakeDownloader(content)
        pipeline = InstallPipeline(
            layout,
            source_with_metadata(content),
            LINUX,
            unpacker=fake_unpacker,
            downloader=downloader,
        )
        pipeline.install()

        assert len(downloader.calls) == 1
        assert archive.read_bytes() == content


# ============================================================================
# Failures
# ============================================================================


@pytest.mark.unit
class TestInstallFailures:
    """Test that failures abort without activating anything."""

    def test_unknown_version(self, pipeline, fake_downloader):
        with pytest.raises(NotFoundError):
            pipeline.install(PartialSpec(0, 99))
        assert fake_downloader.calls == []

    def test_archive_without_entrypoint(self, layout, release_source, fake_downloader, current_link):
        pipeline = InstallPipeline(
            layout,
            release_source,
            LINUX,
            unpacker=FakeUnpacker(create_entrypoint=False),
            downloader=fake_downloader,
        )

        with pytest.raises(ExtractionError, match="did not contain"):
            pipeline.install()

        assert current_link.resolve() is None

    def test_download_failure_keeps_previous_default(
        self, root_with_compilers, release_source, fake_unpacker, current_link
    ):
        def failing_downloader(url, destination, **kwargs):
            raise FetchError(f"Failed to download {url}")

        pipeline = InstallPipeline(
            root_with_compilers,
            release_source,
            LINUX,
            unpacker=fake_unpacker,
            downloader=failing_downloader,
        )

        with pytest.raises(FetchError):
            pipeline.install(ExactSpec(Version(0, 29, 0)))

        assert current_link.resolve().version == Version(0, 29, 1)
        assert fake_unpacker.calls == []

    def test_lock_held_elsewhere(self, layout, release_source, fake_downloader, fake_unpacker):
        lock_manager = LockManager(layout.root)
        lock_manager.lock_dir.mkdir(parents=True)
        pipeline = InstallPipeline(
            layout,
            release_source,
            LINUX,
            unpacker=fake_unpacker,
            downloader=fake_downloader,
            lock_manager=lock_manager,
            lock_timeout=0.1,
        )

        with FileLock(lock_manager.install_lock_path):
            with pytest.raises(LockTimeout):
                pipeline.install()

        assert fake_downloader.calls == []


# ============================================================================
# Events
# ============================================================================


@pytest.mark.unit
class TestInstallEvents:
    def test_fresh_install_events(self, layout, release_source, fake_downloader, fake_unpacker):
        events = []
        pipeline = InstallPipeline(
            layout,
            release_source,
            LINUX,
            unpacker=fake_unpacker,
            downloader=fake_downloader,
            lock_manager=LockManager(layout.root),
            on_event=events.append,
        )

        pipeline.install(PartialSpec(0, 29))

        assert [(e.phase, e.stage) for e in events] == [
            ("fetch", "started"),
            ("fetch", "finished"),
            ("download", "started"),
            ("download", "finished"),
            ("unpack", "started"),
            ("unpack", "finished"),
            ("activate", "started"),
            ("activate", "finished"),
        ]
        assert events[0].version is None
        assert all(e.version == Version(0, 29, 1) for e in events[2:])

    def test_installed_exact_version_events(self, layout, release_source):
        install_fake_compiler(layout, "0.29.1")
        events = []
        pipeline = InstallPipeline(
            layout, release_source, LINUX, on_event=events.append
        )

        pipeline.install(ExactSpec(Version(0, 29, 1)), activate=False)

        assert events == []
        assert release_source.calls == 0

    def test_link_argument_is_used(self, layout, release_source, fake_downloader, fake_unpacker):
        link = CurrentToolchainLink(layout)
        pipeline = InstallPipeline(
            layout,
            release_source,
            LINUX,
            unpacker=fake_unpacker,
            downloader=fake_downloader,
            link=link,
        )

        assert pipeline.link is link
        pipeline.install()
        assert link.resolve().version == Version(0, 29, 1)
