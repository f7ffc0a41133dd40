"""
Compiler installation pipeline.

This module brings a compiler version from "published" to "installed and
optionally active":

1. Ensure the root directory structure exists
2. Load the release catalogue and select a release
3. Compute the install paths for the host target
4. Stop early if the compiler entrypoint is already installed
5. Download the archive unless a verified copy is cached, then unpack it
6. Optionally activate the compiler through the current link

Re-running an install for an installed version does no download or
extraction work. Any failure aborts the pipeline; a partially downloaded
archive is kept as `artifact.zip.part` and resumed by the next run.
"""

import contextlib
import logging
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from ..core.directory import ensure_root_structure
from ..core.download import DownloadProgress, download_file, verify_file
from ..core.exceptions import ExtractionError
from ..core.locking import LockManager
from ..core.platform import Target
from .catalogue import ArtifactCatalogue, CompilerRelease, ReleaseSource
from .extractor import Unpacker
from .layout import TOOLCHAIN_NAME, ToolchainLayout
from .linking import CurrentToolchainLink
from .version import Version, VersionSpec

logger = logging.getLogger(__name__)


class InstallStatus(Enum):
    """What the install did."""

    INSTALLED = "installed"
    ALREADY_INSTALLED = "already installed"


@dataclass(frozen=True)
class InstallOutcome:
    """Result of an install."""

    version: Version
    target: Target
    entrypoint: Path
    status: InstallStatus
    activated: bool = False


@dataclass(frozen=True)
class InstallEvent:
    """Coarse milestone reported while installing."""

    phase: str
    """Phase: 'fetch', 'download', 'unpack' or 'activate'"""

    stage: str
    """Stage: 'started' or 'finished'"""

    version: Optional[Version] = None
    """Version being installed (None while fetching the catalogue)"""


class InstallPipeline:
    """
    Installs compiler versions into a root directory.

    Example:
        >>> layout = ToolchainLayout(Path.home() / ".compact")
        >>> pipeline = InstallPipeline(layout, source, Target.X86_64_LINUX_MUSL)
        >>> outcome = pipeline.install(parse_version_spec("0.29"))
        >>> print(outcome.version, outcome.status.value)
        0.29.1 installed
    """

    def __init__(
        self,
        layout: ToolchainLayout,
        source: ReleaseSource,
        target: Target,
        unpacker: Optional[Unpacker] = None,
        downloader: Callable[..., Path] = download_file,
        link: Optional[CurrentToolchainLink] = None,
        lock_manager: Optional[LockManager] = None,
        lock_timeout: int = 300,
        http_timeout: int = 30,
        on_event: Optional[Callable[[InstallEvent], None]] = None,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    ):
        """
        Initialize install pipeline.

        Args:
            layout: Layout of the root directory to install into
            source: Where published releases are listed
            target: Target to install compilers for
            unpacker: Archive extraction program (default: unzip -o)
            downloader: Download function with the signature of download_file
            link: Current compiler link (default: the layout's link)
            lock_manager: Optional root lock held while installing
            lock_timeout: Seconds to wait for the root lock
            http_timeout: Download request timeout in seconds
            on_event: Optional callback for milestone events
            progress_callback: Optional callback for download progress
        """
        self.layout = layout
        self.source = source
        self.target = target
        self.unpacker = unpacker or Unpacker()
        self.downloader = downloader
        self.link = link or CurrentToolchainLink(layout)
        self.lock_manager = lock_manager
        self.lock_timeout = lock_timeout
        self.http_timeout = http_timeout
        self.on_event = on_event
        self.progress_callback = progress_callback

    def install(
        self, spec: Optional[VersionSpec] = None, activate: bool = True
    ) -> InstallOutcome:
        """
        Install the compiler selected by a specifier.

        Args:
            spec: Version specifier (None selects the newest release)
            activate: Make the installed compiler the current one

        Returns:
            InstallOutcome describing what was done

        Raises:
            FetchError: If the catalogue or archive can't be downloaded
            FormatError: If the catalogue is malformed
            NotFoundError: If no release matches the specifier
            ExtractionError: If the archive can't be unpacked
            StateError: If activation leaves the link inconsistent
            LockTimeout: If another process holds the root lock
        """
        ensure_root_structure(self.layout.root)

        exact = spec.exact_value() if spec is not None else None
        if exact is not None and self._is_installed(exact):
            # An installed exact version needs nothing from the catalogue.
            with self._locked():
                outcome = self._already_installed(exact)
                return self._finish(outcome, activate)

        self._emit("fetch", "started")
        catalogue = ArtifactCatalogue.load(self.source)
        self._emit("fetch", "finished")

        release = catalogue.select(spec)
        logger.debug(f"Selected version {release.version} for request {spec}")

        with self._locked():
            outcome = self._install_release(release)
            return self._finish(outcome, activate)

    def _is_installed(self, version: Version) -> bool:
        return self.layout.entrypoint_path(version, self.target).is_file()

    def _already_installed(self, version: Version) -> InstallOutcome:
        logger.info(f"Compiler {version} ({self.target}) is already installed")
        return InstallOutcome(
            version=version,
            target=self.target,
            entrypoint=self.layout.entrypoint_path(version, self.target),
            status=InstallStatus.ALREADY_INSTALLED,
        )

    def _install_release(self, release: CompilerRelease) -> InstallOutcome:
        version = release.version

        if self._is_installed(version):
            return self._already_installed(version)

        asset = release.asset_for(self.target)
        target_dir = self.layout.target_dir(version, self.target)
        archive = self.layout.archive_path(version, self.target)
        entrypoint = self.layout.entrypoint_path(version, self.target)

        target_dir.mkdir(parents=True, exist_ok=True)

        if verify_file(archive, asset.size, asset.sha256):
            logger.info(f"Using cached archive: {archive}")
        else:
            if archive.exists():
                logger.warning(
                    f"Cached archive failed its integrity check, downloading again: "
                    f"{archive}"
                )
                archive.unlink()

            self._emit("download", "started", version)
            self.downloader(
                asset.download_url,
                archive,
                expected_size=asset.size,
                expected_sha256=asset.sha256,
                progress_callback=self.progress_callback,
                timeout=self.http_timeout,
            )
            self._emit("download", "finished", version)

        self._emit("unpack", "started", version)
        self.unpacker.unpack(archive, target_dir)
        self._emit("unpack", "finished", version)

        if not entrypoint.is_file():
            raise ExtractionError(
                f"Archive {archive} did not contain `{TOOLCHAIN_NAME}'",
                command=self.unpacker.command(archive),
                cwd=target_dir,
            )

        logger.info(f"Installed compiler {version} ({self.target})")
        return InstallOutcome(
            version=version,
            target=self.target,
            entrypoint=entrypoint,
            status=InstallStatus.INSTALLED,
        )

    def _finish(self, outcome: InstallOutcome, activate: bool) -> InstallOutcome:
        if not activate:
            return outcome

        self._emit("activate", "started", outcome.version)
        self.link.activate(outcome.entrypoint)
        self._emit("activate", "finished", outcome.version)
        return replace(outcome, activated=True)

    def _locked(self):
        if self.lock_manager is None:
            return contextlib.nullcontext()
        return self.lock_manager.install_lock(timeout=self.lock_timeout)

    def _emit(self, phase: str, stage: str, version: Optional[Version] = None):
        if self.on_event:
            self.on_event(InstallEvent(phase=phase, stage=stage, version=version))
