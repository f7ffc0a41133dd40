"""
Release catalogue for the Compact compiler.

This module queries the published compiler releases, validates each release
record and exposes them as an ordered catalogue that selects the release to
install for a version specifier.

Every release must carry exactly one macOS and one Linux artifact. A release
that doesn't is rejected and fails the whole load: a catalogue that is only
partially understood cannot be trusted to select the right version.

Example:
    >>> source = GitHubReleaseSource(ReleaseSourceConfig())
    >>> catalogue = ArtifactCatalogue.load(source)
    >>> release = catalogue.select(parse_version_spec("0.29"))
    >>> release.asset_for(Target.X86_64_LINUX_MUSL).download_url
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional

import requests
from requests.exceptions import RequestException

from ..core.config import ReleaseSourceConfig
from ..core.exceptions import FetchError, FormatError, NotFoundError, ParseError
from ..core.platform import PlatformFamily, Target
from .version import Version, VersionSpec

logger = logging.getLogger(__name__)

_MACOS_MARKER = "apple-darwin"
_LINUX_MARKER = "linux"


@dataclass(frozen=True)
class Asset:
    """One downloadable file of a release."""

    name: str
    download_url: str
    size: Optional[int] = None
    digest: Optional[str] = None

    @property
    def sha256(self) -> Optional[str]:
        """Hex SHA256 of the asset, when the source publishes one."""
        if self.digest and self.digest.startswith("sha256:"):
            return self.digest[len("sha256:") :]
        return None


@dataclass(frozen=True)
class CompilerRelease:
    """A published compiler version with its per-platform artifacts."""

    version: Version
    macos: Asset
    linux: Asset

    def asset_for(self, target: Target) -> Asset:
        """Artifact to install for a target."""
        if target.family is PlatformFamily.LINUX:
            return self.linux
        return self.macos


# ============================================================================
# Release Sources
# ============================================================================


class ReleaseSource(ABC):
    """Where the list of published releases comes from."""

    tag_prefix: str = "compactc-v"

    @abstractmethod
    def list_releases(self) -> List[Dict[str, Any]]:
        """
        Return raw release records.

        Each record has a `tag_name` and a list of `assets`, each with a
        `name`, `browser_download_url` and optionally `size` and `digest`.

        Raises:
            FetchError: If the source can't be queried
            FormatError: If the response isn't a list of records
        """


class GitHubReleaseSource(ReleaseSource):
    """Releases published on a GitHub repository."""

    def __init__(
        self,
        config: ReleaseSourceConfig,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize GitHub release source.

        Args:
            config: Repository coordinates and optional API token
            timeout: Request timeout in seconds
            session: Optional requests session (created if None)
        """
        self.config = config
        self.tag_prefix = config.tag_prefix
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def releases_url(self) -> str:
        api = self.config.api_url.rstrip("/")
        return f"{api}/repos/{self.config.owner}/{self.config.repo}/releases"

    def list_releases(self) -> List[Dict[str, Any]]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"

        releases: List[Dict[str, Any]] = []
        url: Optional[str] = self.releases_url
        params: Optional[Dict[str, Any]] = {"per_page": 100}

        while url:
            logger.debug(f"Fetching releases: {url}")
            try:
                response = self.session.get(
                    url, headers=headers, params=params, timeout=self.timeout
                )
                response.raise_for_status()
            except RequestException as e:
                raise FetchError(f"Error while fetching compact releases: {e}") from e

            try:
                page = response.json()
            except ValueError as e:
                raise FormatError(f"Release listing is not valid JSON: {e}") from e

            if not isinstance(page, list):
                raise FormatError(
                    f"Expected a list of releases, got {type(page).__name__}"
                )

            releases.extend(page)
            # The next-page URL already carries the query string.
            url = response.links.get("next", {}).get("url")
            params = None

        logger.debug(f"Fetched {len(releases)} release(s)")
        return releases


# ============================================================================
# Release Normalization
# ============================================================================


def release_from_payload(
    payload: Dict[str, Any], tag_prefix: str = "compactc-v"
) -> CompilerRelease:
    """
    Validate a raw release record and convert it to a CompilerRelease.

    Args:
        payload: Release record from a ReleaseSource
        tag_prefix: Prefix stripped from the tag before parsing the version

    Returns:
        The release

    Raises:
        FormatError: If the tag or assets don't have the expected shape
    """
    tag = payload.get("tag_name")
    if not isinstance(tag, str):
        raise FormatError("Release has no tag name", release=repr(tag))

    if not tag.startswith(tag_prefix):
        raise FormatError(f"Invalid version format: {tag}", release=tag)

    try:
        version = Version.parse(tag[len(tag_prefix) :])
    except ParseError as e:
        raise FormatError(f"Failed to parse artifact version: {e}", release=tag) from e

    macos: Optional[Asset] = None
    linux: Optional[Asset] = None

    for raw_asset in payload.get("assets") or []:
        asset = _asset_from_payload(raw_asset, tag)

        if _MACOS_MARKER in asset.name:
            if macos is not None:
                raise FormatError(
                    f"Multiple macOS artifacts: {macos.name}, {asset.name}", release=tag
                )
            macos = asset
        elif _LINUX_MARKER in asset.name:
            if linux is not None:
                raise FormatError(
                    f"Multiple Linux artifacts: {linux.name}, {asset.name}", release=tag
                )
            linux = asset
        else:
            raise FormatError(
                f"Unsupported compiler platform: {asset.name}", release=tag
            )

    if macos is None:
        raise FormatError("Expecting a MacOS platform version", release=tag)
    if linux is None:
        raise FormatError("Expecting a Linux platform version", release=tag)

    return CompilerRelease(version=version, macos=macos, linux=linux)


def _asset_from_payload(raw: Any, tag: str) -> Asset:
    if not isinstance(raw, dict):
        raise FormatError("Malformed asset record", release=tag)

    name = raw.get("name")
    url = raw.get("browser_download_url")
    if not isinstance(name, str) or not isinstance(url, str):
        raise FormatError("Asset is missing a name or download URL", release=tag)

    size = raw.get("size")
    digest = raw.get("digest")
    return Asset(
        name=name,
        download_url=url,
        size=size if isinstance(size, int) and not isinstance(size, bool) else None,
        digest=digest if isinstance(digest, str) else None,
    )


# ============================================================================
# Catalogue
# ============================================================================


class ArtifactCatalogue:
    """
    Published compiler releases ordered by version.

    Built fresh for every command that needs it and never persisted.
    """

    def __init__(self, releases: Iterable[CompilerRelease] = ()):
        """
        Initialize catalogue.

        Args:
            releases: Validated releases

        Raises:
            FormatError: If two releases carry the same version
        """
        by_version: Dict[Version, CompilerRelease] = {}
        for release in releases:
            if release.version in by_version:
                raise FormatError(
                    f"Duplicate release for version {release.version}",
                    release=str(release.version),
                )
            by_version[release.version] = release

        self._releases = dict(sorted(by_version.items()))

    @classmethod
    def load(cls, source: ReleaseSource) -> "ArtifactCatalogue":
        """
        Query a release source and build the catalogue.

        Raises:
            FetchError: If the source can't be queried
            FormatError: If any release is malformed
        """
        payloads = source.list_releases()
        releases = [
            release_from_payload(payload, source.tag_prefix) for payload in payloads
        ]
        catalogue = cls(releases)
        logger.info(f"Loaded {len(catalogue)} compiler release(s)")
        return catalogue

    def __len__(self) -> int:
        return len(self._releases)

    def __contains__(self, version: object) -> bool:
        return version in self._releases

    def __iter__(self) -> Iterator[CompilerRelease]:
        """Iterate releases in ascending version order."""
        return iter(self._releases.values())

    def versions(self) -> List[Version]:
        """All known versions, ascending."""
        return list(self._releases)

    def latest(self) -> CompilerRelease:
        """
        The newest release.

        Raises:
            NotFoundError: If the catalogue is empty
        """
        if not self._releases:
            raise NotFoundError("No version available")
        return self._releases[next(reversed(self._releases))]

    def select(self, spec: Optional[VersionSpec] = None) -> CompilerRelease:
        """
        Select the release to install for a specifier.

        Without a specifier the newest release is selected. With one, the
        highest matching version wins, so `0.29` picks the latest 0.29 patch.

        Args:
            spec: Optional version specifier

        Returns:
            Selected release

        Raises:
            NotFoundError: If the catalogue is empty or nothing matches
        """
        if spec is None:
            return self.latest()

        for version in reversed(self._releases):
            if spec.matches(version):
                return self._releases[version]

        raise NotFoundError(f"Couldn't find specified version: {spec}")
