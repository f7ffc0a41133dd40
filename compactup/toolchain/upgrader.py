"""
Update checking for the active compiler.

Compares the compiler the current link points at with the newest published
release.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .catalogue import ArtifactCatalogue, ReleaseSource
from .linking import ActiveToolchain, CurrentToolchainLink
from .version import Version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateStatus:
    """Active compiler compared with the newest release."""

    current: Optional[ActiveToolchain]
    latest: Version

    @property
    def up_to_date(self) -> bool:
        return self.current is not None and self.current.version >= self.latest


def check_for_update(
    link: CurrentToolchainLink, source: ReleaseSource
) -> UpdateStatus:
    """
    Check whether a newer compiler than the active one is published.

    The link is resolved before the catalogue is fetched, so a corrupt
    installation is reported without touching the network.

    Args:
        link: Current compiler link
        source: Where published releases are listed

    Returns:
        UpdateStatus

    Raises:
        StateError: If the current link is inconsistent
        FetchError: If the catalogue can't be fetched
        FormatError: If the catalogue is malformed
        NotFoundError: If no release is published
    """
    current = link.resolve()
    latest = ArtifactCatalogue.load(source).latest().version

    status = UpdateStatus(current=current, latest=latest)
    logger.debug(
        f"Current: {current.version if current else None}, latest: {latest}, "
        f"up to date: {status.up_to_date}"
    )
    return status
