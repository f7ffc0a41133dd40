"""
Fixtures for end-to-end tests.
"""

import pytest

from compactup.core.config import load_config
from compactup.toolchain.catalogue import GitHubReleaseSource
from compactup.toolchain.extractor import Unpacker
from compactup.toolchain.layout import ToolchainLayout


@pytest.fixture
def e2e_layout(cli_root) -> ToolchainLayout:
    """Layout of the CLI root directory."""
    return ToolchainLayout(cli_root)


@pytest.fixture
def e2e_config(cli_root):
    """Configuration read from the CLI root, as the commands read it."""
    return load_config(cli_root / "config.yaml", required=True)


@pytest.fixture
def e2e_source(e2e_config) -> GitHubReleaseSource:
    return GitHubReleaseSource(e2e_config.release_source)


@pytest.fixture
def e2e_unpacker(e2e_config) -> Unpacker:
    return Unpacker(e2e_config.unzip.program, e2e_config.unzip.args)
