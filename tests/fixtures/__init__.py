"""Test fixtures for compactup tests.

This package provides reusable pytest fixtures for testing compactup components.
Fixtures are organized by type:

- directories: Root directories, optionally with installed compilers
- releases: Release sources, downloaders and unpackers that need no network
- github: Mocked GitHub API and a configured root for running the CLI

Import fixtures in your tests using:
    from tests.fixtures.directories import compact_root
    from tests.fixtures.releases import release_source
"""

__all__ = [
    "directories",
    "releases",
    "github",
]
