"""
End-to-end test suite for compactup.

These tests run complete workflows through the Python API and the CLI against
a mocked GitHub API, with a shell script standing in for `unzip`.

Run E2E tests with:
    pytest tests/e2e/ -m e2e -v
"""
