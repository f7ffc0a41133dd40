"""
Network download manager with progress tracking and checksum verification.

This module provides the artifact download used by the install pipeline:
- HTTP/HTTPS downloads with TLS verification
- Atomic writes (data goes to `<name>.part`, renamed when complete)
- Resume of interrupted downloads (using Range headers)
- Progress reporting (bytes, percentage, speed, ETA)
- Size and SHA256 verification during download

Failed downloads are never retried here; re-running the command resumes
from the `.part` file.
"""

import hashlib
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests
from requests.exceptions import RequestException

from .exceptions import ChecksumError, FetchError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


class StreamingHasher:
    """Compute hash incrementally for streaming downloads."""

    def __init__(self, algorithm: str = "sha256"):
        """
        Initialize streaming hasher.

        Args:
            algorithm: Hash algorithm (only 'sha256' is supported)

        Raises:
            ValueError: If algorithm is not supported
        """
        self.algorithm = algorithm.lower()

        if self.algorithm == "sha256":
            self.hasher = hashlib.sha256()
        else:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    def update(self, data: bytes):
        """Add data to hash computation."""
        self.hasher.update(data)

    def finalize(self) -> str:
        """Get final hash value as hex string."""
        return self.hasher.hexdigest()

    def verify(self, expected_hash: str) -> bool:
        """Check if computed hash matches expected value (case-insensitive)."""
        return self.finalize().lower() == expected_hash.lower()


def partial_path(destination: Path) -> Path:
    """Path of the in-progress download for a destination."""
    return destination.with_name(destination.name + ".part")


def download_file(
    url: str,
    destination: Path,
    expected_size: Optional[int] = None,
    expected_sha256: Optional[str] = None,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    resume: bool = True,
    timeout: int = 30,
    session: Optional[requests.Session] = None,
) -> Path:
    """
    Download file from URL to destination atomically.

    Args:
        url: URL to download from
        destination: Local path to save file
        expected_size: Expected size in bytes (verified after download)
        expected_sha256: Expected SHA256 hash (verified during download)
        progress_callback: Optional callback for progress updates
        resume: Whether to resume a previous partial download
        timeout: Request timeout in seconds
        session: Optional requests session

    Returns:
        Path to downloaded file

    Raises:
        FetchError: If the transfer fails
        ChecksumError: If size or checksum doesn't match expected value
        ValueError: If URL or destination is invalid

    Example:
        >>> from compactup.core.download import download_file
        >>> url = "https://example.com/compactc_v0.29.1_x86_64-unknown-linux-musl.zip"
        >>> download_file(url, Path("versions/0.29.1/x86_64-unknown-linux-musl/artifact.zip"))
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    part = partial_path(destination)

    resume_from = 0
    if resume and part.exists():
        resume_from = part.stat().st_size
        logger.info(f"Resuming download from byte {resume_from}")
    elif part.exists():
        part.unlink()

    http = session or requests
    try:
        _download_with_progress(
            http=http,
            url=url,
            part=part,
            resume_from=resume_from,
            expected_sha256=expected_sha256,
            progress_callback=progress_callback,
            timeout=timeout,
        )
    except RequestException as e:
        raise FetchError(f"Failed to download {url}: {e}") from e
    except OSError as e:
        raise FetchError(f"Failed to write {part}: {e}") from e

    actual_size = part.stat().st_size
    if expected_size is not None and actual_size != expected_size:
        part.unlink()
        raise ChecksumError(
            f"Size mismatch for {destination.name}: "
            f"expected {expected_size} bytes, got {actual_size}"
        )

    part.replace(destination)
    logger.info(f"Download complete: {destination}")
    return destination


def _download_with_progress(
    http,
    url: str,
    part: Path,
    resume_from: int,
    expected_sha256: Optional[str],
    progress_callback: Optional[Callable[[DownloadProgress], None]],
    timeout: int,
) -> None:
    """
    Stream the response body into the partial file.

    This is an internal function called by download_file().

    Raises:
        ChecksumError: If checksum doesn't match
        RequestException: If HTTP request fails
    """
    headers = {}
    if resume_from > 0:
        headers["Range"] = f"bytes={resume_from}-"

    logger.info(f"Downloading from {url}")

    with http.get(
        url, headers=headers, stream=True, timeout=timeout, allow_redirects=True
    ) as response:
        rejected = resume_from > 0 and response.status_code == 416
        if not rejected:
            response.raise_for_status()

            if resume_from > 0 and response.status_code != 206:
                logger.warning("Server does not support resume, restarting download")
                resume_from = 0

            _write_response(
                response, part, resume_from, expected_sha256, progress_callback
            )

    if rejected:
        # The partial file is already complete or no longer matches the remote.
        logger.warning("Server rejected resume range, restarting download")
        part.unlink()
        _download_with_progress(
            http, url, part, 0, expected_sha256, progress_callback, timeout
        )


def _write_response(
    response,
    part: Path,
    resume_from: int,
    expected_sha256: Optional[str],
    progress_callback: Optional[Callable[[DownloadProgress], None]],
) -> None:
    """Append or write the response body to the partial file and verify it."""
    content_length = response.headers.get("content-length")
    if content_length:
        total_size = int(content_length) + resume_from
    else:
        total_size = 0  # Unknown size

    mode = "ab" if resume_from > 0 else "wb"

    hasher = StreamingHasher("sha256") if expected_sha256 else None

    # If resuming, need to re-read existing bytes for checksum
    if resume_from > 0 and hasher:
        logger.debug(f"Re-computing hash for first {resume_from} bytes")
        with open(part, "rb") as f:
            while chunk := f.read(CHUNK_SIZE):
                hasher.update(chunk)

    downloaded = resume_from
    start_time = time.time()
    last_progress_time = start_time

    with open(part, mode) as f:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if not chunk:
                continue
            f.write(chunk)
            downloaded += len(chunk)

            if hasher:
                hasher.update(chunk)

            # Report progress at most twice per second
            current_time = time.time()
            if progress_callback and (
                current_time - last_progress_time >= 0.5 or downloaded == total_size
            ):
                elapsed = current_time - start_time
                speed = (downloaded - resume_from) / elapsed if elapsed > 0 else 0
                remaining = total_size - downloaded if total_size > 0 else 0
                eta = remaining / speed if speed > 0 else 0

                progress_callback(
                    DownloadProgress(
                        bytes_downloaded=downloaded,
                        total_bytes=total_size if total_size > 0 else downloaded,
                        percentage=(downloaded / total_size * 100)
                        if total_size > 0
                        else 0,
                        speed_bps=speed,
                        eta_seconds=eta,
                    )
                )
                last_progress_time = current_time

    if expected_sha256 and hasher:
        if not hasher.verify(expected_sha256):
            actual_hash = hasher.finalize()
            part.unlink()
            raise ChecksumError(
                f"Checksum mismatch for {part.name}: "
                f"expected {expected_sha256}, got {actual_hash}"
            )
        logger.info("Checksum verified successfully")


def verify_checksum(file_path: Path, expected_sha256: str) -> bool:
    """
    Verify file SHA256 checksum.

    Args:
        file_path: Path to file to verify
        expected_sha256: Expected SHA256 hash (hex string)

    Returns:
        True if checksum matches, False otherwise

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    hasher = StreamingHasher("sha256")
    with open(file_path, "rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            hasher.update(chunk)

    return hasher.verify(expected_sha256)


def verify_file(
    file_path: Path,
    expected_size: Optional[int] = None,
    expected_sha256: Optional[str] = None,
) -> bool:
    """
    Check that an existing file matches the published size and checksum.

    Checks that have no expected value are skipped, so a file with no
    published metadata only needs to exist.

    Returns:
        True if the file exists and passes every available check
    """
    if not file_path.is_file():
        return False

    if expected_size is not None and file_path.stat().st_size != expected_size:
        logger.debug(f"Size mismatch for cached file: {file_path}")
        return False

    if expected_sha256 and not verify_checksum(file_path, expected_sha256):
        logger.debug(f"Checksum mismatch for cached file: {file_path}")
        return False

    return True


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.total_bytes > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        return f"{mb_downloaded:.1f} MB " f"at {speed_mbps:.1f} MB/s"
