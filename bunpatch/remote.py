"""Release discovery and download helpers for the vendor CLI."""

from __future__ import annotations

import hashlib
import logging
import os
import re
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.error import URLError
from urllib.request import Request, urlopen

from .exceptions import ChecksumError, ConfigError, FetchError

LOG = logging.getLogger(__name__)

CLI_URL = "https://app.factory.ai/cli"
DOWNLOAD_BASE_URL = "https://downloads.factory.ai"
USER_AGENT = "bunpatch"
DEFAULT_TIMEOUT = 60.0
TIMEOUT_ENV = "BUNPATCH_TIMEOUT"

_VERSION_RE = re.compile(r'VER="([^"]+)"')

FetchText = Callable[[str], str]


def default_timeout() -> float:
    """Timeout in seconds, from ``BUNPATCH_TIMEOUT`` when set."""

    raw = os.environ.get(TIMEOUT_ENV)
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{TIMEOUT_ENV} must be a number of seconds, got {raw!r}") from None
    if not value > 0:
        raise ConfigError(f"{TIMEOUT_ENV} must be positive, got {raw!r}")
    return value


def fetch_bytes(url: str, timeout: Optional[float] = None) -> bytes:
    """Return the body of ``url``; network and HTTP errors raise :class:`FetchError`."""

    if timeout is None:
        timeout = default_timeout()
    request = Request(url, headers={"User-Agent": USER_AGENT})
    LOG.debug("GET %s", url)
    try:
        with urlopen(request, timeout=timeout) as response:
            payload = response.read()
    except (URLError, OSError) as exc:
        raise FetchError(f"request for {url} failed: {exc}", url=url) from exc
    LOG.debug("received %d bytes from %s", len(payload), url)
    return payload


def fetch_text(url: str, timeout: Optional[float] = None) -> str:
    return fetch_bytes(url, timeout).decode("utf-8", errors="replace")


def discover_version(script: str) -> Optional[str]:
    """Return the ``VER="..."`` value announced by the install script."""

    match = _VERSION_RE.search(script)
    return match.group(1) if match else None


def fetch_latest_version(
    cli_url: str = CLI_URL,
    fetch: FetchText = fetch_text,
    fallback_version: Optional[str] = None,
) -> str:
    """Return the latest published version.

    When discovery fails ``fallback_version`` is returned if given, otherwise
    the failure propagates as :class:`FetchError`.
    """

    try:
        version = discover_version(fetch(cli_url))
        if version is None:
            raise FetchError(f"no version announced by {cli_url}", url=cli_url)
    except FetchError as exc:
        if fallback_version is None:
            raise
        LOG.warning("version discovery failed (%s); using fallback %s", exc, fallback_version)
        return fallback_version
    LOG.info("latest published version is %s", version)
    return version


@dataclass(frozen=True)
class DownloadInfo:
    binary_url: str
    sha256_url: str
    ripgrep_url: str
    ripgrep_sha256_url: str
    version: str
    binary_name: str


def build_download_info(
    version: str,
    platform: str = "windows",
    architecture: str = "x64",
    has_avx2: bool = True,
    base_url: str = DOWNLOAD_BASE_URL,
) -> DownloadInfo:
    """Build the release URLs for one platform/architecture.

    x64 machines without AVX2 get the ``-baseline`` build; ripgrep has no
    baseline variant.
    """

    binary_name = "droid.exe" if platform == "windows" else "droid"
    suffix = "-baseline" if architecture == "x64" and not has_avx2 else ""
    base = base_url.rstrip("/")
    release = f"{base}/factory-cli/releases/{version}/{platform}/{architecture}{suffix}/{binary_name}"
    ripgrep = f"{base}/ripgrep/{platform}/{architecture}/rg"
    return DownloadInfo(
        binary_url=release,
        sha256_url=f"{release}.sha256",
        ripgrep_url=ripgrep,
        ripgrep_sha256_url=f"{ripgrep}.sha256",
        version=version,
        binary_name=binary_name,
    )


def verify_sha256(data: bytes, checksum_text: str) -> str:
    """Check ``data`` against a ``sha256sum``-style digest file and return the digest."""

    fields = checksum_text.split()
    if not fields:
        raise ChecksumError("published checksum is empty")
    expected = fields[0].lower()
    actual = hashlib.sha256(data).hexdigest()
    if actual != expected:
        raise ChecksumError(f"sha256 mismatch: expected {expected}, got {actual}")
    LOG.info("sha256 verified: %s", actual)
    return actual


__all__ = [
    "CLI_URL",
    "DOWNLOAD_BASE_URL",
    "DownloadInfo",
    "build_download_info",
    "default_timeout",
    "discover_version",
    "fetch_bytes",
    "fetch_latest_version",
    "fetch_text",
    "verify_sha256",
]
