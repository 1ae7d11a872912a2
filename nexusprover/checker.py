"""Checks whether a newer release of the client has been published."""

from __future__ import annotations

import time
from dataclasses import dataclass

import requests
import semver

GITHUB_RELEASES_URL = "https://api.github.com/repos/nexus-xyz/nexus-cli/releases/latest"
REQUEST_TIMEOUT = 10


@dataclass
class GitHubRelease:
    """The fields of a published release that the checker uses."""

    tag_name: str
    name: str
    published_at: str
    html_url: str
    prerelease: bool

    @classmethod
    def from_dict(cls, data: dict) -> "GitHubRelease":
        try:
            return cls(
                tag_name=str(data["tag_name"]),
                name=str(data["name"]),
                published_at=str(data["published_at"]),
                html_url=str(data["html_url"]),
                prerelease=bool(data["prerelease"]),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"malformed release data: {exc}") from exc


def parse_version(version: str) -> semver.Version:
    """Parse a semantic version, allowing a leading 'v'.

    Raises ValueError if the text is not a valid version.
    """
    clean = version[1:] if version.startswith("v") else version
    return semver.Version.parse(clean)


@dataclass
class VersionInfo:
    """What is known about the current and the latest release."""

    current_version: str
    latest_version: str | None = None
    update_available: bool = False
    release_url: str | None = None
    last_check: float | None = None

    def update_from_release(self, release: GitHubRelease) -> None:
        self.latest_version = release.tag_name
        self.release_url = release.html_url
        self.update_available = self.is_newer_version(release.tag_name)
        self.last_check = time.monotonic()

    def is_newer_version(self, latest: str) -> bool:
        """True if ``latest`` is strictly newer; unparsable versions count as not newer."""
        try:
            return parse_version(latest) > parse_version(self.current_version)
        except (ValueError, TypeError):
            return False


class VersionChecker:
    """Queries the release API for the latest published release."""

    def __init__(self, current_version: str, session: requests.Session | None = None):
        self._session = session or requests.Session()
        self._session.headers["User-Agent"] = f"nexus-cli/{current_version}"

    def check_latest_version(self) -> GitHubRelease:
        """Fetch the latest release.

        Raises requests.RequestException on network or HTTP failure and
        ValueError on a malformed response.
        """
        response = self._session.get(GITHUB_RELEASES_URL, timeout=REQUEST_TIMEOUT)
        if not response.ok:
            raise requests.HTTPError(
                f"GitHub API returned status: {response.status_code}", response=response
            )
        return GitHubRelease.from_dict(response.json())


def check_for_new_version(current_version: str) -> str | None:
    """A notice if a newer release exists, otherwise None (also on any failure)."""
    checker = VersionChecker(current_version)
    try:
        release = checker.check_latest_version()
    except (requests.RequestException, ValueError):
        return None

    info = VersionInfo(current_version)
    info.update_from_release(release)
    if info.update_available:
        return (
            f"New version {release.tag_name} is available "
            f"(current: {current_version}). Download: {release.html_url}"
        )
    return None