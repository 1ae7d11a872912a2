"""Version requirements published by the network, and checks against them."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

import requests
import semver

PRIMARY_CONFIG_URL = "https://cli.nexus.xyz/version.json"
CACHE_CONFIG_URL = "https://us-central1-nexus-cli.cloudfunctions.net/version"
FALLBACK_CONFIG_URL = (
    "https://raw.githubusercontent.com/nexus-xyz/nexus-cli/refs/heads/main/public/version.json"
)
CONFIG_TIMEOUT = 10
USER_AGENT = "nexus-cli/version-checker"
DEFAULT_RELEASE_URL = "https://github.com/nexus-xyz/nexus-cli/releases"

_PREFIXES = {
    "fetch": "Failed to fetch config",
    "parse": "Failed to parse config JSON",
    "version": "Failed to parse version",
}


class VersionRequirementsError(Exception):
    """Fetching, parsing or applying the version requirements failed.

    ``kind`` is one of "fetch", "parse" or "version".
    """

    def __init__(self, kind: str, detail: str):
        if kind not in _PREFIXES:
            raise ValueError(f"unknown error kind: {kind!r}")
        self.kind = kind
        self.detail = detail
        super().__init__(f"{_PREFIXES[kind]}: {detail}")


class ConstraintType(Enum):
    """How serious a violated constraint is."""

    BLOCKING = "blocking"
    WARNING = "warning"
    NOTICE = "notice"


@dataclass
class VersionConstraint:
    """A minimum version, with the message shown when it is not met."""

    version: str
    constraint_type: ConstraintType
    message: str
    start_date: int | None = None

    @classmethod
    def _from_dict(cls, data: Any) -> "VersionConstraint":
        if not isinstance(data, Mapping):
            raise VersionRequirementsError("parse", "version constraint must be an object")
        for key in ("version", "type", "message"):
            if key not in data:
                raise VersionRequirementsError("parse", f"missing field `{key}`")
        version, message = data["version"], data["message"]
        if not isinstance(version, str) or not isinstance(message, str):
            raise VersionRequirementsError("parse", "`version` and `message` must be strings")
        try:
            constraint_type = ConstraintType(data["type"])
        except ValueError:
            raise VersionRequirementsError(
                "parse", f"unknown variant `{data['type']}`"
            ) from None
        start_date = data.get("start_date")
        if start_date is not None and (
            isinstance(start_date, bool) or not isinstance(start_date, int) or start_date < 0
        ):
            raise VersionRequirementsError("parse", "`start_date` must be a non-negative integer")
        return cls(version, constraint_type, message, start_date)


@dataclass
class VersionCheckResult:
    """The most severe constraint violation found."""

    constraint_type: ConstraintType
    message: str


def _parse_semver(text: str) -> semver.Version:
    try:
        return semver.Version.parse(text)
    except (ValueError, TypeError) as exc:
        raise VersionRequirementsError("version", str(exc)) from exc


def _replaces(existing: VersionCheckResult | None, incoming: ConstraintType) -> bool:
    if existing is None:
        return True
    if incoming is ConstraintType.BLOCKING:
        return True
    # Warning outranks notice; a notice only replaces another notice.
    return existing.constraint_type is ConstraintType.NOTICE


@dataclass
class VersionRequirements:
    """Version constraints plus the map of restricted regions."""

    version_constraints: list[VersionConstraint]
    ofac_country_names: dict[str, str | None] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "VersionRequirements":
        """Build from decoded JSON; raises VersionRequirementsError on bad shape."""
        if not isinstance(data, Mapping):
            raise VersionRequirementsError("parse", "configuration must be an object")
        if "version_constraints" not in data:
            raise VersionRequirementsError("parse", "missing field `version_constraints`")
        raw_constraints = data["version_constraints"]
        if not isinstance(raw_constraints, list):
            raise VersionRequirementsError("parse", "`version_constraints` must be a list")
        constraints = [VersionConstraint._from_dict(item) for item in raw_constraints]

        raw_names = data.get("ofac_country_names", data.get("ofac_restricted_map"))
        if raw_names is None:
            raw_names = {}
        if not isinstance(raw_names, Mapping):
            raise VersionRequirementsError("parse", "`ofac_country_names` must be an object")
        names: dict[str, str | None] = {}
        for code, name in raw_names.items():
            if name is not None and not isinstance(name, str):
                raise VersionRequirementsError("parse", "country names must be strings or null")
            names[str(code)] = name
        return cls(constraints, names)

    @classmethod
    def fetch(cls, session: requests.Session | None = None) -> "VersionRequirements":
        """Fetch the requirements, trying the primary, cache and fallback sources."""
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
        failures = []
        for label, url in (
            ("Primary", PRIMARY_CONFIG_URL),
            ("Cache", CACHE_CONFIG_URL),
            ("Fallback", FALLBACK_CONFIG_URL),
        ):
            try:
                return cls.fetch_from_url(session, url)
            except VersionRequirementsError as exc:
                failures.append(f"{label} ({url}): {exc}")
        raise VersionRequirementsError(
            "fetch", "Failed to fetch from all sources. " + ". ".join(failures)
        )

    @classmethod
    def fetch_from_url(cls, session: Any, url: str) -> "VersionRequirements":
        """Fetch and parse the requirements from one URL."""
        try:
            response = session.get(url, timeout=CONFIG_TIMEOUT)
        except requests.RequestException as exc:
            raise VersionRequirementsError("fetch", str(exc)) from exc

        if not response.ok:
            status = response.status_code
            reason = f" {response.reason}" if response.reason else ""
            raise VersionRequirementsError("fetch", f"HTTP {status}{reason}: {status}")

        try:
            text = response.text
        except (requests.RequestException, UnicodeError) as exc:
            raise VersionRequirementsError(
                "fetch", f"Failed to read response body: {exc}"
            ) from exc

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise VersionRequirementsError("parse", str(exc)) from exc
        return cls.from_dict(data)

    def check_version_constraints(
        self,
        current_version: str,
        latest_version: str | None = None,
        release_url: str | None = None,
    ) -> VersionCheckResult | None:
        """The most severe active constraint that ``current_version`` violates, if any."""
        clean = current_version[1:] if current_version.startswith("v") else current_version
        current = _parse_semver(clean)
        now = int(time.time())

        worst: VersionCheckResult | None = None
        for constraint in self.version_constraints:
            if constraint.start_date is not None and now < constraint.start_date:
                continue
            minimum = _parse_semver(constraint.version)
            if current >= minimum:
                continue
            if _replaces(worst, constraint.constraint_type):
                worst = VersionCheckResult(
                    constraint.constraint_type,
                    _format_message(
                        constraint.message,
                        current_version,
                        constraint.version,
                        latest_version,
                        release_url,
                    ),
                )
        return worst


def _format_message(
    template: str,
    current_version: str,
    version: str,
    latest_version: str | None,
    release_url: str | None,
) -> str:
    return (
        template.replace("{current}", current_version)
        .replace("{version}", version)
        .replace("{latest}", latest_version if latest_version is not None else "unknown")
        .replace("{release_url}", release_url if release_url is not None else DEFAULT_RELEASE_URL)
    )