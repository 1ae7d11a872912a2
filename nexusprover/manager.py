"""Startup validation of version requirements, with user-facing advice."""

from __future__ import annotations

import sys

from nexusprover.requirements import (
    ConstraintType,
    VersionRequirements,
    VersionRequirementsError,
)

_ISSUES_URL = "https://github.com/nexus-xyz/nexus-cli/issues"


def _err(text: str) -> None:
    print(text, file=sys.stderr)


def fetch_error_advice(error: BaseException | str) -> str:
    """Explanation and troubleshooting steps for a failed requirements fetch."""
    error_str = str(error)
    lines = ["❌ Unable to verify CLI version requirements\n"]

    if "timeout" in error_str or "timed out" in error_str:
        lines += [
            "The request timed out. This could indicate:",
            "  • Slow or unstable internet connection",
            "  • High latency to the Nexus servers",
            "  • Temporary server issues\n",
            "Please try:",
            "  • Waiting a few moments and trying again",
            "  • Checking your internet speed and stability",
            "  • Using a different network if available\n",
        ]
    elif (
        "error sending request" in error_str
        or "Failed to fetch from all sources" in error_str
        or "connection" in error_str
    ):
        lines += [
            "Network connectivity issue detected.\n",
            "Troubleshooting steps:",
            "1. Check your internet connection",
            "2. Verify these domains are accessible:",
            "   • cli.nexus.xyz",
            "   • raw.githubusercontent.com",
            "   • nexus-cli.web.app (alternative source)",
            "3. Try the following commands:",
            "   curl -v https://cli.nexus.xyz/version.json",
            "   curl -v https://nexus-cli.web.app/version.json\n",
        ]
    elif "certificate" in error_str or "SSL" in error_str or "TLS" in error_str:
        lines += [
            "There's an SSL/TLS certificate issue. Please check:",
            "  • Your system date and time are correct",
            "  • Your CA certificates are up to date",
            "  • You're not on a network performing SSL interception\n",
            "On Linux, you can update certificates with:",
            "  sudo apt-get update && sudo apt-get install ca-certificates",
            "  OR",
            "  sudo yum install ca-certificates\n",
        ]
    elif "DNS" in error_str or "resolve" in error_str:
        lines += [
            "DNS resolution failed. Please check:",
            "  • Your DNS settings (try using 8.8.8.8 or 1.1.1.1)",
            "  • Your network connection",
            "  • Try flushing your DNS cache\n",
            "To flush DNS cache:",
            "  • Linux: sudo systemd-resolve --flush-caches",
            "  • macOS: sudo dscacheutil -flushcache",
            "  • Windows: ipconfig /flushdns\n",
        ]
    else:
        lines += [
            f"Request failed with error: {error_str}\n",
            "Common solutions:",
            "  • Check your internet connection",
            "  • Try again in a few moments",
            "  • Check if Nexus services are operational\n",
        ]

    lines += [
        "If this issue persists after trying the above solutions:",
        f"  • Check known issues: {_ISSUES_URL}",
        f"  • Report a bug: {_ISSUES_URL}/new",
        "  • Include this error message and your environment details",
    ]
    return "\n".join(lines)


def handle_fetch_error(error: BaseException | str) -> None:
    """Print advice for a failed requirements fetch to standard error."""
    _err(fetch_error_advice(error))


def handle_version_violation(constraint_type: ConstraintType, message: str) -> None:
    """Report a violated constraint; a blocking one raises SystemExit(1)."""
    if constraint_type is ConstraintType.BLOCKING:
        _err("❌ Version requirement not met\n")
        _err(f"{message}\n")
        _err("To resolve this issue:")
        _err("  • Update your CLI: nexus update")
        _err("  • Or manually download the latest version from:")
        _err("    https://github.com/nexus-xyz/nexus-cli/releases")
        raise SystemExit(1)
    if constraint_type is ConstraintType.WARNING:
        _err("⚠️  Version Warning")
        _err(message)
        _err("Consider updating your CLI for the best experience.\n")
    else:
        _err("ℹ️  Notice")
        _err(f"{message}\n")


def restricted_country_name(requirements: VersionRequirements, country: str) -> str | None:
    """Display name if ``country`` is restricted, otherwise None.

    Matching against the restricted codes ignores case; the display name is
    looked up by the exact code and falls back to the code itself.
    """
    wanted = country.lower()
    if not any(code.lower() == wanted for code in requirements.ofac_country_names):
        return None
    name = requirements.ofac_country_names.get(country)
    return name if name is not None else country


def validate_version_requirements(current_version: str, country: str | None) -> None:
    """Check the running version and region against the published requirements.

    Raises SystemExit(1) if the requirements cannot be fetched or parsed, if
    the region is restricted, or if a blocking constraint is violated.
    """
    try:
        requirements = VersionRequirements.fetch()
    except VersionRequirementsError as exc:
        handle_fetch_error(exc)
        raise SystemExit(1) from exc

    if country is not None:
        display_name = restricted_country_name(requirements, country)
        if display_name is not None:
            _err(
                "Due to OFAC regulations, this service is not available in "
                f"{display_name}.\nSee https://nexus.xyz/terms-of-use for more information."
            )
            raise SystemExit(1)

    try:
        violation = requirements.check_version_constraints(current_version, None, None)
    except VersionRequirementsError as exc:
        _err(f"❌ Failed to parse version requirements: {exc}")
        _err(
            "If this issue persists, please file a bug report at: "
            f"{_ISSUES_URL}/new"
        )
        raise SystemExit(1) from exc

    if violation is not None:
        handle_version_violation(violation.constraint_type, violation.message)