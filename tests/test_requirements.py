import json
import time

import pytest
import requests

from nexusprover.requirements import (
    CACHE_CONFIG_URL,
    FALLBACK_CONFIG_URL,
    PRIMARY_CONFIG_URL,
    ConstraintType,
    VersionCheckResult,
    VersionConstraint,
    VersionRequirements,
    VersionRequirementsError,
)


def _constraint(version, kind, message, start_date=None):
    return VersionConstraint(version, kind, message, start_date)


class _Response:
    def __init__(self, status_code=200, text="", reason="OK"):
        self.status_code = status_code
        self.text = text
        self.reason = reason

    @property
    def ok(self):
        return 200 <= self.status_code < 400


class _Session:
    def __init__(self, responses):
        self.responses = responses
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append(url)
        result = self.responses[url]
        if isinstance(result, Exception):
            raise result
        return result


def test_version_comparison():
    config = VersionRequirements(
        [
            _constraint("0.9.0", ConstraintType.WARNING, "Warning: {current} < {version}"),
            _constraint("0.8.0", ConstraintType.BLOCKING, "Blocking: {current} < {version}"),
        ]
    )
    assert config.check_version_constraints("0.9.1", None, None) is None

    result = config.check_version_constraints("0.8.9", None, None)
    assert result is not None
    assert result.constraint_type is ConstraintType.WARNING

    result = config.check_version_constraints("0.7.9", None, None)
    assert result is not None
    assert result.constraint_type is ConstraintType.BLOCKING


def test_version_parsing_with_v_prefix():
    config = VersionRequirements(
        [
            _constraint("1.0.0", ConstraintType.WARNING, "Warning: {current} < {version}"),
            _constraint("0.1.0", ConstraintType.BLOCKING, "Blocking: {current} < {version}"),
        ]
    )
    assert config.check_version_constraints("v1.0.0", None, None) is None


def test_constraint_priority():
    config = VersionRequirements(
        [
            _constraint("0.9.0", ConstraintType.NOTICE, "Notice: {current} < {version}"),
            _constraint("0.8.0", ConstraintType.WARNING, "Warning: {current} < {version}"),
            _constraint("0.7.0", ConstraintType.BLOCKING, "Blocking: {current} < {version}"),
        ]
    )
    result = config.check_version_constraints("0.6.0", None, None)
    assert result is not None
    assert result.constraint_type is ConstraintType.BLOCKING


def test_message_formatting():
    config = VersionRequirements(
        [
            _constraint(
                "1.0.0",
                ConstraintType.NOTICE,
                "Version {current} < {version}. Latest: {latest}. URL: {release_url}",
            )
        ]
    )
    result = config.check_version_constraints("0.9.0", "1.1.0", "https://example.com")
    assert result is not None
    assert "0.9.0" in result.message
    assert "1.0.0" in result.message
    assert "1.1.0" in result.message
    assert "https://example.com" in result.message


def test_message_defaults_for_missing_latest_and_url():
    config = VersionRequirements(
        [_constraint("1.0.0", ConstraintType.NOTICE, "{latest} {release_url}")]
    )
    result = config.check_version_constraints("0.9.0")
    assert result == VersionCheckResult(
        ConstraintType.NOTICE, "unknown https://github.com/nexus-xyz/nexus-cli/releases"
    )


def test_warning_does_not_replace_earlier_warning():
    config = VersionRequirements(
        [
            _constraint("2.0.0", ConstraintType.WARNING, "first"),
            _constraint("3.0.0", ConstraintType.WARNING, "second"),
        ]
    )
    result = config.check_version_constraints("1.0.0")
    assert result.message == "first"


def test_future_constraint_is_ignored():
    future = int(time.time()) + 3600
    config = VersionRequirements(
        [_constraint("9.0.0", ConstraintType.BLOCKING, "later", start_date=future)]
    )
    assert config.check_version_constraints("1.0.0") is None


def test_past_constraint_is_active():
    config = VersionRequirements(
        [_constraint("9.0.0", ConstraintType.BLOCKING, "now", start_date=1)]
    )
    assert config.check_version_constraints("1.0.0").message == "now"


def test_invalid_current_version_raises():
    config = VersionRequirements([])
    with pytest.raises(VersionRequirementsError) as info:
        config.check_version_constraints("not.a.version")
    assert info.value.kind == "version"


def test_invalid_constraint_version_raises():
    config = VersionRequirements([_constraint("v1.0.0", ConstraintType.NOTICE, "x")])
    with pytest.raises(VersionRequirementsError) as info:
        config.check_version_constraints("0.1.0")
    assert str(info.value).startswith("Failed to parse version: ")


def test_from_dict_reads_alias_and_type():
    config = VersionRequirements.from_dict(
        {
            "version_constraints": [
                {"version": "1.2.3", "type": "warning", "message": "m", "start_date": 5}
            ],
            "ofac_restricted_map": {"XX": "Nowhere", "YY": None},
        }
    )
    assert config.version_constraints == [
        VersionConstraint("1.2.3", ConstraintType.WARNING, "m", 5)
    ]
    assert config.ofac_country_names == {"XX": "Nowhere", "YY": None}


def test_from_dict_defaults_country_map():
    config = VersionRequirements.from_dict({"version_constraints": []})
    assert config.ofac_country_names == {}


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"version_constraints": [{"version": "1.0.0", "message": "m"}]},
        {"version_constraints": [{"version": "1.0.0", "type": "fatal", "message": "m"}]},
        [],
    ],
)
def test_from_dict_rejects_bad_shape(data):
    with pytest.raises(VersionRequirementsError) as info:
        VersionRequirements.from_dict(data)
    assert info.value.kind == "parse"


def test_fetch_uses_primary_when_available():
    body = json.dumps({"version_constraints": []})
    session = _Session({PRIMARY_CONFIG_URL: _Response(text=body)})
    config = VersionRequirements.fetch(session)
    assert config.version_constraints == []
    assert session.requested == [PRIMARY_CONFIG_URL]


def test_fetch_falls_back_in_order():
    body = json.dumps(
        {"version_constraints": [{"version": "1.0.0", "type": "notice", "message": "n"}]}
    )
    session = _Session(
        {
            PRIMARY_CONFIG_URL: _Response(status_code=500, reason="Internal Server Error"),
            CACHE_CONFIG_URL: _Response(text="not json"),
            FALLBACK_CONFIG_URL: _Response(text=body),
        }
    )
    config = VersionRequirements.fetch(session)
    assert config.version_constraints[0].message == "n"
    assert session.requested == [PRIMARY_CONFIG_URL, CACHE_CONFIG_URL, FALLBACK_CONFIG_URL]


def test_fetch_reports_all_failures():
    session = _Session(
        {
            PRIMARY_CONFIG_URL: requests.ConnectionError("boom"),
            CACHE_CONFIG_URL: _Response(status_code=404, reason="Not Found"),
            FALLBACK_CONFIG_URL: _Response(text="{"),
        }
    )
    with pytest.raises(VersionRequirementsError) as info:
        VersionRequirements.fetch(session)
    message = str(info.value)
    assert info.value.kind == "fetch"
    assert "Failed to fetch from all sources" in message
    assert "HTTP 404 Not Found: 404" in message
    assert "boom" in message


def test_fetch_from_url_http_error():
    session = _Session({"u": _Response(status_code=503, reason="Service Unavailable")})
    with pytest.raises(VersionRequirementsError) as info:
        VersionRequirements.fetch_from_url(session, "u")
    assert str(info.value) == "Failed to fetch config: HTTP 503 Service Unavailable: 503"