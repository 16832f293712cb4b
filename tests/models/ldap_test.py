"""Tests for the LDAP data models."""

from __future__ import annotations

import json

import pytest
from pydantic import TypeAdapter, ValidationError

from ldaplogin.exceptions import DNTemplateError
from ldaplogin.models.ldap import (
    AuthResult,
    DNTemplate,
    GroupMapping,
    escape_username,
    format_dn,
    validate_dn_template,
)


def test_escape_username() -> None:
    assert escape_username("someuser") == "someuser"
    assert escape_username("a,b") == "a\\,b"
    assert escape_username("Doe, John, Jr.") == "Doe\\, John\\, Jr."
    assert escape_username(",") == "\\,"
    assert escape_username("") == ""

    # Escaping is not idempotent.
    assert escape_username("a\\,b") == "a\\\\,b"

    for username in ("a,b", ",,", "x,ou=admins,dc=example", "plain"):
        escaped = escape_username(username)
        for i, char in enumerate(escaped):
            if char == ",":
                assert escaped[i - 1] == "\\"


def test_format_dn() -> None:
    template = validate_dn_template("uid=%s,ou=people,dc=example,dc=com")
    expected = "uid=someuser,ou=people,dc=example,dc=com"
    assert format_dn(template, "someuser") == expected
    assert format_dn(template, "50%") == "uid=50%,ou=people,dc=example,dc=com"
    assert format_dn(template, "%s") == "uid=%s,ou=people,dc=example,dc=com"

    template = validate_dn_template("cn=%s,ou=100%%,dc=example")
    assert format_dn(template, "group") == "cn=group,ou=100%,dc=example"

    template = validate_dn_template("%s@example.com")
    assert format_dn(template, "someuser") == "someuser@example.com"


@pytest.mark.parametrize(
    "template",
    [
        "uid=someuser,ou=people",
        "uid=%s,ou=%s",
        "uid=%d,ou=people",
        "uid=%s,ou=%(name)s",
        "uid=%s,ou=%",
        "uid=%%s,ou=people",
    ],
)
def test_dn_template_invalid(template: str) -> None:
    with pytest.raises(DNTemplateError):
        validate_dn_template(template)


def test_dn_template_field() -> None:
    adapter = TypeAdapter(DNTemplate)
    template = "cn=%s,ou=groups,dc=example,dc=com"
    assert adapter.validate_python(template) == template

    with pytest.raises(ValidationError, match="expected exactly one"):
        adapter.validate_python("cn=groups,dc=example,dc=com")


def test_group_mapping() -> None:
    mapping = GroupMapping.model_validate(
        {"externalGroup": "admins", "internalGroup": "ROLE_ADMIN"}
    )
    assert mapping == GroupMapping(
        external_group="admins", internal_group="ROLE_ADMIN"
    )
    assert mapping.model_dump(by_alias=True) == {
        "externalGroup": "admins",
        "internalGroup": "ROLE_ADMIN",
    }

    with pytest.raises(ValidationError):
        GroupMapping.model_validate(
            {"externalGroup": "", "internalGroup": "x"}
        )
    with pytest.raises(ValidationError):
        GroupMapping.model_validate(
            {"externalGroup": "a", "internalGroup": "b", "other": "c"}
        )


def test_auth_result() -> None:
    result = AuthResult()
    assert not result.valid_user
    assert result.group_mappings == ()
    assert result.ui_language_code is None
    assert result.error_message is None

    with pytest.raises(ValidationError):
        result.valid_user = True  # type: ignore[misc]


def test_auth_result_failure() -> None:
    result = AuthResult.failure("Invalid credentials\0 (49)\0")
    assert result == AuthResult(error_message="Invalid credentials  (49) ")
    assert result.error_message
    assert "\0" not in result.error_message
    assert not result.valid_user
    assert result.group_mappings == ()


def test_auth_result_json() -> None:
    result = AuthResult(
        valid_user=True,
        group_mappings=(
            GroupMapping(external_group="admins", internal_group="ROLE_ADMIN"),
        ),
        ui_language_code="en",
    )
    assert json.loads(result.to_json()) == {
        "validUser": True,
        "groupMappings": [
            {"externalGroup": "admins", "internalGroup": "ROLE_ADMIN"}
        ],
        "uiLanguageCode": "en",
    }
    assert result.to_json(indent=2).startswith("{\n  ")

    result = AuthResult.failure("Failed to connect")
    assert json.loads(result.to_json()) == {
        "validUser": False,
        "groupMappings": [],
        "errorMessage": "Failed to connect",
    }

    # Results can be parsed back from their serialized form.
    assert AuthResult.model_validate_json(result.to_json()) == result
