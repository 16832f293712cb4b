"""Data models for LDAP logins."""

from __future__ import annotations

from typing import Annotated, Self, TypeAlias

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..constants import DN_ESCAPES
from ..exceptions import DNTemplateError

__all__ = [
    "AuthResult",
    "DNTemplate",
    "GroupMapping",
    "escape_username",
    "format_dn",
    "validate_dn_template",
]


def escape_username(username: str) -> str:
    """Escape a username for substitution into a DN template.

    Parameters
    ----------
    username
        Raw username as supplied by the client.

    Returns
    -------
    str
        Username with every comma replaced by ``\\,``. Already escaped input
        is escaped again.
    """
    for char, escaped in DN_ESCAPES.items():
        username = username.replace(char, escaped)
    return username


def validate_dn_template(template: str) -> str:
    """Check that a DN template has a single ``%s`` placeholder.

    Literal percent signs are written as ``%%``.

    Parameters
    ----------
    template
        Template string, such as ``uid=%s,ou=people,dc=example,dc=com``.

    Returns
    -------
    str
        The unmodified template.

    Raises
    ------
    DNTemplateError
        Raised if the template does not contain exactly one ``%s`` or
        contains any other ``%`` directive.
    """
    remainder = template.replace("%%", "")
    count = remainder.count("%s")
    if count != 1:
        msg = f"DN template {template!r} has {count} %s placeholders"
        raise DNTemplateError(msg + ", expected exactly one")
    if "%" in remainder.replace("%s", "", 1):
        msg = f"DN template {template!r} contains unsupported % directive"
        raise DNTemplateError(msg)
    return template


DNTemplate: TypeAlias = Annotated[str, AfterValidator(validate_dn_template)]
"""Type for a DN with a single ``%s`` placeholder."""


def format_dn(template: str, value: str) -> str:
    """Substitute a value into the placeholder of a DN template.

    The value is inserted verbatim, so any escaping must already have been
    done. A ``%`` in the value is not interpreted.
    """
    return template % (value,)


class GroupMapping(BaseModel):
    """Mapping from a directory group to an application group."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )

    external_group: str = Field(
        ...,
        title="Directory group",
        description="Name of the group in the directory",
        examples=["admins"],
        min_length=1,
    )

    internal_group: str = Field(
        ...,
        title="Application group",
        description="Group or role granted to members of the directory group",
        examples=["ROLE_ADMIN"],
        min_length=1,
    )


class AuthResult(BaseModel):
    """Result of one authentication attempt.

    By convention, ``error_message`` is only set when the attempt failed
    because of an error talking to the directory. A user who simply has no
    matching groups gets ``valid_user`` of `False` with no error message.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, frozen=True, populate_by_name=True
    )

    valid_user: bool = Field(
        False,
        title="Whether the user is valid",
        description=(
            "True if the user matched at least one group mapping and, if"
            " configured, their DN was confirmed with a second bind"
        ),
    )

    group_mappings: tuple[GroupMapping, ...] = Field(
        (),
        title="Matched group mappings",
        description="Matched mappings in configuration order",
    )

    ui_language_code: str | None = Field(
        None,
        title="UI language",
        description="Default UI language code from the configuration",
        examples=["en"],
    )

    error_message: str | None = Field(
        None,
        title="Error message",
        description="Diagnostic message if the attempt failed with an error",
    )

    @classmethod
    def failure(cls, message: str) -> Self:
        """Create the result for an attempt that failed with an error.

        NUL characters are replaced with spaces since some directory servers
        terminate their error messages with one and it cannot be serialized.

        Parameters
        ----------
        message
            Diagnostic message.

        Returns
        -------
        AuthResult
            Result with ``valid_user`` false and the error message set.
        """
        return cls(error_message=message.replace("\0", " "))

    def to_json(self, *, indent: int | None = None) -> str:
        """Serialize the result to JSON.

        Keys are camel-case and unset optional fields are omitted, so the
        presence of ``errorMessage`` marks a failed attempt.

        Parameters
        ----------
        indent
            Indentation level for pretty-printing, or `None` for compact
            output.

        Returns
        -------
        str
            JSON representation of the result.
        """
        return self.model_dump_json(
            by_alias=True, exclude_none=True, indent=indent
        )
