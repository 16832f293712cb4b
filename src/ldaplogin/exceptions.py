"""Exceptions for ldaplogin."""

from __future__ import annotations

__all__ = [
    "DNTemplateError",
    "LDAPConnectionError",
    "LDAPError",
    "LDAPSearchError",
]


class DNTemplateError(ValueError):
    """A DN template does not have exactly one ``%s`` placeholder.

    Subclasses `ValueError` so that Pydantic reports it as a validation error
    when the configuration is loaded.
    """


class LDAPError(Exception):
    """An LDAP operation failed.

    Parameters
    ----------
    message
        Human-readable description of the failure.
    username
        User for which the operation was performed, if known.
    """

    def __init__(self, message: str, username: str | None = None) -> None:
        super().__init__(message)
        self.username = username


class LDAPConnectionError(LDAPError):
    """Connecting or binding to the LDAP server failed.

    This aborts the whole authentication attempt.
    """


class LDAPSearchError(LDAPError):
    """A single LDAP search failed.

    Only the search that raised it is affected. The caller treats it as a
    search that found nothing.
    """
