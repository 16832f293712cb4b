"""Constants for ldaplogin."""

__all__ = [
    "CONFIG_PATH",
    "CONNECT_ERROR_PREFIX",
    "DN_ESCAPES",
    "GROUP_MEMBER_PREFIX",
    "LDAP_CONNECT_TIMEOUT",
    "LDAP_SEARCH_TIMEOUT",
    "PROVIDER_NAME",
]

CONFIG_PATH = "/etc/ldaplogin/ldaplogin.yaml"
"""Default configuration path."""

CONNECT_ERROR_PREFIX = "Failed to connect with LDAP server"
"""Start of the error message returned when an attempt is aborted."""

DN_ESCAPES = {",": "\\,"}
"""Characters in a username that are escaped before building a bind DN.

Only the comma is escaped. Other DN special characters are passed through to
the server unchanged.
"""

GROUP_MEMBER_PREFIX = "CN={group},"
"""Prefix an attribute value must start with to match a group mapping.

The comparison is a case-sensitive prefix match without any DN parsing.
"""

LDAP_CONNECT_TIMEOUT = 5.0
"""Default timeout (in seconds) for connecting and binding to LDAP."""

LDAP_SEARCH_TIMEOUT = 5.0
"""Default timeout (in seconds) for a single LDAP search."""

PROVIDER_NAME = "LDAP"
"""Name under which the LDAP login provider is registered."""
