"""Interface for login providers."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..models.ldap import AuthResult

__all__ = ["LoginProvider"]


@runtime_checkable
class LoginProvider(Protocol):
    """A source of user authentication and group mappings.

    The host application may register several unrelated providers. Any object
    with these members qualifies; no base class is required.
    """

    @property
    def name(self) -> str:
        """Name identifying the provider, such as ``LDAP``."""

    async def authenticate(self, username: str, password: str) -> AuthResult:
        """Check a user's credentials and resolve their group mappings.

        Parameters
        ----------
        username
            Username supplied by the client.
        password
            Password supplied by the client.

        Returns
        -------
        AuthResult
            Result of the attempt. Implementations report every failure in
            the result rather than raising an exception.
        """
