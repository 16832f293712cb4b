"""LDAP login provider."""

from __future__ import annotations

from structlog.stdlib import BoundLogger

from ..config import LDAPConnectorConfig
from ..constants import (
    CONNECT_ERROR_PREFIX,
    GROUP_MEMBER_PREFIX,
    PROVIDER_NAME,
)
from ..exceptions import LDAPError, LDAPSearchError
from ..models.ldap import (
    AuthResult,
    GroupMapping,
    escape_username,
    format_dn,
)
from ..storage.ldap import LDAPSession, LDAPStorage

__all__ = ["LDAPLoginProvider"]


class LDAPLoginProvider:
    """Authenticate users against LDAP and map their groups.

    The provider binds to LDAP (with the static bind password if one is
    configured, otherwise with the user's password), checks each configured
    group mapping, and, if any matched and a DN attribute is configured,
    confirms the user's password by binding again as their DN.

    The provider holds no mutable state, so one instance may be shared by
    concurrent authentication attempts. Each attempt opens its own
    connections and closes them before returning.

    Parameters
    ----------
    config
        Configuration for the LDAP connector.
    ldap
        Storage layer used to open LDAP connections.
    logger
        Logger to use.
    """

    def __init__(
        self,
        *,
        config: LDAPConnectorConfig,
        ldap: LDAPStorage,
        logger: BoundLogger,
    ) -> None:
        self._config = config
        self._ldap = ldap
        self._logger = logger
        if _static_password(config) and not config.search_attribute_for_dn:
            logger.warning(
                "Static bind password set without searchAttributeForDn,"
                " user passwords will not be checked"
            )

    @property
    def name(self) -> str:
        """Name of the provider."""
        return PROVIDER_NAME

    async def authenticate(self, username: str, password: str) -> AuthResult:
        """Authenticate a user and resolve their group mappings.

        Parameters
        ----------
        username
            Username supplied by the client. Commas are escaped before it is
            substituted into the bind DN.
        password
            Password supplied by the client.

        Returns
        -------
        AuthResult
            Result of the attempt. Connection failures are reported in
            ``error_message`` and never raised.
        """
        escaped = escape_username(username)
        logger = self._logger.bind(user=escaped)
        try:
            return await self._authenticate(escaped, password, logger)
        except LDAPError as e:
            logger.warning(CONNECT_ERROR_PREFIX, error=str(e))
            return AuthResult.failure(f"{CONNECT_ERROR_PREFIX}: {e}")
        except Exception as e:
            logger.exception("Unexpected LDAP failure", error=str(e))
            return AuthResult.failure(f"{CONNECT_ERROR_PREFIX}: {e}")

    async def _authenticate(
        self, username: str, password: str, logger: BoundLogger
    ) -> AuthResult:
        """Run the authentication flow for an already-escaped username.

        Raises
        ------
        LDAPConnectionError
            Raised if either bind fails or a connection is lost.
        """
        bind_dn = format_dn(self._config.bind_dn_format, username)
        static_password = _static_password(self._config)
        bind_password = static_password or password
        logger.debug(
            "Connecting to LDAP",
            ldap_bind_dn=bind_dn,
            ldap_host=self._config.host,
            ldap_port=self._config.port,
            static_bind=bool(static_password),
        )

        dn_attr = self._config.search_attribute_for_dn
        connection = self._ldap.connect(bind_dn, bind_password, username)
        async with connection as ldap:
            mappings = await self._get_group_mappings(ldap, logger)
            if not mappings:
                logger.info("Login failed, no group mappings matched")
                return self._build_result(valid=False, mappings=mappings)
            if not dn_attr:
                logger.info("Login succeeded", groups=_internal(mappings))
                return self._build_result(valid=True, mappings=mappings)
            logger.debug("Found group mappings, now looking for DN")
            candidates = await self._get_dn_candidates(ldap, dn_attr, logger)

        if not candidates:
            logger.info("Login failed, could not find DN for user")
            return AuthResult.failure(
                "Could not find distinguishedName for user."
            )
        if len(candidates) > 1:
            logger.warning(
                "Login failed, found more than one DN", ldap_dns=candidates
            )
            return self._build_result(valid=False, mappings=mappings)

        user_dn = candidates[0]
        logger.info("Found DN for user, binding as that DN", ldap_dn=user_dn)
        async with self._ldap.connect(user_dn, password, username):
            logger.debug("Bind as user DN succeeded", ldap_dn=user_dn)
        logger.info("Login succeeded", groups=_internal(mappings))
        return self._build_result(valid=True, mappings=mappings)

    def _build_result(
        self, *, valid: bool, mappings: list[GroupMapping]
    ) -> AuthResult:
        return AuthResult(
            valid_user=valid,
            group_mappings=tuple(mappings),
            ui_language_code=self._config.default_language_code,
        )

    async def _get_dn_candidates(
        self, ldap: LDAPSession, dn_attr: str, logger: BoundLogger
    ) -> list[str]:
        """Look up the distinct DN values for the user.

        The DN is read from the entry at the search base DN template with the
        DN attribute name substituted for the placeholder. A failed search or
        a missing entry yields no candidates.
        """
        base = format_dn(self._config.search_base_dn_format, dn_attr)
        try:
            values = await ldap.get_attribute_values(base, dn_attr)
        except LDAPSearchError as e:
            logger.debug("Failed to search for DN", error=str(e))
            return []
        if values is None:
            logger.warning("No result found while searching for DN")
            return []
        return list(dict.fromkeys(values))

    async def _get_group_mappings(
        self, ldap: LDAPSession, logger: BoundLogger
    ) -> list[GroupMapping]:
        """Return the configured group mappings that match, in order."""
        mappings = []
        for mapping in self._config.group_mappings:
            if await self._is_member(ldap, mapping.external_group, logger):
                mappings.append(mapping)
        return mappings

    async def _is_member(
        self, ldap: LDAPSession, group: str, logger: BoundLogger
    ) -> bool:
        """Check one group mapping.

        A search error or missing group entry counts as no match. A lost
        connection is propagated.
        """
        base = format_dn(self._config.search_base_dn_format, group)
        attr = self._config.search_attribute_for_group
        try:
            values = await ldap.get_attribute_values(base, attr)
        except LDAPSearchError as e:
            msg = "Failed to search for group"
            logger.debug(msg, group=group, error=str(e))
            return False
        if values is None:
            msg = "No result found while searching for group"
            logger.warning(msg, group=group)
            return False
        prefix = GROUP_MEMBER_PREFIX.format(group=group)
        return any(v.startswith(prefix) for v in values)


def _internal(mappings: list[GroupMapping]) -> list[str]:
    return [m.internal_group for m in mappings]


def _static_password(config: LDAPConnectorConfig) -> str:
    """Return the static bind password, or an empty string if unset."""
    if config.static_bind_password is None:
        return ""
    return config.static_bind_password.get_secret_value()
