"""LDAP storage layer for ldaplogin."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import bonsai
from bonsai import LDAPClient, LDAPSearchScope
from structlog.stdlib import BoundLogger

from ..config import LDAPConnectorConfig
from ..exceptions import LDAPConnectionError, LDAPSearchError

__all__ = ["LDAPSession", "LDAPStorage"]


class LDAPSession:
    """One bound LDAP connection.

    Instances are created by `LDAPStorage.connect` and must not outlive the
    context manager that created them.

    Parameters
    ----------
    conn
        Bound bonsai connection.
    config
        Configuration for LDAP searches.
    username
        User for which the connection was opened, for error reporting.
    logger
        Logger with the connection context already bound.
    """

    def __init__(
        self,
        conn: bonsai.LDAPConnection,
        config: LDAPConnectorConfig,
        username: str,
        logger: BoundLogger,
    ) -> None:
        self._conn = conn
        self._config = config
        self._username = username
        self._logger = logger

    async def get_attribute_values(
        self, base: str, attr: str
    ) -> list[str] | None:
        """Read one attribute of the entry at a DN.

        Performs a base-scope search rooted at ``base`` using the configured
        search filter.

        Parameters
        ----------
        base
            DN of the entry to read.
        attr
            Attribute to retrieve.

        Returns
        -------
        list of str or None
            Values of the attribute, which will be empty if the entry has no
            such attribute, or `None` if no entry was found. Values that are
            not valid UTF-8 are dropped.

        Raises
        ------
        LDAPConnectionError
            Raised if the connection to the server was lost.
        LDAPSearchError
            Raised if the search failed for any other reason.
        """
        logger = self._logger.bind(
            ldap_attr=attr,
            ldap_base=base,
            ldap_search=self._config.search_filter,
        )
        try:
            logger.debug("Querying LDAP")
            results = await self._conn.search(
                base=base,
                scope=LDAPSearchScope.BASE,
                filter_exp=self._config.search_filter,
                attrlist=[attr],
                timeout=self._config.search_timeout,
            )
        except bonsai.NoSuchObjectError:
            results = []
        except bonsai.ConnectionError as e:
            logger.warning("Lost connection to LDAP", error=str(e))
            raise LDAPConnectionError(str(e), self._username) from e
        except (bonsai.LDAPError, asyncio.TimeoutError) as e:
            logger.warning("Cannot query LDAP", error=str(e))
            msg = str(e) or "LDAP search timed out"
            raise LDAPSearchError(msg, self._username) from e

        if not results:
            logger.debug("No LDAP entry found")
            return None
        values: list[str] = []
        for value in results[0].get(attr) or []:
            # bonsai returns bytes only for values that are not valid UTF-8.
            if isinstance(value, bytes):
                try:
                    value = value.decode()
                except UnicodeDecodeError:
                    logger.warning("Ignoring LDAP value that is not UTF-8")
                    continue
            values.append(str(value))
        logger.debug("LDAP entry found", ldap_values=values)
        return values


class LDAPStorage:
    """LDAP storage layer.

    Connections are never pooled. Each call to `connect` opens a new
    connection, which is closed when the context manager exits.

    Parameters
    ----------
    config
        Configuration for LDAP connections and searches.
    logger
        Logger for debug messages and errors.
    """

    def __init__(
        self, config: LDAPConnectorConfig, logger: BoundLogger
    ) -> None:
        self._config = config
        self._logger = logger.bind(ldap_url=config.url)

    @asynccontextmanager
    async def connect(
        self, bind_dn: str, password: str, username: str
    ) -> AsyncIterator[LDAPSession]:
        """Open a connection and bind with a simple bind.

        Parameters
        ----------
        bind_dn
            DN to bind as.
        password
            Password for the bind. Never logged.
        username
            User for which the connection is opened, for error reporting.

        Yields
        ------
        LDAPSession
            The bound connection.

        Raises
        ------
        LDAPConnectionError
            Raised if the server could not be reached or rejected the bind.
        """
        logger = self._logger.bind(ldap_bind_dn=bind_dn, user=username)
        if not password:
            # An empty password would be an unauthenticated bind, which most
            # servers accept without checking anything.
            msg = "Simple bind with a DN requires a password"
            logger.warning("Refusing LDAP bind", error=msg)
            raise LDAPConnectionError(msg, username)

        client = LDAPClient(self._config.url)
        client.set_credentials("SIMPLE", user=bind_dn, password=password)
        logger.debug("Connecting to LDAP")
        try:
            conn = await client.connect(
                is_async=True, timeout=self._config.connect_timeout
            )
        except (bonsai.LDAPError, asyncio.TimeoutError, OSError) as e:
            logger.warning("Cannot connect to LDAP", error=str(e))
            msg = str(e) or f"LDAP connection failed ({type(e).__name__})"
            raise LDAPConnectionError(msg, username) from e

        try:
            yield LDAPSession(conn, self._config, username, logger)
        finally:
            conn.close()
            logger.debug("Closed LDAP connection")
