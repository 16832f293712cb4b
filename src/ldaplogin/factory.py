"""Create ldaplogin components."""

from __future__ import annotations

from pathlib import Path
from typing import Self

import structlog
from structlog.stdlib import BoundLogger

from .config import EnvironmentSettings, LDAPConnectorConfig
from .providers.base import LoginProvider
from .providers.ldap import LDAPLoginProvider
from .storage.ldap import LDAPStorage

__all__ = ["Factory"]


class Factory:
    """Build ldaplogin components.

    Uses the connector configuration and a logger to construct the login
    provider and its storage layer. Nothing created here is cached, since
    connections are never shared between authentication attempts.

    Parameters
    ----------
    config
        Connector configuration.
    logger
        Logger to use for all components. Defaults to the ``ldaplogin``
        logger.
    """

    @classmethod
    def from_file(
        cls,
        path: Path | None = None,
        *,
        configure_logging: bool = True,
    ) -> Self:
        """Load the configuration and create a factory.

        Parameters
        ----------
        path
            Path to the configuration file. Defaults to the path from the
            ``LDAPLOGIN_CONFIG_PATH`` environment variable or the default
            configuration path.
        configure_logging
            Whether to configure logging from the loaded configuration.

        Returns
        -------
        Factory
            Factory using that configuration.
        """
        settings = EnvironmentSettings()
        config = LDAPConnectorConfig.from_file(
            path or settings.config_path, settings
        )
        if configure_logging:
            config.configure_logging()
        return cls(config)

    def __init__(
        self, config: LDAPConnectorConfig, logger: BoundLogger | None = None
    ) -> None:
        self.config = config
        self._logger = logger or structlog.get_logger("ldaplogin")

    def create_ldap_storage(self) -> LDAPStorage:
        """Create the LDAP storage layer.

        Returns
        -------
        LDAPStorage
            Storage layer bound to the configured server.
        """
        return LDAPStorage(self.config, self._logger)

    def create_provider(self) -> LoginProvider:
        """Create the login provider.

        Returns
        -------
        LoginProvider
            A new LDAP login provider.
        """
        return LDAPLoginProvider(
            config=self.config,
            ldap=self.create_ldap_storage(),
            logger=self._logger,
        )

    def set_logger(self, logger: BoundLogger) -> None:
        """Replace the internal logger.

        Parameters
        ----------
        logger
            New logger used for all newly-created components.
        """
        self._logger = logger
