"""Configuration for ldaplogin.

The connector is configured by a YAML file whose keys are the camel-case
versions of the fields of `LDAPConnectorConfig`. Secrets and logging settings
may also be supplied by environment variables with the ``LDAPLOGIN_`` prefix,
which take precedence over the file. Only the settings in
`EnvironmentSettings` can be set that way, so unrelated environment variables
such as ``HOST`` or ``PORT`` never leak into the configuration.
"""

from __future__ import annotations

from pathlib import Path
from typing import Self

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict
from safir.logging import LogLevel, Profile, configure_logging

from .constants import CONFIG_PATH, LDAP_CONNECT_TIMEOUT, LDAP_SEARCH_TIMEOUT
from .models.ldap import DNTemplate, GroupMapping

__all__ = [
    "EnvironmentSettings",
    "LDAPConnectorConfig",
]


class EnvironmentSettings(BaseSettings):
    """Settings taken from the environment."""

    model_config = SettingsConfigDict(env_prefix="LDAPLOGIN_", extra="ignore")

    config_path: Path = Field(
        Path(CONFIG_PATH),
        title="Configuration path",
        description="Path to the YAML configuration file",
    )

    static_bind_password: SecretStr | None = Field(
        None,
        title="Static bind password",
        description="Overrides ``staticBindPassword`` in the file",
    )

    log_level: LogLevel | None = Field(
        None,
        title="Logging level",
        description="Overrides ``logLevel`` in the file",
    )

    log_profile: Profile | None = Field(
        None,
        title="Logging profile",
        description="Overrides ``logProfile`` in the file",
    )


class LDAPConnectorConfig(BaseModel):
    """Configuration for the LDAP login provider."""

    model_config = ConfigDict(
        alias_generator=to_camel, extra="forbid", populate_by_name=True
    )

    host: str = Field(
        ...,
        title="LDAP server host",
        examples=["ldap.example.com"],
        min_length=1,
    )

    port: int = Field(389, title="LDAP server port", ge=1, le=65535)

    use_ssl: bool = Field(
        False,
        title="Whether to use LDAPS",
        description="If true, connect with ``ldaps`` instead of ``ldap``",
    )

    bind_dn_format: DNTemplate = Field(
        ...,
        title="Bind DN template",
        description=(
            "DN to bind as, with ``%s`` replaced by the escaped username"
        ),
        examples=["uid=%s,ou=people,dc=example,dc=com"],
    )

    search_base_dn_format: DNTemplate = Field(
        ...,
        title="Group search base DN template",
        description=(
            "Base DN of the search for a group, with ``%s`` replaced by the"
            " directory group name"
        ),
        examples=["cn=%s,ou=groups,dc=example,dc=com"],
    )

    search_filter: str = Field(
        "(objectClass=*)",
        title="Search filter",
        description="Filter used for all group and DN searches",
    )

    search_attribute_for_group: str = Field(
        "member",
        title="Group membership attribute",
        description=(
            "Attribute of the group entry whose values are checked for a"
            " ``CN=<group>,`` prefix"
        ),
    )

    search_attribute_for_dn: str | None = Field(
        None,
        title="DN attribute",
        description=(
            "Attribute holding the user's DN. If set, a user who matches at"
            " least one group mapping is confirmed by binding again as that"
            " DN with their own password."
        ),
        examples=["distinguishedName"],
    )

    static_bind_password: SecretStr | None = Field(
        None,
        title="Static bind password",
        description=(
            "Password for the initial bind instead of the user's password."
            " May be set with the ``LDAPLOGIN_STATIC_BIND_PASSWORD``"
            " environment variable."
        ),
    )

    default_language_code: str | None = Field(
        None,
        title="Default UI language",
        description="Language code returned with every successful result",
        examples=["en"],
    )

    group_mappings: list[GroupMapping] = Field(
        [],
        title="Group mappings",
        description="Mappings from directory groups to application groups",
    )

    connect_timeout: float = Field(
        LDAP_CONNECT_TIMEOUT,
        title="Connect timeout",
        description="Timeout in seconds for connecting and binding",
        gt=0,
    )

    search_timeout: float = Field(
        LDAP_SEARCH_TIMEOUT,
        title="Search timeout",
        description="Timeout in seconds for each search",
        gt=0,
    )

    log_level: LogLevel = Field(
        LogLevel.INFO,
        title="Logging level",
        description="Python logging level",
    )

    log_profile: Profile = Field(
        Profile.production,
        title="Logging profile",
        description="Use ``development`` for human-readable logs",
    )

    @property
    def url(self) -> str:
        """URL of the LDAP server."""
        scheme = "ldaps" if self.use_ssl else "ldap"
        return f"{scheme}://{self.host}:{self.port}"

    @classmethod
    def from_file(
        cls, path: Path, settings: EnvironmentSettings | None = None
    ) -> Self:
        """Construct the configuration from a file.

        Parameters
        ----------
        path
            Path to the configuration file in YAML.
        settings
            Environment settings to apply on top of the file. If not given,
            they are read from the current environment.

        Returns
        -------
        LDAPConnectorConfig
            The corresponding configuration.

        Raises
        ------
        pydantic.ValidationError
            Raised if the configuration is invalid, including a DN template
            without exactly one ``%s`` placeholder.
        """
        if settings is None:
            settings = EnvironmentSettings()
        with path.open("r") as f:
            config = cls.model_validate(yaml.safe_load(f) or {})
        overrides = settings.model_dump(
            include={"static_bind_password", "log_level", "log_profile"},
            exclude_none=True,
        )
        if overrides:
            config = config.model_copy(update=overrides)
        return config

    def configure_logging(self) -> None:
        """Configure logging based on the configuration."""
        configure_logging(
            name="ldaplogin",
            log_level=self.log_level,
            profile=self.log_profile,
        )
