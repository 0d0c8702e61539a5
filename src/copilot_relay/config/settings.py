import os
import tempfile
from functools import lru_cache
from typing import Literal
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from copilot_relay.domain.models import ConnectionSettings


def _default_token_cache_path() -> str:
    return os.path.join(tempfile.gettempdir(), "mcssample.tockencache.json")


class Settings(BaseSettings):
    """
    Application settings loaded from environment.

    Connection fields also accept the camel-case names used by the
    Copilot Studio samples (e.g. ``environmentId``, ``appClientId``).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Copilot Relay"
    app_version: str = "0.1.0"
    environment: Literal["local", "dev", "staging", "prod"] = "local"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Copilot Studio connection
    tenant_id: str | None = Field(
        default=None, validation_alias=AliasChoices("tenant_id", "tenantid")
    )
    app_client_id: str | None = Field(
        default=None, validation_alias=AliasChoices("app_client_id", "appclientid")
    )
    environment_id: str | None = Field(
        default=None, validation_alias=AliasChoices("environment_id", "environmentid")
    )
    agent_identifier: str | None = Field(
        default=None,
        validation_alias=AliasChoices("agent_identifier", "agentidentifier"),
    )
    cloud: str | None = None
    copilot_agent_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("copilot_agent_type", "copilotagenttype"),
    )
    custom_power_platform_cloud: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "custom_power_platform_cloud", "custompowerplatformcloud"
        ),
    )

    # Identity
    authority_host: str = "https://login.microsoftonline.com"
    token_cache_path: str = Field(default_factory=_default_token_cache_path)

    # Observability
    log_level: int = 20  # INFO by default (DEBUG=10, INFO=20, WARNING=30, ERROR=40)
    log_format: Literal["json", "console"] = "json"
    msal_log_level: int = 30  # msal is very chatty below WARNING

    # CORS Settings
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = Field(
        default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    cors_allow_headers: list[str] = Field(default_factory=lambda: ["*"])
    cors_max_age: int = 600  # Preflight cache time in seconds

    @property
    def is_production(self) -> bool:
        return self.environment == "prod"

    def connection_settings(self) -> ConnectionSettings:
        """
        Build the immutable connection settings for one agent.

        Raises:
            ConfigurationError: If the environment or agent identifier is missing
        """
        return ConnectionSettings.from_values(
            tenant_id=self.tenant_id,
            app_client_id=self.app_client_id,
            environment_id=self.environment_id,
            agent_identifier=self.agent_identifier,
            cloud=self.cloud,
            copilot_agent_type=self.copilot_agent_type,
            custom_power_platform_cloud=self.custom_power_platform_cloud,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
