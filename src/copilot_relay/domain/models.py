"""
Core domain models shared by the identity and relay layers.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from copilot_relay.domain.exceptions import ConfigurationError


class ConnectionSettings(BaseModel):
    """
    Immutable configuration identifying one Copilot Studio agent.

    ``tenant_id`` and ``app_client_id`` are only required for the
    service-managed identity flow; the agent itself is addressed by
    ``environment_id`` and ``agent_identifier``.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    tenant_id: Optional[str] = Field(
        default=None,
        description="Azure AD tenant that owns the app registration"
    )
    app_client_id: Optional[str] = Field(
        default=None,
        description="Client ID of the public client app registration"
    )
    environment_id: str = Field(
        ...,
        description="Power Platform environment hosting the agent",
        min_length=1
    )
    agent_identifier: str = Field(
        ...,
        description="Schema name of the agent",
        min_length=1
    )
    cloud: Optional[str] = Field(
        default=None,
        description="Power Platform cloud name (e.g. 'Prod')"
    )
    copilot_agent_type: Optional[str] = Field(
        default=None,
        description="Agent type (e.g. 'Published' or 'Prebuilt')"
    )
    custom_power_platform_cloud: Optional[str] = Field(
        default=None,
        description="Host name of a custom Power Platform cloud"
    )

    @classmethod
    def from_values(cls, **values: Optional[str]) -> "ConnectionSettings":
        """
        Build settings, reporting every missing agent field at once.

        Raises:
            ConfigurationError: If ``environment_id`` or ``agent_identifier`` is empty
        """
        missing_fields = [
            name for name in ("environment_id", "agent_identifier")
            if not values.get(name)
        ]
        if missing_fields:
            raise ConfigurationError(
                "Copilot Studio connection settings are incomplete",
                details={"missing_fields": missing_fields},
            )
        return cls(**values)

    def missing_identity_fields(self) -> list[str]:
        """Return the identity fields needed for silent token acquisition that are unset."""
        missing_fields: list[str] = []
        if not self.tenant_id:
            missing_fields.append("tenant_id")
        if not self.app_client_id:
            missing_fields.append("app_client_id")
        return missing_fields
