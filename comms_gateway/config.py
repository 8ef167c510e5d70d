"""Gateway configuration loaded from environment variables.

Uses pydantic-settings so every field can be overridden via env vars.
Nested provider configs are populated from their own env-var prefixes.
"""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServicePrincipalConfig(BaseSettings):
    """Azure AD service principal used when no ACS connection string is set."""

    model_config = SettingsConfigDict(env_prefix="AZURE_", frozen=True)

    client_id: str | None = Field(default=None, description="Azure AD application (client) ID")
    client_secret: SecretStr | None = Field(default=None, description="Azure AD client secret")
    tenant_id: str | None = Field(default=None, description="Azure AD tenant ID")

    @property
    def is_complete(self) -> bool:
        return bool(self.client_id and self.client_secret and self.tenant_id)


class EmailConfig(BaseSettings):
    """Azure Communication Services Email settings."""

    model_config = SettingsConfigDict(env_prefix="AZURE_COMMUNICATION_", frozen=True)

    connection_string: SecretStr | None = Field(
        default=None,
        description="ACS connection string (endpoint=...;accesskey=...)",
    )
    endpoint: str | None = Field(
        default=None,
        description="ACS endpoint, used together with a service principal",
    )
    sender_address: str | None = Field(
        default=None,
        description="Verified sender address (e.g. DoNotReply@contoso.com)",
    )

    def is_configured(self, principal: ServicePrincipalConfig) -> bool:
        """True when a sender address and one complete credential set are present."""
        if not self.sender_address:
            return False
        if self.connection_string and self.connection_string.get_secret_value():
            return True
        return bool(self.endpoint) and principal.is_complete


class NotificationHubConfig(BaseSettings):
    """Azure Notification Hubs settings."""

    model_config = SettingsConfigDict(env_prefix="AZURE_NOTIFICATION_HUB_", frozen=True)

    connection_string: SecretStr | None = Field(
        default=None,
        description="Hub namespace connection string (Endpoint=sb://...;SharedAccessKeyName=...;SharedAccessKey=...)",
    )
    name: str | None = Field(default=None, description="Notification hub name")
    api_version: str = Field(default="2015-01", description="Notification Hubs REST API version")
    timeout_seconds: float = Field(default=30.0, description="HTTP request timeout")
    token_ttl_seconds: int = Field(default=3600, description="Lifetime of generated SAS tokens")

    @property
    def is_configured(self) -> bool:
        return bool(self.connection_string and self.connection_string.get_secret_value() and self.name)


class Settings(BaseSettings):
    """Top-level settings for the gateway.

    All env vars are prefixed with ``GATEWAY_``.
    Example: ``GATEWAY_API_KEY=mysecret``
    """

    model_config = SettingsConfigDict(env_prefix="GATEWAY_", frozen=True)

    # --- Auth ---------------------------------------------------------------
    api_key: SecretStr | None = Field(
        default=None,
        description="Shared secret callers must present; unset means every call fails with 500",
    )
    allowed_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed Origin values, or * for any",
    )

    # --- Providers ----------------------------------------------------------
    email: EmailConfig = Field(default_factory=EmailConfig)
    service_principal: ServicePrincipalConfig = Field(default_factory=ServicePrincipalConfig)
    notification_hub: NotificationHubConfig = Field(default_factory=NotificationHubConfig)

    # --- Server -------------------------------------------------------------
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, description="Bind port")
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(
        default=True,
        description="Use JSON log output (True for prod, False for dev)",
    )

    @property
    def api_key_value(self) -> str:
        return self.api_key.get_secret_value() if self.api_key else ""

    @property
    def origin_allow_list(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def email_configured(self) -> bool:
        return self.email.is_configured(self.service_principal)
