"""Configuration management for the Onshape MCP Server.

This module handles all configuration settings for the MCP server,
including the Onshape API endpoint, credentials, request limits, and logging.
"""

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://cad.onshape.com/api/v1"


class ServerConfig(BaseSettings):
    """Configuration for the Onshape MCP server.

    Settings are loaded from environment variables with the ONSHAPE_ prefix.
    For example, ONSHAPE_ACCESS_KEY sets the access_key field.

    Attributes:
        api_url: Base URL of the Onshape REST API, including the version.
        access_key: API access key (Basic auth user).
        secret_key: API secret key (Basic auth password).
        timeout_ms: Per-request timeout in milliseconds.
        document_list_limit: Number of documents returned by list_documents.
        log_level: Logging level.
        require_credentials: Abort startup instead of warning when a key is missing.
    """

    model_config = SettingsConfigDict(
        env_prefix="ONSHAPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Onshape connection settings
    api_url: Annotated[
        str,
        Field(description="Onshape REST API base URL"),
    ] = DEFAULT_API_URL
    access_key: Annotated[
        str | None,
        Field(description="Onshape API access key"),
    ] = None
    secret_key: Annotated[
        str | None,
        Field(description="Onshape API secret key"),
    ] = None

    # Request limits
    timeout_ms: Annotated[
        int,
        Field(ge=1000, le=600000, description="Request timeout in ms"),
    ] = 30000
    document_list_limit: Annotated[
        int,
        Field(ge=1, le=100, description="Maximum documents listed"),
    ] = 20

    # Logging
    log_level: str = "INFO"

    # Startup policy
    require_credentials: bool = False

    @property
    def has_credentials(self) -> bool:
        """Whether both halves of the API key pair are configured."""
        return bool(self.access_key) and bool(self.secret_key)


def get_config() -> ServerConfig:
    """Get the server configuration.

    Returns:
        ServerConfig instance populated from environment variables.
    """
    return ServerConfig()
