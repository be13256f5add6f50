"""Application configuration."""

import os

from pydantic import BaseModel, Field


class SupportConfig(BaseModel):
    """
    Settings for the support desk itself.

    Secrets (database, Valkey, email gateway) come from Vault; these are the
    non-secret knobs, overridable through SUPPORT_* environment variables.
    """

    app_name: str = Field(
        default="Support Desk",
        description="Application name used as API title",
    )
    app_base_url: str = Field(
        default="http://localhost:5173",
        description="Base URL of the customer chat frontend",
    )
    notification_workers: int = Field(
        default=4,
        description="Threads dispatching post-commit notifications",
        ge=1,
        le=32,
    )
    log_level: str = Field(default="INFO")

    @classmethod
    def from_env(cls) -> "SupportConfig":
        """Build config from SUPPORT_APP_NAME, SUPPORT_APP_BASE_URL, ..."""
        overrides = {}
        for field in cls.model_fields:
            value = os.getenv(f"SUPPORT_{field.upper()}")
            if value is not None:
                overrides[field] = value
        return cls(**overrides)

    def chat_url(self, issue_id) -> str:
        """Link to the chat room for an issue."""
        return f"{self.app_base_url.rstrip('/')}/chat/{issue_id}"
