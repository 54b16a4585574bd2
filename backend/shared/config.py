"""Runtime settings read from the environment (and an optional .env file)."""

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

DEFAULT_FROM_EMAIL = "MentalSpace <onboarding@resend.dev>"


class Settings(BaseSettings):
    """Settings for the notification pipeline."""

    model_config = SettingsConfigDict(extra="ignore")

    supabase_url: str | None = Field(None, validation_alias="SUPABASE_URL")
    supabase_service_key: str | None = Field(
        None,
        validation_alias=AliasChoices("SUPABASE_SERVICE_KEY", "SUPABASE_SERVICE_ROLE_KEY"),
    )
    resend_api_key: str | None = Field(None, validation_alias="RESEND_API_KEY")
    from_email: str = Field(DEFAULT_FROM_EMAIL, validation_alias="NOTIFICATION_FROM_EMAIL")

    # Skip rules whose conditions use an operator we don't understand
    strict_condition_operators: bool = Field(
        False, validation_alias="NOTIFICATION_STRICT_OPERATORS"
    )
    dedupe_recipients: bool = Field(False, validation_alias="NOTIFICATION_DEDUPE_RECIPIENTS")

    # Comma-separated
    cors_allow_origins: str = Field("*", validation_alias="CORS_ALLOW_ORIGINS")

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ALLOW_ORIGINS into a list."""
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
