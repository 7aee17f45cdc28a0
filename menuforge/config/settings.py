from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for profile/credit writes (bypasses RLS)

    # Anthropic
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_max_tokens: int = 8192

    # Stripe
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    stripe_api_version: str = "2023-10-16"
    stripe_currency: str = "usd"

    # Payments / credits
    payment_required: bool = True
    enable_dev_subscription_bypass: bool = False
    activation_price_cents: int = 1000  # $10 one-time activation
    credit_price_cents: int = 100  # $1 per credit
    subscription_price_cents: int = 999  # legacy $9.99/month
    activation_credits: int = 5
    default_credit_quantity: int = 5
    max_credit_quantity: int = 100

    # Uploads
    max_upload_bytes: int = 10 * 1024 * 1024

    # App
    app_name: str = "menuforge-backend"
    debug: bool = False
    environment: str = "production"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @model_validator(mode="after")
    def check_dev_bypass(self):
        if self.enable_dev_subscription_bypass and self.environment != "development":
            raise ValueError(
                f"ENABLE_DEV_SUBSCRIPTION_BYPASS is enabled but ENVIRONMENT is '{self.environment}'. "
                "The bypass may only be enabled in development."
            )
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def stripe_enabled(self) -> bool:
        return self.payment_required and bool(self.stripe_secret_key)

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
