from typing import List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application Information
    app_name: str = Field(default="Academy Platform")
    app_description: str = Field(default="Courses, academies and subscriptions API")
    app_version: str = Field(default="1.0.0")
    app_url: str = Field(default="http://localhost:8000")
    frontend_url: str = Field(default="http://localhost:3000")
    api_prefix: str = Field(default="/api/v1")
    debug: bool = Field(default=True)
    production: bool = Field(default=False)

    # Database Configuration
    database_url: Optional[str] = Field(default=None)
    db_host: str = Field(default="127.0.0.1")
    db_port: int = Field(default=5432)
    db_database: str = Field(default="academy")
    db_username: str = Field(default="home")
    db_password: str = Field(default="123")

    # Security Settings
    cors_allowed_origins: List[str] = Field(default=["http://localhost:3000"])
    rate_limit_enabled: bool = Field(default=True)
    checkout_rate_limit: str = Field(default="10/minute")

    # JWT Configuration
    jwt_secret: str = Field(default="your-secret-key-change-in-production")
    jwt_algorithm: str = Field(default="HS256")
    jwt_user_expiration: int = Field(default=7)
    jwt_admin_expiration: int = Field(default=90)
    jwt_refresh_expiration: int = Field(default=30)
    jwt_issuer: str = Field(default="Academy Platform")

    # Pagination
    default_page_size: int = Field(default=10)
    max_page_size: int = Field(default=100)

    # Admin Defaults
    admin_default_username: str = Field(default="admin")
    admin_default_email: str = Field(default="admin@example.com")
    admin_default_password: str = Field(default="Admin@123")

    # Stripe
    stripe_secret_key: str = Field(default="")
    stripe_endpoint_secret: str = Field(default="")
    stripe_success_url: str = Field(default="http://localhost:3000/checkout/success")
    stripe_cancel_url: str = Field(default="http://localhost:3000/checkout/cancel")
    stripe_currency: str = Field(default="usd")
    stripe_tax_percentage: float = Field(default=2.9)
    stripe_fixed_fee_cents: int = Field(default=30)

    # Promos & subscriptions
    max_instructor_promo_percentage: float = Field(default=30)
    complete_subscriptions_on_payment: bool = Field(default=True)

    # Redis
    redis_url: str = Field(default="redis://localhost:6379")
    redis_rate_limit: str = Field(default="20/minute")

    # ============================
    # Generic comma-separated parser
    # ============================
    @staticmethod
    def _parse_csv(value, default):
        if isinstance(value, str):
            items = [x.strip() for x in value.split(",") if x.strip()]
            return items if items else default
        if isinstance(value, list):
            return value
        return default

    @field_validator("cors_allowed_origins", mode="before")
    def validate_cors(cls, v):
        return cls._parse_csv(v, ["http://localhost:3000"])

    @field_validator("max_instructor_promo_percentage")
    def validate_max_promo(cls, v):
        if not 0 <= v <= 100:
            raise ValueError("max_instructor_promo_percentage must be between 0 and 100")
        return v

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return "postgresql+psycopg2://{user}:{password}@{host}:{port}/{database}".format(
            user=self.db_username,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_database,
        )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def load_settings():
    try:
        settings = Settings()
        print("✅ Settings loaded successfully!")
        return settings
    except ValidationError as e:
        print("❌ Validation Error:", e)
        raise


settings = load_settings()
