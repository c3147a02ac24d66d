"""Runtime settings for the storefront, read from ``BAKERY_*`` environment variables."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ordering.shared.money import SUPPORTED_LOCALES


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BAKERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field("http://localhost:3000", description="Public storefront URL used for gateway back URLs")
    currency: str = Field("ARS", min_length=3, max_length=3)
    locale: str = Field("es_AR")
    default_delivery_fee: float = Field(0.0, ge=0, description="Shipping cost when a delivery omits one")
    max_installments: int = Field(12, ge=1)
    notification_url: str | None = Field(None, description="Webhook URL registered on each payment preference")
    statement_descriptor: str = Field("PANADERIA", max_length=22)

    payment_gateway: str = Field("fake", pattern="^fake$")

    @field_validator("locale")
    @classmethod
    def locale_must_be_supported(cls, value: str) -> str:
        value = value.replace("-", "_")
        if value not in SUPPORTED_LOCALES:
            raise ValueError(f"locale must be one of {', '.join(SUPPORTED_LOCALES)}")
        return value

    @property
    def back_urls(self) -> dict[str, str]:
        base = self.base_url.rstrip("/")
        return {
            "success": f"{base}/checkout/success",
            "failure": f"{base}/checkout/failure",
            "pending": f"{base}/checkout/pending",
        }


@lru_cache
def get_settings() -> Settings:
    return Settings()
