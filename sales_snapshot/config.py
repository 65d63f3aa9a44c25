"""Configuration management using Pydantic Settings"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sales_snapshot.domain.exceptions import ConfigurationError
from sales_snapshot.domain.models import WriteBatching


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Shopify Admin API
    shopify_shop_domain: str = ""
    shopify_admin_access_token: str = ""
    shopify_api_version: str = "2025-04"
    # Orders per page times line items per order must stay under the
    # 1000-point query cost limit
    page_size: int = Field(default=10, gt=0, le=250)
    line_items_page_size: int = Field(default=50, gt=0, le=250)

    # Metafield output
    metafield_namespace: str = "stats"
    currency_code: str = "JPY"

    # Write pacing (metafieldsSet accepts at most 25 inputs per call)
    write_batch_size: int = Field(default=25, gt=0, le=25)
    write_inter_batch_delay_seconds: float = Field(default=1.0, ge=0)

    # Service
    service_name: str = "sales-snapshot"
    log_level: str = "INFO"
    metrics_textfile: str | None = None

    # HTTP Client
    http_timeout_seconds: float = 30.0

    def require_credentials(self) -> None:
        """Raise ConfigurationError unless the shop domain and token are set"""
        missing = [
            name
            for name, value in (
                ("SHOPIFY_SHOP_DOMAIN", self.shopify_shop_domain),
                ("SHOPIFY_ADMIN_ACCESS_TOKEN", self.shopify_admin_access_token),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

    def write_batching(self) -> WriteBatching:
        return WriteBatching(
            batch_size=self.write_batch_size,
            inter_batch_delay_seconds=self.write_inter_batch_delay_seconds,
        )


settings = Settings()
