"""Configuration settings for the Commerce Layer exports CLI."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cl_exports.core.pacing import RateBudget

EXPORT_RESOURCE_TYPES: tuple[str, ...] = (
    "addresses",
    "authorizations",
    "bundles",
    "captures",
    "coupons",
    "customer_addresses",
    "customer_payment_sources",
    "customer_subscriptions",
    "customers",
    "gift_cards",
    "line_item_options",
    "line_items",
    "orders",
    "payment_methods",
    "price_tiers",
    "prices",
    "refunds",
    "returns",
    "shipments",
    "shipping_categories",
    "shipping_methods",
    "sku_list_items",
    "sku_lists",
    "sku_options",
    "skus",
    "stock_items",
    "stock_transfers",
    "tags",
    "tax_categories",
    "transactions",
    "voids",
)

EXPORT_STATUSES: tuple[str, ...] = ("pending", "in_progress", "interrupted", "completed")


class ApiConfig(BaseModel):
    """Request budgets and paging limits of the Commerce Layer API.

    The burst and average windows are independent ceilings; the poll
    interval is derived from whichever of the two is stricter.
    """

    requests_max_num_burst: int = Field(
        default=50,
        ge=1,
        description="Requests allowed in one burst window",
    )
    requests_max_secs_burst: float = Field(
        default=10,
        gt=0,
        description="Length of the burst window in seconds",
    )
    requests_max_num_avg: int = Field(
        default=200,
        ge=1,
        description="Requests allowed in one average window",
    )
    requests_max_secs_avg: float = Field(
        default=60,
        gt=0,
        description="Length of the average window in seconds",
    )
    page_max_size: int = Field(
        default=25,
        ge=1,
        description="Largest page size accepted by list endpoints",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout for a single API call",
    )

    @property
    def burst_budget(self) -> RateBudget:
        """Burst rate budget."""
        return RateBudget(
            max_requests=self.requests_max_num_burst,
            window_seconds=self.requests_max_secs_burst,
        )

    @property
    def average_budget(self) -> RateBudget:
        """Average rate budget."""
        return RateBudget(
            max_requests=self.requests_max_num_avg,
            window_seconds=self.requests_max_secs_avg,
        )


class ExportsConfig(BaseModel):
    """Configuration for export creation and listing."""

    types: list[str] = Field(
        default_factory=lambda: list(EXPORT_RESOURCE_TYPES),
        description="Resource types that can be exported",
    )
    statuses: list[str] = Field(
        default_factory=lambda: list(EXPORT_STATUSES),
        description="Known export job statuses",
    )
    max_listed: int = Field(
        default=1000,
        ge=1,
        description="Hard ceiling of exports materialized by one list command",
    )
    default_listed: int = Field(
        default=25,
        ge=1,
        description="Exports listed when neither --all nor --limit is given",
    )
    token_security_margin: int = Field(
        default=2,
        ge=1,
        description="Seconds before token expiry at which a refresh is forced",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # Commerce Layer credentials
    # --------------------------------------------------------------------------
    cl_organization: str = Field(
        default="",
        description="Organization slug (subdomain of the API endpoint)",
    )
    cl_domain: str = Field(
        default="commercelayer.io",
        description="API domain",
    )
    cl_client_id: str = Field(
        default="",
        description="Client ID of an integration or CLI application",
    )
    cl_client_secret: str = Field(
        default="",
        description="Client secret of an integration application",
    )
    cl_access_token: str = Field(
        default="",
        description="Access token to start with (fetched when empty)",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # API & Exports
    # --------------------------------------------------------------------------
    api: ApiConfig = Field(
        default_factory=ApiConfig,
        description="API request budgets and paging",
    )
    exports: ExportsConfig = Field(
        default_factory=ExportsConfig,
        description="Export command configuration",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
