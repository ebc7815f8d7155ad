"""
Configuration settings for the application.
"""

import logging
import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

load_dotenv()

DEFAULT_STORE_CATALOG_IDS = "mens,womens,newarrivals,top-seller"
DEFAULT_ACCOUNT_MANAGER_URL = (
    "https://account.demandware.com/dwsso/oauth2/access_token"
)


class CommerceConfig(BaseModel):
    """Connection parameters for the commerce backend, built once per process."""

    model_config = ConfigDict(frozen=True)

    client_id: str = ""
    client_secret: str = ""
    organization_id: str = ""
    short_code: str = ""
    site_id: str = ""
    sandbox_domain: str = ""
    ocapi_data_endpoint: str = ""
    account_manager_url: str = DEFAULT_ACCOUNT_MANAGER_URL
    auth_mode: Literal["guest", "organization"] = "guest"
    catalog_ids: tuple[str, ...] = tuple(DEFAULT_STORE_CATALOG_IDS.split(","))
    request_timeout: float = 30.0
    token_cache_enabled: bool = True

    @property
    def api_base_url(self) -> str:
        """Base URL of the Shopper APIs for this tenant."""
        return f"https://{self.short_code}.api.commercecloud.salesforce.com"

    @property
    def ocapi_base_url(self) -> str:
        """Base URL of the legacy Open Commerce data API."""
        domain = self.sandbox_domain
        if domain and not domain.startswith("https://"):
            domain = f"https://{domain}"
        return f"{domain}{self.ocapi_data_endpoint}"

    @property
    def credentials_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


class Settings:
    """Application settings loaded from environment variables."""

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Redis / cache settings
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    CACHE_KEY_PREFIX: str = os.getenv("CACHE_KEY_PREFIX", "storefront:cache:")

    # Commerce backend
    SFCC_CLIENT_ID: str = os.getenv("SFCC_CLIENT_ID", "")
    SFCC_SECRET: str = os.getenv("SFCC_SECRET", "")
    SFCC_ORGANIZATION_ID: str = os.getenv("SFCC_ORGANIZATION_ID", "")
    SFCC_SHORT_CODE: str = os.getenv("SFCC_SHORT_CODE", "")
    SFCC_SITE_ID: str = os.getenv("SFCC_SITE_ID", "")
    SFCC_SANDBOX_DOMAIN: str = os.getenv("SFCC_SANDBOX_DOMAIN", "")
    SFCC_OPENCOMMERCE_DATA_API_ENDPOINT: str = os.getenv(
        "SFCC_OPENCOMMERCE_DATA_API_ENDPOINT",
        "",
    )
    SFCC_ACCOUNT_MANAGER_URL: str = os.getenv(
        "SFCC_ACCOUNT_MANAGER_URL",
        DEFAULT_ACCOUNT_MANAGER_URL,
    )
    SFCC_AUTH_MODE: str = os.getenv("SFCC_AUTH_MODE", "guest")
    SFCC_STORE_CATALOG_IDS: str = os.getenv(
        "SFCC_STORE_CATALOG_IDS",
        DEFAULT_STORE_CATALOG_IDS,
    )
    SFCC_REQUEST_TIMEOUT: float = float(os.getenv("SFCC_REQUEST_TIMEOUT", "30"))
    SFCC_TOKEN_CACHE_ENABLED: bool = (
        os.getenv("SFCC_TOKEN_CACHE_ENABLED", "true").lower() == "true"
    )

    # Webhook
    SFCC_REVALIDATION_SECRET: str | None = os.getenv("SFCC_REVALIDATION_SECRET")

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.
        """
        return self.ENVIRONMENT.lower() == "production"

    @property
    def store_catalog_ids(self) -> tuple[str, ...]:
        """Allow-list of category ids surfaced as collections."""
        return tuple(
            part.strip() for part in self.SFCC_STORE_CATALOG_IDS.split(",") if part.strip()
        )

    def commerce_config(self) -> CommerceConfig:
        """Build the immutable backend configuration from the environment."""
        return CommerceConfig(
            client_id=self.SFCC_CLIENT_ID,
            client_secret=self.SFCC_SECRET,
            organization_id=self.SFCC_ORGANIZATION_ID,
            short_code=self.SFCC_SHORT_CODE,
            site_id=self.SFCC_SITE_ID,
            sandbox_domain=self.SFCC_SANDBOX_DOMAIN,
            ocapi_data_endpoint=self.SFCC_OPENCOMMERCE_DATA_API_ENDPOINT,
            account_manager_url=self.SFCC_ACCOUNT_MANAGER_URL,
            auth_mode=self.SFCC_AUTH_MODE,
            catalog_ids=self.store_catalog_ids,
            request_timeout=self.SFCC_REQUEST_TIMEOUT,
            token_cache_enabled=self.SFCC_TOKEN_CACHE_ENABLED,
        )

    def __init__(self):
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        logging.basicConfig(level=self.log_level)
        self.logger = logging.getLogger(__name__)

        self.logger.debug(
            f"Config initialized with environment={self.ENVIRONMENT}, "
            f"log_level={self.log_level}"
        )


# Create a global settings instance for import
settings = Settings()
