"""
Application settings and configuration.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings
from dotenv import find_dotenv
from pydantic import ConfigDict, PositiveInt

from shared.utils.exceptions import InvalidConfigurationException

# Find .env file automatically
ENV_FILE = find_dotenv(usecwd=True) or ".env"

# Connection string keys, in the order they are written out
STORAGE_SETTING_KEYS = {
    "DefaultEndpointsProtocol": "default_endpoints_protocol",
    "AccountName": "account_name",
    "AccountKey": "account_key",
    "BlobEndpoint": "blob_endpoint",
    "TableEndpoint": "table_endpoint",
    "QueueEndpoint": "queue_endpoint",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_title: str = "Person Table Store Demo"
    environment: str = "development"

    #Logging Configuration
    log_level: str = "INFO"
    log_file: str = "logs/table-store-demo.log"
    log_to_console: bool = True

    repository_type: str = "azure_table_storage"  # Options: in_memory, azure_table_storage

    # Azure Storage account (connection string parts)
    default_endpoints_protocol: str = "https"
    account_name: str = ""
    account_key: str = ""
    blob_endpoint: str = ""
    table_endpoint: str = ""
    queue_endpoint: str = ""

    # Azure Storage (Tables)
    persons_table_name: str = "persons"
    scan_page_size: Optional[PositiveInt] = None

    model_config = ConfigDict(
        str_max_length=200,
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
        )

    def missing_storage_settings(self) -> list[str]:
        """Return the connection string keys that have no value."""
        return [key for key, attr in STORAGE_SETTING_KEYS.items() if not getattr(self, attr)]

    @property
    def storage_connection_string(self) -> str:
        """Build the storage connection string from the account settings."""
        return "".join(
            f"{key}={getattr(self, attr)};" for key, attr in STORAGE_SETTING_KEYS.items()
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings instance
    """
    return Settings()

settings = get_settings()


def validate_storage_settings(app_settings: Settings) -> None:
    """
    Check that every storage account setting has a value.

    Raises:
        InvalidConfigurationException: If any required setting is empty
    """
    missing = app_settings.missing_storage_settings()
    if missing:
        raise InvalidConfigurationException(
            f"Invalid storage configuration, missing values for: {', '.join(missing)}"
        )
