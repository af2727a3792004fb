"""
Configuration Management for Budget Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The pure calculation modules never read settings; only the
editing helpers, the flows and the storage backends do.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets document store configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )
    
    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )
    
    # One worksheet holds every collection as JSON documents
    documents_sheet_name: str = Field(
        default="Documents",
        description="Name of the sheet holding budget documents"
    )
    
    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Only warn on a missing key file; the in-memory backend never reads it."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Budget app behaviour: storage backend, default subcategories and
    how far into the future a transaction date may fall.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for structured logs"
    )
    
    # Storage
    storage_backend: str = Field(
        default="memory",
        pattern="^(memory|google_sheets)$",
        description="Which document store backs the flows"
    )
    
    # Export
    export_filename_prefix: str = Field(
        default="ExportedFinancialData",
        min_length=1,
        description="Prefix of the yearly export archive name"
    )
    
    # New month skeleton
    default_category_name: str = Field(
        default="Category",
        min_length=1,
        description="Name of the category a fresh month starts with"
    )
    default_subcategory_count: int = Field(
        default=5,
        ge=0,
        le=50,
        description="How many placeholder subcategories a fresh month gets"
    )
    
    # Transaction checks
    future_date_tolerance_days: int = Field(
        default=31,
        ge=0,
        description="How many days in the future a transaction date can be before a warning"
    )
    
    @property
    def default_subcategory_names(self) -> list[str]:
        """Placeholder subcategory names for a fresh month."""
        return [f"Subcategory{i}" for i in range(1, self.default_subcategory_count + 1)]


class Settings(BaseSettings):
    """
    Budget tracker configuration.
    
    Sheets access and app behaviour are separate groups so a guest
    session can read app settings without Google credentials.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    # Note: These are loaded lazily to allow partial configuration
    
    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()
    
    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Process-wide settings, read from the environment on first use.
    
    Call get_settings.cache_clear() after changing the environment.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Report which settings groups load cleanly, as {group: ok}.
    
    A failing group also reports its message under "<group>_error";
    the Streamlit settings page shows both.
    """
    results = {}
    
    settings = get_settings()
    
    try:
        _ = settings.google_sheets
        results["google_sheets"] = True
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)
    
    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)
    
    return results
