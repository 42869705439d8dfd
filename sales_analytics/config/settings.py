"""
Sales Analytics Reporting
Centralized Configuration Management

Pydantic settings with environment variable support for the warehouse
sources, report output and logging.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WarehouseSettings(BaseSettings):
    """Star-schema source configuration"""
    
    model_config = SettingsConfigDict(env_prefix="WAREHOUSE_")
    
    source_path: str = Field(default="./data/warehouse", description="Directory holding the extracts")
    file_format: str = Field(default="csv", description="Extract format: csv or parquet")
    sales_file: str = Field(default="fact_sales", description="Sales fact extract base name")
    customers_file: str = Field(default="dim_customers", description="Customer dimension base name")
    products_file: str = Field(default="dim_products", description="Product dimension base name")
    database_url: Optional[str] = Field(default=None, description="SQLAlchemy URL of the warehouse")
    echo: bool = Field(default=False, description="Echo SQL queries")
    
    @field_validator("file_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate extract format"""
        allowed = ["csv", "parquet"]
        if v.lower() not in allowed:
            raise ValueError(f"File format must be one of: {allowed}")
        return v.lower()


class ReportSettings(BaseSettings):
    """Report computation and output configuration"""
    
    model_config = SettingsConfigDict(env_prefix="REPORT_")
    
    output_path: Optional[str] = Field(default=None, description="Directory reports are written to")
    output_format: str = Field(default="parquet", description="Output format: parquet or csv")
    price_precision: int = Field(default=1, ge=0, description="Decimals kept on avg_selling_price")
    percentage_precision: int = Field(default=2, ge=0, description="Decimals kept on percentages")
    validate_inputs: bool = Field(default=True, description="Run input validation before reports")
    strict_validation: bool = Field(default=False, description="Abort the run on failed validation")
    
    @field_validator("output_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate output format"""
        allowed = ["parquet", "csv"]
        if v.lower() not in allowed:
            raise ValueError(f"Output format must be one of: {allowed}")
        return v.lower()


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""
    
    model_config = SettingsConfigDict(env_prefix="")
    
    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings
    
    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    # Application
    app_name: str = Field(default="sales-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")
    
    # Version
    version: str = Field(default="1.0.0", description="Application version")
    
    # Subsystem configurations
    warehouse: WarehouseSettings = Field(default_factory=WarehouseSettings)
    reports: ReportSettings = Field(default_factory=ReportSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    
    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()
    
    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.
    
    Uses LRU cache to ensure settings are only loaded once.
    
    Returns:
        Settings: Application settings instance
    """
    return Settings()
