from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Carbon intensity pipeline configuration."""

    # Carbon Intensity API
    carbon_api_base_url: str = Field(default="https://api.carbonintensity.org.uk")
    intensity_path: str = Field(default="/intensity/{start}/{end}")
    generation_path: str = Field(default="/generation/{start}/{end}")
    regional_path: str = Field(default="/regional/intensity/{start}/{end}")
    request_timeout_seconds: float = Field(default=30.0)

    # Batch
    rate_limit_delay: float = Field(default=0.5)  # Seconds between windows

    # Service
    output_dir: str = Field(default="data/raw")
    log_level: str = Field(default="INFO")

    model_config = {"env_file": "settings.env", "env_file_encoding": "utf-8"}


settings = Settings()
