from pathlib import Path
from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

import os

# Explicitly load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HEXMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # Map Generation Configuration
    default_map_width: int = Field(default=36, description="Default map width in tiles")
    max_map_width: int = Field(default=128, description="Max allowed map width")
    generation_attempts: int = Field(
        default=3, description="Seeds tried before a generation request fails"
    )
    max_stored_maps: int = Field(
        default=100, description="Maps kept by the API before the oldest are dropped"
    )
    object_config_file: str = Field(
        default=str(BASE_DIR / "data" / "objects.json"),
        description="Object catalog JSON file",
    )


# Instantiate singleton settings object
settings = Settings()
