from pathlib import Path
from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings

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

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (e.g., plain, json)")

    # Generation Configuration
    default_grid_size: int = Field(default=256, description="Grid resolution used when a request omits it")
    max_grid_size: int = Field(default=2048, description="Largest grid resolution accepted")
    default_gradient_factor: float = Field(default=8.0, description="Slope damping strength")
    default_preset: str = Field(default="default", description="Octave preset used when a request omits octaves")
    offset_mode: str = Field(default="random", description="Per-octave offsets: random or zero")
    row_workers: int = Field(default=1, description="Row bands processed in parallel per octave pass")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Instantiate singleton settings object
settings = Settings()
