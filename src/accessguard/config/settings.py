"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings

from accessguard.options import RFC3339_MICRO


class Settings(BaseSettings):
    """accessguard configuration loaded from environment variables."""

    # Application
    app_name: str = "accessguard"
    app_version: str = "0.1.0"

    # Demo server
    api_host: str = "127.0.0.1"
    api_port: int = 8080

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json, console

    # Middleware defaults
    time_format: str = RFC3339_MICRO
    utc: bool = False
    stack: bool = False
    skip_paths: list[str] = []

    model_config = {
        "env_prefix": "ACCESSGUARD_",
        "env_file": ".env",
        "extra": "ignore",
    }


settings = Settings()
