"""Library configuration loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Timestamp component
    epoch: int = 0  # Unix seconds
    random_discriminator: bool = True

    # Demo entry point
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "AUID_", "extra": "ignore"}


settings = Settings()
