"""
Worker configuration management.
"""

from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Worker settings loaded from environment variables."""

    # GitHub
    github_api_url: str = "https://api.github.com"

    # HTTP transport
    http_timeout_seconds: Optional[float] = 30.0  # None disables the timeout
    http_max_attempts: int = 1
    http_retry_base_delay: float = 1.0

    # Commit enumeration placeholder
    placeholder_commits: List[str] = ["commit1", "commit2"]

    # Application
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
