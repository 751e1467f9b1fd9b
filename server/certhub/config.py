from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application configuration settings"""

    # Application
    app_name: str = "CertHub"
    debug: bool = True
    api_version: str = "v1"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Caller identity (resolved upstream, forwarded in this header)
    caller_header: str = "X-Caller-Principal"

    # Principals that are registered as admin on first contact
    bootstrap_admins: str = ""

    @property
    def bootstrap_admin_list(self) -> List[str]:
        """Parse bootstrap admins from comma-separated string"""
        return [p.strip() for p in self.bootstrap_admins.split(",") if p.strip()]

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # Demo content
    seed_demo_data: bool = False
    demo_data_file: str = ""  # empty -> bundled seeds/demo_data.yaml

    # Category lookups
    default_category_limit: int = 10
    max_category_limit: int = 100

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
