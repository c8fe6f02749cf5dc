"""
Configuration for Conflict Service
==================================

Environment variables:
- LOG_LEVEL: Logging level (default: INFO)
- MAX_MATCHES: Max matches returned per analysis (default: 10)
- MAX_DOCUMENTS_PER_REQUEST: Max documents accepted per analysis (default: 50)
- MAX_UPLOAD_BYTES: Max size of a single uploaded file (default: 5 MB)
- COST_PER_DOCUMENT: Billing per uploaded document (default: 2.50)
- COST_PER_REPORT: Billing per generated report (default: 5.00)
- CORS_ALLOW_ORIGINS: Comma separated list of allowed origins
"""

from typing import List
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # Detection settings
    max_matches: int = 10
    max_documents_per_request: int = 50

    # Upload limits
    max_upload_bytes: int = 5 * 1024 * 1024

    # Billing
    cost_per_document: float = 2.50
    cost_per_report: float = 5.00

    # HTTP
    cors_allow_origins: str = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:8000"

    # Logging
    log_level: str = "INFO"

    # Service info
    service_version: str = "1.0.0"

    class Config:
        env_prefix = ""
        case_sensitive = False
        env_file = ".env"
        env_file_encoding = "utf-8"

    def parsed_cors_origins(self) -> List[str]:
        """Split CORS_ALLOW_ORIGINS into a clean list"""
        origins: List[str] = []
        for item in self.cors_allow_origins.split(","):
            origin = item.strip().strip('"').strip("'").rstrip("/")
            if origin:
                origins.append(origin)
        return origins

    def validate_config(self) -> List[str]:
        """Validate configuration, return list of warnings"""
        warnings = []

        if self.max_matches < 1:
            warnings.append("MAX_MATCHES < 1, analysis will never return matches")

        if self.cost_per_document < 0 or self.cost_per_report < 0:
            warnings.append("Negative billing rates configured")

        return warnings


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
