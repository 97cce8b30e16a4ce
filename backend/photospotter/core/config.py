"""Application configuration using Pydantic Settings"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Optional
import secrets


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str = "sqlite:///./data/photospotter.db"

    # Security
    JWT_SECRET_KEY: str = secrets.token_urlsafe(32)  # Auto-generate if not set
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 24

    # Application
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # API
    API_V1_PREFIX: str = "/api/v1"
    # Stored as string to avoid pydantic-settings JSON parsing; use cors_origins_list property
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8000"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS from comma-separated string"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    # AWS
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: Optional[str] = None  # Falls back to the default boto3 credential chain
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    REKOG_COLLECTION: str = "photospotter-faces"
    S3_BUCKET_ORIGINALS: str = "photospotter-originals"
    CDN_DOMAIN: Optional[str] = None  # Public host serving the originals bucket

    # Face directory search
    FACE_MATCH_THRESHOLD: float = 70.0
    FACE_SEARCH_MAX_FACES: int = 100
    PROBE_MATCH_THRESHOLD: float = 70.0
    PROBE_SEARCH_MAX_FACES: int = 5
    INDEX_QUALITY_FILTER: str = "AUTO"

    @field_validator('INDEX_QUALITY_FILTER', mode='after')
    @classmethod
    def validate_quality_filter(cls, v: str) -> str:
        """Validate Rekognition quality filter."""
        valid_filters = ['NONE', 'AUTO', 'LOW', 'MEDIUM', 'HIGH']
        v = v.upper()
        if v not in valid_filters:
            raise ValueError(f"INDEX_QUALITY_FILTER must be one of {valid_filters}")
        return v

    # Image normalization (Rekognition accepts at most 5MB of raw bytes)
    IMAGE_MAX_DIMENSION: int = 1024
    IMAGE_JPEG_QUALITY: int = 90
    IMAGE_MAX_BYTES: int = 5 * 1024 * 1024

    # Ingestion retry policy
    INGESTION_MAX_ATTEMPTS: int = 3
    INGESTION_RETRY_DELAY_SECONDS: float = 1.0
    INGESTION_BACKOFF: str = "fixed"
    INDEX_SETTLE_DELAY_SECONDS: float = 1.0

    @field_validator('INGESTION_BACKOFF', mode='after')
    @classmethod
    def validate_backoff(cls, v: str) -> str:
        """Validate ingestion backoff strategy."""
        valid_strategies = ['fixed', 'exponential']
        if v not in valid_strategies:
            raise ValueError(f"INGESTION_BACKOFF must be one of {valid_strategies}")
        return v

    # External calls
    EXTERNAL_CALL_TIMEOUT_SECONDS: float = 15.0
    MATCH_RESOLVE_BATCH_SIZE: int = 25

    # Organizer ids (comma-separated) allowed to run the global cleanup routes
    ADMIN_ORGANIZER_IDS: str = ""

    @property
    def admin_organizer_ids_list(self) -> List[str]:
        """Parse ADMIN_ORGANIZER_IDS from comma-separated string"""
        return [oid.strip() for oid in self.ADMIN_ORGANIZER_IDS.split(",") if oid.strip()]

    # Rate limiting for probe-image search
    PROBE_SEARCH_RATE_LIMIT: str = "30/minute"

    # Twilio SMS
    SMS_NOTIFICATIONS_ENABLED: bool = False
    TWILIO_ACCOUNT_SID: Optional[str] = None
    TWILIO_AUTH_TOKEN: Optional[str] = None
    TWILIO_PHONE_NUMBER: Optional[str] = None

    @property
    def twilio_ready(self) -> bool:
        """Check if Twilio is properly configured and ready to use."""
        return (
            self.TWILIO_ACCOUNT_SID is not None
            and self.TWILIO_AUTH_TOKEN is not None
            and self.TWILIO_PHONE_NUMBER is not None
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


# Global settings instance
settings = Settings()
