"""Application configuration using Pydantic Settings."""
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_name: str = "Asistencia Universitaria"
    debug: bool = False
    log_level: str = "INFO"
    timezone: str = ""  # IANA name used for "today"; empty means server local time

    # MongoDB
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "asistencia"
    mongodb_transactions: bool = True  # requires a replica set

    # Identity provider tokens (verification only)
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_audience: str = ""
    jwt_issuer: str = ""
    auto_provision_users: bool = True

    # Seeded administrator
    admin_email: str = "admin@asistencia.edu"
    admin_display_name: str = "Administrador"

    # AWS S3
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_region: str = "us-east-1"
    s3_bucket_justifications: str = "asistencia-justifications"
    s3_public_base_url: str = ""  # optional CDN/base URL; defaults to the bucket URL
    max_justification_file_mb: int = 5

    # Reporting
    report_result_cap: int = 100
    snapshot_ttl_seconds: int = 300

    # CORS (comma-separated origins)
    cors_origins: str = "http://localhost:5173"

    @model_validator(mode="after")
    def _validate_production_secrets(self):
        if not self.debug:
            if self.jwt_secret_key in ("change-me-in-production", ""):
                raise ValueError(
                    "JWT_SECRET_KEY must be set to the identity provider's signing secret "
                    "when DEBUG is not enabled."
                )
        return self


settings = Settings()
