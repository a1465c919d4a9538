from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Transfer configuration loaded from environment variables or `.env`.

    The producer and consumer receive an explicit instance; nothing in the
    transfer core reads the environment on its own.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    api_endpoint: str = "https://api-go.helix.tools"
    http_timeout_seconds: int = 30

    aws_region: str = "us-east-1"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""

    customer_id: str = ""
    bucket_name: str = ""
    presign_expiry_seconds: int = Field(default=3600, gt=0)

    key_wrapper_provider: str = "kms"
    kms_key_id: str = ""
    local_master_key: str = ""

    compression_level: int = Field(default=6, ge=1, le=9)
    schema_sample_limit: int = Field(default=1000, ge=0)
    large_file_threshold_bytes: int = Field(default=100 * 1024 * 1024, gt=0)
