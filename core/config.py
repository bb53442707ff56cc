"""
Application Configuration
Add constants, secrets, env variables here
"""

from functools import lru_cache
import os
import json
from pathlib import Path
from pydantic import computed_field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv

# Load .env file into os.environ so os.getenv() works correctly
# This must happen before Settings class is instantiated
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_secret(secret_name: str, region_name: str) -> dict:
    """
    Retrieve secrets from AWS Secrets Manager

    Args:
        secret_name: Name of the secret in Secrets Manager
        region_name: AWS region where secret is stored

    Returns:
        dict: Parsed secret value

    Raises:
        ClientError: If secret cannot be retrieved
    """
    session = boto3.session.Session()
    client = session.client(
        service_name='secretsmanager',
        region_name=region_name
    )
    get_secret_value_response = client.get_secret_value(
        SecretId=secret_name
    )
    secret = get_secret_value_response['SecretString']
    return json.loads(
        secret.replace('\n', '')
    )


# Define settings class for univeral access
class Settings(BaseSettings):
    # CORS origin of the admin client, if any
    CLIENT_ORIGIN: str | None = None

    # "production" hides stack traces in 500 responses
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    # Uploaded abstracts live in <PUBLIC_DIR>/uploads/abstracts/<folder>/<file>
    PUBLIC_DIR: Path = Path("public")

    # Resolver switches
    ABSTRACT_EXTENSION_FALLBACK: bool = True
    ABSTRACT_LIST_AVAILABLE_FILES: bool = True

    # Cache for AWS Secrets Manager to avoid multiple API calls
    # Note: Must use PrivateAttr for Pydantic v2 private attributes
    _secret_cache: dict | None = PrivateAttr(default=None)

    def _get_config_value(
        self,
        env_var_name: str,
        secret_key_name: str | None = None,
        default: str | None = None
    ) -> str | None:
        """
        Get configuration value from environment variable or AWS Secrets Manager (with caching).

        Args:
            env_var_name: Environment variable name to check first
            secret_key_name: Key name in AWS Secrets (defaults to env_var_name if not provided)
            default: Default value to return if not found in env or secrets

        Returns:
            Configuration value, or default value if not found
        """
        # 1. Check environment variable first
        env_value = os.getenv(env_var_name)
        if env_value:
            return env_value

        # 2. Try AWS Secrets Manager, only when a secret is configured
        env_secret = os.getenv('ENV_SECRETS')
        if not env_secret:
            return default

        if secret_key_name is None:
            secret_key_name = env_var_name

        try:
            if self._secret_cache is None:
                self._secret_cache = get_secret(env_secret, os.getenv("AWS_REGION", 'us-east-1'))
        except (BotoCoreError, ClientError):
            # Fall through to the default, the lifespan log shows what was used
            self._secret_cache = {}

        secret_value = self._secret_cache.get(secret_key_name)
        if secret_value is not None:
            return secret_value

        # 3. Return default value if provided
        return default

    # SQLAlchemy - Create db connection string
    @computed_field
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Build database URI from env or secrets, defaults to sqlite://"""
        return self._get_config_value("SQLALCHEMY_DATABASE_URI", default="sqlite://")

    @property
    def UPLOADS_DIR(self) -> Path:
        return self.PUBLIC_DIR / "uploads"

    @property
    def ABSTRACT_UPLOADS_DIR(self) -> Path:
        return self.UPLOADS_DIR / "abstracts"

    @property
    def INCLUDE_ERROR_TRACE(self) -> bool:
        """Stack traces are only returned to callers outside production"""
        return self.ENVIRONMENT.lower() != "production"

    # Read environment variables from .env file, if it exists
    # extra='ignore' prevents validation errors from extra env vars
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Export settings
@lru_cache
def get_settings() -> Settings:
    """
    Get settings instance, cached for performance
    """
    return Settings()
