from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, PostgresDsn, RedisDsn, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CustomSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


class AppSettings(CustomSettings):
    ENVIRONMENT: Literal["local", "dev", "prod", "test"] = Field(default="local")
    LOG_LEVEL: str = Field(default="INFO")
    JSON_LOGS: bool = Field(default=True)
    PORT: int = Field(default=3000)
    FRONTEND_URL: str = Field(default="http://localhost:3000/")
    AUTH_FAILURE_URL: str = Field(default="http://localhost:3000/?login=failed")
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    # Optional directory of static frontend files mounted at "/"
    STATIC_DIR: Optional[str] = Field(default=None)


class PgDbSettings(CustomSettings):
    POSTGRES_ENGINE: str = Field(default="postgresql+asyncpg")
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: SecretStr = Field(default="postgres")
    POSTGRES_DB: str = Field(default="convai_gateway")
    POSTGRES_HOST: str = Field(default="localhost")
    POSTGRES_PORT: int = Field(default=5432)
    DATABASE_URL: PostgresDsn | str = Field(default="")
    DATABASE_AUTO_CREATE: bool = Field(default=False)

    @model_validator(mode="before")
    def validate_postgres_dsn(cls, data: dict):
        if isinstance(data, dict) and not data.get("DATABASE_URL"):
            password = data.get("POSTGRES_PASSWORD", "postgres")
            if isinstance(password, SecretStr):
                password = password.get_secret_value()
            _built_uri = PostgresDsn.build(
                scheme=data.get("POSTGRES_ENGINE", "postgresql+asyncpg"),
                username=data.get("POSTGRES_USER", "postgres"),
                password=password,
                host=data.get("POSTGRES_HOST", "localhost"),
                port=int(data.get("POSTGRES_PORT", 5432)),
                path=data.get("POSTGRES_DB", "convai_gateway"),
            ).unicode_string()
            data["DATABASE_URL"] = _built_uri
        return data


class RedisSettings(CustomSettings):
    REDIS_HOST: str = Field(default="localhost")
    REDIS_PORT: int = Field(default=6379)
    REDIS_DB: int = Field(default=0)
    REDIS_PASSWORD: SecretStr = Field(default="")
    REDIS_URL: RedisDsn | str = Field(default="")

    @model_validator(mode="before")
    def validate_redis_url(cls, data: dict):
        if isinstance(data, dict) and not data.get("REDIS_URL"):
            password = data.get("REDIS_PASSWORD", "")
            if isinstance(password, SecretStr):
                password = password.get_secret_value()
            _built_uri = RedisDsn.build(
                scheme="redis",
                host=data.get("REDIS_HOST", "localhost"),
                port=int(data.get("REDIS_PORT", 6379)),
                path=f"/{data.get('REDIS_DB', 0)}",
                password=password if password else None,
            ).unicode_string()
            data["REDIS_URL"] = _built_uri
        return data


class SessionSettings(CustomSettings):
    """Server-side session configuration.

    Env vars:
    - SESSION_BACKEND: "redis" in deployments, "memory" for a single local process
    - SESSION_TTL_SECONDS
    - SESSION_SLIDING: renew the TTL on every successful resolve
    - SESSION_COOKIE_NAME / SESSION_COOKIE_SECURE / SESSION_COOKIE_SAMESITE
    """

    SESSION_BACKEND: Literal["redis", "memory"] = Field(default="redis")
    SESSION_TTL_SECONDS: int = Field(default=7 * 24 * 60 * 60, ge=60)
    SESSION_SLIDING: bool = Field(default=False)
    SESSION_COOKIE_NAME: str = Field(default="convai_session")
    SESSION_COOKIE_SECURE: bool = Field(default=True)
    SESSION_COOKIE_SAMESITE: Literal["lax", "strict", "none"] = Field(default="lax")
    OAUTH_STATE_COOKIE_NAME: str = Field(default="oauth_state")
    OAUTH_STATE_TTL_SECONDS: int = Field(default=600)

    @model_validator(mode="after")
    def validate_cross_site_cookie(self):
        # Browsers drop SameSite=None cookies that are not Secure
        if self.SESSION_COOKIE_SAMESITE == "none" and not self.SESSION_COOKIE_SECURE:
            raise ValueError("SESSION_COOKIE_SAMESITE=none requires SESSION_COOKIE_SECURE")
        return self


class GoogleSettings(CustomSettings):
    GOOGLE_CLIENT_ID: str = Field(default="")
    GOOGLE_CLIENT_SECRET: SecretStr = Field(default="")
    GOOGLE_REDIRECT_URI: str = Field(default="http://localhost:3000/auth/callback")
    GOOGLE_AUTH_URL: str = Field(default="https://accounts.google.com/o/oauth2/v2/auth")
    GOOGLE_TOKEN_URL: str = Field(default="https://oauth2.googleapis.com/token")
    GOOGLE_USERINFO_URL: str = Field(
        default="https://openidconnect.googleapis.com/v1/userinfo"
    )
    GOOGLE_TIMEOUT_SECONDS: float = Field(default=10.0)


class ConvaiSettings(CustomSettings):
    """Configuration for the ElevenLabs Conversational AI API.

    Env vars:
    - ELEVENLABS_API_KEY
    - CONVAI_BASE_URL
    - CONVAI_TIMEOUT_SECONDS
    """

    ELEVENLABS_API_KEY: SecretStr = Field(default="")
    CONVAI_BASE_URL: str = Field(default="https://api.elevenlabs.io/v1/convai")
    CONVAI_TIMEOUT_SECONDS: float = Field(default=15.0)


class Settings(BaseModel):
    APP: AppSettings = Field(default_factory=AppSettings)
    DATABASE: PgDbSettings = Field(default_factory=PgDbSettings)
    REDIS: RedisSettings = Field(default_factory=RedisSettings)
    SESSION: SessionSettings = Field(default_factory=SessionSettings)
    GOOGLE: GoogleSettings = Field(default_factory=GoogleSettings)
    CONVAI: ConvaiSettings = Field(default_factory=ConvaiSettings)

    def missing_credentials(self) -> List[str]:
        """Names of required credentials that are not configured."""
        missing = []
        if not self.CONVAI.ELEVENLABS_API_KEY.get_secret_value():
            missing.append("ELEVENLABS_API_KEY")
        if not self.GOOGLE.GOOGLE_CLIENT_ID:
            missing.append("GOOGLE_CLIENT_ID")
        if not self.GOOGLE.GOOGLE_CLIENT_SECRET.get_secret_value():
            missing.append("GOOGLE_CLIENT_SECRET")
        return missing


@lru_cache
def get_settings() -> Settings:
    return Settings()


SETTINGS = get_settings()
