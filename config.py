"""
Centralized configuration for the video share backend.

Loads all environment variables and provides typed configuration objects.
No hardcoded secrets - all sensitive values must come from environment.
"""

import os
from typing import Optional
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


SUPPORTED_BACKENDS = ("sql", "mongo")
SUPPORTED_AUTH_MODES = ("dev", "header")


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration for the relational backend."""

    # Support direct DATABASE_URL or individual components
    database_url: Optional[str] = field(
        default_factory=lambda: os.getenv("DATABASE_URL"))
    host: str = field(default_factory=lambda: os.getenv(
        "POSTGRES_HOST", "localhost"))
    port: int = field(default_factory=lambda: int(
        os.getenv("POSTGRES_PORT", "5432")))
    user: str = field(
        default_factory=lambda: os.getenv("POSTGRES_USER", "videoshare"))
    password: Optional[str] = field(
        default_factory=lambda: os.getenv("POSTGRES_PASSWORD"))
    database: str = field(default_factory=lambda: os.getenv(
        "POSTGRES_DB", "videoshare"))
    echo: bool = field(default_factory=lambda: os.getenv(
        "DB_ECHO", "false").lower() == "true")

    @property
    def url(self) -> str:
        """
        Build the SQLAlchemy connection URL.

        Prioritizes DATABASE_URL if set, otherwise builds from components.
        """
        if self.database_url:
            url = self.database_url
            # Normalize postgres:// to postgresql://
            if url.startswith("postgres://"):
                return url.replace("postgres://", "postgresql://", 1)
            return url

        auth = f"{self.user}:{self.password}@" if self.password else f"{self.user}@"
        return f"postgresql://{auth}{self.host}:{self.port}/{self.database}"


@dataclass
class MongoConfig:
    """MongoDB connection configuration for the document backend."""

    url: str = field(default_factory=lambda: os.getenv(
        "MONGODB_URL", "mongodb://localhost:27017/?replicaSet=rs0"))
    database: str = field(default_factory=lambda: os.getenv(
        "MONGODB_DB", "videoshare"))
    timeout_ms: int = field(default_factory=lambda: int(
        os.getenv("MONGODB_TIMEOUT_MS", "5000")))


@dataclass
class StorageConfig:
    """Which persistence backend the server builds at startup."""

    backend: str = field(default_factory=lambda: os.getenv(
        "STORAGE_BACKEND", "sql").lower())
    auto_create: bool = field(default_factory=lambda: os.getenv(
        "DB_AUTO_CREATE", "true").lower() == "true")


@dataclass
class AuthConfig:
    """
    Principal resolution settings.

    "dev" resolves every request to a fixed development user;
    "header" trusts a user id forwarded by an upstream gateway.
    """

    mode: str = field(default_factory=lambda: os.getenv(
        "AUTH_MODE", "dev").lower())
    header_name: str = field(default_factory=lambda: os.getenv(
        "AUTH_HEADER", "X-User-Id"))
    dev_username: str = field(default_factory=lambda: os.getenv(
        "DEV_USERNAME", "john_doe"))
    dev_avatar_url: str = field(default_factory=lambda: os.getenv(
        "DEV_AVATAR_URL", "https://picsum.photos/150/150?random=1"))


@dataclass
class ServerConfig:
    """Server runtime configuration."""

    host: str = field(default_factory=lambda: os.getenv(
        "SERVER_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(
        os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv(
        "DEBUG", "false").lower() == "true")
    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    cors_origins: list[str] = field(
        default_factory=lambda: os.getenv("CORS_ORIGIN", "*").split(",")
    )


@dataclass
class Config:
    """
    Root configuration object aggregating all config sections.

    Usage:
        config = Config()
        database_url = config.postgres.url
        backend = config.storage.backend
    """

    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    mongo: MongoConfig = field(default_factory=MongoConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of warnings/errors.

        Returns:
            List of validation messages (empty if all valid)
        """
        warnings = []

        if self.storage.backend not in SUPPORTED_BACKENDS:
            warnings.append(
                f"Unknown STORAGE_BACKEND '{self.storage.backend}' "
                f"(expected one of {', '.join(SUPPORTED_BACKENDS)})")

        if self.auth.mode not in SUPPORTED_AUTH_MODES:
            warnings.append(
                f"Unknown AUTH_MODE '{self.auth.mode}' "
                f"(expected one of {', '.join(SUPPORTED_AUTH_MODES)})")

        if self.auth.mode == "dev" and not self.server.debug:
            warnings.append(
                "AUTH_MODE=dev resolves every request to a fixed user - do not use in production")

        if (
            self.storage.backend == "sql"
            and not self.postgres.database_url
            and not self.postgres.password
            and not self.server.debug
        ):
            warnings.append("POSTGRES_PASSWORD not set in production mode")

        return warnings


# Global config instance - import and use this
config = Config()
