"""
Configuration module for the Enterprise Reconciler.

Loads configuration from environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_API_URL = "https://enterprise.cloud.ibm.com/v1"
DEFAULT_IAM_URL = "https://iam.cloud.ibm.com/identity/token"


@dataclass
class EnterpriseAPIConfig:
    """Enterprise Management API connection configuration."""

    api_base_url: str = DEFAULT_API_URL
    iam_url: str = DEFAULT_IAM_URL
    api_key: str = field(default="", repr=False)  # Never log credentials
    bearer_token: str = field(default="", repr=False)
    request_timeout: int = 60  # seconds

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(
            api_base_url=os.getenv("ENTERPRISE_API_URL", DEFAULT_API_URL),
            iam_url=os.getenv("IAM_TOKEN_URL", DEFAULT_IAM_URL),
            api_key=os.getenv("IBMCLOUD_API_KEY", ""),
            bearer_token=os.getenv("IBMCLOUD_IAM_TOKEN", ""),
            request_timeout=int(os.getenv("ENTERPRISE_REQUEST_TIMEOUT", "60")),
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key or self.bearer_token)


@dataclass
class TimeoutConfig:
    """Per-operation budgets enforced by the driving engine."""

    create: int = 600  # 10 minutes
    update: int = 600
    delete: int = 600

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(
            create=int(os.getenv("ENTERPRISE_CREATE_TIMEOUT", "600")),
            update=int(os.getenv("ENTERPRISE_UPDATE_TIMEOUT", "600")),
            delete=int(os.getenv("ENTERPRISE_DELETE_TIMEOUT", "600")),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = "INFO"

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(log_level=os.getenv("LOG_LEVEL", "INFO").upper())


@dataclass
class Config:
    """Main configuration object."""

    api: EnterpriseAPIConfig
    timeouts: TimeoutConfig
    logging: LoggingConfig

    @classmethod
    def from_env(cls):
        """Load all configuration from environment variables."""
        return cls(
            api=EnterpriseAPIConfig.from_env(),
            timeouts=TimeoutConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def default(cls):
        """Return default configuration."""
        return cls(
            api=EnterpriseAPIConfig(),
            timeouts=TimeoutConfig(),
            logging=LoggingConfig(),
        )


# Global config instance
config: Optional[Config] = None


def load_config() -> Config:
    """Load configuration (singleton pattern)."""
    global config
    if config is None:
        config = Config.from_env()
    return config


def get_config() -> Config:
    """Get the current configuration."""
    if config is None:
        return load_config()
    return config


def reset_config() -> None:
    """Reset configuration (mainly for testing)."""
    global config
    config = None
