"""
Armature - Configuration

Centralized configuration for the container bootstrap.
Uses environment variables with sensible defaults.
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from observability import setup_observability
from observability.logging import LoggingConfig
from observability.tracing import TracingConfig

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Deployment environments."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class ContainerConfig:
    """Behaviour of the component factory and the bootstrap pipeline."""
    allow_descriptor_overriding: bool = field(
        default_factory=lambda: _env_flag("ARMATURE_ALLOW_OVERRIDING", "true")
    )
    # Log components created before every lifecycle hook is registered
    report_early_components: bool = field(
        default_factory=lambda: _env_flag("ARMATURE_REPORT_EARLY_COMPONENTS", "true")
    )
    preinstantiate_singletons: bool = field(
        default_factory=lambda: _env_flag("ARMATURE_PREINSTANTIATE", "true")
    )


@dataclass
class Config:
    """Main configuration class combining all sub-configs."""
    env: Environment = field(
        default_factory=lambda: Environment(os.getenv("ARMATURE_ENVIRONMENT", "development"))
    )
    container: ContainerConfig = field(default_factory=ContainerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == Environment.PRODUCTION

    def setup_observability(self) -> None:
        """Apply the logging and tracing sections, replacing any earlier setup."""
        setup_observability(logging_config=self.logging, tracing_config=self.tracing)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for diagnostics."""
        return {
            "env": self.env.value,
            "container": {
                "allow_descriptor_overriding": self.container.allow_descriptor_overriding,
                "report_early_components": self.container.report_early_components,
                "preinstantiate_singletons": self.container.preinstantiate_singletons,
            },
            "logging": {
                "level": self.logging.level,
                "json_format": self.logging.json_format,
            },
            "tracing": {
                "enabled": self.tracing.enabled,
                "console_export": self.tracing.console_export,
            },
        }


# Singleton configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create configuration singleton."""
    global _config
    if _config is None:
        _config = Config()
    return _config
