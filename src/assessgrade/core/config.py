"""
Configuration Management

Centralized configuration management with YAML file support
and environment variable overrides.
"""

import os
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass, field
import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError

# Load .env file if it exists
load_dotenv()


@dataclass
class JudgeConfig:
    """Semantic judge (Gemini generateContent) settings."""
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-2.5-flash"
    api_key_env: str = "GEMINI_API_KEY"
    timeout_seconds: float = 30.0
    temperature: float = 0.0
    max_output_tokens: int = 512
    requests_per_minute: int = 60
    max_concurrent: int = 4


@dataclass
class GradingConfig:
    """Thresholds and weights used by the scoring policies."""
    correct_threshold: float = 0.8
    group_weight: float = 0.75
    lexical_weight: float = 0.25
    numeric_epsilon: float = 1e-6
    max_feedback_synonyms: int = 3
    blank_marker: str = "___"


@dataclass
class ReportingConfig:
    """Topic classification thresholds (percentages)."""
    strength_threshold: int = 80
    weakness_threshold: int = 60
    min_interval_sample: int = 30


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    console_level: str = "WARNING"  # Separate level for console output
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str = "logs/assessgrade.log"
    max_size: str = "10MB"
    backup_count: int = 5
    json: bool = False


@dataclass
class AppConfig:
    """Main application configuration."""
    name: str = "assessgrade"
    version: str = "1.0.0"
    environment: str = "production"
    debug: bool = False

    judge: JudgeConfig = field(default_factory=JudgeConfig)
    grading: GradingConfig = field(default_factory=GradingConfig)
    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, config_path: Path) -> "AppConfig":
        """Load configuration from YAML file."""
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f) or {}

        if not isinstance(config_data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping: {config_path}"
            )

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> "AppConfig":
        """Build configuration from a plain dictionary (e.g. parsed YAML)."""
        config_data = cls._apply_env_overrides(dict(config_data))

        # Handle nested app configuration structure
        if 'app' in config_data:
            app_config = config_data.pop('app')
            config_data.update(app_config)

        sections = {
            'judge': JudgeConfig,
            'grading': GradingConfig,
            'reporting': ReportingConfig,
            'logging': LoggingConfig,
        }

        try:
            for key, section_cls in sections.items():
                if key in config_data and isinstance(config_data[key], dict):
                    config_data[key] = section_cls(**config_data[key])

            if isinstance(config_data.get('debug'), str):
                config_data['debug'] = config_data['debug'].lower() in ('1', 'true', 'yes')

            return cls(**config_data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {str(e)}") from e

    @staticmethod
    def _apply_env_overrides(config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration."""
        env_mappings = {
            'ASSESSGRADE_LOG_LEVEL': ['logging', 'level'],
            'ASSESSGRADE_JUDGE_MODEL': ['judge', 'model'],
            'ASSESSGRADE_JUDGE_BASE_URL': ['judge', 'base_url'],
            'DEBUG': ['debug'],
            'ENVIRONMENT': ['environment'],
        }

        for env_var, config_path in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value:
                current = config_data
                for key in config_path[:-1]:
                    section = current.get(key)
                    if not isinstance(section, dict):
                        section = {}
                        current[key] = section
                    current = section
                current[config_path[-1]] = env_value

        return config_data


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config(config_path: Optional[Path] = None) -> AppConfig:
    """Get the application configuration instance."""
    global _config

    if _config is None:
        if config_path is None:
            # Default configuration path
            config_path = Path("config/default.yaml")

        if config_path.exists():
            _config = AppConfig.from_yaml(config_path)
        else:
            # Use default configuration if file doesn't exist
            _config = AppConfig.from_dict({})

    return _config


def set_config(config: Optional[AppConfig]) -> None:
    """Set the global configuration instance (useful for testing)."""
    global _config
    _config = config


def reload_config(config_path: Optional[Path] = None) -> AppConfig:
    """Reload configuration from file."""
    global _config
    _config = None
    return get_config(config_path)
