"""
Configuration Module for the Invoice Manager.

This module provides centralized configuration management using YAML files,
plus the explicit ``AppSettings`` object handed to collaborators that need
secrets or filesystem locations. Settings are built once at startup and
live for the whole process.
"""

import os
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional


class ConfigurationManager:
    """
    Centralized configuration management for the invoice manager.

    This class handles loading and providing access to all configuration
    parameters defined in settings.yaml.

    Attributes:
        config_path (Path): Path to the configuration file.
        config (Dict): Loaded configuration dictionary.

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("ocr.tesseract.lang")
        'spa'
    """

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        """
        Singleton pattern to ensure only one configuration instance exists.

        Args:
            config_path: Optional path to configuration file.

        Returns:
            ConfigurationManager instance.
        """
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Optional path to configuration file.
                        Defaults to settings.yaml next to this module.
        """
        if self._initialized:
            return

        if config_path is None:
            self.config_path = Path(__file__).parent / "settings.yaml"
        else:
            self.config_path = Path(config_path)

        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """
        Load configuration from YAML file.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            yaml.YAMLError: If configuration file is invalid.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}"
            )

        with open(self.config_path, 'r', encoding='utf-8') as f:
            self._config = yaml.safe_load(f) or {}

        self._resolve_paths()

    def _resolve_paths(self) -> None:
        """
        Resolve relative paths in configuration to absolute paths.
        Uses the current working directory as base directory.
        """
        base_dir = Path.cwd()

        if 'paths' in self._config:
            for key, value in self._config['paths'].items():
                if value and not Path(value).is_absolute():
                    self._config['paths'][key] = str(base_dir / value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., "ocr.engine").
            default: Default value if key doesn't exist.

        Returns:
            Configuration value or default.

        Example:
            >>> config.get("model.name")
            'gemini-2.0-flash-lite-001'
            >>> config.get("nonexistent.key", "default_value")
            'default_value'
        """
        keys = key.split('.')
        value = self._config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    @classmethod
    def reset(cls) -> None:
        """
        Reset the singleton instance.
        Useful for testing or configuration changes.
        """
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """
    Convenience function to get configuration values.

    Args:
        key: Configuration key in dot notation.
        default: Default value if key doesn't exist.

    Returns:
        Configuration value or default.
    """
    return ConfigurationManager().get(key, default)


@dataclass(frozen=True)
class AppSettings:
    """
    Explicit runtime settings for collaborators backed by external services.

    Attributes:
        google_api_key: API key for the Gemini service ("" when unset).
        model_name: Gemini model identifier.
        model_timeout: Request timeout in seconds.
        default_retry_after: Cooldown (seconds) used when a quota error
            does not say how long to wait.
        database_path: SQLite database file.
        ocr_language: Tesseract language code.
    """
    google_api_key: str
    model_name: str
    model_timeout: int
    default_retry_after: float
    database_path: Path
    ocr_language: str

    @property
    def has_api_key(self) -> bool:
        return bool(self.google_api_key)


def load_settings(config_path: Optional[str] = None) -> AppSettings:
    """
    Build ``AppSettings`` from the YAML configuration and the environment.

    Environment variables override YAML values:
        - ``GOOGLE_API_KEY`` (name configurable via ``model.api_key_env``)
        - ``GEMINI_MODEL``
        - ``INVOICE_DB_PATH``

    Args:
        config_path: Optional custom configuration file path.

    Returns:
        Frozen AppSettings instance.
    """
    config = ConfigurationManager(config_path)

    api_key_env = config.get("model.api_key_env", "GOOGLE_API_KEY")
    data_dir = Path(config.get("paths.data_dir", "data"))
    db_name = config.get("output.database.name", "invoices.db")

    db_path = os.getenv("INVOICE_DB_PATH")

    return AppSettings(
        google_api_key=os.getenv(api_key_env, ""),
        model_name=os.getenv("GEMINI_MODEL") or config.get("model.name", "gemini-2.0-flash-lite-001"),
        model_timeout=int(config.get("model.timeout_seconds", 60)),
        default_retry_after=float(config.get("model.default_retry_after", 60)),
        database_path=Path(db_path) if db_path else data_dir / db_name,
        ocr_language=config.get("ocr.tesseract.lang", "spa"),
    )


__all__ = ['ConfigurationManager', 'get_config', 'AppSettings', 'load_settings']
