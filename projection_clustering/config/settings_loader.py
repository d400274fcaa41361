"""
settings_loader.py

Configuration management for the projection clustering engine.
Loads and validates settings from YAML configuration with environment variable substitution.

Features:
- YAML configuration loading with validation
- Environment variable substitution (${VAR_NAME} syntax)
- Singleton pattern for global settings access
- Type-safe configuration with Pydantic models
- Default values when no settings file is present
"""

import os
import re
import yaml
import logging
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator
from pathlib import Path

from projection_clustering.utils.error_handling import ConfigurationError

logger = logging.getLogger(__name__)

SUPPORTED_ALGORITHMS = ("dbscan", "kmeans", "hierarchical")


# =============================================================================
# Configuration Models (Pydantic)
# =============================================================================

class ServiceSettings(BaseModel):
    """General service settings."""
    name: str = Field(default="projection-clustering", description="Service name")
    version: str = Field(default="1.0.0", description="Service version")
    environment: str = Field(default="production", description="Environment (development, staging, production)")


class DBSCANSettings(BaseModel):
    """DBSCAN defaults offered to callers that do not choose their own."""
    epsilon: float = Field(default=0.1, gt=0.0, description="Neighborhood radius")
    min_samples: int = Field(default=5, ge=1, description="Neighbors (self included) for a core point")


class KMeansSettings(BaseModel):
    """K-Means clustering algorithm settings."""
    k: int = Field(default=4, ge=1, description="Number of clusters")
    max_iter: int = Field(default=100, ge=1, description="Maximum assignment/update passes")


class HierarchicalSettings(BaseModel):
    """Single-linkage agglomerative settings."""
    max_clusters: int = Field(default=4, ge=1, description="Target cluster count")
    warn_threshold: int = Field(default=500, ge=1, description="Dataset size above which a slowness warning is logged")


class ClusteringAlgorithmsSettings(BaseModel):
    """Algorithm-specific settings."""
    dbscan: DBSCANSettings = Field(default_factory=DBSCANSettings)
    kmeans: KMeansSettings = Field(default_factory=KMeansSettings)
    hierarchical: HierarchicalSettings = Field(default_factory=HierarchicalSettings)


class ClusteringSettings(BaseModel):
    """Main clustering configuration."""
    default_algorithm: str = Field(default="dbscan", description="Algorithm used when the caller names none")
    fallback_algorithm: str = Field(default="dbscan", description="Algorithm used for unknown names")
    compute_quality_metrics: bool = Field(default=True, description="Attach silhouette/Davies-Bouldin metrics")
    algorithms: ClusteringAlgorithmsSettings = Field(default_factory=ClusteringAlgorithmsSettings)

    @field_validator("default_algorithm", "fallback_algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        v = v.lower()
        if v not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Algorithm must be one of {SUPPORTED_ALGORITHMS}")
        return v


class DatasetSettings(BaseModel):
    """Field names of the projected-coordinate export."""
    x_field: str = Field(default="D1", description="First projected coordinate column")
    y_field: str = Field(default="D2", description="Second projected coordinate column")
    year_field: str = Field(default="year", description="Time unit column")
    entity_field: str = Field(default="country", description="Entity identity column")


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="console", description="Log format (json or console)")
    file: Optional[str] = Field(default=None, description="Optional log file path")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level '{v}'")
        return v


class Settings(BaseModel):
    """Root configuration model."""
    service: ServiceSettings = Field(default_factory=ServiceSettings)
    clustering: ClusteringSettings = Field(default_factory=ClusteringSettings)
    dataset: DatasetSettings = Field(default_factory=DatasetSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# =============================================================================
# Configuration Manager (Singleton)
# =============================================================================

class ConfigManager:
    """
    Singleton configuration manager that loads and caches settings.

    Features:
    - Loads YAML configuration from file
    - Substitutes environment variables using ${VAR_NAME} syntax
    - Validates configuration using Pydantic models
    - Provides global access to settings
    """

    _instance: Optional['ConfigManager'] = None
    _settings: Optional[Settings] = None

    def __new__(cls):
        """Ensure singleton pattern."""
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
        return cls._instance

    @classmethod
    def load_config(cls, config_path: Optional[str] = None) -> Settings:
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to configuration file. If None, searches the default
                locations and falls back to built-in defaults.

        Returns:
            Settings object with validated configuration

        Raises:
            ConfigurationError: If an explicit file is missing or the configuration is invalid
        """
        if cls._settings is not None:
            return cls._settings

        if config_path is None:
            possible_paths = [
                Path(os.getenv("CONFIG_PATH", "config/settings.yaml")),
                Path("config/settings.yaml"),
            ]

            config_path_obj = None
            for path in possible_paths:
                if path.exists():
                    config_path_obj = path
                    break

            if config_path_obj is None:
                logger.warning(
                    f"Configuration file not found in any of: {[str(p) for p in possible_paths]}. "
                    "Using defaults."
                )
                cls._settings = cls._apply_env_overrides(Settings())
                return cls._settings
        else:
            config_path_obj = Path(config_path)
            if not config_path_obj.exists():
                raise ConfigurationError(
                    f"Configuration file not found: {config_path}",
                    details={"path": str(config_path)},
                )

        logger.info(f"Loading configuration from: {config_path_obj}")

        try:
            with open(config_path_obj, 'r') as f:
                raw_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Failed to load YAML configuration: {e}")
            raise ConfigurationError(f"Invalid YAML configuration: {e}") from e

        config_dict = cls._substitute_env_vars(raw_config)

        try:
            settings = Settings(**config_dict)
        except ValueError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        cls._settings = cls._apply_env_overrides(settings)
        logger.info("Configuration loaded and validated successfully")
        return cls._settings

    @classmethod
    def get_settings(cls) -> Settings:
        """
        Get cached settings. Loads from default path if not already loaded.

        Returns:
            Settings object
        """
        if cls._settings is None:
            cls.load_config()
        return cls._settings

    @classmethod
    def _apply_env_overrides(cls, settings: Settings) -> Settings:
        """Apply direct environment overrides (currently LOG_LEVEL)."""
        log_level = os.getenv("LOG_LEVEL")
        if log_level:
            settings.logging = settings.logging.model_copy(update={"level": log_level.upper()})
        return settings

    @classmethod
    def _substitute_env_vars(cls, config: Any) -> Any:
        """
        Recursively substitute environment variables in configuration.

        Supports ${VAR_NAME} and ${VAR_NAME:default_value} syntax.

        Args:
            config: Configuration dictionary or value

        Returns:
            Configuration with substituted values
        """
        if isinstance(config, dict):
            return {k: cls._substitute_env_vars(v) for k, v in config.items()}
        elif isinstance(config, list):
            return [cls._substitute_env_vars(item) for item in config]
        elif isinstance(config, str):
            # Match ${VAR_NAME} or ${VAR_NAME:default}
            pattern = r'\$\{([^}:]+)(?::([^}]*))?\}'

            def replace_var(match):
                var_name = match.group(1)
                default_value = match.group(2) if match.group(2) is not None else ""
                return os.getenv(var_name, default_value)

            return re.sub(pattern, replace_var, config)
        else:
            return config

    @classmethod
    def reload_config(cls, config_path: Optional[str] = None) -> Settings:
        """
        Reload configuration from file.

        Args:
            config_path: Path to configuration file

        Returns:
            Reloaded Settings object
        """
        cls._settings = None
        return cls.load_config(config_path)


# =============================================================================
# Convenience Functions
# =============================================================================

def get_settings() -> Settings:
    """
    Get application settings (convenience function).

    Returns:
        Settings object
    """
    return ConfigManager.get_settings()
