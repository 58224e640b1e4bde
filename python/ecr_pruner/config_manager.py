#!/usr/bin/env python3
"""
Configuration Manager for the ECR image pruner

This module handles loading and managing configuration from config.yaml
and environment variables.
"""

import logging
import os
import re
from typing import Any, Dict, Optional

import yaml


class ConfigValidationError(Exception):
    """Raised when configuration validation fails"""


_TRUTHY = ("true", "1", "yes", "on")
_FALSY = ("false", "0", "no", "off")


def _parse_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    raise ConfigValidationError(f"{field} must be a boolean, got: {value}")


class ConfigManager:
    """Manages configuration for the ECR image pruner"""

    def __init__(self, config_file: str = None, validate: bool = True):
        """Initialize ConfigManager

        Args:
            config_file: Path to configuration YAML file (defaults to config.yaml or CONFIG_FILE env var)
            validate: If True, validate configuration on initialization
        """
        # Allow override via environment variable for containerized deployments
        if config_file is None:
            config_file = os.environ.get("CONFIG_FILE", "config.yaml")
        self.config_file = config_file
        self.config = self._load_config()

        if validate:
            self.validate_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file with defaults"""
        default_config = {
            "registry": {"region": "us-east-1", "registry_id": None, "repository_prefix": ""},
            "retention": {"version_prefix": "version-", "keep_versions": 20},
            "cleanup": {"max_workers": None},
            "analysis": {"output_dir": "reports"},
            "reports": {"cleanup_summary": "cleanup-summary.json"},
            "security": {"dry_run_by_default": True},
            "logging": {"level": "INFO"},
        }

        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, "r") as f:
                    user_config = yaml.safe_load(f) or {}
                return self._merge_config(default_config, user_config)
            else:
                logging.warning(f"Config file {self.config_file} not found, using defaults")
                return default_config
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Error loading config file: {e}")
            return default_config

    def _merge_config(self, default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge user config with defaults"""
        result = default.copy()
        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    # Registry configuration
    def get_region(self) -> str:
        """Get AWS region from environment or config"""
        return (
            os.environ.get("AWS_REGION")
            or os.environ.get("AWS_DEFAULT_REGION")
            or self.config["registry"]["region"]
        )

    def get_registry_id(self) -> Optional[str]:
        """Get the ECR registry (account) id; None means the caller's default registry"""
        registry_id = os.environ.get("ECR_REGISTRY_ID") or self.config["registry"].get("registry_id")
        return str(registry_id) if registry_id else None

    def get_repository_prefix(self) -> str:
        """Only repositories whose name starts with this prefix are processed"""
        prefix = os.environ.get("REPOSITORY_PREFIX")
        if prefix is None:
            prefix = self.config["registry"].get("repository_prefix") or ""
        return prefix

    # Retention configuration
    def get_version_prefix(self) -> str:
        """Get the tag prefix that marks versioned images"""
        return self.config["retention"]["version_prefix"]

    def get_keep_versions(self) -> int:
        """Get number of versioned images kept per repository, with type coercion"""
        keep = os.environ.get("KEEP_VERSIONS") or self.config["retention"]["keep_versions"]
        try:
            return int(keep)
        except (ValueError, TypeError):
            raise ConfigValidationError(
                f"retention.keep_versions must be an integer, got: {keep} (type: {type(keep).__name__})"
            )

    # Cleanup configuration
    def get_max_workers(self) -> Optional[int]:
        """Get max workers from config; None means one worker per repository"""
        workers = os.environ.get("MAX_WORKERS") or self.config["cleanup"].get("max_workers")
        if workers is None or workers == "":
            return None
        try:
            return int(workers)
        except (ValueError, TypeError):
            raise ConfigValidationError(
                f"cleanup.max_workers must be an integer, got: {workers} (type: {type(workers).__name__})"
            )

    # Output configuration
    def get_output_dir(self) -> str:
        """Get output directory from config"""
        return self.config["analysis"]["output_dir"]

    def get_cleanup_summary_path(self) -> str:
        """Get the cleanup summary report path, resolved against the output directory"""
        path = self.config["reports"]["cleanup_summary"]
        if os.path.isabs(path):
            return path
        return os.path.join(self.get_output_dir(), path)

    # Security configuration
    def is_dry_run_by_default(self) -> bool:
        """Whether runs only report what would be deleted unless told otherwise"""
        value = os.environ.get("DRY_RUN")
        if value is None:
            value = self.config["security"]["dry_run_by_default"]
        return _parse_bool(value, "security.dry_run_by_default")

    # Logging configuration
    def get_log_level(self) -> str:
        """Get log level name from environment or config"""
        return (os.environ.get("LOG_LEVEL") or self.config["logging"]["level"]).upper()

    def validate_config(self) -> None:
        """Validate configuration values

        Raises:
            ConfigValidationError: If configuration is invalid
        """
        errors = []
        warnings = []

        region = self.get_region()
        if not region or not str(region).strip():
            errors.append("AWS region is required and cannot be empty")
        elif not self._is_valid_region(region):
            warnings.append(f"Region '{region}' may be invalid (expected format: us-east-1)")

        registry_id = self.get_registry_id()
        if registry_id and not re.match(r"^[0-9]{12}$", registry_id):
            errors.append(f"registry.registry_id must be a 12-digit AWS account id, got: {registry_id}")

        version_prefix = self.get_version_prefix()
        if not version_prefix or not str(version_prefix).strip():
            errors.append("retention.version_prefix is required and cannot be empty")

        try:
            keep = self.get_keep_versions()
            if keep < 1:
                errors.append(f"retention.keep_versions must be a positive integer, got: {keep}")
        except ConfigValidationError as e:
            errors.append(str(e))

        try:
            max_workers = self.get_max_workers()
            if max_workers is not None and max_workers < 1:
                errors.append(f"cleanup.max_workers must be a positive integer, got: {max_workers}")
            elif max_workers is not None and max_workers > 100:
                warnings.append(f"max_workers is very high ({max_workers}), registry calls may be throttled")
        except ConfigValidationError as e:
            errors.append(str(e))

        output_dir = self.get_output_dir()
        if not output_dir or not str(output_dir).strip():
            errors.append("output_dir is required and cannot be empty")

        try:
            self.is_dry_run_by_default()
        except ConfigValidationError as e:
            errors.append(str(e))

        if not isinstance(logging.getLevelName(self.get_log_level()), int):
            errors.append(f"logging.level is not a valid log level: {self.get_log_level()}")

        # Log warnings
        for warning in warnings:
            logging.warning(f"Configuration warning: {warning}")

        # Raise error if there are validation errors
        if errors:
            error_msg = "Configuration validation failed:\n  " + "\n  ".join(errors)
            logging.error(error_msg)
            raise ConfigValidationError(error_msg)

    def _is_valid_region(self, region: str) -> bool:
        """Validate AWS region format"""
        return bool(re.match(r"^[a-z]{2}(-gov|-iso[a-z]*)?-[a-z]+-[0-9]$", region))

    def print_config(self):
        """Print current configuration"""
        print("Current Configuration:")
        print(f"  Region: {self.get_region()}")
        print(f"  Registry Id: {self.get_registry_id() or 'default'}")
        print(f"  Repository Prefix: {self.get_repository_prefix() or '(all repositories)'}")
        print(f"  Version Prefix: {self.get_version_prefix()}")
        print(f"  Keep Versions: {self.get_keep_versions()}")
        print(f"  Max Workers: {self.get_max_workers() or 'one per repository'}")
        print(f"  Output Directory: {self.get_output_dir()}")
        print(f"  Dry Run Default: {self.is_dry_run_by_default()}")


# Global config manager instance
# Validation can be disabled by setting SKIP_CONFIG_VALIDATION=true environment variable
# This is useful for testing or when you know the config is valid
config_manager = ConfigManager(
    validate=os.environ.get("SKIP_CONFIG_VALIDATION", "").lower() not in ("true", "1", "yes")
)
