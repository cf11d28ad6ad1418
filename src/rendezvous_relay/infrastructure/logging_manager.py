"""
Environment-aware logging for the rendezvous relay.

The ``ENVIRONMENT`` variable picks the default level:
- development: DEBUG
- staging: INFO
- production: WARNING

When the package's ``logging.yaml`` is present it is applied through
``logging.config.dictConfig``; otherwise a console handler (and an optional
file handler) is attached to the component logger.
"""

import copy
import logging
import logging.config
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

NOISY_LOGGERS = [
    "websockets",
    "websockets.server",
    "websockets.client",
    "asyncio",
]


class Environment(Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


ENVIRONMENT_LEVELS = {
    Environment.DEVELOPMENT: "DEBUG",
    Environment.STAGING: "INFO",
    Environment.PRODUCTION: "WARNING",
}

_ENVIRONMENT_ALIASES = {
    "prod": Environment.PRODUCTION,
    "production": Environment.PRODUCTION,
    "stage": Environment.STAGING,
    "staging": Environment.STAGING,
}


class LoggingManager:
    """Applies the relay's logging configuration."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Args:
            config_path: YAML logging config; defaults to the packaged
                ``logging.yaml``.
        """
        self.config_path = config_path or Path(__file__).parent.parent / "logging.yaml"
        self._config_cache: Optional[Dict[str, Any]] = None
        self._environment = _ENVIRONMENT_ALIASES.get(
            os.getenv("ENVIRONMENT", "development").lower(), Environment.DEVELOPMENT
        )

    def get_environment(self) -> Environment:
        return self._environment

    @property
    def default_level(self) -> str:
        return ENVIRONMENT_LEVELS[self._environment]

    def _load_yaml_config(self) -> Optional[Dict[str, Any]]:
        if self._config_cache is None and self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    self._config_cache = yaml.safe_load(f)
            except (yaml.YAMLError, OSError) as e:
                logging.getLogger(__name__).warning(
                    f"Failed to load YAML logging config: {e}"
                )
        return self._config_cache

    def _production_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Copy of ``config`` with relay loggers raised to the production level."""
        config = copy.deepcopy(config)
        level = ENVIRONMENT_LEVELS[Environment.PRODUCTION]

        if "root" in config:
            config["root"]["level"] = level
        for logger_name, logger_config in config.get("loggers", {}).items():
            if logger_name not in NOISY_LOGGERS:
                logger_config["level"] = level
        return config

    def setup_logging(
        self,
        component_name: str,
        log_level: Optional[str] = None,
        log_file: Optional[str] = None,
    ) -> logging.Logger:
        """
        Configure logging and return the component's logger.

        Args:
            component_name: Logger name
            log_level: Level override; the environment default when None
            log_file: Also write to this file (skips the YAML config)
        """
        level = (log_level or self.default_level).upper()
        config = self._load_yaml_config()

        if config and not log_file:
            if self._environment == Environment.PRODUCTION:
                config = self._production_config(config)
            logging.config.dictConfig(config)
            logger = logging.getLogger(component_name)
        else:
            logger = self._attach_handlers(component_name, log_file)

        logger.setLevel(level)
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
        return logger

    def _attach_handlers(
        self, component_name: str, log_file: Optional[str]
    ) -> logging.Logger:
        logger = logging.getLogger(component_name)
        logger.handlers.clear()

        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handlers = [logging.StreamHandler()]
        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            handlers.append(logging.FileHandler(log_file))

        for handler in handlers:
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        return logger


_logging_manager = LoggingManager()


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Set up logging for a component with the shared manager."""
    return _logging_manager.setup_logging(component_name, log_level, log_file)


def get_logger(component_name: str) -> logging.Logger:
    return logging.getLogger(component_name)
