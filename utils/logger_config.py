"""
Unified logging configuration for the block matching toolkit.

Every module asks for its logger through ``get_logger(__name__)`` so that all
messages end up below one named root logger with a single set of handlers.
"""

import logging
import sys
from typing import Optional, Dict, Any
from pathlib import Path


class LoggerConfig:
    """Centralized logger configuration manager."""

    _configured = False
    _root_logger_name = 'block_matching_toolkit'
    _default_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    @classmethod
    def setup_root_logger(
        cls,
        level: int = logging.INFO,
        format_string: Optional[str] = None,
        log_file: Optional[Path] = None
    ) -> logging.Logger:
        """
        Setup the root logger for the toolkit.

        Calling it again after the first configuration returns the existing
        logger untouched; use ``reset()`` first to reconfigure.

        Args:
            level: Logging level (default: INFO)
            format_string: Custom format string (optional)
            log_file: Optional file path for logging to file

        Returns:
            logging.Logger: Configured root logger
        """
        root_logger = logging.getLogger(cls._root_logger_name)
        if cls._configured:
            return root_logger

        root_logger.setLevel(level)
        root_logger.handlers.clear()

        formatter = logging.Formatter(format_string or cls._default_format)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if log_file is not None:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        # Keep messages out of the interpreter-wide root logger
        root_logger.propagate = False
        cls._configured = True

        root_logger.debug(f"Root logger configured: level={logging.getLevelName(level)}")
        if log_file is not None:
            root_logger.info(f"Logging to file: {log_file}")

        return root_logger

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Get a child logger of the toolkit root logger.

        Args:
            name: Logger name (typically __name__ from calling module)

        Returns:
            logging.Logger: Configured logger
        """
        if not cls._configured:
            cls.setup_root_logger()

        logger = logging.getLogger(f"{cls._root_logger_name}.{name}")
        logger.propagate = True
        return logger

    @classmethod
    def set_level(cls, level: int) -> None:
        """Change the logging level of the root logger and all its handlers."""
        root_logger = logging.getLogger(cls._root_logger_name)
        root_logger.setLevel(level)
        for handler in root_logger.handlers:
            handler.setLevel(level)

        root_logger.info(f"Logging level changed to: {logging.getLevelName(level)}")

    @classmethod
    def reset(cls) -> None:
        """Drop all handlers so the next setup call configures from scratch."""
        root_logger = logging.getLogger(cls._root_logger_name)
        for handler in list(root_logger.handlers):
            handler.close()
            root_logger.removeHandler(handler)
        cls._configured = False

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured

    @classmethod
    def get_configuration_info(cls) -> Dict[str, Any]:
        """
        Get information about current logger configuration.

        Returns:
            Dict[str, Any]: Configuration information
        """
        if not cls._configured:
            return {'configured': False}

        root_logger = logging.getLogger(cls._root_logger_name)
        return {
            'configured': True,
            'root_logger_name': cls._root_logger_name,
            'level': logging.getLevelName(root_logger.level),
            'handlers': [
                {
                    'type': type(handler).__name__,
                    'level': logging.getLevelName(handler.level)
                }
                for handler in root_logger.handlers
            ]
        }


def get_logger(name: str) -> logging.Logger:
    """Convenience wrapper around ``LoggerConfig.get_logger``."""
    return LoggerConfig.get_logger(name)
