"""
Logging configuration for slcodec.

Library modules only create loggers with logging.getLogger(__name__). This
module is for applications and test sessions that want a ready made setup.
"""

import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Dict

from .constants import LOG_FORMAT, MAX_LOG_FILE_SIZE, LOG_DIR_NAME


class SlcodecLogger:
    """Logger configuration for the slcodec package."""

    LEVELS = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }

    # Module-specific default levels
    MODULE_LEVELS = {
        'slcodec.core': logging.WARNING,
        'slcodec.common': logging.INFO,
        'slcodec.structured_light': logging.INFO,
    }

    @classmethod
    def setup_logging(
        cls,
        level: str = 'INFO',
        log_file: Optional[str] = None,
        console: bool = True,
        module_levels: Optional[Dict[str, str]] = None
    ) -> None:
        """
        Configure the root logger.

        Args:
            level: Console logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Optional log file path, rotated at MAX_LOG_FILE_SIZE
            console: Whether to log to stdout
            module_levels: Optional per module levels, e.g. {'slcodec.core': 'DEBUG'}
        """
        numeric_level = cls.LEVELS.get(level.upper(), logging.INFO)

        detailed_formatter = logging.Formatter(
            LOG_FORMAT + ' [%(filename)s:%(lineno)d]',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        simple_formatter = logging.Formatter('%(levelname)s - %(message)s')

        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)  # Filter at handler level
        root_logger.handlers.clear()

        if console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(numeric_level)
            console_handler.setFormatter(simple_formatter)
            root_logger.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=MAX_LOG_FILE_SIZE,
                backupCount=3
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(detailed_formatter)
            root_logger.addHandler(file_handler)

        for module, default_level in cls.MODULE_LEVELS.items():
            logging.getLogger(module).setLevel(default_level)

        if module_levels:
            for module, level_str in module_levels.items():
                module_level = cls.LEVELS.get(level_str.upper(), logging.INFO)
                logging.getLogger(module).setLevel(module_level)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        return logging.getLogger(name)

    @classmethod
    def setup_debug_logging(cls, session_name: Optional[str] = None,
                            base_dir: Optional[Path] = None) -> str:
        """
        Enable DEBUG logging to a per session file.

        Args:
            session_name: Optional session name, defaults to a timestamp
            base_dir: Directory holding session folders, defaults to ~/.slcodec/logs

        Returns:
            Path to the debug log file
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        session = session_name or f"session_{timestamp}"
        root = Path(base_dir) if base_dir else Path.home() / LOG_DIR_NAME / 'logs'
        debug_dir = root / session
        debug_dir.mkdir(parents=True, exist_ok=True)

        log_file = debug_dir / 'debug.log'
        cls.setup_logging(
            level='DEBUG',
            log_file=str(log_file),
            console=True,
            module_levels={module: 'DEBUG' for module in cls.MODULE_LEVELS}
        )

        logger = logging.getLogger('slcodec')
        logger.info(f"Debug session started: {session}")
        logger.debug(f"Debug logs: {log_file}")

        return str(log_file)


def setup_logging(**kwargs) -> None:
    """Setup logging with default configuration."""
    SlcodecLogger.setup_logging(**kwargs)


def get_logger(name: str) -> logging.Logger:
    return SlcodecLogger.get_logger(name)


def debug_mode(session_name: Optional[str] = None, base_dir: Optional[Path] = None) -> str:
    """Enable debug mode with full logging."""
    return SlcodecLogger.setup_debug_logging(session_name, base_dir)
