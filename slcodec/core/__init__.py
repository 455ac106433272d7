"""
Core slcodec definitions that do not depend on other slcodec modules.
"""

from .constants import EMPTY_PIXEL, INVALID_PIXEL, DEFAULT_OVER_SAMPLE
from .exceptions import SlcodecException, ParameterError, ReturnCodeError
from .returncode import ReturnCode
from .parameters import Parameters, ParameterEntry, parameter_entry
from .logging_config import SlcodecLogger, setup_logging, get_logger, debug_mode

__all__ = [
    # Constants
    'EMPTY_PIXEL', 'INVALID_PIXEL', 'DEFAULT_OVER_SAMPLE',

    # Exceptions
    'SlcodecException', 'ParameterError', 'ReturnCodeError',

    # Results
    'ReturnCode',

    # Parameters
    'Parameters', 'ParameterEntry', 'parameter_entry',

    # Logging
    'SlcodecLogger', 'setup_logging', 'get_logger', 'debug_mode'
]
