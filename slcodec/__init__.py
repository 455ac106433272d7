"""
slcodec - structured light pattern codecs.

Generates gray code and three phase pattern sequences for a projector and
decodes the captured images into per pixel projector correspondences.

Quick start:
    from slcodec import GrayCode, Parameters, Orientation

    settings = Parameters()
    settings.set(GrayCode.PatternColumns(600))
    settings.set(GrayCode.PatternRows(400))
    settings.set(GrayCode.PatternOrientation(Orientation.VERTICAL))

    codec = GrayCode()
    codec.setup(settings).raise_for_errors()
    ret, patterns = codec.generate_pattern_sequence()
"""

try:
    import importlib.metadata
    __version__ = importlib.metadata.version("slcodec")
except (ImportError, importlib.metadata.PackageNotFoundError):
    # Fallback for source checkouts
    __version__ = "1.0.0"

from .core import (
    EMPTY_PIXEL, INVALID_PIXEL,
    ReturnCode, Parameters, ParameterEntry, parameter_entry,
    SlcodecException, ParameterError, ReturnCodeError,
    setup_logging, get_logger, debug_mode
)
from .common import (
    Bitdepth, Color, DataType, Orientation, BITDEPTH_MAXIMUM_VALUE,
    Pattern, PatternSequence,
    CaptureDataType, Capture, CaptureSequence,
    DisparityMap, PixelState
)
from .structured_light import StructuredLight, GrayCode, ThreePhase

__all__ = [
    '__version__',

    # Core
    'EMPTY_PIXEL', 'INVALID_PIXEL',
    'ReturnCode', 'Parameters', 'ParameterEntry', 'parameter_entry',
    'SlcodecException', 'ParameterError', 'ReturnCodeError',
    'setup_logging', 'get_logger', 'debug_mode',

    # Containers
    'Bitdepth', 'Color', 'DataType', 'Orientation', 'BITDEPTH_MAXIMUM_VALUE',
    'Pattern', 'PatternSequence',
    'CaptureDataType', 'Capture', 'CaptureSequence',
    'DisparityMap', 'PixelState',

    # Codecs
    'StructuredLight', 'GrayCode', 'ThreePhase'
]
