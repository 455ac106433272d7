"""
Containers shared by the structured light modules.
"""

from .pattern import (
    Bitdepth, Color, DataType, Orientation, BITDEPTH_MAXIMUM_VALUE,
    Pattern, PatternSequence
)
from .capture import CaptureDataType, Capture, CaptureSequence
from .disparity_map import DisparityMap, PixelState
from .image import load_image, save_image, load_monochrome, to_monochrome

__all__ = [
    # Patterns
    'Bitdepth', 'Color', 'DataType', 'Orientation', 'BITDEPTH_MAXIMUM_VALUE',
    'Pattern', 'PatternSequence',

    # Captures
    'CaptureDataType', 'Capture', 'CaptureSequence',

    # Disparity
    'DisparityMap', 'PixelState',

    # Images
    'load_image', 'save_image', 'load_monochrome', 'to_monochrome'
]
