"""
Pattern containers exchanged between structured light modules and projectors.
"""

import copy
import logging
import os
from enum import Enum
from typing import Iterator, List, Optional, Union

import numpy as np

from ..core.constants import (
    FILE_DOES_NOT_EXIST,
    PATTERN_BITDEPTH_INVALID, PATTERN_COLOR_INVALID, PATTERN_DATA_TYPE_INVALID,
    PATTERN_EXPOSURE_TOO_SHORT, PATTERN_PERIOD_TOO_SHORT,
    PATTERN_PARAMETERS_EMPTY, PATTERN_IMAGE_DATA_EMPTY,
    PATTERN_SEQUENCE_INDEX_OUT_OF_RANGE
)
from ..core.parameters import Parameters
from ..core.returncode import ReturnCode

logger = logging.getLogger(__name__)


class Bitdepth(Enum):
    """Pixel value range of a pattern."""
    MONO_1BPP = 0
    MONO_2BPP = 1
    MONO_3BPP = 2
    MONO_4BPP = 3
    MONO_5BPP = 4
    MONO_6BPP = 5
    MONO_7BPP = 6
    MONO_8BPP = 7
    RGB_3BPP = 8     # Three sequential MONO_1BPP planes (red, green, blue)
    RGB_6BPP = 9
    RGB_9BPP = 10
    RGB_12BPP = 11
    RGB_15BPP = 12
    RGB_18BPP = 13
    RGB_21BPP = 14
    RGB_24BPP = 15
    INVALID = 16


# Maximum pixel value per channel for each bit depth
BITDEPTH_MAXIMUM_VALUE = {
    Bitdepth.MONO_1BPP: 1,
    Bitdepth.MONO_2BPP: 3,
    Bitdepth.MONO_3BPP: 7,
    Bitdepth.MONO_4BPP: 15,
    Bitdepth.MONO_5BPP: 31,
    Bitdepth.MONO_6BPP: 63,
    Bitdepth.MONO_7BPP: 127,
    Bitdepth.MONO_8BPP: 255,
    Bitdepth.RGB_3BPP: 1,
    Bitdepth.RGB_6BPP: 3,
    Bitdepth.RGB_9BPP: 7,
    Bitdepth.RGB_12BPP: 15,
    Bitdepth.RGB_15BPP: 31,
    Bitdepth.RGB_18BPP: 63,
    Bitdepth.RGB_21BPP: 127,
    Bitdepth.RGB_24BPP: 255,
}


class Color(Enum):
    """LEDs used to display a pattern."""
    NONE = 0
    BLACK = 1
    RED = 2
    GREEN = 3
    BLUE = 4
    CYAN = 5       # Green and blue
    YELLOW = 6     # Red and green
    MAGENTA = 7    # Red and blue
    WHITE = 8
    RGB = 9        # Red, green and blue sequentially
    INVALID = 10


class DataType(Enum):
    """Where the pattern content lives."""
    IMAGE_FILE = 0
    IMAGE_DATA = 1
    PARAMETERS = 2
    INVALID = 3


class Orientation(Enum):
    """Direction along which the pattern encodes projector coordinates."""
    VERTICAL = 0
    HORIZONTAL = 1
    DIAMOND_ANGLE_1 = 2
    DIAMOND_ANGLE_2 = 3
    INVALID = 4


class Pattern:
    """Single projected pattern."""

    def __init__(
        self,
        id: int = 0,
        exposure: int = 0,
        period: int = 0,
        bitdepth: Bitdepth = Bitdepth.INVALID,
        color: Color = Color.INVALID,
        data_type: DataType = DataType.INVALID,
        orientation: Orientation = Orientation.INVALID,
        parameters: Optional[Parameters] = None,
        image_data: Optional[np.ndarray] = None,
        image_file: str = ""
    ):
        """
        Initialize pattern.

        Args:
            id: Optional identifier
            exposure: Display time in microseconds
            period: Time between patterns in microseconds
            bitdepth: Pixel value range
            color: LEDs used to display the pattern
            data_type: Which of image_data, image_file or parameters holds the content
            orientation: Encoding direction
            parameters: Pattern parameters for DataType.PARAMETERS
            image_data: Raster for DataType.IMAGE_DATA
            image_file: Image path for DataType.IMAGE_FILE
        """
        self.id = id
        self.exposure = exposure
        self.period = period
        self.bitdepth = bitdepth
        self.color = color
        self.data_type = data_type
        self.orientation = orientation
        self.parameters = parameters if parameters is not None else Parameters()
        self.image_data = image_data
        self.image_file = image_file

    def validate(self) -> ReturnCode:
        """Check that the pattern can be stored in a PatternSequence."""
        ret = ReturnCode()

        if self.bitdepth == Bitdepth.INVALID:
            return ret.add_error(PATTERN_BITDEPTH_INVALID)
        if self.color == Color.INVALID:
            return ret.add_error(PATTERN_COLOR_INVALID)

        if self.data_type == DataType.IMAGE_FILE:
            if not self.image_file or not os.path.isfile(self.image_file):
                return ret.add_error(FILE_DOES_NOT_EXIST)
        elif self.data_type == DataType.IMAGE_DATA:
            if self.image_data is None or self.image_data.size == 0:
                return ret.add_error(PATTERN_IMAGE_DATA_EMPTY)
        elif self.data_type == DataType.PARAMETERS:
            if self.parameters.is_empty():
                return ret.add_error(PATTERN_PARAMETERS_EMPTY)
        else:
            return ret.add_error(PATTERN_DATA_TYPE_INVALID)

        return ret

    def copy(self) -> 'Pattern':
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        return (f"Pattern(id={self.id}, bitdepth={self.bitdepth.name}, "
                f"color={self.color.name}, data_type={self.data_type.name}, "
                f"orientation={self.orientation.name})")


class PatternSequence:
    """
    Ordered group of patterns plus shared parameters.

    Patterns are validated on insertion; a rejected pattern leaves the
    sequence unchanged.
    """

    def __init__(self, source: Union[Pattern, 'PatternSequence', None] = None):
        self._patterns: List[Pattern] = []
        self.parameters = Parameters()
        if source is not None:
            self.add(source)

    @property
    def count(self) -> int:
        return len(self._patterns)

    def clear(self) -> None:
        self._patterns.clear()
        self.parameters.clear()

    def add(self, item: Union[Pattern, 'PatternSequence']) -> ReturnCode:
        """
        Append a pattern, or every pattern of another sequence.

        Adding a sequence also copies its parameters.

        Returns:
            ReturnCode
        """
        ret = ReturnCode()

        if isinstance(item, PatternSequence):
            for pattern in item:
                ret.add(self.add(pattern))
            self.parameters = Parameters()
            self.parameters.update(item.parameters)
            return ret

        ret.add(item.validate())
        if ret:
            self._patterns.append(item.copy())
        return ret

    def get(self, index: int):
        """
        Get a copy of the pattern at index.

        Returns:
            Tuple of (ReturnCode, Pattern or None)
        """
        ret = ReturnCode()
        if not 0 <= index < len(self._patterns):
            return ret.add_error(PATTERN_SEQUENCE_INDEX_OUT_OF_RANGE), None
        return ret, self._patterns[index].copy()

    def set(self, index: int, pattern: Pattern) -> ReturnCode:
        ret = ReturnCode()
        if not 0 <= index < len(self._patterns):
            return ret.add_error(PATTERN_SEQUENCE_INDEX_OUT_OF_RANGE)

        ret.add(pattern.validate())
        if ret:
            self._patterns[index] = pattern.copy()
        return ret

    def remove(self, index: int) -> ReturnCode:
        ret = ReturnCode()
        if not 0 <= index < len(self._patterns):
            return ret.add_error(PATTERN_SEQUENCE_INDEX_OUT_OF_RANGE)
        del self._patterns[index]
        return ret

    def set_bitdepths(self, bitdepth: Bitdepth) -> ReturnCode:
        ret = ReturnCode()
        if bitdepth == Bitdepth.INVALID:
            return ret.add_error(PATTERN_BITDEPTH_INVALID)
        for pattern in self._patterns:
            pattern.bitdepth = bitdepth
        return ret

    def set_colors(self, color: Color) -> ReturnCode:
        ret = ReturnCode()
        if color == Color.INVALID:
            return ret.add_error(PATTERN_COLOR_INVALID)
        for pattern in self._patterns:
            pattern.color = color
        return ret

    def set_exposures(self, exposure: int) -> ReturnCode:
        """Set every pattern exposure. A zero exposure is stored but reported."""
        ret = ReturnCode()
        if exposure == 0:
            ret.add_error(PATTERN_EXPOSURE_TOO_SHORT)
        for pattern in self._patterns:
            pattern.exposure = exposure
        return ret

    def set_periods(self, period: int) -> ReturnCode:
        """Set every pattern period. A zero period is stored but reported."""
        ret = ReturnCode()
        if period == 0:
            ret.add_error(PATTERN_PERIOD_TOO_SHORT)
        for pattern in self._patterns:
            pattern.period = period
        return ret

    def _all_equal(self, attribute: str) -> bool:
        values = {getattr(pattern, attribute) for pattern in self._patterns}
        return len(values) <= 1

    def equal_bitdepths(self) -> bool:
        return self._all_equal('bitdepth')

    def equal_colors(self) -> bool:
        return self._all_equal('color')

    def equal_data_types(self) -> bool:
        return self._all_equal('data_type')

    def equal_exposures(self) -> bool:
        return self._all_equal('exposure')

    def equal_periods(self) -> bool:
        return self._all_equal('period')

    def __len__(self) -> int:
        return len(self._patterns)

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self._patterns)

    def __getitem__(self, index: int) -> Pattern:
        return self._patterns[index]

    def __repr__(self) -> str:
        return f"PatternSequence(count={len(self._patterns)})"
