"""
Base class for structured light pattern codecs.

A codec is configured from a Parameters bag with setup(), generates the
PatternSequence to project with generate_pattern_sequence(), and turns the
matching CaptureSequence back into a DisparityMap with
decode_capture_sequence().
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np

from ..core.constants import (
    PARAMETERS_NOT_FOUND, PARAMETERS_VALUE_INVALID,
    STRUCTURED_LIGHT_NOT_SETUP, STRUCTURED_LIGHT_DATA_TYPE_INVALID,
    STRUCTURED_LIGHT_PATTERN_SIZE_INVALID,
    STRUCTURED_LIGHT_PROJECTOR_RESOLUTION_INVALID,
    STRUCTURED_LIGHT_SETTINGS_PATTERN_ROWS_MISSING,
    STRUCTURED_LIGHT_SETTINGS_PATTERN_COLUMNS_MISSING,
    STRUCTURED_LIGHT_SETTINGS_PATTERN_COLOR_MISSING,
    STRUCTURED_LIGHT_SETTINGS_PATTERN_ORIENTATION_MISSING
)
from ..core.parameters import Parameters, ParameterEntry, parameter_entry
from ..core.returncode import ReturnCode
from ..common.capture import Capture, CaptureDataType, CaptureSequence
from ..common.disparity_map import DisparityMap
from ..common.image import load_monochrome
from ..common.pattern import Color, Orientation, PatternSequence

logger = logging.getLogger(__name__)


def round_half_up(value):
    """Round halves away from zero for non-negative values, like C roundf."""
    return int(np.floor(value + 0.5))


def resolution_for(columns: int, rows: int, orientation: Orientation) -> Optional[int]:
    """
    Number of distinct code values needed along the coded axis.

    Returns:
        Resolution, or None for Orientation.INVALID
    """
    if orientation == Orientation.VERTICAL:
        return columns
    if orientation == Orientation.HORIZONTAL:
        return rows
    if orientation in (Orientation.DIAMOND_ANGLE_1, Orientation.DIAMOND_ANGLE_2):
        return columns + rows // 2
    return None


def code_indices(columns: int, rows: int, orientation: Orientation) -> np.ndarray:
    """
    Map every pattern pixel to its position along the coded axis.

    Args:
        columns: Pattern width
        rows: Pattern height
        orientation: Pattern orientation (not INVALID)

    Returns:
        Integer array of shape (rows, columns)
    """
    y, x = np.indices((rows, columns), dtype=np.int64)

    if orientation == Orientation.VERTICAL:
        return x
    if orientation == Orientation.HORIZONTAL:
        return y
    if orientation == Orientation.DIAMOND_ANGLE_1:
        return y // 2 + x
    if orientation == Orientation.DIAMOND_ANGLE_2:
        return (rows - y) // 2 + x
    raise ValueError(f"No code mapping for orientation {orientation}")


class StructuredLight:
    """
    Shared configuration and helpers for pattern codecs.

    Subclasses implement setup, generate_pattern_sequence,
    decode_capture_sequence and get_setup.
    """

    PatternColor = parameter_entry("STRUCTURED_LIGHT_PATTERN_COLOR", Color, Color.WHITE)
    PatternRows = parameter_entry("STRUCTURED_LIGHT_PATTERN_ROWS", int, 0)
    PatternColumns = parameter_entry("STRUCTURED_LIGHT_PATTERN_COLUMNS", int, 0)
    PatternOrientation = parameter_entry("STRUCTURED_LIGHT_PATTERN_ORIENTATION",
                                         Orientation, Orientation.VERTICAL)

    def __init__(self):
        self._is_setup = False
        self._projector_set = False
        self.sequence_count_total = 0
        self.resolution = 0

        self.pattern_color = self.PatternColor()
        self.pattern_rows = self.PatternRows()
        self.pattern_columns = self.PatternColumns()
        self.pattern_orientation = self.PatternOrientation()

    def is_setup(self) -> bool:
        return self._is_setup

    def get_total_pattern_count(self) -> int:
        """Number of patterns generated, and captures expected by the decoder."""
        return self.sequence_count_total

    def set_projector_resolution(self, columns: int, rows: int) -> ReturnCode:
        """
        Use a fixed projector resolution instead of the rows and columns settings.

        Args:
            columns: Projector width in pixels
            rows: Projector height in pixels

        Returns:
            ReturnCode
        """
        ret = ReturnCode()

        if columns <= 0 or rows <= 0:
            return ret.add_error(STRUCTURED_LIGHT_PROJECTOR_RESOLUTION_INVALID)

        self.pattern_columns.set(int(columns))
        self.pattern_rows.set(int(rows))
        self._projector_set = True

        logger.info(f"Projector resolution = {columns} by {rows}")
        return ret

    def setup_from_file(self, filepath: Union[str, Path]) -> ReturnCode:
        """Load a JSON parameters file and set up the codec from it."""
        settings = Parameters()
        ret = settings.load(filepath)
        if not ret:
            return ret
        return ret.add(self.setup(settings))

    def setup(self, settings: Parameters) -> ReturnCode:
        raise NotImplementedError("Subclasses must implement setup()")

    def generate_pattern_sequence(self) -> Tuple[ReturnCode, PatternSequence]:
        raise NotImplementedError("Subclasses must implement generate_pattern_sequence()")

    def decode_capture_sequence(self, captures: CaptureSequence) -> Tuple[ReturnCode, DisparityMap]:
        raise NotImplementedError("Subclasses must implement decode_capture_sequence()")

    def get_setup(self, settings: Parameters) -> ReturnCode:
        raise NotImplementedError("Subclasses must implement get_setup()")

    @staticmethod
    def _read_setting(settings: Parameters, entry: ParameterEntry, missing_error: str,
                      required: bool = True) -> ReturnCode:
        """
        Read one entry from settings.

        Optional entries that are absent keep their current value. Values
        that cannot be parsed always fail.
        """
        ret = settings.get(entry)
        if ret:
            return ret
        if not required and ret.contains_error(PARAMETERS_NOT_FOUND):
            return ReturnCode()
        return ret.add_error(missing_error)

    def _read_pattern_settings(self, settings: Parameters) -> ReturnCode:
        """Read color, size and orientation and derive the coded resolution."""
        ret = ReturnCode()

        self.pattern_color.set(self.PatternColor.default)
        self.pattern_orientation.set(self.PatternOrientation.default)

        ret.add(self._read_setting(settings, self.pattern_color,
                                   STRUCTURED_LIGHT_SETTINGS_PATTERN_COLOR_MISSING,
                                   required=False))
        if not ret:
            return ret
        if self.pattern_color.get() == Color.INVALID:
            return ret.add_error(PARAMETERS_VALUE_INVALID).add_error(
                STRUCTURED_LIGHT_SETTINGS_PATTERN_COLOR_MISSING)

        if not self._projector_set:
            ret.add(self._read_setting(settings, self.pattern_rows,
                                       STRUCTURED_LIGHT_SETTINGS_PATTERN_ROWS_MISSING))
            if not ret:
                return ret
            ret.add(self._read_setting(settings, self.pattern_columns,
                                       STRUCTURED_LIGHT_SETTINGS_PATTERN_COLUMNS_MISSING))
            if not ret:
                return ret

        ret.add(self._read_setting(settings, self.pattern_orientation,
                                   STRUCTURED_LIGHT_SETTINGS_PATTERN_ORIENTATION_MISSING))
        if not ret:
            return ret

        resolution = resolution_for(self.pattern_columns.get(), self.pattern_rows.get(),
                                    self.pattern_orientation.get())
        if resolution is None:
            return ret.add_error(STRUCTURED_LIGHT_NOT_SETUP)

        if self.pattern_columns.get() <= 0 or self.pattern_rows.get() <= 0 or resolution < 2:
            return ret.add_error(STRUCTURED_LIGHT_PATTERN_SIZE_INVALID)

        self.resolution = resolution
        return ret

    def _write_pattern_settings(self, settings: Parameters) -> None:
        settings.set(self.pattern_rows)
        settings.set(self.pattern_columns)
        settings.set(self.pattern_color)
        settings.set(self.pattern_orientation)

    def _code_indices(self) -> np.ndarray:
        return code_indices(self.pattern_columns.get(), self.pattern_rows.get(),
                            self.pattern_orientation.get())

    @staticmethod
    def _load_captures(captures: Iterable[Capture]) -> Tuple[ReturnCode, List[np.ndarray]]:
        """
        Load every capture as a monochrome raster of a common size.

        Returns:
            Tuple of (ReturnCode, list of 2D arrays)
        """
        ret = ReturnCode()
        images: List[np.ndarray] = []
        shape = None

        for capture in captures:
            if capture.data_type not in (CaptureDataType.IMAGE_FILE, CaptureDataType.IMAGE_DATA):
                return ret.add_error(STRUCTURED_LIGHT_DATA_TYPE_INVALID), []

            load_ret, image = load_monochrome(capture)
            if not load_ret:
                return ret.add(load_ret), []

            if shape is None:
                shape = image.shape
            if image.shape != shape:
                logger.error(f"Capture size {image.shape} does not match {shape}")
                return ret.add_error(STRUCTURED_LIGHT_PATTERN_SIZE_INVALID), []

            images.append(image)

        return ret, images
