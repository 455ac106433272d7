"""
Binary Gray code structured light codec.

Each projected pattern is one bit plane of the Gray coded projector
coordinate. Bits are recovered either by comparing every pattern with its
inverse (include inverted) or by comparing it with a per pixel albedo
reference computed from an all white and an all black frame.

Two granularities are supported:

- Pixel mode codes every projector column (or row). Resolutions that are
  not a power of two are centred in the code range with an offset that is
  removed after decoding.
- Region mode (GRAY_CODE_MEASURE_REGIONS > 0) codes N equal regions, used
  by ThreePhase to find the sinusoid period.
"""

import logging
import math
from typing import List, Tuple

import numpy as np

from ..core.constants import (
    EMPTY_PIXEL, INVALID_PIXEL, BINARY_PATTERN_MAXIMUM,
    DEFAULT_SEQUENCE_COUNT, DEFAULT_INCLUDE_INVERTED,
    DEFAULT_PIXEL_THRESHOLD, DEFAULT_MEASURE_REGIONS,
    PARAMETERS_VALUE_INVALID,
    STRUCTURED_LIGHT_NOT_SETUP, STRUCTURED_LIGHT_CAPTURE_SEQUENCE_EMPTY,
    STRUCTURED_LIGHT_CAPTURE_SEQUENCE_SIZE_INVALID,
    STRUCTURED_LIGHT_SETTINGS_SEQUENCE_INCLUDE_INVERTED_MISSING,
    STRUCTURED_LIGHT_SETTINGS_SEQUENCE_COUNT_MISSING,
    GRAY_CODE_PIXEL_THRESHOLD_MISSING, GRAY_CODE_MEASURE_REGIONS_INVALID,
    GRAY_CODE_REGIONS_REQUIRE_SUB_PIXELS
)
from ..core.parameters import Parameters, parameter_entry
from ..core.returncode import ReturnCode
from ..common.capture import CaptureSequence
from ..common.disparity_map import DisparityMap
from ..common.pattern import Bitdepth, DataType, Pattern, PatternSequence
from .structured_light import StructuredLight, round_half_up

logger = logging.getLogger(__name__)


class GrayCode(StructuredLight):
    """Gray code pattern generator and decoder."""

    SequenceCount = parameter_entry("GRAY_CODE_SEQUENCE_COUNT", int, DEFAULT_SEQUENCE_COUNT)
    IncludeInverted = parameter_entry("GRAY_CODE_INCLUDE_INVERTED", bool, DEFAULT_INCLUDE_INVERTED)
    PixelThreshold = parameter_entry("GRAY_CODE_PIXEL_THRESHOLD", int, DEFAULT_PIXEL_THRESHOLD)
    MeasureRegions = parameter_entry("GRAY_CODE_MEASURE_REGIONS", float, DEFAULT_MEASURE_REGIONS)

    def __init__(self):
        super().__init__()
        self.sequence_count = self.SequenceCount()
        self.include_inverted = self.IncludeInverted()
        self.pixel_threshold = self.PixelThreshold()
        self.measure_regions = self.MeasureRegions()

        self.maximum_patterns = 0
        self.maximum_disparity = 0
        self.offset = 0
        self.msb_pattern_value = 0
        self.region_size = 0

    def setup(self, settings: Parameters) -> ReturnCode:
        """
        Configure the codec.

        Required settings are the pattern rows and columns (unless
        set_projector_resolution() was called) and the orientation. Color,
        include inverted, pixel threshold, sequence count and measure regions
        fall back to their defaults.

        Args:
            settings: Parameters bag

        Returns:
            ReturnCode. On error the codec is left not set up.
        """
        self._is_setup = False

        for entry in (self.sequence_count, self.include_inverted,
                      self.pixel_threshold, self.measure_regions):
            entry.set(entry.get_default())

        ret = self._read_pattern_settings(settings)
        if not ret:
            return ret

        ret.add(self._read_setting(settings, self.include_inverted,
                                   STRUCTURED_LIGHT_SETTINGS_SEQUENCE_INCLUDE_INVERTED_MISSING,
                                   required=False))
        if not ret:
            return ret

        ret.add(self._read_setting(settings, self.pixel_threshold,
                                   GRAY_CODE_PIXEL_THRESHOLD_MISSING, required=False))
        if not ret:
            return ret
        if self.pixel_threshold.get() < 0:
            return ret.add_error(PARAMETERS_VALUE_INVALID).add_error(GRAY_CODE_PIXEL_THRESHOLD_MISSING)

        ret.add(self._read_setting(settings, self.measure_regions,
                                   GRAY_CODE_MEASURE_REGIONS_INVALID, required=False))
        if not ret:
            return ret

        regions = self.measure_regions.get()
        if regions < 0 or math.isnan(regions):
            return ret.add_error(GRAY_CODE_MEASURE_REGIONS_INVALID)

        if regions > 0:
            self.region_size = round_half_up(self.resolution / regions)
            if round_half_up(self.region_size * regions) != self.resolution:
                logger.warning(f"{regions} regions do not tile a resolution of {self.resolution}")
                return ret.add_error(GRAY_CODE_REGIONS_REQUIRE_SUB_PIXELS)

            self.maximum_patterns = math.ceil(math.log2(regions))
            if self.maximum_patterns < 1:
                return ret.add_error(GRAY_CODE_MEASURE_REGIONS_INVALID)

            self.maximum_disparity = 1 << self.maximum_patterns
            self.sequence_count.set(self.maximum_patterns)
            self.offset = 0
        else:
            self.region_size = 0
            ret.add(self._read_setting(settings, self.sequence_count,
                                       STRUCTURED_LIGHT_SETTINGS_SEQUENCE_COUNT_MISSING,
                                       required=False))
            if not ret:
                return ret

            # Equals ceil(log2(resolution)) without floating point
            self.maximum_patterns = (self.resolution - 1).bit_length()
            self.maximum_disparity = 1 << self.maximum_patterns
            self.offset = (self.maximum_disparity - self.resolution) // 2

            if self.sequence_count.get() == 0:
                self.sequence_count.set(self.maximum_patterns)

            if not 0 < self.sequence_count.get() <= self.maximum_patterns:
                logger.warning(f"Sequence count {self.sequence_count.get()} outside "
                               f"1..{self.maximum_patterns}")
                return ret.add_error(STRUCTURED_LIGHT_CAPTURE_SEQUENCE_SIZE_INVALID)

        self.msb_pattern_value = self.maximum_disparity >> 1

        if self.include_inverted.get():
            self.sequence_count_total = self.sequence_count.get() * 2
        else:
            # All on and all off frames for the albedo reference
            self.sequence_count_total = self.sequence_count.get() + 2

        self._is_setup = True

        logger.info(f"Gray code setup: resolution {self.resolution}, "
                    f"{self.sequence_count.get()} bit planes, "
                    f"{self.sequence_count_total} patterns")
        logger.debug(f"maximum_patterns={self.maximum_patterns} "
                     f"maximum_disparity={self.maximum_disparity} offset={self.offset} "
                     f"region_size={self.region_size}")
        return ret

    def _gray_code_lines(self) -> np.ndarray:
        """
        Gray coded bit planes along the coded axis, most significant first.

        Returns:
            uint8 array of shape (maximum_patterns, line length) holding 0 or 1
        """
        planes = np.arange(self.maximum_patterns)

        if self.measure_regions.get() > 0:
            points = np.arange(self.resolution, dtype=np.int64)
            widths = self.region_size << (self.maximum_patterns - 1 - planes)
            binary = (points[np.newaxis, :] // widths[:, np.newaxis]) & 1
        else:
            points = np.arange(self.maximum_disparity, dtype=np.int64)
            masks = self.maximum_disparity >> (planes + 1)
            binary = (points[np.newaxis, :] & masks[:, np.newaxis]) > 0

        binary = binary.astype(np.uint8)
        gray = binary.copy()
        gray[1:] = binary[1:] ^ binary[:-1]
        return gray

    def _new_pattern(self, image: np.ndarray, pattern_id: int) -> Pattern:
        return Pattern(
            id=pattern_id,
            bitdepth=Bitdepth.MONO_1BPP,
            color=self.pattern_color.get(),
            data_type=DataType.IMAGE_DATA,
            orientation=self.pattern_orientation.get(),
            image_data=image
        )

    def generate_pattern_sequence(self) -> Tuple[ReturnCode, PatternSequence]:
        """
        Generate the patterns to project.

        Albedo mode starts with an all white and an all black pattern.
        Inverted mode follows every bit plane with its inverse.

        Returns:
            Tuple of (ReturnCode, PatternSequence)
        """
        ret = ReturnCode()
        sequence = PatternSequence()

        if not self._is_setup:
            return ret.add_error(STRUCTURED_LIGHT_NOT_SETUP), sequence

        rows = self.pattern_rows.get()
        columns = self.pattern_columns.get()
        lines = self._gray_code_lines()
        codes = self._code_indices() + self.offset

        if not self.include_inverted.get():
            white = np.full((rows, columns), BINARY_PATTERN_MAXIMUM, dtype=np.uint8)
            black = np.zeros((rows, columns), dtype=np.uint8)
            ret.add(sequence.add(self._new_pattern(white, len(sequence))))
            ret.add(sequence.add(self._new_pattern(black, len(sequence))))

        for plane in range(self.sequence_count.get()):
            image = (lines[plane][codes] * BINARY_PATTERN_MAXIMUM).astype(np.uint8)
            ret.add(sequence.add(self._new_pattern(image, len(sequence))))

            if self.include_inverted.get():
                inverted = BINARY_PATTERN_MAXIMUM - image
                ret.add(sequence.add(self._new_pattern(inverted, len(sequence))))

        self.get_setup(sequence.parameters)

        logger.info(f"Generated {len(sequence)} gray code patterns")
        return ret, sequence

    def decode_capture_sequence(self, captures: CaptureSequence) -> Tuple[ReturnCode, DisparityMap]:
        """
        Decode captured gray code patterns.

        Pixels whose intensity difference fails the threshold test in any bit
        plane are INVALID_PIXEL. In pixel mode, values that fall outside
        [0, resolution) once the offset is removed are INVALID_PIXEL too.

        Args:
            captures: One capture per generated pattern, in generation order

        Returns:
            Tuple of (ReturnCode, DisparityMap)
        """
        ret = ReturnCode()
        disparity_map = DisparityMap()

        if not self._is_setup:
            return ret.add_error(STRUCTURED_LIGHT_NOT_SETUP), disparity_map

        if len(captures) == 0:
            return ret.add_error(STRUCTURED_LIGHT_CAPTURE_SEQUENCE_EMPTY), disparity_map

        if len(captures) != self.sequence_count_total:
            logger.error(f"Expected {self.sequence_count_total} captures, got {len(captures)}")
            return ret.add_error(STRUCTURED_LIGHT_CAPTURE_SEQUENCE_SIZE_INVALID), disparity_map

        load_ret, images = self._load_captures(captures)
        if not load_ret:
            return ret.add(load_ret), disparity_map

        rows, columns = images[0].shape
        ret.add(disparity_map.create(columns, rows, self.pattern_orientation.get()))
        values = disparity_map.unsafe_get_data()

        threshold = self.pixel_threshold.get()
        inverted_mode = self.include_inverted.get()

        planes: List[Tuple[np.ndarray, np.ndarray]] = []
        if inverted_mode:
            for plane in range(self.sequence_count.get()):
                planes.append((images[2 * plane].astype(np.int32),
                               images[2 * plane + 1].astype(np.int32)))
        else:
            image_max = images[0].astype(np.int32)
            image_min = images[1].astype(np.int32)
            lit = image_max >= image_min + threshold
            albedo = np.where(lit, (image_max + image_min) // 2, BINARY_PATTERN_MAXIMUM)
            values[~lit] = INVALID_PIXEL
            for image in images[2:]:
                planes.append((image.astype(np.int32), albedo))

        pattern_value = self.msb_pattern_value
        for normal, reference in planes:
            difference = normal - reference
            code = np.where(difference > 0, pattern_value, 0)
            magnitude = np.abs(difference)
            if inverted_mode:
                passed = magnitude >= threshold
            else:
                passed = magnitude > threshold

            active = values != INVALID_PIXEL
            accumulated = np.where(values == EMPTY_PIXEL, 0, values)
            updated = accumulated | (code ^ ((accumulated >> 1) & pattern_value))

            values[active & passed] = updated[active & passed]
            values[active & ~passed] = INVALID_PIXEL

            pattern_value >>= 1

        if self.offset > 0:
            decoded = values != INVALID_PIXEL
            shifted = values - self.offset
            out_of_range = (shifted < 0) | (shifted >= self.resolution)
            values[decoded] = shifted[decoded]
            values[decoded & out_of_range] = INVALID_PIXEL

        valid_count = int(disparity_map.valid_mask().sum())
        logger.info(f"Decoded {len(captures)} gray code captures, "
                    f"{valid_count} of {values.size} pixels valid")
        return ret, disparity_map

    def get_setup(self, settings: Parameters) -> ReturnCode:
        """Write the active configuration into settings."""
        ret = ReturnCode()

        settings.set(self.sequence_count)
        settings.set(self.include_inverted)
        self._write_pattern_settings(settings)
        settings.set(self.pixel_threshold)
        if self.measure_regions.get() > 0:
            settings.set(self.measure_regions)

        return ret
