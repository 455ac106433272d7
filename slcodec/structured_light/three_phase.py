"""
Three phase sinusoidal structured light codec with hybrid unwrapping.

Three sinusoids shifted by 120 degrees give a wrapped phase for every pixel.
The period the phase belongs to is found with an embedded GrayCode codec
measuring four regions per half period, so a clean capture set decodes to
the projector coordinate times the over sample factor.
"""

import logging
import math
from typing import Tuple

import numpy as np

from ..core.constants import (
    INVALID_PIXEL, EMPTY_PIXEL,
    DEFAULT_FREQUENCY, DEFAULT_PIXELS_PER_PERIOD, DEFAULT_REPEAT_PHASES,
    DEFAULT_OVER_SAMPLE, PERIOD_SUBREGIONS, HALF_PERIOD_SUBREGIONS, PHASE_COUNT,
    PARAMETERS_VALUE_INVALID,
    STRUCTURED_LIGHT_NOT_SETUP, STRUCTURED_LIGHT_CAPTURE_SEQUENCE_EMPTY,
    STRUCTURED_LIGHT_CAPTURE_SEQUENCE_SIZE_INVALID,
    STRUCTURED_LIGHT_DATA_TYPE_INVALID, STRUCTURED_LIGHT_PATTERN_SIZE_INVALID,
    THREE_PHASE_PIXELS_PER_PERIOD_MISSING,
    THREE_PHASE_PIXELS_PER_PERIOD_NOT_DIVISIBLE_BY_EIGHT,
    THREE_PHASE_BITDEPTH_MISSING, THREE_PHASE_BITDEPTH_TOO_SMALL,
    THREE_PHASE_USE_HYBRID_UNWRAP_MISSING, THREE_PHASE_ONLY_HYBRID_UNWRAP_SUPPORTED,
    THREE_PHASE_REPEAT_PHASES_INVALID, THREE_PHASE_HYBRID_UNWRAP_MODULE_SETUP_FAILED
)
from ..core.parameters import Parameters, parameter_entry
from ..core.returncode import ReturnCode
from ..common.capture import CaptureSequence
from ..common.disparity_map import DisparityMap
from ..common.pattern import Bitdepth, BITDEPTH_MAXIMUM_VALUE, DataType, Pattern, PatternSequence
from .gray_code import GrayCode
from .structured_light import StructuredLight

logger = logging.getLogger(__name__)

# Bit depths a sinusoid can be displayed with
SINUSOID_BITDEPTHS = (
    Bitdepth.MONO_5BPP,
    Bitdepth.MONO_6BPP,
    Bitdepth.MONO_7BPP,
    Bitdepth.MONO_8BPP,
)

PHASE_SHIFTS = (0.0, 2.0 * math.pi / 3.0, -2.0 * math.pi / 3.0)


class ThreePhase(StructuredLight):
    """Three phase pattern generator and decoder."""

    Frequency = parameter_entry("THREE_PHASE_FREQUENCY", float, DEFAULT_FREQUENCY)
    PixelsPerPeriod = parameter_entry("THREE_PHASE_PIXELS_PER_PERIOD", int, DEFAULT_PIXELS_PER_PERIOD)
    PatternBitdepth = parameter_entry("THREE_PHASE_BITDEPTH", Bitdepth, Bitdepth.MONO_8BPP)
    UseHybridUnwrap = parameter_entry("THREE_PHASE_USE_HYBRID_UNWRAP", bool, True)
    Oversample = parameter_entry("THREE_PHASE_OVERSAMPLE", int, DEFAULT_OVER_SAMPLE)
    RepeatPhases = parameter_entry("THREE_PHASE_REPEAT_PHASES", int, DEFAULT_REPEAT_PHASES)

    def __init__(self):
        super().__init__()
        self.frequency = self.Frequency()
        self.pixels_per_period = self.PixelsPerPeriod()
        self.bitdepth = self.PatternBitdepth()
        self.use_hybrid = self.UseHybridUnwrap()
        self.over_sample = self.Oversample()
        self.repeat_phases = self.RepeatPhases()

        self.hybrid_region_count = GrayCode.MeasureRegions()
        self.hybrid_include_inverted = GrayCode.IncludeInverted()
        self.hybrid_pixel_threshold = GrayCode.PixelThreshold()

        self.maximum_value = BITDEPTH_MAXIMUM_VALUE[Bitdepth.MONO_8BPP]
        self.phase_counts = 0.0

        self.hybrid_unwrap_module = GrayCode()

    def setup(self, settings: Parameters) -> ReturnCode:
        """
        Configure the codec and its embedded gray code codec.

        Args:
            settings: Parameters bag. Gray code threshold and include inverted
                entries in the same bag configure the embedded codec.

        Returns:
            ReturnCode. On error the codec is left not set up.
        """
        self._is_setup = False

        for entry in (self.frequency, self.pixels_per_period, self.bitdepth,
                      self.use_hybrid, self.over_sample, self.repeat_phases,
                      self.hybrid_include_inverted, self.hybrid_pixel_threshold):
            entry.set(entry.get_default())

        ret = self._read_pattern_settings(settings)
        if not ret:
            return ret

        ret.add(self._read_setting(settings, self.over_sample,
                                   PARAMETERS_VALUE_INVALID, required=False))
        if not ret:
            return ret
        if self.over_sample.get() < 1:
            logger.warning(f"Over sample {self.over_sample.get()} is below 1, using 1")
            self.over_sample.set(1)

        ret.add(self._read_setting(settings, self.bitdepth,
                                   THREE_PHASE_BITDEPTH_MISSING, required=False))
        if not ret:
            return ret
        if self.bitdepth.get() not in SINUSOID_BITDEPTHS:
            return ret.add_error(THREE_PHASE_BITDEPTH_TOO_SMALL)
        self.maximum_value = BITDEPTH_MAXIMUM_VALUE[self.bitdepth.get()]

        ret.add(self._read_setting(settings, self.pixels_per_period,
                                   THREE_PHASE_PIXELS_PER_PERIOD_MISSING, required=False))
        if not ret:
            return ret

        ret.add(self._read_setting(settings, self.use_hybrid,
                                   THREE_PHASE_USE_HYBRID_UNWRAP_MISSING, required=False))
        if not ret:
            return ret

        ret.add(self._read_setting(settings, self.repeat_phases,
                                   THREE_PHASE_REPEAT_PHASES_INVALID, required=False))
        if not ret:
            return ret
        if self.repeat_phases.get() < 1:
            return ret.add_error(THREE_PHASE_REPEAT_PHASES_INVALID)

        if not self.use_hybrid.get():
            return ret.add_error(THREE_PHASE_ONLY_HYBRID_UNWRAP_SUPPORTED)

        pixels_per_period = self.pixels_per_period.get()
        if pixels_per_period < PERIOD_SUBREGIONS or pixels_per_period % PERIOD_SUBREGIONS:
            return ret.add_error(THREE_PHASE_PIXELS_PER_PERIOD_NOT_DIVISIBLE_BY_EIGHT)

        self.frequency.set(self.resolution / pixels_per_period)
        self.phase_counts = 2.0 * self.frequency.get()

        ret.add(self._setup_hybrid_unwrap(settings))
        if not ret:
            return ret

        self.sequence_count_total = (PHASE_COUNT * self.repeat_phases.get() +
                                     self.hybrid_unwrap_module.get_total_pattern_count())
        self._is_setup = True

        logger.info(f"Three phase setup: resolution {self.resolution}, "
                    f"{pixels_per_period} pixels per period, "
                    f"{self.sequence_count_total} patterns")
        logger.debug(f"frequency={self.frequency.get()} phase_counts={self.phase_counts} "
                     f"hybrid_regions={self.hybrid_region_count.get()} "
                     f"over_sample={self.over_sample.get()}")
        return ret

    def _setup_hybrid_unwrap(self, settings: Parameters) -> ReturnCode:
        ret = ReturnCode()

        self.hybrid_region_count.set(float(self.phase_counts * HALF_PERIOD_SUBREGIONS))
        ret.add(self._read_setting(settings, self.hybrid_include_inverted,
                                   THREE_PHASE_HYBRID_UNWRAP_MODULE_SETUP_FAILED,
                                   required=False))
        ret.add(self._read_setting(settings, self.hybrid_pixel_threshold,
                                   THREE_PHASE_HYBRID_UNWRAP_MODULE_SETUP_FAILED,
                                   required=False))
        if not ret:
            return ret

        hybrid_settings = Parameters()
        self._write_pattern_settings(hybrid_settings)
        hybrid_settings.set(self.hybrid_region_count)
        hybrid_settings.set(self.hybrid_include_inverted)
        hybrid_settings.set(self.hybrid_pixel_threshold)

        hybrid_ret = self.hybrid_unwrap_module.setup(hybrid_settings)
        if not hybrid_ret:
            logger.error(f"Hybrid unwrap setup failed: {hybrid_ret.get_errors()}")
            return ret.add(hybrid_ret).add_error(THREE_PHASE_HYBRID_UNWRAP_MODULE_SETUP_FAILED)

        return ret

    def _sinusoid_lines(self) -> np.ndarray:
        """Pattern values along the coded axis, one row per phase shift."""
        points = np.arange(self.resolution, dtype=np.float64)
        angular_frequency = 2.0 * math.pi / self.pixels_per_period.get()
        amplitude = self.maximum_value / 2.0

        lines = [np.floor(amplitude * np.sin(angular_frequency * points + shift) + amplitude + 0.5)
                 for shift in PHASE_SHIFTS]
        return np.array(lines).astype(np.uint8)

    def generate_pattern_sequence(self) -> Tuple[ReturnCode, PatternSequence]:
        """
        Generate the patterns to project.

        The sequence holds repeat_phases copies of the 0 degree pattern, then
        of the +120 and -120 degree patterns, followed by the hybrid unwrap
        gray code patterns.

        Returns:
            Tuple of (ReturnCode, PatternSequence)
        """
        ret = ReturnCode()
        sequence = PatternSequence()

        if not self._is_setup or not self.hybrid_unwrap_module.is_setup():
            return ret.add_error(STRUCTURED_LIGHT_NOT_SETUP), sequence

        lines = self._sinusoid_lines()
        codes = self._code_indices()

        for line in lines:
            image = line[codes]
            for _ in range(self.repeat_phases.get()):
                pattern = Pattern(
                    id=len(sequence),
                    bitdepth=self.bitdepth.get(),
                    color=self.pattern_color.get(),
                    data_type=DataType.IMAGE_DATA,
                    orientation=self.pattern_orientation.get(),
                    image_data=image
                )
                ret.add(sequence.add(pattern))

        hybrid_ret, hybrid_sequence = self.hybrid_unwrap_module.generate_pattern_sequence()
        if not hybrid_ret:
            return ret.add(hybrid_ret), sequence

        phase_pattern_count = len(sequence)
        for pattern in hybrid_sequence:
            pattern.id += phase_pattern_count
            ret.add(sequence.add(pattern))

        self.get_setup(sequence.parameters)

        logger.info(f"Generated {len(sequence)} three phase patterns")
        return ret, sequence

    def decode_capture_sequence(self, captures: CaptureSequence) -> Tuple[ReturnCode, DisparityMap]:
        """
        Decode captured three phase patterns.

        Pixels with an undefined or out of range wrapped phase, or without a
        valid hybrid unwrap region, are INVALID_PIXEL.

        Args:
            captures: One capture per generated pattern, in generation order

        Returns:
            Tuple of (ReturnCode, DisparityMap) with the over sample factor set
        """
        ret = ReturnCode()
        disparity_map = DisparityMap()

        if not self._is_setup or not self.hybrid_unwrap_module.is_setup():
            return ret.add_error(STRUCTURED_LIGHT_NOT_SETUP), disparity_map

        if len(captures) == 0:
            return ret.add_error(STRUCTURED_LIGHT_CAPTURE_SEQUENCE_EMPTY), disparity_map

        if len(captures) != self.sequence_count_total:
            logger.error(f"Expected {self.sequence_count_total} captures, got {len(captures)}")
            return ret.add_error(STRUCTURED_LIGHT_CAPTURE_SEQUENCE_SIZE_INVALID), disparity_map

        repeat = self.repeat_phases.get()
        phase_capture_count = PHASE_COUNT * repeat
        all_captures = list(captures)

        load_ret, images = self._load_captures(all_captures[:phase_capture_count])
        if not load_ret:
            return ret.add(load_ret), disparity_map

        gray_code_captures = CaptureSequence()
        for capture in all_captures[phase_capture_count:]:
            if not gray_code_captures.add(capture):
                return ret.add_error(STRUCTURED_LIGHT_DATA_TYPE_INVALID), disparity_map

        gray_ret, gray_code_map = self.hybrid_unwrap_module.decode_capture_sequence(gray_code_captures)
        if not gray_ret:
            return ret.add(gray_ret), disparity_map

        rows, columns = images[0].shape
        if gray_code_map.columns != columns or gray_code_map.rows != rows:
            return ret.add_error(STRUCTURED_LIGHT_PATTERN_SIZE_INVALID), disparity_map

        over_sample = self.over_sample.get()
        ret.add(disparity_map.create(columns, rows, self.pattern_orientation.get(), over_sample))

        stack = np.stack(images).astype(np.float64).reshape(PHASE_COUNT, repeat, rows, columns)
        intensity_0, intensity_p120, intensity_n120 = stack.mean(axis=1)

        with np.errstate(divide='ignore', invalid='ignore'):
            phase = np.arctan(np.sqrt(3.0) * (intensity_n120 - intensity_p120) /
                              (2.0 * intensity_0 - intensity_n120 - intensity_p120)) / np.pi

        # NaN from a 0/0 ratio fails both comparisons
        phase_valid = (phase > -0.5) & (phase < 0.5)
        phase = np.where(phase_valid, phase, 0.0)

        pixels_per_phase = self.resolution / self.phase_counts
        wrapped_value = np.floor(over_sample * (phase + 0.5) * pixels_per_phase + 0.5)

        region = gray_code_map.unsafe_get_data().astype(np.int64)
        region_valid = (region != INVALID_PIXEL) & (region != EMPTY_PIXEL)

        # Regions at the edge of a half period are often misread; trust the phase sign
        last_region = ((region + 1) % HALF_PERIOD_SUBREGIONS) == 0
        first_region = ((region + 1) % HALF_PERIOD_SUBREGIONS) == 1
        region = np.where(last_region & (phase < 0), region + 1, region)
        region = np.where(first_region & (phase > 0), region - 1, region)

        period = np.trunc(region / HALF_PERIOD_SUBREGIONS)
        unwrapped = np.trunc(wrapped_value + over_sample * period * pixels_per_phase)

        valid = phase_valid & region_valid
        disparity_map.unsafe_get_data()[:] = np.where(valid, unwrapped, INVALID_PIXEL).astype(np.int32)

        logger.info(f"Decoded {len(captures)} three phase captures, "
                    f"{int(valid.sum())} of {valid.size} pixels valid")
        return ret, disparity_map

    def get_setup(self, settings: Parameters) -> ReturnCode:
        """Write the active configuration into settings."""
        ret = ReturnCode()

        self._write_pattern_settings(settings)
        settings.set(self.frequency)
        settings.set(self.pixels_per_period)
        settings.set(self.bitdepth)
        settings.set(self.use_hybrid)
        settings.set(self.repeat_phases)
        settings.set(self.over_sample)
        if self.use_hybrid.get():
            settings.set(self.hybrid_region_count)
            settings.set(self.hybrid_include_inverted)
            settings.set(self.hybrid_pixel_threshold)

        return ret
