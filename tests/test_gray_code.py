"""
Unit tests for the GrayCode codec.
"""

import os
import shutil
import tempfile
import unittest

import numpy as np

from slcodec.common.capture import Capture, CaptureSequence
from slcodec.common.image import save_image
from slcodec.common.pattern import Bitdepth, Color, DataType, Orientation
from slcodec.core.constants import (
    INVALID_PIXEL, PARAMETERS_VALUE_INVALID,
    STRUCTURED_LIGHT_NOT_SETUP, STRUCTURED_LIGHT_CAPTURE_SEQUENCE_EMPTY,
    STRUCTURED_LIGHT_CAPTURE_SEQUENCE_SIZE_INVALID, STRUCTURED_LIGHT_PATTERN_SIZE_INVALID,
    STRUCTURED_LIGHT_PROJECTOR_RESOLUTION_INVALID,
    STRUCTURED_LIGHT_SETTINGS_PATTERN_ROWS_MISSING,
    STRUCTURED_LIGHT_SETTINGS_PATTERN_COLUMNS_MISSING,
    STRUCTURED_LIGHT_SETTINGS_PATTERN_ORIENTATION_MISSING,
    FILE_DOES_NOT_EXIST, IMAGE_EMPTY,
    GRAY_CODE_REGIONS_REQUIRE_SUB_PIXELS
)
from slcodec.core.parameters import Parameters
from slcodec.structured_light.gray_code import GrayCode
from slcodec.structured_light.structured_light import code_indices


def gray_code_settings(columns, rows, orientation=Orientation.VERTICAL, **extra):
    settings = Parameters()
    settings.set(GrayCode.PatternColumns(columns))
    settings.set(GrayCode.PatternRows(rows))
    settings.set(GrayCode.PatternOrientation(orientation))
    for name, value in extra.items():
        settings.set(name, value)
    return settings


def captures_from(patterns):
    """Ideal camera: every capture is the projected pattern itself."""
    captures = CaptureSequence()
    for pattern in patterns:
        captures.add(Capture.from_image(pattern.image_data.copy(), pattern_id=pattern.id))
    return captures


def setup_codec(settings):
    codec = GrayCode()
    ret = codec.setup(settings)
    if not ret:
        raise AssertionError(str(ret))
    return codec


def round_trip(codec):
    ret, patterns = codec.generate_pattern_sequence()
    if not ret:
        raise AssertionError(str(ret))
    ret, disparity_map = codec.decode_capture_sequence(captures_from(patterns))
    if not ret:
        raise AssertionError(str(ret))
    return disparity_map.unsafe_get_data()


class TestGrayCodeSetup(unittest.TestCase):
    """Tests for configuration and derived values."""

    def test_bit_budget(self):
        for resolution, expected in ((2, 1), (255, 8), (256, 8), (257, 9), (600, 10), (1024, 10)):
            codec = setup_codec(gray_code_settings(resolution, 2))
            self.assertEqual(codec.maximum_patterns, expected, f"resolution {resolution}")
            self.assertEqual(codec.maximum_disparity, 1 << expected)
            self.assertEqual(codec.msb_pattern_value, 1 << (expected - 1))

    def test_offset_centres_resolution(self):
        codec = setup_codec(gray_code_settings(600, 4))
        self.assertEqual(codec.offset, (1024 - 600) // 2)
        codec = setup_codec(gray_code_settings(256, 4))
        self.assertEqual(codec.offset, 0)

    def test_resolution_follows_orientation(self):
        cases = (
            (Orientation.VERTICAL, 100),
            (Orientation.HORIZONTAL, 30),
            (Orientation.DIAMOND_ANGLE_1, 115),
            (Orientation.DIAMOND_ANGLE_2, 115),
        )
        for orientation, expected in cases:
            codec = setup_codec(gray_code_settings(100, 30, orientation))
            self.assertEqual(codec.resolution, expected)

    def test_pattern_counts(self):
        codec = setup_codec(gray_code_settings(600, 4))
        self.assertEqual(codec.get_total_pattern_count(), 20)

        codec = setup_codec(gray_code_settings(600, 4, GRAY_CODE_INCLUDE_INVERTED=False))
        self.assertEqual(codec.get_total_pattern_count(), 12)

        codec = setup_codec(gray_code_settings(600, 4, GRAY_CODE_SEQUENCE_COUNT=4))
        self.assertEqual(codec.get_total_pattern_count(), 8)

    def test_sequence_count_above_budget(self):
        ret = GrayCode().setup(gray_code_settings(600, 4, GRAY_CODE_SEQUENCE_COUNT=11))
        self.assertTrue(ret.contains_error(STRUCTURED_LIGHT_CAPTURE_SEQUENCE_SIZE_INVALID))

    def test_region_tiling(self):
        codec = setup_codec(gray_code_settings(600, 4, GRAY_CODE_MEASURE_REGIONS=120))
        self.assertEqual(codec.region_size, 5)
        self.assertEqual(codec.maximum_patterns, 7)
        self.assertEqual(codec.offset, 0)
        self.assertEqual(codec.get_total_pattern_count(), 14)

        for regions in (7, 1000, 601):
            codec = GrayCode()
            ret = codec.setup(gray_code_settings(600, 4, GRAY_CODE_MEASURE_REGIONS=regions))
            self.assertTrue(ret.contains_error(GRAY_CODE_REGIONS_REQUIRE_SUB_PIXELS), f"{regions} regions")
            self.assertFalse(codec.is_setup())

    def test_missing_settings(self):
        settings = Parameters()
        settings.set(GrayCode.PatternColumns(64))
        settings.set(GrayCode.PatternOrientation(Orientation.VERTICAL))
        self.assertTrue(GrayCode().setup(settings).contains_error(STRUCTURED_LIGHT_SETTINGS_PATTERN_ROWS_MISSING))

        settings = Parameters()
        settings.set(GrayCode.PatternRows(8))
        settings.set(GrayCode.PatternOrientation(Orientation.VERTICAL))
        self.assertTrue(GrayCode().setup(settings).contains_error(STRUCTURED_LIGHT_SETTINGS_PATTERN_COLUMNS_MISSING))

        settings = Parameters()
        settings.set(GrayCode.PatternRows(8))
        settings.set(GrayCode.PatternColumns(64))
        self.assertTrue(GrayCode().setup(settings).contains_error(STRUCTURED_LIGHT_SETTINGS_PATTERN_ORIENTATION_MISSING))

    def test_unparsable_setting(self):
        settings = gray_code_settings(64, 8)
        settings.set(GrayCode.PatternOrientation.name, "SIDEWAYS")
        ret = GrayCode().setup(settings)
        self.assertTrue(ret.contains_error(PARAMETERS_VALUE_INVALID))
        self.assertTrue(ret.contains_error(STRUCTURED_LIGHT_SETTINGS_PATTERN_ORIENTATION_MISSING))

    def test_failed_setup_clears_state(self):
        codec = setup_codec(gray_code_settings(64, 8))
        self.assertTrue(codec.is_setup())
        codec.setup(gray_code_settings(64, 8, GRAY_CODE_SEQUENCE_COUNT=99))
        self.assertFalse(codec.is_setup())
        ret, sequence = codec.generate_pattern_sequence()
        self.assertTrue(ret.contains_error(STRUCTURED_LIGHT_NOT_SETUP))
        self.assertEqual(len(sequence), 0)

    def test_projector_resolution(self):
        codec = GrayCode()
        self.assertTrue(codec.set_projector_resolution(0, 8)
                        .contains_error(STRUCTURED_LIGHT_PROJECTOR_RESOLUTION_INVALID))

        self.assertTrue(codec.set_projector_resolution(128, 8))
        settings = Parameters()
        settings.set(GrayCode.PatternOrientation(Orientation.VERTICAL))
        self.assertTrue(codec.setup(settings))
        self.assertEqual(codec.resolution, 128)

    def test_get_setup_round_trip(self):
        codec = setup_codec(gray_code_settings(300, 20, Orientation.HORIZONTAL,
                                               GRAY_CODE_INCLUDE_INVERTED=False,
                                               GRAY_CODE_PIXEL_THRESHOLD=9,
                                               STRUCTURED_LIGHT_PATTERN_COLOR="RED"))
        settings = Parameters()
        self.assertTrue(codec.get_setup(settings))
        self.assertEqual(settings.get_value("GRAY_CODE_PIXEL_THRESHOLD"), "9")
        self.assertEqual(settings.get_value("STRUCTURED_LIGHT_PATTERN_COLOR"), "RED")

        copy = setup_codec(settings)
        self.assertEqual(copy.get_total_pattern_count(), codec.get_total_pattern_count())
        self.assertEqual(copy.resolution, 20)
        self.assertEqual(copy.pixel_threshold.get(), 9)


class TestGrayCodePatterns(unittest.TestCase):
    """Tests for generated patterns."""

    def test_sequence_layout(self):
        codec = setup_codec(gray_code_settings(16, 2))
        ret, patterns = codec.generate_pattern_sequence()
        self.assertTrue(ret)
        self.assertEqual(len(patterns), 8)

        for pattern in patterns:
            self.assertEqual(pattern.bitdepth, Bitdepth.MONO_1BPP)
            self.assertEqual(pattern.color, Color.WHITE)
            self.assertEqual(pattern.data_type, DataType.IMAGE_DATA)
            self.assertEqual(pattern.image_data.shape, (2, 16))
            self.assertEqual(pattern.image_data.dtype, np.uint8)
            self.assertTrue(set(np.unique(pattern.image_data)) <= {0, 255})

        # Most significant plane splits the range in half
        np.testing.assert_array_equal(patterns[0].image_data[0], [0] * 8 + [255] * 8)
        np.testing.assert_array_equal(patterns[1].image_data, 255 - patterns[0].image_data)
        # Second gray plane is the xor of the first two binary planes
        np.testing.assert_array_equal(patterns[2].image_data[0], [0] * 4 + [255] * 8 + [0] * 4)

    def test_albedo_sequence_starts_with_white_and_black(self):
        codec = setup_codec(gray_code_settings(16, 2, GRAY_CODE_INCLUDE_INVERTED=False))
        ret, patterns = codec.generate_pattern_sequence()
        self.assertEqual(len(patterns), 6)
        self.assertTrue(np.all(patterns[0].image_data == 255))
        self.assertTrue(np.all(patterns[1].image_data == 0))

    def test_sequence_carries_setup(self):
        codec = setup_codec(gray_code_settings(16, 2))
        ret, patterns = codec.generate_pattern_sequence()
        self.assertEqual(patterns.parameters.get_value("STRUCTURED_LIGHT_PATTERN_COLUMNS"), "16")

    def test_adjacent_codes_differ_by_one_bit(self):
        codec = setup_codec(gray_code_settings(64, 1))
        ret, patterns = codec.generate_pattern_sequence()
        bits = np.array([p.image_data[0] > 0 for p in patterns][::2])
        changes = np.sum(bits[:, 1:] != bits[:, :-1], axis=0)
        self.assertTrue(np.all(changes == 1))


class TestGrayCodeDecode(unittest.TestCase):
    """Tests for decoding captures."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_end_to_end_600_by_400(self):
        codec = setup_codec(gray_code_settings(600, 400, GRAY_CODE_PIXEL_THRESHOLD=5))
        ret, patterns = codec.generate_pattern_sequence()
        self.assertTrue(ret)
        self.assertEqual(len(patterns), 20)

        ret, disparity_map = codec.decode_capture_sequence(captures_from(patterns))
        self.assertTrue(ret)
        self.assertEqual((disparity_map.columns, disparity_map.rows), (600, 400))
        self.assertEqual(disparity_map.orientation, Orientation.VERTICAL)

        expected = np.tile(np.arange(600), (400, 1))
        np.testing.assert_array_equal(disparity_map.unsafe_get_data(), expected)

    def test_round_trip_pixel_mode(self):
        for resolution in (2, 3, 100, 255, 256, 257):
            data = round_trip(setup_codec(gray_code_settings(resolution, 1)))
            np.testing.assert_array_equal(data[0], np.arange(resolution), f"resolution {resolution}")

    def test_round_trip_horizontal(self):
        data = round_trip(setup_codec(gray_code_settings(3, 300, Orientation.HORIZONTAL)))
        np.testing.assert_array_equal(data[:, 1], np.arange(300))

    def test_round_trip_diamond(self):
        for orientation in (Orientation.DIAMOND_ANGLE_1, Orientation.DIAMOND_ANGLE_2):
            data = round_trip(setup_codec(gray_code_settings(40, 30, orientation)))
            np.testing.assert_array_equal(data, code_indices(40, 30, orientation))

    def test_offset_correction_keeps_range(self):
        codec = setup_codec(gray_code_settings(600, 3))
        data = round_trip(codec)
        self.assertFalse(np.any(data == INVALID_PIXEL))
        self.assertGreaterEqual(int(data.min()), 0)
        self.assertLess(int(data.max()), 600)

    def test_round_trip_albedo_mode(self):
        codec = setup_codec(gray_code_settings(300, 2, GRAY_CODE_INCLUDE_INVERTED=False))
        data = round_trip(codec)
        np.testing.assert_array_equal(data[1], np.arange(300))

    def test_round_trip_region_mode(self):
        codec = setup_codec(gray_code_settings(600, 2, GRAY_CODE_MEASURE_REGIONS=120))
        data = round_trip(codec)
        np.testing.assert_array_equal(data[0], np.arange(600) // 5)

    def test_reduced_sequence_count_decodes_top_bits(self):
        codec = setup_codec(gray_code_settings(256, 1, GRAY_CODE_SEQUENCE_COUNT=3))
        data = round_trip(codec)
        np.testing.assert_array_equal(data[0], np.arange(256) & 0b11100000)

    def test_invalid_is_sticky_in_inverted_mode(self):
        codec = setup_codec(gray_code_settings(64, 2))
        ret, patterns = codec.generate_pattern_sequence()
        captures = captures_from(patterns)

        # Column 10 is ambiguous in the most significant plane only
        captures[0].image_data[:, 10] = 128
        captures[1].image_data[:, 10] = 126
        ret, disparity_map = codec.decode_capture_sequence(captures)
        self.assertTrue(ret)

        data = disparity_map.unsafe_get_data()
        self.assertTrue(np.all(data[:, 10] == INVALID_PIXEL))
        np.testing.assert_array_equal(data[0, :10], np.arange(10))

    def test_threshold_boundaries(self):
        codec = setup_codec(gray_code_settings(64, 1, GRAY_CODE_PIXEL_THRESHOLD=5))
        ret, patterns = codec.generate_pattern_sequence()
        captures = captures_from(patterns)
        captures[0].image_data[:, 3] = 105
        captures[1].image_data[:, 3] = 100
        captures[0].image_data[:, 4] = 104
        captures[1].image_data[:, 4] = 100
        ret, disparity_map = codec.decode_capture_sequence(captures)

        # Inverted comparison accepts a difference equal to the threshold
        self.assertNotEqual(disparity_map.unsafe_get_pixel(3, 0), INVALID_PIXEL)
        self.assertEqual(disparity_map.unsafe_get_pixel(4, 0), INVALID_PIXEL)

    def test_albedo_mode_rejects_unlit_pixels(self):
        codec = setup_codec(gray_code_settings(64, 2, GRAY_CODE_INCLUDE_INVERTED=False,
                                               GRAY_CODE_PIXEL_THRESHOLD=5))
        ret, patterns = codec.generate_pattern_sequence()
        captures = captures_from(patterns)

        captures[0].image_data[0, 5] = 3   # white frame barely above black
        captures[0].image_data[1, 6] = 40
        captures[1].image_data[1, 6] = 20  # reference 30
        for capture in list(captures)[2:]:
            capture.image_data[1, 6] = 35  # difference equals threshold
        ret, disparity_map = codec.decode_capture_sequence(captures)
        self.assertTrue(ret)

        self.assertEqual(disparity_map.unsafe_get_pixel(5, 0), INVALID_PIXEL)
        self.assertEqual(disparity_map.unsafe_get_pixel(6, 1), INVALID_PIXEL)
        self.assertEqual(disparity_map.unsafe_get_pixel(7, 1), 7)

    def test_decode_errors(self):
        codec = GrayCode()
        ret, disparity_map = codec.decode_capture_sequence(CaptureSequence())
        self.assertTrue(ret.contains_error(STRUCTURED_LIGHT_NOT_SETUP))
        self.assertTrue(disparity_map.is_empty())

        codec = setup_codec(gray_code_settings(16, 2))
        ret, patterns = codec.generate_pattern_sequence()

        ret, _ = codec.decode_capture_sequence(CaptureSequence())
        self.assertTrue(ret.contains_error(STRUCTURED_LIGHT_CAPTURE_SEQUENCE_EMPTY))

        captures = captures_from(patterns)
        captures.remove(0)
        ret, _ = codec.decode_capture_sequence(captures)
        self.assertTrue(ret.contains_error(STRUCTURED_LIGHT_CAPTURE_SEQUENCE_SIZE_INVALID))

        captures = captures_from(patterns)
        captures.set(3, Capture.from_image(np.zeros((3, 16), dtype=np.uint8)))
        ret, _ = codec.decode_capture_sequence(captures)
        self.assertTrue(ret.contains_error(STRUCTURED_LIGHT_PATTERN_SIZE_INVALID))

        captures = captures_from(patterns)
        captures.set(2, Capture.from_image(np.zeros((0, 0), dtype=np.uint8)))
        ret, _ = codec.decode_capture_sequence(captures)
        self.assertTrue(ret.contains_error(IMAGE_EMPTY))

        captures = captures_from(patterns)
        captures.set(1, Capture.from_file(os.path.join(self.temp_dir, "missing.png")))
        ret, _ = codec.decode_capture_sequence(captures)
        self.assertTrue(ret.contains_error(FILE_DOES_NOT_EXIST))

    def test_decode_image_files_and_colour_captures(self):
        codec = setup_codec(gray_code_settings(32, 4))
        ret, patterns = codec.generate_pattern_sequence()

        captures = CaptureSequence()
        for index, pattern in enumerate(patterns):
            if index % 2:
                colour = np.dstack([pattern.image_data] * 3)
                captures.add(Capture.from_image(colour))
            else:
                filepath = os.path.join(self.temp_dir, f"capture_{index:02d}.png")
                self.assertTrue(save_image(filepath, pattern.image_data))
                captures.add(Capture.from_file(filepath))

        ret, disparity_map = codec.decode_capture_sequence(captures)
        self.assertTrue(ret)
        np.testing.assert_array_equal(disparity_map.unsafe_get_data()[2], np.arange(32))

    def test_setup_from_file(self):
        filepath = os.path.join(self.temp_dir, "gray_code.json")
        gray_code_settings(128, 16, GRAY_CODE_INCLUDE_INVERTED=False).save(filepath)

        codec = GrayCode()
        self.assertTrue(codec.setup_from_file(filepath))
        self.assertEqual(codec.get_total_pattern_count(), 9)


if __name__ == '__main__':
    unittest.main()
