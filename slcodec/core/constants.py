"""
Constants shared by the pattern codecs, containers and parameters.
"""

# ==================== DISPARITY MAP CONSTANTS ====================
EMPTY_PIXEL = -1          # Pixel not decoded yet
INVALID_PIXEL = 0xFFFF    # Pixel decoded but rejected by a threshold test
DEFAULT_OVER_SAMPLE = 1

# ==================== GRAY CODE CONSTANTS ====================
DEFAULT_PIXEL_THRESHOLD = 5
DEFAULT_INCLUDE_INVERTED = True
DEFAULT_SEQUENCE_COUNT = 0   # 0 uses every available bit plane
DEFAULT_MEASURE_REGIONS = 0.0
BINARY_PATTERN_MAXIMUM = 255

# ==================== THREE PHASE CONSTANTS ====================
DEFAULT_FREQUENCY = 2.0
DEFAULT_PIXELS_PER_PERIOD = 8
DEFAULT_REPEAT_PHASES = 1
PERIOD_SUBREGIONS = 8         # Gray code regions per sinusoidal period
HALF_PERIOD_SUBREGIONS = 4
PHASE_COUNT = 3

# ==================== DEBUG CONSTANTS ====================
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
MAX_LOG_FILE_SIZE = 10 * 1024 * 1024  # 10MB
LOG_DIR_NAME = '.slcodec'

# ==================== RETURN CODE TAGS ====================
# Generic
FILE_DOES_NOT_EXIST = "FILE_DOES_NOT_EXIST"
IMAGE_EMPTY = "IMAGE_EMPTY"
IMAGE_LOAD_FAILED = "IMAGE_LOAD_FAILED"

# Parameters
PARAMETERS_EMPTY = "PARAMETERS_EMPTY"
PARAMETERS_NO_NAME = "PARAMETERS_NO_NAME"
PARAMETERS_NOT_FOUND = "PARAMETERS_NOT_FOUND"
PARAMETERS_VALUE_INVALID = "PARAMETERS_VALUE_INVALID"
PARAMETERS_MISSING_VALUE = "PARAMETERS_MISSING_VALUE"
PARAMETERS_FILE_DOES_NOT_EXIST = "PARAMETERS_FILE_DOES_NOT_EXIST"
PARAMETERS_FILE_OPEN_FAILED = "PARAMETERS_FILE_OPEN_FAILED"
PARAMETERS_FILE_PROCESSING_FAILED = "PARAMETERS_FILE_PROCESSING_FAILED"

# Pattern and pattern sequence
PATTERN_BITDEPTH_INVALID = "PATTERN_BITDEPTH_INVALID"
PATTERN_COLOR_INVALID = "PATTERN_COLOR_INVALID"
PATTERN_DATA_TYPE_INVALID = "PATTERN_DATA_TYPE_INVALID"
PATTERN_EXPOSURE_TOO_SHORT = "PATTERN_EXPOSURE_TOO_SHORT"
PATTERN_PERIOD_TOO_SHORT = "PATTERN_PERIOD_TOO_SHORT"
PATTERN_PARAMETERS_EMPTY = "PATTERN_PARAMETERS_EMPTY"
PATTERN_IMAGE_DATA_EMPTY = "PATTERN_IMAGE_DATA_EMPTY"
PATTERN_SEQUENCE_INDEX_OUT_OF_RANGE = "PATTERN_SEQUENCE_INDEX_OUT_OF_RANGE"

# Capture and capture sequence
CAPTURE_TYPE_INVALID = "CAPTURE_TYPE_INVALID"
CAPTURE_SEQUENCE_INDEX_OUT_OF_RANGE = "CAPTURE_SEQUENCE_INDEX_OUT_OF_RANGE"

# Disparity map
DISPARITY_MAP_EMPTY = "DISPARITY_MAP_EMPTY"
DISPARITY_MAP_PIXEL_OUT_OF_RANGE = "DISPARITY_MAP_PIXEL_OUT_OF_RANGE"
DISPARITY_MAP_OVERSAMPLE_SET_TO_ONE = "DISPARITY_MAP_OVERSAMPLE_SET_TO_ONE"

# Structured light modules
STRUCTURED_LIGHT_NOT_SETUP = "STRUCTURED_LIGHT_NOT_SETUP"
STRUCTURED_LIGHT_CAPTURE_SEQUENCE_EMPTY = "STRUCTURED_LIGHT_CAPTURE_SEQUENCE_EMPTY"
STRUCTURED_LIGHT_CAPTURE_SEQUENCE_SIZE_INVALID = "STRUCTURED_LIGHT_CAPTURE_SEQUENCE_SIZE_INVALID"
STRUCTURED_LIGHT_PATTERN_SIZE_INVALID = "STRUCTURED_LIGHT_PATTERN_SIZE_INVALID"
STRUCTURED_LIGHT_DATA_TYPE_INVALID = "STRUCTURED_LIGHT_DATA_TYPE_INVALID"
STRUCTURED_LIGHT_PROJECTOR_RESOLUTION_INVALID = "STRUCTURED_LIGHT_PROJECTOR_RESOLUTION_INVALID"
STRUCTURED_LIGHT_SETTINGS_PATTERN_ROWS_MISSING = "STRUCTURED_LIGHT_SETTINGS_PATTERN_ROWS_MISSING"
STRUCTURED_LIGHT_SETTINGS_PATTERN_COLUMNS_MISSING = "STRUCTURED_LIGHT_SETTINGS_PATTERN_COLUMNS_MISSING"
STRUCTURED_LIGHT_SETTINGS_PATTERN_COLOR_MISSING = "STRUCTURED_LIGHT_SETTINGS_PATTERN_COLOR_MISSING"
STRUCTURED_LIGHT_SETTINGS_PATTERN_ORIENTATION_MISSING = "STRUCTURED_LIGHT_SETTINGS_PATTERN_ORIENTATION_MISSING"
STRUCTURED_LIGHT_SETTINGS_SEQUENCE_INCLUDE_INVERTED_MISSING = "STRUCTURED_LIGHT_SETTINGS_SEQUENCE_INCLUDE_INVERTED_MISSING"
STRUCTURED_LIGHT_SETTINGS_SEQUENCE_COUNT_MISSING = "STRUCTURED_LIGHT_SETTINGS_SEQUENCE_COUNT_MISSING"

# Gray code
GRAY_CODE_PIXEL_THRESHOLD_MISSING = "GRAY_CODE_PIXEL_THRESHOLD_MISSING"
GRAY_CODE_MEASURE_REGIONS_INVALID = "GRAY_CODE_MEASURE_REGIONS_INVALID"
GRAY_CODE_REGIONS_REQUIRE_SUB_PIXELS = "GRAY_CODE_REGIONS_REQUIRE_SUB_PIXELS"

# Three phase
THREE_PHASE_PIXELS_PER_PERIOD_MISSING = "THREE_PHASE_PIXELS_PER_PERIOD_MISSING"
THREE_PHASE_PIXELS_PER_PERIOD_NOT_DIVISIBLE_BY_EIGHT = "THREE_PHASE_PIXELS_PER_PERIOD_NOT_DIVISIBLE_BY_EIGHT"
THREE_PHASE_BITDEPTH_MISSING = "THREE_PHASE_BITDEPTH_MISSING"
THREE_PHASE_BITDEPTH_TOO_SMALL = "THREE_PHASE_BITDEPTH_TOO_SMALL"
THREE_PHASE_USE_HYBRID_UNWRAP_MISSING = "THREE_PHASE_USE_HYBRID_UNWRAP_MISSING"
THREE_PHASE_ONLY_HYBRID_UNWRAP_SUPPORTED = "THREE_PHASE_ONLY_HYBRID_UNWRAP_SUPPORTED"
THREE_PHASE_REPEAT_PHASES_INVALID = "THREE_PHASE_REPEAT_PHASES_INVALID"
THREE_PHASE_HYBRID_UNWRAP_MODULE_SETUP_FAILED = "THREE_PHASE_HYBRID_UNWRAP_MODULE_SETUP_FAILED"
