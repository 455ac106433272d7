"""
Disparity map produced by the structured light decoders.

Each pixel holds the projector column, row or region that illuminated it.
Storage is an int32 array where two sentinel values mark pixels without a
correspondence: EMPTY_PIXEL (never decoded) and INVALID_PIXEL (decoded but
rejected). PixelState gives the same information as an enum.
"""

import logging
from enum import Enum
from typing import Optional, Tuple

import cv2
import numpy as np

from ..core.constants import (
    EMPTY_PIXEL, INVALID_PIXEL, DEFAULT_OVER_SAMPLE,
    DISPARITY_MAP_EMPTY, DISPARITY_MAP_PIXEL_OUT_OF_RANGE,
    DISPARITY_MAP_OVERSAMPLE_SET_TO_ONE
)
from ..core.returncode import ReturnCode
from .pattern import Orientation

logger = logging.getLogger(__name__)


class PixelState(Enum):
    """Decode state of a disparity map pixel."""
    VALID = 0
    INVALID = 1
    EMPTY = 2


class DisparityMap:
    """2D grid of correspondence values with sentinel states."""

    EMPTY_PIXEL = EMPTY_PIXEL
    INVALID_PIXEL = INVALID_PIXEL

    def __init__(self, columns: int = 0, rows: int = 0,
                 orientation: Orientation = Orientation.INVALID,
                 over_sample: int = DEFAULT_OVER_SAMPLE):
        self._map: Optional[np.ndarray] = None
        self._orientation = Orientation.INVALID
        self._over_sample = DEFAULT_OVER_SAMPLE

        if columns > 0 and rows > 0:
            self.create(columns, rows, orientation, over_sample)

    def create(self, columns: int, rows: int, orientation: Orientation,
               over_sample: int = DEFAULT_OVER_SAMPLE) -> ReturnCode:
        """
        Allocate the map and fill it with EMPTY_PIXEL.

        Args:
            columns: Map width
            rows: Map height
            orientation: Orientation of the decoded patterns
            over_sample: Sub pixel factor, values below 1 are set to 1

        Returns:
            ReturnCode
        """
        ret = ReturnCode()

        self._map = np.full((rows, columns), EMPTY_PIXEL, dtype=np.int32)
        self._orientation = orientation

        if over_sample >= 1:
            self._over_sample = int(over_sample)
        else:
            logger.warning(f"Over sample {over_sample} is below 1, using 1")
            ret.add_warning(DISPARITY_MAP_OVERSAMPLE_SET_TO_ONE)
            self._over_sample = 1

        return ret

    def create_from(self, other: 'DisparityMap') -> ReturnCode:
        """Deep copy another map."""
        ret = ReturnCode()

        if other.is_empty():
            return ret.add_error(DISPARITY_MAP_EMPTY)

        self._map = other.unsafe_get_data().copy()
        self._orientation = other.orientation
        self._over_sample = other.over_sample
        return ret

    def clear(self) -> None:
        self._map = None
        self._orientation = Orientation.INVALID
        self._over_sample = DEFAULT_OVER_SAMPLE

    def is_empty(self) -> bool:
        return self._map is None or self._map.size == 0

    @property
    def columns(self) -> int:
        return 0 if self._map is None else self._map.shape[1]

    @property
    def rows(self) -> int:
        return 0 if self._map is None else self._map.shape[0]

    @property
    def orientation(self) -> Orientation:
        return self._orientation

    @property
    def over_sample(self) -> int:
        return self._over_sample

    def _check_pixel(self, x: int, y: int) -> ReturnCode:
        ret = ReturnCode()
        if self.is_empty():
            return ret.add_error(DISPARITY_MAP_EMPTY)
        if not (0 <= x < self.columns and 0 <= y < self.rows):
            return ret.add_error(DISPARITY_MAP_PIXEL_OUT_OF_RANGE)
        return ret

    def get_pixel(self, x: int, y: int) -> Tuple[ReturnCode, int]:
        """
        Read one pixel.

        Returns:
            Tuple of (ReturnCode, value). Value is INVALID_PIXEL on error.
        """
        ret = self._check_pixel(x, y)
        if not ret:
            return ret, INVALID_PIXEL
        return ret, int(self._map[y, x])

    def get_pixel_state(self, x: int, y: int) -> Tuple[ReturnCode, Optional[PixelState]]:
        ret, value = self.get_pixel(x, y)
        if not ret:
            return ret, None
        return ret, self.pixel_state(value)

    @staticmethod
    def pixel_state(value: int) -> PixelState:
        if value == INVALID_PIXEL:
            return PixelState.INVALID
        if value == EMPTY_PIXEL:
            return PixelState.EMPTY
        return PixelState.VALID

    def set_pixel(self, x: int, y: int, value: int) -> ReturnCode:
        ret = self._check_pixel(x, y)
        if ret:
            self._map[y, x] = value
        return ret

    def set_pixel_invalid(self, x: int, y: int) -> ReturnCode:
        return self.set_pixel(x, y, INVALID_PIXEL)

    # Unchecked accessors for decode loops

    def unsafe_get_pixel(self, x: int, y: int) -> int:
        return int(self._map[y, x])

    def unsafe_set_pixel(self, x: int, y: int, value: int) -> None:
        self._map[y, x] = value

    def unsafe_set_pixel_invalid(self, x: int, y: int) -> None:
        self._map[y, x] = INVALID_PIXEL

    def unsafe_get_data(self) -> np.ndarray:
        """Return the backing array without copying."""
        return self._map

    def get_data(self) -> Tuple[ReturnCode, Optional[np.ndarray]]:
        """Return a copy of the backing array."""
        ret = ReturnCode()
        if self.is_empty():
            return ret.add_error(DISPARITY_MAP_EMPTY), None
        return ret, self._map.copy()

    def valid_mask(self) -> np.ndarray:
        """Boolean mask of pixels holding a correspondence value."""
        if self.is_empty():
            return np.zeros((0, 0), dtype=bool)
        return (self._map != INVALID_PIXEL) & (self._map != EMPTY_PIXEL)

    def flip(self, flip_x: bool, flip_y: bool) -> ReturnCode:
        """Mirror the map around its vertical (flip_x) and/or horizontal (flip_y) axis."""
        ret = ReturnCode()
        if self.is_empty():
            return ret.add_error(DISPARITY_MAP_EMPTY)

        if flip_x and flip_y:
            self._map = cv2.flip(self._map, -1)
        elif flip_x:
            self._map = cv2.flip(self._map, 1)
        elif flip_y:
            self._map = cv2.flip(self._map, 0)
        return ret

    def oversample_and_smooth(self, over_sample: int) -> ReturnCode:
        """
        Scale valid values by over_sample and smooth them with a bilateral filter.

        The filter diameter is over_sample rounded up to an odd number and
        both sigmas are 3 * over_sample. EMPTY and INVALID pixels keep their
        sentinel values and do not contribute to their neighbours.

        Args:
            over_sample: Sub pixel factor. Values of 1 or less leave the map unchanged.

        Returns:
            ReturnCode
        """
        ret = ReturnCode()

        if self.is_empty():
            return ret.add_error(DISPARITY_MAP_EMPTY)

        if over_sample <= 1:
            return ret

        valid = self.valid_mask()
        scaled = self._map.astype(np.float32) * over_sample

        diameter = over_sample if over_sample % 2 == 1 else over_sample + 1
        sigma = 3.0 * over_sample

        if valid.any():
            # Push sentinel pixels far away in value so the range kernel ignores them
            far_value = float(scaled[valid].max()) + 100.0 * sigma
            scaled[~valid] = far_value

        smooth = cv2.bilateralFilter(scaled, diameter, sigma, sigma)

        result = np.rint(smooth).astype(np.int32)
        result[~valid] = self._map[~valid]
        self._map = result
        self._over_sample = int(over_sample)

        logger.debug(f"Disparity map oversampled by {over_sample} "
                     f"(diameter {diameter}, sigma {sigma})")
        return ret

    def __repr__(self) -> str:
        return (f"DisparityMap(columns={self.columns}, rows={self.rows}, "
                f"orientation={self._orientation.name}, over_sample={self._over_sample})")
