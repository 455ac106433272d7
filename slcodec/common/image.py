"""
Image loading helpers shared by the decoders.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from ..core.constants import FILE_DOES_NOT_EXIST, IMAGE_EMPTY, IMAGE_LOAD_FAILED
from ..core.returncode import ReturnCode

logger = logging.getLogger(__name__)


def to_monochrome(image: np.ndarray) -> np.ndarray:
    """
    Convert a colour raster to a single channel.

    Single channel rasters are returned unchanged.
    """
    if image.ndim == 3:
        channels = image.shape[2]
        if channels == 1:
            return image[:, :, 0]
        if channels == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    return image


def load_image(image_file: Union[str, Path]) -> Tuple[ReturnCode, Optional[np.ndarray]]:
    """
    Read an image file as is, keeping its bit depth.

    Returns:
        Tuple of (ReturnCode, image or None)
    """
    ret = ReturnCode()

    if not image_file or not os.path.isfile(str(image_file)):
        logger.error(f"Image file does not exist: {image_file}")
        return ret.add_error(FILE_DOES_NOT_EXIST), None

    image = cv2.imread(str(image_file), cv2.IMREAD_UNCHANGED)
    if image is None:
        logger.error(f"Failed to load image: {image_file}")
        return ret.add_error(IMAGE_LOAD_FAILED), None

    return ret, image


def save_image(image_file: Union[str, Path], image: np.ndarray) -> ReturnCode:
    """Write a raster to an image file, the format following the extension."""
    ret = ReturnCode()

    if image is None or image.size == 0:
        return ret.add_error(IMAGE_EMPTY)

    if not cv2.imwrite(str(image_file), image):
        logger.error(f"Failed to save image: {image_file}")
        return ret.add_error(IMAGE_LOAD_FAILED)

    return ret


def load_monochrome(item) -> Tuple[ReturnCode, Optional[np.ndarray]]:
    """
    Return the single channel raster held by a capture or pattern.

    Args:
        item: Capture or Pattern whose data type is IMAGE_FILE or IMAGE_DATA

    Returns:
        Tuple of (ReturnCode, 2D image or None)
    """
    ret = ReturnCode()

    if item.data_type.name == 'IMAGE_FILE':
        ret, image = load_image(item.image_file)
        if not ret:
            return ret, None
    else:
        image = item.image_data

    if image is None or image.size == 0:
        return ret.add_error(IMAGE_EMPTY), None

    return ret, to_monochrome(np.asarray(image))
