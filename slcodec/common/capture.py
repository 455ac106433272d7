"""
Capture containers holding camera images handed to decoders.
"""

import copy
import logging
from enum import Enum
from typing import Iterator, List, Optional, Union

import numpy as np

from ..core.constants import CAPTURE_TYPE_INVALID, CAPTURE_SEQUENCE_INDEX_OUT_OF_RANGE
from ..core.parameters import Parameters
from ..core.returncode import ReturnCode

logger = logging.getLogger(__name__)


class CaptureDataType(Enum):
    """Where the capture content lives."""
    IMAGE_FILE = 0
    IMAGE_DATA = 1
    INVALID = 2


class Capture:
    """Single camera image, in memory or on disk."""

    def __init__(
        self,
        camera_id: int = 0,
        pattern_id: int = 0,
        data_type: CaptureDataType = CaptureDataType.INVALID,
        image_data: Optional[np.ndarray] = None,
        image_file: str = ""
    ):
        self.camera_id = camera_id
        self.pattern_id = pattern_id
        self.data_type = data_type
        self.image_data = image_data
        self.image_file = image_file

    @classmethod
    def from_image(cls, image: np.ndarray, pattern_id: int = 0, camera_id: int = 0) -> 'Capture':
        """Create an IMAGE_DATA capture from a raster."""
        return cls(camera_id=camera_id, pattern_id=pattern_id,
                   data_type=CaptureDataType.IMAGE_DATA, image_data=image)

    @classmethod
    def from_file(cls, image_file: str, pattern_id: int = 0, camera_id: int = 0) -> 'Capture':
        """Create an IMAGE_FILE capture from a path."""
        return cls(camera_id=camera_id, pattern_id=pattern_id,
                   data_type=CaptureDataType.IMAGE_FILE, image_file=str(image_file))

    def __repr__(self) -> str:
        return (f"Capture(camera_id={self.camera_id}, pattern_id={self.pattern_id}, "
                f"data_type={self.data_type.name})")


class CaptureSequence:
    """
    Ordered group of captures plus shared parameters.

    Only the data type is checked on insertion. Image payloads are checked
    by the decoder that consumes the sequence.
    """

    def __init__(self, source: Union[Capture, 'CaptureSequence', None] = None):
        self._captures: List[Capture] = []
        self.parameters = Parameters()
        if source is not None:
            self.add(source)

    @property
    def count(self) -> int:
        return len(self._captures)

    def clear(self) -> None:
        self._captures.clear()
        self.parameters.clear()

    def add(self, item: Union[Capture, 'CaptureSequence']) -> ReturnCode:
        """
        Append a capture, or every capture of another sequence.

        Adding a sequence also copies its parameters.
        """
        ret = ReturnCode()

        if isinstance(item, CaptureSequence):
            for capture in item:
                ret.add(self.add(capture))
            self.parameters = Parameters()
            self.parameters.update(item.parameters)
            return ret

        if item.data_type == CaptureDataType.INVALID:
            return ret.add_error(CAPTURE_TYPE_INVALID)

        self._captures.append(copy.copy(item))
        return ret

    def get(self, index: int):
        """
        Get the capture at index.

        Returns:
            Tuple of (ReturnCode, Capture or None)
        """
        ret = ReturnCode()
        if not 0 <= index < len(self._captures):
            return ret.add_error(CAPTURE_SEQUENCE_INDEX_OUT_OF_RANGE), None
        return ret, self._captures[index]

    def set(self, index: int, capture: Capture) -> ReturnCode:
        ret = ReturnCode()
        if not 0 <= index < len(self._captures):
            return ret.add_error(CAPTURE_SEQUENCE_INDEX_OUT_OF_RANGE)
        if capture.data_type == CaptureDataType.INVALID:
            return ret.add_error(CAPTURE_TYPE_INVALID)
        self._captures[index] = copy.copy(capture)
        return ret

    def remove(self, index: int) -> ReturnCode:
        ret = ReturnCode()
        if not 0 <= index < len(self._captures):
            return ret.add_error(CAPTURE_SEQUENCE_INDEX_OUT_OF_RANGE)
        del self._captures[index]
        return ret

    def equal_data_types(self) -> bool:
        return len({capture.data_type for capture in self._captures}) <= 1

    def __len__(self) -> int:
        return len(self._captures)

    def __iter__(self) -> Iterator[Capture]:
        return iter(self._captures)

    def __getitem__(self, index: int) -> Capture:
        return self._captures[index]

    def __repr__(self) -> str:
        return f"CaptureSequence(count={len(self._captures)})"
