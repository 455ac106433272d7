"""
Accumulable result codes returned by every fallible slcodec operation.
"""

from typing import List

from .exceptions import ReturnCodeError


class ReturnCode:
    """
    Collection of named error and warning tags.

    A ReturnCode evaluates to True when it holds no errors, so results can be
    checked the same way as the success flag returned by OpenCV calls::

        ret, sequence = codec.generate_pattern_sequence()
        if not ret:
            print(ret)
    """

    def __init__(self):
        self._errors: List[str] = []
        self._warnings: List[str] = []

    def clear(self) -> None:
        self._errors.clear()
        self._warnings.clear()

    def add_error(self, msg: str) -> 'ReturnCode':
        """Add an error tag and return self for chaining."""
        self._errors.append(msg)
        return self

    def add_warning(self, msg: str) -> 'ReturnCode':
        """Add a warning tag and return self for chaining."""
        self._warnings.append(msg)
        return self

    def add(self, source: 'ReturnCode') -> 'ReturnCode':
        """Append all errors and warnings from another ReturnCode."""
        self._errors.extend(source.get_errors())
        self._warnings.extend(source.get_warnings())
        return self

    def has_errors(self) -> bool:
        return len(self._errors) > 0

    def has_warnings(self) -> bool:
        return len(self._warnings) > 0

    def contains_error(self, msg: str) -> bool:
        return msg in self._errors

    def contains_warning(self, msg: str) -> bool:
        return msg in self._warnings

    def get_errors(self) -> List[str]:
        return list(self._errors)

    def get_warnings(self) -> List[str]:
        return list(self._warnings)

    def get_error_count(self) -> int:
        return len(self._errors)

    def get_warning_count(self) -> int:
        return len(self._warnings)

    def raise_for_errors(self) -> 'ReturnCode':
        """
        Raise ReturnCodeError if any errors are present.

        Returns:
            Self when there are no errors, for chaining
        """
        if self._errors:
            raise ReturnCodeError(self._errors, self._warnings)
        return self

    def __bool__(self) -> bool:
        return not self._errors

    def __str__(self) -> str:
        lines = []
        for error in self._errors:
            lines.append(f"ERROR: {error}")
        for warning in self._warnings:
            lines.append(f"WARNING: {warning}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"ReturnCode(errors={self._errors!r}, warnings={self._warnings!r})"
