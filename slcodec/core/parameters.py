"""
Parameter bag used to configure structured light modules.

A Parameters object is a flat, ordered, string keyed store of string values.
Modules declare typed entries (name, type, default) with parameter_entry()
and move values in and out of the bag through those entries, so every
setting has one canonical name, one type and one documented default.
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Type, Union

from .constants import (
    PARAMETERS_EMPTY, PARAMETERS_NO_NAME, PARAMETERS_NOT_FOUND,
    PARAMETERS_VALUE_INVALID, PARAMETERS_MISSING_VALUE,
    PARAMETERS_FILE_DOES_NOT_EXIST, PARAMETERS_FILE_OPEN_FAILED,
    PARAMETERS_FILE_PROCESSING_FAILED
)
from .exceptions import ParameterError
from .returncode import ReturnCode

logger = logging.getLogger(__name__)

_TRUE_TEXT = ('true', '1', 'yes', 'on')
_FALSE_TEXT = ('false', '0', 'no', 'off')


def _to_text(kind: type, value: Any) -> str:
    if isinstance(value, Enum):
        return value.name
    if kind is bool:
        return "true" if value else "false"
    return str(value)


def _from_text(name: str, kind: type, text: str) -> Any:
    text = text.strip()
    if isinstance(kind, type) and issubclass(kind, Enum):
        try:
            return kind[text.upper()]
        except KeyError:
            raise ParameterError(name, text, f"not a member of {kind.__name__}") from None
    if kind is bool:
        lowered = text.lower()
        if lowered in _TRUE_TEXT:
            return True
        if lowered in _FALSE_TEXT:
            return False
        raise ParameterError(name, text, "expected a boolean")
    try:
        return kind(text)
    except (TypeError, ValueError) as e:
        raise ParameterError(name, text, f"expected {kind.__name__}") from e


class ParameterEntry:
    """
    A typed, named setting with a default value.

    Subclasses are normally created with parameter_entry(). Instances hold
    the current value, initialised to the default.
    """

    name: str = ""
    kind: type = str
    default: Any = None

    def __init__(self, value: Any = None):
        self.value = self.default if value is None else value

    def get(self) -> Any:
        return self.value

    def set(self, value: Any) -> None:
        self.value = value

    def get_default(self) -> Any:
        return self.default

    def get_entry_name(self) -> str:
        return self.name

    def get_entry_value(self) -> str:
        return _to_text(self.kind, self.value)

    def get_entry_default(self) -> str:
        return _to_text(self.kind, self.default)

    def set_entry_value(self, text: str) -> None:
        """
        Parse text into the entry type and store it.

        Raises:
            ParameterError: If the text cannot be converted
        """
        self.value = _from_text(self.name, self.kind, text)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"


def parameter_entry(name: str, kind: type, default: Any) -> Type[ParameterEntry]:
    """
    Declare a new parameter entry type.

    Args:
        name: Parameter name used inside Parameters (case insensitive)
        kind: Value type (int, float, bool, str or an Enum subclass)
        default: Default value

    Returns:
        ParameterEntry subclass
    """
    class_name = "".join(part.capitalize() for part in name.lower().split("_"))
    return type(class_name, (ParameterEntry,), {
        'name': name.strip().upper(),
        'kind': kind,
        'default': default,
    })


EntryOrName = Union[ParameterEntry, Type[ParameterEntry], str]


class Parameters:
    """Ordered name/value store for module configuration."""

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, str] = {}
        if values:
            for name, value in values.items():
                self.set(name, value)

    @staticmethod
    def _normalize(entry_or_name: EntryOrName) -> str:
        if isinstance(entry_or_name, str):
            name = entry_or_name
        else:
            name = entry_or_name.name
        return name.strip().upper()

    def set(self, entry_or_name: EntryOrName, value: Any = None) -> ReturnCode:
        """
        Store a value.

        Args:
            entry_or_name: ParameterEntry instance, or a parameter name
            value: Value to store when a name is given

        Returns:
            ReturnCode
        """
        ret = ReturnCode()

        if isinstance(entry_or_name, ParameterEntry):
            name = self._normalize(entry_or_name)
            text = entry_or_name.get_entry_value()
        else:
            name = self._normalize(entry_or_name)
            if isinstance(value, Enum):
                text = value.name
            elif isinstance(value, bool):
                text = "true" if value else "false"
            else:
                text = "" if value is None else str(value).strip()

        if not name:
            return ret.add_error(PARAMETERS_NO_NAME)

        self._values[name] = text
        return ret

    def get(self, entry: ParameterEntry) -> ReturnCode:
        """
        Load the stored value into an entry.

        The entry keeps its current value when the name is missing or the
        stored text cannot be converted.

        Returns:
            ReturnCode with PARAMETERS_NOT_FOUND or PARAMETERS_VALUE_INVALID on failure
        """
        ret = ReturnCode()
        name = self._normalize(entry)

        if name not in self._values:
            return ret.add_error(PARAMETERS_NOT_FOUND)

        try:
            entry.set_entry_value(self._values[name])
        except ParameterError as e:
            logger.warning(e.message)
            ret.add_error(PARAMETERS_VALUE_INVALID)

        return ret

    def get_value(self, entry_or_name: EntryOrName, default: Optional[str] = None) -> Optional[str]:
        """Return the raw stored text, or default when missing."""
        return self._values.get(self._normalize(entry_or_name), default)

    def contains(self, entry_or_name: EntryOrName) -> bool:
        return self._normalize(entry_or_name) in self._values

    def remove(self, entry_or_name: EntryOrName) -> ReturnCode:
        ret = ReturnCode()
        name = self._normalize(entry_or_name)

        if not name:
            return ret.add_error(PARAMETERS_NO_NAME)
        if name not in self._values:
            return ret.add_error(PARAMETERS_NOT_FOUND)

        del self._values[name]
        return ret

    def update(self, other: 'Parameters') -> None:
        """Copy every entry from another Parameters object, overwriting duplicates."""
        for name, text in other.items():
            self._values[name] = text

    def clear(self) -> None:
        self._values.clear()

    def is_empty(self) -> bool:
        return not self._values

    @property
    def count(self) -> int:
        return len(self._values)

    def names(self) -> List[str]:
        return list(self._values.keys())

    def items(self):
        return list(self._values.items())

    def to_dict(self) -> Dict[str, str]:
        return dict(self._values)

    def save(self, filepath: Union[str, Path]) -> ReturnCode:
        """
        Save all entries to a JSON file.

        Args:
            filepath: Destination file

        Returns:
            ReturnCode
        """
        ret = ReturnCode()

        if self.is_empty():
            return ret.add_error(PARAMETERS_EMPTY)

        try:
            with open(filepath, 'w') as f:
                json.dump(self._values, f, indent=2)
        except OSError as e:
            logger.error(f"Error saving parameters to {filepath}: {e}")
            return ret.add_error(PARAMETERS_FILE_OPEN_FAILED)

        logger.info(f"Saved {self.count} parameters to {filepath}")
        return ret

    def load(self, filepath: Union[str, Path], update_current: bool = True) -> ReturnCode:
        """
        Load entries from a JSON file holding one flat object.

        Args:
            filepath: Source file
            update_current: Overwrite entries that already exist

        Returns:
            ReturnCode. Entries with empty values are skipped with a
            PARAMETERS_MISSING_VALUE warning.
        """
        ret = ReturnCode()
        path = Path(filepath)

        if not path.exists():
            return ret.add_error(PARAMETERS_FILE_DOES_NOT_EXIST)

        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except OSError as e:
            logger.error(f"Error opening parameters file {path}: {e}")
            return ret.add_error(PARAMETERS_FILE_OPEN_FAILED)
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing parameters file {path}: {e}")
            return ret.add_error(PARAMETERS_FILE_PROCESSING_FAILED)

        if not isinstance(data, dict):
            return ret.add_error(PARAMETERS_FILE_PROCESSING_FAILED)

        for name, value in data.items():
            name = self._normalize(str(name))
            text = "" if value is None else str(value).strip()
            if isinstance(value, bool):
                text = "true" if value else "false"

            if not name or not text:
                ret.add_warning(f"{PARAMETERS_MISSING_VALUE}: {name}")
                continue

            if update_current or name not in self._values:
                self._values[name] = text

        logger.debug(f"Loaded parameters from {path}")
        return ret

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, entry_or_name: EntryOrName) -> bool:
        return self.contains(entry_or_name)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._values.keys()))

    def __repr__(self) -> str:
        return f"Parameters({self._values!r})"
