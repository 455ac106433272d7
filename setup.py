#!/usr/bin/env python
"""Setup script for slcodec - backward compatibility wrapper."""

import warnings
from setuptools import setup

warnings.warn(
    "The setup.py file is deprecated. slcodec uses pyproject.toml "
    "for configuration. Please use 'pip install .' or 'pip install -e .' "
    "instead of 'python setup.py install'.",
    DeprecationWarning,
    stacklevel=2
)

# All configuration lives in pyproject.toml
if __name__ == "__main__":
    setup()
