"""
Structured light pattern codecs.
"""

from .structured_light import StructuredLight, code_indices, resolution_for
from .gray_code import GrayCode
from .three_phase import ThreePhase

__all__ = [
    'StructuredLight', 'code_indices', 'resolution_for',
    'GrayCode', 'ThreePhase'
]
