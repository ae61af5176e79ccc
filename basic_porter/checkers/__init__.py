"""
Checkers package for QB64-PE compatibility issues.
"""

from .pattern_checker import PatternChecker
from .reserved_word_checker import ReservedWordChecker
from .keyboard_checker import KeyboardBufferChecker

__all__ = [
    'PatternChecker',
    'ReservedWordChecker',
    'KeyboardBufferChecker',
]
