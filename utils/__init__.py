"""
Utility modules
"""

from .input_parser import InputParser
from .report import Reporter

__all__ = ['InputParser', 'Reporter']
