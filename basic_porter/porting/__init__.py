"""
Porting pipeline and its passes.
"""

from .base import PortingPass
from .log import PortingLog
from .pipeline import PASS_CLASSES, PASS_ORDER, PortingPipeline

__all__ = [
    'PortingPass',
    'PortingLog',
    'PortingPipeline',
    'PASS_CLASSES',
    'PASS_ORDER',
]
