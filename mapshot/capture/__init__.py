"""
Capture run - sequential region capture with composable features
"""

from .base import RegionCapturer
from .builder import CaptureBuilder
from .result import CaptureResult

__all__ = ['RegionCapturer', 'CaptureBuilder', 'CaptureResult']
