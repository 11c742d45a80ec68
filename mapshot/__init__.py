"""
MapShot - headless screenshots of client-rendered web maps
"""

from .config import CaptureConfig, CapturePlan, ConfigError, Target, DEFAULT_TARGETS
from .capture import CaptureBuilder, CaptureResult, RegionCapturer

__version__ = '1.0.0'

__all__ = [
    'CaptureConfig',
    'CapturePlan',
    'ConfigError',
    'Target',
    'DEFAULT_TARGETS',
    'CaptureBuilder',
    'CaptureResult',
    'RegionCapturer'
]
