"""
Capture Features - Composable page adjustments applied before each capture
"""

from .base import CaptureFeature
from .hide_controls_feature import HideControlsFeature
from .dismiss_banners_feature import DismissBannersFeature

__all__ = [
    'CaptureFeature',
    'HideControlsFeature',
    'DismissBannersFeature'
]
