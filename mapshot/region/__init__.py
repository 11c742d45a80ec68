"""
Region detection, stabilisation and capture
"""

from .polling import CancellationToken, Deadline, poll_until, wait_until_stable
from .render_wait import wait_for_map_render, wait_for_stable_box
from .locator import Region, RegionKind, locate_region, CANDIDATE_SELECTORS
from .capture import capture_region

__all__ = [
    'CancellationToken',
    'Deadline',
    'poll_until',
    'wait_until_stable',
    'wait_for_map_render',
    'wait_for_stable_box',
    'Region',
    'RegionKind',
    'locate_region',
    'CANDIDATE_SELECTORS',
    'capture_region'
]
