"""
Hide Controls Feature - Hides map controls and attribution before capture
"""

import logging
from typing import Optional
from .base import CaptureFeature

logger = logging.getLogger(__name__)

DEFAULT_HIDE_CSS = """
.leaflet-control, .mapboxgl-ctrl, [class*="control"] { opacity: 0 !important; pointer-events: none !important; }
.leaflet-bottom.leaflet-right, .mapboxgl-ctrl-bottom-right { display: none !important; }
"""


class HideControlsFeature(CaptureFeature):
    """Injects a style override so zoom buttons and tabs don't cover the map"""

    name = 'hide_controls'

    def __init__(self, css: Optional[str] = None):
        self.css = css or DEFAULT_HIDE_CSS
        self.pages_styled = 0

    async def initialize(self, capturer):
        logger.debug("Hide controls feature initialized")

    async def prepare_page(self, page, target, region, capturer):
        await page.add_style_tag(content=self.css)
        self.pages_styled += 1
        logger.debug(f"Hid map controls for {target.name}")

    async def finalize(self, capturer):
        logger.debug(f"Hid controls on {self.pages_styled} pages")
