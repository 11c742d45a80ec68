"""
Dismiss Banners Feature - Clicks away cookie and consent banners
"""

import asyncio
import logging
from typing import List, Optional
from playwright.async_api import Error as PlaywrightError
from .base import CaptureFeature

logger = logging.getLogger(__name__)

COOKIE_SELECTORS = [
    'button[id*="accept"]', 'button[class*="accept"]',
    'button[id*="cookie"]', 'button[class*="cookie"]',
    '[id*="cookieConsent"] button', '.cookie-banner button'
]


class DismissBannersFeature(CaptureFeature):
    """Best-effort click on the first matching consent button"""

    name = 'dismiss_banners'

    def __init__(self, selectors: Optional[List[str]] = None, settle_seconds: float = 1.0):
        self.selectors = selectors or COOKIE_SELECTORS
        self.settle_seconds = settle_seconds

    async def initialize(self, capturer):
        logger.debug("Dismiss banners feature initialized")

    async def prepare_page(self, page, target, region, capturer):
        """Attempt to dismiss cookie consent banners"""
        for selector in self.selectors:
            elements = await page.query_selector_all(selector)
            if not elements:
                continue

            try:
                await elements[0].click(timeout=2000)
            except PlaywrightError as e:
                # A banner that can't be clicked just stays in the shot
                logger.warning(f"Could not dismiss banner {selector} on {target.name}: {e}")
                return

            logger.info(f"Dismissed banner {selector} on {target.name}")
            await asyncio.sleep(self.settle_seconds)
            return

    async def finalize(self, capturer):
        pass
