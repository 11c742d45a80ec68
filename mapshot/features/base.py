"""
Base Feature Interface - Abstract base class for all capture features
"""

from abc import ABC, abstractmethod


class CaptureFeature(ABC):
    """Base interface for all capture features"""

    name = 'feature'

    @abstractmethod
    async def initialize(self, capturer) -> None:
        """Called once before the first target"""
        pass

    @abstractmethod
    async def prepare_page(self, page, target, region, capturer) -> None:
        """Adjust the page after the region is located and before it is captured"""
        pass

    @abstractmethod
    async def finalize(self, capturer) -> None:
        """Called once when the run ends, also after a failure"""
        pass
