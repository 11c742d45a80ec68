"""
Capture Builder - Fluent API for building capturers with features
"""

from dataclasses import replace
from typing import Optional, Tuple
from .base import RegionCapturer
from ..config import CaptureConfig, CapturePlan, Target, DEFAULT_TARGETS
from ..features.hide_controls_feature import HideControlsFeature
from ..features.dismiss_banners_feature import DismissBannersFeature
from ..monitoring import LogManager


class CaptureBuilder:
    """Builder for creating capturers with various features"""

    def __init__(self, targets: Tuple[Target, ...] = DEFAULT_TARGETS):
        self.targets = tuple(targets)
        self._config = CaptureConfig()
        self._log_manager: Optional[LogManager] = None
        self.features = []

    @classmethod
    def from_plan(cls, plan: CapturePlan) -> 'CaptureBuilder':
        """Start from a plan and enable the features its config asks for"""
        builder = cls(plan.targets).config(plan.config)
        return (builder
                .with_hidden_controls(plan.config.hide_controls)
                .with_banner_dismissal(plan.config.dismiss_banners))

    def config(self, config: CaptureConfig):
        """Use a complete configuration"""
        self._config = config
        return self

    def output_dir(self, path: str):
        """Set the directory output paths are resolved against"""
        self._config = replace(self._config, output_dir=str(path))
        return self

    def max_attempts(self, count: int):
        """Set attempts per target (1 disables retry)"""
        self._config = replace(self._config, max_attempts=count)
        return self

    def with_hidden_controls(self, enable: bool = True, css: Optional[str] = None):
        """Hide map controls before each capture"""
        if enable:
            self.features.append(HideControlsFeature(css=css))
        return self

    def with_banner_dismissal(self, enable: bool = True):
        """Click away cookie banners before each capture"""
        if enable:
            self.features.append(DismissBannersFeature())
        return self

    def with_logging(self, log_dir: Optional[str] = None, log_level: Optional[str] = None):
        """Configure file logging and export run metrics when done"""
        self._log_manager = LogManager(
            log_dir=log_dir or self._config.log_dir,
            log_level=log_level or self._config.log_level
        )
        return self

    def build(self, session=None) -> RegionCapturer:
        """Build the configured capturer"""
        self._config.validate()
        plan = CapturePlan(targets=self.targets, config=self._config)
        capturer = RegionCapturer(plan, session=session, log_manager=self._log_manager)

        for feature in self.features:
            capturer.add_feature(feature)

        return capturer
