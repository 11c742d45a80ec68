"""
Capture configuration - targets, tunable knobs and environment loading
"""

import os
import logging
from dataclasses import dataclass, field, fields
from typing import Dict, Mapping, Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "MAPSHOT_"
SELECTOR_PREFIX = ENV_PREFIX + "SELECTOR_"


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value"""


@dataclass(frozen=True)
class Target:
    """One (url, output file) pair to capture"""
    name: str
    url: str
    output_path: str
    selector: Optional[str] = None


DEFAULT_TARGETS: Tuple[Target, ...] = (
    Target('kilima', 'https://palia.th.gl/rummage-pile?map=kilima-valley', 'kilima.png'),
    Target('bahari', 'https://palia.th.gl/rummage-pile?map=bahari-bay', 'bahari.png'),
    Target('elderwood', 'https://palia.th.gl/rummage-pile?map=elderwood', 'elderwood.png'),
)


@dataclass(frozen=True)
class CaptureConfig:
    """Scalar knobs for a capture run, overridable via MAPSHOT_* variables"""
    viewport_width: int = 2200
    viewport_height: int = 1400
    device_scale_factor: float = 2.0
    headless: bool = True

    # Timeouts and waits (milliseconds)
    navigation_timeout_ms: int = 60000
    render_timeout_ms: int = 20000
    settle_ms: int = 300
    stabilize_ms: int = 750
    stabilize_timeout_ms: int = 10000
    poll_interval_ms: int = 250
    locator_timeout_ms: int = 3000

    # Render detection thresholds
    min_tile_count: int = 4
    min_canvas_width: int = 800
    min_canvas_height: int = 600

    # Region selection and capture
    min_region_width: int = 600
    min_region_height: int = 400
    padding: int = 0
    min_bytes: int = 20000
    hide_controls: bool = True
    dismiss_banners: bool = False
    allow_full_page: bool = True

    # Retry policy
    max_attempts: int = 2
    retry_delay: float = 1.0

    output_dir: str = 'docs'
    log_dir: str = 'capture_data/logs'
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'CaptureConfig':
        """Build a config from MAPSHOT_* variables, falling back to defaults"""
        if environ is None:
            load_dotenv()
            environ = os.environ

        overrides = {}
        for f in fields(cls):
            key = ENV_PREFIX + f.name.upper()
            raw = environ.get(key)
            if raw is None or raw.strip() == '':
                continue

            if f.type in (int, 'int'):
                overrides[f.name] = _env_int(key, raw)
            elif f.type in (float, 'float'):
                overrides[f.name] = _env_float(key, raw)
            elif f.type in (bool, 'bool'):
                overrides[f.name] = _env_bool(key, raw)
            else:
                overrides[f.name] = raw.strip()

        config = cls(**overrides)
        config.validate()
        return config

    def validate(self):
        """Reject values that would make a run meaningless"""
        if self.viewport_width <= 0 or self.viewport_height <= 0:
            raise ConfigError("Viewport width and height must be positive")
        if self.device_scale_factor <= 0:
            raise ConfigError("Device scale factor must be positive")
        if self.max_attempts < 1:
            raise ConfigError("MAPSHOT_MAX_ATTEMPTS must be at least 1")
        if self.poll_interval_ms <= 0:
            raise ConfigError("MAPSHOT_POLL_INTERVAL_MS must be positive")
        for name in ('padding', 'min_bytes', 'settle_ms', 'stabilize_ms', 'retry_delay'):
            if getattr(self, name) < 0:
                raise ConfigError(f"{ENV_PREFIX}{name.upper()} must not be negative")
        if not isinstance(getattr(logging, self.log_level.upper(), None), int):
            raise ConfigError(f"MAPSHOT_LOG_LEVEL must be a logging level name, got {self.log_level!r}")

    @property
    def viewport(self) -> Dict[str, int]:
        return {'width': self.viewport_width, 'height': self.viewport_height}


@dataclass(frozen=True)
class CapturePlan:
    """Immutable description of a run: what to capture and how"""
    targets: Tuple[Target, ...] = DEFAULT_TARGETS
    config: CaptureConfig = field(default_factory=CaptureConfig)

    @classmethod
    def from_env(cls, targets: Tuple[Target, ...] = DEFAULT_TARGETS,
                 environ: Optional[Mapping[str, str]] = None) -> 'CapturePlan':
        """Load config and apply MAPSHOT_SELECTOR_<NAME> overrides to the targets"""
        if environ is None:
            load_dotenv()
            environ = os.environ

        config = CaptureConfig.from_env(environ)
        return cls(targets=apply_selector_overrides(targets, environ), config=config)


def apply_selector_overrides(targets: Tuple[Target, ...],
                             environ: Mapping[str, str]) -> Tuple[Target, ...]:
    """Return targets with selectors taken from MAPSHOT_SELECTOR_<NAME> where set"""
    result = []
    for target in targets:
        key = SELECTOR_PREFIX + target.name.upper().replace('-', '_')
        selector = (environ.get(key) or '').strip()
        if selector:
            logger.debug(f"Selector override for {target.name}: {selector}")
            result.append(Target(target.name, target.url, target.output_path, selector))
        else:
            result.append(target)
    return tuple(result)


def _env_int(key: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}")


def _env_float(key: str, raw: str) -> float:
    try:
        return float(raw.strip())
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}")


def _env_bool(key: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in ('1', 'true', 'yes', 'on'):
        return True
    if value in ('0', 'false', 'no', 'off'):
        return False
    raise ConfigError(f"{key} must be a boolean, got {raw!r}")
