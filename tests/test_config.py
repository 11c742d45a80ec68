"""Tests for capture configuration."""

import sys
from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from mapshot.config import (
    DEFAULT_TARGETS,
    CaptureConfig,
    CapturePlan,
    ConfigError,
    Target,
    apply_selector_overrides,
)


def test_defaults_without_environment():
    config = CaptureConfig.from_env({})
    assert config == CaptureConfig()
    assert config.viewport == {'width': 2200, 'height': 1400}
    assert config.device_scale_factor == 2.0
    assert config.min_bytes == 20000
    assert config.max_attempts == 2
    assert config.output_dir == 'docs'


def test_environment_overrides():
    config = CaptureConfig.from_env({
        'MAPSHOT_VIEWPORT_WIDTH': '1600',
        'MAPSHOT_DEVICE_SCALE_FACTOR': '1.5',
        'MAPSHOT_HIDE_CONTROLS': 'no',
        'MAPSHOT_PADDING': ' 12 ',
        'MAPSHOT_OUTPUT_DIR': 'out/maps',
        'MAPSHOT_STABILIZE_MS': '',
    })
    assert config.viewport_width == 1600
    assert config.device_scale_factor == 1.5
    assert config.hide_controls is False
    assert config.padding == 12
    assert config.output_dir == 'out/maps'
    assert config.stabilize_ms == 750


def test_bad_integer_names_the_variable():
    with pytest.raises(ConfigError, match="MAPSHOT_VIEWPORT_HEIGHT"):
        CaptureConfig.from_env({'MAPSHOT_VIEWPORT_HEIGHT': 'tall'})


def test_bad_boolean():
    with pytest.raises(ConfigError, match="MAPSHOT_HEADLESS"):
        CaptureConfig.from_env({'MAPSHOT_HEADLESS': 'maybe'})


def test_zero_attempts_rejected():
    with pytest.raises(ConfigError):
        CaptureConfig.from_env({'MAPSHOT_MAX_ATTEMPTS': '0'})


def test_negative_padding_rejected():
    with pytest.raises(ConfigError, match="MAPSHOT_PADDING"):
        CaptureConfig.from_env({'MAPSHOT_PADDING': '-4'})


def test_unknown_log_level_rejected():
    with pytest.raises(ConfigError, match="MAPSHOT_LOG_LEVEL"):
        CaptureConfig.from_env({'MAPSHOT_LOG_LEVEL': 'LOUD'})


def test_log_level_is_case_insensitive():
    assert CaptureConfig.from_env({'MAPSHOT_LOG_LEVEL': 'debug'}).log_level == 'debug'


def test_config_is_immutable():
    config = CaptureConfig()
    with pytest.raises(FrozenInstanceError):
        config.padding = 10


def test_default_targets():
    names = [t.name for t in DEFAULT_TARGETS]
    assert names == ['kilima', 'bahari', 'elderwood']
    assert DEFAULT_TARGETS[0].url.endswith('map=kilima-valley')
    assert DEFAULT_TARGETS[0].output_path == 'kilima.png'
    assert all(t.selector is None for t in DEFAULT_TARGETS)


def test_selector_override_applies_to_named_target_only():
    targets = apply_selector_overrides(DEFAULT_TARGETS, {
        'MAPSHOT_SELECTOR_BAHARI': '.leaflet-container',
    })
    assert targets[1].selector == '.leaflet-container'
    assert targets[0].selector is None
    assert targets[2].selector is None
    assert DEFAULT_TARGETS[1].selector is None


def test_selector_override_with_dashed_name():
    targets = apply_selector_overrides(
        (Target('kilima-valley', 'https://example.com', 'k.png'),),
        {'MAPSHOT_SELECTOR_KILIMA_VALLEY': '#map'}
    )
    assert targets[0].selector == '#map'


def test_plan_from_env():
    plan = CapturePlan.from_env(environ={
        'MAPSHOT_MIN_BYTES': '5000',
        'MAPSHOT_SELECTOR_ELDERWOOD': 'canvas',
    })
    assert plan.config.min_bytes == 5000
    assert plan.targets[2].selector == 'canvas'
    assert isinstance(plan.targets, tuple)
