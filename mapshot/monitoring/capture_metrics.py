from dataclasses import dataclass


@dataclass
class CaptureMetrics:
    """Core capture metrics"""
    targets_captured: int = 0
    targets_failed: int = 0
    attempts: int = 0
    retries: int = 0
    bytes_written: int = 0
    errors_count: int = 0
    avg_capture_time: float = 0.0
