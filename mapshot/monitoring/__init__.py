"""
Monitoring and observability modules
"""

from .metrics_collector import MetricsCollector
from .log_manager import LogManager
from .capture_metrics import CaptureMetrics
from .system_metrics import SystemMetrics

__all__ = [
    'MetricsCollector',
    'LogManager',
    'CaptureMetrics',
    'SystemMetrics'
]
