import time
import psutil
import logging
from datetime import datetime
from dataclasses import asdict
from typing import Dict, List, Any
from collections import defaultdict
from .capture_metrics import CaptureMetrics
from .system_metrics import SystemMetrics

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Collects per-target capture metrics and system resource usage"""

    def __init__(self):
        self.start_time = time.time()

        self.capture_metrics = CaptureMetrics()
        self.system_metrics = SystemMetrics()

        self.capture_times: List[float] = []
        self.capture_events: List[Dict[str, Any]] = []
        self.errors_by_type: Dict[str, int] = defaultdict(int)

        self.initial_network = psutil.net_io_counters()

    def record_capture(self, target: str, byte_length: int, duration: float, attempts: int,
                       region_kind: str = None):
        """Record a target written to disk"""
        self.capture_metrics.targets_captured += 1
        self.capture_metrics.bytes_written += byte_length
        self.capture_metrics.attempts += attempts
        self.capture_metrics.retries += attempts - 1
        self.capture_times.append(duration)
        self.capture_metrics.avg_capture_time = sum(self.capture_times) / len(self.capture_times)

        self.capture_events.append({
            'timestamp': datetime.now().isoformat(),
            'target': target,
            'bytes': byte_length,
            'duration': duration,
            'attempts': attempts,
            'region_kind': region_kind
        })

    def record_error(self, target: str, error_type: str):
        """Record a failed attempt"""
        self.capture_metrics.errors_count += 1
        self.errors_by_type[error_type] += 1
        logger.debug(f"Recorded {error_type} for {target}")

    def record_target_failed(self, target: str, attempts: int):
        """Record a target that ran out of attempts"""
        self.capture_metrics.targets_failed += 1
        self.capture_metrics.attempts += attempts
        self.capture_metrics.retries += attempts - 1

    def collect_system_metrics(self):
        """Collect current system resource metrics"""
        try:
            self.system_metrics.cpu_percent = psutil.cpu_percent(interval=None)
            memory = psutil.virtual_memory()
            self.system_metrics.memory_used_mb = memory.used / (1024 * 1024)
            self.system_metrics.memory_percent = memory.percent

            self.system_metrics.process_rss_mb = psutil.Process().memory_info().rss / (1024 * 1024)

            network = psutil.net_io_counters()
            self.system_metrics.network_recv_mb = (
                network.bytes_recv - self.initial_network.bytes_recv
            ) / (1024 * 1024)

        except (psutil.Error, OSError) as e:
            logger.warning(f"Failed to collect system metrics: {e}")

    def get_summary(self) -> Dict[str, Any]:
        """Snapshot of everything collected so far"""
        self.collect_system_metrics()

        return {
            'timestamp': datetime.now().isoformat(),
            'runtime_seconds': time.time() - self.start_time,
            'capture_metrics': asdict(self.capture_metrics),
            'system_metrics': asdict(self.system_metrics),
            'errors_by_type': dict(self.errors_by_type),
            'captures': list(self.capture_events)
        }
