import asyncio
import random
import time
import logging
from enum import Enum
from dataclasses import dataclass
from typing import Dict, List, Optional, Callable, Any
from collections import defaultdict

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    """Classification of capture failures"""
    NAVIGATION_TIMEOUT = "navigation_timeout"
    NAVIGATION_ERROR = "navigation_error"
    RENDER_TIMEOUT = "render_timeout"
    NO_CAPTURABLE_ELEMENT = "no_capturable_element"
    SCREENSHOT_ERROR = "screenshot_error"
    INVALID_PNG = "invalid_png"
    OUTPUT_TOO_SMALL = "output_too_small"
    STORAGE_ERROR = "storage_error"
    CANCELLED = "cancelled"
    UNKNOWN_ERROR = "unknown_error"


class CaptureError(Exception):
    """Base class for failures of a single capture attempt"""
    error_type = ErrorType.UNKNOWN_ERROR


class NavigationTimeoutError(CaptureError):
    error_type = ErrorType.NAVIGATION_TIMEOUT


class NavigationError(CaptureError):
    error_type = ErrorType.NAVIGATION_ERROR


class RenderTimeoutError(CaptureError):
    error_type = ErrorType.RENDER_TIMEOUT


class NoCapturableElementError(CaptureError):
    error_type = ErrorType.NO_CAPTURABLE_ELEMENT


class ScreenshotError(CaptureError):
    error_type = ErrorType.SCREENSHOT_ERROR


class InvalidPngError(CaptureError):
    error_type = ErrorType.INVALID_PNG


class OutputTooSmallError(CaptureError):
    error_type = ErrorType.OUTPUT_TOO_SMALL


class StorageError(CaptureError):
    error_type = ErrorType.STORAGE_ERROR


class CaptureCancelledError(CaptureError):
    error_type = ErrorType.CANCELLED


@dataclass
class RetryConfig:
    """Configuration for retry behavior"""
    max_attempts: int = 2
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter: bool = True
    retryable_errors: List[ErrorType] = None

    def __post_init__(self):
        if self.retryable_errors is None:
            self.retryable_errors = [
                error_type for error_type in ErrorType
                if error_type != ErrorType.CANCELLED
            ]


@dataclass
class ErrorInfo:
    """Information about a failed attempt"""
    target: str
    error_type: ErrorType
    message: str
    timestamp: float
    attempt: int
    duration: Optional[float] = None


class ErrorHandler:
    """Retry combinator: attempt N times with backoff, surface the last error"""

    def __init__(self, retry_config: RetryConfig = None):
        self.retry_config = retry_config or RetryConfig()
        self.error_history: List[ErrorInfo] = []
        self.failed_targets: Dict[str, List[ErrorInfo]] = defaultdict(list)

    def classify_error(self, error: Exception) -> ErrorType:
        """Classify an error into an ErrorType"""
        if isinstance(error, CaptureError):
            return error.error_type
        if isinstance(error, asyncio.TimeoutError):
            return ErrorType.RENDER_TIMEOUT
        if isinstance(error, OSError):
            return ErrorType.STORAGE_ERROR
        return ErrorType.UNKNOWN_ERROR

    def is_retryable(self, error_type: ErrorType, attempt: int) -> bool:
        """Determine if an error should be retried"""
        if attempt >= self.retry_config.max_attempts:
            return False

        return error_type in self.retry_config.retryable_errors

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay before retry using exponential backoff with jitter"""
        delay = self.retry_config.base_delay * (
            self.retry_config.exponential_base ** (attempt - 1)
        )
        delay = min(delay, self.retry_config.max_delay)

        if self.retry_config.jitter:
            delay += delay * 0.1 * random.random()

        return delay

    async def execute_with_retry(self, func: Callable, target: str, *args, **kwargs) -> Any:
        """Run ``func`` until it succeeds or attempts run out; re-raise the last error"""
        max_attempts = self.retry_config.max_attempts

        for attempt in range(1, max_attempts + 1):
            start_time = time.time()

            try:
                result = await func(*args, **kwargs)

                if target in self.failed_targets:
                    logger.info(f"{target} succeeded on attempt {attempt}/{max_attempts}")
                    del self.failed_targets[target]

                return result

            except Exception as error:
                error_type = self.classify_error(error)
                error_info = ErrorInfo(
                    target=target,
                    error_type=error_type,
                    message=str(error),
                    timestamp=time.time(),
                    attempt=attempt,
                    duration=time.time() - start_time
                )
                self.error_history.append(error_info)
                self.failed_targets[target].append(error_info)

                log_level = logging.WARNING if attempt < max_attempts else logging.ERROR
                logger.log(
                    log_level,
                    f"Attempt {attempt}/{max_attempts} failed for {target}: "
                    f"{error_type.value} - {error}"
                )

                if not self.is_retryable(error_type, attempt):
                    if attempt < max_attempts:
                        logger.error(f"Non-retryable error for {target}, giving up")
                    raise

                delay = self.calculate_delay(attempt)
                logger.info(f"Retrying {target} in {delay:.1f}s (attempt {attempt + 1})")
                await asyncio.sleep(delay)

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all errors encountered"""
        if not self.error_history:
            return {"total_errors": 0}

        error_counts = defaultdict(int)
        for error in self.error_history:
            error_counts[error.error_type.value] += 1

        return {
            "total_errors": len(self.error_history),
            "failed_targets": self.get_failed_targets(),
            "error_types": dict(error_counts),
        }

    def get_failed_targets(self) -> List[str]:
        """Targets whose most recent attempt failed"""
        return list(self.failed_targets.keys())
