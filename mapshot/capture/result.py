"""
Capture Result - Data structure for a written capture
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class CaptureResult:
    """Result of capturing a single target"""
    target: str
    url: str
    path: str
    byte_length: int
    region_kind: str
    selector: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    attempts: int = 1
    duration: float = 0.0
