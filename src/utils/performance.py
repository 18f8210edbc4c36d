"""
Performance monitoring utilities for pattern detection.

Tracks wall-clock time of a detection run and its stages (filtering,
grouping, pattern analysis) and logs the totals with a level that escalates
for slow runs.
"""

import time
import logging
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

SLOW_OPERATION_MS = 2000
VERY_SLOW_OPERATION_MS = 10000


@dataclass
class DetectionMetrics:
    """Container for detection run metrics."""
    operation_name: str
    start_time: float = field(default_factory=time.perf_counter)
    elapsed_ms: Optional[float] = None
    transaction_count: int = 0
    skipped_count: int = 0
    groups_analyzed: int = 0
    patterns_detected: int = 0
    stage_ms: Dict[str, float] = field(default_factory=dict)

    def finish(self) -> None:
        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000

    def to_dict(self) -> Dict[str, Any]:
        return {
            'operation_name': self.operation_name,
            'elapsed_ms': self.elapsed_ms,
            'transaction_count': self.transaction_count,
            'skipped_count': self.skipped_count,
            'groups_analyzed': self.groups_analyzed,
            'patterns_detected': self.patterns_detected,
            'stage_ms': dict(self.stage_ms),
            'timestamp': datetime.now(timezone.utc).isoformat()
        }

    def log_metrics(self) -> None:
        metrics = self.to_dict()
        elapsed = self.elapsed_ms or 0.0

        if elapsed > VERY_SLOW_OPERATION_MS:
            logger.error(
                f"SLOW DETECTION: {self.operation_name} took {elapsed:.2f}ms",
                extra={'detection_metrics': metrics}
            )
        elif elapsed > SLOW_OPERATION_MS:
            logger.warning(
                f"Slow detection: {self.operation_name} took {elapsed:.2f}ms",
                extra={'detection_metrics': metrics}
            )
        else:
            logger.info(
                f"Detection completed: {self.operation_name} in {elapsed:.2f}ms - "
                f"{self.transaction_count} transactions, {self.groups_analyzed} groups, "
                f"{self.patterns_detected} patterns",
                extra={'detection_metrics': metrics}
            )

        if self.stage_ms:
            breakdown = ', '.join(f"{name}: {ms:.2f}ms" for name, ms in self.stage_ms.items())
            logger.debug(f"Detection breakdown for {self.operation_name}: {breakdown}")


class _StageTimer:
    def __init__(self, metrics: DetectionMetrics, stage: str):
        self.metrics = metrics
        self.stage = stage
        self.start_time = 0.0

    def __enter__(self) -> '_StageTimer':
        self.start_time = time.perf_counter()
        logger.debug(f"Starting stage: {self.stage}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        elapsed_ms = (time.perf_counter() - self.start_time) * 1000
        self.metrics.stage_ms[self.stage] = elapsed_ms
        logger.debug(f"Completed stage {self.stage} in {elapsed_ms:.2f}ms")


class DetectionPerformanceTracker:
    """
    Context manager for detection performance tracking.

    Usage:
        with DetectionPerformanceTracker("detect_patterns") as tracker:
            tracker.set_transaction_count(len(transactions))

            with tracker.stage('grouping'):
                groups = group(transactions)

            with tracker.stage('pattern_analysis'):
                patterns = analyze(groups)
            tracker.set_patterns_detected(len(patterns))
    """

    def __init__(self, operation_name: str):
        self.metrics = DetectionMetrics(operation_name=operation_name)

    def __enter__(self) -> 'DetectionPerformanceTracker':
        logger.debug(f"Starting detection: {self.metrics.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.metrics.finish()
        self.metrics.log_metrics()

    def stage(self, stage_name: str) -> _StageTimer:
        return _StageTimer(self.metrics, stage_name)

    def set_transaction_count(self, count: int) -> None:
        self.metrics.transaction_count = count

    def set_skipped_count(self, count: int) -> None:
        self.metrics.skipped_count = count

    def set_groups_analyzed(self, count: int) -> None:
        self.metrics.groups_analyzed = count

    def set_patterns_detected(self, count: int) -> None:
        self.metrics.patterns_detected = count
