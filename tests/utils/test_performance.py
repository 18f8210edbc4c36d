"""
Unit tests for detection performance tracking.
"""

import logging

from utils.performance import DetectionPerformanceTracker


class TestDetectionPerformanceTracker:

    def test_records_counts_and_stages(self):
        with DetectionPerformanceTracker("unit_run") as tracker:
            tracker.set_transaction_count(10)
            tracker.set_skipped_count(1)
            with tracker.stage("grouping"):
                pass
            tracker.set_groups_analyzed(3)
            tracker.set_patterns_detected(2)

        metrics = tracker.metrics.to_dict()
        assert metrics["operation_name"] == "unit_run"
        assert metrics["transaction_count"] == 10
        assert metrics["skipped_count"] == 1
        assert metrics["groups_analyzed"] == 3
        assert metrics["patterns_detected"] == 2
        assert "grouping" in metrics["stage_ms"]
        assert metrics["elapsed_ms"] >= 0

    def test_logs_summary_on_exit(self, caplog):
        with caplog.at_level(logging.INFO, logger="utils.performance"):
            with DetectionPerformanceTracker("logged_run"):
                pass
        assert any("logged_run" in record.getMessage() for record in caplog.records)
