"""
Anomaly detection over null-aware numeric columns.

This subpackage exposes the population z-score detector:

- ZScoreDetector: detector class with the statistics helpers.
- detect_zscore: flag values whose z-score exceeds a threshold.
"""

from .zscore import ZScoreDetector, detect_zscore

__all__ = ["ZScoreDetector", "detect_zscore"]
