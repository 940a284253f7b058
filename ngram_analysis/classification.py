"""
Performance Classification for N-gram Analysis
Rates each n-gram as 'good', 'warning' or 'poor' from its derived metrics.
"""

from typing import Optional

from .config import AnalysisConfig, PerformanceThresholds

GOOD = 'good'
WARNING = 'warning'
POOR = 'poor'


class DefaultClassifier:
    """
    Fixed benchmark rule used when the caller supplies no thresholds.

    Good: CTR above 3%, conversion rate above 2% and at least one conversion.
    Poor: CTR below 1%, or conversion rate below 0.5% with CPC above 5.
    """

    def classify(self, entity) -> str:
        if entity.ctr > 3 and entity.conversion_rate > 2 and entity.total_conversions > 0:
            return GOOD

        if entity.ctr < 1 or (entity.conversion_rate < 0.5 and entity.cpc > 5):
            return POOR

        return WARNING


class ThresholdClassifier:
    """
    Rule driven by caller-supplied thresholds and the optimization mode.

    In 'conversions' mode an n-gram needs good CTR, CPC and conversion rate
    plus the minimum number of conversions to be rated good. In 'clicks'
    mode conversion rate is ignored and the minimum clicks gate applies.
    """

    def __init__(self, thresholds: PerformanceThresholds, optimization_mode: str = 'conversions'):
        self.thresholds = thresholds
        self.optimization_mode = optimization_mode

    def classify(self, entity) -> str:
        if self.optimization_mode == 'clicks':
            return self._classify_clicks(entity)
        return self._classify_conversions(entity)

    def _classify_conversions(self, entity) -> str:
        t = self.thresholds

        if (entity.ctr >= t.ctr.good
                and entity.cpc <= t.cpc.good
                and entity.conversion_rate >= t.conversion_rate.good
                and entity.total_conversions >= t.min_volume.conversions):
            return GOOD

        if entity.ctr < t.ctr.poor or (entity.conversion_rate < t.conversion_rate.poor
                                       and entity.cpc > t.cpc.poor):
            return POOR

        return WARNING

    def _classify_clicks(self, entity) -> str:
        t = self.thresholds

        if (entity.ctr >= t.ctr.good
                and entity.cpc <= t.cpc.good
                and entity.total_clicks >= t.min_volume.clicks):
            return GOOD

        if entity.ctr < t.ctr.poor or entity.cpc > t.cpc.poor:
            return POOR

        return WARNING


def get_classifier(config: Optional[AnalysisConfig] = None):
    """Pick the classification rule for a run."""
    if config is None or config.performance_thresholds is None:
        return DefaultClassifier()
    return ThresholdClassifier(config.performance_thresholds, config.optimization_mode)
