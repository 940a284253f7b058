"""
Analysis Configuration for N-gram Analysis
Value objects controlling a run: n-gram sizes, inclusion minimums,
optimization mode and performance thresholds.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional


VALID_NGRAM_SIZES = frozenset({1, 2, 3, 4})
OPTIMIZATION_MODES = ('conversions', 'clicks')


class ConfigError(ValueError):
    """Raised when a caller supplies an invalid analysis configuration."""


@dataclass(frozen=True)
class MetricThreshold:
    good: float
    poor: float


@dataclass(frozen=True)
class VolumeThreshold:
    clicks: float
    conversions: float


@dataclass(frozen=True)
class PerformanceThresholds:
    """
    Per-metric good/poor cutoffs plus the minimum volume an n-gram needs
    before it can be rated "good".
    """
    ctr: MetricThreshold
    cpc: MetricThreshold
    conversion_rate: MetricThreshold
    min_volume: VolumeThreshold

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'PerformanceThresholds':
        """
        Build thresholds from a caller-supplied mapping.

        Accepts the camelCase keys used by the browser client
        (``conversionRate``, ``minVolume``) as well as snake_case. Missing
        entries fall back to DEFAULT_THRESHOLDS.
        """
        if isinstance(data, PerformanceThresholds):
            return data

        defaults = DEFAULT_THRESHOLDS
        ctr = _get(data, 'ctr')
        cpc = _get(data, 'cpc')
        conv = _get(data, 'conversionRate', 'conversion_rate')
        volume = _get(data, 'minVolume', 'min_volume')

        return cls(
            ctr=MetricThreshold(
                good=_number(_get(ctr, 'good'), defaults.ctr.good, 'ctr.good'),
                poor=_number(_get(ctr, 'poor'), defaults.ctr.poor, 'ctr.poor'),
            ),
            cpc=MetricThreshold(
                good=_number(_get(cpc, 'good'), defaults.cpc.good, 'cpc.good'),
                poor=_number(_get(cpc, 'poor'), defaults.cpc.poor, 'cpc.poor'),
            ),
            conversion_rate=MetricThreshold(
                good=_number(_get(conv, 'good'), defaults.conversion_rate.good, 'conversionRate.good'),
                poor=_number(_get(conv, 'poor'), defaults.conversion_rate.poor, 'conversionRate.poor'),
            ),
            min_volume=VolumeThreshold(
                clicks=_number(_get(volume, 'clicks'), defaults.min_volume.clicks, 'minVolume.clicks'),
                conversions=_number(_get(volume, 'conversions'), defaults.min_volume.conversions,
                                    'minVolume.conversions'),
            ),
        )

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            'ctr': {'good': self.ctr.good, 'poor': self.ctr.poor},
            'cpc': {'good': self.cpc.good, 'poor': self.cpc.poor},
            'conversionRate': {'good': self.conversion_rate.good, 'poor': self.conversion_rate.poor},
            'minVolume': {'clicks': self.min_volume.clicks, 'conversions': self.min_volume.conversions},
        }


def _thresholds(ctr, cpc, conv, clicks, conversions) -> PerformanceThresholds:
    return PerformanceThresholds(
        ctr=MetricThreshold(*ctr),
        cpc=MetricThreshold(*cpc),
        conversion_rate=MetricThreshold(*conv),
        min_volume=VolumeThreshold(clicks, conversions),
    )


# Industry benchmarks: (good, poor) per metric, then minimum clicks / conversions
INDUSTRY_PRESETS = {
    'general': ('General/E-commerce', _thresholds((3, 1), (2, 5), (2, 0.5), 10, 1)),
    'legal': ('Legal/Finance', _thresholds((2, 0.8), (15, 50), (3, 1), 5, 1)),
    'healthcare': ('Healthcare', _thresholds((2.5, 1), (8, 25), (3, 0.8), 8, 1)),
    'saas': ('SaaS/B2B', _thresholds((4, 1.5), (5, 15), (5, 1), 15, 2)),
    'retail': ('Retail/Shopping', _thresholds((4, 1.5), (1.5, 4), (4, 1), 20, 2)),
}

DEFAULT_THRESHOLDS = INDUSTRY_PRESETS['general'][1]


def get_preset(name: str) -> PerformanceThresholds:
    """Look up an industry preset by key (e.g. 'legal')."""
    try:
        return INDUSTRY_PRESETS[name][1]
    except KeyError:
        raise ConfigError(
            f"Unknown threshold preset '{name}'. Choose one of: {', '.join(INDUSTRY_PRESETS)}"
        ) from None


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Settings for a single analysis run.

    ``performance_thresholds`` selects the classification rule: when it is
    None the fixed default rule is used, otherwise the thresholds are
    applied according to ``optimization_mode``.
    """
    ngram_sizes: FrozenSet[int] = field(default_factory=lambda: frozenset({1, 2, 3}))
    min_impressions: float = 10
    min_clicks: float = 1
    min_cost: float = 0.01
    optimization_mode: str = 'conversions'
    performance_thresholds: Optional[PerformanceThresholds] = None

    def __post_init__(self):
        sizes = frozenset(_size(size) for size in self.ngram_sizes)
        invalid = sorted(sizes - VALID_NGRAM_SIZES)
        if invalid:
            raise ConfigError(f"Unsupported n-gram sizes: {invalid}. Sizes must be between 1 and 4.")
        object.__setattr__(self, 'ngram_sizes', sizes)

        for name in ('min_impressions', 'min_clicks', 'min_cost'):
            value = _number(getattr(self, name), 0, name)
            if value < 0:
                raise ConfigError(f"{name} must be zero or greater, got {value}")
            object.__setattr__(self, name, value)

        if self.optimization_mode not in OPTIMIZATION_MODES:
            raise ConfigError(
                f"Unknown optimization mode '{self.optimization_mode}'. "
                f"Expected one of: {', '.join(OPTIMIZATION_MODES)}"
            )

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'AnalysisConfig':
        """
        Build a configuration from the caller's settings mapping.

        Keys may be camelCase (``ngramSizes``, ``minImpressions``) or
        snake_case. A ``preset`` key names an industry preset and is
        overridden by an explicit ``performanceThresholds`` entry.
        """
        data = data or {}
        defaults = cls()

        sizes = _get(data, 'ngramSizes', 'ngram_sizes')
        thresholds = _get(data, 'performanceThresholds', 'performance_thresholds')
        preset = _get(data, 'preset')

        if thresholds is not None:
            thresholds = PerformanceThresholds.from_dict(thresholds)
        elif preset:
            thresholds = get_preset(preset)

        return cls(
            ngram_sizes=frozenset(_iter_sizes(sizes)) if sizes is not None else defaults.ngram_sizes,
            min_impressions=_number(_get(data, 'minImpressions', 'min_impressions'),
                                    defaults.min_impressions, 'minImpressions'),
            min_clicks=_number(_get(data, 'minClicks', 'min_clicks'), defaults.min_clicks, 'minClicks'),
            min_cost=_number(_get(data, 'minCost', 'min_cost'), defaults.min_cost, 'minCost'),
            optimization_mode=_get(data, 'optimizationMode', 'optimization_mode') or defaults.optimization_mode,
            performance_thresholds=thresholds,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ngramSizes': sorted(self.ngram_sizes),
            'minImpressions': self.min_impressions,
            'minClicks': self.min_clicks,
            'minCost': self.min_cost,
            'optimizationMode': self.optimization_mode,
            'performanceThresholds': (self.performance_thresholds.to_dict()
                                      if self.performance_thresholds else None),
        }


def _get(data: Optional[Mapping[str, Any]], *keys: str) -> Any:
    """Return the first key present in data, or None."""
    if not data:
        return None
    for key in keys:
        if key in data:
            return data[key]
    return None


def _number(value: Any, default: float, name: str) -> float:
    if value is None or value == '':
        return float(default)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}") from None


def _size(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"N-gram size must be an integer, got {value!r}")
    try:
        size = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"N-gram size must be an integer, got {value!r}") from None
    if size != value and str(size) != str(value).strip():
        raise ConfigError(f"N-gram size must be an integer, got {value!r}")
    return size


def _iter_sizes(sizes: Any) -> Iterable[int]:
    if isinstance(sizes, (str, bytes)):
        sizes = [part for part in str(sizes).split(',') if part.strip()]
    return [_size(size) for size in sizes]
