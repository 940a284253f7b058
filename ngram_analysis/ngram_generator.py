"""
N-gram Generator Utility for N-gram Analysis
Extracts 1-4 word n-grams from search terms and rolls up their metrics.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence

from .classification import get_classifier
from .config import AnalysisConfig
from .csv_parser import RowRecord
from .metrics import (calculate_cost_per_conversion, calculate_conversion_rate, calculate_cpc,
                      calculate_ctr, is_no_conversions)

logger = logging.getLogger(__name__)

# Result attribute for each n-gram size
SIZE_NAMES = {
    1: 'unigrams',
    2: 'bigrams',
    3: 'trigrams',
    4: 'fourgrams',
}


class NgramEntity(NamedTuple):
    """Aggregated performance of one distinct n-gram."""
    text: str
    size: int
    occurrence_count: int
    total_impressions: float
    total_clicks: float
    total_cost: float
    total_conversions: float
    ctr: float
    cpc: float
    conversion_rate: float
    cost_per_conversion: float
    performance_tier: str

    def to_dict(self) -> dict:
        return {
            'ngram': self.text,
            'size': self.size,
            'frequency': self.occurrence_count,
            'totalImpressions': self.total_impressions,
            'totalClicks': self.total_clicks,
            'totalCost': self.total_cost,
            'totalConversions': self.total_conversions,
            'ctr': self.ctr,
            'cpc': self.cpc,
            'conversionRate': self.conversion_rate,
            # JSON has no infinity
            'costPerConversion': None if is_no_conversions(self.cost_per_conversion) else self.cost_per_conversion,
            'performanceScore': self.performance_tier,
        }


class Summary(NamedTuple):
    """Campaign totals over every parsed row, regardless of analysis filters."""
    total_search_terms: int
    total_impressions: float
    total_clicks: float
    total_cost: float
    total_conversions: float
    avg_ctr: float
    avg_cpc: float
    avg_conversion_rate: float

    def to_dict(self) -> dict:
        return {
            'totalSearchTerms': self.total_search_terms,
            'totalImpressions': self.total_impressions,
            'totalClicks': self.total_clicks,
            'totalCost': self.total_cost,
            'totalConversions': self.total_conversions,
            'avgCtr': self.avg_ctr,
            'avgCpc': self.avg_cpc,
            'avgConversionRate': self.avg_conversion_rate,
        }


class AnalysisResults(NamedTuple):
    unigrams: List[NgramEntity]
    bigrams: List[NgramEntity]
    trigrams: List[NgramEntity]
    fourgrams: List[NgramEntity]
    summary: Summary

    def by_size(self, size: int) -> List[NgramEntity]:
        return getattr(self, SIZE_NAMES[size])

    def all_ngrams(self) -> List[NgramEntity]:
        return self.unigrams + self.bigrams + self.trigrams + self.fourgrams

    def to_dict(self) -> dict:
        result = {name: [entity.to_dict() for entity in self.by_size(size)]
                  for size, name in SIZE_NAMES.items()}
        result['summary'] = self.summary.to_dict()
        return result


def tokenize(term: str) -> List[str]:
    """Split a search term into words on any whitespace."""
    return term.split()


def generate_ngrams(text: str, n: int) -> List[str]:
    """
    Slide a window of n words across the text.

    Args:
        text: Search term
        n: Words per n-gram

    Returns:
        The len(words) - n + 1 overlapping n-grams, or [] if the term is shorter than n
    """
    words = tokenize(text)
    if n < 1 or len(words) < n:
        return []

    return [' '.join(words[i:i + n]) for i in range(len(words) - n + 1)]


def filter_rows(rows: Iterable[RowRecord], config: AnalysisConfig) -> List[RowRecord]:
    """Rows meeting the minimum impressions, clicks and cost of the config."""
    return [
        row for row in rows
        if row.impressions >= config.min_impressions
        and row.clicks >= config.min_clicks
        and row.cost >= config.min_cost
    ]


def accumulate_ngrams(rows: Iterable[RowRecord], n: int) -> Dict[str, dict]:
    """
    Sum row metrics per n-gram of size n.

    A row contributes once per window position, so a term repeating an
    n-gram adds to it twice.
    """
    ngram_data = defaultdict(lambda: {'frequency': 0, 'impressions': 0, 'clicks': 0,
                                      'cost': 0, 'conversions': 0})

    for row in rows:
        for ngram in generate_ngrams(row.phrase, n):
            stats = ngram_data[ngram]
            stats['frequency'] += 1
            stats['impressions'] += row.impressions
            stats['clicks'] += row.clicks
            stats['cost'] += row.cost
            stats['conversions'] += row.conversions

    return ngram_data


def build_entities(ngram_data: Dict[str, dict], n: int, classifier) -> List[NgramEntity]:
    """Turn accumulated sums into classified entities, highest impressions first."""
    entities = []

    for ngram, stats in ngram_data.items():
        entity = NgramEntity(
            text=ngram,
            size=n,
            occurrence_count=stats['frequency'],
            total_impressions=stats['impressions'],
            total_clicks=stats['clicks'],
            total_cost=stats['cost'],
            total_conversions=stats['conversions'],
            ctr=calculate_ctr(stats['clicks'], stats['impressions']),
            cpc=calculate_cpc(stats['cost'], stats['clicks']),
            conversion_rate=calculate_conversion_rate(stats['conversions'], stats['clicks']),
            cost_per_conversion=calculate_cost_per_conversion(stats['cost'], stats['conversions']),
            performance_tier='',
        )
        entities.append(entity._replace(performance_tier=classifier.classify(entity)))

    # sorted() is stable, so ties keep first-seen order
    return sorted(entities, key=lambda entity: entity.total_impressions, reverse=True)


def summarize(rows: Sequence[RowRecord]) -> Summary:
    """
    Totals and averages across all rows.

    Callers pass the complete row set, not the threshold-filtered one, so the
    summary reflects true campaign totals.
    """
    total_impressions = sum(row.impressions for row in rows)
    total_clicks = sum(row.clicks for row in rows)
    total_cost = sum(row.cost for row in rows)
    total_conversions = sum(row.conversions for row in rows)

    return Summary(
        total_search_terms=len(rows),
        total_impressions=total_impressions,
        total_clicks=total_clicks,
        total_cost=total_cost,
        total_conversions=total_conversions,
        avg_ctr=calculate_ctr(total_clicks, total_impressions),
        avg_cpc=calculate_cpc(total_cost, total_clicks),
        avg_conversion_rate=calculate_conversion_rate(total_conversions, total_clicks),
    )


def analyze(rows: Sequence[RowRecord], config: Optional[AnalysisConfig] = None) -> AnalysisResults:
    """
    Run the n-gram analysis.

    Args:
        rows: Normalized search term records
        config: Sizes, inclusion minimums and classification settings

    Returns:
        AnalysisResults with one entity list per size and a summary over all rows
    """
    config = config or AnalysisConfig()
    rows = list(rows)
    classifier = get_classifier(config)

    filtered = filter_rows(rows, config)
    logger.debug("%d of %d rows pass the inclusion filter", len(filtered), len(rows))

    ngrams = {}
    for n in sorted(config.ngram_sizes):
        ngrams[n] = build_entities(accumulate_ngrams(filtered, n), n, classifier)
        logger.debug("Found %d distinct %s", len(ngrams[n]), SIZE_NAMES[n])

    return AnalysisResults(
        unigrams=ngrams.get(1, []),
        bigrams=ngrams.get(2, []),
        trigrams=ngrams.get(3, []),
        fourgrams=ngrams.get(4, []),
        summary=summarize(rows),
    )


def get_ngram_summary(results: AnalysisResults) -> dict:
    """Count distinct n-grams per size."""
    return {f'{name}_count': len(results.by_size(size)) for size, name in SIZE_NAMES.items()}
