"""
Negative Keyword Suggestions for N-gram Analysis
Derives negative keyword candidates and highlight lists from analysis results.
"""

from typing import Iterable, List

from .classification import GOOD, POOR
from .ngram_generator import AnalysisResults, NgramEntity, Summary

MAX_NEGATIVE_KEYWORDS = 100
MIN_OCCURRENCES_FOR_NEGATIVE = 2

# Opportunity criteria: visible, clicked, but not yet converting
OPPORTUNITY_MIN_IMPRESSIONS = 1000
OPPORTUNITY_MIN_CTR = 2


def derive_negative_keywords(entities: Iterable[NgramEntity]) -> List[str]:
    """
    Pick negative keyword candidates.

    Poor performers seen at least twice, in the order given (highest
    impressions first for engine output), capped at 100.
    """
    negatives = [
        entity.text for entity in entities
        if entity.performance_tier == POOR and entity.occurrence_count >= MIN_OCCURRENCES_FOR_NEGATIVE
    ]
    return negatives[:MAX_NEGATIVE_KEYWORDS]


def top_performers(results: AnalysisResults, limit: int = 10) -> List[NgramEntity]:
    """Good n-grams with conversions, most conversions first."""
    performers = [entity for entity in results.all_ngrams()
                  if entity.performance_tier == GOOD and entity.total_conversions > 0]
    performers.sort(key=lambda entity: entity.total_conversions, reverse=True)
    return performers[:limit]


def poor_performers(results: AnalysisResults, limit: int = 10) -> List[NgramEntity]:
    """Poor n-grams, most expensive first."""
    performers = [entity for entity in results.all_ngrams() if entity.performance_tier == POOR]
    performers.sort(key=lambda entity: entity.total_cost, reverse=True)
    return performers[:limit]


def find_opportunities(results: AnalysisResults, limit: int = 10) -> List[NgramEntity]:
    """High-traffic n-grams with a healthy CTR that have not converted yet."""
    opportunities = [
        entity for entity in results.all_ngrams()
        if entity.total_impressions > OPPORTUNITY_MIN_IMPRESSIONS
        and entity.total_conversions == 0
        and entity.ctr > OPPORTUNITY_MIN_CTR
    ]
    opportunities.sort(key=lambda entity: entity.total_impressions, reverse=True)
    return opportunities[:limit]


def suggest_optimization_mode(summary: Summary) -> str:
    """Conversions mode when the report has conversion data, clicks mode otherwise."""
    return 'conversions' if summary.total_conversions > 0 else 'clicks'


def get_suggestion_summary(results: AnalysisResults) -> dict:
    """Count entities per performance tier across all sizes."""
    counts = {'good': 0, 'warning': 0, 'poor': 0}
    for entity in results.all_ngrams():
        counts[entity.performance_tier] += 1
    counts['negative_keywords'] = len(derive_negative_keywords(results.all_ngrams()))
    return counts
