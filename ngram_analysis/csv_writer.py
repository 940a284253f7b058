"""
CSV Export Utility for N-gram Analysis
Renders n-gram tables and negative keyword lists as CSV text.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from .metrics import is_no_conversions
from .ngram_generator import NgramEntity

logger = logging.getLogger(__name__)

NGRAM_HEADERS = ['N-gram', 'Frequency', 'Impressions', 'Clicks', 'Cost', 'Conversions',
                 'CTR %', 'CPC', 'Conv Rate %', 'Cost/Conv']
PERFORMANCE_HEADER = 'Performance'
INFINITY_SYMBOL = '∞'
TWO_PLACES = Decimal('0.01')


def quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def format_number(value: float) -> str:
    """Plain number: whole values without a decimal point (1000, not 1000.0)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_fixed(value: float) -> str:
    """Two decimals, exact binary ties rounded up (2.125 -> 2.13)."""
    return str(Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def format_cost_per_conversion(value: float) -> str:
    if is_no_conversions(value):
        return INFINITY_SYMBOL
    return format_fixed(value)


def ngram_row(entity: NgramEntity, include_performance: bool = False) -> str:
    fields = [
        quote(entity.text),
        format_number(entity.occurrence_count),
        format_number(entity.total_impressions),
        format_number(entity.total_clicks),
        format_fixed(entity.total_cost),
        format_number(entity.total_conversions),
        format_fixed(entity.ctr),
        format_fixed(entity.cpc),
        format_fixed(entity.conversion_rate),
        format_cost_per_conversion(entity.cost_per_conversion),
    ]
    if include_performance:
        fields.append(entity.performance_tier)
    return ','.join(fields)


def write_text(text: str, filename: str) -> None:
    with open(filename, 'w', encoding='utf-8', newline='') as f:
        f.write(text)
    logger.debug("Wrote %d bytes to %s", len(text.encode('utf-8')), filename)


def export_ngrams_csv(entities: Iterable[NgramEntity], filename: Optional[str] = None,
                      include_performance: bool = False) -> str:
    """
    Render n-gram entities as CSV.

    Args:
        entities: N-grams in the order they should appear
        filename: Where to save the CSV; only the text is returned when omitted
        include_performance: Append the performance tier column

    Returns:
        CSV text, lines joined with '\\n' and no trailing newline
    """
    headers = NGRAM_HEADERS + [PERFORMANCE_HEADER] if include_performance else NGRAM_HEADERS
    lines: List[str] = [','.join(headers)]
    lines.extend(ngram_row(entity, include_performance) for entity in entities)
    text = '\n'.join(lines)

    if filename:
        write_text(text, filename)
    return text


def export_negative_keywords_csv(keywords: Iterable[str], filename: Optional[str] = None) -> str:
    """One quoted keyword per line, no header."""
    text = '\n'.join(quote(keyword) for keyword in keywords)

    if filename:
        write_text(text, filename)
    return text
