"""
Metrics Calculation Utility for N-gram Analysis
Calculates CTR, CPC, conversion rate and cost per conversion from raw totals.
"""

# Cost per conversion when nothing converted
NO_CONVERSIONS = float('inf')


def calculate_ctr(clicks: float, impressions: float) -> float:
    """
    Calculate Click-Through Rate (CTR).

    CTR = (Clicks / Impressions) * 100

    Args:
        clicks: Number of clicks
        impressions: Number of impressions

    Returns:
        CTR as a percentage, or 0 if impressions is 0
    """
    if impressions == 0:
        return 0.0
    return (clicks / impressions) * 100


def calculate_conversion_rate(conversions: float, clicks: float) -> float:
    """
    Calculate Conversion Rate.

    Conversion Rate = (Conversions / Clicks) * 100

    Args:
        conversions: Number of conversions (may be fractional)
        clicks: Number of clicks

    Returns:
        Conversion rate as a percentage, or 0 if clicks is 0
    """
    if clicks == 0:
        return 0.0
    return (conversions / clicks) * 100


def calculate_cpc(cost: float, clicks: float) -> float:
    """
    Calculate Cost Per Click (CPC).

    CPC = Cost / Clicks

    Returns:
        CPC, or 0 if clicks is 0
    """
    if clicks == 0:
        return 0.0
    return cost / clicks


def calculate_cost_per_conversion(cost: float, conversions: float) -> float:
    """Cost / Conversions, or NO_CONVERSIONS (infinity) if nothing converted."""
    if conversions == 0:
        return NO_CONVERSIONS
    return cost / conversions


def is_no_conversions(value: float) -> bool:
    return value == NO_CONVERSIONS
