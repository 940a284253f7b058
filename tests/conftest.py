"""
Shared fixtures for the n-gram analysis tests.
"""

import pytest

from ngram_analysis.config import AnalysisConfig
from ngram_analysis.csv_parser import RowRecord


GOOGLE_ADS_EXPORT = (
    "Search terms report\n"
    "\"January 1, 2024 - January 31, 2024\"\n"
    "Search term,Match type,Campaign,Clicks,Impr.,CTR,Avg. CPC,Cost,Conv. rate,Conversions\n"
    "good car deals,Exact match,Cars,40,\"1,000\",4.00%,$2.00,$80.00,12.50%,5\n"
    "cheap car rental,Phrase match,Cars,2,500,0.40%,$3.00,$6.00,0.00%,0\n"
    "car rental near me,Broad match,Cars,10,\"2,000\",0.50%,$1.50,$15.00,10.00%,1\n"
    "empty placeholder,Broad match,Cars,0,0,--,--,--,--,0\n"
    "Total: Search terms,,,52,\"3,500\",1.49%,$1.94,$101.00,11.54%,6\n"
)


def make_row(phrase, impressions=0, clicks=0, cost=0, conversions=0):
    return RowRecord(phrase=phrase, impressions=impressions, clicks=clicks,
                     cost=cost, conversions=conversions)


@pytest.fixture
def open_config():
    """Configuration that admits every row and uses the default rule."""
    return AnalysisConfig(ngram_sizes={1, 2, 3, 4}, min_impressions=0, min_clicks=0, min_cost=0)


@pytest.fixture
def sample_rows():
    return [
        make_row('good car deals', 1000, 40, 80, 5),
        make_row('cheap car rental', 500, 2, 6, 0),
        make_row('car rental near me', 2000, 10, 15, 1),
        make_row('cheap cheap flights', 300, 1, 9, 0),
    ]


@pytest.fixture
def report_file(tmp_path):
    path = tmp_path / 'search_terms.csv'
    path.write_text(GOOGLE_ADS_EXPORT, encoding='utf-8')
    return str(path)
