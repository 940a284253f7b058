"""
CSV Parser Utility for N-gram Analysis
Normalizes raw search term report rows into typed records, tolerating the
column names, number formats and summary rows of common ad platform exports.
"""

import logging
import math
import re
from io import StringIO
from typing import Any, Iterable, List, Mapping, NamedTuple, Optional, Sequence

import pandas as pd

logger = logging.getLogger(__name__)


class ReportParseError(Exception):
    """Raised when a report cannot be read as a search term report."""


class RowRecord(NamedTuple):
    """One search phrase with its metrics for the reporting period."""
    phrase: str
    impressions: float
    clicks: float
    cost: float
    conversions: float
    ctr: Optional[float] = None
    cpc: Optional[float] = None
    conversion_rate: Optional[float] = None


# Column aliases for each field, tried in order (case-sensitive)
COLUMN_MAPPING = {
    'phrase': ['Search term', 'Search Term', 'search_term', 'Customer Search Term'],
    'impressions': ['Impr.', 'Impressions', 'impressions'],
    'clicks': ['Clicks', 'clicks'],
    'cost': ['Cost', 'cost', 'Spend'],
    'conversions': ['Conversions', 'conversions'],
    'ctr': ['CTR', 'ctr'],
    'cpc': ['Avg. CPC', 'CPC', 'cpc'],
    'conversion_rate': ['Conv. rate', 'conv_rate', 'conversion_rate'],
}

# A line is the header when it contains all of these (lowercased)
HEADER_KEYWORDS = ('search term', 'clicks', 'cost')

# Footer/summary rows emitted by report exporters
SUMMARY_ROW_MARKERS = ('total:', 'total', 'search terms')

PLACEHOLDER_TOKENS = ('--', ' --')

# Quotes, thousands separators, whitespace, currency and percent symbols
NUMERIC_NOISE = re.compile(r'["\',\s%$€£¥₹]')

ENCODINGS = ['utf-8-sig', 'cp1252']


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def find_column_value(row: Mapping[str, Any], possible_names: Sequence[str]) -> Any:
    """Return the value of the first alias present in the row with a non-blank value."""
    for name in possible_names:
        value = row.get(name)
        if not _is_blank(value):
            return value
    return None


def has_column(row: Mapping[str, Any], possible_names: Sequence[str]) -> bool:
    return any(name in row for name in possible_names)


def parse_numeric(value: Any) -> float:
    """
    Parse a report cell into a number.

    Strips quotes, thousands separators and currency/percent symbols.
    Empty cells, the '--' placeholder and anything unparseable become 0.
    """
    if _is_blank(value):
        return 0.0

    if not isinstance(value, str):
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0.0
        return number if math.isfinite(number) else 0.0

    if value in PLACEHOLDER_TOKENS or value.strip() in PLACEHOLDER_TOKENS:
        return 0.0

    cleaned = NUMERIC_NOISE.sub('', value)
    try:
        number = float(cleaned)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def _parse_optional(row: Mapping[str, Any], possible_names: Sequence[str]) -> Optional[float]:
    if not has_column(row, possible_names):
        return None
    return parse_numeric(find_column_value(row, possible_names))


def parse_row(row: Mapping[str, Any]) -> RowRecord:
    """Map one raw field map onto a RowRecord (no admission check)."""
    phrase = find_column_value(row, COLUMN_MAPPING['phrase'])
    phrase = '' if phrase is None else str(phrase).lower().strip()

    return RowRecord(
        phrase=phrase,
        impressions=parse_numeric(find_column_value(row, COLUMN_MAPPING['impressions'])),
        clicks=parse_numeric(find_column_value(row, COLUMN_MAPPING['clicks'])),
        cost=parse_numeric(find_column_value(row, COLUMN_MAPPING['cost'])),
        conversions=parse_numeric(find_column_value(row, COLUMN_MAPPING['conversions'])),
        ctr=_parse_optional(row, COLUMN_MAPPING['ctr']),
        cpc=_parse_optional(row, COLUMN_MAPPING['cpc']),
        conversion_rate=_parse_optional(row, COLUMN_MAPPING['conversion_rate']),
    )


def is_summary_row(phrase: str) -> bool:
    return any(marker in phrase for marker in SUMMARY_ROW_MARKERS)


def is_admitted(record: RowRecord) -> bool:
    """
    Keep rows with a search phrase, that are not exporter summary rows,
    and that carry at least one positive metric.
    """
    if not record.phrase:
        return False
    if is_summary_row(record.phrase):
        return False
    return (record.impressions > 0 or record.clicks > 0
            or record.cost > 0 or record.conversions > 0)


def normalize(raw_rows: Iterable[Mapping[str, Any]]) -> List[RowRecord]:
    """
    Turn loosely-typed report rows into clean RowRecords.

    Args:
        raw_rows: Field maps (column name -> cell value) or a DataFrame

    Returns:
        Admitted records in input order
    """
    if isinstance(raw_rows, pd.DataFrame):
        raw_rows = raw_rows.to_dict('records')

    parsed = [parse_row(row) for row in raw_rows]
    records = [record for record in parsed if is_admitted(record)]

    logger.info("Parsed %d search terms from %d total rows", len(records), len(parsed))
    return records


def find_header_row(lines: Sequence[str]) -> int:
    """
    Find the index of the column header line in a raw export.

    Raises:
        ReportParseError: if no line looks like a search term report header
    """
    for idx, line in enumerate(lines):
        lowered = line.lower()
        if all(keyword in lowered for keyword in HEADER_KEYWORDS):
            return idx

    raise ReportParseError(
        "Could not find valid column headers. Please ensure this is a search term "
        "report with 'Search term', 'Clicks' and 'Cost' columns."
    )


def read_report_rows(text: str) -> pd.DataFrame:
    """
    Locate the header row in raw report text and parse everything from it
    onwards into a DataFrame of string cells.
    """
    lines = text.split('\n')
    header_idx = find_header_row(lines)
    if header_idx:
        logger.debug("Skipping %d preamble lines before the header row", header_idx)

    clean_content = '\n'.join(lines[header_idx:])
    try:
        # index_col=False: a trailing delimiter on data lines must not shift columns
        df = pd.read_csv(StringIO(clean_content), dtype=str, keep_default_na=False,
                         index_col=False, skip_blank_lines=True, on_bad_lines='skip')
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ReportParseError(f"Error parsing CSV. Please ensure this is a valid CSV file. Error: {e}") from e

    df.columns = [str(col).strip() for col in df.columns]
    logger.debug("Report columns: %s", list(df.columns))
    return df


def parse_report_text(text: str) -> List[RowRecord]:
    """Parse unstructured report text (with possible preamble lines) into records."""
    return normalize(read_report_rows(text))


def decode_report_bytes(raw: bytes) -> str:
    """Decode uploaded report bytes, trying common export encodings in turn."""
    for encoding in ENCODINGS:
        try:
            text = raw.decode(encoding)
        except UnicodeDecodeError:
            continue
        logger.debug("Decoded report with %s encoding", encoding)
        return text

    # latin-1 maps every byte, so this always succeeds
    logger.debug("Falling back to latin-1 decoding")
    return raw.decode('latin-1')


def parse_csv(file_path: str) -> List[RowRecord]:
    """
    Read a search term report file and return normalized records.

    Args:
        file_path: Path to the exported CSV report

    Returns:
        Admitted RowRecords in file order
    """
    with open(file_path, 'rb') as f:
        raw = f.read()
    return parse_report_text(decode_report_bytes(raw))


def get_data_summary(records: Sequence[RowRecord]) -> dict:
    """Row-level totals for a parsed report."""
    return {
        'total_rows': len(records),
        'unique_search_terms': len({record.phrase for record in records}),
        'total_impressions': sum(record.impressions for record in records),
        'total_clicks': sum(record.clicks for record in records),
        'total_cost': sum(record.cost for record in records),
        'total_conversions': sum(record.conversions for record in records),
    }
