"""
Excel Writer Utility for N-gram Analysis
Generates a multi-sheet Excel workbook with the summary, one sheet per
n-gram size and the negative keyword list.
"""

from datetime import datetime
from typing import List, Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .config import AnalysisConfig
from .metrics import is_no_conversions
from .ngram_generator import SIZE_NAMES, AnalysisResults, NgramEntity
from .suggestions import derive_negative_keywords

# (key, header, width)
NGRAM_COLUMNS = [
    ('ngram', 'N-gram', 30),
    ('frequency', 'Frequency', 11),
    ('impressions', 'Impressions', 13),
    ('clicks', 'Clicks', 10),
    ('cost', 'Cost', 12),
    ('conversions', 'Conversions', 12),
    ('ctr', 'CTR %', 10),
    ('cpc', 'CPC', 10),
    ('conversion_rate', 'Conv Rate %', 12),
    ('cost_per_conversion', 'Cost/Conv', 12),
    ('performance', 'Performance', 13),
]

SHEET_TITLES = {
    1: 'Unigrams',
    2: 'Bigrams',
    3: 'Trigrams',
    4: 'Fourgrams',
}

# Colors
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
SIZE_HEADER_FILLS = {
    1: PatternFill(start_color="70AD47", end_color="70AD47", fill_type="solid"),
    2: PatternFill(start_color="ED7D31", end_color="ED7D31", fill_type="solid"),
    3: PatternFill(start_color="5B9BD5", end_color="5B9BD5", fill_type="solid"),
    4: PatternFill(start_color="7030A0", end_color="7030A0", fill_type="solid"),
}
TIER_FILLS = {
    'good': PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid"),
    'warning': PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid"),
    'poor': PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid"),
}

THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)


def format_percentage(value) -> str:
    """Format a value as percentage."""
    if value is None or pd.isna(value):
        return ""
    return f"{value:.2f}%"


def format_currency(value) -> str:
    """Format a value as currency."""
    if value is None or pd.isna(value):
        return "$0.00"
    if is_no_conversions(value):
        return "∞"
    return f"${value:.2f}"


def entities_to_frame(entities: List[NgramEntity]) -> pd.DataFrame:
    """Tabulate entities with the column keys used by the worksheet layout."""
    columns = [key for key, _, _ in NGRAM_COLUMNS]
    rows = [{
        'ngram': entity.text,
        'frequency': entity.occurrence_count,
        'impressions': entity.total_impressions,
        'clicks': entity.total_clicks,
        'cost': entity.total_cost,
        'conversions': entity.total_conversions,
        'ctr': entity.ctr,
        'cpc': entity.cpc,
        'conversion_rate': entity.conversion_rate,
        'cost_per_conversion': entity.cost_per_conversion,
        'performance': entity.performance_tier,
    } for entity in entities]
    return pd.DataFrame(rows, columns=columns)


def write_header_row(ws, row: int, columns: list, header_fill: PatternFill) -> None:
    for col_idx, (col_key, col_name, col_width) in enumerate(columns, 1):
        cell = ws.cell(row=row, column=col_idx, value=col_name)
        cell.fill = header_fill
        cell.font = HEADER_FONT
        cell.alignment = Alignment(horizontal='center')
        cell.border = THIN_BORDER
        ws.column_dimensions[get_column_letter(col_idx)].width = col_width


def create_ngram_sheet(wb: Workbook, size: int, entities: List[NgramEntity]) -> None:
    """
    Write one n-gram size to its own sheet, rows shaded by performance tier.

    Args:
        wb: Workbook object
        size: N-gram size (1-4)
        entities: Entities in display order
    """
    ws = wb.create_sheet(title=SHEET_TITLES[size])
    df = entities_to_frame(entities)

    ws.cell(row=1, column=1, value=f"{SHEET_TITLES[size]} ({len(df)})").font = Font(bold=True, size=12)
    write_header_row(ws, 3, NGRAM_COLUMNS, SIZE_HEADER_FILLS[size])
    ws.freeze_panes = 'B4'

    current_row = 4
    for _, row in df.iterrows():
        tier_fill = TIER_FILLS.get(row['performance'])
        for col_idx, (col_key, col_name, col_width) in enumerate(NGRAM_COLUMNS, 1):
            value = row[col_key]

            # Format specific columns
            if col_key in ['ctr', 'conversion_rate']:
                value = format_percentage(value)
            elif col_key in ['cost', 'cpc', 'cost_per_conversion']:
                value = format_currency(value)
            elif col_key in ['frequency', 'impressions', 'clicks']:
                value = int(value)
            elif col_key == 'conversions':
                value = float(value)
            elif col_key == 'performance':
                value = str(value).capitalize()

            cell = ws.cell(row=current_row, column=col_idx, value=value)
            cell.border = THIN_BORDER
            cell.alignment = Alignment(horizontal='left' if col_key == 'ngram' else 'center')
            if col_key == 'performance' and tier_fill is not None:
                cell.fill = tier_fill

        current_row += 1


def create_negative_keywords_sheet(wb: Workbook, keywords: List[str]) -> None:
    ws = wb.create_sheet(title="Negative Keywords")

    cell = ws.cell(row=1, column=1, value="Negative Keywords")
    cell.font = Font(bold=True, color="C00000")
    cell.fill = TIER_FILLS['poor']
    ws.column_dimensions['A'].width = 35

    ws.cell(row=2, column=1, value="(Poor performers seen in at least 2 search terms)").font = \
        Font(italic=True, size=9, color="666666")

    for row_idx, keyword in enumerate(keywords, 3):
        ws.cell(row=row_idx, column=1, value=keyword)


def create_summary_sheet(wb: Workbook, results: AnalysisResults,
                         config: Optional[AnalysisConfig] = None) -> None:
    """
    Create the summary sheet with report totals and the analysis settings.

    Args:
        wb: Workbook object
        results: Analysis results
        config: Configuration the results were produced with
    """
    ws = wb.active
    ws.title = "Summary"
    summary = results.summary

    current_row = 1

    # Write title
    ws.cell(row=current_row, column=1, value="N-Gram Analysis Summary")
    ws.cell(row=current_row, column=1).font = Font(bold=True, size=16)
    ws.merge_cells(start_row=current_row, start_column=1, end_row=current_row, end_column=4)
    current_row += 1

    # Write generation date
    ws.cell(row=current_row, column=1, value=f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    ws.cell(row=current_row, column=1).font = Font(italic=True)
    current_row += 2

    write_header_row(ws, current_row, [('metric', 'Metric', 28), ('value', 'Value', 18)], HEADER_FILL)
    current_row += 1

    rows = [
        ('Search Terms', summary.total_search_terms),
        ('Total Impressions', int(summary.total_impressions)),
        ('Total Clicks', int(summary.total_clicks)),
        ('Total Cost', format_currency(summary.total_cost)),
        ('Total Conversions', float(summary.total_conversions)),
        ('Average CTR', format_percentage(summary.avg_ctr)),
        ('Average CPC', format_currency(summary.avg_cpc)),
        ('Average Conversion Rate', format_percentage(summary.avg_conversion_rate)),
    ]
    for size, name in SIZE_NAMES.items():
        rows.append((f"Distinct {name}", len(results.by_size(size))))

    if config is not None:
        rows.extend([
            ('N-gram Sizes', ', '.join(str(size) for size in sorted(config.ngram_sizes))),
            ('Min Impressions', config.min_impressions),
            ('Min Clicks', config.min_clicks),
            ('Min Cost', format_currency(config.min_cost)),
            ('Optimization Mode', config.optimization_mode),
        ])

    for label, value in rows:
        ws.cell(row=current_row, column=1, value=label).border = THIN_BORDER
        cell = ws.cell(row=current_row, column=2, value=value)
        cell.border = THIN_BORDER
        cell.alignment = Alignment(horizontal='center')
        current_row += 1


def create_excel_output(results: AnalysisResults, output_path: str,
                        config: Optional[AnalysisConfig] = None) -> str:
    """
    Create the Excel workbook for an analysis run.

    Args:
        results: Analysis results
        output_path: Path where the Excel file should be saved
        config: Configuration used for the run, shown on the summary sheet

    Returns:
        Path to the created file
    """
    wb = Workbook()
    create_summary_sheet(wb, results, config)

    for size in SIZE_NAMES:
        entities = results.by_size(size)
        if entities:
            create_ngram_sheet(wb, size, entities)

    create_negative_keywords_sheet(wb, derive_negative_keywords(results.all_ngrams()))

    wb.save(output_path)
    return output_path


def generate_output_filename(prefix: str = "NGram_Analysis", extension: str = "xlsx") -> str:
    """
    Generate a filename with timestamp.

    Args:
        prefix: Prefix for the filename
        extension: File extension without the dot

    Returns:
        Filename string
    """
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return f"{prefix}_{timestamp}.{extension}"
