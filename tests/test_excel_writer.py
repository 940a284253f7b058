from openpyxl import load_workbook

from ngram_analysis.config import AnalysisConfig
from ngram_analysis.excel_writer import create_excel_output, entities_to_frame, generate_output_filename
from ngram_analysis.ngram_generator import analyze


def test_workbook_layout(tmp_path, sample_rows, open_config):
    results = analyze(sample_rows, open_config)
    path = tmp_path / 'analysis.xlsx'

    create_excel_output(results, str(path), open_config)

    wb = load_workbook(path)
    assert wb.sheetnames == ['Summary', 'Unigrams', 'Bigrams', 'Trigrams', 'Fourgrams', 'Negative Keywords']

    unigrams = wb['Unigrams']
    assert unigrams['A3'].value == 'N-gram'
    assert unigrams['A4'].value == 'car'
    assert unigrams['C4'].value == 3500
    assert unigrams['E4'].value == '$101.00'
    assert unigrams['K4'].value == 'Warning'

    negatives = [cell.value for cell in wb['Negative Keywords']['A'][2:]]
    assert negatives[:2] == ['rental', 'cheap']

    summary = {row[0]: row[1] for row in wb['Summary'].iter_rows(min_row=5, values_only=True)}
    assert summary['Search Terms'] == 4
    assert summary['Total Cost'] == '$110.00'
    assert summary['Optimization Mode'] == 'conversions'


def test_empty_sizes_get_no_sheet(tmp_path, sample_rows):
    config = AnalysisConfig(ngram_sizes={2}, min_impressions=0, min_clicks=0, min_cost=0)
    path = tmp_path / 'bigrams.xlsx'

    create_excel_output(analyze(sample_rows, config), str(path))

    assert load_workbook(path).sheetnames == ['Summary', 'Bigrams', 'Negative Keywords']


def test_entities_to_frame_columns(sample_rows, open_config):
    df = entities_to_frame(analyze(sample_rows, open_config).fourgrams)

    assert list(df['ngram']) == ['car rental near me']
    assert df.loc[0, 'performance'] == 'poor'


def test_generate_output_filename():
    assert generate_output_filename('run', 'csv').startswith('run_')
    assert generate_output_filename().endswith('.xlsx')
