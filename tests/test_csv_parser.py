import pandas as pd
import pytest

from ngram_analysis.csv_parser import (ReportParseError, decode_report_bytes, find_header_row, normalize,
                                       parse_csv, parse_numeric, parse_report_text)

from .conftest import GOOGLE_ADS_EXPORT


class TestParseNumeric:

    @pytest.mark.parametrize('value, expected', [
        ('1,234', 1234.0),
        ('"1,234"', 1234.0),
        ('$80.00', 80.0),
        ('12.50%', 12.5),
        ('€1 234,5', 12345.0),
        (' 7 ', 7.0),
        (42, 42.0),
        (2.5, 2.5),
    ])
    def test_cleans_formatted_numbers(self, value, expected):
        assert parse_numeric(value) == expected

    @pytest.mark.parametrize('value', ['', '   ', '--', ' --', None, float('nan'), 'n/a', 'abc', 'inf'])
    def test_unparseable_values_become_zero(self, value):
        assert parse_numeric(value) == 0.0


class TestNormalize:

    def test_mixed_placeholders_in_one_row(self):
        records = normalize([{'Search term': 'red shoes', 'Cost': '--', 'Clicks': '', 'Impr.': '1,234'}])

        assert len(records) == 1
        assert records[0].cost == 0
        assert records[0].clicks == 0
        assert records[0].impressions == 1234

    def test_phrase_is_lowercased_and_trimmed(self):
        records = normalize([{'Search Term': '  Red SHOES  ', 'Impressions': 10}])

        assert records[0].phrase == 'red shoes'

    def test_alias_priority_and_fallback(self):
        records = normalize([
            {'Search term': 'first', 'search_term': 'second', 'impressions': '5'},
            {'Search term': '', 'search_term': 'fallback', 'Impr.': '', 'Impressions': '8'},
        ])

        assert [r.phrase for r in records] == ['first', 'fallback']
        assert records[1].impressions == 8

    @pytest.mark.parametrize('phrase', ['Total: Search terms', 'grand total', 'TOTAL', 'all search terms'])
    def test_summary_rows_are_dropped(self, phrase):
        assert normalize([{'Search term': phrase, 'Clicks': 10}]) == []

    def test_rows_without_phrase_or_metrics_are_dropped(self):
        rows = [
            {'Search term': '   ', 'Clicks': 3},
            {'Search term': 'zero row', 'Clicks': 0, 'Impr.': '0', 'Cost': '--', 'Conversions': ''},
            {'Clicks': 4},
            {'Search term': 'conversion only', 'Conversions': '0.5'},
        ]

        records = normalize(rows)

        assert [r.phrase for r in records] == ['conversion only']
        assert records[0].conversions == 0.5

    def test_preserves_input_order(self):
        rows = [{'Search term': name, 'Clicks': 1} for name in ['zeta', 'alpha', 'mid']]

        assert [r.phrase for r in normalize(rows)] == ['zeta', 'alpha', 'mid']

    def test_optional_ratios_carried_only_when_present(self):
        with_ratios, without = normalize([
            {'Search term': 'a', 'Clicks': 1, 'CTR': '4.00%', 'Avg. CPC': '$2.00', 'Conv. rate': '12.50%'},
            {'Search term': 'b', 'Clicks': 1},
        ])

        assert (with_ratios.ctr, with_ratios.cpc, with_ratios.conversion_rate) == (4.0, 2.0, 12.5)
        assert (without.ctr, without.cpc, without.conversion_rate) == (None, None, None)

    def test_accepts_dataframe(self):
        df = pd.DataFrame({'Search term': ['blue hat', 'Total'], 'Clicks': [3, 3]})

        records = normalize(df)

        assert [r.phrase for r in records] == ['blue hat']
        assert records[0].clicks == 3

    def test_missing_columns_default_to_zero(self):
        record = normalize([{'search_term': 'only clicks', 'clicks': '2'}])[0]

        assert (record.impressions, record.cost, record.conversions) == (0, 0, 0)


class TestHeaderDiscovery:

    def test_finds_header_after_preamble(self):
        lines = GOOGLE_ADS_EXPORT.split('\n')

        assert find_header_row(lines) == 2

    def test_header_match_is_case_insensitive(self):
        assert find_header_row(['junk', 'SEARCH TERM,CLICKS,COST']) == 1

    def test_missing_header_fails(self):
        with pytest.raises(ReportParseError, match='column headers'):
            parse_report_text("Keyword,Clicks,Cost\nshoes,1,2\n")

    def test_parses_google_ads_export(self):
        records = parse_report_text(GOOGLE_ADS_EXPORT)

        assert [r.phrase for r in records] == ['good car deals', 'cheap car rental', 'car rental near me']
        first = records[0]
        assert (first.impressions, first.clicks, first.cost, first.conversions) == (1000, 40, 80, 5)
        assert first.ctr == 4.0

    def test_header_only_report_yields_no_rows(self):
        assert parse_report_text("Search term,Clicks,Cost\n") == []

    def test_crlf_line_endings(self):
        text = GOOGLE_ADS_EXPORT.replace('\n', '\r\n')

        assert len(parse_report_text(text)) == 3

    def test_trailing_delimiter_keeps_columns_aligned(self):
        text = "Search term,Clicks,Impr.,Cost\nred shoes,3,100,5.00,\nblue hat,2,50,1.00,\n"

        records = parse_report_text(text)

        assert [r.phrase for r in records] == ['red shoes', 'blue hat']
        assert (records[0].clicks, records[0].impressions, records[0].cost) == (3, 100, 5)


class TestFileReading:

    def test_parse_csv_reads_file(self, report_file):
        assert len(parse_csv(report_file)) == 3

    def test_decodes_utf8_bom(self):
        assert decode_report_bytes('\ufeffSearch term'.encode('utf-8')) == 'Search term'

    def test_decodes_windows_1252(self):
        raw = 'Search term\ncafé €'.encode('cp1252')

        assert decode_report_bytes(raw) == 'Search term\ncafé €'
