# Search Term N-gram Analysis
from .config import AnalysisConfig, PerformanceThresholds, ConfigError, INDUSTRY_PRESETS, DEFAULT_THRESHOLDS
from .csv_parser import RowRecord, ReportParseError, normalize, parse_report_text, parse_csv
from .ngram_generator import NgramEntity, AnalysisResults, Summary, analyze, generate_ngrams
from .suggestions import derive_negative_keywords, top_performers, poor_performers, find_opportunities
from .csv_writer import export_ngrams_csv, export_negative_keywords_csv
from .excel_writer import create_excel_output
