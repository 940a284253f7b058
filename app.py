"""
N-gram Analysis Web Application
Flask application for n-gram analysis of search term performance reports.
"""

import json
import logging
import os
import time
import uuid
from datetime import datetime

from flask import Flask, jsonify, request, send_file
from werkzeug.utils import secure_filename

from ngram_analysis.config import INDUSTRY_PRESETS, AnalysisConfig, ConfigError
from ngram_analysis.csv_parser import ReportParseError, get_data_summary, parse_csv
from ngram_analysis.csv_writer import export_negative_keywords_csv, export_ngrams_csv
from ngram_analysis.excel_writer import create_excel_output, generate_output_filename
from ngram_analysis.ngram_generator import SIZE_NAMES, analyze, get_ngram_summary
from ngram_analysis.suggestions import (derive_negative_keywords, find_opportunities, get_suggestion_summary,
                                        poor_performers, suggest_optimization_mode, top_performers)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)

# Configuration
app.config['MAX_CONTENT_LENGTH'] = 10 * 1024 * 1024  # 10MB max file size
app.config['UPLOAD_FOLDER'] = os.path.join(os.path.dirname(__file__), 'uploads')
app.config['OUTPUT_FOLDER'] = os.path.join(os.path.dirname(__file__), 'outputs')
app.config['ALLOWED_EXTENSIONS'] = {'csv'}
app.config['OUTPUT_MAX_AGE'] = 3600  # seconds

# Ensure directories exist
os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)
os.makedirs(app.config['OUTPUT_FOLDER'], exist_ok=True)

MIMETYPES = {
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'csv': 'text/csv',
}


class NoSearchTermsError(Exception):
    """Raised when a report parses but has no usable search term rows."""


def allowed_file(filename: str) -> bool:
    """Check if file extension is allowed."""
    return '.' in filename and \
           filename.rsplit('.', 1)[1].lower() in app.config['ALLOWED_EXTENSIONS']


def parse_config(raw: str) -> AnalysisConfig:
    """Build the analysis configuration from the optional JSON form field."""
    if not raw:
        return AnalysisConfig()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Configuration is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object")
    return AnalysisConfig.from_dict(data)


def write_outputs(results, config: AnalysisConfig) -> dict:
    """
    Write the workbook and CSV exports for a run into the output folder.

    Returns:
        Mapping of export kind to generated filename
    """
    output_folder = app.config['OUTPUT_FOLDER']
    prefix = f"NGram_Analysis_{uuid.uuid4().hex[:8]}"

    excel_file = generate_output_filename(prefix)
    create_excel_output(results, os.path.join(output_folder, excel_file), config)

    csv_files = {}
    for size in sorted(config.ngram_sizes):
        filename = generate_output_filename(f"{prefix}_{size}-gram-analysis", 'csv')
        export_ngrams_csv(results.by_size(size), os.path.join(output_folder, filename),
                          include_performance=True)
        csv_files[SIZE_NAMES[size]] = filename

    negatives_file = generate_output_filename(f"{prefix}_negative-keywords", 'csv')
    export_negative_keywords_csv(derive_negative_keywords(results.all_ngrams()),
                                 os.path.join(output_folder, negatives_file))

    top_file = generate_output_filename(f"{prefix}_top-performers", 'csv')
    export_ngrams_csv(top_performers(results, limit=50), os.path.join(output_folder, top_file))

    opportunities_file = generate_output_filename(f"{prefix}_opportunities", 'csv')
    export_ngrams_csv(find_opportunities(results, limit=50), os.path.join(output_folder, opportunities_file))

    return {
        'excel': excel_file,
        'csv': csv_files,
        'negative_keywords': negatives_file,
        'top_performers': top_file,
        'opportunities': opportunities_file,
    }


def process_report_file(filepath: str, config: AnalysisConfig) -> dict:
    """
    Process a report file through the entire n-gram analysis pipeline.

    Args:
        filepath: Path to the uploaded CSV file
        config: Analysis settings

    Returns:
        Dictionary with results, insights and output file names
    """
    # Step 1: Parse and normalize
    records = parse_csv(filepath)
    if not records:
        raise NoSearchTermsError(
            "No valid search term data found. Please ensure your CSV is a search term report "
            "with search terms that have data."
        )
    data_summary = get_data_summary(records)

    # Step 2: Analyze
    results = analyze(records, config)
    negative_keywords = derive_negative_keywords(results.all_ngrams())
    logger.info("Analyzed %d search terms: %s", len(records), get_ngram_summary(results))

    # Step 3: Exports
    output_files = write_outputs(results, config)

    return {
        'success': True,
        'config': config.to_dict(),
        'summary': results.summary.to_dict(),
        'unique_search_terms': data_summary['unique_search_terms'],
        'ngram_counts': get_ngram_summary(results),
        'performance': get_suggestion_summary(results),
        'suggested_mode': suggest_optimization_mode(results.summary),
        'negative_keywords': negative_keywords,
        'top_performers': [entity.to_dict() for entity in top_performers(results)],
        'poor_performers': [entity.to_dict() for entity in poor_performers(results)],
        'opportunities': [entity.to_dict() for entity in find_opportunities(results)],
        'results': results.to_dict(),
        'output_files': output_files,
    }


@app.route('/upload', methods=['POST'])
def upload_file():
    """Handle file upload and processing."""
    # Check if file was uploaded
    if 'file' not in request.files:
        return jsonify({'success': False, 'error': 'No file uploaded'}), 400

    file = request.files['file']

    if file.filename == '':
        return jsonify({'success': False, 'error': 'No file selected'}), 400

    if not allowed_file(file.filename):
        return jsonify({'success': False, 'error': 'Invalid file type. Please upload a CSV file.'}), 400

    # Save uploaded file
    filename = secure_filename(file.filename)
    unique_filename = f"{uuid.uuid4().hex}_{filename}"
    filepath = os.path.join(app.config['UPLOAD_FOLDER'], unique_filename)
    file.save(filepath)

    try:
        config = parse_config(request.form.get('config', ''))
        result = process_report_file(filepath, config)
    except (ConfigError, ReportParseError, NoSearchTermsError) as e:
        logger.warning("Rejected upload %s: %s", filename, e)
        return jsonify({'success': False, 'error': str(e)}), 400
    except Exception as e:
        logger.exception("Failed to process %s", filename)
        return jsonify({'success': False, 'error': f'Processing error: {str(e)}'}), 500
    finally:
        # Clean up uploaded file
        try:
            os.remove(filepath)
        except OSError:
            logger.warning("Could not remove upload %s", filepath)

    return jsonify(result)


@app.route('/download/<filename>')
def download_file(filename):
    """Download a generated workbook or CSV export."""
    safe_name = secure_filename(filename)
    filepath = os.path.join(app.config['OUTPUT_FOLDER'], safe_name)

    if not os.path.exists(filepath):
        return jsonify({'success': False, 'error': 'File not found'}), 404

    extension = safe_name.rsplit('.', 1)[-1].lower()
    return send_file(
        filepath,
        mimetype=MIMETYPES.get(extension, 'application/octet-stream'),
        as_attachment=True,
        download_name=safe_name
    )


@app.route('/presets')
def list_presets():
    """List the industry threshold presets."""
    return jsonify({
        key: {'name': name, 'thresholds': thresholds.to_dict()}
        for key, (name, thresholds) in INDUSTRY_PRESETS.items()
    })


@app.route('/health')
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.now().isoformat()
    })


def cleanup_old_files():
    """Remove old files from upload and output folders."""
    max_age = app.config['OUTPUT_MAX_AGE']
    current_time = time.time()

    for folder in [app.config['UPLOAD_FOLDER'], app.config['OUTPUT_FOLDER']]:
        if not os.path.exists(folder):
            continue
        for filename in os.listdir(folder):
            filepath = os.path.join(folder, filename)
            if os.path.isfile(filepath) and current_time - os.path.getmtime(filepath) > max_age:
                try:
                    os.remove(filepath)
                except OSError:
                    logger.warning("Could not remove stale file %s", filepath)


if __name__ == '__main__':
    # Run cleanup on startup
    cleanup_old_files()

    # Run the Flask development server
    app.run(debug=True, host='0.0.0.0', port=5000)
