#!/usr/bin/env python3
"""
Web UI and API for the Resume Modifier

A Flask application that takes a resume (PDF or text) plus free-text editing
instructions, has a hosted LLM rewrite the resume into a fixed JSON schema,
and renders the result as a LaTeX document. The LaTeX can optionally be
compiled to PDF with the local TeX toolchain.
"""

import io
import sys
import time
from typing import Any, Dict, Optional

from flask import Flask, jsonify, render_template, request, send_file
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge

import config
from cache_manager import cleanup_cache, get_cache_stats
from llm_client import rewrite_resume
from pdf_utils import compile_latex_to_pdf, latex_available, pdf_to_base64, validate_latex
from performance_monitor import (create_performance_report, get_performance_dashboard_data,
                                 record_operation_error, record_operation_time)
from resume_schema import normalize_resume, validate_resume
from resume_text import ALLOWED_EXTENSIONS, allowed_file, extract_resume_text
from task_queue import cleanup_old_tasks, get_queue_stats, get_task_queue, submit_pdf_compilation_task
from tex_generator import generate_tex

MISSING_INPUT_ERROR = "Missing instructions or resume text."

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = config.MAX_CONTENT_LENGTH
CORS(app)


def _wants_pdf(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


def run_generation(instructions: str, resume_text: str, compile_pdf: bool = False,
                   use_cache: bool = True) -> Dict[str, Any]:
    """Rewrite the resume with the model and render it; optionally compile it too."""
    start = time.time()

    resume = rewrite_resume(instructions, resume_text, use_cache=use_cache)
    warnings = validate_resume(resume)
    for warning in warnings:
        print(f"⚠️  {warning}", file=sys.stderr)

    tex = generate_tex(resume)
    response = {
        'success': True,
        'tex': tex,
        'resume': resume,
        'warnings': warnings
    }

    if compile_pdf:
        pdf_result = compile_latex_to_pdf(tex, use_cache=use_cache)
        if pdf_result['success']:
            response['pdf'] = pdf_to_base64(pdf_result['pdf_bytes'])
        else:
            response['pdf_error'] = pdf_result['error']

    record_operation_time('generate_request', time.time() - start)
    print(f"✅ Generated resume for {resume.get('name') or 'unnamed candidate'} "
          f"in {time.time() - start:.1f}s", file=sys.stderr)
    return response


def _text_field(data: Dict[str, Any], name: str) -> str:
    value = data.get(name)
    return value.strip() if isinstance(value, str) else ''


def _error(message: str, status: int):
    return jsonify({'success': False, 'error': message}), status


@app.errorhandler(RequestEntityTooLarge)
def handle_too_large(e):
    return _error('Uploaded file is too large.', 413)


@app.route('/')
def index():
    """Serve the main web interface"""
    return render_template('index.html')


@app.route('/api/generate', methods=['POST'])
def generate():
    """Rewrite resume text according to the user's instructions and return LaTeX"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    instructions = _text_field(data, 'instructions')
    resume_text = _text_field(data, 'resumeText')

    if not instructions or not resume_text:
        return _error(MISSING_INPUT_ERROR, 400)

    try:
        return jsonify(run_generation(instructions, resume_text,
                                      compile_pdf=_wants_pdf(data.get('compile')),
                                      use_cache=not data.get('noCache')))
    except Exception as e:
        record_operation_error('generate_request', str(e))
        print(f"Error processing generation request: {e}", file=sys.stderr)
        return _error(str(e) or 'An internal server error occurred.', 500)


@app.route('/api/generate-from-file', methods=['POST'])
def generate_from_file():
    """Same as /api/generate, but the resume is an uploaded PDF or text file"""
    upload = request.files.get('resume')
    instructions = (request.form.get('instructions') or '').strip()

    if upload is None or not upload.filename or not instructions:
        return _error(MISSING_INPUT_ERROR, 400)

    if not allowed_file(upload.filename):
        return _error(f"Unsupported file type. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}", 400)

    try:
        resume_text = extract_resume_text(upload.filename, upload.read(), upload.mimetype)
    except ValueError as e:
        return _error(str(e), 400)

    try:
        return jsonify(run_generation(instructions, resume_text,
                                      compile_pdf=_wants_pdf(request.form.get('compile'))))
    except Exception as e:
        record_operation_error('generate_request', str(e))
        print(f"Error processing generation request: {e}", file=sys.stderr)
        return _error(str(e) or 'An internal server error occurred.', 500)


@app.route('/api/extract-text', methods=['POST'])
def extract_text():
    """Return the plain text of an uploaded resume"""
    upload = request.files.get('resume')
    if upload is None or not upload.filename:
        return _error('No resume file provided', 400)

    if not allowed_file(upload.filename):
        return _error(f"Unsupported file type. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}", 400)

    try:
        text = extract_resume_text(upload.filename, upload.read(), upload.mimetype)
    except ValueError as e:
        return _error(str(e), 400)

    return jsonify({'success': True, 'text': text})


@app.route('/api/render', methods=['POST'])
def render():
    """Render a resume JSON object to LaTeX without calling the model"""
    data = request.get_json(silent=True)
    try:
        resume = normalize_resume(data)
        tex = generate_tex(resume, data.get('sections') if isinstance(data, dict) else None)
    except ValueError as e:
        return _error(str(e), 400)

    return jsonify({'success': True, 'tex': tex, 'warnings': validate_resume(resume)})


def _tex_from_request() -> Optional[str]:
    data = request.get_json(silent=True)
    tex = data.get('tex') if isinstance(data, dict) else None
    return tex if isinstance(tex, str) else None


@app.route('/api/compile', methods=['POST'])
def compile_pdf():
    """Compile LaTeX source and return the PDF as a download"""
    tex = _tex_from_request()
    validation = validate_latex(tex or '')
    if not validation['valid']:
        return jsonify({'success': False, 'error': 'Invalid LaTeX document',
                        'issues': validation['issues']}), 400

    result = compile_latex_to_pdf(tex)
    if not result['success']:
        return _error(result['error'], 503 if result.get('missing_compiler') else 422)

    return send_file(
        io.BytesIO(result['pdf_bytes']),
        as_attachment=True,
        download_name='resume.pdf',
        mimetype='application/pdf'
    )


@app.route('/api/compile-async', methods=['POST'])
def compile_pdf_async():
    """Queue a LaTeX compilation and return a task id to poll"""
    tex = _tex_from_request()
    validation = validate_latex(tex or '')
    if not validation['valid']:
        return jsonify({'success': False, 'error': 'Invalid LaTeX document',
                        'issues': validation['issues']}), 400

    task_id = submit_pdf_compilation_task(tex)
    return jsonify({
        'success': True,
        'task_id': task_id,
        'status': 'pending',
        'message': 'Compilation queued. Use task_id to check status.'
    }), 202


@app.route('/api/task-status/<task_id>')
def task_status(task_id):
    """Get the status of a background compilation"""
    task = get_task_queue().get_task_status(task_id)
    if not task:
        return _error('Task not found', 404)

    response = {'success': True, **task.to_dict()}
    if task.result:
        response.update(task.result)
    return jsonify(response)


@app.route('/api/health')
def health():
    """Report what the server can do with its current configuration"""
    return jsonify({
        'status': 'ok',
        'provider': config.LLM_PROVIDER,
        'model': config.LLM_MODEL,
        'api_key_configured': bool(config.api_key_for(config.LLM_PROVIDER)),
        'latex_available': latex_available(),
        'latex_compiler': config.LATEX_COMPILER
    })


@app.route('/api/performance')
def api_performance():
    """API endpoint for performance data"""
    try:
        return jsonify(get_performance_dashboard_data())
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@app.route('/api/performance/report')
def api_performance_report():
    """API endpoint for detailed performance report"""
    try:
        return jsonify(create_performance_report())
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@app.route('/api/performance/stats')
def api_performance_stats():
    """API endpoint for cache and task queue statistics"""
    return jsonify({
        'cache': get_cache_stats(),
        'tasks': get_queue_stats()
    })


@app.route('/api/performance/cleanup', methods=['POST'])
def api_performance_cleanup():
    """API endpoint for cleaning up old data"""
    return jsonify({
        'success': True,
        'cache_cleaned': cleanup_cache(),
        'tasks_cleaned': cleanup_old_tasks()
    })


if __name__ == '__main__':
    print("🚀 Starting Resume Modifier...")
    print(f"📝 Open http://localhost:{config.PORT} in your browser")
    print(f"💡 Using {config.LLM_PROVIDER} model {config.LLM_MODEL}")

    app.run(debug=config.DEBUG, host=config.HOST, port=config.PORT, use_reloader=False)
