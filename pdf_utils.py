#!/usr/bin/env python3
"""
PDF utilities for LaTeX resume compilation

This module provides utilities for:
1. Validating generated LaTeX before it is sent to the compiler
2. Compiling LaTeX source to PDF with the local toolchain (pdflatex by default)
3. Converting PDFs to base64 for web display

Every compilation runs in its own temporary directory, which is removed
whether or not the compiler succeeds.
"""

import base64
import shutil
import subprocess
import sys
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, Optional

import config
from cache_manager import cache_pdf_compilation, get_cached_pdf_compilation
from performance_monitor import record_operation_error, record_operation_time

TEX_FILENAME = 'resume.tex'
LOG_TAIL_LINES = 20


def latex_available(compiler: Optional[str] = None) -> bool:
    """Return True when the LaTeX compiler binary is on PATH."""
    return shutil.which(compiler or config.LATEX_COMPILER) is not None


def validate_latex(content: str) -> Dict[str, Any]:
    """
    Validate LaTeX source for common issues.

    Returns:
        Dictionary containing:
        - valid: Boolean indicating if the source looks compilable
        - issues: List of problems that will break compilation
        - warnings: List of warnings
    """
    issues = []
    warnings = []

    if not content or not content.strip():
        issues.append('File is empty')
        return {'valid': False, 'issues': issues, 'warnings': warnings}

    if '\\documentclass' not in content:
        issues.append('Missing \\documentclass declaration')

    if '\\begin{document}' not in content:
        issues.append('Missing \\begin{document}')

    if '\\end{document}' not in content:
        issues.append('Missing \\end{document}')

    if content.count('\\begin{document}') != content.count('\\end{document}'):
        warnings.append('Mismatched document environment')

    if '\\usepackage' not in content:
        warnings.append('No packages imported')

    return {
        'valid': len(issues) == 0,
        'issues': issues,
        'warnings': warnings
    }


def _log_tail(log_path: Path, fallback: str) -> str:
    if log_path.exists():
        lines = log_path.read_text(encoding='utf-8', errors='replace').splitlines()
        return '\n'.join(lines[-LOG_TAIL_LINES:])
    return fallback.strip()[-2000:]


def compile_latex_to_pdf(tex_content: str, use_cache: bool = True,
                         timeout: Optional[int] = None) -> Dict[str, Any]:
    """
    Compile LaTeX source to PDF.

    Args:
        tex_content: Complete LaTeX document
        use_cache: Whether to reuse a previous compilation of identical source
        timeout: Seconds before the compiler is killed (defaults to config)

    Returns:
        Dictionary containing:
        - success: Boolean indicating if compilation succeeded
        - pdf_bytes: The compiled PDF (if successful)
        - error: Error message (if failed)
        - missing_compiler: True when no LaTeX toolchain is installed
        - cached: Boolean indicating if result came from cache
    """
    if use_cache:
        cached_pdf = get_cached_pdf_compilation(tex_content)
        if cached_pdf:
            print("🚀 Using cached PDF compilation", file=sys.stderr)
            return {'success': True, 'pdf_bytes': cached_pdf, 'cached': True}

    compiler = config.LATEX_COMPILER
    if not latex_available(compiler):
        return {
            'success': False,
            'error': f'LaTeX compiler "{compiler}" not found - install a TeX distribution',
            'missing_compiler': True,
            'cached': False
        }

    print("⚙️ Compiling LaTeX to PDF (no cache hit)", file=sys.stderr)
    work_dir = Path(tempfile.mkdtemp(prefix='resume_tex_'))
    tex_path = work_dir / TEX_FILENAME
    pdf_path = tex_path.with_suffix('.pdf')
    start = time.time()

    try:
        tex_path.write_text(tex_content, encoding='utf-8')

        result = subprocess.run([
            compiler,
            '-interaction=nonstopmode',
            '-halt-on-error',
            TEX_FILENAME
        ],
            capture_output=True,
            text=True,
            cwd=str(work_dir),
            timeout=timeout or config.LATEX_TIMEOUT_S
        )

        if result.returncode == 0 and pdf_path.exists():
            pdf_bytes = pdf_path.read_bytes()
            record_operation_time('pdf_compilation', time.time() - start)
            print(f"✅ PDF compiled successfully ({len(pdf_bytes)} bytes)", file=sys.stderr)

            if use_cache and cache_pdf_compilation(tex_content, pdf_bytes):
                print("💾 Cached PDF compilation result", file=sys.stderr)

            return {'success': True, 'pdf_bytes': pdf_bytes, 'cached': False}

        error_msg = (f"LaTeX compilation failed (exit code {result.returncode}):\n"
                     f"{_log_tail(work_dir / 'resume.log', result.stdout + result.stderr)}")

    except subprocess.TimeoutExpired:
        error_msg = f"LaTeX compilation timed out after {timeout or config.LATEX_TIMEOUT_S} seconds"
    except OSError as e:
        error_msg = f"Error running {compiler}: {e}"
    finally:
        shutil.rmtree(work_dir, ignore_errors=True)

    record_operation_error('pdf_compilation', error_msg)
    print(f"❌ {error_msg}", file=sys.stderr)
    return {'success': False, 'error': error_msg, 'cached': False}


def pdf_to_base64(pdf_bytes: bytes) -> str:
    """Encode PDF bytes as base64 for embedding in JSON responses."""
    return base64.b64encode(pdf_bytes).decode('utf-8')
