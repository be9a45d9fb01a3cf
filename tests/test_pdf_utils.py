import subprocess
from pathlib import Path

import pytest

import pdf_utils
from pdf_utils import compile_latex_to_pdf, pdf_to_base64, validate_latex
from tex_generator import generate_tex

TEX = generate_tex({'name': 'Jane Doe', 'email': 'jane@example.com'})


@pytest.fixture
def fake_compiler(monkeypatch):
    """Pretend pdflatex is installed and record how it is invoked."""
    runs = []
    monkeypatch.setattr(pdf_utils.shutil, 'which', lambda name: f'/usr/bin/{name}')

    def install(returncode=0, writes_pdf=True, log_lines=None, raises=None):
        def fake_run(cmd, capture_output, text, cwd, timeout):
            work_dir = Path(cwd)
            runs.append({'cmd': cmd, 'cwd': work_dir,
                         'tex': (work_dir / 'resume.tex').read_text(encoding='utf-8')})
            if raises:
                raise raises
            if writes_pdf:
                (work_dir / 'resume.pdf').write_bytes(b'%PDF-1.5 fake')
            if log_lines:
                (work_dir / 'resume.log').write_text('\n'.join(log_lines), encoding='utf-8')
            return subprocess.CompletedProcess(cmd, returncode, stdout='', stderr='')

        monkeypatch.setattr(pdf_utils.subprocess, 'run', fake_run)
        return runs

    return install


class TestValidateLatex:

    def test_generated_document_is_valid(self):
        assert validate_latex(TEX) == {'valid': True, 'issues': [], 'warnings': []}

    def test_empty_document(self):
        result = validate_latex('   ')
        assert result['valid'] is False
        assert result['issues'] == ['File is empty']

    def test_missing_structure(self):
        result = validate_latex('\\begin{document}hello')
        assert result['valid'] is False
        assert 'Missing \\documentclass declaration' in result['issues']
        assert 'Missing \\end{document}' in result['issues']
        assert 'Mismatched document environment' in result['warnings']
        assert 'No packages imported' in result['warnings']


class TestCompileLatexToPdf:

    def test_missing_compiler(self, monkeypatch):
        monkeypatch.setattr(pdf_utils.shutil, 'which', lambda name: None)
        result = compile_latex_to_pdf(TEX)
        assert result['success'] is False
        assert result['missing_compiler'] is True

    def test_successful_compile_cleans_up(self, fake_compiler):
        runs = fake_compiler()

        result = compile_latex_to_pdf(TEX)

        assert result == {'success': True, 'pdf_bytes': b'%PDF-1.5 fake', 'cached': False}
        assert runs[0]['cmd'] == ['pdflatex', '-interaction=nonstopmode', '-halt-on-error', 'resume.tex']
        assert runs[0]['tex'] == TEX
        assert not runs[0]['cwd'].exists()

    def test_second_compile_hits_cache(self, fake_compiler):
        runs = fake_compiler()

        compile_latex_to_pdf(TEX)
        result = compile_latex_to_pdf(TEX)

        assert result['cached'] is True
        assert result['pdf_bytes'] == b'%PDF-1.5 fake'
        assert len(runs) == 1

    def test_cache_can_be_skipped(self, fake_compiler):
        runs = fake_compiler()

        compile_latex_to_pdf(TEX, use_cache=False)
        compile_latex_to_pdf(TEX, use_cache=False)
        assert len(runs) == 2

    def test_compiler_error_reports_log_tail(self, fake_compiler):
        log = [f'line {i}' for i in range(40)] + ['! Undefined control sequence.']
        runs = fake_compiler(returncode=1, writes_pdf=False, log_lines=log)

        result = compile_latex_to_pdf(TEX)

        assert result['success'] is False
        assert 'exit code 1' in result['error']
        assert '! Undefined control sequence.' in result['error']
        assert 'line 0\n' not in result['error']
        assert not runs[0]['cwd'].exists()

    def test_timeout(self, fake_compiler):
        runs = fake_compiler(raises=subprocess.TimeoutExpired('pdflatex', 5))

        result = compile_latex_to_pdf(TEX, timeout=5)

        assert result['success'] is False
        assert 'timed out after 5 seconds' in result['error']
        assert not runs[0]['cwd'].exists()

    def test_failed_compile_is_not_cached(self, fake_compiler):
        runs = fake_compiler(returncode=1, writes_pdf=False)

        compile_latex_to_pdf(TEX)
        compile_latex_to_pdf(TEX)
        assert len(runs) == 2


def test_pdf_to_base64():
    assert pdf_to_base64(b'%PDF') == 'JVBERg=='
