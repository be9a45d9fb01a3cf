from io import BytesIO

import pytest
from pypdf.errors import DependencyError

import app as app_module
import pdf_utils
import resume_text
from resume_schema import normalize_resume
from task_queue import get_task_queue


@pytest.fixture
def client():
    app_module.app.config['TESTING'] = True
    with app_module.app.test_client() as client:
        yield client


@pytest.fixture
def fake_rewrite(monkeypatch, sample_resume):
    calls = []

    def rewrite(instructions, resume_text, use_cache=True):
        calls.append({'instructions': instructions, 'resume_text': resume_text})
        return normalize_resume(sample_resume)

    monkeypatch.setattr(app_module, 'rewrite_resume', rewrite)
    return calls


def test_index_serves_form(client):
    response = client.get('/')
    assert response.status_code == 200
    assert b'AI Powered Resume Modifier' in response.data
    assert b'https://www.overleaf.com/docs' in response.data


class TestGenerate:

    @pytest.mark.parametrize('body', [
        {},
        {'instructions': 'Add Acme'},
        {'resumeText': 'Jane Doe'},
        {'instructions': '   ', 'resumeText': 'Jane Doe'},
        {'instructions': 5, 'resumeText': 'Jane Doe'},
        {'instructions': 'Add Acme', 'resumeText': ['Jane', 'Doe']},
    ])
    def test_missing_input(self, client, body):
        response = client.post('/api/generate', json=body)
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Missing instructions or resume text.'

    def test_success(self, client, fake_rewrite):
        response = client.post('/api/generate', json={'instructions': 'Add Acme', 'resumeText': 'Jane Doe'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert '\\textbf{\\Huge \\scshape Jane Doe}' in data['tex']
        assert data['resume']['name'] == 'Jane Doe'
        assert data['warnings'] == []
        assert 'pdf' not in data
        assert fake_rewrite == [{'instructions': 'Add Acme', 'resume_text': 'Jane Doe'}]

    def test_model_failure_is_500(self, client, monkeypatch):
        def rewrite(instructions, resume_text, use_cache=True):
            raise ValueError('AI response did not contain a valid JSON object.')

        monkeypatch.setattr(app_module, 'rewrite_resume', rewrite)
        response = client.post('/api/generate', json={'instructions': 'x', 'resumeText': 'y'})

        assert response.status_code == 500
        assert response.get_json() == {'success': False,
                                       'error': 'AI response did not contain a valid JSON object.'}

    def test_compile_option(self, client, fake_rewrite, monkeypatch):
        monkeypatch.setattr(app_module, 'compile_latex_to_pdf',
                            lambda tex, use_cache=True: {'success': True, 'pdf_bytes': b'%PDF', 'cached': False})
        response = client.post('/api/generate',
                               json={'instructions': 'x', 'resumeText': 'y', 'compile': True})
        assert response.get_json()['pdf'] == 'JVBERg=='

    def test_compile_failure_still_returns_tex(self, client, fake_rewrite, monkeypatch):
        monkeypatch.setattr(app_module, 'compile_latex_to_pdf',
                            lambda tex, use_cache=True: {'success': False, 'error': 'no pdflatex', 'cached': False})
        response = client.post('/api/generate',
                               json={'instructions': 'x', 'resumeText': 'y', 'compile': True})

        data = response.get_json()
        assert response.status_code == 200
        assert data['tex']
        assert data['pdf_error'] == 'no pdflatex'


class TestUploads:

    def test_generate_from_text_file(self, client, fake_rewrite):
        response = client.post('/api/generate-from-file', data={
            'instructions': 'Add Acme',
            'resume': (BytesIO(b'Jane Doe\nEngineer\n'), 'resume.txt'),
        }, content_type='multipart/form-data')

        assert response.status_code == 200
        assert fake_rewrite[0]['resume_text'] == 'Jane Doe\nEngineer'

    def test_generate_from_file_requires_instructions(self, client, fake_rewrite):
        response = client.post('/api/generate-from-file', data={
            'resume': (BytesIO(b'Jane Doe'), 'resume.txt'),
        }, content_type='multipart/form-data')
        assert response.status_code == 400
        assert fake_rewrite == []

    def test_unsupported_file_type(self, client, fake_rewrite):
        response = client.post('/api/generate-from-file', data={
            'instructions': 'x',
            'resume': (BytesIO(b'PK'), 'resume.docx'),
        }, content_type='multipart/form-data')
        assert response.status_code == 400
        assert 'Unsupported file type' in response.get_json()['error']

    def test_unreadable_pdf(self, client, fake_rewrite):
        response = client.post('/api/generate-from-file', data={
            'instructions': 'x',
            'resume': (BytesIO(b'garbage'), 'resume.pdf'),
        }, content_type='multipart/form-data')
        assert response.status_code == 400
        assert fake_rewrite == []

    def test_pdf_needing_missing_crypto_backend(self, client, fake_rewrite, monkeypatch):
        def reader(stream):
            raise DependencyError('cryptography>=3.1 is required for AES algorithm')

        monkeypatch.setattr(resume_text, 'PdfReader', reader)
        response = client.post('/api/generate-from-file', data={
            'instructions': 'x',
            'resume': (BytesIO(b'%PDF-1.7'), 'resume.pdf'),
        }, content_type='multipart/form-data')

        assert response.status_code == 400
        assert response.get_json()['error'].startswith('Could not read PDF')
        assert fake_rewrite == []

    def test_extract_text(self, client):
        response = client.post('/api/extract-text', data={
            'resume': (BytesIO(b'  Jane Doe  '), 'resume.txt'),
        }, content_type='multipart/form-data')
        assert response.get_json() == {'success': True, 'text': 'Jane Doe'}

    def test_extract_text_without_file(self, client):
        response = client.post('/api/extract-text', data={}, content_type='multipart/form-data')
        assert response.status_code == 400

    def test_upload_too_large(self, client, monkeypatch):
        monkeypatch.setitem(app_module.app.config, 'MAX_CONTENT_LENGTH', 64)
        response = client.post('/api/generate-from-file', data={
            'instructions': 'x',
            'resume': (BytesIO(b'x' * 1024), 'resume.txt'),
        }, content_type='multipart/form-data')
        assert response.status_code == 413
        assert response.get_json()['error'] == 'Uploaded file is too large.'


class TestRender:

    def test_render(self, client, sample_resume):
        response = client.post('/api/render', json=sample_resume)
        data = response.get_json()
        assert response.status_code == 200
        assert '\\section{Experience}' in data['tex']
        assert data['warnings'] == []

    def test_render_with_section_order(self, client, sample_resume):
        response = client.post('/api/render', json={**sample_resume, 'sections': ['skills']})
        tex = response.get_json()['tex']
        assert '\\section{Technical Skills}' in tex
        assert '\\section{Education}' not in tex

    @pytest.mark.parametrize('body', [
        [1, 2],
        {'sections': ['awards']},
        {'sections': 5},
        {'sections': 'skills'},
        {'sections': [['a']]},
    ])
    def test_render_rejects_bad_input(self, client, body):
        response = client.post('/api/render', json=body)
        assert response.status_code == 400
        assert response.get_json()['success'] is False


class TestCompile:

    def test_invalid_latex(self, client):
        response = client.post('/api/compile', json={'tex': 'hello'})
        assert response.status_code == 400
        assert 'Missing \\documentclass declaration' in response.get_json()['issues']

    def test_pdf_download(self, client, sample_resume, monkeypatch):
        monkeypatch.setattr(app_module, 'compile_latex_to_pdf',
                            lambda tex: {'success': True, 'pdf_bytes': b'%PDF-1.5', 'cached': False})
        tex = client.post('/api/render', json=sample_resume).get_json()['tex']

        response = client.post('/api/compile', json={'tex': tex})

        assert response.status_code == 200
        assert response.mimetype == 'application/pdf'
        assert response.data == b'%PDF-1.5'
        assert 'resume.pdf' in response.headers['Content-Disposition']

    @pytest.mark.parametrize('result,status', [
        ({'success': False, 'error': 'not installed', 'missing_compiler': True, 'cached': False}, 503),
        ({'success': False, 'error': 'LaTeX compilation failed', 'cached': False}, 422),
    ])
    def test_compile_failures(self, client, sample_resume, monkeypatch, result, status):
        monkeypatch.setattr(app_module, 'compile_latex_to_pdf', lambda tex: result)
        tex = client.post('/api/render', json=sample_resume).get_json()['tex']

        response = client.post('/api/compile', json={'tex': tex})
        assert response.status_code == status
        assert response.get_json()['error'] == result['error']

    def test_async_compile(self, client, sample_resume, monkeypatch):
        monkeypatch.setattr(pdf_utils, 'compile_latex_to_pdf',
                            lambda tex: {'success': True, 'pdf_bytes': b'%PDF', 'cached': False})
        tex = client.post('/api/render', json=sample_resume).get_json()['tex']

        response = client.post('/api/compile-async', json={'tex': tex})
        assert response.status_code == 202
        task_id = response.get_json()['task_id']
        get_task_queue().wait(task_id, timeout=5)

        status = client.get(f'/api/task-status/{task_id}').get_json()
        assert status['status'] == 'completed'
        assert status['pdf'] == 'JVBERg=='

    def test_unknown_task(self, client):
        assert client.get('/api/task-status/does-not-exist').status_code == 404


class TestOperations:

    def test_health(self, client, monkeypatch):
        monkeypatch.setattr(app_module, 'latex_available', lambda: False)
        data = client.get('/api/health').get_json()
        assert data['status'] == 'ok'
        assert data['latex_available'] is False
        assert {'provider', 'model', 'api_key_configured', 'latex_compiler'} <= set(data)

    def test_performance_endpoints(self, client, fake_rewrite):
        client.post('/api/generate', json={'instructions': 'x', 'resumeText': 'y'})

        dashboard = client.get('/api/performance').get_json()
        assert 'generate_request' in dashboard['summary']['avg_response_times']
        assert 'system' in dashboard['current']

        report = client.get('/api/performance/report').get_json()
        assert report['recommendations']

        stats = client.get('/api/performance/stats').get_json()
        assert set(stats) == {'cache', 'tasks'}

        cleanup = client.post('/api/performance/cleanup').get_json()
        assert cleanup['success'] is True
