import pytest

import config
from cache_manager import CacheManager, reset_cache_manager


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    """Give every test its own empty cache directory."""
    monkeypatch.setattr(config, 'CACHE_ENABLED', True)
    reset_cache_manager(CacheManager(tmp_path / 'cache', ttl_hours=1))
    yield
    reset_cache_manager(None)


@pytest.fixture
def sample_resume():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "555-123-4567",
        "linkedin": "linkedin.com/in/janedoe",
        "github": "janedoe",
        "education": [
            {"institution": "State University", "degree": "B.S. in Computer Science",
             "dates": "Aug 2016 - May 2020"}
        ],
        "experience": [
            {"company": "Acme & Co", "role": "Software Engineer", "dates": "Jun 2020 - Present",
             "location": "Austin, TX",
             "description": ["Built billing service handling 1M requests/day",
                             "Cut cloud spend by 30%"]}
        ],
        "projects": [
            {"name": "Budget_Bot", "technologies": "Python, Flask", "dates": "Jan 2021",
             "description": ["Telegram bot that tracks shared expenses"]}
        ],
        "skills": {
            "languages": "Python, C#",
            "frameworks": "Flask",
            "developerTools": "Git, Docker",
            "libraries": "pandas"
        }
    }
