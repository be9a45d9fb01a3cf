#!/usr/bin/env python3
"""
Resume JSON schema

The model is asked to answer with a single JSON object shaped like
RESUME_JSON_STRUCTURE. Replies are not always faithful to that shape, so
normalize_resume() coerces whatever came back into something the LaTeX
renderer can consume without further checks.
"""

from typing import Any, Dict, List

RESUME_JSON_STRUCTURE = {
    "name": "Full Name",
    "email": "email@example.com",
    "phone": "555-555-5555",
    "linkedin": "your-linkedin-profile-url",  # no https://
    "github": "your-github-username",         # no https://
    "education": [
        {"institution": "University Name", "degree": "B.S. in Computer Science",
         "dates": "Aug 2018 - May 2021"}
    ],
    "experience": [
        {"company": "Company Inc.", "role": "Software Engineer", "dates": "May 2021 - Present",
         "location": "City, ST", "description": ["Developed feature X using React."]}
    ],
    "projects": [
        {"name": "Project Name", "technologies": "React, Node.js, Python", "dates": "Jun 2020",
         "description": ["Built a web app for X.", "Implemented Y feature."]}
    ],
    "skills": {
        "languages": "Python, JavaScript, SQL",
        "frameworks": "React, Node.js, Flask",
        "developerTools": "Git, Docker, VS Code",
        "libraries": "pandas, NumPy, Matplotlib"
    }
}

CONTACT_FIELDS = ['name', 'email', 'phone', 'linkedin', 'github']

# section -> scalar fields of each entry
SECTION_FIELDS = {
    'education': ['institution', 'degree', 'dates', 'details'],
    'experience': ['company', 'role', 'dates', 'location'],
    'projects': ['name', 'technologies', 'dates'],
}

# Sections whose entries carry a list of bullet points
BULLET_SECTIONS = ('experience', 'projects')

SKILL_CATEGORIES = ['languages', 'frameworks', 'developerTools', 'libraries']


def _as_text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return ', '.join(_as_text(v) for v in value if _as_text(v))
    return str(value)


def _as_bullets(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, list):
        return []
    return [_as_text(item) for item in value if _as_text(item)]


def normalize_resume(data: Any) -> Dict[str, Any]:
    """
    Coerce a parsed model reply into the fixed resume schema.

    Missing sections become empty, bullet descriptions are always lists of
    non-empty strings, and stray non-object entries are dropped. Unknown
    top-level keys are discarded.

    Raises:
        ValueError: if the reply is not a JSON object at all
    """
    if not isinstance(data, dict):
        raise ValueError("Resume data must be a JSON object.")

    resume: Dict[str, Any] = {field: _as_text(data.get(field)) for field in CONTACT_FIELDS}

    for section, fields in SECTION_FIELDS.items():
        entries = data.get(section) or []
        if not isinstance(entries, list):
            entries = []

        normalized = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            item = {field: _as_text(entry.get(field)) for field in fields}
            if section in BULLET_SECTIONS:
                item['description'] = _as_bullets(entry.get('description'))
            normalized.append(item)
        resume[section] = normalized

    skills = data.get('skills') or {}
    if not isinstance(skills, dict):
        skills = {}
    resume['skills'] = {category: _as_text(skills.get(category)) for category in SKILL_CATEGORIES}

    return resume


def validate_resume(resume: Dict[str, Any]) -> List[str]:
    """Return warnings for a normalized resume that will render poorly."""
    warnings = []

    if not resume.get('name'):
        warnings.append('Resume has no name')
    if not resume.get('email'):
        warnings.append('Resume has no email address')

    for section in SECTION_FIELDS:
        if not resume.get(section):
            warnings.append(f'Section "{section}" is empty and will be omitted')

    for section in BULLET_SECTIONS:
        for index, entry in enumerate(resume.get(section, []), start=1):
            if not entry.get('description'):
                warnings.append(f'{section.capitalize()} entry {index} has no bullet points')

    if not any((resume.get('skills') or {}).values()):
        warnings.append('Section "skills" is empty and will be omitted')

    return warnings
