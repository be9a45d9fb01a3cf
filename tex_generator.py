#!/usr/bin/env python3
"""
LaTeX renderer for the resume JSON schema

Turns a resume dictionary (see resume_schema.py) into a complete, compilable
one-page LaTeX document based on the widely used "Jake's Resume" template.

Rendering is a pure function of its input: the same resume always produces
byte-identical output, which is what lets compiled PDFs be cached by tex
content.
"""

from typing import Any, Dict, List, Optional, Sequence

# Applied in order. The backslash must go first so that the backslashes
# introduced by later replacements are left alone.
TEX_REPLACEMENTS = [
    ('\\', r'\textbackslash{}'),
    ('&', r'\&'),
    ('%', r'\%'),
    ('$', r'\$'),
    ('#', r'\#'),
    ('_', r'\_'),
    ('{', r'\{'),
    ('}', r'\}'),
    ('~', r'\textasciitilde{}'),
    ('^', r'\textasciicircum{}'),
    ('μ', r'$\mu$'),
    ('α', r'$\alpha$'),
    ('β', r'$\beta$'),
]

DEFAULT_SECTIONS = ['education', 'experience', 'projects', 'skills']

SKILL_LABELS = [
    ('languages', 'Languages'),
    ('frameworks', 'Frameworks'),
    ('developerTools', 'Developer Tools'),
    ('libraries', 'Libraries'),
]

PREAMBLE = r"""
\documentclass[letterpaper,11pt]{article}
\usepackage[T1]{fontenc}
\usepackage[utf8]{inputenc}
\usepackage{latexsym}
\usepackage[empty]{fullpage}
\usepackage{titlesec}
\usepackage{marvosym}
\usepackage[usenames,dvipsnames]{color}
\usepackage{verbatim}
\usepackage{enumitem}
\usepackage[hidelinks]{hyperref}
\usepackage{fancyhdr}
\usepackage[english]{babel}
\usepackage{tabularx}
\usepackage{fontawesome5}
\usepackage{multicol}
\usepackage{lmodern}
\setlength{\multicolsep}{0pt}
\pagestyle{fancy}
\fancyhf{}
\fancyfoot{}
\setlength{\footskip}{4.08003pt}
\renewcommand{\headrulewidth}{0pt}
\renewcommand{\footrulewidth}{0pt}
\addtolength{\oddsidemargin}{-0.5in}
\addtolength{\evensidemargin}{-0.5in}
\addtolength{\textwidth}{1in}
\addtolength{\topmargin}{-.5in}
\addtolength{\textheight}{1.0in}
\urlstyle{same}
\raggedbottom
\raggedright
\setlength{\tabcolsep}{0in}
\titleformat{\section}{\vspace{-4pt}\scshape\raggedright\large}{}{0em}{}[\color{black}\titlerule \vspace{-5pt}]
\pdfgentounicode=1
\newcommand{\resumeItem}[1]{\item\small{{#1 \vspace{-2pt}}}}
\newcommand{\resumeSubheading}[4]{\vspace{-2pt}\item\begin{tabular*}{0.97\textwidth}[t]{l@{\extracolsep{\fill}}r}\textbf{#1} & #2 \\ \textit{\small#3} & \textit{\small #4} \\ \end{tabular*}\vspace{-7pt}}
\newcommand{\resumeProjectHeading}[2]{\item\begin{tabular*}{0.97\textwidth}{l@{\extracolsep{\fill}}r}\small#1 & #2 \\ \end{tabular*}\vspace{-7pt}}
\renewcommand\labelitemii{\textbullet}
\newcommand{\resumeSubHeadingListStart}{\begin{itemize}[leftmargin=0.15in, label={}]}
\newcommand{\resumeSubHeadingListEnd}{\end{itemize}}
\newcommand{\resumeItemListStart}{\begin{itemize}}
\newcommand{\resumeItemListEnd}{\end{itemize}\vspace{-5pt}}
\begin{document}
""".lstrip('\n')

BULLET_INDENT = '\n            '
SEPARATOR = r'$\|$'


def escape_tex(value: Any) -> str:
    """Escape LaTeX special characters and a few common Greek symbols."""
    if not value:
        return ''
    text = str(value)
    for char, replacement in TEX_REPLACEMENTS:
        text = text.replace(char, replacement)
    return text


def _bullets(description: Any) -> List[str]:
    if not isinstance(description, list):
        return []
    return [str(item) for item in description if item and str(item).strip()]


def _item_list(description: Any) -> str:
    items = BULLET_INDENT.join(
        r'\resumeItem{' + escape_tex(bullet) + '}' for bullet in _bullets(description))
    return (
        '\n        \\resumeItemListStart'
        + BULLET_INDENT + items
        + '\n        \\resumeItemListEnd'
    )


def _subheading(first: Any, second: Any, third: Any, fourth: Any) -> str:
    return r'\resumeSubheading{%s}{%s}{%s}{%s}' % (
        escape_tex(first), escape_tex(second), escape_tex(third), escape_tex(fourth))


def render_header(resume: Dict[str, Any]) -> str:
    """Centered name line plus the contact line."""
    email = escape_tex(resume.get('email'))
    phone = resume.get('phone')
    linkedin = resume.get('linkedin')
    github = resume.get('github')

    phone_part = f'{escape_tex(phone)} {SEPARATOR}' if phone else ''
    linkedin_part = ''
    if linkedin:
        linkedin_part = (SEPARATOR + r' \href{https://' + escape_tex(linkedin) + r'}{\underline{'
                         + escape_tex(linkedin) + '}}')
    github_part = ''
    if github:
        github_part = (SEPARATOR + r' \href{https://github.com/' + escape_tex(github)
                       + r'}{\underline{github.com/' + escape_tex(github) + '}}')

    return (
        '\\begin{center}\n'
        '    \\textbf{\\Huge \\scshape ' + escape_tex(resume.get('name')) + '} \\\\ \\vspace{1pt}\n'
        '    \\small ' + phone_part + ' \\href{mailto:' + email + '}{\\underline{' + email + '}} '
        + linkedin_part + ' ' + github_part + '\n'
        '\\end{center}'
    )


def render_education(resume: Dict[str, Any]) -> str:
    items = ''.join(
        '\n    ' + _subheading(edu.get('institution'), edu.get('dates'),
                               edu.get('degree'), edu.get('details') or '')
        for edu in resume.get('education') or [])
    if not items:
        return ''
    return r'\section{Education}\resumeSubHeadingListStart ' + items + r' \resumeSubHeadingListEnd'


def render_experience(resume: Dict[str, Any]) -> str:
    items = ''.join(
        '\n    ' + _subheading(exp.get('company'), exp.get('dates'),
                               exp.get('role'), exp.get('location') or '')
        + _item_list(exp.get('description'))
        for exp in resume.get('experience') or [])
    if not items:
        return ''
    return r'\section{Experience}\resumeSubHeadingListStart ' + items + r' \resumeSubHeadingListEnd'


def render_projects(resume: Dict[str, Any]) -> str:
    items = ''.join(
        '\n    \\resumeProjectHeading{\\textbf{' + escape_tex(proj.get('name')) + '}}{'
        + escape_tex(proj.get('dates')) + '}'
        + _item_list(proj.get('description'))
        for proj in resume.get('projects') or [])
    if not items:
        return ''
    return r'\section{Projects}\resumeSubHeadingListStart ' + items + r' \resumeSubHeadingListEnd'


def render_skills(resume: Dict[str, Any]) -> str:
    skills = resume.get('skills') or {}
    lines = [
        r'\textbf{' + label + '}{: ' + escape_tex(skills.get(key)) + '}'
        for key, label in SKILL_LABELS if skills.get(key)
    ]
    if not lines:
        return ''
    return (r'\section{Technical Skills}\begin{itemize}[leftmargin=0.15in, label={}]\small{\item{ '
            + ' \\\\\n      '.join(lines) + r' }}\end{itemize}')


SECTION_RENDERERS = {
    'education': render_education,
    'experience': render_experience,
    'projects': render_projects,
    'skills': render_skills,
}


def generate_tex(resume: Dict[str, Any], sections: Optional[Sequence[str]] = None) -> str:
    """
    Render a resume dictionary into a complete LaTeX document.

    Args:
        resume: Resume data in the resume_schema shape
        sections: Optional section order; defaults to education, experience,
            projects, skills. Empty sections are omitted entirely.

    Raises:
        ValueError: if sections is not a list of names, or names an unknown section
    """
    if sections is None:
        order = list(DEFAULT_SECTIONS)
    elif isinstance(sections, (list, tuple)) and all(isinstance(name, str) for name in sections):
        order = list(sections)
    else:
        raise ValueError("Sections must be a list of section names")
    unknown = [name for name in order if name not in SECTION_RENDERERS]
    if unknown:
        raise ValueError(f"Unknown resume section(s): {', '.join(unknown)}")

    body = '\n'.join(SECTION_RENDERERS[name](resume) for name in order)
    return '\n' + PREAMBLE + render_header(resume) + '\n' + body + '\n\\end{document}\n'
