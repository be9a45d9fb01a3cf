#!/usr/bin/env python3
"""
Configuration for the Resume Modifier

All settings are read once from the environment (a local .env file is loaded
first) and exposed as module-level constants.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# =============================================================================
# LLM provider
# =============================================================================

# "gemini" talks to the Google Generative Language REST API,
# "openai" to any OpenAI-compatible server (LM Studio, vLLM, OpenRouter...)
LLM_PROVIDER = os.getenv('LLM_PROVIDER', 'gemini').strip().lower()
LLM_MODEL = os.getenv('LLM_MODEL', 'gemini-1.5-flash')

GEMINI_API_KEY = os.getenv('GEMINI_API_KEY', '')
GEMINI_BASE_URL = os.getenv(
    'GEMINI_BASE_URL', 'https://generativelanguage.googleapis.com/v1beta')

LLM_BASE_URL = os.getenv('LLM_BASE_URL', 'http://127.0.0.1:1234/v1')
LLM_API_KEY = os.getenv('LLM_API_KEY', 'lm-studio')

LLM_TIMEOUT_S = int(os.getenv('LLM_TIMEOUT_S', '120'))
LLM_TEMPERATURE = float(os.getenv('LLM_TEMPERATURE', '0.2'))
LLM_MAX_TOKENS = int(os.getenv('LLM_MAX_TOKENS', '8192'))

SUPPORTED_PROVIDERS = ('gemini', 'openai')

# =============================================================================
# LaTeX toolchain
# =============================================================================

LATEX_COMPILER = os.getenv('LATEX_COMPILER', 'pdflatex')
LATEX_TIMEOUT_S = int(os.getenv('LATEX_TIMEOUT_S', '60'))

# =============================================================================
# Caching
# =============================================================================

CACHE_ENABLED = _env_bool('CACHE_ENABLED', True)
CACHE_DIR = Path(os.getenv('CACHE_DIR', 'cache'))
CACHE_TTL_HOURS = int(os.getenv('CACHE_TTL_HOURS', '24'))

# =============================================================================
# Web server
# =============================================================================

HOST = os.getenv('HOST', '127.0.0.1')
PORT = int(os.getenv('PORT', '3001'))
DEBUG = _env_bool('DEBUG', False)
MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', str(5 * 1024 * 1024)))


def api_key_for(provider: str) -> str:
    """Return the API key configured for the given provider."""
    if provider == 'gemini':
        return GEMINI_API_KEY
    return LLM_API_KEY
