#!/usr/bin/env python3
"""
LLM client for the Resume Modifier

Sends the user's resume text and editing instructions to a hosted model and
turns the reply into a resume dictionary.

Two transports are supported, both over plain HTTP with requests:
- gemini: Google Generative Language API (generateContent)
- openai: any OpenAI-compatible /chat/completions server
"""

import json
import re
import sys
import time
from typing import Any, Dict, Optional

import requests

import config
from cache_manager import cache_llm_response, get_cached_llm_response
from performance_monitor import record_operation_error, record_operation_time
from resume_schema import RESUME_JSON_STRUCTURE, normalize_resume

# =============================================================================
# Prompt
# =============================================================================

SYSTEM_PROMPT = f"""
You are an expert resume-building AI assistant. Your task is to act as a data processor.
You will receive the plain text of a user's current resume and a set of instructions for changes.
Your one and only job is to return a single, valid JSON object that represents the final, updated resume.
First, parse the 'Current Resume Text' into the provided JSON structure.
Then, apply the 'User's Instructions' to modify that JSON object.
Finally, return the complete, modified JSON object.

RULES:
- Your entire output MUST be a single, valid JSON object.
- DO NOT add any conversational text, explanations, or markdown fences.
- The 'description' field for each experience and project item must be an array of strings.
- When writing or updating bullet points in the 'description' fields, phrase them professionally and aim for a single line on a standard PDF. A bullet that is very short, or just one word longer than a line, is problematic.
- When generating or updating any 'dates' field, use 3-letter abbreviations for months (e.g., Jun, Aug, Sep).
- Do not add full stops to the end of bullet points.
- Ensure there are no unnecessary white-spaces such as empty lines.
- Skill Integration Rule: When a user adds a new project or experience, analyze its technologies and description for technical skills (languages, frameworks, tools, libraries). For each skill found, check whether it is already listed in the main 'skills' object at the root of the JSON. If it is NOT listed, add it to the appropriate string in the 'skills' object (e.g., add "React" to 'skills.frameworks'). Do NOT list the technologies in the project's own description bullets.
- Adhere strictly to this JSON structure: {json.dumps(RESUME_JSON_STRUCTURE, separators=(',', ':'))}
""".strip()

INVALID_JSON_ERROR = "AI response did not contain a valid JSON object."


def build_prompt(instructions: str, resume_text: str) -> str:
    """Combine the system prompt, the user's instructions and the resume text."""
    return (f"{SYSTEM_PROMPT}\n\n## User's Instructions:\n{instructions}"
            f"\n\n## User's Current Resume Text:\n{resume_text}")


# =============================================================================
# Reply parsing
# =============================================================================

def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Pull the JSON object out of a model reply.

    Models sometimes wrap the object in code fences or add a sentence before
    or after it, so everything from the first '{' to the last '}' is parsed.

    Raises:
        ValueError: if no parseable JSON object is present
    """
    s = re.sub(r'^```(?:json)?\s*', '', (text or '').strip())
    s = re.sub(r'```\s*$', '', s.strip())

    match = re.search(r'\{[\s\S]*\}', s)
    if not match:
        raise ValueError(INVALID_JSON_ERROR)

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        print(f"Could not parse LLM reply as JSON: {e}", file=sys.stderr)
        raise ValueError(INVALID_JSON_ERROR) from e

    if not isinstance(parsed, dict):
        raise ValueError(INVALID_JSON_ERROR)
    return parsed


# =============================================================================
# Transports
# =============================================================================

def gemini_generate(base_url: str, api_key: str, model: str, prompt: str,
                    options: Dict[str, Any]) -> str:
    """Call the Gemini generateContent endpoint and return the reply text."""
    url = f"{base_url}/models/{model}:generateContent"
    payload = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": options.get("temperature", config.LLM_TEMPERATURE),
            "maxOutputTokens": options.get("max_tokens", config.LLM_MAX_TOKENS),
        },
    }

    r = requests.post(url, params={"key": api_key}, headers={"Content-Type": "application/json"},
                      json=payload, timeout=options.get("timeout", config.LLM_TIMEOUT_S))
    r.raise_for_status()
    data = r.json()

    candidates = data.get("candidates") or []
    if not candidates:
        reason = (data.get("promptFeedback") or {}).get("blockReason")
        raise RuntimeError(f"Model returned no candidates{f' (blocked: {reason})' if reason else ''}")

    parts = (candidates[0].get("content") or {}).get("parts") or []
    return ''.join(part.get("text", '') for part in parts)


def chat_completions(base_url: str, api_key: str, model: str, prompt: str,
                     options: Dict[str, Any]) -> str:
    """Send a chat completion request to an OpenAI-compatible server."""
    url = f"{base_url}/chat/completions"
    payload = {
        "model": model,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": options.get("temperature", config.LLM_TEMPERATURE),
        "max_tokens": options.get("max_tokens", config.LLM_MAX_TOKENS),
        "stream": False,
    }

    r = requests.post(url, headers={"Authorization": f"Bearer {api_key}"},
                      json=payload, timeout=options.get("timeout", config.LLM_TIMEOUT_S))
    r.raise_for_status()
    data = r.json()
    return data["choices"][0]["message"]["content"]


def generate_content(prompt: str, provider: Optional[str] = None, model: Optional[str] = None,
                     options: Optional[Dict[str, Any]] = None) -> str:
    """
    Send a prompt to the configured model and return its raw text reply.

    Raises:
        ValueError: for an unknown provider
        RuntimeError: when the provider needs an API key and none is set
        requests.RequestException: on transport or HTTP errors
    """
    provider = (provider or config.LLM_PROVIDER).lower()
    model = model or config.LLM_MODEL
    options = options or {}

    if provider not in config.SUPPORTED_PROVIDERS:
        raise ValueError(f"Unsupported LLM provider: {provider}")

    api_key = config.api_key_for(provider)
    if provider == 'gemini' and not api_key:
        raise RuntimeError("GEMINI_API_KEY is not set")

    start = time.time()
    try:
        if provider == 'gemini':
            reply = gemini_generate(config.GEMINI_BASE_URL, api_key, model, prompt, options)
        else:
            reply = chat_completions(config.LLM_BASE_URL, api_key, model, prompt, options)
    except Exception as e:
        record_operation_error('llm_request', str(e))
        print(f"LLM call failed: {e}", file=sys.stderr)
        raise

    record_operation_time('llm_request', time.time() - start)
    return reply


# =============================================================================
# Pipeline entry point
# =============================================================================

def rewrite_resume(instructions: str, resume_text: str, provider: Optional[str] = None,
                   model: Optional[str] = None, use_cache: bool = True) -> Dict[str, Any]:
    """
    Ask the model to apply the instructions to the resume and return the
    updated resume in normalized schema form.

    Raises:
        ValueError: when the reply holds no usable JSON object
    """
    prompt = build_prompt(instructions, resume_text)
    cache_key = f"{provider or config.LLM_PROVIDER}|{model or config.LLM_MODEL}|{prompt}"

    reply = get_cached_llm_response(cache_key) if use_cache else None
    if reply:
        print("🚀 Using cached LLM response", file=sys.stderr)
    else:
        print("⚙️ Making LLM request (no cache hit)", file=sys.stderr)
        reply = generate_content(prompt, provider=provider, model=model)

    resume = normalize_resume(extract_json_object(reply))

    if use_cache:
        cache_llm_response(cache_key, reply)

    return resume
