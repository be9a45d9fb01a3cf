#!/usr/bin/env python3
"""
Resume Modifier - command line front end

Reads a resume (PDF or text), asks the configured LLM to apply the editing
instructions, and writes the resulting LaTeX. With --pdf the document is also
compiled next to the .tex file.

Usage:
    python3 generate-resume.py --resume resume.pdf --instructions "Add my internship at Acme" --out resume.tex
    python3 generate-resume.py --resume resume.txt --instructions-file changes.txt --out out/resume.tex --pdf
"""

import argparse
import json
import sys
import time
from pathlib import Path

import config
from llm_client import rewrite_resume
from pdf_utils import compile_latex_to_pdf
from resume_schema import validate_resume
from resume_text import extract_resume_text
from tex_generator import generate_tex


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Rewrite a resume with an LLM and render it as LaTeX")
    ap.add_argument("--resume", required=True, help="Path to the current resume (.pdf or .txt)")
    group = ap.add_mutually_exclusive_group(required=True)
    group.add_argument("--instructions", help="Editing instructions")
    group.add_argument("--instructions-file", help="File containing editing instructions")
    ap.add_argument("--out", default="resume.tex", help="Output .tex path (default: resume.tex)")
    ap.add_argument("--json-out", help="Also write the structured resume JSON here")
    ap.add_argument("--pdf", action="store_true", help="Compile the LaTeX to PDF as well")
    ap.add_argument("--provider", default=config.LLM_PROVIDER, choices=config.SUPPORTED_PROVIDERS)
    ap.add_argument("--model", default=config.LLM_MODEL)
    ap.add_argument("--no-cache", action="store_true", help="Disable caching for this request")
    return ap.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    start_time = time.time()

    resume_path = Path(args.resume)
    if not resume_path.exists():
        sys.exit(f"ERROR: Resume file not found: {resume_path}")

    if args.instructions_file:
        instructions_path = Path(args.instructions_file)
        if not instructions_path.exists():
            sys.exit(f"ERROR: Instructions file not found: {instructions_path}")
        instructions = instructions_path.read_text(encoding="utf-8").strip()
    else:
        instructions = args.instructions.strip()

    if not instructions:
        sys.exit("ERROR: Instructions cannot be empty")

    try:
        resume_text = extract_resume_text(resume_path.name, resume_path.read_bytes())
        resume = rewrite_resume(instructions, resume_text, provider=args.provider,
                                model=args.model, use_cache=not args.no_cache)
    except Exception as e:
        sys.exit(f"ERROR: {e}")

    for warning in validate_resume(resume):
        print(f"⚠️  {warning}", file=sys.stderr)

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    tex = generate_tex(resume)
    out_path.write_text(tex, encoding="utf-8")
    print(f"✅ Wrote LaTeX to: {out_path}", file=sys.stderr)

    if args.json_out:
        json_path = Path(args.json_out)
        json_path.parent.mkdir(parents=True, exist_ok=True)
        json_path.write_text(json.dumps(resume, ensure_ascii=False, indent=2), encoding="utf-8")
        print(f"✅ Wrote resume JSON to: {json_path}", file=sys.stderr)

    if args.pdf:
        result = compile_latex_to_pdf(tex, use_cache=not args.no_cache)
        if not result['success']:
            sys.exit(f"ERROR: {result['error']}")
        pdf_path = out_path.with_suffix('.pdf')
        pdf_path.write_bytes(result['pdf_bytes'])
        print(f"✅ Wrote PDF to: {pdf_path}", file=sys.stderr)

    print(f"⏱️  Total time: {time.time() - start_time:.1f}s", file=sys.stderr)


if __name__ == "__main__":
    main()
