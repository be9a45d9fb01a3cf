#!/usr/bin/env python3
"""
Startup script for the Resume Modifier

Checks the environment (Python version, LLM credentials, LaTeX toolchain)
before starting the web interface.
"""

import sys
import subprocess

import config


def check_dependencies() -> bool:
    """Check if all required dependencies are available."""
    print("🔍 Checking dependencies...")

    if sys.version_info < (3, 9):
        print("❌ Python 3.9+ required")
        return False

    if config.LLM_PROVIDER not in config.SUPPORTED_PROVIDERS:
        print(f"❌ Unsupported LLM_PROVIDER '{config.LLM_PROVIDER}' "
              f"(expected one of: {', '.join(config.SUPPORTED_PROVIDERS)})")
        return False

    if config.LLM_PROVIDER == 'gemini' and not config.GEMINI_API_KEY:
        print("❌ GEMINI_API_KEY is not set - add it to your environment or a .env file")
        return False
    print(f"✅ LLM provider: {config.LLM_PROVIDER} ({config.LLM_MODEL})")

    # LaTeX is optional: without it the app still returns .tex source
    try:
        result = subprocess.run([config.LATEX_COMPILER, '--version'],
                                capture_output=True, text=True, timeout=30)
        if result.returncode != 0:
            print(f"⚠️  {config.LATEX_COMPILER} not working - PDF generation will fail")
        else:
            print(f"✅ {config.LATEX_COMPILER} found")
    except (FileNotFoundError, subprocess.TimeoutExpired):
        print(f"⚠️  {config.LATEX_COMPILER} not found - PDF generation will fail")

    print("✅ Dependency check completed")
    return True


def create_directories():
    """Create necessary directories if they don't exist."""
    if config.CACHE_ENABLED:
        config.CACHE_DIR.mkdir(parents=True, exist_ok=True)
        print(f"✅ Cache directory: {config.CACHE_DIR}")


def main():
    """Main startup function."""
    print("🚀 Starting Resume Modifier")
    print("=" * 50)

    if not check_dependencies():
        print("\n❌ Dependency check failed. Please fix the issues above.")
        sys.exit(1)

    create_directories()

    print("\n🎯 Starting web interface...")
    print(f"📱 Open http://localhost:{config.PORT} in your browser")
    print("🛑 Press Ctrl+C to stop the server")
    print("=" * 50)

    try:
        from app import app
        app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)
    except KeyboardInterrupt:
        print("\n👋 Server stopped by user")


if __name__ == "__main__":
    main()
