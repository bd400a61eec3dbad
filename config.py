"""
Configuration - loads settings from environment / .env file.
"""

from __future__ import annotations

import os
import shlex
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


# Paths
PROJECT_ROOT = Path(__file__).parent
TEST_PROJECT_DIR = Path(os.getenv("TEST_PROJECT_DIR", str(PROJECT_ROOT)))
FEATURES_DIR = TEST_PROJECT_DIR / os.getenv("FEATURES_DIR", "features")
STEP_DEFINITIONS_FILE = TEST_PROJECT_DIR / os.getenv(
    "STEP_DEFINITIONS_FILE", "features/step-definitions/settings.steps.js"
)
PAGE_OBJECT_FILE = TEST_PROJECT_DIR / os.getenv(
    "PAGE_OBJECT_FILE", "features/pageobjects/settings.page.js"
)
STATIC_DIR = TEST_PROJECT_DIR / os.getenv("STATIC_DIR", "public")

# Generative backend: "openai" or "ollama"
LLM_BACKEND = os.getenv("LLM_BACKEND", "openai").lower()
LLM_TIMEOUT_SEC = float(os.getenv("LLM_TIMEOUT_SEC", "120"))
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "4096"))

# OpenAI
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4.1")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or None

# Ollama (local model server)
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.1:8b")

# Test runner
RUNNER_COMMAND = shlex.split(os.getenv("RUNNER_COMMAND", "npm run wdio -- --spec"))
EXTRA_PATH_DIRS = os.getenv(
    "EXTRA_PATH_DIRS", "/usr/bin:/bin:/usr/sbin:/sbin:/usr/local/bin"
).split(os.pathsep)
# Unset means the runner's own timeouts govern
RUNNER_TIMEOUT_SEC = _optional_float("RUNNER_TIMEOUT_SEC")

# Max runner output kept on a step record (characters)
MAX_OUTPUT_CHARS = 20_000

# Status API
HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", "10"))
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
