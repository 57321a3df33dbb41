"""Centralized constants for VibeGuard.

Single source of truth for paths, default limits and environment variable
names used across the package.
"""

from pathlib import Path

# ============================================================================
# OUTPUT DIRECTORIES
# ============================================================================

# Project-local directory for VibeGuard configuration and logs
VG_DIR = Path("./.vibeguard")

CONFIG_FILE_NAME = "config.json"
RULES_FILE_NAME = "rules.yml"

ERROR_LOG_FILE = VG_DIR / "error.log"

# ============================================================================
# ANALYSIS LIMITS
# ============================================================================

DEFAULT_DEBOUNCE_MS = 500

# Documents above this size (in UTF-8 bytes) are never analyzed
DEFAULT_MAX_FILE_SIZE = 1024 * 1024

DEFAULT_MAX_ANALYSIS_MS = 5000

# Matches per rule per document before the rule is abandoned
DEFAULT_MAX_MATCHES_PER_RULE = 500

# ============================================================================
# CACHE
# ============================================================================

DEFAULT_CACHE_TTL_SECONDS = 60.0
DEFAULT_CACHE_CAPACITY = 100
DEFAULT_CACHE_SWEEP_SECONDS = 30.0

# ============================================================================
# PRESENTATION
# ============================================================================

DEFAULT_MAX_DIAGNOSTICS_PER_FILE = 50

# Findings considered by one batch quick fix
DEFAULT_MAX_BATCH_FIXES = 10

# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_PREFIX = "VIBEGUARD"
ENV_LOG_LEVEL = "VIBEGUARD_LOG_LEVEL"
ENV_LOG_JSON = "VIBEGUARD_LOG_JSON"
ENV_LOG_FILE = "VIBEGUARD_LOG_FILE"
ENV_REQUEST_ID = "VIBEGUARD_REQUEST_ID"

# ============================================================================
# LANGUAGES
# ============================================================================

SUPPORTED_LANGUAGES = [
    "javascript",
    "javascriptreact",
    "typescript",
    "typescriptreact",
    "vue",
    "html",
    "python",
    "sql",
    "json",
    "yaml",
    "dockerfile",
    "dotenv",
    "properties",
    "shellscript",
    "php",
    "java",
    "csharp",
    "go",
    "ruby",
]

EXTENSION_LANGUAGES = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".mts": "typescript",
    ".tsx": "typescriptreact",
    ".vue": "vue",
    ".html": "html",
    ".htm": "html",
    ".py": "python",
    ".sql": "sql",
    ".json": "json",
    ".yml": "yaml",
    ".yaml": "yaml",
    ".env": "dotenv",
    ".properties": "properties",
    ".sh": "shellscript",
    ".bash": "shellscript",
    ".php": "php",
    ".java": "java",
    ".cs": "csharp",
    ".go": "go",
    ".rb": "ruby",
}

# Exact file names that carry their own language
FILENAME_LANGUAGES = {
    "Dockerfile": "dockerfile",
    ".npmrc": "properties",
    ".yarnrc": "properties",
}

EXCLUDED_FOLDERS = [
    "node_modules",
    ".git",
    "dist",
    "build",
    "out",
    "coverage",
    ".next",
    ".nuxt",
    ".vscode",
    ".vibeguard",
    "__pycache__",
    ".venv",
]
