"""File path to language identifier mapping."""

from pathlib import Path

from .constants import EXTENSION_LANGUAGES, FILENAME_LANGUAGES


def language_for_path(path: str | Path) -> str | None:
    """Return the language id for a file path, or None if it is not analyzable."""
    p = Path(path)
    name = p.name

    if name in FILENAME_LANGUAGES:
        return FILENAME_LANGUAGES[name]
    if name.startswith("Dockerfile") or name.endswith(".dockerfile"):
        return "dockerfile"
    if name == ".env" or name.startswith(".env."):
        return "dotenv"

    return EXTENSION_LANGUAGES.get(p.suffix.lower())
