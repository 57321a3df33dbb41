"""Helpers shared by the scan and fix commands."""

import os
from collections.abc import Iterable, Iterator
from dataclasses import replace
from pathlib import Path

from vibeguard.config_runtime import VibeGuardSettings
from vibeguard.utils.languages import language_for_path
from vibeguard.utils.logging import logger


def iter_source_files(
    paths: Iterable[Path],
    excluded_folders: Iterable[str],
    supported_languages: Iterable[str],
    language: str | None = None,
) -> Iterator[tuple[Path, str]]:
    """Yield ``(path, language_id)`` for every analyzable file under ``paths``.

    Directories are walked in sorted order, skipping excluded folder names.
    With ``language`` set, every file is analyzed as that language.
    """
    excluded = set(excluded_folders)
    supported = set(supported_languages)

    def classify(path: Path) -> str | None:
        language_id = language or language_for_path(path)
        if language_id is None or language_id not in supported:
            return None
        return language_id

    for root in paths:
        if root.is_file():
            language_id = classify(root)
            if language_id is None:
                logger.warning(f"Skipping {root}: unknown or unsupported language")
                continue
            yield root, language_id
            continue

        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in excluded)
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                language_id = classify(path)
                if language_id is not None:
                    yield path, language_id


def read_source(path: Path) -> str:
    with open(path, encoding="utf-8", errors="replace", newline="") as f:
        return f.read()


def load_settings(
    rules_file: Path | None = None,
    max_diagnostics: int | None = None,
    group: bool | None = None,
) -> VibeGuardSettings:
    """Project settings from the current directory, with command-line overrides."""
    cfg_settings = VibeGuardSettings.load(".")
    presentation = cfg_settings.presentation
    overrides = {}
    if max_diagnostics is not None:
        overrides["max_diagnostics_per_file"] = max_diagnostics
    if group is not None:
        overrides["group_similar"] = group
    if overrides:
        presentation = replace(presentation, **overrides)

    return VibeGuardSettings(
        analysis=cfg_settings.analysis,
        cache=cfg_settings.cache,
        presentation=presentation,
        excluded_folders=cfg_settings.excluded_folders,
        rules_file=str(rules_file) if rules_file else cfg_settings.rules_file,
    )
