"""
Language mapping from client language codes to Judge0 language ids.

Based on Judge0 CE v1.13.1. Each entry also carries the filename Judge0 writes
the submitted source to, which shows up in the post-execution filesystem and
must not be reported as user output.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LanguageSpec:
    code: str
    judge0_id: int
    source_filename: str
    label: str


LANGUAGES: dict[str, LanguageSpec] = {
    spec.code: spec
    for spec in (
        LanguageSpec("py", 71, "script.py", "Python 3.8.1"),
        LanguageSpec("js", 63, "script.js", "JavaScript (Node.js 12.14.0)"),
        LanguageSpec("ts", 74, "script.ts", "TypeScript 3.7.4"),
        LanguageSpec("c", 50, "main.c", "C (GCC 9.2.0)"),
        LanguageSpec("cpp", 54, "main.cpp", "C++ (GCC 9.2.0)"),
        LanguageSpec("java", 62, "Main.java", "Java (OpenJDK 13.0.1)"),
        LanguageSpec("php", 68, "script.php", "PHP 7.4.1"),
        LanguageSpec("rs", 73, "main.rs", "Rust 1.40.0"),
        LanguageSpec("go", 60, "main.go", "Go 1.13.5"),
        LanguageSpec("d", 56, "main.d", "D (DMD 2.089.1)"),
        LanguageSpec("f90", 59, "main.f90", "Fortran (GFortran 9.2.0)"),
        LanguageSpec("r", 80, "script.r", "R 4.0.0"),
    )
}

SUPPORTED_LANGUAGES = tuple(LANGUAGES)


def is_valid_language(lang: str | None) -> bool:
    return lang in LANGUAGES


def get_judge0_language_id(lang: str) -> int:
    """Get the Judge0 language id for a client language code."""
    try:
        return LANGUAGES[lang].judge0_id
    except KeyError:
        raise ValueError(
            f"Unsupported language: {lang}. Supported: {', '.join(SUPPORTED_LANGUAGES)}"
        ) from None
