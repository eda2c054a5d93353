#!/usr/bin/env python3
"""Regular expressions used by the content classifier.

Ordering of CODE_LANGUAGE_PATTERNS is significant: the first language with
any matching pattern wins.
"""
import re

URL_PATTERN = re.compile(r"https?://[^\s]+")

EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b")

# A source keyword followed by whitespace marks the text as code.
CODE_KEYWORD_PATTERN = re.compile(
    r"(def|class|function|import|from|if|for|while|try|catch)\s"
)

CODE_LANGUAGE_PATTERNS: tuple[tuple[str, tuple[re.Pattern[str], ...]], ...] = tuple(
    (language, tuple(re.compile(p, re.IGNORECASE) for p in patterns))
    for language, patterns in (
        ("python", (r"def\s+\w+\(", r"import\s+\w+", r"from\s+\w+\s+import", r"print\s*\(")),
        ("javascript", (r"function\s+\w+\(", r"const\s+\w+", r"let\s+\w+", r"var\s+\w+")),
        ("html", (r"<html>", r"<head>", r"<body>", r"<div>", r"<span>")),
        ("css", (r"\{", r"\}", r":\s*;", r"@media", r"@import")),
        ("sql", (r"SELECT\s+", r"INSERT\s+INTO", r"UPDATE\s+", r"DELETE\s+FROM")),
    )
)

UNKNOWN_LANGUAGE: str = "unknown"
