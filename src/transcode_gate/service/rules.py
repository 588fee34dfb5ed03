"""Placeholder transform rules between JavaScript and Python snippets.

The rules are purely textual and deterministic: the same code and language
pair always produce the same output. They stand in for a real transcoding
engine and only handle simple function declarations.
"""
from __future__ import annotations

import re
from typing import Tuple

from ..models import Language

_JS_FUNCTION_DECL = re.compile(r"\bfunction\s+(\w+)\s*\(")
_PY_DEF_DECL = re.compile(r"\bdef\s+(\w+)\s*\(")
_RETURN = re.compile(r"return\s+")

_COUNTERPART = {
    Language.JAVASCRIPT: Language.PYTHON,
    Language.PYTHON: Language.JAVASCRIPT,
}


def detect_language(code: str) -> Language:
    """Guess the language of ``code``; JavaScript wins when both markers appear."""

    if _JS_FUNCTION_DECL.search(code):
        return Language.JAVASCRIPT
    if _PY_DEF_DECL.search(code):
        return Language.PYTHON
    return Language.AUTO


def resolve_languages(code: str, source: Language, target: Language) -> Tuple[Language, Language]:
    if source is Language.AUTO:
        source = detect_language(code)
    if target is Language.AUTO:
        target = _COUNTERPART.get(source, Language.AUTO)
    return source, target


def javascript_to_python(code: str) -> str:
    text = _JS_FUNCTION_DECL.sub(r"def \1(", code)
    text = _RETURN.sub("return ", text)
    text = text.replace("{", ":").replace("}", "").replace(";", "")
    return "\n".join(line.rstrip() for line in text.split("\n"))


def python_to_javascript(code: str) -> str:
    text = _PY_DEF_DECL.sub(r"function \1(", code)
    text = _RETURN.sub("return ", text)
    text = text.replace(":", " {")
    lines = [line if line.endswith("{") else f"{line};" for line in text.split("\n")]
    return "\n".join(lines) + "\n}"


def transcode(code: str, source: Language, target: Language) -> Tuple[str, Language, Language]:
    """Return ``(output, resolved_source, resolved_target)`` for ``code``."""

    source, target = resolve_languages(code, source, target)
    if source is Language.JAVASCRIPT and target is Language.PYTHON:
        return javascript_to_python(code), source, target
    if source is Language.PYTHON and target is Language.JAVASCRIPT:
        return python_to_javascript(code), source, target
    if source is target and source is not Language.AUTO:
        return code, source, target
    marker = "#" if target is Language.PYTHON else "//"
    return f"{marker} Transcoded code\n{code}", source, target


__all__ = [
    "detect_language",
    "javascript_to_python",
    "python_to_javascript",
    "resolve_languages",
    "transcode",
]
