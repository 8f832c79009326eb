"""用语文本整理：英文按词首字母大写，保留缩写词原样。"""

from __future__ import annotations

import re

_ALL_CAPS = re.compile(r"^[A-Z]{2,}$")
_JOINED_CAPS = re.compile(r"^[A-Z]+[.\-&/][A-Z]+")
_CAMEL_CASE = re.compile(r"^[A-Z][a-z]*[A-Z]")
_SEPARATOR_LOWER = re.compile(r"([.\-&/])([a-z])")


def _looks_like_abbreviation(word: str) -> bool:
    return bool(_ALL_CAPS.match(word) or _JOINED_CAPS.match(word) or _CAMEL_CASE.match(word))


def format_english_term(text: str) -> str:
    """``heat exchanger`` → ``Heat Exchanger``；全大写、``I&C``、``PowerPoint`` 这类缩写保持原样。"""
    if not text:
        return text

    words = text.strip().split()
    formatted = []
    for word in words:
        if _looks_like_abbreviation(word):
            formatted.append(_SEPARATOR_LOWER.sub(lambda m: m.group(1) + m.group(2).upper(), word))
        else:
            formatted.append(word[:1].upper() + word[1:].lower())
    return " ".join(formatted)


def format_korean_term(text: str) -> str:
    return (text or "").strip()


def format_description(text: str) -> str:
    return (text or "").strip()
