from __future__ import annotations

import re
from typing import Collection

NAME_PATTERN = re.compile(r"[가-힣]{2,4}")

# Hangul words that look like names in pasted rosters but are not.
EXCLUDED_WORDS: frozenset[str] = frozenset(
    {
        "출석",
        "결석",
        "지각",
        "오전",
        "오후",
        "저녁",
        "요일",
        "명단",
        "확인",
        "선생님",
        "수업",
        "체크",
        "이름",
        "번호",
    }
)


def extract_names(text: str, stopwords: Collection[str] = EXCLUDED_WORDS) -> list[str]:
    """Return candidate member names in order of first appearance."""

    if not text or not text.strip():
        return []

    seen: set[str] = set()
    names: list[str] = []
    for token in NAME_PATTERN.findall(text):
        if token in seen or token in stopwords:
            continue
        seen.add(token)
        names.append(token)
    return names
