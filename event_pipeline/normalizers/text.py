"""String cleanup and keyword tagging."""

import re
from typing import Any

TRUNCATION_MARKER = "..."

# Fixed technology vocabulary matched against title + description
TECH_KEYWORDS = [
    "javascript", "python", "java", "react", "angular", "vue", "nodejs", "node.js",
    "typescript", "aws", "azure", "gcp", "cloud", "devops", "kubernetes", "docker",
    "blockchain", "ai", "machine learning", "ml", "data science", "ux", "ui", "design",
    "web3", "fullstack", "frontend", "backend", "mobile", "android", "ios", "swift",
    "flutter", "react native", "php", "laravel", "django", "ruby", "rails",
]


def sanitize_string(value: Any, max_len: int = 1000) -> str:
    """Collapse whitespace, trim and cap length.

    None (or any falsy value) becomes "". Strings longer than max_len are
    cut and suffixed with TRUNCATION_MARKER, so the result is never longer
    than max_len + len(TRUNCATION_MARKER).
    """
    if not value:
        return ""

    text = re.sub(r"\s+", " ", str(value)).strip()

    if len(text) > max_len:
        return text[:max_len] + TRUNCATION_MARKER
    return text


def extract_tech_tags(text: Any) -> list[str]:
    """Return vocabulary terms found in text (case-insensitive substring match).

    Order follows the vocabulary; each term appears once.
    """
    if not text:
        return []

    lower_text = str(text).lower()
    tags: list[str] = []
    for keyword in TECH_KEYWORDS:
        if keyword in lower_text and keyword not in tags:
            tags.append(keyword)
    return tags
