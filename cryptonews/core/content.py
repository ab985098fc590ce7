"""Derived article fields: slug, excerpt and reading time."""
import math
from typing import Iterable, List

from slugify import slugify

from cryptonews.config import settings

SLUG_MAX_LENGTH = 200


def generate_slug(title: str) -> str:
    return slugify(title, max_length=SLUG_MAX_LENGTH) or "article"


def unique_slug(base: str, taken: Iterable[str]) -> str:
    """Return ``base`` or the first ``base-N`` (N >= 2) not in ``taken``."""
    taken = set(taken)
    if base not in taken:
        return base
    n = 2
    while f"{base}-{n}" in taken:
        n += 1
    return f"{base}-{n}"


def build_excerpt(content: str, length: int = None) -> str:
    length = length or settings.EXCERPT_LENGTH
    return content[:length] + "..."


def calculate_read_time(content: str, words_per_minute: int = None) -> int:
    words_per_minute = words_per_minute or settings.WORDS_PER_MINUTE
    word_count = len(content.split())
    return max(1, math.ceil(word_count / words_per_minute))


def clean_tags(tags: Iterable[str]) -> List[str]:
    stripped = (tag.strip() for tag in tags)
    return [tag for tag in stripped if tag]


def build_search_document(title: str, content: str, tags: Iterable[str]) -> str:
    """Lower-cased text the listing search matches against, one tag per line."""
    return "\n".join([title, content, *tags]).lower()
