"""
Parsers turning free-form model output into typed answers.

Each parser raises ValueError when the text does not contain a usable
answer; GenerationClient treats that as a parse failure and retries.
"""

import re

from inbox_triage.models.enums import Classification

_INTEGER_PATTERN = re.compile(r"-?\d+")


def parse_classification(text: str) -> Classification:
    """
    Find the single category named in ``text``.
    
    The match is case-insensitive and must be unambiguous: text naming two
    categories (e.g. "personal, not promotional") is rejected.
    
    Raises:
        ValueError: No category, or more than one, is mentioned
    """
    normalized = text.lower()
    mentioned = [category for category in Classification if category.value in normalized]
    if len(mentioned) != 1:
        raise ValueError(f"Failed to parse classification:\n{text}")
    return mentioned[0]


def parse_link_index(text: str) -> int:
    """
    Read the first integer in ``text`` (``-1`` means "no link").
    
    Raises:
        ValueError: No integer in the text
    """
    match = _INTEGER_PATTERN.search(text.strip())
    if match is None:
        raise ValueError(f"Model did not return int:\n{text}")
    return int(match.group(0))
