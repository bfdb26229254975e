"""
Text utilities for the LLM layer.
"""

import re
from functools import lru_cache

import tiktoken

_URL_PATTERN = re.compile(
    r"https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
    r"([-a-zA-Z0-9()@:%_+.~#?&/=]*)",
    re.IGNORECASE,
)


DEFAULT_ENCODING = "gpt2"


@lru_cache(maxsize=None)
def get_encoding(name: str = DEFAULT_ENCODING) -> tiktoken.Encoding:
    """Load a BPE encoding once per process (the first load may download it)."""
    return tiktoken.get_encoding(name)


def count_tokens(text: str) -> int:
    """
    Count prompt tokens with the gpt2 BPE.
    
    The prompt budget is calibrated against this encoding. Special-token
    text such as "<|endoftext|>" in a message is counted as ordinary text.
    """
    if not text:
        return 0
    return len(get_encoding().encode(text, disallowed_special=()))


def count_tokens_approximate(text: str) -> int:
    """
    Rough, deterministic approximation of token count for text.
    
    Uses a conservative heuristic of ~3 characters per token, which
    over-counts ordinary English. Pass it as a GenerationClient tokenizer
    where loading an encoding is not an option.
    
    Args:
        text: Text to estimate tokens for
        
    Returns:
        Approximate token count (0 for empty text)
    """
    if not text:
        return 0
    return max(1, len(text) // 3)


def build_generation_prompt(system_prompt: str, user_prompt: str) -> str:
    """Concatenate system and user prompt into a single generation prompt."""
    return f"{system_prompt}\n\n{user_prompt}\n\n"


def remove_links(text: str) -> str:
    """
    Strip http(s) URLs from text.
    
    Long tracking URLs burn tokens and tend to distract the model.
    """
    return _URL_PATTERN.sub("", text)
